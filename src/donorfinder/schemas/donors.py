"""Donor search request/response schemas."""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ..models.domain import RankedDonor


class FindDonorsRequest(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    # both fields are optional here so a missing value gets the 400 message, not a 422
    pincode: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("pincode", "postalCode", "postal_code"),
        description="Postal code of the requester.",
    )
    blood_group: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("bloodGroup", "blood_group"),
        description="Exact blood group label, e.g. 'O+'.",
    )


class RankedDonorModel(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    name_of_the_donor: str
    donor_mobile_number: Optional[str] = None
    address: Optional[str] = None
    donor_blood_group: str
    latitude: float
    longitude: float
    behavior_analysis: float
    distance_km: float = Field(..., ge=0)

    @classmethod
    def from_domain(cls, donor: RankedDonor) -> "RankedDonorModel":
        return cls(**donor.to_row())
