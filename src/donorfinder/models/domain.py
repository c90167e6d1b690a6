"""Domain models for donor records and ranked search results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional


def _coerce_text(value: Any) -> Optional[str]:
    # bigint phone columns come back as ints
    if value is None:
        return None
    return str(value).strip()


def _coerce_float(value: Any) -> Optional[float]:
    if isinstance(value, str):
        value = value.replace(",", "").strip()
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude out of range: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Longitude out of range: {self.longitude}")


@dataclass(slots=True)
class DonorCandidate:
    """A donor row as stored in the donor dump."""

    name: str
    mobile_number: Optional[str]
    address: Optional[str]
    blood_group: str
    latitude: Optional[float]
    longitude: Optional[float]
    behavior_score: float

    @property
    def has_coordinates(self) -> bool:
        # zero counts as missing, the donor dump uses it as a placeholder
        if not self.latitude or not self.longitude:
            return False
        return -90.0 <= self.latitude <= 90.0 and -180.0 <= self.longitude <= 180.0

    @property
    def coordinate(self) -> Coordinate:
        if not self.has_coordinates:
            raise ValueError(f"Donor '{self.name}' has no coordinates.")
        return Coordinate(latitude=float(self.latitude), longitude=float(self.longitude))

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "DonorCandidate":
        score = _coerce_float(row.get("behavior_analysis"))
        return cls(
            name=str(row.get("name_of_the_donor") or "").strip(),
            mobile_number=_coerce_text(row.get("donor_mobile_number")),
            address=_coerce_text(row.get("address")),
            blood_group=str(row.get("donor_blood_group") or "").strip(),
            latitude=_coerce_float(row.get("latitude")),
            longitude=_coerce_float(row.get("longitude")),
            behavior_score=score if score is not None else 0.0,
        )


@dataclass(slots=True)
class RankedDonor:
    """A qualifying donor enriched with its distance to the requester."""

    name: str
    mobile_number: Optional[str]
    address: Optional[str]
    blood_group: str
    latitude: float
    longitude: float
    behavior_score: float
    distance_km: float

    @classmethod
    def from_candidate(cls, candidate: DonorCandidate, distance_km: float) -> "RankedDonor":
        return cls(
            name=candidate.name,
            mobile_number=candidate.mobile_number,
            address=candidate.address,
            blood_group=candidate.blood_group,
            latitude=float(candidate.latitude),
            longitude=float(candidate.longitude),
            behavior_score=candidate.behavior_score,
            distance_km=distance_km,
        )

    def to_row(self) -> dict[str, Any]:
        """Column mapping used by the result store and the HTTP response."""
        return {
            "name_of_the_donor": self.name,
            "donor_mobile_number": self.mobile_number,
            "address": self.address,
            "donor_blood_group": self.blood_group,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "behavior_analysis": self.behavior_score,
            "distance_km": self.distance_km,
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "RankedDonor":
        return cls(
            name=str(row["name_of_the_donor"]),
            mobile_number=_coerce_text(row.get("donor_mobile_number")),
            address=_coerce_text(row.get("address")),
            blood_group=str(row.get("donor_blood_group") or ""),
            latitude=float(row["latitude"]),
            longitude=float(row["longitude"]),
            behavior_score=float(row["behavior_analysis"]),
            distance_km=float(row["distance_km"]),
        )
