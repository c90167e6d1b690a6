"""Donor search endpoints."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, status

from ...errors import DonorSearchError, ValidationError
from ...schemas.donors import FindDonorsRequest, RankedDonorModel
from ...services.ranking import build_pipeline

logger = logging.getLogger(__name__)

router = APIRouter(tags=["donors"])


def _validate(payload: FindDonorsRequest) -> tuple[str, str]:
    pincode = (payload.pincode or "").strip()
    blood_group = (payload.blood_group or "").strip()
    if not pincode or not blood_group:
        raise ValidationError("Pincode and blood group are required.")
    return pincode, blood_group


@router.post("/find-donors", response_model=List[RankedDonorModel], status_code=status.HTTP_200_OK)
def find_donors(payload: Optional[FindDonorsRequest] = None) -> List[RankedDonorModel]:
    try:
        pincode, blood_group = _validate(payload or FindDonorsRequest())
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    logger.info(f"Request received with pincode: {pincode}, bloodGroup: {blood_group}")
    try:
        donors = build_pipeline().run(pincode, blood_group)
        response = [RankedDonorModel.from_domain(donor) for donor in donors]
    except DonorSearchError as exc:
        logger.exception(
            f"Error during processing request (pincode={pincode}, bloodGroup={blood_group}, "
            f"stage={exc.stage or 'unknown'}): {exc}"
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while processing the request.",
        ) from exc
    except Exception as exc:
        logger.exception(f"Unexpected error (pincode={pincode}, bloodGroup={blood_group}): {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while processing the request.",
        ) from exc

    logger.info("Sending sorted donors as response")
    return response
