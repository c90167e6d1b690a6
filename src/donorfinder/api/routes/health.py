"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings
from ...errors import DonorSearchError

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/geocoder", status_code=status.HTTP_200_OK)
def health_geocoder() -> dict:
    """Check geocoding service health."""
    from ...services.geocoding import check_health

    return {"service": "geocoder", "url": settings.geocoding_base_url, "healthy": check_health()}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database() -> dict:
    """Check database connection and output table status."""
    from ...db.supabase import get_supabase_client
    from ...persistence.results import SupabaseResultStore

    supabase = get_supabase_client()
    if not supabase:
        return {
            "configured": False,
            "message": "Supabase not configured. Set DONOR_SUPABASE_URL and DONOR_SUPABASE_KEY environment variables.",
        }

    try:
        SupabaseResultStore(supabase).ensure()
    except DonorSearchError as exc:
        return {
            "configured": True,
            "connected": False,
            "error": str(exc),
            "message": f"Output table '{settings.output_table}' is not reachable.",
        }
    return {
        "configured": True,
        "connected": True,
        "message": f"Database connected. Output table '{settings.output_table}' is reachable.",
    }
