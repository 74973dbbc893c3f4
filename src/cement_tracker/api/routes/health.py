"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...persistence.store import DELIVERIES

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_geocoding_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.geocoding import check_health as geocoding_health_check
    return geocoding_health_check


@router.get("/health/geocoding", status_code=status.HTTP_200_OK)
def health_geocoding() -> dict:
    """Check geocoding provider health."""
    from ..deps import get_geocoder

    geocoder = get_geocoder()
    if geocoder is None:
        return {"service": "geocoding", "configured": False, "healthy": False}
    return {"service": "geocoding", "configured": True, "healthy": _get_geocoding_health_check()(geocoder)}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database() -> dict:
    """Check database connection and deliveries table status."""
    from ...db.supabase import get_supabase_client

    supabase = get_supabase_client()
    if not supabase:
        return {
            "configured": False,
            "message": "Supabase not configured. Set CT_SUPABASE_URL and CT_SUPABASE_KEY environment variables.",
        }

    try:
        response = supabase.table(DELIVERIES).select("id", count="exact").limit(1).execute()
        return {
            "configured": True,
            "connected": True,
            "deliveries_count": response.count or 0,
            "message": f"Database connected. Found {response.count or 0} deliveries.",
        }
    except Exception as exc:
        return {
            "configured": True,
            "connected": False,
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }
