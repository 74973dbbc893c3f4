"""Public, unauthenticated tracking endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, status

from ...schemas.tracking import PublicTrackingResponse
from ...services.public_view import PublicTrackingView
from ..deps import get_public_view

router = APIRouter(prefix="/track", tags=["tracking"])


@router.get("/{tracking_code}", response_model=PublicTrackingResponse, status_code=status.HTTP_200_OK)
def track_delivery(
    tracking_code: str = Path(..., min_length=1, max_length=64, description="Public tracking code (case-insensitive)"),
    view: PublicTrackingView = Depends(get_public_view),
) -> PublicTrackingResponse:
    return view.lookup(tracking_code)
