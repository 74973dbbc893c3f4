"""Operator delivery endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ...models.domain import DeliveryStatus
from ...schemas.deliveries import (
    DeliveryCreate,
    DeliveryDetailResponse,
    DeliveryModel,
    DeliveryStatsResponse,
    GeocodeRequest,
    GeocodeResponse,
    LocationReportRequest,
    LocationReportResponse,
    ProgressResponse,
    StatusCorrectionRequest,
    StatusUpdateRequest,
    TrackingUpdateModel,
)
from ...services.lifecycle import DeliveryLifecycle
from ...services.tracking_codes import tracking_link
from ..deps import get_lifecycle

router = APIRouter(tags=["deliveries"])


def _delivery_model(delivery) -> DeliveryModel:
    return DeliveryModel.from_domain(delivery, tracking_link(delivery.tracking_code))


@router.post("/deliveries", response_model=DeliveryModel, status_code=status.HTTP_201_CREATED)
def create_delivery(payload: DeliveryCreate, lifecycle: DeliveryLifecycle = Depends(get_lifecycle)) -> DeliveryModel:
    return _delivery_model(lifecycle.create_delivery(payload))


@router.get("/deliveries", response_model=List[DeliveryModel], status_code=status.HTTP_200_OK)
def list_deliveries(
    status_filter: Optional[DeliveryStatus] = Query(default=None, alias="status", description="Filter by status"),
    search: Optional[str] = Query(default=None, description="Search tracking code, customer name or destination"),
    lifecycle: DeliveryLifecycle = Depends(get_lifecycle),
) -> List[DeliveryModel]:
    return [_delivery_model(delivery) for delivery, _ in lifecycle.list_deliveries(status_filter, search)]


@router.get("/deliveries/stats", response_model=DeliveryStatsResponse, status_code=status.HTTP_200_OK)
def delivery_stats(lifecycle: DeliveryLifecycle = Depends(get_lifecycle)) -> DeliveryStatsResponse:
    return DeliveryStatsResponse(**lifecycle.delivery_stats())


@router.get("/deliveries/{delivery_id}", response_model=DeliveryDetailResponse, status_code=status.HTTP_200_OK)
def get_delivery(delivery_id: str, lifecycle: DeliveryLifecycle = Depends(get_lifecycle)) -> DeliveryDetailResponse:
    detail = lifecycle.get_delivery(delivery_id)
    return DeliveryDetailResponse.from_domain(detail, tracking_link(detail.delivery.tracking_code))


@router.post("/deliveries/{delivery_id}/status", response_model=DeliveryModel, status_code=status.HTTP_200_OK)
def update_status(
    delivery_id: str,
    payload: StatusUpdateRequest,
    lifecycle: DeliveryLifecycle = Depends(get_lifecycle),
) -> DeliveryModel:
    return _delivery_model(lifecycle.update_status(delivery_id, payload.status, payload.notes))


@router.post("/deliveries/{delivery_id}/corrections", response_model=DeliveryModel, status_code=status.HTTP_200_OK)
def correct_status(
    delivery_id: str,
    payload: StatusCorrectionRequest,
    lifecycle: DeliveryLifecycle = Depends(get_lifecycle),
) -> DeliveryModel:
    return _delivery_model(lifecycle.correct_status(delivery_id, payload.status, payload.reason))


@router.post(
    "/deliveries/{delivery_id}/locations",
    response_model=LocationReportResponse,
    status_code=status.HTTP_201_CREATED,
)
def report_location(
    delivery_id: str,
    payload: LocationReportRequest,
    lifecycle: DeliveryLifecycle = Depends(get_lifecycle),
) -> LocationReportResponse:
    report = lifecycle.report_location(delivery_id, payload.address, payload.notes)
    return LocationReportResponse(
        delivery=_delivery_model(report.delivery),
        tracking_update=TrackingUpdateModel.from_domain(report.update),
        resolved_address=report.resolved_address,
    )


@router.get("/deliveries/{delivery_id}/progress", response_model=ProgressResponse, status_code=status.HTTP_200_OK)
def delivery_progress(delivery_id: str, lifecycle: DeliveryLifecycle = Depends(get_lifecycle)) -> ProgressResponse:
    return ProgressResponse.from_estimate(lifecycle.estimate_progress(delivery_id))


@router.post("/geocode", response_model=GeocodeResponse, status_code=status.HTTP_200_OK)
def geocode_destination(payload: GeocodeRequest, lifecycle: DeliveryLifecycle = Depends(get_lifecycle)) -> GeocodeResponse:
    """Resolve a destination address before creating a delivery."""
    result = lifecycle.geocode_destination(payload.address)
    return GeocodeResponse(
        latitude=result.latitude,
        longitude=result.longitude,
        normalized_address=result.normalized_address,
    )
