"""Operator-facing delivery request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.domain import Customer, Delivery, DeliveryDetail, DeliveryStatus, ProgressEstimate, TrackingUpdate
from ..services.geospatial import format_distance, format_duration


class CustomerCreate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None


class CustomerModel(BaseModel):
    id: str
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, customer: Customer) -> "CustomerModel":
        return cls(**customer.to_record())


class DeliveryCreate(BaseModel):
    """New delivery input; required fields are checked by the lifecycle service."""

    customer_id: Optional[str] = None
    cement_type: Optional[str] = None
    quantity: Optional[float] = None
    destination_address: Optional[str] = None
    origin_address: Optional[str] = None
    destination_lat: Optional[float] = Field(None, ge=-90, le=90)
    destination_lng: Optional[float] = Field(None, ge=-180, le=180)
    driver_name: Optional[str] = None
    driver_phone: Optional[str] = None
    vehicle_plate: Optional[str] = None
    notes: Optional[str] = None
    estimated_arrival: Optional[datetime] = None


class StatusUpdateRequest(BaseModel):
    status: DeliveryStatus
    notes: Optional[str] = None


class StatusCorrectionRequest(BaseModel):
    status: DeliveryStatus
    reason: str = Field(..., description="Why the status is being corrected outside the normal flow.")


class LocationReportRequest(BaseModel):
    address: str = Field(..., description="Free-text address of the vehicle's current position.")
    notes: Optional[str] = None


class GeocodeRequest(BaseModel):
    address: str


class GeocodeResponse(BaseModel):
    latitude: float
    longitude: float
    normalized_address: str


class TrackingUpdateModel(BaseModel):
    id: str
    delivery_id: str
    status: DeliveryStatus
    status_label: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_domain(cls, update: TrackingUpdate) -> "TrackingUpdateModel":
        return cls(
            id=update.id,
            delivery_id=update.delivery_id,
            status=update.status,
            status_label=update.status.label,
            latitude=update.latitude,
            longitude=update.longitude,
            notes=update.notes,
            created_by=update.created_by,
            created_at=update.created_at,
        )


class DeliveryModel(BaseModel):
    id: str
    tracking_code: str
    tracking_link: str
    customer_id: str
    status: DeliveryStatus
    status_label: str
    cement_type: str
    quantity: float
    origin_address: Optional[str] = None
    destination_address: str
    destination_lat: Optional[float] = None
    destination_lng: Optional[float] = None
    driver_name: Optional[str] = None
    driver_phone: Optional[str] = None
    vehicle_plate: Optional[str] = None
    notes: Optional[str] = None
    estimated_arrival: Optional[datetime] = None
    actual_arrival: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, delivery: Delivery, tracking_link: str) -> "DeliveryModel":
        record = delivery.to_record()
        record["status_label"] = delivery.status.label
        record["tracking_link"] = tracking_link
        return cls(**record)


class ProgressResponse(BaseModel):
    known: bool
    distance_km: Optional[float] = None
    eta_minutes: Optional[int] = None
    eta_timestamp: Optional[datetime] = None
    distance_label: Optional[str] = None
    duration_label: Optional[str] = None
    measured_at: Optional[datetime] = None

    @classmethod
    def from_estimate(cls, estimate: ProgressEstimate | None) -> "ProgressResponse":
        if estimate is None:
            return cls(known=False)
        return cls(
            known=True,
            distance_km=round(estimate.distance_km, 3),
            eta_minutes=estimate.eta_minutes,
            eta_timestamp=estimate.eta_timestamp,
            distance_label=format_distance(estimate.distance_km),
            duration_label=format_duration(estimate.eta_minutes),
            measured_at=estimate.measured_at,
        )


class DeliveryDetailResponse(BaseModel):
    delivery: DeliveryModel
    customer: Optional[CustomerModel] = None
    tracking_updates: List[TrackingUpdateModel]
    current_location: Optional[TrackingUpdateModel] = None

    @classmethod
    def from_domain(cls, detail: DeliveryDetail, tracking_link: str) -> "DeliveryDetailResponse":
        return cls(
            delivery=DeliveryModel.from_domain(detail.delivery, tracking_link),
            customer=CustomerModel.from_domain(detail.customer) if detail.customer else None,
            tracking_updates=[TrackingUpdateModel.from_domain(update) for update in detail.updates],
            current_location=(
                TrackingUpdateModel.from_domain(detail.current_location) if detail.current_location else None
            ),
        )


class LocationReportResponse(BaseModel):
    delivery: DeliveryModel
    tracking_update: TrackingUpdateModel
    resolved_address: str


class DeliveryStatsResponse(BaseModel):
    total: int
    pending: int
    in_transit: int
    delivered: int
    cancelled: int
