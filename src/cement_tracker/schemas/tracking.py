"""Public tracking schemas.

These models are the whole public contract: internal ids, customer
references and creator/updater attribution are not part of it.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from ..models.domain import DeliveryStatus


class PublicTrackingUpdateModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: DeliveryStatus
    status_label: str
    notes: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None
    location_label: Optional[str] = None
    created_at: datetime


class PublicProgressModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    distance_km: float
    eta_minutes: int
    eta_timestamp: datetime
    distance_label: str
    duration_label: str


class PublicTrackingResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    tracking_code: str
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
    estimated_arrival: Optional[datetime] = None
    actual_arrival: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    progress: Optional[PublicProgressModel] = None
    tracking_updates: List[PublicTrackingUpdateModel]
