"""Domain models for deliveries, tracking updates and customers."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class DeliveryStatus(str, Enum):
    PENDING = "pending"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self]


STATUS_LABELS: dict[DeliveryStatus, str] = {
    DeliveryStatus.PENDING: "Pendente",
    DeliveryStatus.IN_TRANSIT: "Em Trânsito",
    DeliveryStatus.DELIVERED: "Entregue",
    DeliveryStatus.CANCELLED: "Cancelado",
}

ALLOWED_TRANSITIONS: dict[DeliveryStatus, frozenset[DeliveryStatus]] = {
    DeliveryStatus.PENDING: frozenset({DeliveryStatus.IN_TRANSIT, DeliveryStatus.CANCELLED}),
    DeliveryStatus.IN_TRANSIT: frozenset({DeliveryStatus.DELIVERED, DeliveryStatus.CANCELLED}),
    DeliveryStatus.DELIVERED: frozenset(),  # Terminal state
    DeliveryStatus.CANCELLED: frozenset(),  # Terminal state
}


def parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _coerce_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


@dataclass(slots=True, frozen=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass(slots=True, frozen=True)
class GeocodeResult:
    """A resolved address: coordinates plus the provider's normalized address text."""

    latitude: float
    longitude: float
    normalized_address: str


@dataclass(slots=True)
class Customer:
    """A customer referenced (not owned) by deliveries."""

    id: str
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: dict) -> "Customer":
        return cls(
            id=str(record["id"]),
            name=record["name"],
            phone=record.get("phone"),
            email=record.get("email"),
            address=record.get("address"),
            created_at=parse_timestamp(record.get("created_at")),
        )

    def to_record(self) -> dict:
        record = asdict(self)
        record["created_at"] = format_timestamp(self.created_at)
        return record


@dataclass(slots=True)
class TrackingUpdate:
    """One immutable ledger entry: a status snapshot and optionally a coordinate pair."""

    id: str
    delivery_id: str
    status: DeliveryStatus
    created_at: datetime
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None

    @property
    def coordinate(self) -> Optional[Coordinate]:
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinate(self.latitude, self.longitude)

    @property
    def has_location(self) -> bool:
        return self.coordinate is not None

    @classmethod
    def from_record(cls, record: dict) -> "TrackingUpdate":
        return cls(
            id=str(record["id"]),
            delivery_id=str(record["delivery_id"]),
            status=DeliveryStatus(record["status"]),
            created_at=parse_timestamp(record["created_at"]),
            latitude=_coerce_float(record.get("latitude")),
            longitude=_coerce_float(record.get("longitude")),
            notes=record.get("notes"),
            created_by=record.get("created_by"),
        )

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "delivery_id": self.delivery_id,
            "status": self.status.value,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "notes": self.notes,
            "created_by": self.created_by,
            "created_at": format_timestamp(self.created_at),
        }


@dataclass(slots=True)
class Delivery:
    """Aggregate root for one cement shipment."""

    id: str
    tracking_code: str
    customer_id: str
    cement_type: str
    quantity: Any
    destination_address: str
    status: DeliveryStatus
    created_at: datetime
    updated_at: datetime
    origin_address: Optional[str] = None
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

    @property
    def destination(self) -> Optional[Coordinate]:
        if self.destination_lat is None or self.destination_lng is None:
            return None
        return Coordinate(self.destination_lat, self.destination_lng)

    @classmethod
    def from_record(cls, record: dict) -> "Delivery":
        return cls(
            id=str(record["id"]),
            tracking_code=record["tracking_code"],
            customer_id=str(record["customer_id"]),
            cement_type=record["cement_type"],
            quantity=record["quantity"],
            destination_address=record["destination_address"],
            status=DeliveryStatus(record["status"]),
            created_at=parse_timestamp(record["created_at"]),
            updated_at=parse_timestamp(record["updated_at"]),
            origin_address=record.get("origin_address"),
            destination_lat=_coerce_float(record.get("destination_lat")),
            destination_lng=_coerce_float(record.get("destination_lng")),
            driver_name=record.get("driver_name"),
            driver_phone=record.get("driver_phone"),
            vehicle_plate=record.get("vehicle_plate"),
            notes=record.get("notes"),
            estimated_arrival=parse_timestamp(record.get("estimated_arrival")),
            actual_arrival=parse_timestamp(record.get("actual_arrival")),
            created_by=record.get("created_by"),
            updated_by=record.get("updated_by"),
        )

    def to_record(self) -> dict:
        record = asdict(self)
        record["status"] = self.status.value
        for key in ("created_at", "updated_at", "estimated_arrival", "actual_arrival"):
            record[key] = format_timestamp(record[key])
        return record


@dataclass(slots=True)
class ProgressEstimate:
    """Distance and constant-speed ETA from the latest known location to the destination."""

    distance_km: float
    eta_minutes: int
    eta_timestamp: datetime
    origin: Coordinate
    measured_at: datetime


@dataclass(slots=True)
class DeliveryDetail:
    """Operator view of a delivery: record, customer, ledger (newest first) and location."""

    delivery: Delivery
    customer: Optional[Customer]
    updates: list[TrackingUpdate] = field(default_factory=list)
    current_location: Optional[TrackingUpdate] = None
