"""Delivery status state machine and location-tracking orchestration.

Each operation is a short unit of work against the record store. No lock is
held across the geocoding call; concurrent status writers on the same
delivery resolve last-write-wins on ``status``/``updated_at`` while the
ledger still receives one entry per successful call.
"""

from __future__ import annotations

import logging
import uuid
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Optional

from ..config import settings
from ..db.auth import IdentityProvider, StaticIdentity
from ..errors import (
    DeliveryNotFound,
    DuplicateRecord,
    InvalidTransition,
    ProviderError,
    Unauthenticated,
    ValidationError,
)
from ..models.domain import (
    ALLOWED_TRANSITIONS,
    Customer,
    Delivery,
    DeliveryDetail,
    DeliveryStatus,
    GeocodeResult,
    ProgressEstimate,
    TrackingUpdate,
    format_timestamp,
)
from ..persistence.store import DELIVERIES, RecordStore
from ..schemas.deliveries import DeliveryCreate
from .customers import CustomerDirectory
from .geocoding.mapbox_client import GeoResolver
from .geospatial import DistanceEstimator
from .ledger import Clock, TrackingLedger, utc_now
from .progress import compute_progress
from .tracking_codes import generate_tracking_code

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("customer_id", "cement_type", "quantity", "destination_address")


@dataclass(slots=True)
class LocationReport:
    delivery: Delivery
    update: TrackingUpdate
    resolved_address: str


def _blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


class DeliveryLifecycle:
    def __init__(
        self,
        store: RecordStore,
        geocoder: GeoResolver | None = None,
        identity: IdentityProvider | None = None,
        estimator: DistanceEstimator | None = None,
        clock: Clock = utc_now,
        code_generator: Callable[[int], str] = generate_tracking_code,
        code_length: int | None = None,
        max_code_attempts: int | None = None,
    ) -> None:
        self.store = store
        self.geocoder = geocoder
        self.identity = identity or StaticIdentity()
        self.estimator = estimator or DistanceEstimator()
        self.clock = clock
        self.code_generator = code_generator
        self.code_length = code_length or settings.tracking_code_length
        self.max_code_attempts = max_code_attempts or settings.tracking_code_max_attempts
        self.ledger = TrackingLedger(store, clock)
        self.customers = CustomerDirectory(store, clock)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def load(self, delivery_id: str) -> Delivery:
        record = self.store.get(DELIVERIES, delivery_id)
        if record is None:
            raise DeliveryNotFound(delivery_id)
        return Delivery.from_record(record)

    def get_delivery(self, delivery_id: str) -> DeliveryDetail:
        delivery = self.load(delivery_id)
        updates = self.ledger.list_for(delivery.id)
        current = next((update for update in updates if update.has_location), None)
        return DeliveryDetail(
            delivery=delivery,
            customer=self.customers.find_customer(delivery.customer_id),
            updates=updates,
            current_location=current,
        )

    def list_deliveries(
        self,
        status: DeliveryStatus | None = None,
        search: str | None = None,
    ) -> list[tuple[Delivery, Optional[Customer]]]:
        """Deliveries newest first, optionally filtered by status and a free-text search."""
        filters = {"status": DeliveryStatus(status).value} if status else None
        rows = self.store.query(DELIVERIES, filters, order_by="created_at", descending=True)
        customers = {customer.id: customer for customer in self.customers.list_customers()}

        term = (search or "").strip().lower()
        results: list[tuple[Delivery, Optional[Customer]]] = []
        for row in rows:
            delivery = Delivery.from_record(row)
            customer = customers.get(delivery.customer_id)
            if term:
                haystack = (
                    delivery.tracking_code,
                    customer.name if customer else "",
                    delivery.destination_address,
                )
                if not any(term in (value or "").lower() for value in haystack):
                    continue
            results.append((delivery, customer))
        return results

    def delivery_stats(self) -> dict[str, int]:
        counts = Counter(row.get("status") for row in self.store.query(DELIVERIES))
        stats = {"total": sum(counts.values())}
        for status in DeliveryStatus:
            stats[status.value] = counts.get(status.value, 0)
        return stats

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def _validate_new_delivery(self, payload: DeliveryCreate) -> None:
        errors = {name: "required" for name in REQUIRED_FIELDS if _blank(getattr(payload, name))}
        if payload.quantity is not None and payload.quantity <= 0:
            errors["quantity"] = "must be positive"
        if (payload.destination_lat is None) != (payload.destination_lng is None):
            errors["destination_lat"] = errors["destination_lng"] = "must be set together"
        if errors:
            raise ValidationError("Delivery is missing or has malformed required fields.", errors)

    def create_delivery(self, payload: DeliveryCreate) -> Delivery:
        self._validate_new_delivery(payload)
        user_id = self.identity.current_user_id()
        if not user_id:
            raise Unauthenticated("An authenticated user is required to create deliveries.")
        customer = self.customers.get_customer(payload.customer_id.strip())

        now = self.clock()
        attempt = 0
        while True:
            attempt += 1
            delivery = Delivery(
                id=str(uuid.uuid4()),
                tracking_code=self.code_generator(self.code_length).upper(),
                customer_id=customer.id,
                cement_type=payload.cement_type.strip(),
                quantity=payload.quantity,
                destination_address=payload.destination_address.strip(),
                status=DeliveryStatus.PENDING,
                created_at=now,
                updated_at=now,
                origin_address=_clean(payload.origin_address),
                destination_lat=payload.destination_lat,
                destination_lng=payload.destination_lng,
                driver_name=_clean(payload.driver_name),
                driver_phone=_clean(payload.driver_phone),
                vehicle_plate=_clean(payload.vehicle_plate),
                notes=_clean(payload.notes),
                estimated_arrival=payload.estimated_arrival,
                created_by=user_id,
                updated_by=user_id,
            )
            try:
                stored = self.store.insert(DELIVERIES, delivery.to_record())
            except DuplicateRecord:
                if attempt >= self.max_code_attempts:
                    raise
                logger.warning(f"Tracking code collision on attempt {attempt}, regenerating")
                continue
            logger.info(f"Created delivery {delivery.id} with tracking code {delivery.tracking_code}")
            return Delivery.from_record(stored)

    def geocode_destination(self, address: str) -> GeocodeResult:
        if _blank(address):
            raise ValidationError("Destination address is required.", {"address": "required"})
        return self._require_geocoder().forward(address)

    # ------------------------------------------------------------------
    # Status changes
    # ------------------------------------------------------------------

    def _apply_status(
        self,
        delivery: Delivery,
        new_status: DeliveryStatus,
        notes: Optional[str],
    ) -> Delivery:
        now = self.clock()
        user_id = self.identity.current_user_id()
        patch = {
            "status": new_status.value,
            "updated_at": format_timestamp(now),
            "updated_by": user_id,
        }
        if new_status is DeliveryStatus.DELIVERED and delivery.actual_arrival is None:
            patch["actual_arrival"] = format_timestamp(now)

        updated = self.store.update(DELIVERIES, delivery.id, patch)
        if updated is None:
            raise DeliveryNotFound(delivery.id)
        try:
            self.ledger.append(delivery.id, new_status, notes=_clean(notes), created_by=user_id)
        except Exception:
            # Restore the previous snapshot so the record and ledger stay consistent.
            self.store.update(
                DELIVERIES,
                delivery.id,
                {
                    "status": delivery.status.value,
                    "updated_at": format_timestamp(delivery.updated_at),
                    "updated_by": delivery.updated_by,
                    "actual_arrival": format_timestamp(delivery.actual_arrival),
                },
            )
            raise
        return Delivery.from_record(updated)

    def update_status(
        self,
        delivery_id: str,
        new_status: DeliveryStatus | str,
        notes: Optional[str] = None,
    ) -> Delivery:
        try:
            target = DeliveryStatus(new_status)
        except ValueError as exc:
            raise ValidationError(f"Unknown delivery status '{new_status}'.", {"status": "invalid"}) from exc

        delivery = self.load(delivery_id)
        if target not in ALLOWED_TRANSITIONS[delivery.status]:
            raise InvalidTransition(delivery.status.value, target.value)

        updated = self._apply_status(delivery, target, notes)
        logger.info(f"Delivery {delivery.id} status {delivery.status.value} -> {target.value}")
        return updated

    def correct_status(self, delivery_id: str, new_status: DeliveryStatus | str, reason: str) -> Delivery:
        """Set any status outside the transition table, recording the reason in the ledger."""
        if _blank(reason):
            raise ValidationError("A reason is required to correct a delivery status.", {"reason": "required"})
        try:
            target = DeliveryStatus(new_status)
        except ValueError as exc:
            raise ValidationError(f"Unknown delivery status '{new_status}'.", {"status": "invalid"}) from exc

        delivery = self.load(delivery_id)
        updated = self._apply_status(delivery, target, f"Correção de status: {reason.strip()}")
        logger.warning(
            f"Delivery {delivery.id} status corrected {delivery.status.value} -> {target.value}: {reason.strip()}"
        )
        return updated

    # ------------------------------------------------------------------
    # Location tracking
    # ------------------------------------------------------------------

    def _require_geocoder(self) -> GeoResolver:
        if self.geocoder is None:
            raise ProviderError("Geocoding provider is not configured.")
        return self.geocoder

    def report_location(self, delivery_id: str, raw_address: str, notes: Optional[str] = None) -> LocationReport:
        """Geocode ``raw_address`` and append it to the ledger without changing status.

        Nothing is written unless the resolution succeeds.
        """
        if _blank(raw_address):
            raise ValidationError("Location address is required.", {"address": "required"})
        self.load(delivery_id)

        resolved = self._require_geocoder().forward(raw_address)

        # Snapshot the status current at append time, not at request time.
        delivery = self.load(delivery_id)
        user_id = self.identity.current_user_id()
        touched = self.store.update(DELIVERIES, delivery.id, {"updated_at": format_timestamp(self.clock())})
        if touched is None:
            raise DeliveryNotFound(delivery.id)
        try:
            update = self.ledger.append(
                delivery.id,
                delivery.status,
                latitude=resolved.latitude,
                longitude=resolved.longitude,
                notes=_clean(notes),
                created_by=user_id,
            )
        except Exception:
            self.store.update(DELIVERIES, delivery.id, {"updated_at": format_timestamp(delivery.updated_at)})
            raise
        logger.info(
            f"Delivery {delivery.id} located at ({resolved.latitude:.6f}, {resolved.longitude:.6f})"
        )
        return LocationReport(
            delivery=Delivery.from_record(touched),
            update=update,
            resolved_address=resolved.normalized_address,
        )

    def estimate_progress(self, delivery_id: str) -> Optional[ProgressEstimate]:
        """Distance/ETA from the latest located update; None when no location is known."""
        delivery = self.load(delivery_id)
        return self.progress_for(delivery)

    def progress_for(self, delivery: Delivery) -> Optional[ProgressEstimate]:
        return compute_progress(self.ledger, self.estimator, delivery, self.clock())
