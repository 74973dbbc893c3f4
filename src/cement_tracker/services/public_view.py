"""Read-only public projection of a delivery, addressed by tracking code."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from ..config import settings
from ..errors import DeliveryNotFound, MissingDestination
from ..models.domain import Coordinate, Delivery, TrackingUpdate
from ..persistence.store import DELIVERIES, RecordStore
from ..schemas.tracking import PublicProgressModel, PublicTrackingResponse, PublicTrackingUpdateModel
from .geocoding.mapbox_client import GeoResolver
from .geospatial import DistanceEstimator, format_distance, format_duration
from .ledger import Clock, TrackingLedger, utc_now
from .progress import compute_progress
from .tracking_codes import normalize_tracking_code

logger = logging.getLogger(__name__)


def coordinate_label(latitude: float, longitude: float) -> str:
    return f"{latitude:.6f}, {longitude:.6f}"


class PublicTrackingView:
    def __init__(
        self,
        store: RecordStore,
        geocoder: GeoResolver | None = None,
        estimator: DistanceEstimator | None = None,
        clock: Clock = utc_now,
        max_parallel_lookups: int | None = None,
    ) -> None:
        self.store = store
        self.geocoder = geocoder
        self.ledger = TrackingLedger(store, clock)
        self.max_parallel_lookups = max_parallel_lookups or settings.reverse_geocode_max_parallel
        self.estimator = estimator or DistanceEstimator()
        self.clock = clock

    def lookup(self, tracking_code: str) -> PublicTrackingResponse:
        code = normalize_tracking_code(tracking_code)
        rows = self.store.query(DELIVERIES, {"tracking_code": code}, limit=1) if code else []
        if not rows:
            raise DeliveryNotFound(tracking_code)

        delivery = Delivery.from_record(rows[0])
        updates = self.ledger.list_for(delivery.id)
        addresses = self._resolve_addresses(updates)

        return PublicTrackingResponse(
            tracking_code=delivery.tracking_code,
            status=delivery.status,
            status_label=delivery.status.label,
            cement_type=delivery.cement_type,
            quantity=delivery.quantity,
            origin_address=delivery.origin_address,
            destination_address=delivery.destination_address,
            destination_lat=delivery.destination_lat,
            destination_lng=delivery.destination_lng,
            driver_name=delivery.driver_name,
            driver_phone=delivery.driver_phone if delivery.driver_name else None,
            vehicle_plate=delivery.vehicle_plate if delivery.driver_name else None,
            estimated_arrival=delivery.estimated_arrival,
            actual_arrival=delivery.actual_arrival,
            created_at=delivery.created_at,
            updated_at=delivery.updated_at,
            progress=self._public_progress(delivery),
            tracking_updates=[self._public_update(update, addresses) for update in updates],
        )

    def _public_progress(self, delivery: Delivery) -> Optional[PublicProgressModel]:
        try:
            estimate = compute_progress(self.ledger, self.estimator, delivery, self.clock())
        except MissingDestination:
            return None
        if estimate is None:
            return None
        return PublicProgressModel(
            distance_km=round(estimate.distance_km, 3),
            eta_minutes=estimate.eta_minutes,
            eta_timestamp=estimate.eta_timestamp,
            distance_label=format_distance(estimate.distance_km),
            duration_label=format_duration(estimate.eta_minutes),
        )

    @staticmethod
    def _public_update(update: TrackingUpdate, addresses: dict[Coordinate, str]) -> PublicTrackingUpdateModel:
        coordinate = update.coordinate
        address = addresses.get(coordinate) if coordinate else None
        label = None
        if coordinate:
            label = address or coordinate_label(coordinate.latitude, coordinate.longitude)
        return PublicTrackingUpdateModel(
            status=update.status,
            status_label=update.status.label,
            notes=update.notes,
            latitude=update.latitude,
            longitude=update.longitude,
            address=address,
            location_label=label,
            created_at=update.created_at,
        )

    def _resolve_addresses(self, updates: list[TrackingUpdate]) -> dict[Coordinate, str]:
        """Best-effort reverse geocoding, one isolated lookup per distinct coordinate."""
        if self.geocoder is None:
            return {}
        coordinates = list(dict.fromkeys(update.coordinate for update in updates if update.coordinate))
        if not coordinates:
            return {}

        addresses: dict[Coordinate, str] = {}
        workers = min(self.max_parallel_lookups, len(coordinates))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {coordinate: executor.submit(self._reverse_or_none, coordinate) for coordinate in coordinates}
            for coordinate, future in futures.items():
                address = future.result()
                if address:
                    addresses[coordinate] = address
        return addresses

    def _reverse_or_none(self, coordinate: Coordinate) -> Optional[str]:
        try:
            return self.geocoder.reverse(coordinate.latitude, coordinate.longitude)
        except Exception as exc:
            # Enrichment only: a failed lookup falls back to raw coordinates.
            logger.warning(
                f"Reverse geocoding failed for ({coordinate.latitude:.6f}, {coordinate.longitude:.6f}): {exc}"
            )
            return None
