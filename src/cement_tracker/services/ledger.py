"""Append-only ledger of tracking updates for a delivery."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

from ..models.domain import DeliveryStatus, TrackingUpdate
from ..persistence.store import TRACKING_UPDATES, RecordStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TrackingLedger:
    """Bookkeeping over the persisted ``tracking_updates`` collection.

    Entries are assigned an id and timestamp on append and are never edited
    or deleted afterwards.
    """

    def __init__(self, store: RecordStore, clock: Clock = utc_now) -> None:
        self.store = store
        self.clock = clock

    def append(
        self,
        delivery_id: str,
        status: DeliveryStatus,
        *,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        notes: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> TrackingUpdate:
        if (latitude is None) != (longitude is None):
            raise ValueError("Tracking update coordinates must be given as a pair.")

        update = TrackingUpdate(
            id=str(uuid.uuid4()),
            delivery_id=delivery_id,
            status=DeliveryStatus(status),
            created_at=self.clock(),
            latitude=latitude,
            longitude=longitude,
            notes=notes or None,
            created_by=created_by,
        )
        stored = self.store.insert(TRACKING_UPDATES, update.to_record())
        logger.debug(f"Appended tracking update {update.id} to delivery {delivery_id}")
        return TrackingUpdate.from_record(stored)

    def list_for(self, delivery_id: str) -> list[TrackingUpdate]:
        """Ledger entries newest first."""
        rows = self.store.query(TRACKING_UPDATES, {"delivery_id": delivery_id}, order_by="created_at")
        return [TrackingUpdate.from_record(row) for row in reversed(rows)]

    def latest_located(self, delivery_id: str) -> Optional[TrackingUpdate]:
        """Most recent entry carrying a coordinate pair, if any."""
        for update in self.list_for(delivery_id):
            if update.has_location:
                return update
        return None
