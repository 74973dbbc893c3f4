"""Distance/ETA from a delivery's latest located ledger entry."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..errors import MissingDestination
from ..models.domain import Delivery, ProgressEstimate
from .geospatial import DistanceEstimator
from .ledger import TrackingLedger


def compute_progress(
    ledger: TrackingLedger,
    estimator: DistanceEstimator,
    delivery: Delivery,
    now: datetime,
) -> Optional[ProgressEstimate]:
    """None when no entry carries a location; MissingDestination without destination coordinates."""
    latest = ledger.latest_located(delivery.id)
    if latest is None:
        return None
    destination = delivery.destination
    if destination is None:
        raise MissingDestination(f"Delivery '{delivery.tracking_code}' has no destination coordinates.")

    distance = estimator.distance_km(latest.latitude, latest.longitude, destination.latitude, destination.longitude)
    return ProgressEstimate(
        distance_km=distance,
        eta_minutes=estimator.eta_minutes(distance),
        eta_timestamp=estimator.eta_timestamp(distance, now),
        origin=latest.coordinate,
        measured_at=latest.created_at,
    )
