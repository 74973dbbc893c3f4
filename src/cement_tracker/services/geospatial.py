"""Geospatial helper functions."""

from __future__ import annotations

import math
from datetime import datetime, timedelta

from ..config import settings

EARTH_RADIUS_KM = 6371.0
DEFAULT_AVERAGE_SPEED_KMH = 50.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def eta_minutes(distance_km: float, average_speed_kmh: float = DEFAULT_AVERAGE_SPEED_KMH) -> int:
    """Whole minutes needed to cover ``distance_km`` at a constant average speed."""

    if average_speed_kmh <= 0:
        raise ValueError("Average speed must be positive.")
    # Half-up rounding; built-in round() would send 0.5 minutes to 0.
    return math.floor(distance_km / average_speed_kmh * 60 + 0.5)


def format_distance(distance_km: float) -> str:
    if distance_km < 1:
        return f"{round(distance_km * 1000)} m"
    return f"{distance_km:.1f} km"


def format_duration(minutes: int) -> str:
    if minutes < 60:
        return f"{minutes} min"
    hours, mins = divmod(minutes, 60)
    return f"{hours}h {mins}min"


class DistanceEstimator:
    """Great-circle distance and constant-speed ETA heuristic."""

    def __init__(self, average_speed_kmh: float | None = None) -> None:
        speed = average_speed_kmh if average_speed_kmh is not None else settings.average_speed_kmh
        if speed <= 0:
            raise ValueError("Average speed must be positive.")
        self.average_speed_kmh = speed

    def distance_km(self, lat1: float, lng1: float, lat2: float, lng2: float) -> float:
        return haversine_km(lat1, lng1, lat2, lng2)

    def eta_minutes(self, distance_km: float) -> int:
        return eta_minutes(distance_km, self.average_speed_kmh)

    def eta_timestamp(self, distance_km: float, now: datetime) -> datetime:
        return now + timedelta(minutes=self.eta_minutes(distance_km))
