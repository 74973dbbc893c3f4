import math

import pytest

from cement_tracker.services.geospatial import (
    EARTH_RADIUS_KM,
    DistanceEstimator,
    eta_minutes,
    format_distance,
    format_duration,
    haversine_km,
)

SAO_PAULO = (-23.5505, -46.6333)
RIO_DE_JANEIRO = (-22.9068, -43.1729)


@pytest.mark.parametrize(
    "lat, lng",
    [(0.0, 0.0), (-23.5505, -46.6333), (89.9, 179.9), (-45.0, -120.25)],
)
def test_haversine_is_zero_for_identical_points(lat, lng):
    assert haversine_km(lat, lng, lat, lng) == 0


def test_haversine_is_symmetric():
    forward = haversine_km(*SAO_PAULO, *RIO_DE_JANEIRO)
    backward = haversine_km(*RIO_DE_JANEIRO, *SAO_PAULO)

    assert forward == pytest.approx(backward)


def test_haversine_sao_paulo_to_rio():
    distance = haversine_km(*SAO_PAULO, *RIO_DE_JANEIRO)

    assert 357 <= distance <= 362


def test_haversine_uses_mean_earth_radius():
    one_degree_of_latitude = haversine_km(0.0, 0.0, 1.0, 0.0)

    assert one_degree_of_latitude == pytest.approx(EARTH_RADIUS_KM * math.pi / 180)


def test_eta_minutes_constant_speed():
    assert eta_minutes(50, 50) == 60
    assert eta_minutes(0, 50) == 0
    assert eta_minutes(25) == 30
    assert eta_minutes(10, 60) == 10


def test_eta_minutes_rejects_non_positive_speed():
    with pytest.raises(ValueError):
        eta_minutes(10, 0)


def test_distance_estimator_uses_configured_speed():
    estimator = DistanceEstimator(average_speed_kmh=100)

    assert estimator.eta_minutes(50) == 30
    assert estimator.distance_km(*SAO_PAULO, *SAO_PAULO) == 0


def test_distance_estimator_rejects_invalid_speed():
    with pytest.raises(ValueError):
        DistanceEstimator(average_speed_kmh=-5)


def test_format_helpers():
    assert format_distance(0.85) == "850 m"
    assert format_distance(12.34) == "12.3 km"
    assert format_duration(45) == "45 min"
    assert format_duration(65) == "1h 5min"
    assert format_duration(120) == "2h 0min"
