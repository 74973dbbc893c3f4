import httpx
import pytest

from cement_tracker.errors import AddressNotFound, NotFound, ProviderError
from cement_tracker.services.geocoding import mapbox_client
from cement_tracker.services.geocoding.mapbox_client import MapboxGeocoder, check_health

PAULISTA_FEATURE = {
    "center": [-46.6527, -23.5646],
    "place_name": "Avenida Paulista 1000, São Paulo - SP, Brasil",
}


def _geocoder(handler) -> MapboxGeocoder:
    return MapboxGeocoder(
        token="test-token",
        base_url="https://geocoding.test",
        country="BR",
        language="pt",
        timeout=2.0,
        transport=httpx.MockTransport(handler),
    )


def test_forward_returns_first_feature():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"features": [PAULISTA_FEATURE]})

    result = _geocoder(handler).forward("Av. Paulista, 1000, São Paulo")

    assert result.latitude == pytest.approx(-23.5646)
    assert result.longitude == pytest.approx(-46.6527)
    assert result.normalized_address == PAULISTA_FEATURE["place_name"]
    assert seen["path"].startswith("/geocoding/v5/mapbox.places/")
    assert seen["path"].endswith(".json")
    assert seen["params"]["access_token"] == "test-token"
    assert seen["params"]["country"] == "BR"
    assert seen["params"]["language"] == "pt"


def test_forward_without_candidates_raises_address_not_found():
    geocoder = _geocoder(lambda request: httpx.Response(200, json={"features": []}))

    with pytest.raises(AddressNotFound) as excinfo:
        geocoder.forward("Rua que não existe, 999")

    assert isinstance(excinfo.value, NotFound)


def test_forward_rejected_token_raises_provider_error():
    geocoder = _geocoder(lambda request: httpx.Response(401, json={"message": "Not Authorized"}))

    with pytest.raises(ProviderError):
        geocoder.forward("Av. Paulista, 1000")


def test_timeout_is_treated_as_provider_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(ProviderError):
        _geocoder(handler).forward("Av. Paulista, 1000")


def test_malformed_response_raises_provider_error():
    geocoder = _geocoder(lambda request: httpx.Response(200, content=b"<html>gateway</html>"))

    with pytest.raises(ProviderError):
        geocoder.forward("Av. Paulista, 1000")


def test_reverse_queries_longitude_first():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"features": [PAULISTA_FEATURE]})

    address = _geocoder(handler).reverse(-23.5646, -46.6527)

    assert address == PAULISTA_FEATURE["place_name"]
    assert seen["path"].endswith("/-46.6527,-23.5646.json")
    assert "country" not in seen["params"]


def test_reverse_without_candidates_raises_address_not_found():
    geocoder = _geocoder(lambda request: httpx.Response(200, json={"features": []}))

    with pytest.raises(AddressNotFound):
        geocoder.reverse(0.0, 0.0)


def test_missing_token_is_a_configuration_error(monkeypatch):
    monkeypatch.setattr(mapbox_client.settings, "mapbox_token", None)

    with pytest.raises(ValueError):
        MapboxGeocoder()


def test_check_health_reports_provider_failures():
    healthy = _geocoder(lambda request: httpx.Response(200, json={"features": [PAULISTA_FEATURE]}))
    broken = _geocoder(lambda request: httpx.Response(503))

    assert check_health(healthy) is True
    assert check_health(broken) is False
