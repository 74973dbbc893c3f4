from datetime import datetime, timedelta, timezone

import pytest

from cement_tracker.db.auth import StaticIdentity
from cement_tracker.errors import AddressNotFound, DeliveryNotFound, ProviderError
from cement_tracker.models.domain import DeliveryStatus, GeocodeResult
from cement_tracker.persistence.store import InMemoryRecordStore
from cement_tracker.schemas.deliveries import CustomerCreate, DeliveryCreate
from cement_tracker.services.lifecycle import DeliveryLifecycle
from cement_tracker.services.public_view import PublicTrackingView, coordinate_label

AUGUSTA = GeocodeResult(-23.5534, -46.6545, "Rua Augusta 500, São Paulo - SP, Brasil")
CONSOLACAO = GeocodeResult(-23.5489, -46.6388, "Rua da Consolação, São Paulo - SP, Brasil")


class SteppingClock:
    def __init__(self, start=datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc), step=timedelta(minutes=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current += self.step
        return value


class DummyGeocoder:
    """Forward lookups by address prefix; reverse lookups from a coordinate table."""

    def __init__(self, reverse_results=None):
        self.reverse_results = reverse_results or {}
        self.reverse_calls = []

    def forward(self, address: str) -> GeocodeResult:
        if address.startswith("Rua Augusta"):
            return AUGUSTA
        if address.startswith("Consolação"):
            return CONSOLACAO
        raise AddressNotFound(address)

    def reverse(self, latitude: float, longitude: float) -> str:
        self.reverse_calls.append((latitude, longitude))
        result = self.reverse_results.get((latitude, longitude))
        if isinstance(result, Exception):
            raise result
        if result is None:
            raise AddressNotFound(f"{latitude},{longitude}")
        return result


def _tracked_delivery(store, geocoder, with_destination=True):
    clock = SteppingClock()
    lifecycle = DeliveryLifecycle(store, geocoder=geocoder, identity=StaticIdentity("operator-7"), clock=clock)
    customer = lifecycle.customers.create_customer(CustomerCreate(name="Construtora Horizonte"))
    payload = DeliveryCreate(
        customer_id=customer.id,
        cement_type="CP V-ARI",
        quantity=80,
        destination_address="Av. Paulista, 1000, São Paulo",
        destination_lat=-23.5646 if with_destination else None,
        destination_lng=-46.6527 if with_destination else None,
        driver_name="Maria Souza",
        driver_phone="+55 11 98888-1111",
        vehicle_plate="XYZ9A87",
    )
    delivery = lifecycle.create_delivery(payload)
    lifecycle.update_status(delivery.id, DeliveryStatus.IN_TRANSIT, notes="Saiu da fábrica")
    lifecycle.report_location(delivery.id, "Consolação")
    lifecycle.report_location(delivery.id, "Rua Augusta, 500")
    return delivery


def test_unknown_code_raises_not_found():
    view = PublicTrackingView(InMemoryRecordStore())

    with pytest.raises(DeliveryNotFound):
        view.lookup("NOPE123456")
    with pytest.raises(DeliveryNotFound):
        view.lookup("   ")


def test_lookup_is_case_insensitive():
    store = InMemoryRecordStore()
    geocoder = DummyGeocoder()
    delivery = _tracked_delivery(store, geocoder)

    response = PublicTrackingView(store, geocoder=None).lookup(f" {delivery.tracking_code.lower()} ")

    assert response.tracking_code == delivery.tracking_code
    assert response.status is DeliveryStatus.IN_TRANSIT
    assert response.status_label == "Em Trânsito"


def test_public_payload_hides_internal_fields():
    store = InMemoryRecordStore()
    delivery = _tracked_delivery(store, DummyGeocoder())

    payload = PublicTrackingView(store).lookup(delivery.tracking_code).model_dump()

    for hidden in ("id", "customer_id", "created_by", "updated_by"):
        assert hidden not in payload
    for update in payload["tracking_updates"]:
        for hidden in ("id", "delivery_id", "created_by"):
            assert hidden not in update
    assert "operator-7" not in repr(payload)
    assert delivery.id not in repr(payload)


def test_driver_contact_hidden_without_driver_name():
    store = InMemoryRecordStore()
    lifecycle = DeliveryLifecycle(store, identity=StaticIdentity("operator-7"))
    customer = lifecycle.customers.create_customer(CustomerCreate(name="Obra Leste"))
    delivery = lifecycle.create_delivery(
        DeliveryCreate(
            customer_id=customer.id,
            cement_type="CP III",
            quantity=10,
            destination_address="Rua do Porto, 12",
            driver_phone="+55 11 90000-0000",
            vehicle_plate="AAA0A00",
        )
    )

    response = PublicTrackingView(store).lookup(delivery.tracking_code)

    assert response.driver_phone is None
    assert response.vehicle_plate is None
    assert response.progress is None
    assert response.tracking_updates == []


def test_reverse_failures_fall_back_to_coordinates_per_entry():
    store = InMemoryRecordStore()
    delivery = _tracked_delivery(store, DummyGeocoder())
    geocoder = DummyGeocoder(
        {
            (AUGUSTA.latitude, AUGUSTA.longitude): "Rua Augusta, 500 - Consolação",
            (CONSOLACAO.latitude, CONSOLACAO.longitude): ProviderError("rate limited"),
        }
    )

    response = PublicTrackingView(store, geocoder=geocoder).lookup(delivery.tracking_code)

    newest, older, status_only = response.tracking_updates
    assert newest.address == "Rua Augusta, 500 - Consolação"
    assert newest.location_label == "Rua Augusta, 500 - Consolação"
    assert older.address is None
    assert older.location_label == coordinate_label(CONSOLACAO.latitude, CONSOLACAO.longitude)
    assert status_only.location_label is None
    assert status_only.notes == "Saiu da fábrica"
    assert sorted(geocoder.reverse_calls) == sorted(
        [(AUGUSTA.latitude, AUGUSTA.longitude), (CONSOLACAO.latitude, CONSOLACAO.longitude)]
    )


def test_without_geocoder_labels_are_raw_coordinates():
    store = InMemoryRecordStore()
    delivery = _tracked_delivery(store, DummyGeocoder())

    response = PublicTrackingView(store, geocoder=None).lookup(delivery.tracking_code)

    assert response.tracking_updates[0].location_label == "-23.553400, -46.654500"
    assert all(update.address is None for update in response.tracking_updates)


def test_progress_present_with_location_and_destination():
    store = InMemoryRecordStore()
    delivery = _tracked_delivery(store, DummyGeocoder())

    progress = PublicTrackingView(store).lookup(delivery.tracking_code).progress

    assert progress is not None
    assert 1.0 < progress.distance_km < 1.5
    assert progress.eta_minutes == 2
    assert progress.distance_label.endswith("km")


def test_progress_absent_without_destination_coordinates():
    store = InMemoryRecordStore()
    delivery = _tracked_delivery(store, DummyGeocoder(), with_destination=False)

    response = PublicTrackingView(store).lookup(delivery.tracking_code)

    assert response.progress is None
    assert len(response.tracking_updates) == 3


class ReadOnlyStore(InMemoryRecordStore):
    def __init__(self, source: InMemoryRecordStore):
        super().__init__()
        self._tables = source._tables

    def insert(self, kind, record):
        raise AssertionError(f"unexpected insert into {kind}")

    def update(self, kind, record_id, patch):
        raise AssertionError(f"unexpected update of {kind}")


def test_lookup_with_progress_never_writes():
    store = InMemoryRecordStore()
    delivery = _tracked_delivery(store, DummyGeocoder())

    response = PublicTrackingView(ReadOnlyStore(store)).lookup(delivery.tracking_code)

    assert response.progress is not None
    assert len(response.tracking_updates) == 3
