from datetime import datetime, timedelta, timezone

import pytest

from cement_tracker.models.domain import DeliveryStatus
from cement_tracker.persistence.store import TRACKING_UPDATES, InMemoryRecordStore
from cement_tracker.services.ledger import TrackingLedger


class SteppingClock:
    def __init__(self, start=datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc), step=timedelta(seconds=30)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current += self.step
        return value


@pytest.fixture
def ledger() -> TrackingLedger:
    return TrackingLedger(InMemoryRecordStore(), clock=SteppingClock())


def test_append_assigns_id_and_timestamp(ledger: TrackingLedger):
    update = ledger.append("d1", DeliveryStatus.PENDING, notes="Carregando")

    assert update.id
    assert update.delivery_id == "d1"
    assert update.created_at == datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)
    assert update.notes == "Carregando"
    assert update.coordinate is None


def test_append_rejects_half_coordinate_pair(ledger: TrackingLedger):
    with pytest.raises(ValueError):
        ledger.append("d1", DeliveryStatus.IN_TRANSIT, latitude=-23.5)

    assert len(ledger.list_for("d1")) == 0


def test_list_for_is_newest_first_and_scoped(ledger: TrackingLedger):
    first = ledger.append("d1", DeliveryStatus.PENDING)
    ledger.append("d2", DeliveryStatus.PENDING)
    second = ledger.append("d1", DeliveryStatus.IN_TRANSIT)

    updates = ledger.list_for("d1")

    assert [update.id for update in updates] == [second.id, first.id]


def test_latest_located_skips_entries_without_coordinates(ledger: TrackingLedger):
    assert ledger.latest_located("d1") is None

    ledger.append("d1", DeliveryStatus.IN_TRANSIT, latitude=-23.56, longitude=-46.65)
    newest_located = ledger.append("d1", DeliveryStatus.IN_TRANSIT, latitude=-23.55, longitude=-46.64)
    ledger.append("d1", DeliveryStatus.IN_TRANSIT, notes="Parado no trânsito")

    latest = ledger.latest_located("d1")

    assert latest.id == newest_located.id
    assert (latest.latitude, latest.longitude) == (-23.55, -46.64)


def test_appending_never_touches_prior_entries(ledger: TrackingLedger):
    first = ledger.append("d1", DeliveryStatus.PENDING, notes="original")
    snapshot = ledger.store.get(TRACKING_UPDATES, first.id)

    ledger.append("d1", DeliveryStatus.IN_TRANSIT, notes="later")

    assert ledger.store.get(TRACKING_UPDATES, first.id) == snapshot
    assert len(ledger.list_for("d1")) == 2
