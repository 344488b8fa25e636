from __future__ import annotations

from pathlib import Path

import pytest

from citytown.common.errors import StoreError, ValidationError
from citytown.common.models import ReferenceCity, ReferenceTownship, Selection
from citytown.records.materializer import RecordMaterializer
from citytown.records.service import LocationListView, LocationService
from citytown.records.store import JsonFileRecordStore


class StaticReferenceSource:
    def __init__(self):
        self.cities = [ReferenceCity("A", "Alpha"), ReferenceCity("B", "Beta")]
        self.township_map = {
            "A": [ReferenceTownship("A1", "One")],
            "B": [ReferenceTownship("B1", "Bee")],
        }

    def fetch_cities(self):
        return list(self.cities)

    def fetch_township_map(self):
        return dict(self.township_map)

    def fetch_townships(self, city_id):
        return list(self.township_map.get(city_id, []))


class FailingStore:
    def __init__(self, inner):
        self.inner = inner
        self.fail = False

    def _guard(self):
        if self.fail:
            raise StoreError("store offline")

    def create(self, payload):
        self._guard()
        return self.inner.create(payload)

    def list(self):
        return self.inner.list()

    def get(self, record_id):
        return self.inner.get(record_id)

    def update(self, record_id, payload):
        self._guard()
        return self.inner.update(record_id, payload)

    def delete(self, record_id):
        self._guard()
        self.inner.delete(record_id)


@pytest.fixture
def source() -> StaticReferenceSource:
    return StaticReferenceSource()


@pytest.fixture
def service(tmp_path: Path, source) -> LocationService:
    return LocationService(RecordMaterializer(source), JsonFileRecordStore(tmp_path / "locations.json"))


def test_create_location_persists_denormalized_names(service):
    record = service.create_location(Selection("A", "A1"))

    assert record.city_name == "Alpha"
    assert record.township_name == "One"
    assert record.full_address == "AlphaOne"
    assert service.get_location(record.id) == record


def test_incomplete_selection_is_not_stored(service):
    with pytest.raises(ValidationError):
        service.create_location(Selection("A", ""))
    assert service.list_locations() == []


def test_update_re_resolves_both_names(service):
    record = service.create_location(Selection("A", "A1"))

    updated = service.update_location(record.id, Selection("B", "B1"))

    assert (updated.city_name, updated.township_name, updated.full_address) == ("Beta", "Bee", "BetaBee")
    assert updated.updated_at is not None


def test_update_with_same_ids_reproduces_names(service):
    record = service.create_location(Selection("A", "A1"))

    updated = service.update_location(record.id, Selection("A", "A1"))

    assert (updated.city_name, updated.township_name, updated.full_address) == (
        record.city_name,
        record.township_name,
        record.full_address,
    )


def test_existing_records_keep_names_after_reference_changes(service, source):
    record = service.create_location(Selection("A", "A1"))

    source.cities = [ReferenceCity("A", "Renamed")]

    assert service.list_locations()[0].city_name == "Alpha"
    assert service.get_location(record.id).full_address == "AlphaOne"


def test_list_view_refresh_and_add(service):
    view = LocationListView(service)
    assert view.refresh() is True
    assert view.records == []

    record = view.add(Selection("A", "A1"))

    assert record is not None
    assert [r.id for r in view.records] == [record.id]
    assert view.error is None


def test_list_view_keeps_rows_when_store_fails(tmp_path: Path, source):
    store = FailingStore(JsonFileRecordStore(tmp_path / "locations.json"))
    view = LocationListView(LocationService(RecordMaterializer(source), store))
    kept = view.add(Selection("A", "A1"))
    store.fail = True

    assert view.remove(kept.id) is False
    assert view.edit(kept.id, Selection("B", "B1")) is None
    assert view.add(Selection("B", "B1")) is None

    assert isinstance(view.error, StoreError)
    assert [r.id for r in view.records] == [kept.id]
    assert view.records[0].city_id == "A"


def test_list_view_remove_after_confirmation(service):
    view = LocationListView(service)
    record = view.add(Selection("A", "A1"))

    assert view.remove(record.id) is True
    assert view.records == []


def test_list_view_reports_missing_record(service):
    view = LocationListView(service)

    assert view.remove("missing") is False
    assert view.error.error_code == "RECORD_NOT_FOUND"


def test_list_view_sets_error_on_undecodable_store(tmp_path: Path, source):
    (tmp_path / "locations.json").write_bytes(b"\xff\xfe{}")
    view = LocationListView(LocationService(RecordMaterializer(source), JsonFileRecordStore(tmp_path / "locations.json")))

    assert view.refresh() is False
    assert isinstance(view.error, StoreError)
    assert view.records == []
