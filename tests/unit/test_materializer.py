from __future__ import annotations

import logging

import pytest

from citytown.common.constants import UNKNOWN_CITY_NAME, UNKNOWN_TOWNSHIP_NAME
from citytown.common.errors import ReferenceLoadError, ValidationError
from citytown.common.models import ReferenceCity, ReferenceTownship
from citytown.records.materializer import RecordMaterializer


class CountingReferenceSource:
    def __init__(self, cities, township_map, *, fail=False):
        self.cities = cities
        self.township_map = township_map
        self.fail = fail
        self.lookups = 0

    def fetch_cities(self):
        self.lookups += 1
        if self.fail:
            raise ReferenceLoadError("reference down")
        return list(self.cities)

    def fetch_township_map(self):
        self.lookups += 1
        return dict(self.township_map)

    def fetch_townships(self, city_id):
        self.lookups += 1
        return list(self.township_map.get(city_id, []))


@pytest.fixture
def source() -> CountingReferenceSource:
    return CountingReferenceSource(
        [ReferenceCity("A", "Alpha"), ReferenceCity("B", "Beta")],
        {
            "A": [ReferenceTownship("A1", "One")],
            "B": [ReferenceTownship("B1", "Bee"), ReferenceTownship("B2", "Bees")],
        },
    )


def test_materialize_resolves_names_and_full_address(source):
    payload = RecordMaterializer(source).materialize("A", "A1")

    assert payload.city_name == "Alpha"
    assert payload.township_name == "One"
    assert payload.full_address == "AlphaOne"
    assert payload.to_dict() == {
        "cityId": "A",
        "cityName": "Alpha",
        "townshipId": "A1",
        "townshipName": "One",
        "fullAddress": "AlphaOne",
    }


def test_unknown_city_falls_back_to_sentinels(source):
    payload = RecordMaterializer(source).materialize("Z", "Z1")

    assert payload.city_name == UNKNOWN_CITY_NAME
    assert payload.township_name == UNKNOWN_TOWNSHIP_NAME
    assert payload.full_address == UNKNOWN_CITY_NAME + UNKNOWN_TOWNSHIP_NAME


def test_township_from_another_city_falls_back(source):
    payload = RecordMaterializer(source).materialize("A", "B1")

    assert payload.city_name == "Alpha"
    assert payload.township_name == UNKNOWN_TOWNSHIP_NAME
    assert payload.full_address == f"Alpha{UNKNOWN_TOWNSHIP_NAME}"


def test_resolution_miss_is_logged(source, caplog):
    logger = logging.getLogger("citytown.test-materializer")
    with caplog.at_level(logging.WARNING, logger=logger.name):
        RecordMaterializer(source, logger=logger).materialize("Z", "Z1")

    events = [getattr(record, "event", None) for record in caplog.records]
    assert events == ["RESOLUTION_MISS", "RESOLUTION_MISS"]


@pytest.mark.parametrize("city_id,township_id", [("", "A1"), ("A", ""), ("", "")])
def test_missing_ids_fail_before_any_lookup(source, city_id, township_id):
    with pytest.raises(ValidationError):
        RecordMaterializer(source).materialize(city_id, township_id)
    assert source.lookups == 0


def test_rematerializing_same_pair_is_identical(source):
    materializer = RecordMaterializer(source)

    assert materializer.materialize("B", "B2") == materializer.materialize("B", "B2")


def test_full_address_never_empty(source):
    materializer = RecordMaterializer(source)
    for city_id in ("A", "B", "Z"):
        for township_id in ("A1", "B1", "B2", "Q"):
            payload = materializer.materialize(city_id, township_id)
            assert payload.full_address == payload.city_name + payload.township_name
            assert payload.full_address


def test_reference_load_error_propagates(source):
    source.fail = True

    with pytest.raises(ReferenceLoadError):
        RecordMaterializer(source).materialize("A", "A1")
