"""Create/list/edit/delete actions over materialized location records."""

from __future__ import annotations

import logging

from citytown.common.errors import LocationError
from citytown.common.logging import get_logger, log_event
from citytown.common.models import LocationRecord, Selection
from citytown.records.materializer import RecordMaterializer, require_ids
from citytown.records.store import RecordStore


class LocationService:
    def __init__(
        self,
        materializer: RecordMaterializer,
        store: RecordStore,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self.materializer = materializer
        self.store = store
        self.logger = logger or get_logger("service")

    def create_location(self, selection: Selection) -> LocationRecord:
        require_ids(selection.city_id, selection.township_id)
        payload = self.materializer.materialize(selection.city_id, selection.township_id)
        record = self.store.create(payload)
        log_event(
            self.logger,
            "location saved",
            event="RECORD_CREATED",
            status="ok",
            record_id=record.id,
            city_id=record.city_id,
            township_id=record.township_id,
        )
        return record

    def update_location(self, record_id: str, selection: Selection) -> LocationRecord:
        require_ids(selection.city_id, selection.township_id)
        payload = self.materializer.materialize(selection.city_id, selection.township_id)
        record = self.store.update(record_id, payload)
        log_event(
            self.logger,
            "location updated",
            event="RECORD_UPDATED",
            status="ok",
            record_id=record.id,
            city_id=record.city_id,
            township_id=record.township_id,
        )
        return record

    def delete_location(self, record_id: str) -> None:
        self.store.delete(record_id)
        log_event(self.logger, "location deleted", event="RECORD_DELETED", status="ok", record_id=record_id)

    def list_locations(self) -> list[LocationRecord]:
        return self.store.list()

    def get_location(self, record_id: str) -> LocationRecord:
        return self.store.get(record_id)


class LocationListView:
    """The saved-records list.

    Rows only change after the store confirms; a failed action leaves the
    rows as they were and sets ``error``.
    """

    def __init__(self, service: LocationService) -> None:
        self.service = service
        self.records: list[LocationRecord] = []
        self.error: LocationError | None = None

    def refresh(self) -> bool:
        try:
            records = self.service.list_locations()
        except LocationError as exc:
            self.error = exc
            return False
        self.records = records
        self.error = None
        return True

    def add(self, selection: Selection) -> LocationRecord | None:
        try:
            record = self.service.create_location(selection)
        except LocationError as exc:
            self.error = exc
            return None
        self.refresh()
        return record

    def edit(self, record_id: str, selection: Selection) -> LocationRecord | None:
        try:
            record = self.service.update_location(record_id, selection)
        except LocationError as exc:
            self.error = exc
            return None
        self.refresh()
        return record

    def remove(self, record_id: str) -> bool:
        try:
            self.service.delete_location(record_id)
        except LocationError as exc:
            self.error = exc
            return False
        self.refresh()
        return True
