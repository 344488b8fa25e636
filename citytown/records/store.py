"""Persistence for materialized location records."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Protocol

from citytown.common.errors import RecordNotFoundError, StoreError
from citytown.common.fs import read_json, write_json_atomic
from citytown.common.ids import generate_record_id
from citytown.common.models import LocationPayload, LocationRecord
from citytown.common.time_utils import utc_timestamp_iso

STORE_VERSION = 1


class RecordStore(Protocol):
    def create(self, payload: LocationPayload) -> LocationRecord: ...

    def list(self) -> list[LocationRecord]: ...

    def get(self, record_id: str) -> LocationRecord: ...

    def update(self, record_id: str, payload: LocationPayload) -> LocationRecord: ...

    def delete(self, record_id: str) -> None: ...


class JsonFileRecordStore:
    """All records in one JSON document, rewritten atomically on each change."""

    def __init__(
        self,
        path: Path,
        *,
        clock: Callable[[], str] = utc_timestamp_iso,
        id_factory: Callable[[], str] = generate_record_id,
    ) -> None:
        self.path = path
        self.clock = clock
        self.id_factory = id_factory

    def _read(self) -> list[LocationRecord]:
        if not self.path.exists():
            return []
        try:
            payload = read_json(self.path)
            return [LocationRecord.from_dict(item) for item in payload.get("locations", [])]
        except (OSError, ValueError, AttributeError, KeyError, TypeError) as exc:
            raise StoreError(f"Failed to read record store {self.path}: {exc}") from exc

    def _write(self, records: list[LocationRecord]) -> None:
        payload = {
            "version": STORE_VERSION,
            "locations": [record.to_dict() for record in records],
        }
        try:
            write_json_atomic(self.path, payload)
        except OSError as exc:
            raise StoreError(f"Failed to write record store {self.path}: {exc}") from exc

    def _index_of(self, records: list[LocationRecord], record_id: str) -> int:
        for idx, record in enumerate(records):
            if record.id == record_id:
                return idx
        raise RecordNotFoundError(f"Location not found: {record_id}")

    def create(self, payload: LocationPayload) -> LocationRecord:
        records = self._read()
        record = LocationRecord.from_payload(self.id_factory(), payload, created_at=self.clock())
        self._write([*records, record])
        return record

    def list(self) -> list[LocationRecord]:
        records = self._read()
        # Newest first; equal timestamps keep the later insert first.
        return sorted(reversed(records), key=lambda record: record.created_at, reverse=True)

    def get(self, record_id: str) -> LocationRecord:
        records = self._read()
        return records[self._index_of(records, record_id)]

    def update(self, record_id: str, payload: LocationPayload) -> LocationRecord:
        records = self._read()
        idx = self._index_of(records, record_id)
        updated = records[idx].replaced_by(payload, updated_at=self.clock())
        self._write([*records[:idx], updated, *records[idx + 1 :]])
        return updated

    def delete(self, record_id: str) -> None:
        records = self._read()
        idx = self._index_of(records, record_id)
        self._write([*records[:idx], *records[idx + 1 :]])
