"""Resolve a (city id, township id) pair into denormalized record fields."""

from __future__ import annotations

import logging

from citytown.common.constants import UNKNOWN_CITY_NAME, UNKNOWN_TOWNSHIP_NAME
from citytown.common.errors import ValidationError
from citytown.common.logging import get_logger, log_warning
from citytown.common.models import LocationPayload
from citytown.reference.source import ReferenceSource


def require_ids(city_id: str, township_id: str) -> None:
    missing = [name for name, value in (("city", city_id), ("township", township_id)) if not value]
    if missing:
        raise ValidationError(f"Missing required {' and '.join(missing)} id")


class RecordMaterializer:
    """Builds the payload stored for a selection.

    Names are looked up at write time and frozen into the record. A lookup
    miss falls back to a sentinel name and is logged, never raised. Create
    and update share this path, so an update always re-resolves both names.
    """

    def __init__(
        self,
        source: ReferenceSource,
        *,
        logger: logging.Logger | None = None,
        unknown_city_name: str = UNKNOWN_CITY_NAME,
        unknown_township_name: str = UNKNOWN_TOWNSHIP_NAME,
    ) -> None:
        self.source = source
        self.logger = logger or get_logger("materializer")
        self.unknown_city_name = unknown_city_name
        self.unknown_township_name = unknown_township_name

    def _resolve_city_name(self, city_id: str) -> str:
        for city in self.source.fetch_cities():
            if city.id == city_id:
                return city.name
        log_warning(
            self.logger,
            f"city {city_id} not in reference list",
            event="RESOLUTION_MISS",
            status="fallback",
            city_id=city_id,
        )
        return self.unknown_city_name

    def _resolve_township_name(self, city_id: str, township_id: str) -> str:
        for township in self.source.fetch_townships(city_id):
            if township.id == township_id:
                return township.name
        log_warning(
            self.logger,
            f"township {township_id} not in reference list for city {city_id}",
            event="RESOLUTION_MISS",
            status="fallback",
            city_id=city_id,
            township_id=township_id,
        )
        return self.unknown_township_name

    def materialize(self, city_id: str, township_id: str) -> LocationPayload:
        require_ids(city_id, township_id)
        city_name = self._resolve_city_name(city_id)
        township_name = self._resolve_township_name(city_id, township_id)
        return LocationPayload(
            city_id=city_id,
            city_name=city_name,
            township_id=township_id,
            township_name=township_name,
            full_address=f"{city_name}{township_name}",
        )
