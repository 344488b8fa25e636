"""Dependent city -> township selector state machine.

The selector holds the city list, the township list of the selected city and
the current ``Selection``. Every transition leaves the selection consistent:
a non-empty township id is always a member of the township list loaded for
the selected city.

A city change is split into two transitions so callers that fetch
asynchronously can complete them out of order:

``select_city`` records the new city, exposes an empty township while the new
list is unknown and returns a ``PendingTownshipLoad`` ticket.

``complete_township_load`` applies a fetched list only when its ticket is the
latest one; late results for a superseded city are dropped.

``set_city`` runs both back to back for synchronous callers.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum

from citytown.common.errors import ReferenceLoadError, ValidationError
from citytown.common.logging import get_logger, log_event, log_warning
from citytown.common.models import ReferenceCity, ReferenceTownship, Selection
from citytown.reference.source import ReferenceSource


class SelectorState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class PendingTownshipLoad:
    sequence: int
    city_id: str


class SelectionReconciler:
    def __init__(self, source: ReferenceSource, *, logger: logging.Logger | None = None) -> None:
        self.source = source
        self.logger = logger or get_logger("selection")
        self.state = SelectorState.IDLE
        self.error: ReferenceLoadError | None = None
        self._cities: list[ReferenceCity] = []
        self._townships: list[ReferenceTownship] = []
        self._selection = Selection()
        self._seed = Selection()
        self._held_township = ""
        self._sequence = 0

    @property
    def cities(self) -> list[ReferenceCity]:
        return list(self._cities)

    @property
    def townships(self) -> list[ReferenceTownship]:
        return list(self._townships)

    def current_selection(self) -> Selection:
        return self._selection

    def initialize(self, seed_city_id: str = "", seed_township_id: str = "") -> SelectorState:
        """Load the city list and, for a seeded edit, the seed city's townships.

        Both loads run concurrently and must both succeed. The seed township
        is taken as-is since it comes from a persisted record.
        """
        self._seed = Selection(seed_city_id, seed_township_id)
        self._sequence += 1
        self._held_township = ""
        self.state = SelectorState.LOADING
        self.error = None

        with ThreadPoolExecutor(max_workers=2) as executor:
            cities_future = executor.submit(self.source.fetch_cities)
            townships_future = (
                executor.submit(self.source.fetch_townships, seed_city_id) if seed_city_id else None
            )
            try:
                cities = cities_future.result()
                townships = townships_future.result() if townships_future is not None else []
            except ReferenceLoadError as exc:
                self._fail(exc)
                return self.state

        self._cities = list(cities)
        self._townships = list(townships)
        self._selection = Selection(seed_city_id, seed_township_id if seed_city_id else "")
        self.state = SelectorState.READY
        log_event(
            self.logger,
            "selector ready",
            event="SELECTOR_READY",
            status="ok",
            city_id=seed_city_id or None,
            township_id=seed_township_id or None,
        )
        return self.state

    def retry(self) -> SelectorState:
        return self.initialize(self._seed.city_id, self._seed.township_id)

    def select_city(self, city_id: str) -> PendingTownshipLoad | None:
        self._require_usable()
        self._sequence += 1
        held = self._selection.township_id or self._held_township

        if not city_id:
            self._townships = []
            self._selection = Selection()
            self._held_township = ""
            self.state = SelectorState.READY
            return None

        self._townships = []
        self._selection = Selection(city_id, "")
        self._held_township = held
        self.state = SelectorState.LOADING
        return PendingTownshipLoad(sequence=self._sequence, city_id=city_id)

    def complete_township_load(
        self,
        pending: PendingTownshipLoad,
        townships: list[ReferenceTownship],
    ) -> bool:
        if pending.sequence != self._sequence:
            log_event(
                self.logger,
                "discarded township list for superseded city",
                event="STALE_TOWNSHIP_LOAD",
                status="skipped",
                city_id=pending.city_id,
            )
            return False

        valid_ids = {township.id for township in townships}
        held = self._held_township
        township_id = held if held in valid_ids else ""
        if held and not township_id:
            log_event(
                self.logger,
                "cleared township not valid for new city",
                event="TOWNSHIP_CLEARED",
                status="ok",
                city_id=pending.city_id,
                township_id=held,
            )

        self._townships = list(townships)
        self._selection = Selection(pending.city_id, township_id)
        self._held_township = ""
        self.state = SelectorState.READY
        return True

    def fail_township_load(self, pending: PendingTownshipLoad, error: ReferenceLoadError) -> bool:
        if pending.sequence != self._sequence:
            log_event(
                self.logger,
                "ignored failure for superseded city",
                event="STALE_TOWNSHIP_LOAD",
                status="skipped",
                city_id=pending.city_id,
                error_code=error.error_code,
            )
            return False
        self._fail(error)
        return True

    def set_city(self, city_id: str) -> Selection:
        pending = self.select_city(city_id)
        if pending is None:
            return self._selection
        try:
            townships = self.source.fetch_townships(pending.city_id)
        except ReferenceLoadError as exc:
            self.fail_township_load(pending, exc)
            return self._selection
        self.complete_township_load(pending, townships)
        return self._selection

    def set_township(self, township_id: str) -> Selection:
        self._require_usable()
        if self.state is SelectorState.LOADING:
            # Checked against the list once it arrives.
            self._held_township = township_id
            return self._selection

        if township_id and township_id not in {township.id for township in self._townships}:
            raise ValidationError(
                f"Township {township_id} is not available for city {self._selection.city_id or '(none)'}"
            )
        self._selection = Selection(self._selection.city_id, township_id)
        return self._selection

    def _require_usable(self) -> None:
        if self.state is SelectorState.IDLE:
            raise RuntimeError("Selector has not been initialized")
        if self.state is SelectorState.FAILED:
            raise ReferenceLoadError("Reference data failed to load; retry before selecting")

    def _fail(self, error: ReferenceLoadError) -> None:
        self.state = SelectorState.FAILED
        self.error = error
        self._cities = []
        self._townships = []
        self._selection = Selection()
        self._held_township = ""
        log_warning(
            self.logger,
            f"reference load failed: {error}",
            event="REFERENCE_LOAD_FAILED",
            status="error",
            error_code=error.error_code,
        )
