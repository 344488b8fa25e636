"""Read-only reference data: the city list and the city -> townships mapping."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol

from citytown.common.config_loader import ReferenceSettings
from citytown.common.constants import DEFAULT_CITIES_PATH, DEFAULT_TOWNSHIPS_PATH
from citytown.common.errors import ReferenceLoadError
from citytown.common.fs import read_json
from citytown.common.http import HttpClient, HttpRequestError
from citytown.common.models import ReferenceCity, ReferenceTownship
from citytown.common.schema import parse_cities, parse_township_map


class ReferenceSource(Protocol):
    def fetch_cities(self) -> list[ReferenceCity]: ...

    def fetch_township_map(self) -> dict[str, list[ReferenceTownship]]: ...

    def fetch_townships(self, city_id: str) -> list[ReferenceTownship]: ...


class _DocumentReferenceSource:
    """Shared parsing on top of a raw document loader."""

    cities_path: str
    townships_path: str

    def _load_document(self, name: str) -> Any:
        raise NotImplementedError

    def fetch_cities(self) -> list[ReferenceCity]:
        return parse_cities(self._load_document(self.cities_path))

    def fetch_township_map(self) -> dict[str, list[ReferenceTownship]]:
        return parse_township_map(self._load_document(self.townships_path))

    def fetch_townships(self, city_id: str) -> list[ReferenceTownship]:
        # Unknown cities have no townships; that is not a load failure.
        return list(self.fetch_township_map().get(city_id, []))


class HttpReferenceSource(_DocumentReferenceSource):
    def __init__(
        self,
        base_url: str,
        *,
        http_client: HttpClient,
        cities_path: str = DEFAULT_CITIES_PATH,
        townships_path: str = DEFAULT_TOWNSHIPS_PATH,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.http_client = http_client
        self.cities_path = cities_path
        self.townships_path = townships_path

    def _load_document(self, name: str) -> Any:
        url = f"{self.base_url}/{name.lstrip('/')}"
        try:
            return self.http_client.get_json(url)
        except HttpRequestError as exc:
            raise ReferenceLoadError(f"Failed to load reference document {url}: {exc}") from exc


class FileReferenceSource(_DocumentReferenceSource):
    def __init__(
        self,
        directory: Path,
        *,
        cities_path: str = DEFAULT_CITIES_PATH,
        townships_path: str = DEFAULT_TOWNSHIPS_PATH,
    ) -> None:
        self.directory = directory
        self.cities_path = cities_path
        self.townships_path = townships_path

    def _load_document(self, name: str) -> Any:
        path = self.directory / name
        try:
            return read_json(path)
        except (OSError, ValueError) as exc:
            raise ReferenceLoadError(f"Failed to load reference document {path}: {exc}") from exc


def build_reference_source(
    settings: ReferenceSettings,
    http_client: HttpClient | None = None,
) -> ReferenceSource:
    if settings.base_url:
        client = http_client or HttpClient(timeout=settings.timeout, retry=settings.retry)
        return HttpReferenceSource(
            settings.base_url,
            http_client=client,
            cities_path=settings.cities_path,
            townships_path=settings.townships_path,
        )
    if settings.directory is None:
        raise ReferenceLoadError("No reference base_url or directory configured")
    return FileReferenceSource(
        settings.directory,
        cities_path=settings.cities_path,
        townships_path=settings.townships_path,
    )
