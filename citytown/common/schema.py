"""Minimal strict schemas for YAML config and reference documents."""

from __future__ import annotations

from typing import Any

from citytown.common.errors import ConfigError, ReferenceLoadError
from citytown.common.models import ReferenceCity, ReferenceTownship


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_mapping(obj: Any, ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")


def validate_app_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    _assert_mapping(cfg, "app config")
    _assert_required_keys(cfg, {"reference", "store"}, "app config")
    _assert_no_unknown_keys(cfg, {"reference", "store"}, "app config", allow_unknown)

    reference = cfg["reference"]
    _assert_mapping(reference, "reference")
    _assert_required_keys(reference, {"cities_path", "townships_path"}, "reference")
    _assert_no_unknown_keys(
        reference,
        {"base_url", "directory", "cities_path", "townships_path", "timeout", "retry"},
        "reference",
        allow_unknown,
    )
    has_url = bool(reference.get("base_url"))
    has_dir = bool(reference.get("directory"))
    if has_url == has_dir:
        raise ConfigError("reference must set exactly one of base_url, directory")

    if "timeout" in reference:
        _assert_mapping(reference["timeout"], "reference.timeout")
        _assert_required_keys(reference["timeout"], {"connect", "read"}, "reference.timeout")
    if "retry" in reference:
        _assert_mapping(reference["retry"], "reference.retry")
        _assert_required_keys(reference["retry"], {"max_attempts"}, "reference.retry")
        if int(reference["retry"]["max_attempts"]) < 1:
            raise ConfigError("reference.retry.max_attempts must be at least 1")

    store = cfg["store"]
    _assert_mapping(store, "store")
    _assert_required_keys(store, {"path"}, "store")
    _assert_no_unknown_keys(store, {"path"}, "store", allow_unknown)

    return cfg


def _parse_entry(entry: Any, ctx: str) -> tuple[str, str]:
    if not isinstance(entry, dict) or "id" not in entry or "name" not in entry:
        raise ReferenceLoadError(f"Malformed {ctx} entry: {entry!r}")
    return str(entry["id"]), str(entry["name"])


def parse_cities(payload: Any) -> list[ReferenceCity]:
    if not isinstance(payload, list):
        raise ReferenceLoadError("City document must be a list")
    return [ReferenceCity(*_parse_entry(entry, "city")) for entry in payload]


def parse_township_map(payload: Any) -> dict[str, list[ReferenceTownship]]:
    if not isinstance(payload, dict):
        raise ReferenceLoadError("Township document must be a mapping of city id to townships")
    out: dict[str, list[ReferenceTownship]] = {}
    for city_id, entries in payload.items():
        if not isinstance(entries, list):
            raise ReferenceLoadError(f"Townships for city {city_id} must be a list")
        out[str(city_id)] = [ReferenceTownship(*_parse_entry(entry, "township")) for entry in entries]
    return out
