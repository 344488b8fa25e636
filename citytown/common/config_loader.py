"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from citytown.common.constants import DEFAULT_CITIES_PATH, DEFAULT_TOWNSHIPS_PATH
from citytown.common.errors import ConfigError
from citytown.common.fs import read_yaml
from citytown.common.http import RetryConfig, TimeoutConfig
from citytown.common.schema import validate_app_config

APP_CONFIG_FILENAME = "app.yml"


@dataclass(frozen=True)
class ReferenceSettings:
    base_url: str | None
    directory: Path | None
    cities_path: str
    townships_path: str
    timeout: TimeoutConfig
    retry: RetryConfig


@dataclass(frozen=True)
class AppConfig:
    reference: ReferenceSettings
    store_path: Path


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    base = read_yaml(path) or {}
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path) or {}
    return _deep_merge(base, overlay)


def _resolve_path(value: str, root: Path) -> Path:
    path = Path(value)
    if path.is_absolute():
        return path
    return root / path


def build_app_config(cfg: dict, *, config_dir: Path, data_dir: Path) -> AppConfig:
    reference = cfg["reference"]
    timeout = reference.get("timeout") or {}
    retry = reference.get("retry") or {}
    directory = reference.get("directory")
    store_path = Path(cfg["store"]["path"])

    return AppConfig(
        reference=ReferenceSettings(
            base_url=reference.get("base_url") or None,
            directory=_resolve_path(directory, config_dir) if directory else None,
            cities_path=reference.get("cities_path", DEFAULT_CITIES_PATH),
            townships_path=reference.get("townships_path", DEFAULT_TOWNSHIPS_PATH),
            timeout=TimeoutConfig(
                connect=float(timeout.get("connect", TimeoutConfig.connect)),
                read=float(timeout.get("read", TimeoutConfig.read)),
            ),
            retry=RetryConfig(
                max_attempts=int(retry.get("max_attempts", RetryConfig.max_attempts)),
                multiplier=float(retry.get("multiplier", RetryConfig.multiplier)),
                max_wait=float(retry.get("max_wait", RetryConfig.max_wait)),
            ),
        ),
        store_path=store_path if store_path.is_absolute() else data_dir / store_path,
    )


def load_app_config(
    config_dir: Path,
    *,
    data_dir: Path,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
    reference_url: str | None = None,
) -> AppConfig:
    overlay_path = None
    if overlay_config_dir is not None:
        overlay_path = overlay_config_dir / APP_CONFIG_FILENAME
    cfg = _load_yaml_with_overlay(config_dir / APP_CONFIG_FILENAME, overlay_path)
    if reference_url and isinstance(cfg.get("reference"), dict):
        cfg["reference"] = {**cfg["reference"], "base_url": reference_url, "directory": None}
    validated = validate_app_config(cfg, allow_unknown=allow_unknown)
    return build_app_config(validated, config_dir=config_dir, data_dir=data_dir)
