from pathlib import Path

import pytest

from citytown.common.config_loader import load_app_config
from citytown.common.errors import ConfigError

BASE_CONFIG = """reference:
  base_url: null
  directory: reference
  cities_path: city.json
  townships_path: township.json
  timeout:
    connect: 5
    read: 30
  retry:
    max_attempts: 3
store:
  path: locations.json
"""


def _write_config(directory: Path, text: str = BASE_CONFIG) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "app.yml").write_text(text, encoding="utf-8")
    return directory


def test_load_app_config_from_repo_config_dir(tmp_path: Path):
    config = load_app_config(Path("config"), data_dir=tmp_path)

    assert config.reference.base_url is None
    assert config.reference.directory == Path("config") / "reference"
    assert (config.reference.directory / "city.json").exists()
    assert config.store_path == tmp_path / "locations.json"


def test_load_app_config_resolves_settings(tmp_path: Path):
    config_dir = _write_config(tmp_path / "config")

    config = load_app_config(config_dir, data_dir=tmp_path / "data")

    assert config.reference.directory == config_dir / "reference"
    assert config.reference.timeout.connect == 5.0
    assert config.reference.timeout.read == 30.0
    assert config.reference.retry.max_attempts == 3
    assert config.store_path == tmp_path / "data" / "locations.json"


def test_load_app_config_applies_overlay_values(tmp_path: Path):
    config_dir = _write_config(tmp_path / "base")
    overlay_dir = _write_config(
        tmp_path / "overlay",
        """reference:
  base_url: https://ref.example/static
  directory: null
  retry:
    max_attempts: 5
""",
    )

    config = load_app_config(config_dir, data_dir=tmp_path, overlay_config_dir=overlay_dir)

    assert config.reference.base_url == "https://ref.example/static"
    assert config.reference.directory is None
    assert config.reference.retry.max_attempts == 5
    assert config.reference.timeout.read == 30.0


def test_reference_url_override_replaces_directory(tmp_path: Path):
    config_dir = _write_config(tmp_path / "config")

    config = load_app_config(config_dir, data_dir=tmp_path, reference_url="http://localhost:5173")

    assert config.reference.base_url == "http://localhost:5173"
    assert config.reference.directory is None


def test_absolute_store_path_is_kept(tmp_path: Path):
    store_path = tmp_path / "elsewhere" / "records.json"
    config_dir = _write_config(tmp_path / "config", BASE_CONFIG.replace("locations.json", str(store_path)))

    config = load_app_config(config_dir, data_dir=tmp_path / "data")

    assert config.store_path == store_path


def test_missing_config_file_raises(tmp_path: Path):
    with pytest.raises(ConfigError):
        load_app_config(tmp_path, data_dir=tmp_path)


def test_both_reference_locations_rejected(tmp_path: Path):
    config_dir = _write_config(
        tmp_path / "config",
        BASE_CONFIG.replace("base_url: null", "base_url: https://ref.example"),
    )

    with pytest.raises(ConfigError):
        load_app_config(config_dir, data_dir=tmp_path)


def test_unknown_keys_rejected_unless_allowed(tmp_path: Path):
    config_dir = _write_config(tmp_path / "config", BASE_CONFIG + "extra: 1\n")

    with pytest.raises(ConfigError):
        load_app_config(config_dir, data_dir=tmp_path)

    config = load_app_config(config_dir, data_dir=tmp_path, allow_unknown=True)
    assert config.store_path.name == "locations.json"
