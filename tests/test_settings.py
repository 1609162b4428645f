from __future__ import annotations

from pathlib import Path

import pytest

from fieldtrack.core.errors import ConfigError
from fieldtrack.core.settings import load_settings


def test_defaults_follow_root_override(tmp_path: Path) -> None:
    settings = load_settings()

    assert settings.resolved_root() == (tmp_path / "default_root").resolve()
    assert settings.master_filename == "data.xlsx"
    assert (settings.default_page_size, settings.max_page_size) == (50, 500)


def test_yaml_file_is_loaded(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FIELDTRACK_ROOT", raising=False)
    config = tmp_path / "fieldtrack.yaml"
    config.write_text(
        f"root: {tmp_path / 'configured'}\nmaster_filename: tracker.xlsm\nmax_page_size: 100\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("FIELDTRACK_CONFIG", str(config))

    settings = load_settings()

    assert settings.resolved_root() == (tmp_path / "configured").resolve()
    assert settings.master_filename == "tracker.xlsm"
    assert settings.max_page_size == 100


@pytest.mark.parametrize(
    "body",
    ["master_filename: data.csv\n", "default_page_size: 0\n", "- just\n- a list\n"],
)
def test_invalid_settings_raise_config_error(tmp_path: Path, body: str) -> None:
    config = tmp_path / "bad.yaml"
    config.write_text(body, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_settings(config)


def test_missing_settings_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_settings(tmp_path / "absent.yaml")
