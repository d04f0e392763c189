import json
from pathlib import Path

import pytest

from infrastructure.settings import JsonSettings


@pytest.fixture
def settings_file(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps(
            {
                "backend": {"url": "", "api_key": "", "timeout_s": "abc"},
                "feed": {"poll_interval_ms": 2500},
            }
        ),
        encoding="utf-8",
    )
    return path


def test_dotted_access_and_defaults(settings_file):
    settings = JsonSettings(settings_file, environ={})

    assert settings.get_int("feed.poll_interval_ms", 5000) == 2500
    assert settings.get("feed.missing", "x") == "x"
    assert settings.get_float("backend.timeout_s", 30.0) == 30.0
    assert settings.is_demo


def test_environment_overrides(settings_file):
    settings = JsonSettings(
        settings_file,
        environ={"PHOTO_CURATOR_BACKEND_URL": "https://gw", "PHOTO_CURATOR_API_KEY": "k"},
    )

    assert settings.get("backend.url") == "https://gw"
    assert settings.get("backend.api_key") == "k"
    assert not settings.is_demo


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        JsonSettings(tmp_path / "absent.json")


def test_shipped_settings_are_demo_mode():
    shipped = Path(__file__).resolve().parent.parent / "settings.json"
    settings = JsonSettings(shipped, environ={})

    assert settings.get_float("ui.removing_timeout_s", 0) == 120.0
    assert settings.is_demo
