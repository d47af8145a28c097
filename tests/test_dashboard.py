import pytest

from promptplanner import config as app_config
from promptplanner.dashboard import load_config, reset_checklist, parse_hours


@pytest.fixture(autouse=True)
def restore_config(monkeypatch):
    for attr in ["RELAY_HOST", "RELAY_PORT", "CORS_ORIGINS", "MAX_BODY_SIZE",
                 "RELAY_URL", "DEFAULT_PROVIDER", "MAX_TOKENS", "TEMPERATURE", "TIMEOUT"]:
        monkeypatch.setattr(app_config, attr, getattr(app_config, attr))


def test_load_config_from_environment(tmp_path, monkeypatch):
    config_file = tmp_path / "planner.yaml"
    config_file.write_text(
        "planner:\n"
        "  relay_url: http://relay.internal:9000\n"
        "  provider: xai\n"
        "llm:\n"
        "  timeout: 45\n"
    )
    monkeypatch.setenv("PROMPTPLANNER_CONFIG", str(config_file))
    load_config()
    assert app_config.RELAY_URL == "http://relay.internal:9000"
    assert app_config.DEFAULT_PROVIDER == "xai"
    assert app_config.TIMEOUT == 45.0


def test_load_config_relay_url_only(monkeypatch):
    monkeypatch.delenv("PROMPTPLANNER_CONFIG", raising=False)
    monkeypatch.setenv("PROMPTPLANNER_RELAY_URL", "http://relay.other:8000")
    load_config()
    assert app_config.RELAY_URL == "http://relay.other:8000"


def test_reset_checklist_clears_previous_plan():
    state = {
        "provider": "claude",
        "api_key": "sk-key",
        "done_web_architecture": True,
        "done_web_features": False,
        "done_steps": {"web_architecture"},
    }
    reset_checklist(state)
    assert state == {"provider": "claude", "api_key": "sk-key", "done_steps": set()}


@pytest.mark.parametrize("value,expected", [
    ("12", 12.0),
    ("10-15", 10.0),
    ("约20小时", 20.0),
    ("2.5 hours", 2.5),
    ("", None),
    (None, None),
])
def test_parse_hours(value, expected):
    assert parse_hours(value) == expected
