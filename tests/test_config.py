from __future__ import annotations

from hoursdash.config import ClockifySettings, load_config
from hoursdash.db.connection import build_db_url


def test_load_config_expands_env(tmp_path, monkeypatch):
    monkeypatch.setenv("CLOCKIFY_API_KEY", "secret-key")
    path = tmp_path / "config.yaml"
    path.write_text(
        "clockify:\n"
        "  api_key: \"${CLOCKIFY_API_KEY}\"\n"
        "  base_url: \"https://example.test/api/v1/\"\n"
        "  page_size: 50\n"
        "  billable_tag_ids: [t1, t2]\n",
        encoding="utf-8",
    )

    settings = ClockifySettings.from_config(load_config(str(path)))

    assert settings.api_key == "secret-key"
    assert settings.base_url == "https://example.test/api/v1"
    assert settings.page_size == 50
    assert settings.billable_tag_ids == ("t1", "t2")
    assert settings.max_attempts == 1
    assert settings.is_configured()


def test_settings_fall_back_to_env(monkeypatch):
    monkeypatch.setenv("CLOCKIFY_API_KEY", "env-key")
    monkeypatch.setenv("CLOCKIFY_WORKSPACE_ID", "ws-env")
    monkeypatch.delenv("CLOCKIFY_BASE_URL", raising=False)

    settings = ClockifySettings.from_config({})

    assert settings.api_key == "env-key"
    assert settings.workspace_id == "ws-env"
    assert settings.base_url == "https://api.clockify.me/api/v1"
    assert settings.page_size == 200
    assert settings.timeout_seconds == 30.0


def test_missing_env_var_leaves_key_unconfigured(tmp_path, monkeypatch):
    monkeypatch.delenv("CLOCKIFY_API_KEY", raising=False)
    path = tmp_path / "config.yaml"
    path.write_text("clockify:\n  api_key: \"${CLOCKIFY_API_KEY}\"\n", encoding="utf-8")

    settings = ClockifySettings.from_config(load_config(str(path)))

    assert settings.is_configured() is False


def test_database_url_override(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///hours.db")
    assert build_db_url() == "sqlite:///hours.db"

    monkeypatch.delenv("DATABASE_URL")
    monkeypatch.setenv("DB_HOST", "db")
    monkeypatch.setenv("DB_PORT", "5433")
    monkeypatch.setenv("DB_NAME", "hours")
    monkeypatch.setenv("DB_USER", "admin")
    monkeypatch.setenv("DB_PASSWORD", "pw")
    assert build_db_url() == "postgresql+psycopg://admin:pw@db:5433/hours"
