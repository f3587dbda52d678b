import logging

from beymeta.settings import Settings


def test_defaults(monkeypatch):
    for name in ("SUPABASE_URL", "SUPABASE_KEY", "BEYMETA_DB_PATH", "BEYMETA_LOG_LEVEL",
                 "BEYMETA_HTTP_TIMEOUT", "BEYMETA_WEB_HOST", "BEYMETA_WEB_PORT"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings.from_env()
    assert settings.db_path == "data/beymeta.db"
    assert settings.http_timeout_seconds == 20
    assert settings.log_level_value == logging.INFO
    assert not settings.use_hosted_store


def test_overrides(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://league.example.co/")
    monkeypatch.setenv("SUPABASE_KEY", "anon-key")
    monkeypatch.setenv("BEYMETA_LOG_LEVEL", "debug")
    monkeypatch.setenv("BEYMETA_HTTP_TIMEOUT", "5")
    monkeypatch.setenv("BEYMETA_WEB_PORT", "not-a-port")

    settings = Settings.from_env()
    assert settings.supabase_url == "https://league.example.co"
    assert settings.use_hosted_store
    assert settings.log_level_value == logging.DEBUG
    assert settings.http_timeout_seconds == 5
    assert settings.web_port == 5000


def test_unknown_log_level(monkeypatch):
    monkeypatch.setenv("BEYMETA_LOG_LEVEL", "CHATTY")
    assert Settings.from_env().log_level_value == logging.INFO
