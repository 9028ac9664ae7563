import pytest

from dailyquest.config import Config


def test_defaults_use_instance_sqlite(monkeypatch, tmp_path):
    for name in ("DAILYQUEST_ENV", "DATABASE_URL", "SQLALCHEMY_DATABASE_URI", "CORS_ORIGINS",
                 "SESSION_TTL_SECONDS", "AI_CHALLENGES_ENABLED", "GEMINI_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    cfg = Config.from_env(instance_dir=str(tmp_path)).validate()
    assert cfg.database_url.startswith("sqlite:///")
    assert cfg.database_url.endswith("dailyquest.db")
    assert cfg.cors_origins == ("*",)
    assert cfg.session_ttl_seconds == 86400
    assert cfg.ai_challenges_enabled is False


def test_postgres_url_is_normalised(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgres://u:p@h/db")
    monkeypatch.delenv("SQLALCHEMY_DATABASE_URI", raising=False)
    assert Config.from_env().database_url == "postgresql://u:p@h/db"


@pytest.mark.parametrize("value", ["abc", "0", "-3"])
def test_bad_ttl(monkeypatch, value):
    monkeypatch.setenv("SESSION_TTL_SECONDS", value)
    with pytest.raises(RuntimeError):
        Config.from_env()


def test_ai_needs_key():
    with pytest.raises(RuntimeError):
        Config(database_url="sqlite://", ai_challenges_enabled=True).validate()


def test_production_needs_real_secret():
    with pytest.raises(RuntimeError):
        Config(env="prod", secret_key="short", database_url="sqlite://").validate()
    Config(env="prod", secret_key="x" * 32, database_url="sqlite://").validate()
