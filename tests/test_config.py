# tests/test_config.py

from src.Core.config import Settings


def test_env_names_are_case_insensitive(monkeypatch):
    monkeypatch.setenv("device_stale_after_s", "60")
    monkeypatch.setenv("Log_Page_Max_Limit", "100")

    loaded = Settings()

    assert loaded.DEVICE_STALE_AFTER_S == 60
    assert loaded.LOG_PAGE_MAX_LIMIT == 100


def test_defaults(monkeypatch):
    monkeypatch.delenv("DEFAULT_LIGHT_THRESHOLD", raising=False)

    loaded = Settings()

    assert loaded.DEFAULT_LIGHT_THRESHOLD == 300
    assert loaded.DEFAULT_AUTO_MODE_ENABLED is False
    assert Settings.model_config["env_file"] is None
