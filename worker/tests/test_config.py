import pytest

from tradie_hub.core import config


def test_get_settings_reads_env(monkeypatch):
    monkeypatch.setenv("GOOGLE_PLACES_API_KEY", "abc123")
    monkeypatch.setenv("TRADIES_DATA_FILE", "/tmp/tradies.json")
    monkeypatch.setenv("LICENCE_REGISTER_FILE", "/tmp/register.json")
    monkeypatch.setenv("MAX_API_CALLS", "5")
    monkeypatch.setenv("SEARCH_PAGE_SIZE", "20")
    monkeypatch.setenv("SEARCH_DELAY_SECONDS", "0")
    monkeypatch.setenv("WORKER_PORT", "9100")

    settings = config.get_settings()

    assert settings.google_places_api_key == "abc123"
    assert settings.data_file == "/tmp/tradies.json"
    assert settings.licence_register_file == "/tmp/register.json"
    assert settings.max_api_calls == 5
    assert settings.page_size == 20
    assert settings.search_delay == 0.0
    assert settings.worker_port == 9100
    assert settings.search_api_key() == "abc123"


def test_get_settings_warns_when_missing(monkeypatch, caplog):
    monkeypatch.delenv("GOOGLE_PLACES_API_KEY", raising=False)
    monkeypatch.delenv("LICENCE_REGISTER_FILE", raising=False)
    monkeypatch.delenv("SEARCH_BACKEND", raising=False)
    monkeypatch.delenv("MAX_API_CALLS", raising=False)

    with caplog.at_level("WARNING"):
        settings = config.get_settings()

    messages = " ".join(caplog.messages)
    assert "GOOGLE_PLACES_API_KEY is not configured" in messages
    assert "LICENCE_REGISTER_FILE is not configured" in messages
    assert settings.search_backend == "places"
    assert settings.max_api_calls == 20


def test_search_api_key_requires_credential():
    settings = config.Settings(google_places_api_key="")
    with pytest.raises(config.ConfigError):
        settings.search_api_key()


def test_serpapi_backend_uses_serpapi_key(monkeypatch):
    monkeypatch.setenv("SEARCH_BACKEND", "SerpAPI")
    monkeypatch.setenv("SERPAPI_API_KEY", "serp-key")

    settings = config.get_settings()

    assert settings.search_backend == "serpapi"
    assert settings.search_api_key() == "serp-key"


def test_unknown_backend_rejected(monkeypatch):
    monkeypatch.setenv("SEARCH_BACKEND", "bing")
    with pytest.raises(config.ConfigError):
        config.get_settings()
