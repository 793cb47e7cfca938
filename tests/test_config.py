from chatboat.config import Settings
from chatboat.db import _normalize_database_url


def make_settings(**overrides):
    values = {"google_api_key": "test-key", "google_chat_model": "gemini-1.5-flash"}
    values.update(overrides)
    return Settings(**values)


def test_llm_is_configured_with_valid_settings():
    assert make_settings().llm_is_configured()


def test_llm_is_not_configured_without_api_key():
    assert not make_settings(google_api_key="").llm_is_configured()
    assert not make_settings(google_api_key="   ").llm_is_configured()


def test_llm_is_not_configured_with_out_of_range_values():
    assert not make_settings(google_max_tokens=0).llm_is_configured()
    assert not make_settings(google_temperature=2.5).llm_is_configured()
    assert not make_settings(google_temperature=-0.1).llm_is_configured()
    assert not make_settings(google_chat_model="").llm_is_configured()


def test_max_file_size_bytes():
    assert make_settings(max_file_size_mb=10).max_file_size_bytes == 10 * 1024 * 1024


def test_normalize_database_url():
    assert _normalize_database_url("postgres://u:p@h/db") == "postgresql+psycopg2://u:p@h/db"
    assert _normalize_database_url("postgresql://u:p@h/db") == "postgresql+psycopg2://u:p@h/db"
    assert _normalize_database_url("postgresql+psycopg://u:p@h/db") == "postgresql+psycopg2://u:p@h/db"
    assert _normalize_database_url("sqlite://") == "sqlite://"
