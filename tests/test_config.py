from hospiscanner.core import config


def test_defaults(monkeypatch):
    monkeypatch.delenv("MAX_ACTIVE_SESSIONS", raising=False)
    monkeypatch.delenv("SESSION_EVENT_HISTORY", raising=False)
    monkeypatch.delenv("CORS_ALLOWED_ORIGINS", raising=False)

    assert config.get_max_active_sessions() == 100
    assert config.get_session_event_history() == 50
    assert config.get_cors_origins() == config.DEFAULT_CORS_ORIGINS


def test_invalid_numbers_fall_back(monkeypatch):
    monkeypatch.setenv("MAX_ACTIVE_SESSIONS", "lots")
    monkeypatch.setenv("SESSION_EVENT_HISTORY", "0")

    assert config.get_max_active_sessions() == 100
    assert config.get_session_event_history() == 50


def test_cors_origins_are_split(monkeypatch):
    monkeypatch.setenv("CORS_ALLOWED_ORIGINS", "https://a.example, https://b.example,,")

    assert config.get_cors_origins() == ["https://a.example", "https://b.example"]


def test_log_level_is_upper_case(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")

    assert config.get_log_level() == "DEBUG"
