"""Logging setup is driven by Settings: stdout always, a file when LOG_FILE_PATH is set."""

import logging

import pytest

from swapi_gateway import logging_config as lc
from swapi_gateway.settings import Settings


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


@pytest.fixture
def restore_logging():
    """Reapply the default config after a test reconfigures the root logger."""
    yield
    lc.configure_logging(_settings(), force=True)


def test_stdout_only_without_log_file():
    cfg = lc.build_config(_settings(LOG_FILE_PATH=None))
    assert list(cfg["handlers"]) == ["stdout"]
    assert cfg["root"]["handlers"] == ["stdout"]
    assert cfg["root"]["level"] == "INFO"


def test_log_level_is_normalized_and_applied_to_server_loggers():
    cfg = lc.build_config(_settings(LOG_LEVEL="debug"))
    assert cfg["root"]["level"] == "DEBUG"
    for name in ("uvicorn", "uvicorn.access", "fastapi"):
        assert cfg["loggers"][name]["level"] == "DEBUG"


def test_httpx_stays_quiet_even_at_debug():
    cfg = lc.build_config(_settings(LOG_LEVEL="DEBUG"))
    assert cfg["loggers"]["httpx"]["level"] == "WARNING"
    assert cfg["loggers"]["httpcore"]["level"] == "WARNING"


def test_log_file_path_from_env_adds_file_handler(monkeypatch, tmp_path):
    log_file = tmp_path / "logs" / "gateway.log"
    monkeypatch.setenv("LOG_FILE_PATH", str(log_file))

    cfg = lc.build_config(_settings())
    assert cfg["handlers"]["logfile"]["filename"] == str(log_file)
    assert cfg["root"]["handlers"] == ["stdout", "logfile"]
    # parent directory is created up front so the handler can open the file
    assert log_file.parent.is_dir()


def test_configure_logging_writes_to_file(tmp_path, restore_logging):
    log_file = tmp_path / "gateway.log"
    lc.configure_logging(_settings(LOG_FILE_PATH=str(log_file)), force=True)

    logging.getLogger("swapi_gateway.api").info("upstream.collected url=x pages=1")
    for h in logging.getLogger().handlers:
        h.flush()
    assert "INFO swapi_gateway.api: upstream.collected url=x pages=1" in log_file.read_text()


def test_configure_logging_runs_once_unless_forced(monkeypatch, tmp_path, restore_logging):
    calls = []
    monkeypatch.setattr(lc.logging.config, "dictConfig", lambda cfg: calls.append(cfg))
    monkeypatch.setattr(lc, "_configured", False)

    lc.configure_logging(_settings())
    lc.configure_logging(_settings(LOG_LEVEL="ERROR"))
    assert len(calls) == 1

    lc.configure_logging(_settings(LOG_LEVEL="ERROR"), force=True)
    assert len(calls) == 2
    assert calls[-1]["root"]["level"] == "ERROR"
