"""Tests for the process entry point and database bootstrap."""

from unittest.mock import patch

import pytest
from sqlalchemy import inspect

from person_api.core.services import DbSessionService
from person_api.main import main
from person_api.runtime.config.config_data import ConfigData, DatabaseConfig
from person_api.runtime.context import with_context
from person_api.runtime.init_db import init_db


@pytest.fixture
def clean_environment(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ("DB_PATH", "DB_USER", "DB_PASS", "API_SERV_ADDR", "CONFIG_FILE"):
        monkeypatch.delenv(name, raising=False)


def test_startup_aborts_without_required_settings(clean_environment, monkeypatch):
    monkeypatch.setenv("DB_PATH", "localhost/persons")

    with patch("person_api.main.uvicorn.run") as run:
        with pytest.raises(SystemExit) as exc_info:
            main()

    assert exc_info.value.code == 1
    run.assert_not_called()


def test_serves_on_configured_address(clean_environment, monkeypatch):
    monkeypatch.setenv("DB_PATH", "localhost:5432/persons")
    monkeypatch.setenv("DB_USER", "api")
    monkeypatch.setenv("DB_PASS", "secret")
    monkeypatch.setenv("API_SERV_ADDR", "127.0.0.1:9090")

    with patch("person_api.main.uvicorn.run") as run:
        main()

    _, kwargs = run.call_args
    assert kwargs["host"] == "127.0.0.1"
    assert kwargs["port"] == 9090


def test_startup_aborts_on_malformed_address(clean_environment, monkeypatch):
    monkeypatch.setenv("DB_PATH", "localhost:5432/persons")
    monkeypatch.setenv("DB_USER", "api")
    monkeypatch.setenv("DB_PASS", "secret")
    monkeypatch.setenv("API_SERV_ADDR", "localhost:http")

    with patch("person_api.main.uvicorn.run") as run:
        with pytest.raises(SystemExit) as exc_info:
            main()

    assert exc_info.value.code == 1
    run.assert_not_called()


def test_init_db_creates_person_table(tmp_path):
    config = ConfigData(database=DatabaseConfig(url=f"sqlite:///{tmp_path}/persons.db"))

    with with_context(config):
        init_db()

    database_service = DbSessionService(config)
    try:
        assert "person" in inspect(database_service.engine).get_table_names()
    finally:
        database_service.dispose()
