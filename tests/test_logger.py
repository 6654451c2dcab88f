"""Tests for consul_roles.logger module."""

import json
import logging
import os
from unittest import mock

import pytest

from consul_roles.logger import (
    Logger,
    StructuredLogger,
    create_logger,
    get_logger,
)


class TestLoggerInterface:
    """Tests for the Logger abstract interface."""

    def test_logger_is_abstract(self):
        with pytest.raises(TypeError):
            Logger()  # type: ignore

    def test_logger_has_required_methods(self):
        for method in ("debug", "info", "warning", "error", "critical", "get_session_id"):
            assert hasattr(Logger, method)


class TestStructuredLogger:
    """Tests for the StructuredLogger implementation."""

    def test_session_id(self):
        logger = StructuredLogger(name="test-session")
        assert len(logger.get_session_id()) == 8
        assert logger.get_session_id() != StructuredLogger(name="test-session-2").get_session_id()

    def test_text_format(self, capsys):
        logger = StructuredLogger(name="test-text")
        logger.info("Reading Consul secrets backend role", path="consul/roles/app")

        out = capsys.readouterr().out
        assert "[INFO]" in out
        assert "[test-text]" in out
        assert f"[session:{logger.get_session_id()}]" in out
        assert "Reading Consul secrets backend role" in out
        assert "path=consul/roles/app" in out

    def test_json_format(self, capsys):
        logger = StructuredLogger(name="test-json", json_format=True)
        logger.warning("Removing consul role", path="bad-id", error="no name found")

        entry = json.loads(capsys.readouterr().out.strip())
        assert entry["level"] == "WARNING"
        assert entry["message"] == "Removing consul role"
        assert entry["logger"] == "test-json"
        assert entry["session_id"] == logger.get_session_id()
        assert entry["path"] == "bad-id"
        assert entry["error"] == "no name found"

    def test_respects_level(self, capsys):
        logger = StructuredLogger(name="test-level", level=logging.WARNING)
        logger.debug("hidden")
        logger.info("hidden too")
        logger.error("shown")

        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "shown" in out

    def test_reserved_keys_are_prefixed(self, capsys):
        """Keys clashing with LogRecord attributes do not raise."""
        logger = StructuredLogger(name="test-reserved", json_format=True)
        logger.info("message", name="app", module="roles")

        entry = json.loads(capsys.readouterr().out.strip())
        assert entry["_name"] == "app"
        assert entry["_module"] == "roles"

    def test_no_duplicate_handlers(self):
        StructuredLogger(name="test-dupe")
        logger = StructuredLogger(name="test-dupe")
        assert len(logger._logger.handlers) == 1

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "roles.log"
        logger = StructuredLogger(name="test-file", log_file=str(log_file))
        logger.info("to file", path="consul/roles/app")

        for handler in logger._logger.handlers:
            handler.flush()
        assert "to file" in log_file.read_text()

    def test_unwritable_log_file(self, tmp_path, capsys):
        logger = StructuredLogger(name="test-bad-file", log_file=str(tmp_path / "missing" / "x.log"))
        assert len(logger._logger.handlers) == 1
        assert "Failed to setup log file" in capsys.readouterr().err


class TestFactories:
    """Tests for create_logger and get_logger."""

    def test_create_logger_returns_structured(self):
        logger = create_logger(name="test-create")
        assert isinstance(logger, StructuredLogger)

    def test_level_from_env(self):
        with mock.patch.dict(os.environ, {"CONSUL_ROLES_LOG_LEVEL": "DEBUG"}):
            logger = create_logger(name="consul-roles")
        assert logger._logger.level == logging.DEBUG

    def test_invalid_level_defaults_to_info(self):
        with mock.patch.dict(os.environ, {"ROLE_STATE_LOG_LEVEL": "CHATTY"}):
            logger = create_logger(name="role-state")
        assert logger._logger.level == logging.INFO

    def test_json_from_env(self, capsys):
        with mock.patch.dict(os.environ, {"VAULT_CLIENT_LOG_JSON": "true"}):
            logger = create_logger(name="vault-client")
        logger.info("json please")
        assert json.loads(capsys.readouterr().out.strip())["message"] == "json please"

    def test_explicit_level_wins(self):
        with mock.patch.dict(os.environ, {"TEST_EXPLICIT_LOG_LEVEL": "DEBUG"}):
            logger = create_logger(name="test-explicit", level=logging.ERROR)
        assert logger._logger.level == logging.ERROR

    def test_get_logger(self):
        assert isinstance(get_logger("test-get"), Logger)
