"""
Tests for application settings and logging configuration.
"""

import json
import logging
import sys

import pytest
from pydantic import ValidationError

from phi_guard.audit.storage import InMemoryAuditStorage, JsonFileAuditStorage
from phi_guard.logging_config import StructuredFormatter, configure_logging
from phi_guard.service.config import Settings
from phi_guard.service.pipeline import build_audit_logger, build_storage


class TestSettings:
    """Tests for Settings validation and environment loading."""

    @pytest.mark.unit
    def test_defaults(self):
        config = Settings()

        assert config.max_memory_events == 10000
        assert config.max_stored_events == 1000
        assert config.preview_max_length == 200
        assert config.default_redaction_method == "mask"

    @pytest.mark.unit
    def test_reads_prefixed_environment(self, monkeypatch):
        monkeypatch.setenv("PHI_GUARD_MAX_STORED_EVENTS", "50")
        monkeypatch.setenv("PHI_GUARD_LOG_LEVEL", "debug")

        config = Settings()

        assert config.max_stored_events == 50
        assert config.log_level == "DEBUG"

    @pytest.mark.unit
    def test_storage_cannot_exceed_memory(self):
        with pytest.raises(ValidationError):
            Settings(max_memory_events=10, max_stored_events=20)

    @pytest.mark.unit
    def test_rejects_unknown_redaction_method(self):
        with pytest.raises(ValidationError):
            Settings(default_redaction_method="shred")

    @pytest.mark.unit
    def test_rejects_unknown_log_level(self):
        with pytest.raises(ValidationError):
            Settings(log_level="LOUD")

    @pytest.mark.unit
    def test_storage_selection(self, tmp_path):
        assert isinstance(build_storage(Settings()), InMemoryAuditStorage)

        file_backed = build_storage(Settings(audit_store_path=tmp_path / "a.json"))
        assert isinstance(file_backed, JsonFileAuditStorage)
        assert file_backed.capacity == 1000

    @pytest.mark.unit
    def test_build_audit_logger_uses_settings(self):
        config = Settings(max_memory_events=5, max_stored_events=5, user_agent="ui")
        audit = build_audit_logger(config)

        assert audit.max_events == 5
        assert audit.client_context.ip_address == "127.0.0.1"
        assert audit.client_context.user_agent == "ui"


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestLogging:
    """Tests for the structured JSON formatter."""

    @pytest.mark.unit
    def test_formatter_merges_extra_fields(self):
        record = logging.LogRecord(
            "phi_guard.test", logging.INFO, __file__, 10, "Scan done", (), None
        )
        record.match_count = 3

        data = json.loads(StructuredFormatter().format(record))

        assert data["message"] == "Scan done"
        assert data["level"] == "INFO"
        assert data["logger"] == "phi_guard.test"
        assert data["match_count"] == 3
        assert "exception" not in data

    @pytest.mark.unit
    def test_formatter_includes_exception(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.LogRecord(
                "phi_guard.test", logging.ERROR, __file__, 10, "failed", (), sys.exc_info()
            )

        data = json.loads(StructuredFormatter().format(record))
        assert "ValueError: boom" in data["exception"]

    @pytest.mark.unit
    def test_configure_logging(self, restore_root_logger):
        configure_logging("warning")

        assert restore_root_logger.level == logging.WARNING
        assert len(restore_root_logger.handlers) == 1
        assert isinstance(restore_root_logger.handlers[0].formatter, StructuredFormatter)
        assert logging.getLogger("presidio-analyzer").level == logging.WARNING

    @pytest.mark.unit
    def test_configure_logging_unknown_level_falls_back_to_info(self, restore_root_logger):
        configure_logging("chatty")

        assert restore_root_logger.level == logging.INFO
        assert len(restore_root_logger.handlers) == 1
