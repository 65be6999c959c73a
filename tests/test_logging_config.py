"""
Test suite for structured logging and configuration
"""

import json
import logging

from pispi_simulator.config import SimulatorConfig
from pispi_simulator.logging_config import (
    JSONFormatter, correlation_id_var, log_action, setup_logging
)


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


class TestJSONFormatter:
    """Test JSON log lines"""

    def setup_method(self):
        """Set up test fixtures"""
        self.logger = logging.getLogger("pispi.test")
        self.handler = ListHandler()
        self.logger.addHandler(self.handler)
        self.logger.setLevel(logging.DEBUG)
        self.formatter = JSONFormatter()

    def teardown_method(self):
        self.logger.removeHandler(self.handler)

    def test_structured_fields(self):
        """Test action, resource and extra are emitted"""
        log_action(self.logger, "info", "Alias created", action="create_alias",
                   resource="compte:CIC1", extra={"type": "SHID"})

        entry = json.loads(self.formatter.format(self.handler.records[0]))
        assert entry["level"] == "INFO"
        assert entry["message"] == "Alias created"
        assert entry["action"] == "create_alias"
        assert entry["resource"] == "compte:CIC1"
        assert entry["extra"] == {"type": "SHID"}
        assert "correlation_id" not in entry

    def test_correlation_id_from_context(self):
        """Test the request correlation id is picked up"""
        token = correlation_id_var.set("req-42")
        try:
            log_action(self.logger, "warning", "Refused", action="create_transfer")
        finally:
            correlation_id_var.reset(token)

        entry = json.loads(self.formatter.format(self.handler.records[0]))
        assert entry["correlation_id"] == "req-42"

    def test_exception_attached(self):
        """Test exc_info is rendered"""
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            log_action(self.logger, "error", "Failed", exc_info=True)

        entry = json.loads(self.formatter.format(self.handler.records[0]))
        assert "RuntimeError: boom" in entry["exception"]


class TestSetupLogging:
    """Test logger setup"""

    def test_single_handler(self):
        """Test repeated setup does not stack handlers"""
        setup_logging("INFO", "json", logger_name="pispi.setup-test")
        logger = setup_logging("DEBUG", "text", logger_name="pispi.setup-test")

        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG
        assert not isinstance(logger.handlers[0].formatter, JSONFormatter)


class TestSimulatorConfig:
    """Test environment-driven configuration"""

    def test_defaults(self):
        """Test default business limits"""
        config = SimulatorConfig()
        assert config.api_port == 3000
        assert config.max_aliases_per_account == 20
        assert config.max_webhooks == 10
        assert "webhook.secret" in config.granted_scopes

    def test_environment_override(self, monkeypatch):
        """Test PISPI_ prefixed variables override defaults"""
        monkeypatch.setenv("PISPI_API_PORT", "8080")
        monkeypatch.setenv("PISPI_MAX_ALIASES_PER_ACCOUNT", "5")

        config = SimulatorConfig()
        assert config.api_port == 8080
        assert config.max_aliases_per_account == 5
