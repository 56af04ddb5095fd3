"""
Environment Configuration Tests

Validates warehouse_client:
1. API settings come from WAREHOUSE_API_* variables with defaults
2. Logging settings from WAREHOUSE_LOG_* replace the default configuration
"""

import logging

import pytest

from core.observability.logging import (
    HumanReadableFormatter,
    StructuredFormatter,
    configure_logging,
    get_logger,
)
from warehouse_client import configure_logging_from_env, create_client, load_api_config


@pytest.fixture
def restore_logging():
    yield
    configure_logging(level=logging.INFO, json_format=False, force=True)


class TestApiConfig:
    """WAREHOUSE_API_* variables."""

    def test_defaults(self, monkeypatch):
        for name in ("WAREHOUSE_API_URL", "WAREHOUSE_API_PREFIX", "WAREHOUSE_API_TIMEOUT"):
            monkeypatch.delenv(name, raising=False)

        config = load_api_config()

        assert config.build_url("orders") == "http://localhost:8080/api/orders"
        assert config.timeout_seconds == 10.0

    def test_values_from_environment(self, monkeypatch):
        monkeypatch.setenv("WAREHOUSE_API_URL", "http://backend:9000/")
        monkeypatch.setenv("WAREHOUSE_API_PREFIX", "/v2")
        monkeypatch.setenv("WAREHOUSE_API_TIMEOUT", "2.5")

        client = create_client()

        assert client.api_config.build_url("reference-data") == "http://backend:9000/v2/reference-data"
        assert client.api_config.timeout_seconds == 2.5

    @pytest.mark.parametrize("raw", ["soon", "0", "-1", "nan"])
    def test_invalid_timeout(self, monkeypatch, raw):
        monkeypatch.setenv("WAREHOUSE_API_TIMEOUT", raw)
        with pytest.raises(ValueError):
            load_api_config()


class TestLoggingFromEnv:
    """WAREHOUSE_LOG_* variables."""

    def test_level_and_format_replace_default(self, monkeypatch, restore_logging):
        get_logger("refsync.test_env")
        monkeypatch.setenv("WAREHOUSE_LOG_LEVEL", "debug")
        monkeypatch.setenv("WAREHOUSE_LOG_JSON", "true")

        configure_logging_from_env()

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert logging.getLogger("refsync").level == logging.DEBUG
        ours = [h for h in root.handlers if isinstance(h.formatter, (StructuredFormatter, HumanReadableFormatter))]
        assert len(ours) == 1
        assert isinstance(ours[0].formatter, StructuredFormatter)

    def test_reconfiguring_does_not_stack_handlers(self, monkeypatch, restore_logging):
        monkeypatch.setenv("WAREHOUSE_LOG_LEVEL", "WARNING")
        monkeypatch.delenv("WAREHOUSE_LOG_JSON", raising=False)

        configure_logging_from_env()
        configure_logging_from_env()

        root = logging.getLogger()
        ours = [h for h in root.handlers if isinstance(h.formatter, (StructuredFormatter, HumanReadableFormatter))]
        assert len(ours) == 1
        assert isinstance(ours[0].formatter, HumanReadableFormatter)
        assert root.level == logging.WARNING

    def test_unknown_level(self, monkeypatch):
        monkeypatch.setenv("WAREHOUSE_LOG_LEVEL", "chatty")
        with pytest.raises(ValueError):
            configure_logging_from_env()
