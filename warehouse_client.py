"""Warehouse API client factory.

Builds clients and logging configuration from environment variables.
"""

import logging
import math
import os
from pathlib import Path

# Load .env file if it exists
from dotenv import load_dotenv
env_path = Path(__file__).resolve().parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

from connectors.warehouse_api import WarehouseApiClient, WarehouseApiConfig
from core.observability.logging import configure_logging


def load_api_config() -> WarehouseApiConfig:
    """Read the API configuration from the environment.

    Reads:
    - WAREHOUSE_API_URL: Backend root (default "http://localhost:8080")
    - WAREHOUSE_API_PREFIX: Path prefix of the API (default "/api")
    - WAREHOUSE_API_TIMEOUT: Total request timeout in seconds (default 10)

    Raises:
        ValueError: If WAREHOUSE_API_TIMEOUT is not a positive number
    """
    defaults = WarehouseApiConfig()
    raw_timeout = os.getenv("WAREHOUSE_API_TIMEOUT")
    timeout = defaults.timeout_seconds
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ValueError(
                f"WAREHOUSE_API_TIMEOUT must be a number of seconds, got {raw_timeout!r}"
            ) from None
        if not math.isfinite(timeout) or timeout <= 0:
            raise ValueError("WAREHOUSE_API_TIMEOUT must be positive")

    return WarehouseApiConfig(
        base_url=os.getenv("WAREHOUSE_API_URL", defaults.base_url),
        api_prefix=os.getenv("WAREHOUSE_API_PREFIX", defaults.api_prefix),
        timeout_seconds=timeout,
    )


def configure_logging_from_env() -> None:
    """Configure logging from WAREHOUSE_LOG_LEVEL and WAREHOUSE_LOG_JSON."""
    level_name = os.getenv("WAREHOUSE_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        raise ValueError(f"Unknown WAREHOUSE_LOG_LEVEL: {level_name}")
    json_format = os.getenv("WAREHOUSE_LOG_JSON", "").lower() in ("1", "true", "yes")
    configure_logging(level=level, json_format=json_format, force=True)


def create_client() -> WarehouseApiClient:
    """Create a client configured from the environment (not yet connected)."""
    return WarehouseApiClient(load_api_config())
