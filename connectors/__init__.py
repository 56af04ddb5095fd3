"""Backend connectors.

The synchronizer and the form layer depend only on WarehouseApiClient and
its error types; nothing above this package touches aiohttp directly.
"""

from connectors.warehouse_api import (
    WarehouseApiClient,
    WarehouseApiConfig,
    WarehouseApiError,
    WarehouseHttpError,
    WarehouseConnectionError,
    WarehousePayloadError,
    COLLECTION_ENDPOINTS,
    REFERENCE_ENDPOINT,
)

__all__ = [
    "WarehouseApiClient",
    "WarehouseApiConfig",
    "WarehouseApiError",
    "WarehouseHttpError",
    "WarehouseConnectionError",
    "WarehousePayloadError",
    "COLLECTION_ENDPOINTS",
    "REFERENCE_ENDPOINT",
]
