"""Warehouse backend HTTP client.

Low-level async client for the warehouse REST API.
Handles JSON encoding, error classification and payload validation.
There are no retries: a failed call surfaces immediately as a
WarehouseApiError subclass and the caller decides what to keep.
"""

from typing import Any, Dict, List, Optional, Union
from dataclasses import dataclass
import asyncio
import json
import time
import uuid

import aiohttp
from pydantic import ValidationError

from core.observability.logging import get_logger, with_correlation
from models.api_responses import MutationResult
from models.records import COLLECTION_MODELS, RecordBase, TransactionalCollection
from models.reference import ReferenceSet

logger = get_logger(__name__)


class WarehouseApiError(Exception):
    """Base exception for warehouse API errors."""
    def __init__(self, message: str, status_code: int = 0, response_body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class WarehouseHttpError(WarehouseApiError):
    """Backend answered with an error status (>= 400)."""
    pass


class WarehouseConnectionError(WarehouseApiError):
    """Network failure or timeout before a response arrived."""
    pass


class WarehousePayloadError(WarehouseApiError):
    """Response body is not JSON or does not have the expected shape."""
    pass


COLLECTION_ENDPOINTS: Dict[TransactionalCollection, str] = {
    TransactionalCollection.ORE_BATCHES: "ore-batches",
    TransactionalCollection.EQUIPMENT: "equipment",
    TransactionalCollection.ORDERS: "orders",
    TransactionalCollection.SHIPMENTS: "shipments",
    TransactionalCollection.LOGS: "logs",
    TransactionalCollection.SALES: "sales",
}

REFERENCE_ENDPOINT = "reference-data"


@dataclass
class WarehouseApiConfig:
    """Configuration for the warehouse API client."""
    base_url: str = "http://localhost:8080"
    api_prefix: str = "/api"
    timeout_seconds: float = 10.0

    def build_url(self, endpoint: str) -> str:
        """Get the absolute URL of an API endpoint."""
        base = self.base_url.rstrip("/")
        prefix = "/" + self.api_prefix.strip("/") if self.api_prefix.strip("/") else ""
        return f"{base}{prefix}/{endpoint.lstrip('/')}"


class WarehouseApiClient:
    """HTTP client for the warehouse backend.

    Provides:
    - Reference data and collection reads, validated into models
    - JSON POST/PUT mutations returning the backend's message
    - Typed errors for HTTP, network and payload failures

    Usage:
        async with WarehouseApiClient(WarehouseApiConfig()) as client:
            refs = await client.get_reference_data()
            batches = await client.list_collection("ore_batches")
    """

    def __init__(self, api_config: Optional[WarehouseApiConfig] = None):
        self.api_config = api_config or WarehouseApiConfig()
        self._session: Optional[aiohttp.ClientSession] = None

    async def connect(self) -> None:
        """Open the HTTP session."""
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=self.api_config.timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)

    async def disconnect(self) -> None:
        """Close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "WarehouseApiClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()

    @property
    def connected(self) -> bool:
        return self._session is not None

    async def _request(
        self,
        method: str,
        endpoint: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Make an API request and decode the JSON body.

        Args:
            method: HTTP method
            endpoint: Endpoint relative to the API prefix
            data: JSON request body

        Returns:
            Decoded JSON (object or array)

        Raises:
            WarehouseHttpError: Error status from the backend
            WarehouseConnectionError: Network failure or timeout
            WarehousePayloadError: Body is not decodable text or not valid JSON
        """
        if not self._session:
            raise WarehouseApiError("Not connected. Call connect() first.")

        url = self.api_config.build_url(endpoint)
        request_id = uuid.uuid4().hex

        with with_correlation(request_id=request_id):
            started = time.monotonic()
            logger.debug(f"{method} {url}")
            try:
                async with self._session.request(
                    method,
                    url,
                    json=data,
                    headers={"Accept": "application/json"},
                ) as response:
                    body = await response.read()
                    charset = response.charset or "utf-8"
                    status = response.status
            except asyncio.TimeoutError as e:
                raise WarehouseConnectionError(f"Request timed out: {method} {url}") from e
            except aiohttp.ClientError as e:
                raise WarehouseConnectionError(f"Request failed: {method} {url}: {e}") from e

            duration_ms = (time.monotonic() - started) * 1000
            logger.debug(
                f"{method} {url} -> {status}",
                extra_fields={"status": status, "duration_ms": round(duration_ms, 1)},
            )

            if status >= 400:
                response_text = body.decode("utf-8", errors="replace")
                raise WarehouseHttpError(
                    f"API error {status}: {response_text}",
                    status,
                    response_text,
                )

            try:
                response_text = body.decode(charset)
            except (UnicodeDecodeError, LookupError) as e:
                raise WarehousePayloadError(
                    f"Undecodable body from {url}: {e}",
                    status,
                    body.decode("utf-8", errors="replace"),
                ) from e

            if status == 204 or not response_text:
                return {}

            try:
                return json.loads(response_text)
            except ValueError as e:
                raise WarehousePayloadError(
                    f"Invalid JSON from {url}: {e}",
                    status,
                    response_text,
                ) from e

    async def get_reference_data(self) -> ReferenceSet:
        """Fetch the full reference set in one call."""
        payload = await self._request("GET", REFERENCE_ENDPOINT)
        if not isinstance(payload, dict):
            raise WarehousePayloadError(
                f"Reference data must be an object, got {type(payload).__name__}"
            )
        try:
            return ReferenceSet.model_validate(payload)
        except ValidationError as e:
            raise WarehousePayloadError(f"Unexpected reference data shape: {e}") from e

    async def list_collection(
        self,
        collection: Union[TransactionalCollection, str],
    ) -> List[RecordBase]:
        """Fetch one transactional list.

        Args:
            collection: Collection name (e.g., "ore_batches")

        Returns:
            Records in backend order
        """
        collection = TransactionalCollection(collection)
        payload = await self._request("GET", COLLECTION_ENDPOINTS[collection])

        # An empty body or JSON null means an empty list
        if payload in ({}, None):
            return []
        if not isinstance(payload, list):
            raise WarehousePayloadError(
                f"{collection.value} must be an array, got {type(payload).__name__}"
            )

        model = COLLECTION_MODELS[collection]
        try:
            return [model.model_validate(item) for item in payload]
        except ValidationError as e:
            raise WarehousePayloadError(f"Unexpected {collection.value} shape: {e}") from e

    async def create(
        self,
        collection: Union[TransactionalCollection, str],
        data: Dict[str, Any],
    ) -> MutationResult:
        """POST a new record to a collection."""
        collection = TransactionalCollection(collection)
        payload = await self._request("POST", COLLECTION_ENDPOINTS[collection], data=data)
        return self._mutation_result(payload)

    async def update_sale(self, sale_id: Union[int, str], data: Dict[str, Any]) -> MutationResult:
        """PUT a status change of a legacy sale."""
        endpoint = f"{COLLECTION_ENDPOINTS[TransactionalCollection.SALES]}/{sale_id}"
        payload = await self._request("PUT", endpoint, data=data)
        return self._mutation_result(payload)

    @staticmethod
    def _mutation_result(payload: Any) -> MutationResult:
        if not isinstance(payload, dict):
            raise WarehousePayloadError(
                f"Mutation response must be an object, got {type(payload).__name__}"
            )
        try:
            return MutationResult.model_validate(payload)
        except ValidationError as e:
            raise WarehousePayloadError(f"Unexpected mutation response: {e}") from e
