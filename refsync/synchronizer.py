"""Reference Synchronizer.

Fetches reference data and transactional lists from the backend and keeps
every bound selection control consistent with them.

Timing model:
- start() loads reference data once, then every transactional list
  concurrently.
- Each successful load replaces its collection wholesale and repopulates
  the controls that depend on it. There is no debouncing and no
  cancellation, so when two loads of the same list overlap the one that
  completes last wins.
- A failed load (network, HTTP status, JSON, payload shape) is logged and
  counted; in-memory state and control contents stay as they were.
"""

import asyncio
import time
from typing import Any, Iterable, List, Optional, Union

from connectors.warehouse_api import WarehouseApiClient, WarehouseApiError
from core.observability.logging import get_logger, log_fetch_failed, with_correlation
from core.observability.metrics import FetchMetrics, get_metrics
from models.records import TransactionalCollection
from models.reference import ReferenceSet
from refsync.context import SyncContext

logger = get_logger(__name__)

REFERENCE_DATA = "reference_data"

# Lists shown in the dashboard; logs and sales are the legacy pages
STARTUP_COLLECTIONS = (
    TransactionalCollection.ORE_BATCHES,
    TransactionalCollection.EQUIPMENT,
    TransactionalCollection.ORDERS,
    TransactionalCollection.SHIPMENTS,
    TransactionalCollection.LOGS,
    TransactionalCollection.SALES,
)


class ReferenceSynchronizer:
    """Keeps a SyncContext in step with the backend.

    Usage:
        async with WarehouseApiClient(config) as client:
            sync = ReferenceSynchronizer(client)
            sync.context.bind(unit_selector, "units")
            await sync.start()
    """

    def __init__(
        self,
        client: WarehouseApiClient,
        context: Optional[SyncContext] = None,
        metrics: Optional[FetchMetrics] = None,
    ):
        self.client = client
        self.context = context or SyncContext()
        self.metrics = metrics or get_metrics()

    async def load_reference_data(self) -> Optional[ReferenceSet]:
        """Fetch the full reference set and repopulate every bound control.

        Returns:
            The new reference set, or None if the fetch failed and the
            previous state was kept
        """
        with with_correlation(collection=REFERENCE_DATA):
            self.metrics.record_fetch_started(REFERENCE_DATA)
            started = time.monotonic()
            try:
                reference_set = await self.client.get_reference_data()
            except WarehouseApiError as e:
                self.metrics.record_fetch_failed(REFERENCE_DATA, str(e))
                log_fetch_failed(REFERENCE_DATA, e, status_code=e.status_code)
                return None

            duration_ms = (time.monotonic() - started) * 1000
            self.context.replace_reference_set(reference_set)
            controls = self.context.repopulate_all()
            self.refresh_dependent_rows()
            self.metrics.record_fetch_succeeded(REFERENCE_DATA, duration_ms)

            logger.info(
                "Reference data loaded",
                extra_fields={
                    "counts": {
                        name: len(items) for name, items in reference_set.model_dump().items()
                    },
                    "controls": controls,
                    "duration_ms": round(duration_ms, 1),
                },
            )
            return reference_set

    async def load_collection(
        self,
        collection: Union[TransactionalCollection, str],
    ) -> Optional[List[Any]]:
        """Fetch one transactional list and repopulate the controls bound to it.

        Reloading ore batches also refreshes the order line rows.

        Returns:
            The new records, or None if the fetch failed
        """
        collection = TransactionalCollection(collection)
        name = collection.value

        with with_correlation(collection=name):
            self.metrics.record_fetch_started(name)
            started = time.monotonic()
            try:
                records = await self.client.list_collection(collection)
            except WarehouseApiError as e:
                self.metrics.record_fetch_failed(name, str(e))
                log_fetch_failed(name, e, status_code=e.status_code)
                return None

            duration_ms = (time.monotonic() - started) * 1000
            self.context.replace_collection(collection, records)
            controls = self.context.repopulate(collection)
            if collection == TransactionalCollection.ORE_BATCHES:
                self.refresh_dependent_rows()
            self.metrics.record_fetch_succeeded(name, duration_ms)

            logger.info(
                "Collection loaded",
                extra_fields={
                    "items": len(records),
                    "controls": controls,
                    "duration_ms": round(duration_ms, 1),
                },
            )
            return records

    def refresh_dependent_rows(self) -> None:
        """Repopulate each order line selector from the current ore batches.

        Every row keeps its own previous choice when the batch still exists.
        """
        for row in self.context.rows:
            previous = row.selector.value
            selected = self.context.populate_row(row)
            if previous and selected != previous:
                logger.info(
                    "Order line lost its ore batch",
                    extra_fields={"row": row.row_id, "previous": previous},
                )

    async def load_collections(
        self,
        collections: Iterable[Union[TransactionalCollection, str]] = STARTUP_COLLECTIONS,
    ) -> List[Optional[List[Any]]]:
        """Load several lists concurrently; each applies as it completes."""
        return await asyncio.gather(
            *(self.load_collection(collection) for collection in collections)
        )

    async def start(
        self,
        collections: Iterable[Union[TransactionalCollection, str]] = STARTUP_COLLECTIONS,
    ) -> bool:
        """Startup sync: reference data first, then the lists.

        Returns:
            True if every fetch succeeded
        """
        reference_set = await self.load_reference_data()
        results = await self.load_collections(collections)
        ok = reference_set is not None and all(r is not None for r in results)
        logger.info(
            "Startup sync finished" if ok else "Startup sync finished with failures",
            extra_fields={"failed": sum(1 for r in results if r is None) + (reference_set is None)},
        )
        return ok
