"""Form state, client-side validation and mutation submission.

Required fields are checked before anything is sent; a missing field is
reported through the Notifier and no request is made. A successful
mutation shows the backend's message, resets the form and re-fetches the
affected lists in full. Nothing is updated optimistically.
"""

import asyncio
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from connectors.warehouse_api import WarehouseApiClient, WarehouseApiError
from core.observability.logging import get_logger, with_correlation
from core.observability.metrics import record_submission
from models.api_responses import MutationResult
from models.records import TransactionalCollection
from refsync.context import OrderLineRow
from refsync.selection import SelectionControl
from refsync.synchronizer import ReferenceSynchronizer

logger = get_logger(__name__)

SALE_WRITTEN_OFF = "Written off"


# =============================================================================
# Notifications
# =============================================================================

class Notifier(ABC):
    """Blocking user notifications (alert and confirm dialogs)."""

    @abstractmethod
    def alert(self, message: str) -> None:
        ...

    @abstractmethod
    def confirm(self, message: str) -> bool:
        ...


class LoggingNotifier(Notifier):
    """Notifier for headless use: logs alerts and answers confirms with a fixed reply."""

    def __init__(self, auto_confirm: bool = True):
        self.auto_confirm = auto_confirm
        self.messages: List[str] = []

    def alert(self, message: str) -> None:
        self.messages.append(message)
        logger.info(f"Alert: {message}")

    def confirm(self, message: str) -> bool:
        logger.info(f"Confirm: {message} -> {self.auto_confirm}")
        return self.auto_confirm


# =============================================================================
# Form state and validation
# =============================================================================

class FieldKind(str, Enum):
    TEXT = "text"
    FLOAT = "float"
    INT = "int"
    ID = "id"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    kind: FieldKind = FieldKind.TEXT
    required: bool = False


class MissingFieldsError(ValueError):
    """Required form fields are empty, unparsable or zero."""

    def __init__(self, fields: Sequence[str]):
        self.fields = list(fields)
        super().__init__(f"Fill in the required fields: {', '.join(self.fields)}")


class FormState:
    """Raw form inputs keyed by field name.

    A field holds either the text typed by the user or a SelectionControl
    whose current value is read at submission time.
    """

    def __init__(self, name: str, /, **fields: Union[str, SelectionControl]):
        self.name = name
        self._fields: Dict[str, Union[str, SelectionControl]] = dict(fields)

    def __setitem__(self, field: str, value: Union[str, SelectionControl]) -> None:
        self._fields[field] = value

    def __getitem__(self, field: str) -> str:
        return self.value_of(field)

    def value_of(self, field: str) -> str:
        raw = self._fields.get(field, "")
        if isinstance(raw, SelectionControl):
            return raw.value
        return "" if raw is None else str(raw)

    def control(self, field: str) -> Optional[SelectionControl]:
        raw = self._fields.get(field)
        return raw if isinstance(raw, SelectionControl) else None

    def reset(self) -> None:
        """Clear typed values and put every control back on the sentinel."""
        for field, raw in self._fields.items():
            if isinstance(raw, SelectionControl):
                raw.reset()
            else:
                self._fields[field] = ""


def parse_float(raw: str) -> Optional[float]:
    try:
        value = float(raw.strip().replace(",", "."))
    except ValueError:
        return None
    # nan and inf parse but are not numbers a form can submit
    return value if math.isfinite(value) else None


def parse_int(raw: str) -> Optional[int]:
    value = parse_float(raw)
    if value is None:
        return None
    return int(value)


def parse_id(raw: str) -> Union[int, str, None]:
    raw = raw.strip()
    if not raw:
        return None
    return int(raw) if raw.isdigit() else raw


def parse_field(spec: FieldSpec, raw: str) -> Any:
    if spec.kind == FieldKind.FLOAT:
        return parse_float(raw)
    if spec.kind == FieldKind.INT:
        return parse_int(raw)
    if spec.kind == FieldKind.ID:
        return parse_id(raw)
    return raw.strip()


def build_payload(form: FormState, specs: Iterable[FieldSpec]) -> Dict[str, Any]:
    """Parse a form into a JSON payload.

    Optional fields that are empty or unparsable become None.

    Raises:
        MissingFieldsError: A required field is empty, unparsable or zero
    """
    payload: Dict[str, Any] = {}
    missing: List[str] = []
    for spec in specs:
        value = parse_field(spec, form.value_of(spec.name))
        if spec.required and not value:
            missing.append(spec.name)
        payload[spec.name] = value
    if missing:
        raise MissingFieldsError(missing)
    return payload


def build_order_lines(rows: Iterable[OrderLineRow]) -> List[Dict[str, Any]]:
    """Lines of an order from its dependent rows.

    Raises:
        MissingFieldsError: No rows, or a row without batch or quantity
    """
    lines = []
    missing = []
    for row in rows:
        batch_id = parse_id(row.selector.value)
        quantity = parse_float(row.quantity)
        if not batch_id or not quantity:
            missing.append(f"line {row.row_id}")
            continue
        lines.append({"ore_batch_id": batch_id, "quantity": quantity})
    if not lines and not missing:
        missing.append("lines")
    if missing:
        raise MissingFieldsError(missing)
    return lines


ORE_BATCH_FIELDS = (
    FieldSpec("ore_type_id", FieldKind.ID, required=True),
    FieldSpec("warehouse_id", FieldKind.ID, required=True),
    FieldSpec("unit_id", FieldKind.ID),
    FieldSpec("quantity", FieldKind.FLOAT, required=True),
    FieldSpec("quality", FieldKind.FLOAT),
    FieldSpec("priority"),
)

EQUIPMENT_FIELDS = (
    FieldSpec("category_id", FieldKind.ID, required=True),
    FieldSpec("name", required=True),
    FieldSpec("quantity", FieldKind.INT, required=True),
    FieldSpec("serial_number"),
    FieldSpec("service_life", FieldKind.INT),
    FieldSpec("warehouse_id", FieldKind.ID),
)

ORDER_FIELDS = (
    FieldSpec("contractor_id", FieldKind.ID, required=True),
    FieldSpec("status"),
)

SHIPMENT_FIELDS = (
    FieldSpec("order_id", FieldKind.ID, required=True),
    FieldSpec("transport_id", FieldKind.ID, required=True),
    FieldSpec("quantity", FieldKind.FLOAT),
    FieldSpec("status"),
)

SALE_FIELDS = (
    FieldSpec("ore_type", required=True),
    FieldSpec("buyer"),
    FieldSpec("quantity", FieldKind.FLOAT, required=True),
)


# =============================================================================
# Submission
# =============================================================================

class FormSubmitter:
    """Sends forms to the backend and reloads what they changed."""

    def __init__(
        self,
        client: WarehouseApiClient,
        synchronizer: ReferenceSynchronizer,
        notifier: Optional[Notifier] = None,
    ):
        self.client = client
        self.synchronizer = synchronizer
        self.notifier = notifier or LoggingNotifier()

    @property
    def context(self):
        return self.synchronizer.context

    async def submit_ore_batch(self, form: FormState) -> Optional[MutationResult]:
        return await self._submit(
            form,
            ORE_BATCH_FIELDS,
            TransactionalCollection.ORE_BATCHES,
            reload=(TransactionalCollection.ORE_BATCHES,),
        )

    async def submit_equipment(self, form: FormState) -> Optional[MutationResult]:
        return await self._submit(
            form,
            EQUIPMENT_FIELDS,
            TransactionalCollection.EQUIPMENT,
            reload=(TransactionalCollection.EQUIPMENT,),
        )

    async def submit_order(
        self,
        form: FormState,
        rows: Optional[Sequence[OrderLineRow]] = None,
    ) -> Optional[MutationResult]:
        """Submit an order whose lines come from the dependent rows."""
        rows = self.context.rows if rows is None else rows
        result = await self._submit(
            form,
            ORDER_FIELDS,
            TransactionalCollection.ORDERS,
            reload=(TransactionalCollection.ORDERS, TransactionalCollection.ORE_BATCHES),
            lines=rows,
        )
        if result is not None:
            self.context.clear_dependent_rows()
        return result

    async def submit_shipment(self, form: FormState) -> Optional[MutationResult]:
        return await self._submit(
            form,
            SHIPMENT_FIELDS,
            TransactionalCollection.SHIPMENTS,
            reload=(TransactionalCollection.SHIPMENTS, TransactionalCollection.ORDERS),
        )

    async def update_sale_status(self, sale_id: Union[int, str], status: str) -> Optional[MutationResult]:
        """Change the status of a legacy sale."""
        with with_correlation(form="sale_status"):
            if not status or not status.strip():
                return self._reject("sale_status", MissingFieldsError(["status"]))

            data = {"id": sale_id, "status": status.strip()}
            record_submission("sale_status", "sent")
            try:
                result = await self.client.update_sale(sale_id, data)
            except WarehouseApiError as e:
                return self._fail("sale_status", e)

            return await self._succeed("sale_status", result, (TransactionalCollection.SALES,))

    async def confirm_sale(self, form: FormState) -> Optional[MutationResult]:
        """Write ore off as a legacy sale after the user confirms."""
        if not self.notifier.confirm("Confirm the ore write-off?"):
            return None
        return await self._submit(
            form,
            SALE_FIELDS,
            TransactionalCollection.SALES,
            reload=(TransactionalCollection.SALES,),
            extra={"status": SALE_WRITTEN_OFF},
        )

    # =========================================================================
    # Internals
    # =========================================================================

    async def _submit(
        self,
        form: FormState,
        specs: Tuple[FieldSpec, ...],
        collection: TransactionalCollection,
        reload: Tuple[TransactionalCollection, ...],
        lines: Optional[Sequence[OrderLineRow]] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> Optional[MutationResult]:
        with with_correlation(form=form.name, collection=collection.value):
            try:
                payload = build_payload(form, specs)
                if lines is not None:
                    payload["lines"] = build_order_lines(lines)
            except MissingFieldsError as e:
                return self._reject(form.name, e)

            if extra:
                payload.update(extra)

            record_submission(form.name, "sent")
            try:
                result = await self.client.create(collection, payload)
            except WarehouseApiError as e:
                return self._fail(form.name, e)

            form.reset()
            return await self._succeed(form.name, result, reload)

    def _reject(self, form_name: str, error: MissingFieldsError) -> None:
        record_submission(form_name, "rejected")
        logger.warning("Form rejected", extra_fields={"missing": error.fields})
        self.notifier.alert(str(error))
        return None

    def _fail(self, form_name: str, error: WarehouseApiError) -> None:
        record_submission(form_name, "failed")
        logger.error(
            f"Submission failed: {error}",
            extra_fields={"error_type": type(error).__name__, "status_code": error.status_code},
        )
        self.notifier.alert(f"Error: {error}")
        return None

    async def _succeed(
        self,
        form_name: str,
        result: MutationResult,
        reload: Tuple[TransactionalCollection, ...],
    ) -> MutationResult:
        record_submission(form_name, "succeeded")
        logger.info("Submission accepted", extra_fields={"message": result.message})
        self.notifier.alert(result.message or "Saved")
        await asyncio.gather(*(self.synchronizer.load_collection(c) for c in reload))
        return result
