"""Raw-document <-> domain conversion for the JSON store.

Documents use the snake_case field names of the original collections,
so data exported from the hosted database can be loaded as-is.  Unknown
inventory fields are kept in ``InventoryItem.attributes``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from stockledger.domain.model.inventory import InventoryItem
from stockledger.domain.model.order import (
    CancellationIntent,
    DeliveryStatus,
    InvoiceStatus,
    Order,
    OrderStatus,
)
from stockledger.domain.model.transaction import Transaction, TransactionType
from stockledger.domain.model.value_objects import NO_WARRANTY, ItemStatus, Warranty

_INVENTORY_FIELDS = frozenset(
    {
        "serial_number",
        "equipment_category",
        "category",
        "model",
        "size",
        "status",
        "equipment_model",
        "batch",
        "remark",
    }
)


# --- Dates --------------------------------------------------------------------


def _date_to_raw(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _date_from_raw(raw: str | None) -> datetime | None:
    if raw is None:
        return None
    parsed = datetime.fromisoformat(raw)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# --- Transactions -------------------------------------------------------------


def transaction_to_raw(txn: Transaction) -> dict[str, Any]:
    return {
        "transaction_id": txn.transaction_id,
        "serial_number": txn.serial_number,
        "type": txn.type.value,
        "status": txn.status.value,
        "date": _date_to_raw(txn.date),
        "original_transaction_id": txn.original_transaction_id,
        "cancelled_from_order": txn.cancelled_from_order,
        "equipment_category": txn.equipment_category,
        "model": txn.model,
        "size": txn.size,
        "location": txn.location,
        "customer_dealer": txn.customer_dealer,
        "customer_client": txn.customer_client,
        "warranty_type": txn.warranty.type if txn.warranty else None,
        "warranty_period": txn.warranty.period if txn.warranty else None,
        "cancellation_reason": txn.cancellation_reason,
        "source": txn.source,
        "uploaded_by_uid": txn.uploaded_by_uid,
    }


def transaction_from_raw(raw: dict[str, Any]) -> Transaction:
    warranty = None
    if raw.get("warranty_type") is not None or raw.get("warranty_period") is not None:
        warranty = Warranty(
            raw.get("warranty_type") or NO_WARRANTY,
            int(raw.get("warranty_period") or 0),
        )
    return Transaction(
        transaction_id=int(raw["transaction_id"]),
        serial_number=raw["serial_number"],
        type=TransactionType(raw["type"]),
        status=ItemStatus(raw["status"]),
        date=_date_from_raw(raw.get("date")) or datetime.fromtimestamp(0, timezone.utc),
        original_transaction_id=raw.get("original_transaction_id"),
        cancelled_from_order=raw.get("cancelled_from_order"),
        equipment_category=raw.get("equipment_category") or raw.get("category"),
        model=raw.get("model"),
        size=raw.get("size"),
        location=raw.get("location"),
        customer_dealer=raw.get("customer_dealer"),
        customer_client=raw.get("customer_client"),
        warranty=warranty,
        cancellation_reason=raw.get("cancellation_reason"),
        source=raw.get("source"),
        uploaded_by_uid=raw.get("uploaded_by_uid"),
    )


# --- Inventory ----------------------------------------------------------------


def inventory_to_raw(item: InventoryItem) -> dict[str, Any]:
    raw: dict[str, Any] = dict(item.attributes)
    raw.update(
        {
            "serial_number": item.serial_number,
            "equipment_category": item.equipment_category,
            "model": item.model,
            "size": item.size,
            "status": item.status.value,
            "equipment_model": item.equipment_model,
            "batch": item.batch,
            "remark": item.remark,
        }
    )
    return raw


def inventory_from_raw(raw: dict[str, Any]) -> InventoryItem:
    return InventoryItem(
        serial_number=raw["serial_number"],
        equipment_category=raw.get("equipment_category") or raw.get("category") or "",
        model=raw.get("model") or "",
        size=raw.get("size") or None,
        status=ItemStatus(raw.get("status") or ItemStatus.ACTIVE.value),
        equipment_model=raw.get("equipment_model"),
        batch=raw.get("batch") or "",
        remark=raw.get("remark") or "",
        attributes={
            key: value
            for key, value in raw.items()
            if key not in _INVENTORY_FIELDS and isinstance(value, str)
        },
    )


# --- Orders -------------------------------------------------------------------


def _intent_to_raw(intent: CancellationIntent | None) -> dict[str, Any] | None:
    if intent is None:
        return None
    return {
        "reason": intent.reason,
        "actor_id": intent.actor_id,
        "requested_at": _date_to_raw(intent.requested_at),
        # JSON object keys are strings; keep pairs to preserve int ids.
        "reversal_ids": [[orig, rev] for orig, rev in intent.reversal_ids.items()],
    }


def _intent_from_raw(raw: dict[str, Any] | None) -> CancellationIntent | None:
    if raw is None:
        return None
    return CancellationIntent(
        reason=raw["reason"],
        actor_id=raw["actor_id"],
        requested_at=_date_from_raw(raw["requested_at"]),  # type: ignore[arg-type]
        reversal_ids={int(orig): int(rev) for orig, rev in raw["reversal_ids"]},
    )


def order_to_raw(order: Order) -> dict[str, Any]:
    return {
        "id": order.id,
        "order_number": order.order_number,
        "transaction_ids": list(order.transaction_ids),
        "customer_dealer": order.customer_dealer,
        "customer_client": order.customer_client,
        "location": order.location,
        "order_status": order.order_status.value,
        "invoice_status": order.invoice_status.value,
        "delivery_status": order.delivery_status.value,
        "created_at": _date_to_raw(order.created_at),
        "created_by_uid": order.created_by_uid,
        "invoice_number": order.invoice_number,
        "delivery_transaction_ids": list(order.delivery_transaction_ids),
        "cancellation_reason": order.cancellation_reason,
        "cancelled_by_uid": order.cancelled_by_uid,
        "cancelled_at": _date_to_raw(order.cancelled_at),
        "original_invoice_status": (
            order.original_invoice_status.value if order.original_invoice_status else None
        ),
        "original_delivery_status": (
            order.original_delivery_status.value if order.original_delivery_status else None
        ),
        "cancellation_transaction_ids": list(order.cancellation_transaction_ids),
        "missing_transaction_ids": list(order.missing_transaction_ids),
        "cancellation_intent": _intent_to_raw(order.cancellation_intent),
        "version": order.version,
    }


def order_from_raw(raw: dict[str, Any]) -> Order:
    original_invoice = raw.get("original_invoice_status")
    original_delivery = raw.get("original_delivery_status")
    return Order(
        id=int(raw["id"]),
        order_number=raw["order_number"],
        transaction_ids=[int(t) for t in raw.get("transaction_ids") or []],
        customer_dealer=raw.get("customer_dealer") or "",
        customer_client=raw.get("customer_client") or "",
        location=raw.get("location") or "",
        order_status=OrderStatus(raw.get("order_status") or OrderStatus.PENDING.value),
        invoice_status=InvoiceStatus(raw.get("invoice_status") or InvoiceStatus.RESERVED.value),
        delivery_status=DeliveryStatus(
            raw.get("delivery_status") or DeliveryStatus.PENDING.value
        ),
        created_at=_date_from_raw(raw.get("created_at")) or datetime.fromtimestamp(0, timezone.utc),
        created_by_uid=raw.get("created_by_uid"),
        invoice_number=raw.get("invoice_number"),
        delivery_transaction_ids=[int(t) for t in raw.get("delivery_transaction_ids") or []],
        cancellation_reason=raw.get("cancellation_reason"),
        cancelled_by_uid=raw.get("cancelled_by_uid"),
        cancelled_at=_date_from_raw(raw.get("cancelled_at")),
        original_invoice_status=InvoiceStatus(original_invoice) if original_invoice else None,
        original_delivery_status=DeliveryStatus(original_delivery) if original_delivery else None,
        cancellation_transaction_ids=[
            int(t) for t in raw.get("cancellation_transaction_ids") or []
        ],
        missing_transaction_ids=[int(t) for t in raw.get("missing_transaction_ids") or []],
        cancellation_intent=_intent_from_raw(raw.get("cancellation_intent")),
        version=int(raw.get("version", 0)),
    )
