"""Error taxonomy shared by the ledger, the order lifecycle and the HTTP layer.

Every error carries a machine-checkable ``kind`` and the HTTP status the API
layer answers with. Services raise them; ``orderledger.main`` renders them as
``{"success": false, "error": {"kind": ..., "message": ...}}``.
"""

from __future__ import annotations

from typing import Any, Optional


class OrderLedgerError(Exception):
    kind = "error"
    status_code = 500

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = {key: value for key, value in details.items() if value is not None}

    def to_dict(self) -> dict:
        payload = {"kind": self.kind, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(OrderLedgerError):
    kind = "validation_error"
    status_code = 400


class EmptyItemsError(ValidationError):
    kind = "empty_items"

    def __init__(self, message: str = "Order must contain at least one item."):
        super().__init__(message)


class NoAmountGivenError(ValidationError):
    kind = "no_amount_given"

    def __init__(self, message: str = "Provide a positive increase or decrease amount."):
        super().__init__(message)


class NotFoundError(OrderLedgerError):
    kind = "not_found"
    status_code = 404
    entity = "Record"

    def __init__(self, entity_id: Any, message: Optional[str] = None):
        super().__init__(
            message or "{} {} not found.".format(self.entity, entity_id),
            entity_id=entity_id,
        )
        self.entity_id = entity_id


class CustomerNotFoundError(NotFoundError):
    kind = "customer_not_found"
    entity = "Customer"


class ProductNotFoundError(NotFoundError):
    kind = "product_not_found"
    entity = "Product"


class OrderNotFoundError(NotFoundError):
    kind = "order_not_found"
    entity = "Order"


class StateConflictError(OrderLedgerError):
    kind = "invalid_state"
    status_code = 409

    def __init__(self, order_id: int, current_status: Optional[str], action: str):
        super().__init__(
            "Cannot {} order {} in status {}.".format(action, order_id, current_status),
            order_id=order_id,
            status=current_status,
            action=action,
        )
        self.order_id = order_id
        self.current_status = current_status
        self.action = action


class InsufficientStockError(OrderLedgerError):
    kind = "insufficient_stock"
    status_code = 409

    def __init__(self, product_id: int, requested: int, available: Optional[int], sku: Optional[str] = None):
        label = sku or "#{}".format(product_id)
        if available is None:
            message = "Insufficient stock for product {} (requested {}).".format(label, requested)
        else:
            message = "Insufficient stock for product {} (requested {}, available {}).".format(
                label, requested, available
            )
        super().__init__(
            message,
            product_id=product_id,
            requested=requested,
            available=available,
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class TransactionFailure(OrderLedgerError):
    kind = "transaction_failure"
    status_code = 500

    def __init__(self, message: str = "The operation could not be completed. No changes were saved."):
        super().__init__(message)


__all__ = [
    "CustomerNotFoundError",
    "EmptyItemsError",
    "InsufficientStockError",
    "NoAmountGivenError",
    "NotFoundError",
    "OrderLedgerError",
    "OrderNotFoundError",
    "ProductNotFoundError",
    "StateConflictError",
    "TransactionFailure",
    "ValidationError",
]
