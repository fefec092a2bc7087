"""
Typed errors raised by the inventory core.

Every error carries a machine-readable ``code`` and the HTTP status the API
layer renders it with, so callers catch by type instead of parsing messages:

    InventoryError
    +-- InvalidArgumentError    invalid_argument    400
    +-- NotFoundError           not_found           404
    +-- InsufficientStockError  insufficient_stock  400
    +-- ConflictError           conflict            409
    |   +-- LedgerImmutableError ledger_immutable   409
    +-- PersistenceError        persistence_error   503

``ConflictError`` is retryable: it means a concurrent writer won a race on a
generated code, the identity-tuple uniqueness index, or a record version.
``LedgerImmutableError`` is the exception: an attempt to rewrite history is
never worth retrying. Nothing inside the core retries.
"""

from typing import Any


class InventoryError(Exception):
    code = "inventory_error"
    status_code = 400

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidArgumentError(InventoryError):
    code = "invalid_argument"
    status_code = 400


class NotFoundError(InventoryError):
    code = "not_found"
    status_code = 404


class InsufficientStockError(InventoryError):
    code = "insufficient_stock"
    status_code = 400

    def __init__(self, message: str, *, available: int, requested: int):
        super().__init__(message, details={"available": available, "requested": requested})
        self.available = available
        self.requested = requested


class ConflictError(InventoryError):
    code = "conflict"
    status_code = 409


class PersistenceError(InventoryError):
    code = "persistence_error"
    status_code = 503


class LedgerImmutableError(ConflictError):
    code = "ledger_immutable"
