"""
Atomic unit of work for multi-record stock operations.

``transaction(db)`` wraps a block of reads and writes against one session:
the block commits as a whole when it exits normally and is rolled back as a
whole when anything raises. Storage failures are translated into the typed
errors from ``app.core.errors`` so the API layer never sees a raw driver
exception:

    IntegrityError   -> ConflictError     (unique code / identity tuple race)
    StaleDataError   -> ConflictError     (record changed since it was read)
    SQLAlchemyError  -> PersistenceError

Domain errors raised inside the block are re-raised unchanged after the
rollback.
"""

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.core.errors import ConflictError, InventoryError, PersistenceError
from app.core.observability import log_event


@contextmanager
def transaction(db: Session, *, operation: str = "inventory") -> Iterator[Session]:
    try:
        yield db
        db.commit()
    except InventoryError:
        db.rollback()
        raise
    except IntegrityError as exc:
        db.rollback()
        log_event("transaction.conflict", level="warning", operation=operation, error=str(exc.orig))
        raise ConflictError("Conflicting concurrent write, please retry") from exc
    except StaleDataError as exc:
        db.rollback()
        log_event("transaction.stale", level="warning", operation=operation, error=str(exc))
        raise ConflictError("Inventory record was modified concurrently, please retry") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        log_event("transaction.failed", level="error", operation=operation, error=str(exc))
        raise PersistenceError("Storage failure, no changes were applied") from exc
    except BaseException:
        db.rollback()
        raise
