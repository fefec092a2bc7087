"""
Sequential human-readable codes: ``ITM-0001``, ``SALE-0042``, ...

Each prefix has one ``code_sequences`` row holding the last number handed
out. ``generate_next_code`` locks that row, increments it, and formats the
result, so two transactions asking for the same prefix are serialized by the
row lock instead of both reading the same "last code".

The counter never falls behind the greatest code already stored in the
prefix's table: a missing counter is seeded from it, and rows written behind
the counter's back (imports, manual fixes) are skipped over. Codes are compared
by length first and then lexicographically, which is numeric order for
``<PREFIX>-<digits>`` codes even once the counter passes 9999 and the suffix
widens.

The counter row is only written through the caller's session; if the caller's
unit of work rolls back, the number is not consumed. Two first-ever calls for
the same prefix racing each other end with one of them hitting the primary
key of ``code_sequences``, which ``transaction()`` reports as ConflictError.
"""

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.catalog import CODE_DIGITS, CODE_PREFIXES, normalize_code
from app.core.errors import InvalidArgumentError
from app.core.observability import log_event
from app.models.inventory import CodeSequence, InventoryItem
from app.models.sales import Sale

# Prefixes whose codes live in a table of this service.
_CODE_COLUMNS = {
    "ITM": InventoryItem.item_code,
    "SALE": Sale.sale_code,
}


def format_code(prefix: str, number: int) -> str:
    return f"{prefix}-{number:0{CODE_DIGITS}d}"


def parse_code_number(code: str) -> int:
    _prefix, _sep, suffix = code.rpartition("-")
    return int(suffix) if suffix.isdigit() else 0


def find_last_code(db: Session, prefix: str) -> str | None:
    column = _CODE_COLUMNS.get(prefix)
    if column is None:
        return None
    return db.execute(
        select(column)
        .where(column.like(f"{prefix}-%"))
        .order_by(func.length(column).desc(), column.desc())
        .limit(1)
    ).scalar_one_or_none()


def generate_next_code(db: Session, prefix: str) -> str:
    prefix = normalize_code(prefix)
    if prefix not in CODE_PREFIXES:
        raise InvalidArgumentError(f"Unknown code prefix: {prefix}")

    counter = db.execute(
        select(CodeSequence)
        .where(CodeSequence.prefix == prefix)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()

    last_code = find_last_code(db, prefix)
    stored_max = parse_code_number(last_code) if last_code else 0

    if counter is None:
        counter = CodeSequence(prefix=prefix, last_value=stored_max)
        db.add(counter)

    counter.last_value = max(counter.last_value, stored_max) + 1
    db.flush()

    code = format_code(prefix, counter.last_value)
    log_event("code.generated", level="debug", prefix=prefix, code=code)
    return code
