from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.catalog import (
    COLLECTION_NAMES,
    MOVEMENT_STATUSES,
    MOVEMENT_TYPES,
    SIZES,
    VENDOR_MARKER,
    normalize_code,
    normalize_location_code,
)
from app.core.config import settings
from app.core.errors import ConflictError, InvalidArgumentError, NotFoundError
from app.core.id_utils import generate_shortuuid
from app.core.money import to_money
from app.core.observability import log_event
from app.db.unit_of_work import transaction
from app.models.inventory import InventoryItem, StockMovement, utcnow
from app.services.code_generator import generate_next_code

EDITABLE_DETAIL_FIELDS = (
    "category",
    "vendor_name",
    "supplier_name",
    "cost_price",
    "selling_price",
    "remarks",
)


@dataclass(frozen=True)
class StockChangeResult:
    item: InventoryItem
    movement: StockMovement | None


def require_actor(actor: str | None) -> str:
    cleaned = (actor or "").strip()
    if not cleaned:
        raise InvalidArgumentError("Actor name is required")
    return cleaned


def require_location(location_code: str | None) -> str:
    code = normalize_location_code(location_code)
    if code not in settings.locations:
        raise InvalidArgumentError(f"Unknown location code: {code or '<empty>'}")
    return code


def find_active_item(
    db: Session,
    item_code: str,
    *,
    location_code: str | None = None,
    lock: bool = False,
) -> InventoryItem | None:
    stmt = select(InventoryItem).where(
        InventoryItem.item_code == normalize_code(item_code),
        InventoryItem.is_active.is_(True),
    )
    if location_code is not None:
        stmt = stmt.where(InventoryItem.location_code == normalize_location_code(location_code))
    if lock:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    return db.execute(stmt).scalar_one_or_none()


def get_active_item(db: Session, item_code: str, *, lock: bool = False) -> InventoryItem:
    item = find_active_item(db, item_code, lock=lock)
    if not item:
        raise NotFoundError("Inventory item not found")
    return item


def find_active_by_identity(
    db: Session,
    *,
    collection_name: str,
    design_name: str,
    color: str,
    size: str,
    location_code: str,
    lock: bool = False,
) -> InventoryItem | None:
    stmt = select(InventoryItem).where(
        InventoryItem.collection_name == collection_name,
        InventoryItem.design_name == design_name,
        InventoryItem.color == color,
        InventoryItem.size == size,
        InventoryItem.location_code == location_code,
        InventoryItem.is_active.is_(True),
    )
    if lock:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    return db.execute(stmt).scalar_one_or_none()


def add_movement(
    db: Session,
    *,
    item_code: str,
    movement_type: str,
    quantity: int,
    processed_by: str,
    from_location_code: str | None = None,
    to_location_code: str | None = None,
    notes: str | None = None,
    reference_number: str | None = None,
    status: str = "completed",
) -> StockMovement:
    if movement_type not in MOVEMENT_TYPES:
        raise InvalidArgumentError(f"Unknown movement type: {movement_type}")
    if quantity < 1:
        raise InvalidArgumentError("Movement quantity must be a positive magnitude")
    if status not in MOVEMENT_STATUSES:
        raise InvalidArgumentError(f"Unknown movement status: {status}")

    entry = StockMovement(
        id=generate_shortuuid(),
        item_code=item_code,
        movement_type=movement_type,
        from_location_code=from_location_code,
        to_location_code=to_location_code,
        quantity=quantity,
        processed_by=processed_by,
        movement_date=utcnow(),
        notes=notes,
        reference_number=reference_number,
        status=status,
    )
    db.add(entry)
    return entry


def receive_stock(
    db: Session,
    *,
    collection_name: str,
    design_name: str,
    color: str,
    size: str,
    location_code: str,
    received_by: str,
    vendor_name: str,
    in_house_stock: int = 0,
    out_source_stock: int = 0,
    supplier_name: str | None = None,
    cost_price: Decimal | float | int = 0,
    selling_price: Decimal | float | int = 0,
    remarks: str | None = None,
    category: str = "clothing",
) -> StockChangeResult:
    """Register an initial stock receipt as a new inventory record."""
    actor = require_actor(received_by)
    location_code = require_location(location_code)
    if collection_name not in COLLECTION_NAMES:
        raise InvalidArgumentError(f"Unknown collection: {collection_name}")
    if size not in SIZES:
        raise InvalidArgumentError(f"Unknown size: {size}")
    if in_house_stock < 0 or out_source_stock < 0:
        raise InvalidArgumentError("Stock quantities cannot be negative")
    design_name = design_name.strip()
    color = color.strip()
    vendor_name = vendor_name.strip()
    if not design_name or not color or not vendor_name:
        raise InvalidArgumentError("Design name, color and vendor name are required")

    with transaction(db, operation="receive"):
        existing = find_active_by_identity(
            db,
            collection_name=collection_name,
            design_name=design_name,
            color=color,
            size=size,
            location_code=location_code,
        )
        if existing:
            raise ConflictError(
                f"Item {existing.item_code} already holds this design, color and size at location {location_code}",
                details={"item_code": existing.item_code},
            )

        item = InventoryItem(
            item_code=generate_next_code(db, "ITM"),
            collection_name=collection_name,
            design_name=design_name,
            color=color,
            size=size,
            category=(category or "clothing").strip(),
            location_code=location_code,
            in_house_stock=in_house_stock,
            out_source_stock=out_source_stock,
            quantity_sold=0,
            vendor_name=vendor_name,
            supplier_name=supplier_name,
            cost_price=to_money(cost_price),
            selling_price=to_money(selling_price),
            remarks=remarks,
            received_date=utcnow(),
            received_by=actor,
            is_active=True,
        )
        item.recompute_quantity()
        item.touch(actor)
        db.add(item)

        movement = None
        if item.quantity > 0:
            movement = add_movement(
                db,
                item_code=item.item_code,
                movement_type="received",
                quantity=item.quantity,
                processed_by=actor,
                from_location_code=VENDOR_MARKER,
                to_location_code=location_code,
                notes=f"Initial stock received from {vendor_name}",
            )
        db.flush()

    log_event(
        "stock.received",
        item_code=item.item_code,
        location_code=location_code,
        quantity=item.quantity,
        received_by=actor,
    )
    return StockChangeResult(item=item, movement=movement)


def adjust_stock(
    db: Session,
    *,
    item_code: str,
    in_house_delta: int = 0,
    out_source_delta: int = 0,
    actor: str,
    notes: str | None = None,
    movement_type: str = "adjusted",
) -> StockChangeResult:
    """
    Apply signed deltas to one record's in-house and out-source stock.

    Each field is clamped at zero rather than rejected, and the ledger entry
    records the magnitude actually applied: taking 100 from 10 in-house units
    leaves 0 and logs 10.
    """
    actor = require_actor(actor)
    if movement_type not in MOVEMENT_TYPES:
        raise InvalidArgumentError(f"Unknown movement type: {movement_type}")
    if movement_type == "transferred":
        raise InvalidArgumentError("Use the transfer operation to move stock between locations")

    with transaction(db, operation="adjust"):
        item = get_active_item(db, item_code, lock=True)

        in_house_before = item.in_house_stock
        out_source_before = item.out_source_stock
        item.in_house_stock = max(0, in_house_before + in_house_delta)
        item.out_source_stock = max(0, out_source_before + out_source_delta)
        item.recompute_quantity()
        item.touch(actor)

        applied = (item.in_house_stock - in_house_before) + (item.out_source_stock - out_source_before)
        movement = None
        if applied != 0:
            direction = "increased" if applied > 0 else "decreased"
            movement = add_movement(
                db,
                item_code=item.item_code,
                movement_type=movement_type,
                quantity=abs(applied),
                processed_by=actor,
                from_location_code=item.location_code if applied < 0 else None,
                to_location_code=item.location_code if applied > 0 else None,
                notes=notes or f"Stock {direction} by {abs(applied)}",
            )
        db.flush()

    log_event(
        "stock.adjusted",
        item_code=item.item_code,
        requested_in_house_delta=in_house_delta,
        requested_out_source_delta=out_source_delta,
        applied=applied,
        updated_by=actor,
    )
    return StockChangeResult(item=item, movement=movement)


def update_item_details(db: Session, *, item_code: str, actor: str, changes: dict) -> InventoryItem:
    actor = require_actor(actor)
    unknown = set(changes) - set(EDITABLE_DETAIL_FIELDS)
    if unknown:
        raise InvalidArgumentError(f"Fields cannot be edited here: {', '.join(sorted(unknown))}")

    with transaction(db, operation="update_details"):
        item = get_active_item(db, item_code, lock=True)
        for field_name, value in changes.items():
            if field_name in {"cost_price", "selling_price"}:
                value = to_money(value)
            setattr(item, field_name, value)
        item.touch(actor)
        db.flush()

    log_event("item.updated", item_code=item.item_code, fields=sorted(changes), updated_by=actor)
    return item


def deactivate_item(db: Session, *, item_code: str, actor: str) -> InventoryItem:
    actor = require_actor(actor)
    with transaction(db, operation="deactivate"):
        item = get_active_item(db, item_code, lock=True)
        item.is_active = False
        item.touch(actor)
        db.flush()

    log_event("item.deactivated", item_code=item.item_code, updated_by=actor)
    return item
