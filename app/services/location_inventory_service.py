"""
Moving in-house stock between locations.

A transfer is one unit of work: the source decrement, the destination
increment (creating the destination record when the location has never held
this design/color/size), and the ``transferred`` ledger entry commit together
or not at all.
"""

from dataclasses import dataclass

from sqlalchemy.orm import Session

from app.core.catalog import normalize_code, normalize_location_code
from app.core.config import settings
from app.core.errors import InsufficientStockError, InvalidArgumentError, NotFoundError
from app.core.id_utils import generate_reference_number
from app.core.observability import log_event
from app.db.unit_of_work import transaction
from app.models.inventory import InventoryItem, StockMovement, utcnow
from app.services.code_generator import generate_next_code
from app.services.inventory_service import (
    add_movement,
    find_active_by_identity,
    find_active_item,
    require_actor,
    require_location,
)


@dataclass(frozen=True)
class TransferResult:
    source_item: InventoryItem
    destination_item: InventoryItem
    movement: StockMovement
    destination_created: bool


def resolve_or_create_destination(
    db: Session,
    source: InventoryItem,
    to_location_code: str,
    actor: str,
) -> tuple[InventoryItem, bool]:
    """
    Find the active record at ``to_location_code`` with the source's identity,
    or stage a new zero-stock one that copies the source's descriptive fields.
    """
    destination = find_active_by_identity(
        db,
        collection_name=source.collection_name,
        design_name=source.design_name,
        color=source.color,
        size=source.size,
        location_code=to_location_code,
        lock=True,
    )
    if destination:
        return destination, False

    now = utcnow()
    destination = InventoryItem(
        item_code=generate_next_code(db, "ITM"),
        collection_name=source.collection_name,
        design_name=source.design_name,
        color=source.color,
        size=source.size,
        category=source.category,
        location_code=to_location_code,
        quantity=0,
        in_house_stock=0,
        out_source_stock=0,
        quantity_sold=0,
        vendor_name=source.vendor_name,
        supplier_name=source.supplier_name,
        cost_price=source.cost_price,
        selling_price=source.selling_price,
        remarks=f"Transferred from {source.location_code}",
        received_date=now,
        received_by=actor,
        last_updated=now,
        updated_by=actor,
        is_active=True,
    )
    db.add(destination)
    return destination, True


def transfer_stock(
    db: Session,
    *,
    item_code: str,
    from_location_code: str,
    to_location_code: str,
    quantity: int,
    actor: str,
    notes: str | None = None,
) -> TransferResult:
    item_code = normalize_code(item_code)
    from_location_code = normalize_location_code(from_location_code)
    to_location_code = normalize_location_code(to_location_code)

    if from_location_code == to_location_code:
        raise InvalidArgumentError("Source and destination locations must be different")
    if quantity < 1:
        raise InvalidArgumentError("Transfer quantity must be at least 1")
    actor = require_actor(actor)
    require_location(to_location_code)

    with transaction(db, operation="transfer"):
        source = find_active_item(db, item_code, location_code=from_location_code, lock=True)
        if not source:
            raise NotFoundError(
                "Source inventory item not found",
                details={"item_code": item_code, "location_code": from_location_code},
            )
        if source.in_house_stock < quantity:
            raise InsufficientStockError(
                f"Insufficient stock. Available: {source.in_house_stock}, Requested: {quantity}",
                available=source.in_house_stock,
                requested=quantity,
            )

        source.in_house_stock -= quantity
        source.recompute_quantity()
        source.touch(actor)

        destination, created = resolve_or_create_destination(db, source, to_location_code, actor)
        destination.in_house_stock += quantity
        destination.recompute_quantity()
        destination.touch(actor)

        movement = add_movement(
            db,
            item_code=source.item_code,
            movement_type="transferred",
            quantity=quantity,
            processed_by=actor,
            from_location_code=from_location_code,
            to_location_code=to_location_code,
            notes=notes or f"Transfer from {from_location_code} to {to_location_code}",
            reference_number=generate_reference_number(settings.transfer_reference_prefix),
        )
        db.flush()

    log_event(
        "stock.transferred",
        item_code=item_code,
        destination_item_code=destination.item_code,
        from_location_code=from_location_code,
        to_location_code=to_location_code,
        quantity=quantity,
        destination_created=created,
        processed_by=actor,
    )
    return TransferResult(
        source_item=source,
        destination_item=destination,
        movement=movement,
        destination_created=created,
    )
