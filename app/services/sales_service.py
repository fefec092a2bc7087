from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.orm import Session

from app.core.catalog import CUSTOMER_MARKER, normalize_code, normalize_location_code
from app.core.errors import InsufficientStockError, InvalidArgumentError, NotFoundError
from app.core.money import ZERO_MONEY, to_money
from app.core.observability import log_event
from app.db.unit_of_work import transaction
from app.models.inventory import InventoryItem, StockMovement, utcnow
from app.models.sales import Sale
from app.services.code_generator import generate_next_code
from app.services.inventory_service import add_movement, find_active_item, require_actor


@dataclass(frozen=True)
class SaleResult:
    sale: Sale
    item: InventoryItem
    movement: StockMovement


def record_sale(
    db: Session,
    *,
    item_code: str,
    location_code: str,
    quantity_sold: int,
    sold_by: str,
    unit_price: Decimal | float | int | None = None,
    discount: Decimal | float | int = 0,
    payment_method: str = "Cash",
    customer_name: str | None = None,
    customer_phone: str | None = None,
    notes: str | None = None,
) -> SaleResult:
    """
    Sell in-house stock from one location.

    ``unit_price`` defaults to the record's selling price. The sale, the stock
    decrement and the ``sold`` ledger entry commit together.
    """
    item_code = normalize_code(item_code)
    location_code = normalize_location_code(location_code)
    if quantity_sold < 1:
        raise InvalidArgumentError("Quantity sold must be at least 1")
    actor = require_actor(sold_by)
    discount_amount = to_money(discount)
    if discount_amount < ZERO_MONEY:
        raise InvalidArgumentError("Discount cannot be negative")

    with transaction(db, operation="sale"):
        item = find_active_item(db, item_code, location_code=location_code, lock=True)
        if not item:
            raise NotFoundError(
                "Inventory item not found at this location",
                details={"item_code": item_code, "location_code": location_code},
            )
        if item.in_house_stock < quantity_sold:
            raise InsufficientStockError(
                f"Insufficient stock. Available: {item.in_house_stock}, Requested: {quantity_sold}",
                available=item.in_house_stock,
                requested=quantity_sold,
            )

        price = to_money(unit_price if unit_price is not None else item.selling_price)
        gross = to_money(price * quantity_sold)
        if discount_amount > gross:
            raise InvalidArgumentError(
                "Discount cannot exceed the sale amount",
                details={"gross_amount": str(gross), "discount": str(discount_amount)},
            )

        item.in_house_stock -= quantity_sold
        item.recompute_quantity()
        item.quantity_sold += quantity_sold
        item.touch(actor)

        sale = Sale(
            sale_code=generate_next_code(db, "SALE"),
            item_code=item.item_code,
            location_code=location_code,
            collection_name=item.collection_name,
            design_name=item.design_name,
            color=item.color,
            size=item.size,
            unit_price=price,
            quantity_sold=quantity_sold,
            discount=discount_amount,
            final_amount=gross - discount_amount,
            sold_by=actor,
            customer_name=customer_name,
            customer_phone=customer_phone,
            payment_method=payment_method,
            notes=notes,
            status="completed",
            sold_at=utcnow(),
        )
        db.add(sale)

        movement = add_movement(
            db,
            item_code=item.item_code,
            movement_type="sold",
            quantity=quantity_sold,
            processed_by=actor,
            from_location_code=location_code,
            to_location_code=CUSTOMER_MARKER,
            notes=notes or f"Sold {quantity_sold} unit(s)",
            reference_number=sale.sale_code,
        )
        db.flush()

    log_event(
        "sale.recorded",
        sale_code=sale.sale_code,
        item_code=item_code,
        location_code=location_code,
        quantity=quantity_sold,
        sold_by=actor,
    )
    return SaleResult(sale=sale, item=item, movement=movement)
