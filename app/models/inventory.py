from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    event,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.core.errors import LedgerImmutableError
from app.db.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InventoryItem(Base):
    """
    Current stock of one design/color/size at one location.

    ``quantity`` is derived: only ``recompute_quantity`` writes it.
    """
    __tablename__ = "inventory_items"

    item_code: Mapped[str] = mapped_column(String(20), primary_key=True)

    collection_name: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    design_name: Mapped[str] = mapped_column(String(120), nullable=False)
    color: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    size: Mapped[str] = mapped_column(String(5), nullable=False, index=True)
    category: Mapped[str] = mapped_column(String(50), nullable=False, default="clothing", server_default="clothing")

    location_code: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    in_house_stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    out_source_stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    quantity_sold: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    vendor_name: Mapped[str] = mapped_column(String(120), nullable=False)
    supplier_name: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    cost_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    selling_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    remarks: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    received_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    received_by: Mapped[str] = mapped_column(String(120), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="1")
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_by: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)

    version: Mapped[int] = mapped_column(Integer, nullable=False, server_default="1")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="quantity_non_negative"),
        CheckConstraint("in_house_stock >= 0", name="in_house_stock_non_negative"),
        CheckConstraint("out_source_stock >= 0", name="out_source_stock_non_negative"),
        CheckConstraint("quantity_sold >= 0", name="quantity_sold_non_negative"),
        CheckConstraint("quantity = in_house_stock + out_source_stock", name="quantity_matches_parts"),
        Index("ix_inventory_items_location_active", "location_code", "is_active"),
        Index("ix_inventory_items_collection_color_size", "collection_name", "color", "size"),
        Index("ix_inventory_items_vendor_received_date", "vendor_name", "received_date"),
        Index(
            "ux_inventory_items_identity_location_active",
            "collection_name",
            "design_name",
            "color",
            "size",
            "location_code",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active"),
        ),
    )

    @property
    def identity(self) -> tuple[str, str, str, str]:
        return (self.collection_name, self.design_name, self.color, self.size)

    def recompute_quantity(self) -> int:
        self.quantity = self.in_house_stock + self.out_source_stock
        return self.quantity

    def touch(self, actor: str) -> None:
        self.last_updated = utcnow()
        self.updated_by = actor


class StockMovement(Base):
    """
    Append-only audit row. ``quantity`` is always the positive magnitude moved.
    """
    __tablename__ = "stock_movements"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    item_code: Mapped[str] = mapped_column(String(20), ForeignKey("inventory_items.item_code"), nullable=False)
    movement_type: Mapped[str] = mapped_column(String(20), nullable=False)
    from_location_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    to_location_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    processed_by: Mapped[str] = mapped_column(String(120), nullable=False)
    movement_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    notes: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    reference_number: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="completed", server_default="completed")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="quantity_positive"),
        Index("ix_stock_movements_item_movement_date", "item_code", "movement_date"),
        Index("ix_stock_movements_type_status", "movement_type", "status"),
        Index("ix_stock_movements_from_to", "from_location_code", "to_location_code"),
    )


class CodeSequence(Base):
    """Last number handed out per code prefix (ITM, SALE, ...)."""
    __tablename__ = "code_sequences"

    prefix: Mapped[str] = mapped_column(String(10), primary_key=True)
    last_value: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )


@event.listens_for(StockMovement, "before_update")
def _refuse_movement_update(_mapper, _connection, target: StockMovement) -> None:
    raise LedgerImmutableError(f"Stock movement {target.id} is append-only and cannot be updated")


@event.listens_for(StockMovement, "before_delete")
def _refuse_movement_delete(_mapper, _connection, target: StockMovement) -> None:
    raise LedgerImmutableError(f"Stock movement {target.id} is append-only and cannot be deleted")
