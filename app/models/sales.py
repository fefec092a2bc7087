from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.models.inventory import utcnow


class Sale(Base):
    __tablename__ = "sales"

    sale_code: Mapped[str] = mapped_column(String(20), primary_key=True)
    item_code: Mapped[str] = mapped_column(String(20), ForeignKey("inventory_items.item_code"), index=True)
    location_code: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    # Snapshot of the item at the time of sale.
    collection_name: Mapped[str] = mapped_column(String(50), nullable=False)
    design_name: Mapped[str] = mapped_column(String(120), nullable=False)
    color: Mapped[str] = mapped_column(String(50), nullable=False)
    size: Mapped[str] = mapped_column(String(5), nullable=False)

    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    quantity_sold: Mapped[int] = mapped_column(Integer, nullable=False)
    discount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    final_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    sold_by: Mapped[str] = mapped_column(String(120), nullable=False)
    customer_name: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    customer_phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    payment_method: Mapped[str] = mapped_column(String(30), nullable=False, default="Cash")
    notes: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="completed", server_default="completed")

    sold_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint("quantity_sold >= 1", name="quantity_sold_positive"),
        CheckConstraint("final_amount >= 0", name="final_amount_non_negative"),
        Index("ix_sales_location_sold_at", "location_code", "sold_at"),
        Index("ix_sales_collection_sold_at", "collection_name", "sold_at"),
        Index("ix_sales_sold_by_sold_at", "sold_by", "sold_at"),
    )
