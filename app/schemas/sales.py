from datetime import datetime, date
from decimal import Decimal
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from app.core.catalog import PaymentMethod
from app.schemas.common import PaginationMeta
from app.schemas.inventory import InventoryItemOut, StockMovementOut


class SaleCreate(BaseModel):
    item_code: str = Field(min_length=1, max_length=20, validation_alias=AliasChoices("item_code", "itemCode"))
    location_code: str = Field(
        min_length=1, max_length=20, validation_alias=AliasChoices("location_code", "locationCode")
    )
    quantity_sold: int = Field(validation_alias=AliasChoices("quantity_sold", "quantitySold", "quantity"))
    unit_price: Optional[Decimal] = Field(
        default=None, ge=0, validation_alias=AliasChoices("unit_price", "unitPrice")
    )
    discount: Decimal = Decimal("0")
    payment_method: PaymentMethod = Field(
        default="Cash", validation_alias=AliasChoices("payment_method", "paymentMethod")
    )
    sold_by: str = Field(max_length=120, validation_alias=AliasChoices("sold_by", "soldBy"))
    customer_name: Optional[str] = Field(
        default=None, max_length=120, validation_alias=AliasChoices("customer_name", "customerName")
    )
    customer_phone: Optional[str] = Field(
        default=None, max_length=30, validation_alias=AliasChoices("customer_phone", "customerPhone")
    )
    notes: Optional[str] = Field(default=None, max_length=255)

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "item_code": "ITM-0002",
                "location_code": "002",
                "quantity_sold": 2,
                "discount": 200.0,
                "payment_method": "Card",
                "sold_by": "Bilal",
                "customer_name": "Sana",
            }
        },
    )


class SaleOut(BaseModel):
    sale_code: str
    item_code: str
    location_code: str
    collection_name: str
    design_name: str
    color: str
    size: str
    unit_price: float
    quantity_sold: int
    discount: float
    final_amount: float
    sold_by: str
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    payment_method: str
    notes: Optional[str] = None
    status: str
    sold_at: datetime


class SaleCreateOut(BaseModel):
    sale: SaleOut
    item: InventoryItemOut
    movement: StockMovementOut


class SaleListOut(BaseModel):
    pagination: PaginationMeta
    start_date: date | None = None
    end_date: date | None = None
    items: list[SaleOut]
