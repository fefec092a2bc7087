from datetime import datetime
from decimal import Decimal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from app.core.catalog import CollectionName, MovementStatus, MovementType, Size
from app.schemas.common import PaginationMeta


class InventoryItemOut(BaseModel):
    item_code: str
    collection_name: str
    design_name: str
    color: str
    size: str
    category: str
    location_code: str
    location_name: str | None = None
    quantity: int
    in_house_stock: int
    out_source_stock: int
    quantity_sold: int
    vendor_name: str
    supplier_name: str | None = None
    cost_price: float
    selling_price: float
    remarks: str | None = None
    received_date: datetime
    received_by: str
    is_active: bool
    last_updated: datetime
    updated_by: str | None = None


class InventoryItemListOut(BaseModel):
    items: list[InventoryItemOut]
    pagination: PaginationMeta


class StockMovementOut(BaseModel):
    id: str
    item_code: str
    movement_type: str
    from_location_code: str | None = None
    to_location_code: str | None = None
    quantity: int
    processed_by: str
    movement_date: datetime
    notes: str | None = None
    reference_number: str | None = None
    status: MovementStatus


class StockMovementListOut(BaseModel):
    items: list[StockMovementOut]
    pagination: PaginationMeta


class ItemMovementsOut(BaseModel):
    item_code: str
    items: list[StockMovementOut]


class StockReceiveIn(BaseModel):
    collection_name: CollectionName = Field(validation_alias=AliasChoices("collection_name", "collectionName"))
    design_name: str = Field(
        min_length=1, max_length=120, validation_alias=AliasChoices("design_name", "designName")
    )
    color: str = Field(min_length=1, max_length=50)
    size: Size
    category: str = Field(default="clothing", min_length=1, max_length=50)
    location_code: str | None = Field(
        default=None,
        max_length=20,
        validation_alias=AliasChoices("location_code", "locationCode"),
        description="Defaults to the main warehouse.",
    )
    in_house_stock: int = Field(default=0, ge=0, validation_alias=AliasChoices("in_house_stock", "inHouseStock"))
    out_source_stock: int = Field(
        default=0, ge=0, validation_alias=AliasChoices("out_source_stock", "outSourceStock")
    )
    vendor_name: str = Field(min_length=1, max_length=120, validation_alias=AliasChoices("vendor_name", "vendorName"))
    supplier_name: str | None = Field(
        default=None, max_length=120, validation_alias=AliasChoices("supplier_name", "supplierName")
    )
    cost_price: Decimal = Field(default=Decimal("0"), ge=0, validation_alias=AliasChoices("cost_price", "costPrice"))
    selling_price: Decimal = Field(
        default=Decimal("0"), ge=0, validation_alias=AliasChoices("selling_price", "sellingPrice")
    )
    remarks: str | None = Field(default=None, max_length=255)
    received_by: str = Field(min_length=1, max_length=120, validation_alias=AliasChoices("received_by", "receivedBy"))

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "collection_name": "Sajna Lawn",
                "design_name": "Gulnar",
                "color": "Red",
                "size": "M",
                "location_code": "001",
                "in_house_stock": 25,
                "out_source_stock": 5,
                "vendor_name": "Al-Karam Mills",
                "cost_price": 2400.0,
                "selling_price": 3990.0,
                "received_by": "Ayesha",
            }
        },
    )


class StockAdjustIn(BaseModel):
    in_house_change: int = Field(
        default=0,
        validation_alias=AliasChoices("in_house_change", "inHouseChange", "in_house_delta"),
        description="Signed change to in-house stock. Results below zero are clamped to zero.",
    )
    out_source_change: int = Field(
        default=0,
        validation_alias=AliasChoices("out_source_change", "outSourceChange", "out_source_delta"),
        description="Signed change to out-source stock. Results below zero are clamped to zero.",
    )
    updated_by: str = Field(min_length=1, max_length=120, validation_alias=AliasChoices("updated_by", "updatedBy"))
    notes: str | None = Field(default=None, max_length=255)
    movement_type: MovementType = Field(
        default="adjusted", validation_alias=AliasChoices("movement_type", "movementType")
    )

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "in_house_change": -2,
                "out_source_change": 0,
                "updated_by": "Ayesha",
                "notes": "2 pieces damaged during steaming",
                "movement_type": "adjusted",
            }
        },
    )


class StockAdjustOut(BaseModel):
    item: InventoryItemOut
    movement: StockMovementOut | None = None


class InventoryItemUpdateIn(BaseModel):
    category: str | None = Field(default=None, min_length=1, max_length=50)
    vendor_name: str | None = Field(
        default=None, min_length=1, max_length=120, validation_alias=AliasChoices("vendor_name", "vendorName")
    )
    supplier_name: str | None = Field(
        default=None, max_length=120, validation_alias=AliasChoices("supplier_name", "supplierName")
    )
    cost_price: Decimal | None = Field(default=None, ge=0, validation_alias=AliasChoices("cost_price", "costPrice"))
    selling_price: Decimal | None = Field(
        default=None, ge=0, validation_alias=AliasChoices("selling_price", "sellingPrice")
    )
    remarks: str | None = Field(default=None, max_length=255)
    updated_by: str = Field(min_length=1, max_length=120, validation_alias=AliasChoices("updated_by", "updatedBy"))

    @field_validator("category", "vendor_name")
    @classmethod
    def strip_required_text(cls, value: str | None) -> str | None:
        if value is None:
            return None
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("value cannot be empty")
        return cleaned

    @model_validator(mode="after")
    def validate_any_field_present(self) -> "InventoryItemUpdateIn":
        if not self.changes():
            raise ValueError("At least one field must be provided")
        return self

    def changes(self) -> dict:
        data = self.model_dump(exclude_unset=True, exclude={"updated_by"})
        # Only the optional columns can be cleared with an explicit null.
        return {key: value for key, value in data.items() if value is not None or key in {"supplier_name", "remarks"}}

    model_config = ConfigDict(populate_by_name=True)


class StockTransferIn(BaseModel):
    item_code: str = Field(min_length=1, max_length=20, validation_alias=AliasChoices("item_code", "itemCode"))
    from_location_code: str = Field(
        min_length=1, max_length=20, validation_alias=AliasChoices("from_location_code", "fromLocationCode")
    )
    to_location_code: str = Field(
        min_length=1, max_length=20, validation_alias=AliasChoices("to_location_code", "toLocationCode")
    )
    quantity: int
    transferred_by: str = Field(
        max_length=120,
        validation_alias=AliasChoices("transferred_by", "transferredBy", "processed_by"),
    )
    notes: str | None = Field(default=None, max_length=255)

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "item_code": "ITM-0001",
                "from_location_code": "001",
                "to_location_code": "002",
                "quantity": 5,
                "transferred_by": "Ayesha",
            }
        },
    )


class StockTransferOut(BaseModel):
    source_item: InventoryItemOut
    destination_item: InventoryItemOut
    destination_created: bool
    movement: StockMovementOut


class CollectionOut(BaseModel):
    name: str
    description: str


class CollectionListOut(BaseModel):
    items: list[CollectionOut]
