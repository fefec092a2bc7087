from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from app.core.api_docs import error_responses
from app.core.catalog import COLLECTION_CATALOG, CollectionName, MovementType, Size, normalize_code
from app.core.config import settings
from app.core.deps import get_db
from app.core.errors import NotFoundError
from app.core.money import money_out
from app.models.inventory import InventoryItem, StockMovement
from app.schemas.common import PaginationMeta
from app.schemas.inventory import (
    CollectionListOut,
    CollectionOut,
    InventoryItemListOut,
    InventoryItemOut,
    InventoryItemUpdateIn,
    ItemMovementsOut,
    StockAdjustIn,
    StockAdjustOut,
    StockMovementListOut,
    StockMovementOut,
    StockReceiveIn,
    StockTransferIn,
    StockTransferOut,
)
from app.services.inventory_service import (
    adjust_stock,
    deactivate_item,
    get_active_item,
    receive_stock,
    update_item_details,
)
from app.services.location_inventory_service import transfer_stock

router = APIRouter(prefix="/inventory", tags=["inventory"])


def item_out(item: InventoryItem) -> InventoryItemOut:
    return InventoryItemOut(
        item_code=item.item_code,
        collection_name=item.collection_name,
        design_name=item.design_name,
        color=item.color,
        size=item.size,
        category=item.category,
        location_code=item.location_code,
        location_name=settings.locations.get(item.location_code),
        quantity=item.quantity,
        in_house_stock=item.in_house_stock,
        out_source_stock=item.out_source_stock,
        quantity_sold=item.quantity_sold,
        vendor_name=item.vendor_name,
        supplier_name=item.supplier_name,
        cost_price=money_out(item.cost_price),
        selling_price=money_out(item.selling_price),
        remarks=item.remarks,
        received_date=item.received_date,
        received_by=item.received_by,
        is_active=item.is_active,
        last_updated=item.last_updated,
        updated_by=item.updated_by,
    )


def movement_out(movement: StockMovement) -> StockMovementOut:
    return StockMovementOut(
        id=movement.id,
        item_code=movement.item_code,
        movement_type=movement.movement_type,
        from_location_code=movement.from_location_code,
        to_location_code=movement.to_location_code,
        quantity=movement.quantity,
        processed_by=movement.processed_by,
        movement_date=movement.movement_date,
        notes=movement.notes,
        reference_number=movement.reference_number,
        status=movement.status,
    )


def paginated_items(db: Session, stmt, *, limit: int, offset: int) -> InventoryItemListOut:
    total = int(db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one())
    rows = db.execute(stmt.offset(offset).limit(limit)).scalars().all()
    items = [item_out(row) for row in rows]
    count = len(items)
    return InventoryItemListOut(
        items=items,
        pagination=PaginationMeta(
            total=total,
            limit=limit,
            offset=offset,
            count=count,
            has_next=(offset + count) < total,
        ),
    )


@router.post(
    "",
    response_model=InventoryItemOut,
    status_code=status.HTTP_201_CREATED,
    summary="Receive new stock into a location",
    responses=error_responses(400, 409, 503),
)
def create_inventory_item(payload: StockReceiveIn, db: Session = Depends(get_db)):
    result = receive_stock(
        db,
        collection_name=payload.collection_name,
        design_name=payload.design_name,
        color=payload.color,
        size=payload.size,
        category=payload.category,
        location_code=payload.location_code or settings.warehouse_location_code,
        in_house_stock=payload.in_house_stock,
        out_source_stock=payload.out_source_stock,
        vendor_name=payload.vendor_name,
        supplier_name=payload.supplier_name,
        cost_price=payload.cost_price,
        selling_price=payload.selling_price,
        remarks=payload.remarks,
        received_by=payload.received_by,
    )
    return item_out(result.item)


@router.get(
    "",
    response_model=InventoryItemListOut,
    summary="List active inventory items",
    responses=error_responses(400),
)
def list_inventory_items(
    collection_name: CollectionName | None = Query(default=None),
    size: Size | None = Query(default=None),
    color: str | None = Query(default=None),
    location_code: str | None = Query(default=None),
    vendor_name: str | None = Query(default=None),
    q: str | None = Query(default=None, description="Search item code, design name or color"),
    limit: int = Query(default=50, ge=1, le=200, description="Page size"),
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
    db: Session = Depends(get_db),
):
    stmt = select(InventoryItem).where(InventoryItem.is_active.is_(True))
    if collection_name:
        stmt = stmt.where(InventoryItem.collection_name == collection_name)
    if size:
        stmt = stmt.where(InventoryItem.size == size)
    if color:
        stmt = stmt.where(InventoryItem.color == color)
    if location_code:
        stmt = stmt.where(InventoryItem.location_code == location_code.strip())
    if vendor_name:
        stmt = stmt.where(InventoryItem.vendor_name == vendor_name)
    if q and q.strip():
        pattern = f"%{q.strip()}%"
        stmt = stmt.where(
            or_(
                InventoryItem.item_code.ilike(pattern),
                InventoryItem.design_name.ilike(pattern),
                InventoryItem.color.ilike(pattern),
            )
        )
    stmt = stmt.order_by(InventoryItem.item_code.asc())
    return paginated_items(db, stmt, limit=limit, offset=offset)


@router.get(
    "/low-stock",
    response_model=InventoryItemListOut,
    summary="List items whose total quantity is below a threshold",
    responses=error_responses(400),
)
def list_low_stock_items(
    threshold: int | None = Query(
        default=None,
        ge=0,
        description="Items with quantity strictly below this value. Defaults to the configured threshold.",
    ),
    location_code: str | None = Query(default=None),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
    db: Session = Depends(get_db),
):
    limit_threshold = settings.low_stock_default_threshold if threshold is None else threshold
    stmt = select(InventoryItem).where(
        InventoryItem.is_active.is_(True),
        InventoryItem.quantity < limit_threshold,
    )
    if location_code:
        stmt = stmt.where(InventoryItem.location_code == location_code.strip())
    stmt = stmt.order_by(InventoryItem.quantity.asc(), InventoryItem.item_code.asc())
    return paginated_items(db, stmt, limit=limit, offset=offset)


@router.get(
    "/ledger",
    response_model=StockMovementListOut,
    summary="List stock movement ledger entries",
    responses={
        200: {
            "description": "Paginated stock movements, newest first",
            "content": {
                "application/json": {
                    "example": {
                        "items": [
                            {
                                "id": "movement-id",
                                "item_code": "ITM-0001",
                                "movement_type": "transferred",
                                "from_location_code": "001",
                                "to_location_code": "002",
                                "quantity": 5,
                                "processed_by": "Ayesha",
                                "movement_date": "2026-10-18T10:00:00Z",
                                "notes": "Transfer from 001 to 002",
                                "reference_number": "TRF-1760781600000-X7KQ2M",
                                "status": "completed",
                            }
                        ],
                        "pagination": {
                            "total": 12,
                            "limit": 50,
                            "offset": 0,
                            "count": 1,
                            "has_next": True,
                        },
                    }
                }
            },
        },
        **error_responses(400),
    },
)
def list_stock_ledger(
    item_code: str | None = Query(default=None, description="Optional item filter"),
    movement_type: MovementType | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=200, description="Page size"),
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
    db: Session = Depends(get_db),
):
    count_stmt = select(func.count(StockMovement.id))
    stmt = select(StockMovement)
    if item_code:
        count_stmt = count_stmt.where(StockMovement.item_code == normalize_code(item_code))
        stmt = stmt.where(StockMovement.item_code == normalize_code(item_code))
    if movement_type:
        count_stmt = count_stmt.where(StockMovement.movement_type == movement_type)
        stmt = stmt.where(StockMovement.movement_type == movement_type)

    total = int(db.execute(count_stmt).scalar_one())
    stmt = stmt.order_by(StockMovement.movement_date.desc()).offset(offset).limit(limit)
    items = [movement_out(row) for row in db.execute(stmt).scalars().all()]
    count = len(items)
    return StockMovementListOut(
        items=items,
        pagination=PaginationMeta(
            total=total,
            limit=limit,
            offset=offset,
            count=count,
            has_next=(offset + count) < total,
        ),
    )


@router.get(
    "/collections",
    response_model=CollectionListOut,
    summary="List product collections",
)
def list_collections():
    return CollectionListOut(
        items=[CollectionOut(name=name, description=description) for name, description in COLLECTION_CATALOG]
    )


@router.post(
    "/transfer",
    response_model=StockTransferOut,
    summary="Move in-house stock between locations",
    responses=error_responses(400, 404, 409, 503),
)
def transfer_inventory(payload: StockTransferIn, db: Session = Depends(get_db)):
    result = transfer_stock(
        db,
        item_code=payload.item_code,
        from_location_code=payload.from_location_code,
        to_location_code=payload.to_location_code,
        quantity=payload.quantity,
        actor=payload.transferred_by,
        notes=payload.notes,
    )
    return StockTransferOut(
        source_item=item_out(result.source_item),
        destination_item=item_out(result.destination_item),
        destination_created=result.destination_created,
        movement=movement_out(result.movement),
    )


@router.get(
    "/{item_code}",
    response_model=InventoryItemOut,
    summary="Get one active inventory item",
    responses=error_responses(404),
)
def get_inventory_item(item_code: str, db: Session = Depends(get_db)):
    return item_out(get_active_item(db, item_code))


@router.patch(
    "/{item_code}",
    response_model=InventoryItemOut,
    summary="Edit vendor, pricing and remarks of an item",
    responses=error_responses(400, 404, 409, 503),
)
def update_inventory_item(item_code: str, payload: InventoryItemUpdateIn, db: Session = Depends(get_db)):
    item = update_item_details(
        db,
        item_code=item_code,
        actor=payload.updated_by,
        changes=payload.changes(),
    )
    return item_out(item)


@router.delete(
    "/{item_code}",
    response_model=InventoryItemOut,
    summary="Deactivate an inventory item",
    responses=error_responses(400, 404, 409, 503),
)
def delete_inventory_item(
    item_code: str,
    updated_by: str = Query(..., max_length=120, description="Who is deactivating the item"),
    db: Session = Depends(get_db),
):
    return item_out(deactivate_item(db, item_code=item_code, actor=updated_by))


@router.put(
    "/{item_code}/stock",
    response_model=StockAdjustOut,
    summary="Adjust in-house and out-source stock",
    responses=error_responses(400, 404, 409, 503),
)
def adjust_inventory_stock(item_code: str, payload: StockAdjustIn, db: Session = Depends(get_db)):
    result = adjust_stock(
        db,
        item_code=item_code,
        in_house_delta=payload.in_house_change,
        out_source_delta=payload.out_source_change,
        actor=payload.updated_by,
        notes=payload.notes,
        movement_type=payload.movement_type,
    )
    return StockAdjustOut(
        item=item_out(result.item),
        movement=movement_out(result.movement) if result.movement else None,
    )


@router.get(
    "/{item_code}/movements",
    response_model=ItemMovementsOut,
    summary="Recent movements for one item",
    responses=error_responses(404),
)
def list_item_movements(item_code: str, db: Session = Depends(get_db)):
    item = db.get(InventoryItem, normalize_code(item_code))
    if not item:
        raise NotFoundError("Inventory item not found")
    rows = db.execute(
        select(StockMovement)
        .where(StockMovement.item_code == item.item_code)
        .order_by(StockMovement.movement_date.desc())
        .limit(settings.movements_history_limit)
    ).scalars().all()
    return ItemMovementsOut(item_code=item.item_code, items=[movement_out(row) for row in rows])
