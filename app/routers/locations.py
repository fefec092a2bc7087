from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.api_docs import error_responses
from app.core.catalog import normalize_location_code
from app.core.config import settings
from app.core.deps import get_db
from app.core.errors import NotFoundError
from app.models.inventory import InventoryItem
from app.routers.inventory import paginated_items
from app.schemas.inventory import InventoryItemListOut
from app.schemas.location import LocationListOut, LocationOut

router = APIRouter(prefix="/locations", tags=["locations"])


@router.get(
    "",
    response_model=LocationListOut,
    summary="List configured locations",
)
def list_locations():
    return LocationListOut(
        items=[
            LocationOut(code=code, name=name, is_warehouse=code == settings.warehouse_location_code)
            for code, name in sorted(settings.locations.items())
        ]
    )


@router.get(
    "/{location_code}/inventory",
    response_model=InventoryItemListOut,
    summary="List active inventory held at one location",
    responses=error_responses(400, 404),
)
def list_location_inventory(
    location_code: str,
    limit: int = Query(default=50, ge=1, le=200, description="Page size"),
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
    db: Session = Depends(get_db),
):
    code = normalize_location_code(location_code)
    if code not in settings.locations:
        raise NotFoundError("Location not found", details={"location_code": code})

    stmt = (
        select(InventoryItem)
        .where(InventoryItem.location_code == code, InventoryItem.is_active.is_(True))
        .order_by(InventoryItem.item_code.asc())
    )
    return paginated_items(db, stmt, limit=limit, offset=offset)
