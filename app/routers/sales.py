from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.api_docs import error_responses
from app.core.deps import get_db
from app.core.money import money_out
from app.models.sales import Sale
from app.routers.inventory import item_out, movement_out
from app.schemas.common import PaginationMeta
from app.schemas.sales import SaleCreate, SaleCreateOut, SaleListOut, SaleOut
from app.services.sales_service import record_sale

router = APIRouter(prefix="/sales", tags=["sales"])


def _sale_out(sale: Sale) -> SaleOut:
    return SaleOut(
        sale_code=sale.sale_code,
        item_code=sale.item_code,
        location_code=sale.location_code,
        collection_name=sale.collection_name,
        design_name=sale.design_name,
        color=sale.color,
        size=sale.size,
        unit_price=money_out(sale.unit_price),
        quantity_sold=sale.quantity_sold,
        discount=money_out(sale.discount),
        final_amount=money_out(sale.final_amount),
        sold_by=sale.sold_by,
        customer_name=sale.customer_name,
        customer_phone=sale.customer_phone,
        payment_method=sale.payment_method,
        notes=sale.notes,
        status=sale.status,
        sold_at=sale.sold_at,
    )


@router.post(
    "",
    response_model=SaleCreateOut,
    status_code=status.HTTP_201_CREATED,
    summary="Record sale",
    description="Sells in-house stock from one location and writes the matching `sold` ledger entry.",
    responses=error_responses(400, 404, 409, 503),
)
def create_sale(payload: SaleCreate, db: Session = Depends(get_db)):
    result = record_sale(
        db,
        item_code=payload.item_code,
        location_code=payload.location_code,
        quantity_sold=payload.quantity_sold,
        sold_by=payload.sold_by,
        unit_price=payload.unit_price,
        discount=payload.discount,
        payment_method=payload.payment_method,
        customer_name=payload.customer_name,
        customer_phone=payload.customer_phone,
        notes=payload.notes,
    )
    return SaleCreateOut(
        sale=_sale_out(result.sale),
        item=item_out(result.item),
        movement=movement_out(result.movement),
    )


@router.get(
    "",
    response_model=SaleListOut,
    summary="List sales",
    responses={
        200: {
            "description": "Paginated sales, newest first",
            "content": {
                "application/json": {
                    "example": {
                        "pagination": {
                            "total": 1,
                            "limit": 50,
                            "offset": 0,
                            "count": 1,
                            "has_next": False,
                        },
                        "start_date": None,
                        "end_date": None,
                        "items": [
                            {
                                "sale_code": "SALE-0001",
                                "item_code": "ITM-0002",
                                "location_code": "002",
                                "collection_name": "Sajna Lawn",
                                "design_name": "Gulnar",
                                "color": "Red",
                                "size": "M",
                                "unit_price": 3990.0,
                                "quantity_sold": 2,
                                "discount": 200.0,
                                "final_amount": 7780.0,
                                "sold_by": "Bilal",
                                "customer_name": "Sana",
                                "customer_phone": None,
                                "payment_method": "Card",
                                "notes": None,
                                "status": "completed",
                                "sold_at": "2026-10-18T10:00:00Z",
                            }
                        ],
                    }
                }
            },
        },
        **error_responses(400),
    },
)
def list_sales(
    location_code: str | None = Query(default=None, description="Only sales made at this location"),
    start_date: date | None = Query(default=None, description="Filter from date (YYYY-MM-DD)"),
    end_date: date | None = Query(default=None, description="Filter to date (YYYY-MM-DD)"),
    limit: int = Query(default=50, ge=1, le=200, description="Page size"),
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
    db: Session = Depends(get_db),
):
    if start_date and end_date and end_date < start_date:
        raise HTTPException(status_code=400, detail="end_date cannot be before start_date")

    count_stmt = select(func.count(Sale.sale_code))
    data_stmt = select(Sale)

    if location_code:
        count_stmt = count_stmt.where(Sale.location_code == location_code.strip())
        data_stmt = data_stmt.where(Sale.location_code == location_code.strip())
    if start_date:
        count_stmt = count_stmt.where(func.date(Sale.sold_at) >= start_date)
        data_stmt = data_stmt.where(func.date(Sale.sold_at) >= start_date)
    if end_date:
        count_stmt = count_stmt.where(func.date(Sale.sold_at) <= end_date)
        data_stmt = data_stmt.where(func.date(Sale.sold_at) <= end_date)

    total_count = int(db.execute(count_stmt).scalar_one())
    rows = db.execute(
        data_stmt.order_by(Sale.sold_at.desc(), Sale.sale_code.desc()).offset(offset).limit(limit)
    ).scalars().all()

    items = [_sale_out(row) for row in rows]
    count = len(items)

    return SaleListOut(
        pagination=PaginationMeta(
            total=total_count,
            limit=limit,
            offset=offset,
            count=count,
            has_next=(offset + count) < total_count,
        ),
        start_date=start_date,
        end_date=end_date,
        items=items,
    )
