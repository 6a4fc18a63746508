# app/api/routers/stock.py
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import require_admin
from app.data.database import get_db
from app.domain.enums import MovementType
from app.domain.schemas import (
    ApiResponse,
    Page,
    Principal,
    StockDiscrepancyOut,
    StockHistoryOut,
    StockLevelOut,
    StockMovementIn,
    StockMovementOut,
    StockMovementUpdate,
)
from app.services.stock_service import StockService

#caly magazyn tylko dla admina
router = APIRouter(prefix="/stock", tags=["stock"], dependencies=[Depends(require_admin)])


# ===== QUERY =====
@router.get("/", response_model=ApiResponse[Page[StockMovementOut]])
def list_movements(
    page: int = Query(1),
    limit: int = Query(10),
    product_id: int | None = Query(None),
    type: MovementType | None = Query(None),
    reference: str | None = Query(None),
    start_date: datetime | None = Query(None),
    end_date: datetime | None = Query(None),
    db: Session = Depends(get_db),
):
    data = StockService(db).list_movements(
        page,
        limit,
        product_id=product_id,
        movement_type=type.value if type else None,
        reference=reference,
        start_date=start_date,
        end_date=end_date,
    )
    return ApiResponse(message="Ruchy magazynowe", data=data)


@router.get("/products/levels", response_model=ApiResponse[List[StockLevelOut]])
def current_levels(
    min_quantity: int | None = Query(None),
    max_quantity: int | None = Query(None),
    db: Session = Depends(get_db),
):
    return ApiResponse(message="Stany magazynowe", data=StockService(db).current_levels(min_quantity, max_quantity))


@router.get("/products/ledger-levels", response_model=ApiResponse[List[StockLevelOut]])
def ledger_levels(db: Session = Depends(get_db)):
    return ApiResponse(message="Stany z ledgera", data=StockService(db).ledger_levels())


@router.get("/reconcile", response_model=ApiResponse[List[StockDiscrepancyOut]])
def reconcile(db: Session = Depends(get_db)):
    mismatches = StockService(db).reconcile()
    message = "Stany zgodne" if not mismatches else f"Niezgodnosci: {len(mismatches)}"
    return ApiResponse(message=message, data=mismatches)


@router.get("/product/{product_id}/history", response_model=ApiResponse[Page[StockHistoryOut]])
def product_history(
    product_id: int,
    page: int = Query(1),
    limit: int = Query(10),
    start_date: datetime | None = Query(None),
    end_date: datetime | None = Query(None),
    db: Session = Depends(get_db),
):
    data = StockService(db).product_history(product_id, page, limit, start_date, end_date)
    return ApiResponse(message="Historia produktu", data=data)


@router.get("/{movement_id}", response_model=ApiResponse[StockMovementOut])
def get_movement(movement_id: int, db: Session = Depends(get_db)):
    return ApiResponse(message="Ruch magazynowy", data=StockService(db).get_movement(movement_id))


# ===== COMMANDS =====
@router.post("/", response_model=ApiResponse[StockMovementOut], status_code=201)
def create_movement(payload: StockMovementIn, db: Session = Depends(get_db)):
    movement = StockService(db).record_movement(
        product_id=payload.product_id,
        quantity=payload.quantity,
        movement_type=payload.type,
        unit_price=payload.unit_price,
        reference=payload.reference,
        notes=payload.notes,
    )
    return ApiResponse(message="Ruch magazynowy zapisany", data=movement)


@router.put("/{movement_id}", response_model=ApiResponse[StockMovementOut])
def update_movement(movement_id: int, payload: StockMovementUpdate, db: Session = Depends(get_db)):
    changes = payload.model_dump(exclude_unset=True)
    return ApiResponse(message="Ruch magazynowy zaktualizowany", data=StockService(db).update_movement(movement_id, changes))


@router.delete("/{movement_id}", response_model=ApiResponse[None])
def delete_movement(movement_id: int, db: Session = Depends(get_db)):
    StockService(db).delete_movement(movement_id)
    return ApiResponse(message="Ruch magazynowy usuniety")
