# app/api/routers/orders.py
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_current_user, get_order_service, require_admin
from app.domain.enums import OrderStatus, PaymentStatus
from app.domain.schemas import ApiResponse, OrderCreate, OrderOut, OrderStatusUpdate, Page, Principal
from app.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("/create", response_model=ApiResponse[OrderOut], status_code=201)
def create_order(
    payload: OrderCreate,
    user: Principal = Depends(get_current_user),
    svc: OrderService = Depends(get_order_service),
):
    """
    Tworzy zamowienie z aktywnego koszyka uzytkownika.
    Wysyla powiadomienie asynchronicznie.
    """
    return ApiResponse(message="Zamowienie utworzone", data=svc.create_order(user.id, payload))


@router.get("/", response_model=ApiResponse[List[OrderOut]])
def my_orders(
    user: Principal = Depends(get_current_user),
    svc: OrderService = Depends(get_order_service),
):
    return ApiResponse(message="Zamowienia", data=svc.list_user_orders(user.id))


@router.get("/all", response_model=ApiResponse[Page[OrderOut]])
def all_orders(
    page: int = Query(1),
    limit: int = Query(10),
    order_status: OrderStatus | None = Query(None),
    payment_status: PaymentStatus | None = Query(None),
    user_id: int | None = Query(None),
    start_date: datetime | None = Query(None),
    end_date: datetime | None = Query(None),
    _: Principal = Depends(require_admin),
    svc: OrderService = Depends(get_order_service),
):
    data = svc.list_orders(
        page,
        limit,
        order_status=order_status.value if order_status else None,
        payment_status=payment_status.value if payment_status else None,
        user_id=user_id,
        start_date=start_date,
        end_date=end_date,
    )
    return ApiResponse(message="Zamowienia", data=data)


@router.get("/{order_id}", response_model=ApiResponse[OrderOut])
def get_order(
    order_id: int,
    user: Principal = Depends(get_current_user),
    svc: OrderService = Depends(get_order_service),
):
    """
    Pobiera szczegoly zamowienia (wlasciciel albo admin).
    """
    return ApiResponse(message="Zamowienie", data=svc.get_order(order_id, user))


@router.put("/{order_id}/payment-status", response_model=ApiResponse[OrderOut])
def update_status(
    order_id: int,
    payload: OrderStatusUpdate,
    _: Principal = Depends(require_admin),
    svc: OrderService = Depends(get_order_service),
):
    return ApiResponse(message="Status zamowienia zaktualizowany", data=svc.update_status(order_id, payload))


@router.put("/{order_id}/cancel", response_model=ApiResponse[OrderOut])
def cancel_order(
    order_id: int,
    user: Principal = Depends(get_current_user),
    svc: OrderService = Depends(get_order_service),
):
    return ApiResponse(message="Zamowienie anulowane", data=svc.cancel_order(order_id, user.id))


@router.delete("/{order_id}", response_model=ApiResponse[None])
def delete_order(
    order_id: int,
    _: Principal = Depends(require_admin),
    svc: OrderService = Depends(get_order_service),
):
    svc.delete_order(order_id)
    return ApiResponse(message="Zamowienie usuniete")
