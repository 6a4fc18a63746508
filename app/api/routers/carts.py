#app/api/routers/carts.py
from fastapi import APIRouter, Depends

from app.api.deps import get_cart_service, get_current_user
from app.domain.schemas import ApiResponse, CartItemOut, CartOut, ItemIn, Principal, QuantityIn
from app.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("/", response_model=ApiResponse[CartOut])
def get_cart(
    user: Principal = Depends(get_current_user),
    svc: CartService = Depends(get_cart_service),
):
    return ApiResponse(message="Koszyk", data=svc.get_cart(user.id))


@router.post("/add", response_model=ApiResponse[CartItemOut])
def add_item(
    payload: ItemIn,
    user: Principal = Depends(get_current_user),
    svc: CartService = Depends(get_cart_service),
):
    item = svc.add_item(
        user_id=user.id,
        product_id=payload.product_id,
        quantity=payload.quantity,
        size=payload.size,
        variant_type=payload.type,
        customization=payload.customization,
        customization_fee=payload.customization_fee,
    )
    return ApiResponse(message="Produkt dodany do koszyka", data=item)


@router.put("/item/{item_id}", response_model=ApiResponse[CartItemOut])
def update_item(
    item_id: int,
    payload: QuantityIn,
    user: Principal = Depends(get_current_user),
    svc: CartService = Depends(get_cart_service),
):
    item = svc.update_item_quantity(user.id, item_id, payload.quantity)
    if item is None:
        return ApiResponse(message="Pozycja usunieta z koszyka")
    return ApiResponse(message="Ilosc zaktualizowana", data=item)


@router.delete("/item/{item_id}", response_model=ApiResponse[None])
def remove_item(
    item_id: int,
    user: Principal = Depends(get_current_user),
    svc: CartService = Depends(get_cart_service),
):
    svc.remove_item(user.id, item_id)
    return ApiResponse(message="Pozycja usunieta z koszyka")


@router.delete("/", response_model=ApiResponse[dict])
def clear_cart(
    user: Principal = Depends(get_current_user),
    svc: CartService = Depends(get_cart_service),
):
    removed = svc.clear_cart(user.id)
    return ApiResponse(message="Koszyk wyczyszczony", data={"removed": removed})
