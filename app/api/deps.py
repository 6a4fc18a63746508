# app/api/deps.py
from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from app.data.database import get_db
from app.domain.errors import ForbiddenError, UnauthorizedError
from app.domain.schemas import Principal
from app.services.cart_service import CartService
from app.services.notification_service import NotificationService
from app.services.order_service import OrderService
from app.utils.security import decode_token


def get_current_user(authorization: str | None = Header(None)) -> Principal:
    """Authorization: Bearer <jwt> -> Principal, brak/zly token -> 401."""
    if not authorization:
        raise UnauthorizedError("Brak tokenu autoryzacyjnego")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthorizedError("Oczekiwano naglowka Authorization: Bearer <token>")
    return decode_token(token.strip())


def require_admin(user: Principal = Depends(get_current_user)) -> Principal:
    if not user.is_admin:
        raise ForbiddenError("Wymagane uprawnienia administratora")
    return user


def get_cart_service(request: Request, db: Session = Depends(get_db)) -> CartService:
    return CartService(db=db, lock_service=request.app.state.lock_service)


def get_order_service(request: Request, db: Session = Depends(get_db)) -> OrderService:
    return OrderService(
        db=db,
        lock_service=request.app.state.lock_service,
        notification_service=NotificationService(),
    )
