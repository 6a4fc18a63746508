# app/api/routers/users.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import require_admin
from app.data.database import get_db
from app.domain.schemas import ApiResponse, Principal, UserCreate, UserRead
from app.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/", response_model=ApiResponse[List[UserRead]])
def list_users(db: Session = Depends(get_db), _: Principal = Depends(require_admin)):
    return ApiResponse(message="Uzytkownicy", data=UserService(db).list_users())


@router.post("/", response_model=ApiResponse[UserRead], status_code=201)
def create_user(payload: UserCreate, db: Session = Depends(get_db), _: Principal = Depends(require_admin)):
    return ApiResponse(message="Uzytkownik utworzony", data=UserService(db).create_user(payload))


@router.get("/{user_id}", response_model=ApiResponse[UserRead])
def get_user(user_id: int, db: Session = Depends(get_db)):
    return ApiResponse(message="Uzytkownik", data=UserService(db).get_user(user_id))
