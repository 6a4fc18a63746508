# app/api/routers/badges.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import require_admin
from app.data.database import get_db
from app.domain.schemas import ApiResponse, BadgeIn, BadgeOut, BadgeUpdate, Principal
from app.services.badge_service import BadgeService

router = APIRouter(prefix="/badges", tags=["badges"])


@router.get("/", response_model=ApiResponse[List[BadgeOut]])
def list_badges(db: Session = Depends(get_db)):
    return ApiResponse(message="Odznaki", data=BadgeService(db).list_badges())


@router.get("/{badge_id}", response_model=ApiResponse[BadgeOut])
def get_badge(badge_id: int, db: Session = Depends(get_db)):
    return ApiResponse(message="Odznaka", data=BadgeService(db).get_badge(badge_id))


@router.post("/", response_model=ApiResponse[BadgeOut], status_code=201)
def create_badge(payload: BadgeIn, db: Session = Depends(get_db), _: Principal = Depends(require_admin)):
    return ApiResponse(message="Odznaka utworzona", data=BadgeService(db).create_badge(payload))


@router.put("/{badge_id}", response_model=ApiResponse[BadgeOut])
def update_badge(
    badge_id: int,
    payload: BadgeUpdate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
):
    return ApiResponse(message="Odznaka zaktualizowana", data=BadgeService(db).update_badge(badge_id, payload))


@router.delete("/{badge_id}", response_model=ApiResponse[None])
def delete_badge(badge_id: int, db: Session = Depends(get_db), _: Principal = Depends(require_admin)):
    BadgeService(db).delete_badge(badge_id)
    return ApiResponse(message="Odznaka usunieta")
