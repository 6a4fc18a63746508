# app/api/routers/categories.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import require_admin
from app.data.database import get_db
from app.domain.schemas import ApiResponse, CategoryIn, CategoryOut, Page, Principal
from app.services.category_service import CategoryService

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("/", response_model=ApiResponse[Page[CategoryOut]])
def list_categories(
    search: str | None = Query(None),
    page: int = Query(1),
    limit: int = Query(10),
    db: Session = Depends(get_db),
):
    return ApiResponse(message="Kategorie", data=CategoryService(db).list_categories(search, page, limit))


@router.get("/slug/{slug}", response_model=ApiResponse[CategoryOut])
def get_category_by_slug(slug: str, db: Session = Depends(get_db)):
    return ApiResponse(message="Kategoria", data=CategoryService(db).get_by_slug(slug))


@router.get("/{category_id}", response_model=ApiResponse[CategoryOut])
def get_category(category_id: int, db: Session = Depends(get_db)):
    return ApiResponse(message="Kategoria", data=CategoryService(db).get_category(category_id))


@router.post("/", response_model=ApiResponse[CategoryOut], status_code=201)
def create_category(payload: CategoryIn, db: Session = Depends(get_db), _: Principal = Depends(require_admin)):
    return ApiResponse(message="Kategoria utworzona", data=CategoryService(db).create_category(payload))


@router.put("/{category_id}", response_model=ApiResponse[CategoryOut])
def rename_category(
    category_id: int,
    payload: CategoryIn,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
):
    return ApiResponse(message="Kategoria zaktualizowana", data=CategoryService(db).rename_category(category_id, payload))


@router.delete("/{category_id}", response_model=ApiResponse[None])
def delete_category(category_id: int, db: Session = Depends(get_db), _: Principal = Depends(require_admin)):
    CategoryService(db).delete_category(category_id)
    return ApiResponse(message="Kategoria usunieta")
