# app/api/routers/products.py
from typing import List

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from app.api.deps import require_admin
from app.data.database import get_db
from app.domain.schemas import (
    ApiResponse,
    Page,
    Principal,
    ProductCreate,
    ProductImageIn,
    ProductImageOut,
    ProductOut,
    ProductUpdate,
)
from app.services.catalog_service import CatalogService

router = APIRouter(prefix="/products", tags=["products"])


# ===== QUERY =====
@router.get("/", response_model=ApiResponse[Page[ProductOut]])
def list_products(
    category: str | None = Query(None),
    page: int = Query(1),
    limit: int = Query(10),
    db: Session = Depends(get_db),
):
    return ApiResponse(message="Produkty", data=CatalogService(db).list_products(category, page, limit))


@router.get("/related/{product_id}", response_model=ApiResponse[List[ProductOut]])
def related_products(product_id: int, db: Session = Depends(get_db)):
    return ApiResponse(message="Podobne produkty", data=CatalogService(db).related_products(product_id))


@router.get("/image/{image_id}")
def get_image(image_id: int, db: Session = Depends(get_db)):
    """Surowe bajty obrazu, bez koperty."""
    data, content_type = CatalogService(db).get_image_payload(image_id)
    return Response(content=data, media_type=content_type)


@router.get("/{product_id}", response_model=ApiResponse[ProductOut])
def get_product(product_id: int, db: Session = Depends(get_db)):
    return ApiResponse(message="Produkt", data=CatalogService(db).get_product(product_id))


# ===== COMMANDS =====
@router.post("/", response_model=ApiResponse[ProductOut], status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db), _: Principal = Depends(require_admin)):
    return ApiResponse(message="Produkt utworzony", data=CatalogService(db).create_product(payload))


@router.put("/{product_id}", response_model=ApiResponse[ProductOut])
def update_product(
    product_id: int,
    payload: ProductUpdate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
):
    return ApiResponse(message="Produkt zaktualizowany", data=CatalogService(db).update_product(product_id, payload))


@router.delete("/{product_id}", response_model=ApiResponse[None])
def delete_product(product_id: int, db: Session = Depends(get_db), _: Principal = Depends(require_admin)):
    CatalogService(db).delete_product(product_id)
    return ApiResponse(message="Produkt usuniety")


@router.post("/{product_id}/images", response_model=ApiResponse[ProductImageOut], status_code=201)
def add_image(
    product_id: int,
    payload: ProductImageIn,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
):
    return ApiResponse(message="Obraz dodany", data=CatalogService(db).add_image(product_id, payload))


@router.put("/{product_id}/images/{image_id}/primary", response_model=ApiResponse[ProductImageOut])
def set_primary_image(
    product_id: int,
    image_id: int,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
):
    return ApiResponse(
        message="Obraz glowny ustawiony",
        data=CatalogService(db).set_primary_image(product_id, image_id),
    )


@router.delete("/{product_id}/images/{image_id}", response_model=ApiResponse[None])
def remove_image(
    product_id: int,
    image_id: int,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
):
    CatalogService(db).remove_image(product_id, image_id)
    return ApiResponse(message="Obraz usuniety")
