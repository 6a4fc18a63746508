# app/api/routers/blogs.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import require_admin
from app.data.database import get_db
from app.domain.schemas import ApiResponse, BlogCreate, BlogOut, BlogUpdate, Page, Principal
from app.services.blog_service import BlogService

router = APIRouter(prefix="/blogs", tags=["blogs"])


@router.get("/", response_model=ApiResponse[Page[BlogOut]])
def list_blogs(
    search: str | None = Query(None),
    page: int = Query(1),
    limit: int = Query(10),
    db: Session = Depends(get_db),
):
    return ApiResponse(message="Wpisy", data=BlogService(db).list_blogs(search, page, limit))


@router.get("/{slug}", response_model=ApiResponse[BlogOut])
def get_blog(slug: str, db: Session = Depends(get_db)):
    return ApiResponse(message="Wpis", data=BlogService(db).get_by_slug(slug))


@router.post("/", response_model=ApiResponse[BlogOut], status_code=201)
def create_blog(payload: BlogCreate, db: Session = Depends(get_db), _: Principal = Depends(require_admin)):
    return ApiResponse(message="Wpis utworzony", data=BlogService(db).create_blog(payload))


@router.put("/{blog_id}", response_model=ApiResponse[BlogOut])
def update_blog(
    blog_id: int,
    payload: BlogUpdate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
):
    return ApiResponse(message="Wpis zaktualizowany", data=BlogService(db).update_blog(blog_id, payload))


@router.delete("/{blog_id}", response_model=ApiResponse[None])
def delete_blog(blog_id: int, db: Session = Depends(get_db), _: Principal = Depends(require_admin)):
    BlogService(db).delete_blog(blog_id)
    return ApiResponse(message="Wpis usuniety")
