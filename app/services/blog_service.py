# app/services/blog_service.py
from typing import Any, Dict

from sqlalchemy.orm import Session

from app.data.database import transaction
from app.data.models.blog import BlogModel
from app.domain.errors import NotFoundError
from app.domain.schemas import BlogCreate, BlogOut, BlogUpdate
from app.repos.blog_repo import BlogRepo
from app.utils.pagination import normalize_paging, page_offset, total_pages
from app.utils.slug import make_unique_slug, slugify
from app.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_AUTHOR = "Store Admin"


class BlogService:
    """Wpisy blogowe. Usuniecie = is_active False, slug zostaje zajety."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BlogRepo(db)

    def list_blogs(self, search: str | None = None, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        p, size = normalize_paging(page, limit)
        rows, total = self.repo.list_active(search, page_offset(p, size), size)
        return {
            "items": [BlogOut.model_validate(b) for b in rows],
            "total": total,
            "page": p,
            "total_pages": total_pages(total, size),
        }

    def get_by_slug(self, slug: str) -> BlogOut:
        blog = self.repo.get_by_slug(slug)
        if not blog or not blog.is_active:
            raise NotFoundError("Wpis nie istnieje")
        return BlogOut.model_validate(blog)

    def create_blog(self, payload: BlogCreate) -> BlogOut:
        data = payload.model_dump()
        data["author"] = data.get("author") or DEFAULT_AUTHOR
        with transaction(self.db):
            blog = self.repo.add(BlogModel(slug=self._slug_for(payload.title), **data))
        logger.info(f"Blog {blog.id} '{blog.title}' created ({blog.slug})")
        return BlogOut.model_validate(blog)

    def update_blog(self, blog_id: int, payload: BlogUpdate) -> BlogOut:
        changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None or k == "image_url"}
        with transaction(self.db):
            blog = self._get(blog_id)
            if "title" in changes and changes["title"] != blog.title:
                changes["slug"] = self._slug_for(changes["title"], exclude_id=blog.id)
            for field, value in changes.items():
                setattr(blog, field, value)
            self.db.flush()
        logger.info(f"Blog {blog_id} updated: {sorted(changes)}")
        return BlogOut.model_validate(blog)

    def delete_blog(self, blog_id: int) -> None:
        with transaction(self.db):
            blog = self._get(blog_id)
            blog.is_active = False
        logger.info(f"Blog {blog_id} deactivated")

    def _get(self, blog_id: int) -> BlogModel:
        blog = self.repo.get(blog_id)
        if not blog:
            raise NotFoundError("Wpis nie istnieje")
        return blog

    def _slug_for(self, title: str, exclude_id: int | None = None) -> str:
        base = slugify(title) or "post"
        return make_unique_slug(base, lambda s: self.repo.slug_exists(s, exclude_id))
