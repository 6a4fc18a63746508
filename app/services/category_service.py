# app/services/category_service.py
from typing import Any, Dict

from sqlalchemy.orm import Session

from app.data.database import transaction
from app.data.models.category import CategoryModel
from app.domain.errors import NotFoundError, ValidationError
from app.domain.schemas import CategoryIn, CategoryOut
from app.repos.category_repo import CategoryRepo
from app.utils.pagination import normalize_paging, page_offset, total_pages
from app.utils.slug import make_unique_slug, slugify
from app.utils.logging import get_logger

logger = get_logger(__name__)


class CategoryService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = CategoryRepo(db)

    # ===== QUERY =====
    def list_categories(self, search: str | None = None, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        p, size = normalize_paging(page, limit)
        rows, total = self.repo.list_categories(search, page_offset(p, size), size)
        return {
            "items": [CategoryOut.model_validate(c) for c in rows],
            "total": total,
            "page": p,
            "total_pages": total_pages(total, size),
        }

    def get_category(self, category_id: int) -> CategoryOut:
        return CategoryOut.model_validate(self._get(category_id))

    def get_by_slug(self, slug: str) -> CategoryOut:
        category = self.repo.get_by_slug(slug)
        if not category:
            raise NotFoundError("Kategoria nie istnieje")
        return CategoryOut.model_validate(category)

    # ===== COMMANDS =====
    def create_category(self, payload: CategoryIn) -> CategoryOut:
        name = payload.name.strip()
        with transaction(self.db):
            if self.repo.get_by_name(name):
                raise ValidationError("Kategoria o tej nazwie juz istnieje")
            category = self.repo.add(CategoryModel(name=name, slug=self._slug_for(name)))
        logger.info(f"Category {category.id} '{name}' created ({category.slug})")
        return CategoryOut.model_validate(category)

    def rename_category(self, category_id: int, payload: CategoryIn) -> CategoryOut:
        name = payload.name.strip()
        with transaction(self.db):
            category = self._get(category_id)
            other = self.repo.get_by_name(name)
            if other and other.id != category.id:
                raise ValidationError("Kategoria o tej nazwie juz istnieje")
            category.name = name
            category.slug = self._slug_for(name, exclude_id=category.id)
            self.db.flush()
        logger.info(f"Category {category_id} renamed to '{name}'")
        return CategoryOut.model_validate(category)

    def delete_category(self, category_id: int) -> None:
        with transaction(self.db):
            self.repo.delete(self._get(category_id))
        logger.info(f"Category {category_id} deleted")

    def _get(self, category_id: int) -> CategoryModel:
        category = self.repo.get(category_id)
        if not category:
            raise NotFoundError("Kategoria nie istnieje")
        return category

    def _slug_for(self, name: str, exclude_id: int | None = None) -> str:
        base = slugify(name)
        if not base:
            raise ValidationError("Nazwa nie daje poprawnego sluga")
        return make_unique_slug(base, lambda s: self.repo.slug_exists(s, exclude_id))
