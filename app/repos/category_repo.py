from sqlalchemy import select

from app.data.models.category import CategoryModel
from app.repos.slugged_repo import SluggedRepo


class CategoryRepo(SluggedRepo):
    model = CategoryModel

    def get_by_name(self, name: str) -> CategoryModel | None:
        return self.db.execute(select(CategoryModel).where(CategoryModel.name == name)).scalar_one_or_none()

    def list_categories(self, search: str | None, offset: int, limit: int):
        return self.search([CategoryModel.name, CategoryModel.slug], search, offset, limit)
