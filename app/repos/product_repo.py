# app/repos/product_repo.py
from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, selectinload, undefer

from app.data.models.product import ProductModel
from app.data.models.product_image import ProductImageModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    # ---------- produkty ----------
    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_active_product(self, product_id: int) -> ProductModel | None:
        return self.db.execute(
            select(ProductModel).where(ProductModel.id == product_id, ProductModel.is_active.is_(True))
        ).scalar_one_or_none()

    def get_product_for_update(self, product_id: int) -> ProductModel | None:
        #blokada wiersza na czas transakcji (read-modify-write licznika)
        return self.db.execute(
            select(ProductModel).where(ProductModel.id == product_id).with_for_update()
        ).scalar_one_or_none()

    def add_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.flush()
        return product

    def list_active(self, category: str | None, offset: int, limit: int):
        stmt = select(ProductModel).where(ProductModel.is_active.is_(True))
        if category:
            stmt = stmt.where(ProductModel.category == category.strip().upper())
        total = self.db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
        rows = self.db.execute(
            stmt.options(selectinload(ProductModel.images))
            .order_by(ProductModel.created_at.desc(), ProductModel.id.desc())
            .offset(offset)
            .limit(limit)
        ).scalars()
        return list(rows), total

    def related(self, product: ProductModel, limit: int = 4) -> list[ProductModel]:
        stmt = (
            select(ProductModel)
            .where(
                ProductModel.category == product.category,
                ProductModel.id != product.id,
                ProductModel.is_active.is_(True),
            )
            .options(selectinload(ProductModel.images))
            .order_by(func.random())
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars())

    def list_levels(self, min_quantity: int | None, max_quantity: int | None) -> list[ProductModel]:
        stmt = select(ProductModel)
        if min_quantity is not None:
            stmt = stmt.where(ProductModel.stock_quantity >= min_quantity)
        if max_quantity is not None:
            stmt = stmt.where(ProductModel.stock_quantity <= max_quantity)
        return list(self.db.execute(stmt.order_by(ProductModel.id)).scalars())

    # ---------- obrazy ----------
    def get_image(self, image_id: int, with_data: bool = False) -> ProductImageModel | None:
        stmt = select(ProductImageModel).where(ProductImageModel.id == image_id)
        if with_data:
            stmt = stmt.options(undefer(ProductImageModel.data))
        return self.db.execute(stmt).scalar_one_or_none()

    def get_product_image(self, product_id: int, image_id: int) -> ProductImageModel | None:
        return self.db.execute(
            select(ProductImageModel).where(
                ProductImageModel.id == image_id,
                ProductImageModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def count_images(self, product_id: int) -> int:
        return self.db.execute(
            select(func.count(ProductImageModel.id)).where(ProductImageModel.product_id == product_id)
        ).scalar_one()

    def next_image_position(self, product_id: int) -> int:
        #max + 1, po usunieciu obrazu count dublowalby pozycje
        return self.db.execute(
            select(func.coalesce(func.max(ProductImageModel.position) + 1, 0)).where(
                ProductImageModel.product_id == product_id
            )
        ).scalar_one()

    def first_image(self, product_id: int) -> ProductImageModel | None:
        return self.db.execute(
            select(ProductImageModel)
            .where(ProductImageModel.product_id == product_id)
            .order_by(ProductImageModel.position, ProductImageModel.id)
            .limit(1)
        ).scalar_one_or_none()

    def add_image(self, image: ProductImageModel) -> ProductImageModel:
        self.db.add(image)
        self.db.flush()
        return image

    def delete_image(self, image: ProductImageModel) -> None:
        self.db.delete(image)
        self.db.flush()

    def reset_primary(self, product_id: int) -> None:
        self.db.execute(
            update(ProductImageModel)
            .where(ProductImageModel.product_id == product_id)
            .values(is_primary=False)
            .execution_options(synchronize_session="fetch")
        )

    def primary_image_url(self, product_id: int) -> str | None:
        #najpierw primary, potem najnizsza pozycja
        return self.db.execute(
            select(ProductImageModel.url)
            .where(ProductImageModel.product_id == product_id)
            .order_by(
                ProductImageModel.is_primary.desc(),
                ProductImageModel.position,
                ProductImageModel.id,
            )
            .limit(1)
        ).scalar_one_or_none()
