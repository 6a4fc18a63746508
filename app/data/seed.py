# app/data/seed.py
from decimal import Decimal

from sqlalchemy import select

from app.data.database import Database, transaction
from app.data.models import CategoryModel, ProductModel, UserModel
from app.utils.logging import get_logger

logger = get_logger(__name__)


def seed(database: Database | None = None) -> bool:
    """Dane startowe: admin, kategoria i jeden produkt. Tylko na pustej bazie."""
    database = database or Database()
    database.init_schema()
    db = database.session()
    try:
        #not forcing: only seed if empty
        if db.execute(select(UserModel.id).limit(1)).first():
            return False

        with transaction(db):
            db.add(UserModel(name="Store Admin", email="admin@store.local", phone="000000000", role="admin"))
            db.add(CategoryModel(name="Jerseys", slug="jerseys"))
            db.add(
                ProductModel(
                    name="Home Jersey",
                    price=Decimal("50.00"),
                    category="JERSEYS",
                    size="M",
                    description="Koszulka domowa",
                    has_versions=True,
                    price_fan=Decimal("45.00"),
                    price_player=Decimal("80.00"),
                )
            )
        logger.info("Seed data inserted")
        return True
    finally:
        db.close()


if __name__ == "__main__":
    seed()
