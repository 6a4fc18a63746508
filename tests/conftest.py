import os

#ustawione przed importem app, settings czyta env przy imporcie
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ.setdefault("JWT_SECRET", "test-secret")

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import fakeredis
import jwt
import pytest
from fastapi.testclient import TestClient

from app.api import create_app
from app.data.database import Database
from app.data.models import ProductModel, UserModel
from app.services.lock_service import LockService
from app.utils.settings import JWT_ALGORITHM, JWT_SECRET


@pytest.fixture
def database():
    db = Database("sqlite://")
    db.init_schema()
    yield db
    db.close()


@pytest.fixture
def session(database):
    s = database.session()
    yield s
    s.close()


@pytest.fixture
def lock_service():
    return LockService(client=fakeredis.FakeRedis(decode_responses=True))


@pytest.fixture
def users(session):
    admin = UserModel(name="Admin", email="admin@test.local", phone="100", role="admin")
    alice = UserModel(name="Alice", email="alice@test.local", phone="200", role="customer")
    bob = UserModel(name="Bob", email="bob@test.local", phone="300", role="customer")
    session.add_all([admin, alice, bob])
    session.commit()
    return {"admin": admin, "alice": alice, "bob": bob}


@pytest.fixture
def make_product(session):
    def _make(**overrides):
        data = {
            "name": "Home Jersey",
            "price": Decimal("10.00"),
            "category": "JERSEYS",
            "description": "Koszulka",
            "stock_quantity": 0,
        }
        data.update(overrides)
        product = ProductModel(**data)
        session.add(product)
        session.commit()
        return product

    return _make


def make_token(user_id: int, role: str = "customer", expires_in: int = 3600) -> str:
    claims = {"id": user_id, "role": role, "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in)}
    return jwt.encode(claims, JWT_SECRET, algorithm=JWT_ALGORITHM)


@pytest.fixture
def auth():
    def _headers(user: UserModel) -> dict:
        return {"Authorization": f"Bearer {make_token(user.id, user.role)}"}

    return _headers


@pytest.fixture
def client(database, lock_service):
    app = create_app(database=database, lock_service=lock_service)
    with TestClient(app) as c:
        yield c
