# app/api/__init__.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.errors import register_error_handlers
from app.api.routers import badges, blogs, carts, categories, health, orders, products, stock, users
from app.data.database import Database
from app.services.lock_service import LockService
from app.utils.logging import get_logger

logger = get_logger(__name__)

API_PREFIX = "/api"


def create_app(database: Database | None = None, lock_service: LockService | None = None) -> FastAPI:
    """
    Fabryka aplikacji. Baza i lock sa tworzone tutaj (albo podane z
    zewnatrz, np. w testach) i trzymane w app.state.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.database.init_schema()
        logger.info("Store API started")
        yield
        app.state.database.close()
        logger.info("Store API stopped")

    app = FastAPI(title="Store API", version="1.0.0", lifespan=lifespan)
    app.state.database = database or Database()
    app.state.lock_service = lock_service or LockService()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    for module in (health, users, products, categories, badges, blogs, carts, orders, stock):
        app.include_router(module.router, prefix=API_PREFIX)

    return app
