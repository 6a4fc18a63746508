# app/data/database.py
from contextlib import contextmanager
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.utils.settings import DATABASE_URL
from app.utils.logging import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    pass


class Database:
    """
    Uchwyt do bazy tworzony jawnie przy starcie procesu i zamykany
    przy wylaczeniu (zamiast globalnego engine/SessionLocal).
    """

    def __init__(self, url: str | None = None, echo: bool = False):
        self.url = url or DATABASE_URL
        kwargs = {"echo": echo, "future": True}
        if self.url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in self.url or self.url.rstrip("/") == "sqlite:":
                #jedno polaczenie, inaczej kazda sesja widzi pusta baze
                kwargs["poolclass"] = StaticPool
        self.engine = create_engine(self.url, **kwargs)
        self.SessionLocal = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)

    def init_schema(self) -> None:
        #import modeli rejestruje tabele w Base.metadata
        import app.data.models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        logger.info(f"Tables ready: {sorted(Base.metadata.tables.keys())}")

    def ping(self) -> bool:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    def session(self) -> Session:
        return self.SessionLocal()

    def close(self) -> None:
        self.engine.dispose()
        logger.info("Database engine disposed")


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """Commit na sukces, rollback + ponowny raise na kazdy wyjatek."""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
