# app/tasks/abandon.py
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from app.celery_worker import celery_app
from app.data.database import Database, transaction
from app.domain.enums import CartStatus
from app.repos.cart_repo import CartRepo
from app.utils.settings import CART_ABANDON_AFTER_SECONDS
from app.utils.logging import get_logger

logger = get_logger(__name__)


def abandon_stale_carts(db: Session, idle_seconds: int = CART_ABANDON_AFTER_SECONDS, now: datetime | None = None) -> int:
    """
    Aktywne koszyki bez zmian dluzej niz idle_seconds dostaja status
    abandoned. Pozycje zostaja, koszyk po prostu przestaje byc aktywny.
    """
    now = now or datetime.now(timezone.utc)
    repo = CartRepo(db)

    with transaction(db):
        carts = repo.list_stale_active(now - timedelta(seconds=idle_seconds))
        for cart in carts:
            cart.status = CartStatus.ABANDONED.value

    logger.info(f"Abandoned {len(carts)} stale carts")
    return len(carts)


@celery_app.task(name="app.tasks.abandon.abandon_stale_carts_task")
def abandon_stale_carts_task(idle_seconds: int = CART_ABANDON_AFTER_SECONDS):
    logger.info("Abandon stale carts task started")

    database = Database()
    db = database.session()
    try:
        return abandon_stale_carts(db, idle_seconds)
    finally:
        db.close()
        database.close()
