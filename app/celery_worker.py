# app/celery_worker.py
from celery import Celery

from app.utils.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    CELERY_TASK_ALWAYS_EAGER,
    CART_ABANDON_AFTER_SECONDS,
)

celery_app = Celery(
    "store",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

#taski musza byc zaimportowane zeby celery je zarejestrowal
celery_app.conf.imports = (
    "app.tasks.abandon",
    "app.services.notification_service",
)

celery_app.conf.task_always_eager = CELERY_TASK_ALWAYS_EAGER

celery_app.conf.beat_schedule = {
    "abandon-stale-carts-hourly": {
        "task": "app.tasks.abandon.abandon_stale_carts_task",
        "schedule": 3600.0,
        "kwargs": {"idle_seconds": CART_ABANDON_AFTER_SECONDS},
    },
}

celery_app.conf.timezone = "UTC"
