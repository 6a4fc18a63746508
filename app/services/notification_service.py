# app/services/notification_service.py
from kombu.exceptions import OperationalError

from app.celery_worker import celery_app
from app.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Serwis do wysylania powiadomien.
    Uzywa Celery do asynchronicznego przetwarzania.
    """

    @staticmethod
    def send_order_notification(user_id: int, order_id: int, order_number: str) -> bool:
        """
        Wysyla powiadomienie o przyjeciu zamowienia. Wolane po commicie,
        awaria brokera nie cofa zamowienia.
        """
        try:
            send_order_notification_task.delay(user_id, order_id, order_number)
            return True
        except OperationalError as e:
            logger.error(f"Nie udalo sie zlecic powiadomienia dla zamowienia {order_number}: {e}")
            return False


@celery_app.task(name="app.services.notification_service.send_order_notification_task")
def send_order_notification_task(user_id: int, order_id: int, order_number: str):
    """
    Celery task - w prawdziwym systemie wyslalby email/SMS.
    Teraz tylko loguje.
    """
    logger.info(f"[NOTIFICATION] User {user_id}: order {order_number} (id={order_id}) received")

    return {"user_id": user_id, "order_id": order_id, "order_number": order_number, "status": "sent"}
