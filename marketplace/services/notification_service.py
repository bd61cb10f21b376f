# marketplace/services/notification_service.py
from decimal import Decimal

from marketplace.celery_worker import celery_app
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Serwis do wysyłania powiadomień o złożonym zamówieniu.
    Używa Celery do asynchronicznego przetwarzania.
    """

    @staticmethod
    def send_order_notification(user_id: int, order_id: int, total: Decimal):
        send_order_notification_task.delay(user_id, order_id, str(total))


@celery_app.task(name="marketplace.services.notification_service.send_order_notification_task")
def send_order_notification_task(user_id: int, order_id: int, total: str):
    """
    Celery task - w prawdziwym systemie wysłałby email/SMS/push.
    Teraz tylko loguje.
    """
    logger.info(f"[NOTIFICATION] User {user_id}: Order {order_id} placed, total ₹{total}")

    return {"user_id": user_id, "order_id": order_id, "status": "sent"}
