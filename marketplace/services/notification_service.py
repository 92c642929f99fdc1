# marketplace/services/notification_service.py
from marketplace.celery_worker import celery_app
from marketplace.services.mailer import build_mailer
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Serwis do wysyłania powiadomień.
    Używa Celery do asynchronicznego przetwarzania.
    """

    @staticmethod
    def send_order_confirmation(email: str, order_ids: list[int]):
        """
        Zleca maila z potwierdzeniem zamowienia. Zamowienie jest juz zapisane,
        wiec problem z kolejka tylko logujemy.
        """
        try:
            send_order_confirmation_task.delay(email, order_ids)
        except Exception as e:
            logger.warning(f"Nie udalo sie zlecic potwierdzenia zamowien {order_ids}: {e}")


@celery_app.task(name="marketplace.services.notification_service.send_order_confirmation_task")
def send_order_confirmation_task(email: str, order_ids: list[int]):
    ids = ", ".join(f"#{order_id}" for order_id in order_ids)
    logger.info(f"[NOTIFICATION] {email}: zamowienia {ids} oplacone")

    build_mailer().send(
        to=email,
        subject="Potwierdzenie zamówienia",
        body=f"Dziękujemy za zakupy! Twoje zamówienia {ids} zostały przyjęte.",
    )

    return {"email": email, "order_ids": order_ids, "status": "sent"}
