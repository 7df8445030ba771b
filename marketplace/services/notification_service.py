# marketplace/services/notification_service.py
from kombu.exceptions import OperationalError

from marketplace.celery_worker import celery_app
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Powiadomienia o nowych zamowieniach.
    Celery, zeby checkout nie czekal na wysylke.
    """

    @staticmethod
    def send_order_placed(provider_id: int, order_id: int, order_number: str):
        try:
            send_order_placed_task.delay(provider_id, order_id, order_number)
        except OperationalError as e:
            #zamowienie juz jest zapisane, brak brokera nie moze go cofnac
            logger.warning(f"Could not queue notification for order {order_number}: {e}")


@celery_app.task(name="marketplace.services.notification_service.send_order_placed_task")
def send_order_placed_task(provider_id: int, order_id: int, order_number: str):
    """
    W prawdziwym systemie email/webhook do providera, teraz tylko log.
    """
    logger.info(f"[NOTIFICATION] Provider {provider_id}: new order {order_number} (id={order_id})")
    return {"provider_id": provider_id, "order_id": order_id, "status": "sent"}
