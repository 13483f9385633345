# storefront/services/notification_service.py
from storefront.celery_worker import celery_app
from storefront.utils.settings import NOTIFICATIONS_ENABLED
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Publikuje zdarzenie zmiany statusu zamowienia.
    Dostarczenie (email/SMS/push) jest poza tym serwisem, task Celery tylko loguje.
    """

    def __init__(self, enabled: bool = NOTIFICATIONS_ENABLED):
        self.enabled = enabled

    def order_status_changed(self, order_id: int, user_id: int, old_status: str, new_status: str):
        if not self.enabled:
            logger.info(
                "order_status_changed",
                order_id=order_id,
                user_id=user_id,
                old_status=old_status,
                new_status=new_status,
                delivery="disabled",
            )
            return

        try:
            order_status_changed_task.delay(order_id, user_id, old_status, new_status)
        except Exception as e:
            # zmiana statusu jest juz zatwierdzona, brak brokera nie cofa jej
            logger.error(f"Failed to publish status change for order {order_id}: {e}")


@celery_app.task(name="storefront.services.notification_service.order_status_changed_task")
def order_status_changed_task(order_id: int, user_id: int, old_status: str, new_status: str):
    """
    Celery task - w prawdziwym systemie wysłałby email/SMS/push.
    Teraz tylko loguje.
    """
    logger.info(f"[NOTIFICATION] User {user_id}: Order {order_id} {old_status} -> {new_status}")

    return {"order_id": order_id, "user_id": user_id, "status": new_status}
