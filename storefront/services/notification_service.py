# storefront/services/notification_service.py
from storefront.celery_worker import celery_app
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Powiadomienia o zamowieniach, wysylane asynchronicznie przez Celery.
    Best-effort: blad kolejki jest logowany i nie przerywa glownej operacji.
    """

    @staticmethod
    def order_placed(user_id: int, order_id: int) -> bool:
        return _dispatch(send_order_placed_task, user_id, order_id)

    @staticmethod
    def payment_reviewed(user_id: int, order_id: int, decision: str) -> bool:
        return _dispatch(send_payment_reviewed_task, user_id, order_id, decision)


def _dispatch(task, *args) -> bool:
    try:
        task.delay(*args)
        return True
    except Exception as e:
        logger.warning(f"Notification {task.name}{args} not dispatched: {e}")
        return False


@celery_app.task(name="storefront.services.notification_service.send_order_placed_task")
def send_order_placed_task(user_id: int, order_id: int):
    """
    W prawdziwym systemie email/SMS przez zewnetrzny notifier, tu tylko log.
    """
    logger.info(f"[NOTIFICATION] User {user_id}: order {order_id} placed, awaiting payment")
    return {"user_id": user_id, "order_id": order_id, "status": "sent"}


@celery_app.task(name="storefront.services.notification_service.send_payment_reviewed_task")
def send_payment_reviewed_task(user_id: int, order_id: int, decision: str):
    logger.info(f"[NOTIFICATION] User {user_id}: payment for order {order_id} {decision}")
    return {"user_id": user_id, "order_id": order_id, "decision": decision, "status": "sent"}
