# storefront/services/audit_service.py
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.order_status_history import OrderStatusHistoryModel
from storefront.repos.order_repo import OrderRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class AuditTrail:
    """
    Historia statusow zamowienia (order_status_history).
    Wpis dopisywany po commicie glownej transakcji, we wlasnej transakcji,
    wiec jego blad nigdy nie cofa zmiany statusu.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepo(db)

    def record(self, order_id: int, status: str, notes: str | None = None, changed_by: int | None = None) -> bool:
        try:
            self.repo.add_history(
                OrderStatusHistoryModel(
                    order_id=order_id,
                    status=status,
                    notes=notes,
                    changed_by=changed_by,
                )
            )
            self.db.commit()
            return True
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning(f"Order {order_id} history entry '{status}' not stored: {e}")
            return False
