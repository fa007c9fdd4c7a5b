# storefront/repos/order_repo.py
from typing import List, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_status_history import OrderStatusHistoryModel
from storefront.data.models.user import UserModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: int, lock: bool = False) -> OrderModel | None:
        return self.db.get(OrderModel, order_id, with_for_update=True if lock else None)

    def get_user_order(self, order_id: int, user_id: int, lock: bool = False) -> OrderModel | None:
        stmt = select(OrderModel).where(
            OrderModel.id == order_id,
            OrderModel.user_id == user_id,
        )
        if lock:
            stmt = stmt.with_for_update()
        return self.db.execute(stmt).scalar_one_or_none()

    def list_user_orders(self, user_id: int, limit: int, offset: int) -> List[OrderModel]:
        stmt = (
            select(OrderModel)
            .where(OrderModel.user_id == user_id)
            .order_by(OrderModel.ordered_at.desc(), OrderModel.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(self.db.execute(stmt).scalars().all())

    def list_all_orders(self, limit: int, offset: int) -> List[Tuple[OrderModel, str | None, str | None]]:
        stmt = (
            select(OrderModel, UserModel.name, UserModel.email)
            .outerjoin(UserModel, OrderModel.user_id == UserModel.id)
            .order_by(OrderModel.ordered_at.desc(), OrderModel.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return [tuple(row) for row in self.db.execute(stmt).all()]

    def add_history(self, entry: OrderStatusHistoryModel) -> OrderStatusHistoryModel:
        self.db.add(entry)
        self.db.flush()
        return entry

    def get_history(self, order_id: int) -> List[OrderStatusHistoryModel]:
        stmt = (
            select(OrderStatusHistoryModel)
            .where(OrderStatusHistoryModel.order_id == order_id)
            .order_by(OrderStatusHistoryModel.id)
        )
        return list(self.db.execute(stmt).scalars().all())
