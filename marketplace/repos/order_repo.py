# marketplace/repos/order_repo.py
from decimal import Decimal
from typing import Iterable, List, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, selectinload

from marketplace.data.models.order import OrderModel
from marketplace.data.models.order_item import OrderItemModel

REVENUE_STATUSES = ("confirmed", "processing", "shipped", "delivered")


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        #bez commita, zamowienie wchodzi do transakcji checkoutu
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: int, with_items: bool = False) -> OrderModel | None:
        stmt = select(OrderModel).where(OrderModel.id == order_id)
        if with_items:
            stmt = stmt.options(selectinload(OrderModel.items).selectinload(OrderItemModel.catalog_set))
        return self.db.execute(stmt).scalar_one_or_none()

    def list_orders(self, conditions: Iterable, offset: int, limit: int) -> Tuple[List[OrderModel], int]:
        conditions = list(conditions)
        total = self.db.execute(
            select(func.count()).select_from(OrderModel).where(*conditions)
        ).scalar_one()
        rows = self.db.execute(
            select(OrderModel)
            .where(*conditions)
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            .offset(offset)
            .limit(limit)
        ).scalars().all()
        return list(rows), total

    def update_order(self, order_id: int, new_data: dict) -> int:
        result = self.db.execute(
            update(OrderModel)
            .where(OrderModel.id == order_id)
            .values(**new_data)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def count(self, conditions: Iterable) -> int:
        return self.db.execute(
            select(func.count()).select_from(OrderModel).where(*conditions)
        ).scalar_one()

    def revenue(self, conditions: Iterable) -> Decimal:
        total = self.db.execute(
            select(func.coalesce(func.sum(OrderModel.total_amount), 0))
            .where(*conditions, OrderModel.status.in_(REVENUE_STATUSES))
        ).scalar_one()
        return Decimal(str(total))
