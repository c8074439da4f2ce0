# app/repos/order_repo.py
from datetime import datetime
from typing import List

from sqlalchemy import case, func, or_, select, update
from sqlalchemy.orm import Session, selectinload

from app.data.models.order import OrderModel
from app.domain.order_status import OrderStatus, PaymentMethod, PaymentStatus


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def _with_items(self):
        return select(OrderModel).options(selectinload(OrderModel.items))

    def next_order_number(self) -> int:
        current = self.db.execute(select(func.max(OrderModel.order_number))).scalar()
        return (current or 0) + 1

    def add_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        stmt = self._with_items().where(OrderModel.id == order_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def list_by_phone(self, phone: str, order_id: int | None = None) -> List[OrderModel]:
        stmt = self._with_items().where(OrderModel.customer_phone_normalized == phone)
        if order_id is not None:
            stmt = stmt.where(OrderModel.id == order_id)
        stmt = stmt.order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        return list(self.db.execute(stmt).scalars().all())

    def list_orders(self, limit: int | None = None) -> List[OrderModel]:
        stmt = self._with_items().order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        if limit:
            stmt = stmt.limit(limit)
        return list(self.db.execute(stmt).scalars().all())

    def list_created_since(self, since: datetime) -> List[OrderModel]:
        stmt = select(OrderModel).where(OrderModel.created_at >= since)
        return list(self.db.execute(stmt).scalars().all())

    def list_stale_pending(self, cutoff: datetime) -> List[OrderModel]:
        stmt = select(OrderModel).where(
            OrderModel.status == OrderStatus.PENDING.value,
            OrderModel.payment_method != PaymentMethod.CASH_ON_DELIVERY.value,
            or_(
                OrderModel.payment_status.is_(None),
                OrderModel.payment_status != PaymentStatus.PAID.value,
            ),
            OrderModel.created_at < cutoff,
        )
        return list(self.db.execute(stmt).scalars().all())

    def mark_paid(self, order_id: int) -> int:
        """
        Check-and-set on payment_status: only the first call for an order
        gets rowcount 1, repeats match nothing. Only a pending order moves
        to confirmed, any later status is left where it is.
        """
        result = self.db.execute(
            update(OrderModel)
            .where(
                OrderModel.id == order_id,
                or_(
                    OrderModel.payment_status.is_(None),
                    OrderModel.payment_status != PaymentStatus.PAID.value,
                ),
            )
            .values(
                payment_status=PaymentStatus.PAID.value,
                status=case(
                    (OrderModel.status == OrderStatus.PENDING.value, OrderStatus.CONFIRMED.value),
                    else_=OrderModel.status,
                ),
            )
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
