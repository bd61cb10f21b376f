# marketplace/repos/order_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from marketplace.data.models.order import OrderModel
from marketplace.data.models.order_item import OrderItemModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        # flush zamiast commit, commit robi checkout
        self.db.add(order)
        self.db.flush()
        return order

    def add_order_item(self, item: OrderItemModel) -> OrderItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel)
            .where(OrderModel.id == order_id)
            .options(selectinload(OrderModel.items))
        ).scalar_one_or_none()

    def list_orders_for_user(self, user_id: int, limit: int = 50) -> list[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .where(OrderModel.user_id == user_id)
                .options(selectinload(OrderModel.items))
                .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
                .limit(limit)
            ).scalars().all()
        )
