# marketplace/services/order_service.py
from sqlalchemy.orm import Session

from marketplace.data.models.order import OrderModel
from marketplace.repos.order_repo import OrderRepo


class OrderService:
    """
    Serwis odczytu zamówień (Query).
    Zamówienia tworzy wyłącznie CheckoutService.
    """

    def __init__(self, db: Session):
        self.repo = OrderRepo(db)

    def get_order(self, order_id: int, user_id: int) -> OrderModel:
        order = self.repo.get_order(order_id)

        if not order:
            raise ValueError("Order not found.")

        if order.user_id != user_id:
            raise PermissionError("Access to this order is denied.")

        return order

    def list_orders(self, user_id: int, limit: int = 50) -> list[OrderModel]:
        return self.repo.list_orders_for_user(user_id, limit=limit)
