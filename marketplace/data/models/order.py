from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric, Text
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from marketplace.data.database import Base

ORDER_PAID = "PAID"


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # wallet + rewards + cash == total
    total_amount = Column(Numeric(12, 2), nullable=False)
    wallet_amount = Column(Numeric(12, 2), nullable=False, default=0)
    rewards_amount = Column(Numeric(12, 2), nullable=False, default=0)
    cash_amount = Column(Numeric(12, 2), nullable=False, default=0)

    status = Column(String, nullable=False, default=ORDER_PAID)
    shipping_address = Column(Text, nullable=False)
    payment_method = Column(String, nullable=False, default="COD")
    beneficiary_name = Column(String, nullable=False, default="Self")
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.id",
    )
