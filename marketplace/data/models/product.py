from sqlalchemy import Column, Integer, String, Numeric, Boolean, CheckConstraint

from marketplace.data.database import Base


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    category = Column(String, nullable=True)

    price = Column(Numeric(12, 2), nullable=False)
    stock_quantity = Column(Integer, nullable=False, default=0)

    wallet_eligible = Column(Boolean, nullable=False, default=False)
    rewards_eligible = Column(Boolean, nullable=False, default=False)
    #tag programu benefitowego dla uslugi entitlement
    benefit_program_id = Column(String, nullable=True)

    __table_args__ = (
        CheckConstraint("stock_quantity >= 0", name="ck_products_stock_non_negative"),
    )
