from sqlalchemy import Column, Integer, String, Numeric, CheckConstraint
from marketplace.data.database import Base

class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)

    wallet_balance = Column(Numeric(12, 2), nullable=False, default=0)
    rewards_balance = Column(Numeric(12, 2), nullable=False, default=0)
    employer_id = Column(String, nullable=True)
    employer_name = Column(String, nullable=True)

    __table_args__ = (
        CheckConstraint("wallet_balance >= 0", name="ck_users_wallet_non_negative"),
        CheckConstraint("rewards_balance >= 0", name="ck_users_rewards_non_negative"),
    )
