# marketplace/repos/user_repo.py
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from marketplace.data.models.user import UserModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def create_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def lock_account(self, user_id: int) -> UserModel | None:
        #SELECT ... FOR UPDATE na wierszu konta
        stmt = (
            select(UserModel)
            .where(UserModel.id == user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def debit_balances(self, user_id: int, wallet: Decimal, rewards: Decimal) -> int:
        # dekrement, nie nadpisanie wartosci
        result = self.db.execute(
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(
                wallet_balance=UserModel.wallet_balance - wallet,
                rewards_balance=UserModel.rewards_balance - rewards,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
