# marketplace/domain/checkout.py
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class CheckoutLine(BaseModel):
    """Pozycja koszyka zlaczona z zablokowanym wierszem produktu."""

    product_id: int
    name: str
    category: str | None = None
    quantity: int
    unit_price: Decimal
    stock_quantity: int
    wallet_eligible: bool
    rewards_eligible: bool
    benefit_program_id: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class PaymentSplit(BaseModel):
    total: Decimal
    wallet: Decimal
    rewards: Decimal
    cash: Decimal

    model_config = ConfigDict(frozen=True)


class AccountSnapshot(BaseModel):
    user_id: int
    wallet_balance: Decimal
    rewards_balance: Decimal
    employer_id: str | None = None
    employer_name: str | None = None

    model_config = ConfigDict(frozen=True)


class CheckoutResult(BaseModel):
    order_id: int
    split: PaymentSplit
