# marketplace/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List
from decimal import Decimal
from datetime import datetime


class ItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: int = Field(..., gt=0, alias="productId", description="ID produktu (musi być > 0)")
    quantity: int = Field(1, ge=1, description="Ilość produktu (co najmniej 1)")

    model_config = ConfigDict(populate_by_name=True)


class ItemQuantityIn(BaseModel):
    quantity: int = Field(..., ge=1, description="Nowa ilość (co najmniej 1)")


class CartItemOut(BaseModel):
    """Schema dla produktu w koszyku (response)."""

    id: int
    product_id: int
    name: str
    quantity: int
    price: Decimal
    stock_quantity: int
    total_price: Decimal


class CartSummaryOut(BaseModel):
    total_amount: Decimal = Field(..., serialization_alias="totalAmount")
    total_items: int = Field(..., serialization_alias="totalItems")


class CartOut(BaseModel):
    """Schema dla koszyka (response)."""

    cart_id: int = Field(..., serialization_alias="cartId")
    user_id: int
    status: str
    items: List[CartItemOut]
    summary: CartSummaryOut


class UserCreate(BaseModel):
    """Schema dla tworzenia konta użytkownika z saldami benefitów."""

    id: int = Field(..., gt=0, description="ID użytkownika (musi być > 0)")
    name: str = Field(..., min_length=1, max_length=100, description="Imię użytkownika")
    wallet_balance: Decimal = Field(Decimal("0"), ge=0)
    rewards_balance: Decimal = Field(Decimal("0"), ge=0)
    employer_id: str | None = None
    employer_name: str | None = None


class UserRead(BaseModel):
    """Schema dla użytkownika (response)."""

    id: int
    name: str
    wallet_balance: Decimal
    rewards_balance: Decimal
    employer_id: str | None = None
    employer_name: str | None = None

    model_config = ConfigDict(from_attributes=True)


class ProductOut(BaseModel):
    id: int
    name: str
    category: str | None = None
    price: Decimal
    stock_quantity: int
    wallet_eligible: bool
    rewards_eligible: bool
    benefit_program_id: str | None = None

    model_config = ConfigDict(from_attributes=True)


class CheckoutIn(BaseModel):
    """Body dla POST /checkout (camelCase jak w storefroncie)."""

    shipping_address: str | None = Field(None, alias="shippingAddress")
    wallet_amount: Decimal | None = Field(None, alias="walletAmount")
    rewards_amount: Decimal | None = Field(None, alias="rewardsAmount")
    beneficiary: str | None = None
    payment_method: str | None = Field(None, alias="paymentMethod")

    model_config = ConfigDict(populate_by_name=True)


class SplitOut(BaseModel):
    wallet: Decimal
    rewards: Decimal
    cash: Decimal


class CheckoutOut(BaseModel):
    success: bool = True
    order_id: int = Field(..., serialization_alias="orderId")
    message: str = "Order placed successfully!"
    split: SplitOut


class OrderItemOut(BaseModel):
    product_id: int
    quantity: int
    price_at_purchase: Decimal
    product_name_snapshot: str

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    """Schema dla zamówienia (response)."""

    id: int
    user_id: int
    status: str
    total_amount: Decimal
    wallet_amount: Decimal
    rewards_amount: Decimal
    cash_amount: Decimal
    shipping_address: str
    payment_method: str
    beneficiary_name: str
    created_at: datetime
    items: List[OrderItemOut] = []

    model_config = ConfigDict(from_attributes=True)
