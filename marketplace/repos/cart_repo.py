# marketplace/repos/cart_repo.py
from sqlalchemy import select, update, delete
from sqlalchemy.orm import Session

from marketplace.data.models.cart import CartModel, CART_ACTIVE, CART_CONVERTED
from marketplace.data.models.cart_item import CartItemModel
from marketplace.data.models.product import ProductModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    #query
    def get_active_cart_by_user(self, user_id: int, lock: bool = False) -> CartModel | None:
        stmt = (
            select(CartModel)
            .where(CartModel.user_id == user_id, CartModel.status == CART_ACTIVE)
            .limit(1)
        )
        if lock:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_cart_item(self, cart_id: int, item_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.id == item_id,
                CartItemModel.cart_id == cart_id,
            )
        ).scalar_one_or_none()

    def get_cart_item_by_product(self, cart_id: int, product_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def get_cart_lines(self, cart_id: int) -> list[tuple[CartItemModel, ProductModel]]:
        stmt = (
            select(CartItemModel, ProductModel)
            .join(ProductModel, CartItemModel.product_id == ProductModel.id)
            .where(CartItemModel.cart_id == cart_id)
            .order_by(CartItemModel.added_at.desc(), CartItemModel.id.desc())
        )
        return [tuple(row) for row in self.db.execute(stmt).all()]

    def lock_cart_lines(self, cart_id: int) -> list[tuple[CartItemModel, ProductModel]]:
        # blokada produktow rosnaco po id, stala kolejnosc = brak deadlockow
        stmt = (
            select(CartItemModel, ProductModel)
            .join(ProductModel, CartItemModel.product_id == ProductModel.id)
            .where(CartItemModel.cart_id == cart_id)
            .order_by(ProductModel.id)
            .with_for_update(of=ProductModel)
            .execution_options(populate_existing=True)
        )
        return [tuple(row) for row in self.db.execute(stmt).all()]

    #commands
    def create_cart(self, cart: CartModel) -> CartModel:
        self.db.add(cart)
        self.db.commit()
        self.db.refresh(cart)
        return cart

    def add_cart_item(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        return item

    def delete_cart_item(self, cart_id: int, item_id: int) -> int:
        result = self.db.execute(
            delete(CartItemModel).where(
                CartItemModel.id == item_id,
                CartItemModel.cart_id == cart_id,
            )
        )
        self.db.commit()
        return result.rowcount

    def mark_converted(self, cart_id: int) -> int:
        # tylko ACTIVE -> CONVERTED, 0 wierszy = ktos juz skonwertowal
        result = self.db.execute(
            update(CartModel)
            .where(CartModel.id == cart_id, CartModel.status == CART_ACTIVE)
            .values(status=CART_CONVERTED)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def rollback(self):
        self.db.rollback()
