# marketplace/services/cart_service.py
from decimal import Decimal
from typing import Dict, Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from marketplace.data.models.cart import CartModel, CART_ACTIVE
from marketplace.data.models.cart_item import CartItemModel
from marketplace.repos.cart_repo import CartRepo
from marketplace.repos.product_repo import ProductRepo
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Prosta implementacja cqrs i proste use case dla domeny cart
    commands (add, update, remove) modyfikuja stan
    query (get) tylko odczyt, ale tworzy koszyk leniwie
    Koszyk CONVERTED jest juz nieaktywny, kolejne wywolanie tworzy nowy.
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.product_repo = ProductRepo(db)

    def _get_or_create_active_cart(self, user_id: int) -> CartModel:
        existing = self.repo.get_active_cart_by_user(user_id)
        if existing:
            return existing

        try:
            created = self.repo.create_cart(CartModel(user_id=user_id, status=CART_ACTIVE))
        except IntegrityError:
            # rownolegle zapytanie utworzylo koszyk pierwsze
            self.repo.rollback()
            return self.repo.get_active_cart_by_user(user_id)

        logger.info(f"Utworzono nowy koszyk {created.id} dla uzytkownika {user_id}")
        return created

    #query - odczyt
    def get_cart(self, user_id: int) -> Dict[str, Any]:
        cart = self._get_or_create_active_cart(user_id)
        rows = self.repo.get_cart_lines(cart.id)

        items = [
            {
                "id": item.id,
                "product_id": product.id,
                "name": product.name,
                "quantity": item.quantity,
                "price": product.price,
                "stock_quantity": product.stock_quantity,
                "total_price": product.price * item.quantity,
            }
            for item, product in rows
        ]

        #dict przyksztalcany w jsona
        return {
            "cart_id": cart.id,
            "user_id": cart.user_id,
            "status": cart.status,
            "items": items,
            "summary": {
                "total_amount": sum((i["total_price"] for i in items), Decimal("0.00")),
                "total_items": sum(i["quantity"] for i in items),
            },
        }

    #commands
    def add_product(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        if quantity < 1:
            raise ValueError("Quantity must be at least 1.")

        product = self.product_repo.get_product(product_id)
        if not product:
            raise LookupError("Product not found or unavailable.")

        cart = self._get_or_create_active_cart(user_id)

        existing_item = self.repo.get_cart_item_by_product(cart.id, product_id)
        if existing_item:
            logger.info(
                f"Produkt {product_id} juz jest w koszyku {cart.id}, zwiekszam ilosc "
                f"z {existing_item.quantity} do {existing_item.quantity + quantity}"
            )
            existing_item.quantity += quantity
            self.repo.add_cart_item(existing_item)
        else:
            logger.info(f"Dodaje nowy produkt {product_id} do koszyka {cart.id}")
            self.repo.add_cart_item(
                CartItemModel(cart_id=cart.id, product_id=product_id, quantity=quantity)
            )

        return self.get_cart(user_id)

    def update_quantity(self, user_id: int, item_id: int, quantity: int) -> Dict[str, Any]:
        if quantity < 1:
            raise ValueError("Quantity must be at least 1.")

        cart = self._get_or_create_active_cart(user_id)
        item = self.repo.get_cart_item(cart.id, item_id)
        if not item:
            raise LookupError("Item not found in your cart.")

        item.quantity = quantity
        self.repo.add_cart_item(item)
        return self.get_cart(user_id)

    def remove_item(self, user_id: int, item_id: int) -> Dict[str, Any]:
        cart = self._get_or_create_active_cart(user_id)

        if self.repo.delete_cart_item(cart.id, item_id) == 0:
            raise LookupError("Item not found in your cart.")

        logger.info(f"Usunieto pozycje {item_id} z koszyka {cart.id}")
        return self.get_cart(user_id)
