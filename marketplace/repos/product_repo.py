# marketplace/repos/product_repo.py
from sqlalchemy import update
from sqlalchemy.orm import Session

from marketplace.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def decrement_stock(self, product_id: int, quantity: int) -> int:
        #warunek stock >= quantity, stan nigdy ponizej zera
        result = self.db.execute(
            update(ProductModel)
            .where(
                ProductModel.id == product_id,
                ProductModel.stock_quantity >= quantity,
            )
            .values(stock_quantity=ProductModel.stock_quantity - quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
