from sqlalchemy.orm import Session

from marketplace.domain.schemas import ProductOut
from marketplace.repos.product_repo import ProductRepo


class ProductService:
    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    def get_product(self, product_id: int) -> ProductOut:
        product = self.repo.get_product(product_id)
        if not product:
            raise ValueError("Product not found")
        return ProductOut.model_validate(product)
