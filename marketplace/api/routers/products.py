# marketplace/api/routers/products.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from marketplace.data.database import get_db
from marketplace.domain.schemas import ProductOut
from marketplace.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"])


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    try:
        return ProductService(db).get_product(product_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
