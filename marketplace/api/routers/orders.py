# marketplace/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from marketplace.data.database import get_db
from marketplace.domain.schemas import OrderOut
from marketplace.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session):
    return OrderService(db)


@router.get("", response_model=List[OrderOut])
def list_orders(
    user_id: int = Query(...),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    """
    Lista zamówień użytkownika, najnowsze pierwsze.
    """
    return get_service(db).list_orders(user_id, limit=limit)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    """
    Pobiera szczegóły zamówienia razem z pozycjami.
    """
    svc = get_service(db)
    try:
        return svc.get_order(order_id, user_id)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
