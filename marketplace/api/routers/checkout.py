# marketplace/api/routers/checkout.py
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from marketplace.data.database import get_db
from marketplace.domain.errors import CheckoutError
from marketplace.domain.schemas import CheckoutIn, CheckoutOut, SplitOut
from marketplace.services.checkout_service import CheckoutService
from marketplace.services.entitlement_client import EntitlementClient
from marketplace.services.notification_service import NotificationService
from marketplace.utils.settings import EntitlementConfig

router = APIRouter(prefix="/checkout", tags=["checkout"])


def get_checkout_service(db: Session = Depends(get_db)) -> CheckoutService:
    # konfiguracja entitlement czytana przy kazdym requescie
    return CheckoutService(
        db=db,
        entitlement_client=EntitlementClient(EntitlementConfig.from_env()),
        notification_service=NotificationService(),
    )


@router.post("", response_model=CheckoutOut, status_code=201)
def place_order(
    payload: CheckoutIn,
    user_id: int = Query(...),
    svc: CheckoutService = Depends(get_checkout_service),
):
    """
    Składa zamówienie z aktywnego koszyka użytkownika.
    400 - błędy walidacji i reguł biznesowych, 503 - usługa entitlement niedostępna (strict).
    """
    try:
        result = svc.place_order(user_id, payload)
    except CheckoutError as e:
        return JSONResponse(status_code=e.status_code, content=e.to_dict())

    return CheckoutOut(
        order_id=result.order_id,
        split=SplitOut(
            wallet=result.split.wallet,
            rewards=result.split.rewards,
            cash=result.split.cash,
        ),
    )
