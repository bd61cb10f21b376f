# marketplace/services/checkout_service.py
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.data.models.order import OrderModel, ORDER_PAID
from marketplace.data.models.order_item import OrderItemModel
from marketplace.domain import errors
from marketplace.domain.checkout import CheckoutLine, PaymentSplit, AccountSnapshot, CheckoutResult
from marketplace.domain.schemas import CheckoutIn
from marketplace.repos.cart_repo import CartRepo
from marketplace.repos.order_repo import OrderRepo
from marketplace.repos.product_repo import ProductRepo
from marketplace.repos.user_repo import UserRepo
from marketplace.services.entitlement_client import EntitlementClient
from marketplace.services.notification_service import NotificationService
from marketplace.services.payment_split import (
    validate_stock,
    compute_local_split,
    override_with_authority,
)
from marketplace.utils.retry import db_retry
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_BENEFICIARY = "Self"
DEFAULT_PAYMENT_METHOD = "COD"


def _has_sub_cents(amount: Decimal) -> bool:
    return amount.normalize().as_tuple().exponent < -2


class CheckoutContext:
    """Stan zebrany w etapie Acquire, trzymany pod blokadami do konca transakcji."""

    def __init__(self, cart_id: int, account: AccountSnapshot, lines: list[CheckoutLine]):
        self.cart_id = cart_id
        self.account = account
        self.lines = lines


class CheckoutService:
    """
    Use Case: złożenie zamówienia z aktywnego koszyka.

    Etapy jednej transakcji: Acquire -> Validate -> Authorize -> Commit.
    Tylko Commit modyfikuje współdzielony stan (salda, stany magazynowe, koszyk).
    Błąd przed Commit = rollback bez żadnych zmian.
    """

    def __init__(
        self,
        db: Session,
        entitlement_client: EntitlementClient,
        notification_service: NotificationService | None = None,
    ):
        self.db = db
        self.cart_repo = CartRepo(db)
        self.user_repo = UserRepo(db)
        self.product_repo = ProductRepo(db)
        self.order_repo = OrderRepo(db)
        self.entitlement_client = entitlement_client
        self.notification_service = notification_service

    def place_order(self, user_id: int, request: CheckoutIn) -> CheckoutResult:
        shipping_address, wallet, rewards = self._validate_request(request)

        try:
            result = self._place_order_once(user_id, request, shipping_address, wallet, rewards)
        except errors.CheckoutError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Checkout for user {user_id} failed during commit: {e}", exc_info=True)
            raise errors.CommitFailure() from e

        logger.info(
            f"Order {result.order_id} placed by user {user_id}: total={result.split.total} "
            f"wallet={result.split.wallet} rewards={result.split.rewards} cash={result.split.cash}"
        )
        self._notify(user_id, result)
        return result

    def _validate_request(self, request: CheckoutIn) -> tuple[str, Decimal, Decimal]:
        shipping_address = (request.shipping_address or "").strip()
        if not shipping_address:
            raise errors.ValidationError("Shipping address is required.")

        wallet = request.wallet_amount if request.wallet_amount is not None else Decimal("0")
        rewards = request.rewards_amount if request.rewards_amount is not None else Decimal("0")

        if not wallet.is_finite() or wallet < 0:
            raise errors.ValidationError("Wallet amount must be a non-negative number.")
        if not rewards.is_finite() or rewards < 0:
            raise errors.ValidationError("Rewards amount must be a non-negative number.")

        # kwoty zapisywane jako NUMERIC(12,2), ulamki grosza odrzucamy
        if _has_sub_cents(wallet):
            raise errors.ValidationError("Wallet amount must have at most 2 decimal places.")
        if _has_sub_cents(rewards):
            raise errors.ValidationError("Rewards amount must have at most 2 decimal places.")

        return shipping_address, wallet, rewards

    @db_retry()
    def _place_order_once(
        self,
        user_id: int,
        request: CheckoutIn,
        shipping_address: str,
        wallet: Decimal,
        rewards: Decimal,
    ) -> CheckoutResult:
        try:
            ctx = self._acquire(user_id)
            local_split = self._validate(ctx, wallet, rewards)
            split = self._authorize(ctx, local_split)
            order_id = self._commit(ctx, split, request, shipping_address)
        except Exception:
            # zwalnia blokady, nic nie zostaje zapisane
            self.db.rollback()
            raise

        return CheckoutResult(order_id=order_id, split=split)

    #etap 1: blokady na koszyku, koncie i produktach
    def _acquire(self, user_id: int) -> CheckoutContext:
        cart = self.cart_repo.get_active_cart_by_user(user_id, lock=True)
        if not cart:
            raise errors.NoActiveCartError()

        user = self.user_repo.lock_account(user_id)
        if not user:
            raise errors.NoActiveCartError()

        account = AccountSnapshot(
            user_id=user.id,
            wallet_balance=Decimal(user.wallet_balance),
            rewards_balance=Decimal(user.rewards_balance),
            employer_id=user.employer_id,
            employer_name=user.employer_name,
        )

        rows = self.cart_repo.lock_cart_lines(cart.id)
        if not rows:
            raise errors.EmptyCartError()

        lines = [
            CheckoutLine(
                product_id=product.id,
                name=product.name,
                category=product.category,
                quantity=item.quantity,
                unit_price=Decimal(product.price),
                stock_quantity=product.stock_quantity,
                wallet_eligible=bool(product.wallet_eligible),
                rewards_eligible=bool(product.rewards_eligible),
                benefit_program_id=product.benefit_program_id,
            )
            for item, product in rows
        ]

        logger.info(f"Checkout: locked cart {cart.id} with {len(lines)} line(s) for user {user_id}")
        return CheckoutContext(cart_id=cart.id, account=account, lines=lines)

    #etap 2: stany magazynowe i lokalny podzial platnosci
    def _validate(self, ctx: CheckoutContext, wallet: Decimal, rewards: Decimal) -> PaymentSplit:
        validate_stock(ctx.lines)
        return compute_local_split(ctx.lines, ctx.account, wallet, rewards)

    #etap 3: opcjonalna autoryzacja w usludze entitlement
    def _authorize(self, ctx: CheckoutContext, local_split: PaymentSplit) -> PaymentSplit:
        if not self.entitlement_client.is_configured:
            return local_split

        try:
            decision = self.entitlement_client.validate(self._entitlement_payload(ctx, local_split))
            return override_with_authority(local_split, ctx.account, decision)
        except errors.EntitlementServiceError as e:
            if self.entitlement_client.is_strict:
                logger.warning(f"Entitlement validation failed in strict mode, aborting checkout: {e}")
                raise errors.BenefitServiceUnavailableError(e) from e

            logger.warning(f"Entitlement validation failed in permissive mode, using local rules: {e}")
            return local_split

    def _entitlement_payload(self, ctx: CheckoutContext, local_split: PaymentSplit) -> dict:
        return {
            "userId": ctx.account.user_id,
            "employerId": ctx.account.employer_id,
            "employerName": ctx.account.employer_name,
            "totals": {
                "orderTotal": float(local_split.total),
                "requestedWallet": float(local_split.wallet),
                "requestedRewards": float(local_split.rewards),
            },
            "items": [
                {
                    "productId": line.product_id,
                    "name": line.name,
                    "category": line.category,
                    "quantity": line.quantity,
                    "unitPrice": float(line.unit_price),
                    "walletEligible": line.wallet_eligible,
                    "rewardsEligible": line.rewards_eligible,
                    "benefitProgramId": line.benefit_program_id,
                }
                for line in ctx.lines
            ],
        }

    #etap 4: jedyne miejsce z zapisami
    def _commit(
        self,
        ctx: CheckoutContext,
        split: PaymentSplit,
        request: CheckoutIn,
        shipping_address: str,
    ) -> int:
        user_id = ctx.account.user_id

        if split.wallet > 0 or split.rewards > 0:
            self.user_repo.debit_balances(user_id, split.wallet, split.rewards)

        order = self.order_repo.add_order(
            OrderModel(
                user_id=user_id,
                total_amount=split.total,
                wallet_amount=split.wallet,
                rewards_amount=split.rewards,
                cash_amount=split.cash,
                status=ORDER_PAID,
                shipping_address=shipping_address,
                payment_method=request.payment_method or DEFAULT_PAYMENT_METHOD,
                beneficiary_name=request.beneficiary or DEFAULT_BENEFICIARY,
            )
        )

        for line in ctx.lines:
            self.order_repo.add_order_item(
                OrderItemModel(
                    order_id=order.id,
                    product_id=line.product_id,
                    quantity=line.quantity,
                    price_at_purchase=line.unit_price,
                    product_name_snapshot=line.name,
                )
            )

            if self.product_repo.decrement_stock(line.product_id, line.quantity) == 0:
                raise errors.StockValidationError(
                    [f'Insufficient stock for "{line.name}". Available: {line.stock_quantity}']
                )

        if self.cart_repo.mark_converted(ctx.cart_id) == 0:
            # inny checkout skonwertowal koszyk pierwszy
            raise errors.NoActiveCartError()

        self.db.commit()
        return order.id

    def _notify(self, user_id: int, result: CheckoutResult):
        if not self.notification_service:
            return
        try:
            self.notification_service.send_order_notification(user_id, result.order_id, result.split.total)
        except Exception as e:
            logger.warning(f"Failed to dispatch notification for order {result.order_id}: {e}")
