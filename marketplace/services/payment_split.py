# marketplace/services/payment_split.py
"""
Podzial platnosci zamowienia na wallet / rewards / cash.

Dwa etapy, oba jako czyste funkcje:
1. compute_local_split - lokalne reguly (limity eligibility, salda, nadplata)
2. override_with_authority - zastapienie podzialu decyzja uslugi entitlement

Limity eligibility z etapu 1 nie sa ponownie sprawdzane na liczbach z etapu 2,
sprawdzamy tylko skonczonosc, nieujemnosc i zgodnosc sumy z totalem.
"""
from decimal import Decimal, InvalidOperation
from typing import Iterable, Any

from marketplace.domain.checkout import CheckoutLine, PaymentSplit, AccountSnapshot
from marketplace.domain.errors import (
    EligibilityLimitError,
    BalanceInsufficientError,
    OverpaymentError,
    StockValidationError,
    EntitlementServiceError,
)
from marketplace.utils.settings import MONEY_EPSILON

ZERO = Decimal("0")
CENT = Decimal("0.01")


def money(value: Decimal) -> Decimal:
    return value.quantize(CENT)


def validate_stock(lines: Iterable[CheckoutLine]) -> None:
    #zbieramy wszystkie braki, nie tylko pierwszy
    errors = [
        f'Insufficient stock for "{line.name}". Available: {line.stock_quantity}'
        for line in lines
        if line.stock_quantity < line.quantity
    ]
    if errors:
        raise StockValidationError(errors)


def order_totals(lines: Iterable[CheckoutLine]) -> tuple[Decimal, Decimal, Decimal]:
    """Zwraca (total, wallet_ineligible, rewards_ineligible)."""
    total = ZERO
    wallet_ineligible = ZERO
    rewards_ineligible = ZERO

    for line in lines:
        line_total = line.line_total
        total += line_total
        # kazde zrodlo liczone niezaleznie
        if not line.wallet_eligible:
            wallet_ineligible += line_total
        if not line.rewards_eligible:
            rewards_ineligible += line_total

    return total, wallet_ineligible, rewards_ineligible


def compute_local_split(
    lines: list[CheckoutLine],
    account: AccountSnapshot,
    wallet: Decimal,
    rewards: Decimal,
) -> PaymentSplit:
    total, wallet_ineligible, rewards_ineligible = order_totals(lines)

    max_wallet = total - wallet_ineligible
    if wallet > max_wallet:
        raise EligibilityLimitError("wallet", money(max_wallet))

    max_rewards = total - rewards_ineligible
    if rewards > max_rewards:
        raise EligibilityLimitError("rewards", money(max_rewards))

    if wallet > account.wallet_balance:
        raise BalanceInsufficientError("wallet")

    if rewards > account.rewards_balance:
        raise BalanceInsufficientError("rewards")

    cash = total - wallet - rewards
    if cash < 0:
        raise OverpaymentError()

    return PaymentSplit(total=total, wallet=wallet, rewards=rewards, cash=cash)


def _to_amount(value: Any, field: str) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        raise EntitlementServiceError(f"Entitlement response field {field} is not numeric")
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise EntitlementServiceError(f"Entitlement response field {field} is not numeric")
    if not amount.is_finite():
        raise EntitlementServiceError("Entitlement response contains non-numeric approved amounts")
    try:
        return money(amount)
    except InvalidOperation:
        raise EntitlementServiceError(f"Entitlement response field {field} is out of range")


def _pick(decision: dict, *keys: str):
    for key in keys:
        if decision.get(key) is not None:
            return decision[key]
    return None


def override_with_authority(local: PaymentSplit, account: AccountSnapshot, decision: dict) -> PaymentSplit:
    """
    Buduje koncowy podzial z odpowiedzi uslugi entitlement.

    Brakujace kwoty: wallet i rewards = zadane przez klienta,
    cash = max(0, total - wallet - rewards).
    Kwoty zaokraglane do groszy przed sprawdzeniami, tak jak trafia do bazy.
    Przyznane wallet/rewards nie moga przekroczyc zablokowanych sald.
    Niespojna odpowiedz -> EntitlementServiceError.
    """
    total = local.total

    raw_wallet = _pick(decision, "approvedWalletAmount", "approvedWallet")
    raw_rewards = _pick(decision, "approvedRewardsAmount", "approvedRewards")
    raw_cash = _pick(decision, "approvedCashAmount", "approvedCash")

    wallet = local.wallet if raw_wallet is None else _to_amount(raw_wallet, "approvedWalletAmount")
    rewards = local.rewards if raw_rewards is None else _to_amount(raw_rewards, "approvedRewardsAmount")
    if raw_cash is None:
        cash = max(ZERO, total - wallet - rewards)
    else:
        cash = _to_amount(raw_cash, "approvedCashAmount")

    if wallet < 0 or rewards < 0 or cash < 0:
        raise EntitlementServiceError("Entitlement response contains negative approved amounts")

    if abs(wallet + rewards + cash - total) > MONEY_EPSILON:
        raise EntitlementServiceError("Entitlement approved split does not match order total")

    if wallet > account.wallet_balance or rewards > account.rewards_balance:
        raise EntitlementServiceError("Entitlement approved amounts exceed account balance")

    return PaymentSplit(total=total, wallet=wallet, rewards=rewards, cash=cash)
