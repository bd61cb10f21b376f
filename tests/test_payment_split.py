from decimal import Decimal

import pytest

from marketplace.domain.checkout import CheckoutLine, AccountSnapshot, PaymentSplit
from marketplace.domain.errors import (
    EligibilityLimitError,
    BalanceInsufficientError,
    OverpaymentError,
    StockValidationError,
    EntitlementServiceError,
)
from marketplace.services.payment_split import (
    validate_stock,
    order_totals,
    compute_local_split,
    override_with_authority,
    money,
)


def line(product_id=1, price="100.00", quantity=1, stock=10, wallet=True, rewards=True, name=None):
    return CheckoutLine(
        product_id=product_id,
        name=name or f"Product {product_id}",
        quantity=quantity,
        unit_price=Decimal(price),
        stock_quantity=stock,
        wallet_eligible=wallet,
        rewards_eligible=rewards,
    )


def account(wallet="10000", rewards="10000"):
    return AccountSnapshot(user_id=1, wallet_balance=Decimal(wallet), rewards_balance=Decimal(rewards))


class TestStock:
    def test_stock_equal_to_quantity_passes(self):
        validate_stock([line(quantity=3, stock=3)])

    def test_lists_every_offending_product(self):
        lines = [
            line(1, quantity=5, stock=3, name="Glucometer"),
            line(2, quantity=1, stock=1),
            line(3, quantity=2, stock=0, name="Test Strips"),
        ]
        with pytest.raises(StockValidationError) as exc:
            validate_stock(lines)

        assert exc.value.details == [
            'Insufficient stock for "Glucometer". Available: 3',
            'Insufficient stock for "Test Strips". Available: 0',
        ]
        assert exc.value.to_dict()["error"] == "Stock validation failed"


class TestLocalSplit:
    def test_eligibility_is_partitioned_per_source(self):
        lines = [
            line(1, price="100.00", quantity=2, wallet=False, rewards=True),
            line(2, price="50.00", quantity=1, wallet=True, rewards=False),
            line(3, price="10.00", quantity=1, wallet=False, rewards=False),
        ]
        total, wallet_ineligible, rewards_ineligible = order_totals(lines)

        assert total == Decimal("260.00")
        assert wallet_ineligible == Decimal("210.00")
        assert rewards_ineligible == Decimal("60.00")

    def test_wallet_exactly_at_cap_succeeds(self):
        lines = [line(1, price="300.00", wallet=True), line(2, price="200.00", wallet=False)]
        split = compute_local_split(lines, account(), Decimal("300.00"), Decimal("0"))

        assert split == PaymentSplit(
            total=Decimal("500.00"), wallet=Decimal("300.00"), rewards=Decimal("0"), cash=Decimal("200.00")
        )

    def test_wallet_one_unit_above_cap_fails(self):
        lines = [line(1, price="300.00", wallet=True), line(2, price="200.00", wallet=False)]
        with pytest.raises(EligibilityLimitError) as exc:
            compute_local_split(lines, account(), Decimal("301.00"), Decimal("0"))

        assert exc.value.message == "Only ₹300.00 of this order is wallet-eligible."
        assert exc.value.status_code == 400

    def test_rewards_cap(self):
        lines = [line(1, price="80.00", rewards=False), line(2, price="20.00", rewards=True)]
        with pytest.raises(EligibilityLimitError) as exc:
            compute_local_split(lines, account(), Decimal("0"), Decimal("20.01"))

        assert exc.value.message == "Only ₹20.00 of this order is rewards-eligible."

    def test_cap_is_checked_before_balance(self):
        lines = [line(1, price="100.00", wallet=False)]
        with pytest.raises(EligibilityLimitError):
            compute_local_split(lines, account(wallet="0"), Decimal("50"), Decimal("0"))

    def test_wallet_balance_insufficient(self):
        with pytest.raises(BalanceInsufficientError) as exc:
            compute_local_split([line(price="100.00")], account(wallet="40"), Decimal("50"), Decimal("0"))

        assert exc.value.message == "Insufficient wallet balance."

    def test_rewards_balance_insufficient(self):
        with pytest.raises(BalanceInsufficientError) as exc:
            compute_local_split([line(price="100.00")], account(rewards="10"), Decimal("0"), Decimal("11"))

        assert exc.value.message == "Insufficient rewards balance."

    def test_credits_exceeding_total(self):
        with pytest.raises(OverpaymentError) as exc:
            compute_local_split([line(price="100.00")], account(), Decimal("60"), Decimal("60"))

        assert exc.value.message == "Payment credits exceed order total."

    def test_conservation(self):
        lines = [line(1, price="999.00", quantity=2), line(2, price="0.99", quantity=3)]
        split = compute_local_split(lines, account(), Decimal("500.50"), Decimal("120.25"))

        assert split.wallet + split.rewards + split.cash == split.total
        assert split.cash == Decimal("1380.22")


class TestAuthorityOverride:
    local = PaymentSplit(
        total=Decimal("1000.00"), wallet=Decimal("400.00"), rewards=Decimal("100.00"), cash=Decimal("500.00")
    )
    funds = account()

    def test_authority_amounts_replace_local_split(self):
        split = override_with_authority(
            self.local,
            self.funds,
            {"approvedWalletAmount": 250, "approvedRewardsAmount": 0, "approvedCashAmount": 750},
        )
        assert (split.wallet, split.rewards, split.cash) == (Decimal("250"), Decimal("0"), Decimal("750"))
        assert split.total == Decimal("1000.00")

    def test_short_field_names_are_accepted(self):
        split = override_with_authority(
            self.local, self.funds, {"approvedWallet": "300.00", "approvedRewards": "0", "approvedCash": "700.00"}
        )
        assert split.wallet == Decimal("300.00")

    def test_missing_amounts_fall_back_to_requested(self):
        split = override_with_authority(self.local, self.funds, {"approvedWalletAmount": 200})

        assert split.wallet == Decimal("200")
        assert split.rewards == Decimal("100.00")
        assert split.cash == Decimal("700.00")

    @pytest.mark.parametrize("delta", ["0.009", "-0.009", "0.01"])
    def test_sum_within_tolerance_is_accepted(self, delta):
        cash = Decimal("500.00") + Decimal(delta)
        split = override_with_authority(
            self.local,
            self.funds,
            {"approvedWalletAmount": "400.00", "approvedRewardsAmount": "100.00", "approvedCashAmount": str(cash)},
        )
        assert split.cash == money(cash)

    @pytest.mark.parametrize("delta", ["0.02", "-0.02"])
    def test_sum_outside_tolerance_is_rejected(self, delta):
        cash = Decimal("500.00") + Decimal(delta)
        with pytest.raises(EntitlementServiceError, match="does not match order total"):
            override_with_authority(
                self.local,
                self.funds,
                {"approvedWalletAmount": "400.00", "approvedRewardsAmount": "100.00", "approvedCashAmount": str(cash)},
            )

    def test_negative_amount_is_rejected(self):
        with pytest.raises(EntitlementServiceError, match="negative"):
            override_with_authority(
                self.local,
                self.funds,
                {"approvedWalletAmount": -100, "approvedRewardsAmount": 100, "approvedCashAmount": 1000},
            )

    @pytest.mark.parametrize("value", ["NaN", "Infinity", float("inf"), "abc", True, [1]])
    def test_non_numeric_amount_is_rejected(self, value):
        with pytest.raises(EntitlementServiceError):
            override_with_authority(self.local, self.funds, {"approvedWalletAmount": value})

    def test_eligibility_caps_are_not_reapplied(self):
        # autorytet moze przyznac wiecej niz lokalny limit wallet
        local = PaymentSplit(total=Decimal("100"), wallet=Decimal("0"), rewards=Decimal("0"), cash=Decimal("100"))
        split = override_with_authority(local, account(), {"approvedWalletAmount": 100, "approvedCashAmount": 0})

        assert split.wallet == Decimal("100")
        assert split.cash == Decimal("0")

    def test_amounts_are_rounded_to_cents(self):
        split = override_with_authority(
            self.local,
            self.funds,
            {"approvedWalletAmount": "400.004", "approvedRewardsAmount": "99.996", "approvedCashAmount": "500"},
        )

        assert (split.wallet, split.rewards, split.cash) == (Decimal("400.00"), Decimal("100.00"), Decimal("500.00"))

    @pytest.mark.parametrize(
        "decision",
        [
            {"approvedWalletAmount": "100.00", "approvedRewardsAmount": "0", "approvedCashAmount": "0"},
            {"approvedWalletAmount": "0", "approvedRewardsAmount": "100.00", "approvedCashAmount": "0"},
        ],
    )
    def test_approved_amount_above_balance_is_rejected(self, decision):
        local = PaymentSplit(total=Decimal("100"), wallet=Decimal("50"), rewards=Decimal("0"), cash=Decimal("50"))

        with pytest.raises(EntitlementServiceError, match="exceed account balance"):
            override_with_authority(local, account(wallet="50", rewards="50"), decision)

    def test_huge_amount_is_rejected(self):
        with pytest.raises(EntitlementServiceError, match="out of range"):
            override_with_authority(self.local, self.funds, {"approvedWalletAmount": "1e40"})
