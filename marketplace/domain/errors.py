# marketplace/domain/errors.py
"""
Bledy domenowe checkoutu.

Kazdy blad niesie kod HTTP i komunikat dla klienta. Bledy 4xx maja konkretne,
czytelne komunikaty; 5xx zawsze ogolny komunikat, szczegoly tylko w logach.
"""


class CheckoutError(Exception):
    status_code = 400

    def __init__(self, message: str, details: list[str] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(CheckoutError):
    pass


class NoActiveCartError(CheckoutError):
    def __init__(self, message: str = "No active cart found."):
        super().__init__(message)


class EmptyCartError(CheckoutError):
    def __init__(self, message: str = "Cart is empty."):
        super().__init__(message)


class StockValidationError(CheckoutError):
    def __init__(self, details: list[str]):
        super().__init__("Stock validation failed", details=details)


class EligibilityLimitError(CheckoutError):
    def __init__(self, source: str, limit):
        super().__init__(f"Only ₹{limit} of this order is {source}-eligible.")
        self.source = source
        self.limit = limit


class BalanceInsufficientError(CheckoutError):
    def __init__(self, source: str):
        super().__init__(f"Insufficient {source} balance.")
        self.source = source


class OverpaymentError(CheckoutError):
    def __init__(self, message: str = "Payment credits exceed order total."):
        super().__init__(message)


class BenefitServiceUnavailableError(CheckoutError):
    status_code = 503

    def __init__(self, cause: Exception):
        super().__init__("Benefit validation service unavailable. Please try again.")
        self.cause = cause


class CommitFailure(CheckoutError):
    status_code = 500

    def __init__(self, message: str = "Checkout failed. Please try again."):
        super().__init__(message)


class EntitlementServiceError(RuntimeError):
    """Blad wywolania uslugi entitlement (transport, timeout, zla odpowiedz)."""
