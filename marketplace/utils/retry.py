# marketplace/utils/retry.py
from sqlalchemy.exc import OperationalError
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception

from marketplace.utils.settings import CHECKOUT_LOCK_RETRIES

# postgres: deadlock_detected, serialization_failure
LOCK_CONFLICT_CODES = {"40P01", "40001"}


def is_lock_conflict(exc: BaseException) -> bool:
    if not isinstance(exc, OperationalError):
        return False
    orig = exc.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    return code in LOCK_CONFLICT_CODES


#tenacity retry, cala jednostka pracy od nowa
def db_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(CHECKOUT_LOCK_RETRIES),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        retry=retry_if_exception(is_lock_conflict),
    )
