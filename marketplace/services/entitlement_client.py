# marketplace/services/entitlement_client.py
import requests
from requests import RequestException

from marketplace.domain.errors import EntitlementServiceError
from marketplace.utils.settings import EntitlementConfig
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class EntitlementClient:
    """
    Klient zewnetrznej uslugi entitlement.

    Jeden POST, bez retry: timeout jest twardym limitem czasu checkoutu.
    Kazdy problem (siec, timeout, status != 2xx, zly JSON) -> EntitlementServiceError.
    """

    def __init__(self, config: EntitlementConfig):
        self.config = config

    @property
    def is_configured(self) -> bool:
        return self.config.is_configured

    @property
    def is_strict(self) -> bool:
        return self.config.is_strict

    def validate(self, payload: dict) -> dict:
        if not self.config.validate_url:
            raise EntitlementServiceError("ENTITLEMENT_VALIDATE_URL is not configured")

        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["x-api-key"] = self.config.api_key

        logger.info(f"EntitlementClient POST {self.config.validate_url}")

        try:
            resp = requests.post(
                self.config.validate_url,
                json=payload,
                headers=headers,
                timeout=self.config.timeout_seconds,
            )
        except requests.Timeout as e:
            raise EntitlementServiceError(
                f"Entitlement validation timed out after {self.config.timeout_ms} ms"
            ) from e
        except RequestException as e:
            raise EntitlementServiceError(f"Entitlement validation request failed: {e}") from e

        if not resp.ok:
            body = resp.text or "No body"
            raise EntitlementServiceError(
                f"Entitlement validation failed ({resp.status_code}): {body}"
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise EntitlementServiceError("Entitlement validation response is not valid JSON") from e

        if not isinstance(data, dict):
            raise EntitlementServiceError("Entitlement validation response is invalid")

        return data
