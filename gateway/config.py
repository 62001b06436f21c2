"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings

from gateway.models.enums import BankId
from gateway.models.payment import BankConfig
from gateway.processors.support import BANK_TIMEOUT_MS


class Settings(BaseSettings):
    log_level: str = "INFO"
    simulate_latency: bool = True  # Sleep for each bank's typical latency
    mock_failure_rate: float = 0.05  # 5% simulated declines
    disabled_banks: list[str] = []  # Bank ids that start disabled

    stripe_api_url: str = "https://api.stripe.com/v1"
    stripe_api_key: str = "sk_test_mock_key"

    paypal_api_url: str = "https://api-3t.sandbox.paypal.com/2.0/"
    paypal_api_key: str = "paypal_mock_api_key"
    paypal_username: str = "paypal_api_username"
    paypal_password: str = "paypal_api_password"
    paypal_signature: str = "paypal_api_signature"

    square_api_url: str = "https://connect.squareupsandbox.com/v2"
    square_api_key: str = "sandbox-sq0idp-mock_access_token"
    square_location_id: str = "LH2B1Q6V7GNPG"
    square_app_fee_threshold: int = 10_000  # Minor units; above this a platform fee applies
    square_app_fee_rate: float = 0.01
    square_idempotency_key_max_length: int = 45

    adyen_api_url: str = "https://checkout-test.adyen.com/v71"
    adyen_api_key: str = "AQE1hmfuXNWTK0Qc+iSS3VlbmY1mFGfXV2RKzeVL-mock-api-key"
    adyen_merchant_account: str = "TestMerchant"
    adyen_hmac_key: str = "DFB1EB5485895CFA84146406857104ABB4CBCABDC8AAF103A624C8F6A3EAAB00"

    braintree_api_url: str = "https://payments.sandbox.braintree-api.com/graphql"
    braintree_api_key: str = "test_braintree_api_key_mock"
    braintree_merchant_id: str = "test_merchant_braintree"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()


def bank_config(bank_id: BankId, source: Settings | None = None) -> BankConfig:
    """Build the startup ``BankConfig`` for a bank from settings."""
    s = source or settings
    options: dict = {}

    if bank_id == BankId.PAYPAL:
        options = {
            "username": s.paypal_username,
            "password": s.paypal_password,
            "signature": s.paypal_signature,
        }
    elif bank_id == BankId.SQUARE:
        options = {
            "location_id": s.square_location_id,
            "app_fee_threshold": s.square_app_fee_threshold,
            "app_fee_rate": s.square_app_fee_rate,
            "idempotency_key_max_length": s.square_idempotency_key_max_length,
        }
    elif bank_id == BankId.ADYEN:
        options = {
            "merchant_account": s.adyen_merchant_account,
            "hmac_key": s.adyen_hmac_key,
        }
    elif bank_id == BankId.BRAINTREE:
        options = {"merchant_id": s.braintree_merchant_id}

    return BankConfig(
        bank_id=bank_id,
        api_url=getattr(s, f"{bank_id.value}_api_url"),
        api_key=getattr(s, f"{bank_id.value}_api_key"),
        enabled=bank_id.value not in s.disabled_banks,
        timeout_ms=BANK_TIMEOUT_MS[bank_id],
        options=options,
    )
