"""
Configuration Validation Module

Validates critical configuration values at startup to fail-fast
with clear error messages instead of runtime failures.
"""

import sys
from typing import Optional

from enums.runtime_environment import RuntimeEnvironment


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""
    pass


def validate_admin_token(admin_token: Optional[str]) -> None:
    """
    Validate the bearer token protecting admin endpoints.

    Raises:
        ConfigValidationError: If token is missing or too weak
    """
    if not admin_token or len(admin_token.strip()) == 0:
        raise ConfigValidationError(
            "ADMIN_API_TOKEN is required and must not be empty!\n"
            "Generate a secure token with: openssl rand -hex 32\n"
            "Add to .env: ADMIN_API_TOKEN=<your-generated-token>"
        )

    if len(admin_token) < 32:
        raise ConfigValidationError(
            f"ADMIN_API_TOKEN is too weak (length: {len(admin_token)}, minimum: 32)!\n"
            "Generate a secure token with: openssl rand -hex 32"
        )


def validate_stripe_secret_key(secret_key: Optional[str]) -> None:
    """
    Validate payment provider secret key.

    Raises:
        ConfigValidationError: If key is missing or is a test key in production
    """
    if not secret_key:
        raise ConfigValidationError(
            "STRIPE_SECRET_KEY is required but not set!\n"
            "Get your secret key from the Stripe dashboard.\n"
            "Add to .env: STRIPE_SECRET_KEY=sk_live_..."
        )

    if secret_key.startswith("sk_test_"):
        raise ConfigValidationError(
            "STRIPE_SECRET_KEY is a test key but RUNTIME_ENVIRONMENT is PROD!\n"
            "Use a live key (sk_live_...) in production."
        )


def validate_webhook_secret(webhook_secret: Optional[str]) -> None:
    """
    Validate payment webhook signing secret.

    Raises:
        ConfigValidationError: If secret is missing
    """
    if not webhook_secret or len(webhook_secret.strip()) == 0:
        raise ConfigValidationError(
            "STRIPE_WEBHOOK_SECRET is required and must not be empty!\n"
            "This secret is used to verify payment webhook signatures.\n"
            "Add to .env: STRIPE_WEBHOOK_SECRET=whsec_..."
        )


def validate_positive_int(value: int, name: str) -> None:
    if value <= 0:
        raise ConfigValidationError(f"{name} must be a positive integer (currently: {value})")


def validate_startup_config(config_module) -> None:
    """
    Validate all critical configuration at startup.

    Limits are always checked; secrets only in PROD, so local development
    and tests run without provider credentials.

    Raises:
        ConfigValidationError: If any validation fails
    """
    validate_positive_int(config_module.MAX_FILE_SIZE_MB, 'MAX_FILE_SIZE_MB')
    validate_positive_int(config_module.ORDER_TRANSACTION_TIMEOUT_SECONDS, 'ORDER_TRANSACTION_TIMEOUT_SECONDS')
    validate_positive_int(config_module.PAYMENT_GATEWAY_TIMEOUT_SECONDS, 'PAYMENT_GATEWAY_TIMEOUT_SECONDS')

    if config_module.RUNTIME_ENVIRONMENT != RuntimeEnvironment.PROD:
        return

    validate_admin_token(config_module.ADMIN_API_TOKEN)
    validate_stripe_secret_key(config_module.STRIPE_SECRET_KEY)
    validate_webhook_secret(config_module.STRIPE_WEBHOOK_SECRET)


def validate_or_exit(config_module) -> None:
    """
    Validate configuration and exit with error code 1 if validation fails.

    This is the main entry point for startup validation.
    """
    try:
        validate_startup_config(config_module)
    except ConfigValidationError as e:
        print(f"\n ERROR: Configuration Validation Failed\n", file=sys.stderr)
        print(str(e), file=sys.stderr)
        print("\nStartup aborted. Please fix configuration and try again.\n", file=sys.stderr)
        sys.exit(1)
