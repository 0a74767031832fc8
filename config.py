import os
import sys

from dotenv import load_dotenv

from enums.runtime_environment import RuntimeEnvironment

# Load .env but don't override existing environment variables
# This allows test scripts to set RUNTIME_ENVIRONMENT=TEST before import
load_dotenv(".env", override=False)

# Parse RUNTIME_ENVIRONMENT with clear error message on misconfiguration
try:
    _runtime_env_str = os.environ.get("RUNTIME_ENVIRONMENT")
    if not _runtime_env_str:
        raise ValueError("RUNTIME_ENVIRONMENT environment variable is not set")
    RUNTIME_ENVIRONMENT = RuntimeEnvironment(_runtime_env_str)
except ValueError as e:
    valid_values = [env.value for env in RuntimeEnvironment]
    print(f"\n ERROR: Invalid RUNTIME_ENVIRONMENT configuration\n", file=sys.stderr)
    print(f"Reason: {e}", file=sys.stderr)
    print(f"Valid values: {', '.join(valid_values)}", file=sys.stderr)
    print(f"Current value: {os.environ.get('RUNTIME_ENVIRONMENT', '(not set)')}", file=sys.stderr)
    print(f"\nAdd to .env: RUNTIME_ENVIRONMENT={valid_values[0]}\n", file=sys.stderr)
    sys.exit(1)

WEBAPP_HOST = os.environ.get("WEBAPP_HOST", "0.0.0.0")
WEBAPP_PORT = int(os.environ.get("WEBAPP_PORT")) if os.environ.get("WEBAPP_PORT") else 3001
FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:3000")

# Database
DB_URL = os.environ.get("DB_URL", "sqlite+aiosqlite:///data/shop.db")
DB_ECHO = os.environ.get("DB_ECHO", "false") == "true"
DB_AUTO_CREATE = os.environ.get("DB_AUTO_CREATE", "true") == "true"  # create_all on startup

# Payment provider (Stripe REST API)
STRIPE_SECRET_KEY = os.environ.get("STRIPE_SECRET_KEY", "")
STRIPE_API_URL = os.environ.get("STRIPE_API_URL", "https://api.stripe.com/v1")
STRIPE_WEBHOOK_SECRET = os.environ.get("STRIPE_WEBHOOK_SECRET", "")
STRIPE_WEBHOOK_TOLERANCE_SECONDS = int(os.environ.get("STRIPE_WEBHOOK_TOLERANCE_SECONDS", "300"))
PAYMENT_CURRENCY = os.environ.get("PAYMENT_CURRENCY", "usd")
PAYMENT_GATEWAY_TIMEOUT_SECONDS = int(os.environ.get("PAYMENT_GATEWAY_TIMEOUT_SECONDS", "10"))

# Admin endpoints are protected by a static bearer token
ADMIN_API_TOKEN = os.environ.get("ADMIN_API_TOKEN", "")

# Order configuration
ORDER_NUMBER_PREFIX = os.environ.get("ORDER_NUMBER_PREFIX", "RB")
ORDER_TRANSACTION_TIMEOUT_SECONDS = int(os.environ.get("ORDER_TRANSACTION_TIMEOUT_SECONDS", "30"))
# Recompute quotable line items server-side and reject tampered totals
ORDER_PRICE_VERIFICATION = os.environ.get("ORDER_PRICE_VERIFICATION", "true") == "true"

# Uploads
UPLOAD_DIR = os.environ.get("UPLOAD_DIR", "./uploads")
MAX_FILE_SIZE_MB = int(os.environ.get("MAX_FILE_SIZE_MB", "10"))
ALLOWED_FILE_TYPES = [t.strip() for t in os.environ.get("ALLOWED_FILE_TYPES", "").split(",") if t.strip()]

# Logging Configuration
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR, CRITICAL
LOG_MASK_SECRETS = os.environ.get("LOG_MASK_SECRETS", "true") == "true"  # Mask sensitive data in logs

# Log Retention: Environment-specific defaults
# Dev: keep two weeks for debugging
# Prod: Use 5 days default to save disk space
if RUNTIME_ENVIRONMENT == RuntimeEnvironment.DEV:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "14"))
else:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "5"))

# HTTP security headers (relevant once HTML is served from this app)
SECURITY_HEADERS_ENABLED = os.environ.get("SECURITY_HEADERS_ENABLED", "false") == "true"
HSTS_ENABLED = os.environ.get("HSTS_ENABLED", "false") == "true"
