"""Configuration management for environment variables and application settings."""

import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def get_env_int(var_name: str, default: str) -> int:
    value_str = os.getenv(var_name, default)
    # Attempt to strip comments and whitespace before int conversion
    if "#" in value_str:
        value_str = value_str.split("#", 1)[0]
    return int(value_str.strip())


def get_env_bool(var_name: str, default: str) -> bool:
    value_str = os.getenv(var_name, default)
    # Attempt to strip comments and whitespace before bool conversion
    if "#" in value_str:
        value_str = value_str.split("#", 1)[0]
    return value_str.strip().lower() == "true"


def get_env_str(var_name: str) -> str | None:
    """Read an optional string setting; blank values count as unset."""
    value_str = os.getenv(var_name)
    if value_str is None or not value_str.strip():
        return None
    return value_str.strip()


# Core configurations
DEBUG = get_env_bool("DEBUG", "False")
LOG_DIR = os.getenv("LOG_DIR", "logs")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")  # Ignored when DEBUG is on

# Database Settings
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./products.db")

# Redis Configuration
# The distributed cache tier is only used when one of these is set.
REDIS_URL = get_env_str("REDIS_URL")
REDIS_HOST = get_env_str("REDIS_HOST")
REDIS_PORT = get_env_int("REDIS_PORT", "6379")
REDIS_DB = get_env_int("REDIS_DB", "0")
REDIS_CONNECT_TIMEOUT = get_env_int("REDIS_CONNECT_TIMEOUT", "2")

# Response cache
CACHE_TTL = get_env_int("CACHE_TTL", "120")  # Seconds, Redis tier only
CACHE_KEY_PREFIX = os.getenv("CACHE_KEY_PREFIX", "ProductsApi:")

# Rate limiting for the public product routes
API_RATE_LIMIT = os.getenv("API_RATE_LIMIT", "300/minute")

# Comma-separated origins; "*" allows any origin without credentials
CORS_ALLOWED_ORIGINS = [o.strip() for o in os.getenv("CORS_ALLOWED_ORIGINS", "*").split(",") if o.strip()]

# Optional: Print config only in debug mode for verification
if DEBUG:
    print(f"✅ Cache Config: redis={REDIS_URL or REDIS_HOST or 'disabled'}, TTL={CACHE_TTL}, prefix={CACHE_KEY_PREFIX}")


def redis_storage_uri() -> str:
    """Storage URI for the rate limiter, sharing Redis with the cache when configured."""
    if REDIS_URL:
        return REDIS_URL
    if REDIS_HOST:
        return f"redis://{REDIS_HOST}:{REDIS_PORT}/{REDIS_DB}"
    return "memory://"
