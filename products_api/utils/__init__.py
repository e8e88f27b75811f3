"""
Utility functions and configurations for the products API.
"""

from .config import (
    CACHE_KEY_PREFIX,
    CACHE_TTL,
    DATABASE_URL,
    REDIS_DB,
    REDIS_HOST,
    REDIS_PORT,
    REDIS_URL,
)
from .exceptions import ProductStoreError
from .logging import logger

__all__ = [
    "CACHE_KEY_PREFIX",
    "CACHE_TTL",
    "DATABASE_URL",
    "REDIS_URL",
    "REDIS_HOST",
    "REDIS_PORT",
    "REDIS_DB",
    "logger",
    "ProductStoreError",
]
