"""
Request rate limiting for public ingestion endpoints (slowapi).
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from arcade_backend.config import get_bool_env

limiter = Limiter(
    key_func=get_remote_address,
    enabled=get_bool_env("RATE_LIMIT_ENABLED", True),
)
