"""
Shared-secret authorization for the scheduled reconciliation trigger.

The scheduler sends `Authorization: Bearer <CRON_SECRET>`. Invocations
without a valid credential are rejected before any ledger access.
"""
import hmac
import logging
from typing import Optional

from fastapi import Header

from arcade_backend.config import settings
from arcade_backend.errors import AuthorizationError, ErrorCode

logger = logging.getLogger(__name__)


def check_bearer_secret(authorization: Optional[str], secret: Optional[str]) -> None:
    if not secret:
        # An unset secret must not turn into an accepted "Bearer " header
        logger.error("CRON_SECRET not configured - rejecting scheduled trigger")
        raise AuthorizationError("Scheduling credential not configured")
    if not authorization:
        raise AuthorizationError("Missing scheduling credential", code=ErrorCode.AUTH_REQUIRED)
    expected = f"Bearer {secret}"
    if not hmac.compare_digest(authorization.encode(), expected.encode()):
        logger.warning("Rejected scheduled trigger with invalid credential")
        raise AuthorizationError()


async def require_cron_secret(authorization: Optional[str] = Header(None)) -> None:
    """FastAPI dependency guarding the cron routes."""
    check_bearer_secret(authorization, settings.CRON_SECRET)
