"""Cron trigger authentication.

The scheduler endpoints are invoked by the platform cron, which sends
``Authorization: Bearer <CRON_SECRET>``.
"""

import hmac
import logging
from typing import Mapping, Optional

from src.utils.errors import CronAuthError
from src.utils.settings import SchedulerConfig

logger = logging.getLogger(__name__)


def get_cron_secret() -> str:
    """Get the cron secret from environment."""
    secret = SchedulerConfig.cron_secret()
    if not secret:
        raise CronAuthError("CRON_SECRET not set")
    return secret


def get_header(headers: Optional[Mapping[str, str]], name: str) -> str:
    """Case-insensitive header lookup."""
    if not headers:
        return ""
    lowered = name.lower()
    for key, value in headers.items():
        if key.lower() == lowered:
            return value or ""
    return ""


def verify_cron_token(secret: str, authorization: str) -> bool:
    """Compare an Authorization header against the expected bearer token."""
    if not secret or not authorization:
        return False

    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token:
        return False

    return hmac.compare_digest(token.strip().encode("utf-8"), secret.encode("utf-8"))


def verify_cron_request(headers: Optional[Mapping[str, str]]) -> bool:
    """
    Verify a cron trigger request.

    Returns True if verification passes or is bypassed, False otherwise.
    """
    if SchedulerConfig.bypass_cron_auth():
        logger.debug("Cron authentication bypassed (dev mode)")
        return True

    try:
        secret = get_cron_secret()
    except CronAuthError as e:
        logger.error(f"Cron authentication misconfigured: {e}")
        return False

    result = verify_cron_token(secret, get_header(headers, "Authorization"))
    if not result:
        logger.warning("Cron request rejected: missing or invalid bearer token")
    return result
