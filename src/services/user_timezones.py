"""User timezone resolution - map a user to the zone their calendar days live in."""

import logging
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from src.services.supabase_client import get_profile
from src.utils.errors import ConfigurationError
from src.utils.settings import SchedulerConfig

logger = logging.getLogger(__name__)


def default_zone() -> ZoneInfo:
    """Configured fallback zone."""
    name = SchedulerConfig.default_timezone()
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(f"DEFAULT_TIMEZONE is not a valid IANA zone: {name}") from e


def resolve_timezone(name: Optional[str]) -> ZoneInfo:
    """Turn an IANA zone name into a ZoneInfo, falling back to the default zone.

    A missing or unknown zone is not an error: the user's day boundaries are
    evaluated in the default zone until the profile is fixed.
    """
    if not name or not name.strip():
        return default_zone()

    try:
        return ZoneInfo(name.strip())
    except (ZoneInfoNotFoundError, ValueError) as e:
        logger.warning(
            "Unknown timezone, using default",
            extra={"timezone": name, "default_timezone": SchedulerConfig.default_timezone(), "error": str(e)}
        )
        return default_zone()


async def get_user_timezone(user_id: str) -> str:
    """IANA zone name configured for ``user_id``, or the default zone name."""
    profile = await get_profile(user_id)
    name = (profile or {}).get("timezone")
    if name and name.strip():
        return name.strip()
    return SchedulerConfig.default_timezone()
