"""Scheduler configuration read from environment variables."""

import os


class SchedulerConfig:
    """Centralized scheduler configuration.

    Values are read on access so that tests and long-lived workers see
    environment changes without re-importing the module.
    """

    DEFAULT_TIMEZONE_FALLBACK = "America/Sao_Paulo"
    REMINDER_FUNCTION_FALLBACK = "send-recurring-task-notification"

    @classmethod
    def default_timezone(cls) -> str:
        """Zone used when a user has no (or an unknown) timezone configured."""
        return os.environ.get("DEFAULT_TIMEZONE", "").strip() or cls.DEFAULT_TIMEZONE_FALLBACK

    @classmethod
    def reminder_function_name(cls) -> str:
        """Supabase edge function that delivers a single task reminder."""
        return os.environ.get("REMINDER_FUNCTION_NAME", "").strip() or cls.REMINDER_FUNCTION_FALLBACK

    @classmethod
    def cron_secret(cls) -> str:
        return os.environ.get("CRON_SECRET", "").strip()

    @classmethod
    def environment(cls) -> str:
        return os.environ.get("ENVIRONMENT", "production").strip().lower()

    @classmethod
    def bypass_cron_auth(cls) -> bool:
        """Skip cron authentication (local development only)."""
        if cls.environment() in ("development", "local"):
            return True
        return os.environ.get("CRON_BYPASS_AUTH", "").lower() == "true"
