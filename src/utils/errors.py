"""Error handling utilities."""


class TaskflowError(Exception):
    """Base exception for the taskflow scheduler."""
    pass


class ConfigurationError(TaskflowError):
    """Required configuration is missing or invalid."""
    pass


class SupabaseError(TaskflowError):
    """Supabase operation error."""
    pass


class ReminderDispatchError(TaskflowError):
    """Reminder could not be handed to the notification function."""
    pass


class CronAuthError(TaskflowError):
    """Cron trigger authentication failed."""
    pass
