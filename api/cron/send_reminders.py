"""Recurring task reminder endpoint (called every minute by Vercel cron)."""

import json
import asyncio
import logging
from src.services.cron_auth import verify_cron_request
from src.services.reminder_scheduler import get_reminder_scheduler
from src.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def _response(status: int, payload: dict) -> dict:
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(payload),
    }


def handler(request):
    """Send the reminders scheduled for the current minute."""
    setup_logging()

    headers = request.get("headers", {}) or {}
    if not verify_cron_request(headers):
        return _response(401, {"error": "unauthorized"})

    try:
        summary = asyncio.run(get_reminder_scheduler().run_notification_pass())
    except Exception as e:
        logger.error(f"Error running reminder pass: {e}", exc_info=True)
        return _response(500, {"error": str(e)})

    return _response(200, {"ok": True, "summary": summary.model_dump(mode="json")})
