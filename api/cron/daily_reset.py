"""Daily board pass endpoint (called once a day by Vercel cron)."""

import json
import asyncio
import logging
from src.services.board_scheduler import get_board_scheduler
from src.services.cron_auth import verify_cron_request
from src.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def _response(status: int, payload: dict) -> dict:
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(payload),
    }


def handler(request):
    """
    Re-file every user's tasks between boards.

    Safe to trigger more than once for the same day: the pass only acts on
    tasks whose board still disagrees with their due date and completion.
    """
    setup_logging()

    headers = request.get("headers", {}) or {}
    if not verify_cron_request(headers):
        return _response(401, {"error": "unauthorized"})

    try:
        summary = asyncio.run(get_board_scheduler().run_daily_pass())
    except Exception as e:
        logger.error(f"Error running daily board pass: {e}", exc_info=True)
        return _response(500, {"error": str(e)})

    return _response(200, {"ok": True, "summary": summary.model_dump(mode="json")})
