"""Security middleware: rate limiting and cron bearer-token authentication."""

import logging
import secrets
from typing import Optional

from fastapi import Header, HTTPException
from slowapi import Limiter
from slowapi.util import get_remote_address

from clubratings.config import get_settings

logger = logging.getLogger(__name__)

# Rate limiter using client IP
limiter = Limiter(key_func=get_remote_address)


async def verify_cron_secret(
    authorization: Optional[str] = Header(None),
) -> bool:
    """
    Verify `Authorization: Bearer <CRON_SECRET>` for import triggers.

    FAIL-CLOSED: an unconfigured CRON_SECRET blocks every request.
    """
    expected = get_settings().CRON_SECRET
    if not expected:
        logger.error("CRON_SECRET not configured - blocking import trigger")
        raise HTTPException(status_code=500, detail="CRON_SECRET not configured")

    if not authorization or not secrets.compare_digest(authorization, f"Bearer {expected}"):
        logger.warning("Rejected import trigger with invalid credentials")
        raise HTTPException(status_code=401, detail="Unauthorized")

    return True
