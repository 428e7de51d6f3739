# counselbook/api/dependencies/internal_auth.py
import logging
import secrets
from typing import Optional

from fastapi import Header, HTTPException, status

from counselbook.core.config import get_settings

logger = logging.getLogger(__name__)

# Environments where the admin routes may run without a configured key.
OPEN_ENVIRONMENTS = ("local", "test")


async def verify_internal_api_key(
    internal_api_key: Optional[str] = Header(
        default=None,
        alias="X-Internal-Api-Key",
        description="Shared admin key for the /internal slot maintenance routes.",
    ),
) -> None:
    """
    Guard for administrative slot maintenance (e.g. releasing a slot).

    A configured INTERNAL_API_KEY is always enforced. Without one, the
    routes stay open on a developer machine or in tests, and answer 500
    everywhere else so a forgotten key never exposes them.
    """
    settings = get_settings()
    expected = settings.INTERNAL_API_KEY

    if not expected:
        if (settings.APP_ENV or "local").lower() in OPEN_ENVIRONMENTS:
            return
        logger.error("INTERNAL_API_KEY missing in %s; refusing admin call", settings.APP_ENV)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="INTERNAL_API_KEY not configured for this environment.",
        )

    if internal_api_key is None or not secrets.compare_digest(
        internal_api_key.encode(), expected.encode()
    ):
        logger.warning("Rejected admin call with a missing or wrong internal key")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing internal API key.",
        )
