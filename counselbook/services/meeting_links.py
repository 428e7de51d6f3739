# counselbook/services/meeting_links.py
from __future__ import annotations

from counselbook.core.config import get_settings


class MeetingLinkIssuer:
    """
    Builds an opaque join link for an accepted meeting.

    The link is `base_url + request_id`; nothing about the call itself is
    provisioned. Counselors may always supply their own reference instead.
    """

    def __init__(self, base_url: str) -> None:
        if not base_url:
            raise ValueError("base_url is required")
        self._base_url = base_url

    def issue(self, request_id: str) -> str:
        return f"{self._base_url}{request_id}"


def get_meeting_link_issuer() -> MeetingLinkIssuer:
    """
    FastAPI dependency wired to MEETING_LINK_BASE_URL.
    """
    return MeetingLinkIssuer(get_settings().MEETING_LINK_BASE_URL)
