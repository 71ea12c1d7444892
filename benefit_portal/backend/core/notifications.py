"""Applicant notifications.

Email delivery is not wired up; messages go to this module's logger so
operators can copy the link out of the server log.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def applicant_link(token: str) -> str:
    return f"/apply/{token}"


def send_magic_link(email: str, token: str) -> str:
    link = applicant_link(token)
    logger.info("[EMAIL MOCK] Magic link for %s: %s", email, link)
    return link


def send_request_info(email: str, token: str, note: str) -> str:
    link = applicant_link(token)
    logger.info("[EMAIL MOCK] Request for information sent to %s (%s). Link: %s", email, note, link)
    return link
