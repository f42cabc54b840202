"""Task notification: log-only sender (implements INotificationService)."""

from __future__ import annotations

import logging

from taskgate.shared.telemetry.logging import get_logger
from taskgate.shared.utils.datetime import utc_now

logger = get_logger(__name__)


class LogOnlyNotificationService:
    """INotificationService implementation that logs instead of delivering.

    Use when no channel (email, chat, push) is configured. Keeps the last
    sent notifications in `sent` for inspection in development and tests.
    """

    def __init__(self, keep_last: int = 100) -> None:
        self.keep_last = keep_last
        self.sent: list[tuple[list[str], str, str]] = []

    async def send(self, recipients: list[str], subject: str, body: str) -> None:
        """Log the notification; nothing is delivered."""
        recipients = [r for r in recipients or [] if r]
        subject_preview = (subject or "")[:80]
        if not recipients:
            logger.info(
                "Task notify: no recipients, skipping send (subject=%r)",
                subject_preview,
            )
            return
        logger.info(
            "Task notify: would send to %d recipients (subject=%r)",
            len(recipients),
            subject_preview,
        )
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Task notify recipients: %s (at %s)",
                recipients,
                utc_now().isoformat(),
            )
        self.sent.append((recipients, subject, body))
        del self.sent[: -self.keep_last]
