"""
Notification sinks.

Scheduling never fails because a notification could not be delivered: sinks
are called after commit and every failure is logged and dropped.
"""
import logging
from typing import Protocol

from .. import config
from . import emailer

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    def session_scheduled(self, session: dict) -> None: ...

    def session_cancelled(self, session: dict) -> None: ...


class NullNotificationSink:
    def session_scheduled(self, session: dict) -> None:
        return None

    def session_cancelled(self, session: dict) -> None:
        return None


class EmailNotificationSink:
    """Emails candidate and interviewer. `session` is a summary dict, not an ORM row."""

    def session_scheduled(self, session: dict) -> None:
        if session.get("candidate_email"):
            emailer.send_interview_scheduled_email(to_email=session["candidate_email"], session=session)
        if session.get("interviewer_email"):
            emailer.send_interviewer_assignment_email(to_email=session["interviewer_email"], session=session)

    def session_cancelled(self, session: dict) -> None:
        if session.get("candidate_email"):
            emailer.send_interview_cancelled_email(to_email=session["candidate_email"], session=session)


def default_sink() -> NotificationSink:
    return EmailNotificationSink() if config.NOTIFICATIONS_ENABLED else NullNotificationSink()


def notify_safely(sink: NotificationSink, event: str, session: dict) -> None:
    """Best-effort delivery; never raises."""
    try:
        getattr(sink, event)(session)
    except Exception as e:
        # Never fail scheduling due to notification issues.
        logger.warning(
            "Notification '%s' for session %s failed (non-blocking): %s: %s",
            event, session.get("session_id"), type(e).__name__, e,
        )
