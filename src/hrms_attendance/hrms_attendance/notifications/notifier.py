from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Outbound notification channel (email, push, ...). Delivery is best effort."""

    def notify_clock_event(self, *, user_id: int, event: str, session_info: Mapping[str, Any]) -> None:
        raise NotImplementedError

    def notify_employee(self, *, user_id: int, subject: str, message: str) -> None:
        raise NotImplementedError


class LoggingNotifier(Notifier):
    """Default channel: writes notifications to the application log."""

    def notify_clock_event(self, *, user_id: int, event: str, session_info: Mapping[str, Any]) -> None:
        logger.info("clock event %s for user %s: %s", event, user_id, dict(session_info))

    def notify_employee(self, *, user_id: int, subject: str, message: str) -> None:
        logger.info("notify user %s: %s - %s", user_id, subject, message)


def notify_quietly(notifier: Optional[Notifier], method: str, **kwargs: Any) -> None:
    """Fire-and-forget call; a failing channel never affects the caller."""
    if notifier is None:
        return
    try:
        getattr(notifier, method)(**kwargs)
    except Exception:
        logger.exception("Notification %s failed for user %s", method, kwargs.get("user_id"))
