import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def send(self, template_key: str, recipient_id: int, data: dict[str, Any]) -> bool: ...


class LoggingNotifier:
    """Default sender: writes each message to the log instead of mailing it."""

    def send(self, template_key: str, recipient_id: int, data: dict[str, Any]) -> bool:
        logger.info("notify user %s [%s] %s", recipient_id, template_key, data)
        return True


def get_notifier() -> Notifier:
    return LoggingNotifier()
