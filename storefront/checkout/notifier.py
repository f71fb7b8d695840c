from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Protocol
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    level: str  # success | info | error
    message: str


class Notifier(Protocol):
    def success(self, message: str) -> None: ...
    def info(self, message: str) -> None: ...
    def error(self, message: str) -> None: ...


class NotificationQueue:
    """Notifications éphémères: journalisées et gardées en file pour que l'UI les affiche."""

    def __init__(self, maxlen: int = 20):
        self._queue: Deque[Notification] = deque(maxlen=maxlen)

    def _push(self, level: str, message: str) -> None:
        self._queue.append(Notification(level, message))
        logger.debug("checkout.notify level=%s message=%s", level, message)

    def success(self, message: str) -> None:
        self._push("success", message)

    def info(self, message: str) -> None:
        self._push("info", message)

    def error(self, message: str) -> None:
        self._push("error", message)

    @property
    def pending(self) -> List[Notification]:
        return list(self._queue)
