# board/notify.py

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class NoticeLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    level: NoticeLevel
    message: str
    expires_at: float


class Notifier(Protocol):
    def success(self, message: str) -> None: ...
    def error(self, message: str) -> None: ...


class NoticeBoard:
    """
    Auto-dismissing notifications (toasts).

    Each notice lives for a fixed number of seconds depending on its level;
    ``active()`` drops the ones that expired.
    """

    def __init__(
        self,
        *,
        success_seconds: float = 3.0,
        error_seconds: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.success_seconds = success_seconds
        self.error_seconds = error_seconds
        self._clock = clock
        self._notices: list[Notice] = []

    def success(self, message: str) -> None:
        logger.info("%s", message)
        self._push(NoticeLevel.SUCCESS, message, self.success_seconds)

    def error(self, message: str) -> None:
        logger.warning("%s", message)
        self._push(NoticeLevel.ERROR, message, self.error_seconds)

    def _push(self, level: NoticeLevel, message: str, ttl: float) -> None:
        self._notices.append(Notice(level=level, message=message, expires_at=self._clock() + ttl))

    def active(self) -> list[Notice]:
        now = self._clock()
        self._notices = [n for n in self._notices if n.expires_at > now]
        return list(self._notices)

    def latest(self) -> Notice | None:
        current = self.active()
        return current[-1] if current else None
