"""
RICHIEAT Client — Transient Notifications
===========================================

Toast-style messages raised by the auth store ("Login successful!",
"Invalid email or password"). Each notification is visible for a fixed
duration; the notifier keeps a short history and mirrors every message to
the `richieat.client` logger.
"""

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, List, Optional

logger = logging.getLogger("richieat.client")

DEFAULT_DURATION = 4.0  # seconds


@dataclass(frozen=True)
class Notification:
    level: str  # "success" | "error"
    message: str
    created_at: float = field(default_factory=time.monotonic)
    duration: float = DEFAULT_DURATION

    def visible(self, now: Optional[float] = None) -> bool:
        now = time.monotonic() if now is None else now
        return now - self.created_at < self.duration


class Notifier:
    def __init__(
        self,
        duration: float = DEFAULT_DURATION,
        history: int = 20,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.duration = duration
        self._clock = clock
        self.history: Deque[Notification] = deque(maxlen=history)

    def success(self, message: str) -> Notification:
        logger.info(message)
        return self._push("success", message)

    def error(self, message: str) -> Notification:
        logger.warning(message)
        return self._push("error", message)

    def active(self) -> List[Notification]:
        now = self._clock()
        return [n for n in self.history if n.visible(now)]

    def _push(self, level: str, message: str) -> Notification:
        note = Notification(
            level=level,
            message=message,
            created_at=self._clock(),
            duration=self.duration,
        )
        self.history.append(note)
        return note
