from __future__ import annotations

import threading
from datetime import datetime
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..core.exceptions import ValidationError

ACTIVITY_KINDS = frozenset({"pointer", "key", "click", "scroll"})


class ActivityMonitor:
    """Relays user input events (pointer move, key press, click, scroll) to an attached listener.

    A listener is attached only while a session is active; events arriving with
    nothing attached are dropped.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._listener: Optional[Callable[[], None]] = None
        self._last_event_at: Optional[datetime] = None

    @property
    def is_attached(self) -> bool:
        with self._lock:
            return self._listener is not None

    @property
    def last_event_at(self) -> Optional[datetime]:
        with self._lock:
            return self._last_event_at

    def attach(self, listener: Callable[[], None]) -> None:
        with self._lock:
            self._listener = listener

    def detach(self) -> None:
        with self._lock:
            self._listener = None

    def notify(self, kind: str = "pointer", *, at: Optional[datetime] = None) -> bool:
        """Record one input event; returns True when a listener received it."""

        if kind not in ACTIVITY_KINDS:
            raise ValidationError(f"Unknown activity kind: {kind}")

        with self._lock:
            listener = self._listener
            if listener is None:
                return False
            self._last_event_at = at or now_local()

        listener()
        return True
