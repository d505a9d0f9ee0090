"""Completion callback handle that can be resolved only once."""

from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[str], None]


class SingleShotCompletion:
    """Wraps a caller callback so it observes exactly one terminal body.

    Transports may complete from another thread; resolution is guarded by a
    lock and any completion after the first is dropped.
    """

    def __init__(self, callback: CompletionCallback) -> None:
        self._callback = callback
        self._lock = threading.Lock()
        self._resolved = False

    @property
    def resolved(self) -> bool:
        return self._resolved

    def resolve(self, body: str) -> bool:
        with self._lock:
            if self._resolved:
                logger.error("Dropping duplicate completion for an already resolved request")
                return False
            self._resolved = True
        self._callback(body)
        return True

    def __call__(self, body: str) -> None:
        self.resolve(body)
