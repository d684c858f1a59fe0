"""
At most one in-flight action per key (e.g. one compile per contract name).
"""

import threading
from contextlib import contextmanager
from typing import Hashable, Iterator, Set

from .errors import BusyError


class InFlightGuard:
    """Thread-safe set of keys currently being worked on"""

    def __init__(self, action: str = "action"):
        self.action = action
        self._lock = threading.Lock()
        self._held: Set[Hashable] = set()

    def is_held(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._held

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        """
        Hold key for the duration of the block

        Raises:
            BusyError: key is already held
        """
        with self._lock:
            if key in self._held:
                raise BusyError(f"A {self.action} for '{key}' is already in progress")
            self._held.add(key)
        try:
            yield
        finally:
            with self._lock:
                self._held.discard(key)
