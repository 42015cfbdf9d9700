from __future__ import annotations

import threading
from typing import Callable, Dict, Generic, Optional, TypeVar


T = TypeVar("T")


class PhotometryCache(Generic[T]):
    """
    Read-mostly memo for per-luminaire-type photometry.

    Each key is loaded at most once, failures included: the loader's result
    (whatever it returns) is stored and handed to every later caller. Loads
    for different keys run concurrently; callers asking for a key that is
    being loaded wait for that load.
    """

    def __init__(self) -> None:
        self._values: Dict[str, T] = {}
        self._key_locks: Dict[str, threading.Lock] = {}
        self._lock = threading.Lock()
        self.loads = 0

    def get(self, key: str) -> Optional[T]:
        return self._values.get(key)

    def __contains__(self, key: str) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def get_or_load(self, key: str, loader: Callable[[], T]) -> T:
        if key in self._values:
            return self._values[key]
        with self._lock:
            key_lock = self._key_locks.setdefault(key, threading.Lock())
        with key_lock:
            if key in self._values:
                return self._values[key]
            value = loader()
            with self._lock:
                self._values[key] = value
                self.loads += 1
            return value

    def clear(self) -> None:
        with self._lock:
            self._values.clear()
            self._key_locks.clear()
