from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator


class SubmissionInProgress(Exception):
    """Raised when the same submission key is already in flight."""


class InFlightGuard:
    def __init__(self) -> None:
        self._active: set[str] = set()
        self._lock = threading.Lock()

    def is_active(self, key: str) -> bool:
        with self._lock:
            return key in self._active

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._lock:
            if key in self._active:
                raise SubmissionInProgress(key)
            self._active.add(key)
        try:
            yield
        finally:
            with self._lock:
                self._active.discard(key)


habit_submissions = InFlightGuard()


def habit_submission_key(user_id: str, meal_id: str) -> str:
    return f"habit:{user_id}:{meal_id}"
