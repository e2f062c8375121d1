"""Injectable id-generation strategies.

Stores that cannot rely on database sequences take one of these. Numeric
strategies (sequence, clock) produce canonical positive-integer strings and
are used for forms, components and submissions; the UUID strategy is used
for respondent identities.
"""

from __future__ import annotations

import itertools
import threading
import time
import uuid
from typing import Callable

IdGenerator = Callable[[], str]


class SequenceIdGenerator:
    """Monotonic 1, 2, 3, ... per instance."""

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def __call__(self) -> str:
        with self._lock:
            return str(next(self._counter))


class ClockIdGenerator:
    """Microsecond timestamps, bumped when two calls land on the same tick."""

    def __init__(self) -> None:
        self._last = 0
        self._lock = threading.Lock()

    def __call__(self) -> str:
        with self._lock:
            candidate = time.time_ns() // 1000
            if candidate <= self._last:
                candidate = self._last + 1
            self._last = candidate
            return str(candidate)


class UuidIdGenerator:
    def __call__(self) -> str:
        return str(uuid.uuid4())


NUMERIC_STRATEGIES: dict[str, Callable[[], IdGenerator]] = {
    "sequence": SequenceIdGenerator,
    "clock": ClockIdGenerator,
}


def build_id_generator(strategy: str) -> IdGenerator:
    try:
        return NUMERIC_STRATEGIES[strategy]()
    except KeyError:
        raise ValueError(f"unknown id strategy: {strategy}") from None


__all__ = [
    "IdGenerator",
    "SequenceIdGenerator",
    "ClockIdGenerator",
    "UuidIdGenerator",
    "NUMERIC_STRATEGIES",
    "build_id_generator",
]
