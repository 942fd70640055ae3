"""Compute-once cache for inkpost.

``SingleFlight`` holds a value that is expensive to produce and never
changes once produced. The first caller computes it; callers arriving while
the computation runs block and then share the same result.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Generic, TypeVar

T = TypeVar("T")


class SingleFlight(Generic[T]):
    """Lazily computed, write-once value.

    The cache has two states, empty and populated, and only moves from empty
    to populated. A computation that raises leaves it empty so the next call
    tries again.

    Attributes:
        compute: Zero-argument callable producing the value.
    """

    def __init__(self, compute: Callable[[], T]):
        self.compute = compute
        self._lock = threading.Lock()
        self._populated = False
        self._value: T | None = None

    @property
    def populated(self) -> bool:
        return self._populated

    def get(self) -> T:
        """Return the cached value, computing it on first use.

        Returns:
            The value produced by ``compute``.
        """
        if self._populated:
            return self._value  # type: ignore[return-value]
        with self._lock:
            if not self._populated:
                self._value = self.compute()
                self._populated = True
        return self._value  # type: ignore[return-value]
