"""
Progress reporting for archive imports.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressEvent:
    """A progress checkpoint: percent complete (0-100) and a message."""
    percent: int
    message: str


ProgressCallback = Callable[[ProgressEvent], None]


class ProgressReporter:
    """
    Emits progress events to an optional callback.

    Percentages never go backwards: a lower value than the last one emitted
    is raised to the last value. A reporter can be scoped to a slice of the
    overall range so that several archives in one run share 0-100.
    """

    def __init__(
        self,
        callback: Optional[ProgressCallback] = None,
        start: float = 0.0,
        span: float = 100.0,
        parent: Optional["ProgressReporter"] = None
    ):
        self.callback = callback
        self._start = start
        self._span = span
        self._parent = parent
        self._last_percent = 0

    @property
    def last_percent(self) -> int:
        return self._root()._last_percent

    def scoped(self, index: int, total: int) -> "ProgressReporter":
        """Child reporter whose 0-100 maps onto slice `index` of `total`."""
        total = max(total, 1)
        span = self._span / total
        return ProgressReporter(
            callback=None,
            start=self._start + span * index,
            span=span,
            parent=self._root()
        )

    def report(self, percent: float, message: str) -> None:
        """Emit a progress event at `percent` of this reporter's range."""
        percent = min(max(percent, 0), 100)
        overall = int(round(self._start + self._span * percent / 100))
        self._root()._emit(overall, message)

    def checkpoint(self, message: str) -> None:
        """Emit an event at the current percentage (e.g. after a batch commit)."""
        root = self._root()
        root._emit(root._last_percent, message)

    def _root(self) -> "ProgressReporter":
        return self._parent if self._parent is not None else self

    def _emit(self, percent: int, message: str) -> None:
        percent = max(min(percent, 100), self._last_percent)
        self._last_percent = percent
        logger.debug(f"{percent}% {message}")
        if self.callback:
            self.callback(ProgressEvent(percent=percent, message=message))
