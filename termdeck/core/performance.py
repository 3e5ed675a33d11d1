"""Timing instrumentation for terminal operations."""

import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, Optional


@dataclass
class OperationMetrics:
    """Aggregate timings for one label, in milliseconds."""
    count: int = 0
    total: float = 0.0
    min: float = 0.0
    max: float = 0.0

    @property
    def avg(self) -> float:
        return self.total / self.count if self.count else 0.0

    def add(self, duration_ms: float) -> None:
        if self.count == 0:
            self.min = self.max = duration_ms
        else:
            self.min = min(self.min, duration_ms)
            self.max = max(self.max, duration_ms)
        self.count += 1
        self.total += duration_ms

    def to_dict(self) -> dict:
        return {
            'count': self.count,
            'avg': self.avg,
            'min': self.min,
            'max': self.max,
            'total': self.total
        }


class PerformanceTracker:
    """Records operation durations per label."""

    def __init__(self, clock: Callable[[], float] = time.perf_counter):
        self._clock = clock
        self._metrics: Dict[str, OperationMetrics] = {}

    def start_timing(self, label: str) -> Callable[[], float]:
        """Start timing an operation.

        Args:
            label: Name the sample is recorded under

        Returns:
            A function that stops the timer, records the sample and returns
            the elapsed milliseconds. Calling it again returns the same value
            without recording a second sample.
        """
        start = self._clock()
        elapsed: Optional[float] = None

        def end_timing() -> float:
            nonlocal elapsed
            if elapsed is None:
                elapsed = (self._clock() - start) * 1000.0
                self.record(label, elapsed)
            return elapsed

        return end_timing

    @contextmanager
    def timed(self, label: str) -> Iterator[None]:
        """Time the body of a with block."""
        end_timing = self.start_timing(label)
        try:
            yield
        finally:
            end_timing()

    def record(self, label: str, duration_ms: float) -> None:
        """Record an externally measured duration."""
        self._metrics.setdefault(label, OperationMetrics()).add(duration_ms)

    def get_metrics(self, label: str) -> Optional[OperationMetrics]:
        """Get aggregate metrics for a label, or None if nothing was recorded."""
        metrics = self._metrics.get(label)
        if metrics is None or metrics.count == 0:
            return None
        return metrics

    def get_all_metrics(self) -> Dict[str, OperationMetrics]:
        """Get metrics for every recorded label."""
        return {label: m for label, m in self._metrics.items() if m.count}

    def clear(self) -> None:
        """Forget all recorded samples."""
        self._metrics.clear()
