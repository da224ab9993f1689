"""Wall-clock helpers for page and stage timings."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional


def format_duration(seconds: float) -> str:
    """1.2ms, 3.45s or 2m 5.0s."""
    if seconds >= 60:
        minutes, rest = divmod(seconds, 60)
        return f"{int(minutes)}m {rest:.1f}s"
    if seconds >= 1:
        return f"{seconds:.2f}s"
    return f"{seconds * 1000:.1f}ms"


@dataclass
class TimingResult:
    name: str
    duration_sec: float = 0.0
    error: Optional[str] = None

    def __str__(self) -> str:
        text = f"{self.name}: {format_duration(self.duration_sec)}"
        if self.error is not None:
            text += f" (failed: {self.error})"
        return text


@contextmanager
def timed_operation(
    name: str,
    logger: Optional[logging.Logger] = None,
    log_level: int = logging.DEBUG,
) -> Iterator[TimingResult]:
    """
    Measure the ``with`` block; ``duration_sec`` is set on exit, also when
    the block raises.

        with timed_operation("page 3 OCR", logger) as timing:
            ...
        page.ocr_time_sec = timing.duration_sec
    """
    result = TimingResult(name)
    started = time.perf_counter()
    try:
        yield result
    except Exception as e:
        result.error = str(e)
        raise
    finally:
        result.duration_sec = time.perf_counter() - started
        if logger is not None:
            logger.log(log_level, str(result))


class Timer:
    """Starts on construction; ``str()`` gives the elapsed time formatted."""

    def __init__(self):
        self._started = time.perf_counter()

    @property
    def elapsed(self) -> float:
        return time.perf_counter() - self._started

    def __str__(self) -> str:
        return format_duration(self.elapsed)
