"""
Shared plumbing for the pipeline stages.

A run owns one ``ProcessingContext``; every stage (PDF rendering, OCR)
reads settings from it and adds its results to ``context.stats``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from ..config import Config
from ..logger import get_logger
from ..models import ProcessingStats
from ..utils.file_utils import safe_stem
from ..utils.timing import Timer, format_duration


@dataclass
class ProcessingContext:
    """Settings, source identity and accumulated stats for one batch."""

    config: Config
    source_path: Optional[Path] = None
    source_name: Optional[str] = None
    output_dir: Optional[Path] = None
    stats: ProcessingStats = field(default_factory=ProcessingStats)

    def setup_paths(self, source_path: Path) -> None:
        """
        Name the batch after ``source_path`` and create ``<output_dir>/<name>/``.

        For image batches ``source_path`` is the first image or the
        ``--name`` given on the command line.
        """
        self.source_path = Path(source_path)
        self.source_name = safe_stem(self.source_path)
        self.stats.source_name = self.source_name

        self.output_dir = self.config.output_dir / self.source_name
        self.output_dir.mkdir(parents=True, exist_ok=True)


def _with_fields(message: str, fields: dict[str, Any]) -> str:
    if not fields:
        return message
    return message + " " + " ".join(f"{key}={value}" for key, value in fields.items())


class BaseProcessor(ABC):
    """
    One pipeline stage.

    Subclasses set ``name`` and implement ``process()``; callers use
    ``run()``, which checks ``validate()`` first and turns any exception
    into a logged ``False``.
    """

    name: str = "BaseProcessor"

    def __init__(self, context: ProcessingContext):
        self.context = context
        self.config = context.config
        self.logger = get_logger(f"cutru_ocr.processors.{self.name}")

    @property
    def debug_mode(self) -> bool:
        return self.config.debug

    def log_debug(self, message: str, **fields: Any) -> None:
        self.logger.debug(_with_fields(message, fields))

    def log_info(self, message: str, **fields: Any) -> None:
        self.logger.info(_with_fields(message, fields))

    def log_warning(self, message: str, **fields: Any) -> None:
        self.logger.warning(_with_fields(message, fields))

    def log_error(self, message: str, error: Optional[Exception] = None) -> None:
        # Tracebacks only in debug mode; the console stays one line per failure otherwise
        if error is None:
            self.logger.error(message)
        else:
            self.logger.error(f"{message}: {error}", exc_info=self.debug_mode)

    def validate(self) -> bool:
        """Pre-flight check; stages with prerequisites override this."""
        return True

    @abstractmethod
    def process(self) -> bool:
        """Do the stage's work. True means the stage produced usable output."""

    def run(self) -> bool:
        timer = Timer()
        self.log_info(f"Starting {self.name}")

        try:
            if not self.validate():
                self.log_error(f"{self.name}: validation failed")
                return False
            ok = self.process()
        except Exception as e:
            self.log_error(f"{self.name} failed after {timer}", error=e)
            return False

        self.log_info(f"Completed {self.name}", duration=format_duration(timer.elapsed))
        return ok
