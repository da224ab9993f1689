"""
Run bookkeeping: one ``PageResult`` per image or PDF page, model usage
counters and the batch-level ``ProcessingStats`` saved next to the records.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Optional

from .corrections import CorrectionLog
from .record import NormalizedRecord

STATUS_PENDING = "pending"
STATUS_PROCESSING = "processing"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"


def _timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


@dataclass
class AIUsage:
    """Token and cost counters for the vision model. Pages update it from worker threads."""
    provider: str = ""
    model: str = ""
    calls_count: int = 0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    total_cost_usd: float = 0.0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def add_call(self, input_tokens: int, output_tokens: int, cost_usd: Optional[float] = None) -> None:
        with self._lock:
            self.calls_count += 1
            self.total_input_tokens += input_tokens
            self.total_output_tokens += output_tokens
            self.total_cost_usd += cost_usd or 0.0

    def describe(self) -> str:
        return (
            f"{self.calls_count} calls, {self.total_input_tokens} in / "
            f"{self.total_output_tokens} out tokens, ${self.total_cost_usd:.4f}"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider": self.provider,
            "model": self.model,
            "calls_count": self.calls_count,
            "total_input_tokens": self.total_input_tokens,
            "total_output_tokens": self.total_output_tokens,
            "total_cost_usd": self.total_cost_usd,
        }


@dataclass
class PageResult:
    """
    What came back for one page (numbered from 1).

    A page that failed keeps its error text and an empty record list, so a
    batch can report partial results. ``raw_response`` is only filled when
    raw dumps are switched on.
    """
    page_number: int = 0
    source: str = ""
    records: List[NormalizedRecord] = field(default_factory=list)
    corrections: CorrectionLog = field(default_factory=CorrectionLog)
    raw_record_count: int = 0
    ocr_time_sec: float = 0.0
    error: str = ""
    raw_response: Optional[str] = None

    @property
    def ok(self) -> bool:
        return not self.error

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "page_number": self.page_number,
            "source": self.source,
            "records_found": len(self.records),
            "records": [record.to_dict() for record in self.records],
            "corrections": self.corrections.to_dict(),
            "ocr_time_sec": round(self.ocr_time_sec, 4),
        }
        if self.error:
            data["error"] = self.error
        if self.raw_response is not None:
            data["raw_response"] = self.raw_response
        return data


@dataclass
class ProcessingStats:
    """
    Batch totals for one upload (an image set or a CT3A PDF).

    Page counts, record counts and corrections are derived from
    ``page_results`` on access rather than stored.
    """

    source_name: str = ""
    total_pages: int = 0
    status: str = STATUS_PENDING
    error_message: str = ""
    started_at: str = ""
    completed_at: str = ""
    total_time_sec: float = 0.0

    ai_usage: AIUsage = field(default_factory=AIUsage)
    page_results: List[PageResult] = field(default_factory=list)

    def start(self) -> None:
        self.status = STATUS_PROCESSING
        self.started_at = _timestamp()

    def complete(self) -> None:
        self._finish(STATUS_COMPLETED)

    def fail(self, error: str) -> None:
        self.error_message = error
        self._finish(STATUS_FAILED)

    def _finish(self, status: str) -> None:
        self.status = status
        self.completed_at = _timestamp()

    def add_page_result(self, page: PageResult) -> None:
        self.page_results.append(page)

    @property
    def pages_processed(self) -> int:
        return sum(1 for page in self.page_results if page.ok)

    @property
    def pages_failed(self) -> int:
        return len(self.page_results) - self.pages_processed

    @property
    def all_records(self) -> List[NormalizedRecord]:
        """Every page's records, in page order."""
        return [record for page in self.page_results for record in page.records]

    @property
    def total_records(self) -> int:
        return sum(len(page.records) for page in self.page_results)

    @property
    def ocr_time_sec(self) -> float:
        return sum(page.ocr_time_sec for page in self.page_results)

    @property
    def corrections(self) -> CorrectionLog:
        merged = CorrectionLog()
        for page in self.page_results:
            merged.merge(page.corrections)
        return merged

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_name": self.source_name,
            "status": self.status,
            "error_message": self.error_message,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "counts": {
                "total_pages": self.total_pages,
                "pages_processed": self.pages_processed,
                "pages_failed": self.pages_failed,
                "total_records": self.total_records,
            },
            "timing": {
                "ocr_time_sec": round(self.ocr_time_sec, 4),
                "total_time_sec": round(self.total_time_sec, 4),
            },
            "ai_usage": self.ai_usage.to_dict(),
            "corrections": self.corrections.to_dict(),
        }

    def summary_str(self) -> str:
        lines = [
            f"{self.source_name or 'batch'}: {self.status}",
            f"  Pages: {self.pages_processed}/{self.total_pages} ok, {self.pages_failed} failed",
            f"  Records: {self.total_records}",
            f"  Corrections: {self.corrections.summary_str()}",
            f"  Time: {self.total_time_sec:.2f}s (OCR {self.ocr_time_sec:.2f}s)",
        ]
        if self.ai_usage.calls_count:
            lines.append(f"  AI usage: {self.ai_usage.describe()}")
        if self.error_message:
            lines.append(f"  Error: {self.error_message}")
        return "\n".join(lines)
