"""
AI OCR processor.

Sends household images and rendered CT3A pages to a vision model and
normalizes the rows it returns.
"""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence, Tuple

import openai

from .base import BaseProcessor, ProcessingContext
from .pdf_extractor import RenderedPage
from ..exceptions import ConfigurationError, InputFileError, OCRError
from ..models import PageResult
from ..normalization import normalize_records
from ..prompts import IMAGE_OCR_PROMPT, PDF_OCR_PROMPT
from ..utils.ai_parser import parse_ai_response
from ..utils.image_utils import load_image_payload
from ..utils.timing import timed_operation

RATE_LIMIT_MIN_DELAY_SEC = 5.0


class EmptyCompletionError(Exception):
    """The endpoint answered without any choices (e.g. a content-filter block)."""


@dataclass(frozen=True)
class OCRTask:
    """One image to send to the vision model."""
    page_number: int  # 1-based position in the upload
    source: str
    data_url: str
    prompt: str


def classify_error(error: Exception) -> Tuple[bool, bool]:
    """
    Decide whether a failed call is worth retrying.

    Returns:
        (is_retryable, is_rate_limit)
    """
    if isinstance(error, EmptyCompletionError):
        return True, False

    text = str(error)
    lowered = text.lower()

    is_rate_limit = (
        isinstance(error, openai.RateLimitError)
        or "429" in text
        or "resource_exhausted" in lowered
        or "rate limit" in lowered
    )
    is_server_error = (
        isinstance(error, openai.InternalServerError)
        or any(code in text for code in ("500", "502", "503", "504"))
    )
    is_timeout = (
        isinstance(error, openai.APITimeoutError)
        or "timeout" in lowered
        or "timed out" in lowered
    )
    is_connection_error = (
        isinstance(error, openai.APIConnectionError)
        or "connection" in lowered
    )
    return is_rate_limit or is_server_error or is_timeout or is_connection_error, is_rate_limit


class AIOCRProcessor(BaseProcessor):
    """
    Extract residence records using a vision model (Gemini by default).

    The model is reached through the OpenAI SDK against Gemini's
    OpenAI-compatible endpoint. Every response is parsed defensively and run
    through the record normalizer, so each PageResult carries normalized
    records plus the column corrections applied to them.

    Processing Flow:
    1. Queue household images (add_images) or rendered PDF pages (add_pdf_pages).
    2. Send up to AI_OCR_CONCURRENCY requests in parallel, one image per request.
    3. Retry rate limits and transient failures with exponential backoff.
    4. Collect PageResults in upload order; a failed page is recorded with its
       error and does not stop the others.
    """

    name = "AIOCRProcessor"

    def __init__(
        self,
        context: ProcessingContext,
        client: Optional[Any] = None,
        on_page_complete: Optional[Callable[[PageResult], None]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        super().__init__(context)
        self.client = client
        self.model = self.config.ai.model
        self.max_retries = self.config.ai.max_retries
        self.retry_delay = self.config.ai.retry_delay_sec
        self.concurrency = max(1, self.config.ai.concurrency)
        self.on_page_complete = on_page_complete
        self._sleep = sleep

        self.tasks: List[OCRTask] = []
        self._rejected: List[PageResult] = []
        self.page_results: List[PageResult] = []

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def validate(self) -> bool:
        if self.client is None and not self.config.ai.api_key:
            self.log_error("AI_API_KEY (or GEMINI_API_KEY) not set. Please set in .env or environment variables.")
            return False
        if not self.tasks and not self._rejected:
            self.log_warning("Nothing to process: no images or pages queued")
            return False
        return True

    def _initialize_client(self) -> None:
        if self.client is None:
            if not self.config.ai.api_key:
                raise ConfigurationError("Vision model API key is not configured", config_key="AI_API_KEY")
            base_url = self.config.ai.get_normalized_base_url() or None
            self.client = openai.OpenAI(
                api_key=self.config.ai.api_key,
                base_url=base_url,
                timeout=self.config.ai.timeout_sec,
                max_retries=0,  # retries handled in _call_model
            )
        self.context.stats.ai_usage.provider = self.config.ai.provider
        self.context.stats.ai_usage.model = self.model

    def add_images(self, image_paths: Sequence[Path]) -> None:
        """Queue household images; unreadable files are recorded as failed pages."""
        for path in image_paths:
            page_number = len(self.tasks) + len(self._rejected) + 1
            try:
                payload = load_image_payload(
                    path,
                    allowed_mime_types=self.config.image.allowed_mime_types,
                    max_size_bytes=self.config.image.max_file_size_bytes,
                )
            except InputFileError as e:
                self.log_warning(f"Skipping {Path(path).name}: {e}")
                self._rejected.append(PageResult(page_number=page_number, source=str(path), error=str(e)))
                continue
            self.tasks.append(OCRTask(
                page_number=page_number,
                source=str(path),
                data_url=payload.data_url,
                prompt=IMAGE_OCR_PROMPT,
            ))

    def add_pdf_pages(self, pages: Sequence[RenderedPage], source: str = "") -> None:
        """Queue rendered CT3A table pages."""
        self.tasks.extend(self._page_task(page, source) for page in pages)

    @staticmethod
    def _page_task(page: RenderedPage, source: str) -> OCRTask:
        return OCRTask(
            page_number=page.page_number,
            source=source,
            data_url=f"data:image/png;base64,{page.data_base64}",
            prompt=PDF_OCR_PROMPT,
        )

    @property
    def queued_count(self) -> int:
        """Images queued so far, including rejected uploads."""
        return len(self.tasks) + len(self._rejected)

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    def process(self) -> bool:
        self._initialize_client()
        self.log_info(f"Processing {len(self.tasks)} image(s) with {self.concurrency} concurrent requests (Model: {self.model})")
        self.log_info(f"Retry config: max_retries={self.max_retries}, retry_delay={self.retry_delay}s")

        results = self.process_tasks(self.tasks)
        results.extend(self._rejected)
        results.sort(key=lambda r: r.page_number)

        self.page_results = results
        for result in results:
            self.context.stats.add_page_result(result)

        failed = [r for r in results if not r.ok]
        if failed:
            self.log_warning(
                f"{len(failed)} page(s) failed: "
                + ", ".join(str(r.page_number) for r in failed)
            )
        else:
            self.log_info(f"All {len(results)} page(s) processed successfully")

        return len(failed) < len(results)

    def process_tasks(self, tasks: Sequence[OCRTask]) -> List[PageResult]:
        """Run tasks concurrently; results come back in task order."""
        if not tasks:
            return []
        if self.concurrency == 1 or len(tasks) == 1:
            return [self.process_task(task) for task in tasks]

        with ThreadPoolExecutor(max_workers=min(self.concurrency, len(tasks))) as executor:
            return list(executor.map(self.process_task, tasks))

    def process_task(self, task: OCRTask) -> PageResult:
        """OCR one image and normalize the rows. Never raises."""
        result = PageResult(page_number=task.page_number, source=task.source)

        response_text = None
        with timed_operation(f"page {task.page_number} OCR", self.logger) as timing:
            try:
                response_text = self._call_model(task)
            except OCRError as e:
                self.log_error(f"Page {task.page_number} failed", error=e)
                result.error = str(e)

        result.ocr_time_sec = timing.duration_sec
        if response_text is not None:
            try:
                self._apply_response(result, response_text)
            except Exception as e:
                # Keep the failure on this page
                self.log_error(f"Page {task.page_number}: could not read model reply", error=e)
                result.records = []
                result.error = f"Unreadable model reply: {e}"

        if self.on_page_complete:
            self.on_page_complete(result)
        return result

    def _apply_response(self, result: PageResult, response_text: str) -> None:
        """Parse the model reply into normalized records on ``result``."""
        if self.config.dump_raw_responses:
            result.raw_response = response_text

        rows = parse_ai_response(response_text)
        normalized = normalize_records(rows)
        result.raw_record_count = len(rows)
        result.records = normalized.records
        result.corrections = normalized.corrections

        self.log_info(f"Page {result.page_number}: found {len(result.records)} records in {result.ocr_time_sec:.2f}s")

    def process_image(self, image_path: Path) -> PageResult:
        """Convenience wrapper: OCR a single household image."""
        self._initialize_client()
        self.add_images([image_path])
        if self._rejected:
            return self._rejected.pop()
        return self.process_task(self.tasks.pop())

    def process_pages(self, pages: Sequence[RenderedPage], source: str = "") -> List[PageResult]:
        """Convenience wrapper: OCR rendered PDF pages, results in page order."""
        self._initialize_client()
        return self.process_tasks([self._page_task(page, source) for page in pages])

    def _call_model(self, task: OCRTask) -> str:
        """
        Send one image to the vision model with retry logic.

        Raises:
            OCRError: non-retryable failure, or all retries exhausted
        """
        messages = [{
            "role": "user",
            "content": [
                {"type": "text", "text": task.prompt},
                {"type": "image_url", "image_url": {"url": task.data_url}},
            ],
        }]

        for attempt in range(self.max_retries + 1):
            try:
                completion = self.client.chat.completions.create(
                    model=self.model,
                    messages=messages,
                    temperature=0,
                    max_tokens=self.config.ai.max_output_tokens,
                )
                self._track_usage(completion)
                response_text = self._reply_text(completion)
            except Exception as e:
                is_retryable, is_rate_limit = classify_error(e)
                if not is_retryable or attempt >= self.max_retries:
                    raise OCRError(
                        f"Vision model call failed after {attempt + 1} attempt(s): {e}",
                        page_number=task.page_number,
                        ai_provider=self.config.ai.provider,
                    ) from e

                delay = self.retry_delay * (2 ** attempt)
                if is_rate_limit:
                    delay = max(delay, RATE_LIMIT_MIN_DELAY_SEC)
                self.log_warning(
                    f"Retryable error for page {task.page_number} "
                    f"(attempt {attempt + 1}/{self.max_retries + 1}): {e}. Retrying in {delay:.1f}s..."
                )
                self._sleep(delay)
                continue

            self.log_debug(f"API response for page {task.page_number}: {response_text[:500]}")
            return response_text

        # Unreachable: the loop either returns or raises.
        raise OCRError("Vision model call failed", page_number=task.page_number)

    @staticmethod
    def _reply_text(completion: Any) -> str:
        """Message text of the first choice; an empty message means no rows."""
        choices = getattr(completion, "choices", None)
        if not choices:
            raise EmptyCompletionError("Vision model returned no choices")
        message = getattr(choices[0], "message", None)
        return getattr(message, "content", None) or "[]"

    def _track_usage(self, completion: Any) -> None:
        usage = getattr(completion, "usage", None)
        if not usage:
            return
        input_tokens = usage.prompt_tokens or 0
        output_tokens = usage.completion_tokens or 0
        cost = self.config.ai.estimate_cost(input_tokens, output_tokens)
        self.context.stats.ai_usage.add_call(input_tokens, output_tokens, cost)
