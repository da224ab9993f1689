import json
from types import SimpleNamespace

import pytest
from PIL import Image

from cutru_ocr.config import get_config
from cutru_ocr.exceptions import OCRError
from cutru_ocr.processors import (
    AIOCRProcessor,
    EmptyCompletionError,
    OCRTask,
    ProcessingContext,
    RenderedPage,
    classify_error,
)


class FakeCompletions:
    """Stands in for client.chat.completions; replies are consumed in order."""

    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, SimpleNamespace):
            return reply
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=reply))],
            usage=SimpleNamespace(prompt_tokens=100, completion_tokens=20),
        )


class FakeClient:
    def __init__(self, replies):
        self.chat = SimpleNamespace(completions=FakeCompletions(replies))


def make_processor(replies, **kwargs):
    context = ProcessingContext(config=get_config())
    client = FakeClient(replies)
    processor = AIOCRProcessor(context, client=client, sleep=lambda _s: None, **kwargs)
    return processor, client


def make_task(page_number=1):
    return OCRTask(page_number=page_number, source="test", data_url="data:image/png;base64,AAAA", prompt="prompt")


@pytest.fixture
def image_file(tmp_path):
    path = tmp_path / "ho-gia-dinh.png"
    Image.new("RGB", (8, 8), "white").save(path)
    return path


def test_process_image_normalizes_rows(image_file):
    reply = json.dumps([
        {"stt": 1, "hoTen": "Nguyễn Văn A", "quocTich": "22402-027531", "quanHeVoiChuHo": "Chủ hộ"},
        {"stt": "null", "hoTen": "Trần Thị B", "quocTich": "Việt Nam"},
    ], ensure_ascii=False)
    processor, client = make_processor([f"```json\n{reply}\n```"])

    page = processor.process_image(image_file)

    assert page.ok
    assert page.raw_record_count == 2
    assert [r.full_name for r in page.records] == ["Nguyễn Văn A", "Trần Thị B"]
    assert page.records[1].sequence_in_household == 2
    assert page.records[0].document_code == "22402-027531"
    assert page.corrections.get("move_soHSCT_from_quocTich") == 1

    request = client.chat.completions.calls[0]
    content = request["messages"][0]["content"]
    assert content[1]["image_url"]["url"].startswith("data:image/png;base64,")
    assert request["temperature"] == 0
    assert processor.context.stats.ai_usage.calls_count == 1
    assert processor.context.stats.ai_usage.total_input_tokens == 100


def test_rate_limit_is_retried():
    processor, client = make_processor([
        Exception("Error code: 429 - RESOURCE_EXHAUSTED"),
        Exception("503 Service Unavailable"),
        '[{"hoTen": "A"}]',
    ])
    delays = []
    processor._sleep = delays.append

    page = processor.process_task(make_task())

    assert page.ok
    assert len(page.records) == 1
    assert len(client.chat.completions.calls) == 3
    assert delays[0] >= 5.0


def test_non_retryable_error_fails_page_without_retry():
    processor, client = make_processor([Exception("Invalid API key")])

    page = processor.process_task(make_task(4))

    assert not page.ok
    assert "Invalid API key" in page.error
    assert page.records == []
    assert len(client.chat.completions.calls) == 1


def test_retries_exhausted_raises_ocr_error():
    max_retries = get_config().ai.max_retries
    processor, client = make_processor([Exception("429 Too Many Requests")] * (max_retries + 1))

    with pytest.raises(OCRError):
        processor._call_model(make_task())
    assert len(client.chat.completions.calls) == max_retries + 1


def test_empty_reply_is_empty_page():
    processor, _ = make_processor([None])

    page = processor.process_task(make_task())

    assert page.ok
    assert page.records == []


def test_pages_keep_order_and_failures_do_not_stop_batch():
    # concurrency 1 so the fake replies line up with pages
    processor, _ = make_processor([
        '[{"hoTen": "P1"}]',
        Exception("bad request"),
        '[{"hoTen": "P3a"}, {"hoTen": "P3b"}]',
    ])
    processor.concurrency = 1
    pages = [RenderedPage(page_number=n, png_bytes=b"png", width=1, height=1) for n in (1, 2, 3)]
    processor.add_pdf_pages(pages, source="ct3a.pdf")
    completed = []
    processor.on_page_complete = completed.append

    assert processor.run()

    stats = processor.context.stats
    assert [p.page_number for p in stats.page_results] == [1, 2, 3]
    assert not stats.page_results[1].ok
    assert [r.full_name for r in stats.all_records] == ["P1", "P3a", "P3b"]
    assert len(completed) == 3


def test_concurrent_pages_return_in_page_order():
    processor, _ = make_processor(['[{"hoTen": "X"}]'] * 5)
    processor.concurrency = 3

    results = processor.process_tasks([make_task(n) for n in range(1, 6)])

    assert [r.page_number for r in results] == [1, 2, 3, 4, 5]
    assert all(len(r.records) == 1 for r in results)


def test_unreadable_image_is_recorded_as_failed_page(tmp_path, image_file):
    broken = tmp_path / "broken.png"
    broken.write_bytes(b"")
    processor, _ = make_processor(['[{"hoTen": "A"}]'])

    processor.add_images([broken, image_file])

    assert processor.queued_count == 2
    assert len(processor.tasks) == 1
    assert processor.tasks[0].page_number == 2


def test_validate_requires_api_key():
    context = ProcessingContext(config=get_config())
    processor = AIOCRProcessor(context)
    processor.tasks.append(make_task())

    assert not processor.validate()
    assert not processor.run()


def test_classify_error():
    assert classify_error(Exception("429 RESOURCE_EXHAUSTED")) == (True, True)
    assert classify_error(Exception("Request timed out")) == (True, False)
    assert classify_error(Exception("Invalid API key")) == (False, False)


def test_process_pages_uses_table_prompt():
    processor, client = make_processor(['[{"sttChinh": 12, "sttTrongHo": 1, "hoTen": "A"}]'])
    page = RenderedPage(page_number=1, png_bytes=b"png", width=1, height=1)

    results = processor.process_pages([page], source="ct3a.pdf")

    assert results[0].records[0].row_index_hint == 12
    assert results[0].source == "ct3a.pdf"
    assert "sttChinh" in client.chat.completions.calls[0]["messages"][0]["content"][0]["text"]


def test_reply_without_choices_fails_only_that_page():
    max_retries = get_config().ai.max_retries
    no_choices = SimpleNamespace(choices=[])
    processor, client = make_processor(['[{"hoTen": "A"}]'] + [no_choices] * (max_retries + 1))
    processor.concurrency = 1

    results = processor.process_tasks([make_task(1), make_task(2)])

    assert results[0].ok
    assert [r.full_name for r in results[0].records] == ["A"]
    assert not results[1].ok
    assert "no choices" in results[1].error
    assert results[1].records == []
    assert len(client.chat.completions.calls) == max_retries + 2


def test_reply_without_choices_is_retried():
    processor, client = make_processor([SimpleNamespace(choices=[]), '[{"hoTen": "B"}]'])

    page = processor.process_task(make_task())

    assert page.ok
    assert [r.full_name for r in page.records] == ["B"]
    assert len(client.chat.completions.calls) == 2
    assert classify_error(EmptyCompletionError("no choices")) == (True, False)


def test_unreadable_reply_is_recorded_on_page(monkeypatch):
    def broken_parser(_text):
        raise ValueError("cannot parse")

    monkeypatch.setattr("cutru_ocr.processors.ai_ocr_processor.parse_ai_response", broken_parser)
    processor, _ = make_processor(['[{"hoTen": "A"}]'])

    page = processor.process_task(make_task(3))

    assert not page.ok
    assert "cannot parse" in page.error
    assert page.records == []
