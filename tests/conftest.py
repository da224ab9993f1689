import pytest

from cutru_ocr.config import reset_config
from cutru_ocr.logger import reset_logging


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Fresh config per test with logs and output under tmp_path."""
    monkeypatch.setenv("OUTPUT_DIR", str(tmp_path / "output"))
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("LOG_TO_FILE", "0")
    monkeypatch.setenv("AI_RETRY_DELAY_SEC", "0.01")
    for key in ("DEBUG", "DUMP_RAW_RESPONSES", "AI_API_KEY", "GEMINI_API_KEY", "AI_OCR_CONCURRENCY"):
        monkeypatch.delenv(key, raising=False)

    reset_config()
    reset_logging()
    yield
    reset_logging()
    reset_config()
