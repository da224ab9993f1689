"""
Document processors module.

Contains the processing components for the residence-registration pipeline:
- PDFExtractor: Render CT3A table PDF pages to PNG
- AIOCRProcessor: Extract and normalize records using a vision model
"""

from .base import BaseProcessor, ProcessingContext
from .pdf_extractor import PDFExtractor, RenderedPage, check_pdf_file
from .ai_ocr_processor import AIOCRProcessor, EmptyCompletionError, OCRTask, classify_error

__all__ = [
    "BaseProcessor",
    "ProcessingContext",
    "PDFExtractor",
    "RenderedPage",
    "check_pdf_file",
    "AIOCRProcessor",
    "OCRTask",
    "classify_error",
    "EmptyCompletionError",
]
