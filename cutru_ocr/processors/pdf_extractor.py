"""
PDF Extractor processor.

Renders every page of an uploaded CT3A table PDF to PNG using PyMuPDF, ready
to be sent to the vision model one page at a time.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import fitz  # PyMuPDF

from .base import BaseProcessor, ProcessingContext
from ..exceptions import InputFileError, PDFExtractionError


@dataclass(frozen=True)
class RenderedPage:
    """One rasterized PDF page."""
    page_number: int  # 1-based
    png_bytes: bytes
    width: int
    height: int

    @property
    def data_base64(self) -> str:
        return base64.b64encode(self.png_bytes).decode("utf-8")


def check_pdf_file(pdf_path: Path, max_size_bytes: int) -> None:
    """
    Reject uploads that cannot be a processable PDF.

    Raises:
        InputFileError: missing file, wrong extension or too large
    """
    if not pdf_path.is_file():
        raise InputFileError("PDF not found", file_path=str(pdf_path))
    if pdf_path.suffix.lower() != ".pdf":
        raise InputFileError("File must be a PDF", file_path=str(pdf_path))
    size = pdf_path.stat().st_size
    if size > max_size_bytes:
        raise InputFileError(
            f"PDF larger than {max_size_bytes // (1024 * 1024)}MB",
            file_path=str(pdf_path),
            size_bytes=size,
        )


class PDFExtractor(BaseProcessor):
    """
    Rasterize PDF pages.

    Uses PyMuPDF to render each page at ``render_scale`` (2x by default).
    Rendered pages are kept in memory; in debug mode they are also written
    to <output_dir>/pages/ for inspection.
    """

    name = "PDFExtractor"

    def __init__(
        self,
        context: ProcessingContext,
        render_scale: Optional[float] = None,
    ):
        super().__init__(context)
        self.render_scale = render_scale or self.config.pdf.render_scale
        self.pages: List[RenderedPage] = []

    def validate(self) -> bool:
        """Check PDF path, extension and size."""
        if not self.context.source_path:
            self.log_error("No PDF path specified")
            return False
        try:
            check_pdf_file(self.context.source_path, self.config.pdf.max_file_size_bytes)
        except InputFileError as e:
            self.log_error("Invalid PDF upload", error=e)
            return False
        return True

    def process(self) -> bool:
        self.pages = self.render_pages(self.context.source_path)
        self.context.stats.total_pages = len(self.pages)

        if self.debug_mode and self.context.output_dir:
            self._save_page_images()

        return True

    def render_pages(self, pdf_path: Path) -> List[RenderedPage]:
        """
        Render all pages of ``pdf_path``.

        Raises:
            PDFExtractionError: unreadable PDF, no pages or a page that fails to render
        """
        self.log_info(f"Opening PDF: {pdf_path.name}")
        try:
            doc = fitz.open(pdf_path)
        except Exception as e:
            raise PDFExtractionError(f"Failed to open PDF: {e}", str(pdf_path))

        try:
            if doc.needs_pass:
                raise PDFExtractionError("PDF is password protected", str(pdf_path))

            total_pages = doc.page_count
            if total_pages == 0:
                raise PDFExtractionError("PDF has no pages", str(pdf_path))
            self.log_info(f"PDF has {total_pages} pages")

            matrix = fitz.Matrix(self.render_scale, self.render_scale)
            pages = []
            for index in range(total_pages):
                try:
                    pix = doc.load_page(index).get_pixmap(matrix=matrix, alpha=False, annots=True)
                except Exception as e:
                    raise PDFExtractionError(f"Failed to render page: {e}", str(pdf_path), index + 1)
                pages.append(RenderedPage(
                    page_number=index + 1,
                    png_bytes=pix.tobytes("png"),
                    width=pix.width,
                    height=pix.height,
                ))
                self.log_debug(f"Rendered page {index + 1}/{total_pages}", size=f"{pix.width}x{pix.height}")
            return pages
        finally:
            doc.close()

    def _save_page_images(self) -> None:
        pages_dir = self.context.output_dir / "pages"
        pages_dir.mkdir(parents=True, exist_ok=True)
        for page in self.pages:
            (pages_dir / f"page-{page.page_number:03d}.png").write_bytes(page.png_bytes)
        self.log_debug(f"Saved {len(self.pages)} page images to {pages_dir}")
