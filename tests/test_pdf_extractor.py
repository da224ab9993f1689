import fitz
import pytest

from cutru_ocr.config import get_config
from cutru_ocr.exceptions import InputFileError, PDFExtractionError
from cutru_ocr.processors import PDFExtractor, ProcessingContext, check_pdf_file


def make_pdf(path, pages=2):
    doc = fitz.open()
    for n in range(pages):
        page = doc.new_page(width=200, height=100)
        page.insert_text((20, 50), f"CT3A page {n + 1}")
    doc.save(str(path))
    doc.close()
    return path


def make_extractor(pdf_path):
    context = ProcessingContext(config=get_config())
    context.setup_paths(pdf_path)
    return PDFExtractor(context)


def test_renders_every_page_at_scale(tmp_path):
    pdf_path = make_pdf(tmp_path / "ct3a.pdf", pages=3)
    extractor = make_extractor(pdf_path)

    assert extractor.run()

    assert [p.page_number for p in extractor.pages] == [1, 2, 3]
    assert extractor.context.stats.total_pages == 3
    first = extractor.pages[0]
    assert first.png_bytes.startswith(b"\x89PNG")
    assert (first.width, first.height) == (400, 200)


def test_output_dir_named_after_pdf(tmp_path):
    extractor = make_extractor(make_pdf(tmp_path / "ct3a.pdf", pages=1))

    assert extractor.context.source_name == "ct3a"
    assert extractor.context.output_dir.is_dir()


def test_debug_mode_saves_page_images(tmp_path):
    extractor = make_extractor(make_pdf(tmp_path / "ct3a.pdf", pages=1))
    extractor.config.debug = True

    assert extractor.run()
    assert (extractor.context.output_dir / "pages" / "page-001.png").exists()


def test_check_pdf_file_rejects_bad_uploads(tmp_path):
    with pytest.raises(InputFileError):
        check_pdf_file(tmp_path / "missing.pdf", 1024)

    not_pdf = tmp_path / "scan.png"
    not_pdf.write_bytes(b"\x89PNG")
    with pytest.raises(InputFileError):
        check_pdf_file(not_pdf, 1024)

    big = make_pdf(tmp_path / "big.pdf", pages=1)
    with pytest.raises(InputFileError):
        check_pdf_file(big, 10)


def test_corrupt_pdf_raises(tmp_path):
    corrupt = tmp_path / "corrupt.pdf"
    corrupt.write_bytes(b"this is not a pdf")
    extractor = make_extractor(corrupt)

    with pytest.raises(PDFExtractionError):
        extractor.render_pages(corrupt)
    assert not extractor.run()
