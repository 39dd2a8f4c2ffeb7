"""Unit tests for text acquisition."""

import io
from unittest.mock import MagicMock, patch

import fitz
import pytesseract
import pytest
from PIL import Image

from invoice_analyzer.ocr_engine import OCREngine, PDFProcessor, TesseractBackend
from invoice_analyzer.utils.exceptions import (
    CorruptedFileError, OCREngineNotAvailableError, OCRProcessingError, UnsupportedFileTypeError
)

PDF_TEXT = "ACME Ltd\nTax Invoice\nTotal to pay: 1,170.00\nVAT: 170.00"


def _png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (40, 20), "white").save(buffer, format="PNG")
    return buffer.getvalue()


def _pdf_bytes(text: str = PDF_TEXT) -> bytes:
    doc = fitz.open()
    page = doc.new_page()
    for i, line in enumerate(text.splitlines()):
        page.insert_text((72, 72 + 20 * i), line)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def backend() -> MagicMock:
    mock = MagicMock(spec=TesseractBackend)
    mock.get_raw_text.return_value = "OCR TEXT"
    return mock


@pytest.fixture
def pdf_processor() -> MagicMock:
    return MagicMock(spec=PDFProcessor)


@pytest.fixture
def engine(backend: MagicMock, pdf_processor: MagicMock) -> OCREngine:
    return OCREngine(backend=backend, pdf_processor=pdf_processor)


class TestOCREngine:
    """Tests for OCREngine routing."""

    def test_text_file_decoded(self, engine: OCREngine, backend: MagicMock) -> None:
        data = 'חשבונית מס\nTotal: 10'.encode("utf-8-sig")
        assert engine.extract_text(data, "scan.txt") == "חשבונית מס\nTotal: 10"
        backend.get_raw_text.assert_not_called()

    def test_image_goes_to_backend(self, engine: OCREngine, backend: MagicMock) -> None:
        assert engine.extract_text(_png_bytes(), "receipt.PNG") == "OCR TEXT"
        image = backend.get_raw_text.call_args[0][0]
        assert isinstance(image, Image.Image)
        assert image.size == (40, 20)

    def test_unsupported_extension_yields_empty(self, engine: OCREngine) -> None:
        assert engine.extract_text(b"data", "invoice.docx") == ""

    def test_unsupported_extension_strict(self, engine: OCREngine) -> None:
        with pytest.raises(UnsupportedFileTypeError):
            engine.extract_text_strict(b"data", "invoice.docx")

    def test_empty_data_yields_empty(self, engine: OCREngine) -> None:
        assert engine.extract_text(b"", "receipt.png") == ""
        with pytest.raises(CorruptedFileError):
            engine.extract_text_strict(b"", "receipt.png")

    def test_corrupt_image_yields_empty(self, engine: OCREngine, backend: MagicMock) -> None:
        assert engine.extract_text(b"not an image", "receipt.jpg") == ""
        backend.get_raw_text.assert_not_called()

    def test_backend_failure_yields_empty(self, engine: OCREngine, backend: MagicMock) -> None:
        backend.get_raw_text.side_effect = OCRProcessingError("receipt.png", "tesseract crashed")
        assert engine.extract_text(_png_bytes(), "receipt.png") == ""

    def test_pdf_text_layer_used(
        self, engine: OCREngine, backend: MagicMock, pdf_processor: MagicMock
    ) -> None:
        pdf_processor.extract_text_layer.return_value = PDF_TEXT
        pdf_processor.has_usable_text.return_value = True

        assert engine.extract_text(b"%PDF", "invoice.pdf") == PDF_TEXT
        pdf_processor.render_pages.assert_not_called()
        backend.get_raw_text.assert_not_called()

    def test_scanned_pdf_is_rendered(
        self, engine: OCREngine, backend: MagicMock, pdf_processor: MagicMock
    ) -> None:
        pages = [Image.new("RGB", (10, 10)), Image.new("RGB", (10, 10))]
        pdf_processor.extract_text_layer.return_value = ""
        pdf_processor.has_usable_text.return_value = False
        pdf_processor.render_pages.return_value = pages
        backend.get_raw_text.side_effect = ["page one", "page two"]

        assert engine.extract_text(b"%PDF", "scan.pdf") == "page one\npage two"
        assert backend.get_raw_text.call_count == 2

    def test_supported_extensions(self, engine: OCREngine) -> None:
        extensions = engine.supported_extensions
        assert ".pdf" in extensions
        assert ".txt" in extensions
        assert ".png" in extensions


class TestPDFProcessor:
    """Tests for PDFProcessor against in-memory documents."""

    def test_extract_text_layer(self) -> None:
        text = PDFProcessor().extract_text_layer(_pdf_bytes())
        assert "Total to pay: 1,170.00" in text
        assert "ACME Ltd" in text

    def test_has_usable_text(self) -> None:
        processor = PDFProcessor()
        assert processor.has_usable_text(PDF_TEXT)
        assert not processor.has_usable_text("  short  ")

    def test_render_pages(self) -> None:
        processor = PDFProcessor()
        processor.dpi = 72
        images = processor.render_pages(_pdf_bytes())
        assert len(images) == 1
        assert images[0].mode == "RGB"

    def test_corrupt_pdf(self) -> None:
        with pytest.raises(CorruptedFileError):
            PDFProcessor().extract_text_layer(b"not a pdf", "broken.pdf")


class TestTesseractBackend:
    """Tests for TesseractBackend with pytesseract patched."""

    def test_missing_binary(self) -> None:
        with patch.object(
            pytesseract, "get_tesseract_version",
            side_effect=pytesseract.TesseractNotFoundError()
        ):
            with pytest.raises(OCREngineNotAvailableError):
                TesseractBackend()

    def test_get_raw_text(self) -> None:
        with patch.object(pytesseract, "get_tesseract_version", return_value="5.3.0"), \
                patch.object(pytesseract, "image_to_string", return_value="  Total: 10 \n") as ocr:
            backend = TesseractBackend()
            text = backend.get_raw_text(Image.new("RGBA", (10, 10)))

        assert text == "Total: 10"
        _, kwargs = ocr.call_args
        assert kwargs["lang"] == "heb+eng"
        assert "--psm 3" in kwargs["config"]
        assert ocr.call_args[0][0].mode == "RGB"

    def test_engine_without_tesseract_yields_empty(self) -> None:
        with patch.object(
            pytesseract, "get_tesseract_version",
            side_effect=pytesseract.TesseractNotFoundError()
        ):
            assert OCREngine().extract_text(_png_bytes(), "receipt.png") == ""
