"""
Main OCR Engine Module.

This module provides the OCREngine class, the text-acquisition boundary
in front of the analysis engine. Given raw document bytes it returns the
best-effort plain text, or an empty string when nothing can be read.

Usage:
    from invoice_analyzer.ocr_engine import OCREngine

    engine = OCREngine()
    text = engine.extract_text(data, "invoice.pdf")

Author: ML Engineering Team
"""

import io
import time
from typing import List, Optional

from PIL import Image, UnidentifiedImageError

from config import get_config
from invoice_analyzer.utils.exceptions import (
    CorruptedFileError, InvoiceAnalysisError, UnsupportedFileTypeError
)
from invoice_analyzer.utils.helpers import get_file_extension
from invoice_analyzer.utils.logger import get_logger
from .pdf_processor import PDFProcessor
from .tesseract_backend import TesseractBackend

# Initialize module logger
logger = get_logger(__name__)


class OCREngine:
    """
    Text acquisition for images, PDFs and plain-text files.

    Routing by file extension:
        - images: Pillow + Tesseract
        - PDFs: embedded text layer when large enough, otherwise rendered
          pages + Tesseract
        - .txt: decoded as UTF-8

    The Tesseract backend is created on first use so that text files and
    digital PDFs work on machines without Tesseract installed.

    Attributes:
        image_extensions: Extensions routed to OCR
        pdf_extensions: Extensions routed to the PDF processor
        text_extensions: Extensions decoded directly

    Example:
        >>> engine = OCREngine()
        >>> text = engine.extract_text(scan_bytes, "receipt.jpg")
        >>> text == ""  # nothing readable
        False
    """

    def __init__(
        self,
        backend: Optional[TesseractBackend] = None,
        pdf_processor: Optional[PDFProcessor] = None
    ) -> None:
        """
        Initialize the OCR engine.

        Args:
            backend: OCR backend to use. If None, a TesseractBackend is
                    created when the first image needs recognition.
            pdf_processor: PDF processor. If None, a default one is used.
        """
        self._backend = backend
        self.pdf_processor = pdf_processor or PDFProcessor()

        self.image_extensions = get_config(
            "ocr.input.image_extensions", [".png", ".jpg", ".jpeg", ".tif", ".tiff", ".bmp"]
        )
        self.pdf_extensions = get_config("ocr.input.pdf_extensions", [".pdf"])
        self.text_extensions = get_config("ocr.input.text_extensions", [".txt"])

    @property
    def supported_extensions(self) -> List[str]:
        return list(self.image_extensions) + list(self.pdf_extensions) + list(self.text_extensions)

    @property
    def backend(self) -> TesseractBackend:
        if self._backend is None:
            self._backend = TesseractBackend()
        return self._backend

    def extract_text(self, data: bytes, filename: str) -> str:
        """
        Recover plain text from document bytes.

        Never raises: any failure is logged and yields "".

        Args:
            data: Raw document bytes.
            filename: Original filename; its extension selects the route.

        Returns:
            Extracted text, or an empty string.
        """
        start_time = time.time()
        try:
            text = self.extract_text_strict(data, filename)
        except InvoiceAnalysisError as e:
            logger.error(f"Text acquisition failed for {filename}: {e}")
            return ""

        logger.info(
            f"Acquired {len(text)} characters from {filename} "
            f"({time.time() - start_time:.2f}s)"
        )
        return text

    def extract_text_strict(self, data: bytes, filename: str) -> str:
        """
        Recover plain text from document bytes, raising on failure.

        Raises:
            UnsupportedFileTypeError: If the extension isn't supported.
            CorruptedFileError: If the document can't be read.
            OCRError: If Tesseract is missing or fails.
        """
        extension = get_file_extension(filename)

        if not data:
            raise CorruptedFileError(filename, "empty file")

        if extension in self.text_extensions:
            return data.decode('utf-8-sig', errors='replace')

        if extension in self.pdf_extensions:
            return self._extract_pdf(data, filename)

        if extension in self.image_extensions:
            return self.backend.get_raw_text(self._open_image(data, filename))

        raise UnsupportedFileTypeError(extension or filename, self.supported_extensions)

    def _extract_pdf(self, data: bytes, filename: str) -> str:
        text = self.pdf_processor.extract_text_layer(data, filename)
        if self.pdf_processor.has_usable_text(text):
            logger.debug(f"Using embedded text layer of {filename}")
            return text

        logger.debug(f"No usable text layer in {filename}, running OCR")
        pages = self.pdf_processor.render_pages(data, filename)
        return '\n'.join(self.backend.get_raw_text(page) for page in pages)

    @staticmethod
    def _open_image(data: bytes, filename: str) -> Image.Image:
        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except (UnidentifiedImageError, OSError) as e:
            raise CorruptedFileError(filename, str(e))
        return image
