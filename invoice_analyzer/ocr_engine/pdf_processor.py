"""
PDF Processor Module.

This module handles PDF documents:
    - Digital PDF text-layer extraction
    - Scanned PDF page rendering for OCR
    - Multi-page handling up to a configured page limit

Uses PyMuPDF for both text extraction and page rendering.

Author: ML Engineering Team
"""

import io
from typing import List

import fitz  # PyMuPDF
from PIL import Image

from config import get_config
from invoice_analyzer.utils.logger import get_logger
from invoice_analyzer.utils.exceptions import CorruptedFileError

# Initialize module logger
logger = get_logger(__name__)


class PDFProcessor:
    """
    Processor for PDF documents held in memory.

    Attributes:
        dpi: Resolution for page rendering
        max_pages: Maximum number of pages to process
        min_text_layer_chars: Minimum text-layer size to skip OCR

    Example:
        >>> processor = PDFProcessor()
        >>> text = processor.extract_text_layer(data, "invoice.pdf")
        >>> if not processor.has_usable_text(text):
        ...     images = processor.render_pages(data, "invoice.pdf")
    """

    def __init__(self) -> None:
        """Initialize the PDF processor with configuration."""
        self.dpi = get_config("ocr.pdf.dpi", 300)
        self.max_pages = get_config("ocr.pdf.max_pages", 5)
        self.min_text_layer_chars = get_config("ocr.pdf.min_text_layer_chars", 50)

        logger.debug(f"PDFProcessor initialized (DPI={self.dpi}, max_pages={self.max_pages})")

    def _open(self, data: bytes, filename: str) -> fitz.Document:
        try:
            return fitz.open(stream=data, filetype="pdf")
        except (fitz.FileDataError, RuntimeError, ValueError) as e:
            logger.error(f"Could not open PDF {filename}: {e}")
            raise CorruptedFileError(filename, str(e))

    def extract_text_layer(self, data: bytes, filename: str = "document.pdf") -> str:
        """
        Extract the embedded text layer.

        Args:
            data: PDF bytes.
            filename: Name used in log and error messages.

        Returns:
            Text of the first max_pages pages, one page per block.

        Raises:
            CorruptedFileError: If the PDF cannot be read.
        """
        doc = self._open(data, filename)
        try:
            pages = [doc.load_page(i).get_text("text") for i in range(min(len(doc), self.max_pages))]
        finally:
            doc.close()
        return '\n'.join(page.strip() for page in pages if page.strip())

    def has_usable_text(self, text: str) -> bool:
        return len(text.strip()) >= self.min_text_layer_chars

    def render_pages(self, data: bytes, filename: str = "document.pdf") -> List[Image.Image]:
        """
        Render pages to images for OCR.

        Args:
            data: PDF bytes.
            filename: Name used in log and error messages.

        Returns:
            List of RGB PIL Images.

        Raises:
            CorruptedFileError: If the PDF cannot be read or rendered.
        """
        doc = self._open(data, filename)
        images = []
        try:
            page_count = len(doc)
            if page_count > self.max_pages:
                logger.warning(f"PDF has {page_count} pages, limiting to {self.max_pages}")

            # Default PDF resolution is 72 DPI
            zoom = self.dpi / 72.0
            matrix = fitz.Matrix(zoom, zoom)

            for page_num in range(min(page_count, self.max_pages)):
                pix = doc.load_page(page_num).get_pixmap(matrix=matrix)
                image = Image.open(io.BytesIO(pix.tobytes("png")))
                if image.mode != 'RGB':
                    image = image.convert('RGB')
                images.append(image)
        except RuntimeError as e:
            logger.error(f"PyMuPDF rendering failed: {e}")
            raise CorruptedFileError(filename, str(e))
        finally:
            doc.close()

        logger.info(f"Rendered PDF to {len(images)} image(s)")
        return images
