"""
Tesseract OCR Backend.

This module provides OCR functionality using Tesseract (pytesseract).
It recovers plain text from scanned invoice and receipt images.

Requirements:
    - Tesseract OCR installed on the system, with the Hebrew ("heb") and
      English ("eng") language data
    - pytesseract Python package

Author: ML Engineering Team
"""

import time

import pytesseract
from PIL import Image

from config import get_config
from invoice_analyzer.utils.logger import get_logger
from invoice_analyzer.utils.exceptions import OCREngineNotAvailableError, OCRProcessingError

# Initialize module logger
logger = get_logger(__name__)


class TesseractBackend:
    """
    Tesseract OCR backend implementation.

    Attributes:
        language: Tesseract language codes (e.g., "heb+eng")
        psm: Page Segmentation Mode (1-13)
        oem: OCR Engine Mode (0-3)
        extra_config: Additional Tesseract configuration

    Example:
        >>> backend = TesseractBackend()
        >>> text = backend.get_raw_text(image)
    """

    def __init__(self) -> None:
        """Initialize the Tesseract backend with configuration."""
        self.language = get_config("ocr.tesseract.lang", "heb+eng")
        self.psm = get_config("ocr.tesseract.psm", 3)
        self.oem = get_config("ocr.tesseract.oem", 3)
        self.extra_config = get_config("ocr.tesseract.config", "")

        self._check_dependencies()

        logger.debug(
            f"TesseractBackend initialized (lang={self.language}, "
            f"psm={self.psm}, oem={self.oem})"
        )

    def _check_dependencies(self) -> None:
        """
        Check if the Tesseract binary is available.

        Raises:
            OCREngineNotAvailableError: If Tesseract is not installed.
        """
        try:
            version = pytesseract.get_tesseract_version()
        except (pytesseract.TesseractNotFoundError, EnvironmentError) as e:
            raise OCREngineNotAvailableError(
                f"Tesseract OCR (not installed or not in PATH): {e}"
            )
        logger.info(f"Tesseract version: {version}")

    def _build_config(self) -> str:
        config_parts = [
            f"--psm {self.psm}",
            f"--oem {self.oem}"
        ]
        if self.extra_config:
            config_parts.append(self.extra_config)
        return ' '.join(config_parts)

    def get_raw_text(self, image: Image.Image) -> str:
        """
        Extract the text content of an image.

        Args:
            image: PIL Image to process.

        Returns:
            Extracted text as string.

        Raises:
            OCRProcessingError: If OCR processing fails.
        """
        start_time = time.time()
        try:
            if image.mode not in ('RGB', 'L'):
                image = image.convert('RGB')

            text = pytesseract.image_to_string(
                image,
                lang=self.language,
                config=self._build_config()
            )
        except (pytesseract.TesseractError, RuntimeError, ValueError) as e:
            logger.error(f"OCR processing failed: {e}")
            raise OCRProcessingError("image", str(e))

        logger.info(f"OCR completed: {len(text)} characters ({time.time() - start_time:.2f}s)")
        return text.strip()

