"""
OCR Engine Module for the Invoice Analysis Engine.

This module turns document bytes into plain text:
    - Tesseract OCR for images and scanned PDF pages
    - PyMuPDF text layer for digital PDFs
"""

from .engine import OCREngine
from .pdf_processor import PDFProcessor
from .tesseract_backend import TesseractBackend

__all__ = ['OCREngine', 'PDFProcessor', 'TesseractBackend']
