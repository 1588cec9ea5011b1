"""
Input Handler Module for uplatko.

Loads the invoice PDF and exposes its text and first-page geometry.
"""

from .pdf_processor import PDFProcessor, SUPPORTED_EXTENSIONS

__all__ = ['PDFProcessor', 'SUPPORTED_EXTENSIONS']
