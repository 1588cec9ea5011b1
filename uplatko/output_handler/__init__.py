"""
Output Handler Module for uplatko.

This module provides functionality for:
    - PDF417 barcode rendering of HUB3 payloads
    - Stamping the barcode onto the invoice PDF
    - Writing the resulting PNG and PDF files
"""

from .barcode_generator import BarcodeGenerator, BarcodeResult
from .pdf_compositor import PdfCompositor, Placement, compute_placement, default_position
from .handler import OutputHandler

__all__ = [
    'BarcodeGenerator',
    'BarcodeResult',
    'PdfCompositor',
    'Placement',
    'compute_placement',
    'default_position',
    'OutputHandler',
]
