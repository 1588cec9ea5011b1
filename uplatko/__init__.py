"""
Uplatko - HUB3 payment barcode generator.

Reads a Croatian invoice PDF, extracts the payment details and produces a
HUB3 PDF417 barcode that banking apps can scan, optionally stamped onto
the invoice itself.

Modules:
    - input_handler: PDF text extraction
    - extraction: heuristic and AI-assisted field extraction
    - hub3: payment records, validation and the HUB3 encoder
    - output_handler: barcode rendering, PDF composition, file output
    - utils: logging, exceptions, helpers, credential storage

Architecture:
    PDF → Text → Extraction → User edits → Validation → HUB3 → PDF417 → PNG / PDF
"""

__version__ = "1.0.0"

__all__ = [
    'input_handler',
    'extraction',
    'hub3',
    'output_handler',
    'utils'
]
