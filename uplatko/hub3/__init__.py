"""
HUB3 Module for uplatko.

This module provides:
    - PaymentRecord / PartialPaymentRecord data classes
    - The HUB3 encoder (payment record -> barcode payload)
    - Field normalizers (newline neutralization, truncation, amounts)
    - Record completion and validation
"""

from .payment_record import (
    PaymentRecord,
    PartialPaymentRecord,
    PURPOSE_CODES,
    HUB3_HEADER,
    CURRENCY,
)
from .encoder import Hub3Encoder, encode
from .validators import PaymentValidator, ValidationResult, build_payment_record

__all__ = [
    'PaymentRecord',
    'PartialPaymentRecord',
    'PURPOSE_CODES',
    'HUB3_HEADER',
    'CURRENCY',
    'Hub3Encoder',
    'encode',
    'PaymentValidator',
    'ValidationResult',
    'build_payment_record',
]
