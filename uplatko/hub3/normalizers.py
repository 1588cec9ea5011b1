"""
Field Normalizers Module.

Text and amount normalization shared by the HUB3 encoder, record
completion and the extractors:
    - Newline neutralization and truncation of free-text fields
    - Croatian-locale amount parsing ("1.234,56" -> 1234.56)
    - Conversion of amounts to integer cents
"""

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

from uplatko.utils.logger import get_logger

logger = get_logger(__name__)

# HUB3 uses "\n" as the field delimiter
_RECORD_SEPARATORS = re.compile(r'[\n\r]')


def sanitize(value: Optional[str]) -> str:
    """
    Replace newline characters with spaces.

    Example:
        >>> sanitize("Racun\\nbr. 12")
        'Racun br. 12'
    """
    if not value:
        return ""
    return _RECORD_SEPARATORS.sub(" ", value)


def truncate(value: str, max_length: int) -> str:
    return value[:max_length]


def sanitize_and_truncate(value: Optional[str], max_length: int) -> str:
    return truncate(sanitize(value), max_length)


class CroatianAmountNormalizer:
    """
    Parses amounts written in Croatian number format.

    ``.`` groups thousands and ``,`` is the decimal separator. Plain
    machine numbers ("123.45", 123.45) are accepted as well so values
    coming back from an AI provider go through the same path.

    Example:
        >>> normalizer = CroatianAmountNormalizer()
        >>> normalizer.normalize("1.234,56")
        1234.56
        >>> normalizer.to_cents(1234.5)
        123450
    """

    THOUSANDS_SEPARATOR = "."
    DECIMAL_SEPARATOR = ","

    CURRENCY_MARKERS = ('EUR', '€', 'eur', 'kn', 'HRK')

    def normalize(self, amount_str: Optional[str]) -> Optional[float]:
        """
        Convert a Croatian-format number to float.

        Args:
            amount_str: Number as printed on an invoice, e.g. "1.234,56".

        Returns:
            Float value, or None if the text is not a number.
        """
        if not amount_str:
            return None

        cleaned = amount_str.strip()
        for marker in self.CURRENCY_MARKERS:
            cleaned = cleaned.replace(marker, '')
        cleaned = re.sub(r'\s', '', cleaned)

        cleaned = cleaned.replace(self.THOUSANDS_SEPARATOR, '')
        cleaned = cleaned.replace(self.DECIMAL_SEPARATOR, '.')

        try:
            return float(cleaned)
        except ValueError:
            logger.debug(f"Could not parse amount: {amount_str!r}")
            return None

    def coerce(self, value: Any) -> Optional[float]:
        """
        Coerce a loosely typed amount to float.

        Numbers pass through. Strings containing a comma are read in
        Croatian format, other strings as plain decimals.

        Raises:
            ValueError: If the value cannot be read as a number.
        """
        if value is None:
            return None
        if isinstance(value, bool):
            raise ValueError(f"Amount must be numeric, got {value!r}")
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            text = value.strip()
            if not text:
                return None
            if self.DECIMAL_SEPARATOR in text:
                parsed = self.normalize(text)
            else:
                try:
                    parsed = float(text)
                except ValueError:
                    parsed = None
            if parsed is not None:
                return parsed
        raise ValueError(f"Amount must be numeric, got {value!r}")

    @staticmethod
    def to_cents(amount: float) -> int:
        """
        Round an amount to the nearest cent.

        Uses the decimal representation of the float, so 0.285 becomes
        29 cents rather than 28.
        """
        try:
            value = Decimal(str(amount))
        except InvalidOperation:
            raise ValueError(f"Amount is not a number: {amount!r}")
        if not value.is_finite():
            raise ValueError(f"Amount is not finite: {amount!r}")
        return int((value * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))
