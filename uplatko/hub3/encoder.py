"""
HUB3 Encoder Module.

Builds the HUB3 text record (Croatian national payment barcode payload)
from a complete PaymentRecord.

Wire format:
    14 fields joined by "\\n", no trailing newline. Scanners parse the
    record positionally, so field order and count are fixed:

     1  HRVHUB30            header
     2  EUR                 currency
     3  000000000123450     amount in cents, 15 digits
     4  payer name          max 30
     5  payer address       max 27
     6  payer city          max 27
     7  recipient name      max 30
     8  recipient address   max 27
     9  recipient city      max 27
    10  IBAN                HR + 19 digits
    11  model               e.g. HR68
    12  reference number
    13  purpose code        4 letters
    14  description         max 35

Free-text fields have newlines replaced by spaces and are clipped to
their maximum length without raising.
"""

from typing import List, Optional

from config import get_config
from uplatko.utils.logger import get_logger
from uplatko.utils.exceptions import FormatViolationError
from uplatko.hub3.normalizers import (
    CroatianAmountNormalizer,
    sanitize,
    sanitize_and_truncate,
)
from uplatko.hub3.payment_record import (
    CURRENCY,
    FIELD_LIMITS,
    HUB3_HEADER,
    IBAN_PATTERN,
    PURPOSE_CODES,
    PaymentRecord,
)

logger = get_logger(__name__)

FIELD_COUNT = 14
AMOUNT_WIDTH = 15


class Hub3Encoder:
    """
    Encodes PaymentRecords into HUB3 strings.

    The encoder re-checks the preconditions that would otherwise produce
    a corrupt payload (IBAN shape, amount range, purpose code) and raises
    FormatViolationError instead of emitting it.

    Example:
        >>> encoder = Hub3Encoder()
        >>> text = encoder.encode(record)
        >>> text.split("\\n")[0]
        'HRVHUB30'
    """

    def __init__(self) -> None:
        limits = dict(FIELD_LIMITS)
        limits.update(get_config("hub3.limits", {}) or {})
        self.name_limit = limits['name']
        self.address_limit = limits['address']
        self.city_limit = limits['city']
        self.description_limit = limits['description']
        self.amount_normalizer = CroatianAmountNormalizer()

    def encode(self, record: PaymentRecord) -> str:
        """
        Encode a payment record as a HUB3 string.

        Args:
            record: Complete, validated payment record.

        Returns:
            The 14-field, newline-delimited HUB3 payload.

        Raises:
            FormatViolationError: If IBAN, amount or purpose code would
                                  break the wire format.
        """
        self._check_preconditions(record)

        fields = [
            HUB3_HEADER,
            CURRENCY,
            self.format_amount(record.amount),
            sanitize_and_truncate(record.payer_name, self.name_limit),
            sanitize_and_truncate(record.payer_address, self.address_limit),
            sanitize_and_truncate(record.payer_city, self.city_limit),
            sanitize_and_truncate(record.recipient_name, self.name_limit),
            sanitize_and_truncate(record.recipient_address, self.address_limit),
            sanitize_and_truncate(record.recipient_city, self.city_limit),
            record.iban,
            sanitize(record.model),
            sanitize(record.reference_number),
            record.purpose_code,
            sanitize_and_truncate(record.description, self.description_limit),
        ]

        payload = "\n".join(fields)
        logger.debug(f"Encoded HUB3 record for {record.iban} ({len(payload)} chars)")
        return payload

    def format_amount(self, amount: float) -> str:
        """
        Format an amount as zero-padded integer cents.

        Example:
            >>> Hub3Encoder().format_amount(1234.5)
            '000000000123450'
        """
        cents = self.amount_normalizer.to_cents(amount)
        return str(cents).zfill(AMOUNT_WIDTH)

    def _check_preconditions(self, record: PaymentRecord) -> None:
        errors: List[str] = []
        first_field: Optional[str] = None
        first_value: object = None

        def fail(field: str, value: object, reason: str) -> None:
            nonlocal first_field, first_value
            if first_field is None:
                first_field, first_value = field, value
            errors.append(f"{field}: {reason}")

        if not isinstance(record.iban, str) or not IBAN_PATTERN.match(record.iban):
            fail('iban', record.iban, "must be 'HR' followed by 19 digits")

        try:
            cents = self.amount_normalizer.to_cents(record.amount)
        except (TypeError, ValueError):
            fail('amount', record.amount, "must be a number")
        else:
            if cents <= 0:
                fail('amount', record.amount, "must be greater than zero")
            elif len(str(cents)) > AMOUNT_WIDTH:
                fail('amount', record.amount, f"exceeds {AMOUNT_WIDTH} digits of cents")

        if record.purpose_code not in PURPOSE_CODES:
            fail('purpose_code', record.purpose_code, "not a registered purpose code")

        if errors:
            logger.error(f"Refusing to encode invalid record: {'; '.join(errors)}")
            raise FormatViolationError(
                first_field,
                first_value,
                errors[0].split(': ', 1)[1],
                errors=errors
            )


def encode(record: PaymentRecord) -> str:
    """Encode a record with a default Hub3Encoder."""
    return Hub3Encoder().encode(record)


__all__ = ['Hub3Encoder', 'encode', 'FIELD_COUNT']
