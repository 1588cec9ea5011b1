"""
Payment Record Validators Module.

Turns an extracted PartialPaymentRecord plus user edits into a complete
PaymentRecord, checking every field the way the payment form does:
    - IBAN shape (HR + 19 digits) and checksum (warning only)
    - Positive amount within the 15-digit cent range
    - Required text fields and their maximum lengths
    - Model code and purpose code
"""

from typing import Any, Dict, List, Optional, Tuple

import schwifty
import schwifty.exceptions

from config import get_config
from uplatko.utils.logger import get_logger
from uplatko.utils.exceptions import FormatViolationError
from uplatko.hub3.payment_record import (
    CURRENCY,
    DEFAULT_MODEL,
    DEFAULT_PURPOSE_CODE,
    FIELD_LIMITS,
    IBAN_PATTERN,
    MAX_AMOUNT,
    PURPOSE_CODES,
    PartialPaymentRecord,
    PaymentRecord,
)

logger = get_logger(__name__)


class ValidationResult:
    """
    Result of validating a payment record.

    Attributes:
        is_valid: Overall validation result
        errors: Blocking problems
        warnings: Advisory problems (do not affect validity)
        field_results: Per-field (is_valid, message)
    """

    def __init__(self):
        self.is_valid = True
        self.errors: List[str] = []
        self.warnings: List[str] = []
        self.field_results: Dict[str, Tuple[bool, str]] = {}

    def add_error(self, message: str) -> None:
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def add_field_result(self, field: str, is_valid: bool, message: str) -> None:
        self.field_results[field] = (is_valid, message)
        if not is_valid:
            self.add_error(f"{field}: {message}")

    @property
    def invalid_fields(self) -> List[str]:
        return [f for f, (ok, _) in self.field_results.items() if not ok]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'is_valid': self.is_valid,
            'errors': self.errors,
            'warnings': self.warnings,
            'field_results': self.field_results
        }


def normalize_iban(value: Optional[str]) -> str:
    """Upper-case an IBAN and drop the spaces banks print inside it."""
    if not value:
        return ""
    return "".join(value.split()).upper()


class PaymentValidator:
    """
    Validates partial records for completion into a PaymentRecord.

    Example:
        >>> validator = PaymentValidator()
        >>> result = validator.validate(partial)
        >>> result.is_valid
        False
        >>> result.errors
        ['referenceNumber: required']
    """

    def __init__(self) -> None:
        limits = dict(FIELD_LIMITS)
        limits.update(get_config("hub3.limits", {}) or {})
        self.limits = limits
        self.default_model = get_config("hub3.default_model", DEFAULT_MODEL)
        self.default_purpose_code = get_config(
            "hub3.default_purpose_code",
            DEFAULT_PURPOSE_CODE
        )

    def validate_text(
        self,
        value: Optional[str],
        max_length: int,
        required: bool = False
    ) -> Tuple[bool, str]:
        if not value or not value.strip():
            if required:
                return False, "required"
            return True, "empty"
        if len(value) > max_length:
            return False, f"longer than {max_length} characters"
        return True, "valid"

    def validate_required(self, value: Optional[str]) -> Tuple[bool, str]:
        if not value or not value.strip():
            return False, "required"
        return True, "valid"

    def validate_iban(self, value: Optional[str]) -> Tuple[bool, str]:
        iban = normalize_iban(value)
        if not iban:
            return False, "required"
        if not IBAN_PATTERN.match(iban):
            return False, "invalid IBAN format (HR + 19 digits)"
        return True, "valid"

    def check_iban_checksum(self, value: str) -> Optional[str]:
        """Return a warning when the IBAN's check digits don't add up."""
        try:
            schwifty.IBAN(value)
        except schwifty.exceptions.SchwiftyException as e:
            return f"IBAN {value} failed checksum validation: {e}"
        return None

    def validate_amount(self, value: Optional[float]) -> Tuple[bool, str]:
        if value is None:
            return False, "required"
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False, "must be a number"
        if value <= 0:
            return False, "must be greater than 0"
        if value > MAX_AMOUNT:
            return False, f"exceeds maximum of {MAX_AMOUNT:.2f}"
        return True, "valid"

    def validate_model(self, value: Optional[str]) -> Tuple[bool, str]:
        if not value or not value.strip():
            return False, "required"
        if len(value.strip()) > self.limits['model']:
            return False, f"longer than {self.limits['model']} characters"
        return True, "valid"

    def validate_purpose_code(self, value: Optional[str]) -> Tuple[bool, str]:
        if value not in PURPOSE_CODES:
            return False, f"unknown purpose code {value!r}"
        return True, "valid"

    def with_defaults(self, record: PartialPaymentRecord) -> PartialPaymentRecord:
        """Fill the fields that have a standard default."""
        defaults = PartialPaymentRecord(
            model=self.default_model,
            purpose_code=self.default_purpose_code,
            currency=CURRENCY
        )
        return defaults.merge(record)

    def validate(self, record: PartialPaymentRecord) -> ValidationResult:
        """
        Validate a (defaulted) partial record.

        Args:
            record: Record after defaults and user edits were applied.

        Returns:
            ValidationResult with per-field outcomes keyed by JSON name.
        """
        result = ValidationResult()
        limits = self.limits

        checks = {
            'payerName': self.validate_text(record.payer_name, limits['name']),
            'payerAddress': self.validate_text(record.payer_address, limits['address']),
            'payerCity': self.validate_text(record.payer_city, limits['city']),
            'recipientName': self.validate_text(
                record.recipient_name, limits['name'], required=True
            ),
            'recipientAddress': self.validate_text(
                record.recipient_address, limits['address']
            ),
            'recipientCity': self.validate_text(record.recipient_city, limits['city']),
            'iban': self.validate_iban(record.iban),
            'amount': self.validate_amount(record.amount),
            'model': self.validate_model(record.model),
            'referenceNumber': self.validate_required(record.reference_number),
            'purposeCode': self.validate_purpose_code(record.purpose_code),
            'description': self.validate_text(
                record.description, limits['description'], required=True
            ),
        }

        for field_name, (is_valid, message) in checks.items():
            result.add_field_result(field_name, is_valid, message)

        if checks['iban'][0]:
            warning = self.check_iban_checksum(normalize_iban(record.iban))
            if warning:
                result.add_warning(warning)

        if record.currency not in (None, CURRENCY):
            result.add_warning(f"Currency {record.currency} replaced by {CURRENCY}")

        return result

    def build(
        self,
        record: PartialPaymentRecord,
        overrides: Optional[PartialPaymentRecord] = None
    ) -> Tuple[PaymentRecord, ValidationResult]:
        """
        Complete a partial record into a PaymentRecord.

        Args:
            record: Extracted partial record.
            overrides: User edits; present values replace extracted ones.

        Returns:
            Tuple of (PaymentRecord, ValidationResult with warnings).

        Raises:
            FormatViolationError: If any field is invalid.
        """
        merged = self.with_defaults(record.merge(overrides))
        validation = self.validate(merged)

        for warning in validation.warnings:
            logger.warning(warning)

        if not validation.is_valid:
            first = validation.invalid_fields[0]
            logger.error(f"Payment record incomplete: {'; '.join(validation.errors)}")
            raise FormatViolationError(
                first,
                merged.to_dict().get(first),
                validation.field_results[first][1],
                errors=validation.errors
            )

        payment = PaymentRecord(
            payer_name=(merged.payer_name or "").strip(),
            payer_address=(merged.payer_address or "").strip(),
            payer_city=(merged.payer_city or "").strip(),
            recipient_name=merged.recipient_name.strip(),
            recipient_address=(merged.recipient_address or "").strip(),
            recipient_city=(merged.recipient_city or "").strip(),
            iban=normalize_iban(merged.iban),
            amount=float(merged.amount),
            model=merged.model.strip().upper(),
            reference_number=merged.reference_number.strip(),
            purpose_code=merged.purpose_code,
            description=merged.description.strip(),
            currency=CURRENCY
        )
        logger.info(f"Payment record complete: {payment.amount:.2f} {CURRENCY} to {payment.iban}")
        return payment, validation


def build_payment_record(
    record: PartialPaymentRecord,
    overrides: Optional[PartialPaymentRecord] = None
) -> PaymentRecord:
    """
    Convenience wrapper around PaymentValidator.build().

    Raises:
        FormatViolationError: If the merged record is not complete and valid.
    """
    payment, _ = PaymentValidator().build(record, overrides)
    return payment
