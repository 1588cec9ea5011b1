"""Tests for record completion and field validation."""

import pytest

from uplatko.hub3.payment_record import PartialPaymentRecord, PaymentRecord
from uplatko.hub3.validators import (
    PaymentValidator,
    ValidationResult,
    build_payment_record,
    normalize_iban,
)
from uplatko.utils.exceptions import FormatViolationError


@pytest.fixture
def validator():
    return PaymentValidator()


@pytest.fixture
def extracted():
    return PartialPaymentRecord(
        recipient_name="ACME d.o.o.",
        recipient_address="Ilica 1",
        recipient_city="Zagreb",
        iban="HR1210010051863000160",
        amount=100.0,
    )


@pytest.fixture
def edits():
    return PartialPaymentRecord(reference_number="1676-10-25", description="Racun 12/2026")


def test_build_applies_defaults(extracted, edits):
    payment = build_payment_record(extracted, edits)
    assert isinstance(payment, PaymentRecord)
    assert payment.model == "HR68"
    assert payment.purpose_code == "OTHR"
    assert payment.currency == "EUR"
    assert payment.payer_name == ""
    assert payment.reference_number == "1676-10-25"


def test_user_edits_win(validator, extracted):
    edits = PartialPaymentRecord(
        amount=250.0,
        model="hr01",
        reference_number="7",
        description="Najam",
        purpose_code="RENT",
    )
    payment, result = validator.build(extracted, edits)
    assert payment.amount == 250.0
    assert payment.model == "HR01"
    assert payment.purpose_code == "RENT"
    assert result.is_valid


def test_iban_spaces_are_normalized(validator, extracted, edits):
    extracted = extracted.merge(PartialPaymentRecord(iban="hr12 1001 0051 8630 0016 0"))
    payment, _ = validator.build(extracted, edits)
    assert payment.iban == "HR1210010051863000160"


def test_missing_fields_are_all_reported(extracted):
    with pytest.raises(FormatViolationError) as exc_info:
        build_payment_record(extracted)
    errors = exc_info.value.errors
    assert "referenceNumber: required" in errors
    assert "description: required" in errors
    assert exc_info.value.field == "referenceNumber"


def test_missing_recipient_and_amount(edits):
    with pytest.raises(FormatViolationError) as exc_info:
        build_payment_record(PartialPaymentRecord(iban="HR1210010051863000160"), edits)
    errors = exc_info.value.errors
    assert "recipientName: required" in errors
    assert "amount: required" in errors


def test_validate_reports_field_results(validator, extracted):
    result = validator.validate(validator.with_defaults(extracted))
    assert not result.is_valid
    assert set(result.invalid_fields) == {'referenceNumber', 'description'}
    assert result.field_results['iban'] == (True, "valid")


def test_bad_iban_checksum_is_a_warning(validator, extracted, edits):
    extracted = extracted.merge(PartialPaymentRecord(iban="HR0010010051863000160"))
    payment, result = validator.build(extracted, edits)
    assert payment.iban == "HR0010010051863000160"
    assert result.is_valid
    assert any("HR0010010051863000160" in w for w in result.warnings)


def test_foreign_currency_is_a_warning(validator, extracted, edits):
    extracted = extracted.merge(PartialPaymentRecord(currency="HRK"))
    payment, result = validator.build(extracted, edits)
    assert payment.currency == "EUR"
    assert any("HRK" in w for w in result.warnings)


@pytest.mark.parametrize("iban, valid", [
    ("HR1210010051863000160", True),
    ("HR12 1001 0051 8630 0016 0", True),
    ("HR121001005186300016", False),
    ("SI56263300012039086", False),
    (None, False),
])
def test_validate_iban(validator, iban, valid):
    assert validator.validate_iban(iban)[0] is valid


@pytest.mark.parametrize("amount, valid", [
    (0.01, True),
    (9999999999999.0, True),
    (0, False),
    (-1, False),
    (None, False),
    ("12", False),
    (True, False),
    (10 ** 13, False),
])
def test_validate_amount(validator, amount, valid):
    assert validator.validate_amount(amount)[0] is valid


def test_validate_text_length(validator):
    assert validator.validate_text("A" * 30, 30)[0]
    assert not validator.validate_text("A" * 31, 30)[0]
    assert validator.validate_text(None, 30) == (True, "empty")
    assert validator.validate_text("  ", 30, required=True) == (False, "required")


def test_validate_model(validator):
    assert validator.validate_model("HR68")[0]
    assert not validator.validate_model("HR6800")[0]
    assert not validator.validate_model("")[0]


def test_validate_purpose_code(validator):
    assert validator.validate_purpose_code("SALA")[0]
    assert not validator.validate_purpose_code("XXXX")[0]


def test_too_long_description_is_rejected(extracted):
    edits = PartialPaymentRecord(reference_number="1", description="D" * 36)
    with pytest.raises(FormatViolationError) as exc_info:
        build_payment_record(extracted, edits)
    assert exc_info.value.field == "description"


def test_normalize_iban():
    assert normalize_iban(" hr12 1001 0051 8630 0016 0 ") == "HR1210010051863000160"
    assert normalize_iban(None) == ""


def test_validation_result_to_dict():
    result = ValidationResult()
    result.add_field_result("iban", False, "required")
    result.add_warning("check the amount")
    assert result.to_dict() == {
        'is_valid': False,
        'errors': ["iban: required"],
        'warnings': ["check the amount"],
        'field_results': {'iban': (False, "required")},
    }
