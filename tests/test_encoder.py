"""Tests for the HUB3 encoder."""

from dataclasses import replace

import pytest

from uplatko.extraction.heuristic import extract
from uplatko.hub3.encoder import FIELD_COUNT, Hub3Encoder, encode
from uplatko.hub3.payment_record import PaymentRecord
from uplatko.utils.exceptions import FormatViolationError


def test_record_has_fourteen_fields(valid_record):
    fields = encode(valid_record).split("\n")
    assert len(fields) == FIELD_COUNT == 14


def test_field_order(valid_record):
    fields = encode(valid_record).split("\n")
    assert fields == [
        "HRVHUB30",
        "EUR",
        "000000000123450",
        "Ivan Horvat",
        "Savska 5",
        "Zagreb",
        "ACME d.o.o.",
        "Ilica 1",
        "Zagreb",
        "HR1210010051863000160",
        "HR68",
        "1676-10-25",
        "OTHR",
        "Racun 12/2026",
    ]


def test_no_trailing_newline(valid_record):
    assert not encode(valid_record).endswith("\n")


@pytest.mark.parametrize("amount, expected", [
    (1234.5, "000000000123450"),
    (100, "000000000010000"),
    (0.01, "000000000000001"),
    (0.285, "000000000000029"),
    (19.999, "000000000002000"),
    (12345678901.23, "001234567890123"),
])
def test_amount_is_rounded_to_cents(valid_record, amount, expected):
    record = replace(valid_record, amount=amount)
    assert encode(record).split("\n")[2] == expected


def test_long_names_are_truncated(valid_record):
    record = replace(
        valid_record,
        recipient_name="A" * 40,
        recipient_address="B" * 40,
        payer_city="C" * 40,
        description="D" * 50,
    )
    fields = encode(record).split("\n")
    assert fields[6] == "A" * 30
    assert fields[7] == "B" * 27
    assert fields[5] == "C" * 27
    assert fields[13] == "D" * 35


def test_truncation_keeps_prefix(valid_record):
    name = "Obrt za usluge Marko Marković vl. Marko Marković"
    record = replace(valid_record, recipient_name=name)
    assert encode(record).split("\n")[6] == name[:30]


def test_embedded_newlines_become_spaces(valid_record):
    record = replace(
        valid_record,
        description="Racun\n12/2026",
        reference_number="12\r\n34",
        payer_address="Savska\n5",
    )
    fields = encode(record).split("\n")
    assert len(fields) == 14
    assert fields[13] == "Racun 12/2026"
    assert fields[11] == "12  34"
    assert fields[4] == "Savska 5"


def test_model_and_reference_are_not_truncated(valid_record):
    record = replace(valid_record, reference_number="1" * 40)
    assert encode(record).split("\n")[11] == "1" * 40


def test_encoding_is_idempotent(valid_record):
    encoder = Hub3Encoder()
    assert encoder.encode(valid_record) == encoder.encode(valid_record)


def test_empty_payer_fields():
    record = PaymentRecord(
        recipient_name="ACME d.o.o.",
        recipient_address="Ilica 1",
        recipient_city="Zagreb",
        iban="HR1210010051863000160",
        amount=100,
    )
    payload = encode(record)
    assert payload.startswith("HRVHUB30\nEUR\n000000000010000\n")
    fields = payload.split("\n")
    assert len(fields) == 14
    assert fields[3:6] == ["", "", ""]


@pytest.mark.parametrize("iban", [
    "HR121001005186300016",
    "HR12100100518630001600",
    "DE89370400440532013000",
    "HR12 1001 0051 8630 0016 0",
    "",
])
def test_invalid_iban_is_rejected(valid_record, iban):
    with pytest.raises(FormatViolationError) as exc_info:
        encode(replace(valid_record, iban=iban))
    assert exc_info.value.field == "iban"


@pytest.mark.parametrize("amount", [0, -5, 0.004])
def test_non_positive_amount_is_rejected(valid_record, amount):
    with pytest.raises(FormatViolationError) as exc_info:
        encode(replace(valid_record, amount=amount))
    assert exc_info.value.field == "amount"


def test_amount_overflow_is_rejected(valid_record):
    with pytest.raises(FormatViolationError):
        encode(replace(valid_record, amount=10 ** 13))


def test_unknown_purpose_code_is_rejected(valid_record):
    with pytest.raises(FormatViolationError) as exc_info:
        encode(replace(valid_record, purpose_code="XXXX"))
    assert exc_info.value.field == "purpose_code"


def test_all_errors_are_reported(valid_record):
    record = replace(valid_record, iban="HR1", amount=0, purpose_code="ZZZZ")
    with pytest.raises(FormatViolationError) as exc_info:
        encode(record)
    assert len(exc_info.value.errors) == 3


def test_extracted_invoice_encodes(sample_text):
    partial = extract(sample_text)
    record = PaymentRecord(**{k: v for k, v in partial.fields.items() if v is not None})
    payload = encode(record)
    assert payload.startswith("HRVHUB30\nEUR\n000000000010000\n")
    assert payload.split("\n")[6:11] == [
        "ACME d.o.o.",
        "Ilica 1",
        "Zagreb",
        "HR1210010051863000160",
        "HR68",
    ]
    assert len(payload.split("\n")) == 14
