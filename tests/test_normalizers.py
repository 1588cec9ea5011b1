"""Tests for text sanitizing and amount parsing."""

import pytest

from uplatko.hub3.normalizers import (
    CroatianAmountNormalizer,
    sanitize,
    sanitize_and_truncate,
)


@pytest.fixture
def normalizer():
    return CroatianAmountNormalizer()


def test_sanitize_replaces_line_breaks():
    assert sanitize("a\nb\rc") == "a b c"
    assert sanitize("a\r\nb") == "a  b"


def test_sanitize_empty():
    assert sanitize(None) == ""
    assert sanitize("") == ""


def test_sanitize_and_truncate():
    assert sanitize_and_truncate("Racun\nbroj 12", 8) == "Racun br"


@pytest.mark.parametrize("text, expected", [
    ("1.234,56", 1234.56),
    ("1.234,56 EUR", 1234.56),
    ("€ 12,50", 12.5),
    ("100,00", 100.0),
    ("1.000.000,00", 1000000.0),
])
def test_normalize(normalizer, text, expected):
    assert normalizer.normalize(text) == pytest.approx(expected)


@pytest.mark.parametrize("text", ["", None, "abc", "12,5,5"])
def test_normalize_rejects(normalizer, text):
    assert normalizer.normalize(text) is None


@pytest.mark.parametrize("value, expected", [
    (12, 12.0),
    (12.5, 12.5),
    ("12,50", 12.5),
    ("12.50", 12.5),
    (" 1.234,56 ", 1234.56),
])
def test_coerce(normalizer, value, expected):
    assert normalizer.coerce(value) == pytest.approx(expected)


def test_coerce_absent(normalizer):
    assert normalizer.coerce(None) is None
    assert normalizer.coerce("   ") is None


@pytest.mark.parametrize("value", [True, "sto eura", [12], {"a": 1}])
def test_coerce_rejects(normalizer, value):
    with pytest.raises(ValueError):
        normalizer.coerce(value)


@pytest.mark.parametrize("amount, cents", [
    (1234.5, 123450),
    (0.285, 29),
    (0.125, 13),
    (1.005, 101),
    (100, 10000),
])
def test_to_cents_rounds_half_up(amount, cents):
    assert CroatianAmountNormalizer.to_cents(amount) == cents


@pytest.mark.parametrize("amount", [float("nan"), float("inf"), "abc"])
def test_to_cents_rejects(amount):
    with pytest.raises(ValueError):
        CroatianAmountNormalizer.to_cents(amount)
