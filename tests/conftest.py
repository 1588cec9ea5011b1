"""Shared fixtures for the uplatko test suite."""

import io
import logging
from typing import Any, Dict, List, Optional

import fitz
import pytest
from PIL import Image

from uplatko.hub3.payment_record import PaymentRecord
from uplatko.utils.logger import LOGGER_NAMESPACE


SAMPLE_INVOICE_TEXT = (
    "ACME d.o.o.\n"
    "Ilica 1\n"
    "10000 Zagreb\n"
    "IBAN: HR1210010051863000160\n"
    "Ukupno: 100,00"
)


@pytest.fixture(autouse=True)
def restore_package_logger():
    """Undo setup_logger() so caplog keeps seeing package records."""
    package_logger = logging.getLogger(LOGGER_NAMESPACE)
    handlers = list(package_logger.handlers)
    level = package_logger.level
    propagate = package_logger.propagate
    yield
    package_logger.handlers[:] = handlers
    package_logger.setLevel(level)
    package_logger.propagate = propagate


@pytest.fixture
def sample_text() -> str:
    return SAMPLE_INVOICE_TEXT


@pytest.fixture
def valid_record() -> PaymentRecord:
    return PaymentRecord(
        payer_name="Ivan Horvat",
        payer_address="Savska 5",
        payer_city="Zagreb",
        recipient_name="ACME d.o.o.",
        recipient_address="Ilica 1",
        recipient_city="Zagreb",
        iban="HR1210010051863000160",
        amount=1234.5,
        model="HR68",
        reference_number="1676-10-25",
        purpose_code="OTHR",
        description="Racun 12/2026",
    )


@pytest.fixture
def make_pdf(tmp_path):
    """Write a one-page PDF with the given text and return its path."""

    def _make(text: str, name: str = "racun.pdf"):
        doc = fitz.open()
        page = doc.new_page(width=595, height=842)
        page.insert_text((72, 72), text, fontsize=11)
        path = tmp_path / name
        doc.save(str(path))
        doc.close()
        return path

    return _make


@pytest.fixture
def png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (40, 20), "black").save(buffer, format="PNG")
    return buffer.getvalue()


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code: int = 200, body: Any = None, text: Optional[str] = None):
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else str(body)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self) -> Any:
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


class RecordingPost:
    """Replacement for requests.post that records calls and replays a response."""

    def __init__(self, response: Any = None):
        self.response = response
        self.calls: List[Dict[str, Any]] = []

    def __call__(self, **kwargs: Any) -> FakeResponse:
        self.calls.append(kwargs)
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


@pytest.fixture
def fake_post(monkeypatch):
    """Patch requests.post inside the providers module."""
    from uplatko.extraction import providers

    def _install(response: Any) -> RecordingPost:
        recorder = RecordingPost(response)
        monkeypatch.setattr(providers.requests, "post", recorder)
        return recorder

    return _install
