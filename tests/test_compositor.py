"""Tests for barcode placement and PDF composition."""

import fitz
import pytest

from uplatko.output_handler.pdf_compositor import (
    PdfCompositor,
    Placement,
    compute_placement,
    default_position,
)
from uplatko.utils.exceptions import CompositionError


@pytest.fixture
def pdf_bytes():
    doc = fitz.open()
    page = doc.new_page(width=595, height=842)
    page.insert_text((72, 72), "Racun 12/2026")
    data = doc.tobytes()
    doc.close()
    return data


def test_placement_same_scale():
    placement = compute_placement((100, 700), (595, 842), (200, 80), 842)
    assert placement == Placement(x=100.0, y=62.0, width=200.0, height=80.0)


def test_placement_scaled_canvas():
    placement = compute_placement((50, 350), (297.5, 421), (100, 40), 842)
    assert placement.x == pytest.approx(100.0)
    assert placement.y == pytest.approx(62.0)
    assert placement.width == pytest.approx(200.0)
    assert placement.height == pytest.approx(80.0)


def test_placement_top_left_corner():
    placement = compute_placement((0, 0), (595, 842), (200, 80), 842)
    assert placement.y == pytest.approx(762.0)


def test_placement_rejects_empty_canvas():
    with pytest.raises(ValueError):
        compute_placement((0, 0), (595, 0), (200, 80), 842)


def test_top_left_rect():
    rect = Placement(x=100, y=62, width=200, height=80).to_top_left_rect(842)
    assert (rect.x0, rect.y0, rect.x1, rect.y1) == (100, 700, 300, 780)


def test_default_position_bottom_right():
    assert default_position((595, 842), (220, 80), margin=24) == (351, 738)


def test_default_position_never_negative():
    assert default_position((100, 50), (220, 80), margin=24) == (0.0, 0.0)


def test_compose_embeds_image(pdf_bytes, png_bytes):
    output = PdfCompositor().compose(pdf_bytes, png_bytes, (351, 738), (595, 842), (220, 80))

    doc = fitz.open(stream=output, filetype="pdf")
    try:
        page = doc[0]
        assert len(page.get_images()) == 1
        assert "Racun 12/2026" in page.get_text()
        bbox = page.get_image_rects(page.get_images()[0][0])[0]
        assert bbox.y0 == pytest.approx(738, abs=1)
    finally:
        doc.close()


def test_compose_leaves_input_untouched(pdf_bytes, png_bytes):
    original = bytes(pdf_bytes)
    PdfCompositor().compose(pdf_bytes, png_bytes, (0, 0), (595, 842), (220, 80))
    assert pdf_bytes == original


def test_compose_rejects_broken_pdf(png_bytes):
    with pytest.raises(CompositionError):
        PdfCompositor().compose(b"not a pdf", png_bytes, (0, 0), (595, 842), (220, 80))


def test_compose_rejects_empty_canvas(pdf_bytes, png_bytes):
    with pytest.raises(CompositionError):
        PdfCompositor().compose(pdf_bytes, png_bytes, (0, 0), (0, 0), (220, 80))
