"""
PDF Compositor Module.

Stamps the barcode image onto the first page of the invoice PDF.

Positions come from screen space (origin top-left, units of the preview
canvas the page was shown on). PDF space has its origin bottom-left and
is measured in points, so with ``scale = page_height / canvas_height``:

    x = screen_x * scale
    y = page_height - (screen_y + image_height) * scale
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import fitz  # PyMuPDF

from config import get_config
from uplatko.utils.logger import get_logger
from uplatko.utils.exceptions import CompositionError

logger = get_logger(__name__)

Pair = Tuple[float, float]


@dataclass
class Placement:
    """Barcode rectangle in PDF space (points, origin bottom-left)."""
    x: float
    y: float
    width: float
    height: float

    def to_top_left_rect(self, page_height: float) -> fitz.Rect:
        """Same rectangle for PyMuPDF, whose origin is top-left."""
        top = page_height - self.y - self.height
        return fitz.Rect(self.x, top, self.x + self.width, top + self.height)


def compute_placement(
    position: Pair,
    canvas_size: Pair,
    barcode_size: Pair,
    page_height: float
) -> Placement:
    """
    Convert a screen-space barcode position to PDF space.

    Args:
        position: (x, y) of the barcode's top-left corner on the canvas.
        canvas_size: (width, height) of the canvas the page was drawn on.
        barcode_size: (width, height) of the barcode on the canvas.
        page_height: Height of page 1 in points.

    Returns:
        Placement in PDF coordinates.

    Raises:
        ValueError: If the canvas height is not positive.

    Example:
        >>> compute_placement((100, 700), (595, 842), (200, 80), 842)
        Placement(x=100.0, y=62.0, width=200.0, height=80.0)
    """
    canvas_height = canvas_size[1]
    if canvas_height <= 0:
        raise ValueError(f"Canvas height must be positive, got {canvas_height}")

    scale = page_height / canvas_height
    x, y = position
    width, height = barcode_size

    return Placement(
        x=float(x * scale),
        y=float(page_height - (y + height) * scale),
        width=float(width * scale),
        height=float(height * scale),
    )


def default_position(canvas_size: Pair, barcode_size: Pair, margin: Optional[float] = None) -> Pair:
    """Bottom-right corner of the canvas, inset by ``margin``."""
    if margin is None:
        margin = get_config("composition.margin", 24)
    return (
        max(0.0, canvas_size[0] - barcode_size[0] - margin),
        max(0.0, canvas_size[1] - barcode_size[1] - margin),
    )


class PdfCompositor:
    """
    Embeds a PNG barcode into page 1 of a PDF.

    Example:
        >>> compositor = PdfCompositor()
        >>> pdf_bytes = compositor.compose(
        ...     original_pdf, barcode.png_bytes,
        ...     position=(340, 740), canvas_size=(595, 842), barcode_size=(220, 80)
        ... )
    """

    def compose(
        self,
        pdf_bytes: bytes,
        png_bytes: bytes,
        position: Pair,
        canvas_size: Pair,
        barcode_size: Pair
    ) -> bytes:
        """
        Return a new PDF with the barcode drawn on the first page.

        Raises:
            CompositionError: If the PDF cannot be opened, the image cannot
                              be embedded or the document cannot be saved.
        """
        try:
            doc = fitz.open(stream=pdf_bytes, filetype="pdf")
        except (RuntimeError, ValueError) as e:
            raise CompositionError("opening document", str(e))

        try:
            if doc.page_count == 0:
                raise CompositionError("opening document", "document has no pages")

            page = doc[0]
            page_height = page.rect.height

            try:
                placement = compute_placement(position, canvas_size, barcode_size, page_height)
            except ValueError as e:
                raise CompositionError("placement", str(e))

            rect = placement.to_top_left_rect(page_height)
            logger.debug(f"Placing barcode at {placement} (PyMuPDF rect {rect})")

            try:
                page.insert_image(rect, stream=png_bytes)
                output = doc.tobytes(garbage=3, deflate=True)
            except (RuntimeError, ValueError) as e:
                logger.error(f"Embedding barcode failed: {e}")
                raise CompositionError("embedding image", str(e))
        finally:
            doc.close()

        logger.info(f"Composed PDF with barcode ({len(output)} bytes)")
        return output
