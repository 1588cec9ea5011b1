"""
Barcode Generator Module.

Renders a HUB3 payload as a PDF417 symbol using pdf417gen. The symbol
carries the payload unchanged; only the raster size is configurable.
"""

import io
from dataclasses import dataclass
from typing import Optional

import pdf417gen
from PIL import Image

from config import get_config
from uplatko.utils.logger import get_logger
from uplatko.utils.exceptions import CompositionError

logger = get_logger(__name__)


@dataclass
class BarcodeResult:
    """
    A rendered barcode.

    Attributes:
        text: The HUB3 payload encoded in the symbol
        image: Rendered PIL image
        png_bytes: The image encoded as PNG
    """
    text: str
    image: Image.Image
    png_bytes: bytes

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height


class BarcodeGenerator:
    """
    PDF417 renderer for HUB3 payloads.

    Attributes:
        columns: Data columns of the symbol
        security_level: Error correction level (0-8)
        scale: Module width in pixels
        ratio: Module height as a multiple of its width
        padding: Quiet zone in pixels
        text_encoding: Byte encoding of the payload inside the symbol

    Example:
        >>> generator = BarcodeGenerator()
        >>> result = generator.generate(encode(record))
        >>> result.image.save("uplatnica.png")
    """

    def __init__(
        self,
        columns: Optional[int] = None,
        security_level: Optional[int] = None
    ) -> None:
        self.columns = columns or get_config("barcode.columns", 9)
        self.security_level = security_level if security_level is not None else \
            get_config("barcode.security_level", 4)
        self.scale = get_config("barcode.scale", 2)
        self.ratio = get_config("barcode.ratio", 3)
        self.padding = get_config("barcode.padding", 4)
        self.text_encoding = get_config("barcode.text_encoding", "utf-8")

    def generate(self, hub3_text: str) -> BarcodeResult:
        """
        Render the payload as a PDF417 image.

        Args:
            hub3_text: Output of the HUB3 encoder.

        Returns:
            BarcodeResult with the PIL image and its PNG bytes.

        Raises:
            CompositionError: If the payload cannot be encoded or rendered.
        """
        try:
            codes = pdf417gen.encode(
                hub3_text,
                columns=self.columns,
                security_level=self.security_level,
                encoding=self.text_encoding
            )
            image = pdf417gen.render_image(
                codes,
                scale=self.scale,
                ratio=self.ratio,
                padding=self.padding
            )
        except ValueError as e:
            logger.error(f"PDF417 encoding failed: {e}")
            raise CompositionError("barcode rendering", str(e))

        buffer = io.BytesIO()
        image.save(buffer, format="PNG")

        logger.info(f"Rendered PDF417 barcode {image.width}x{image.height}px")
        return BarcodeResult(text=hub3_text, image=image, png_bytes=buffer.getvalue())
