"""
PDF Processor Module.

Reads the uploaded invoice PDF with PyMuPDF:
    - Text extraction (all pages, newline separated) for field extraction
    - First page size, needed to place the barcode
    - First page rendering for previews

Scanned (image-only) PDFs yield empty text; extraction then simply finds
nothing and the user fills the fields in.
"""

import io
from pathlib import Path
from typing import Optional, Tuple, Union

import fitz  # PyMuPDF
from PIL import Image

from config import get_config
from uplatko.utils.logger import get_logger
from uplatko.utils.helpers import get_file_extension
from uplatko.utils.exceptions import (
    CorruptedFileError,
    FileNotFoundError,
    UnsupportedFileTypeError,
)

logger = get_logger(__name__)

SUPPORTED_EXTENSIONS = ['.pdf']


class PDFProcessor:
    """
    Text and page access for invoice PDFs.

    Attributes:
        dpi: Resolution used by render_first_page()

    Example:
        >>> processor = PDFProcessor()
        >>> text = processor.extract_text("racun.pdf")
        >>> width, height = processor.get_first_page_size("racun.pdf")
    """

    def __init__(self) -> None:
        self.dpi = get_config("input.pdf.dpi", 144)
        logger.debug(f"PDFProcessor initialized (DPI={self.dpi})")

    def validate_file(self, filepath: Union[str, Path]) -> Path:
        """
        Check that the input exists and is a PDF.

        Raises:
            FileNotFoundError: If the path does not exist.
            UnsupportedFileTypeError: If the file is not a PDF.
        """
        path = Path(filepath)
        if not path.is_file():
            raise FileNotFoundError(str(path))

        extension = get_file_extension(path)
        if extension not in SUPPORTED_EXTENSIONS:
            raise UnsupportedFileTypeError(extension, SUPPORTED_EXTENSIONS)

        return path

    def _open(self, path: Path) -> fitz.Document:
        try:
            doc = fitz.open(path)
        except (RuntimeError, ValueError) as e:
            logger.error(f"Could not open PDF {path.name}: {e}")
            raise CorruptedFileError(str(path), str(e))

        if doc.page_count == 0:
            doc.close()
            raise CorruptedFileError(str(path), "document has no pages")
        return doc

    def extract_text(self, filepath: Union[str, Path]) -> str:
        """
        Extract the text of every page.

        Args:
            filepath: Path to the PDF.

        Returns:
            Page texts joined with newlines.

        Raises:
            FileNotFoundError, UnsupportedFileTypeError, CorruptedFileError
        """
        path = self.validate_file(filepath)
        logger.info(f"Extracting text from: {path.name}")

        doc = self._open(path)
        try:
            pages = [page.get_text("text") for page in doc]
        finally:
            doc.close()

        text = "\n".join(page.rstrip("\n") for page in pages)
        if not text.strip():
            logger.warning(f"{path.name} has no text layer (scanned document?)")
        else:
            logger.debug(f"Extracted {len(text)} characters from {len(pages)} page(s)")
        return text

    def get_first_page_size(self, filepath: Union[str, Path]) -> Tuple[float, float]:
        """Return (width, height) of page 1 in PDF points."""
        path = self.validate_file(filepath)
        doc = self._open(path)
        try:
            rect = doc[0].rect
            return rect.width, rect.height
        finally:
            doc.close()

    def render_first_page(
        self,
        filepath: Union[str, Path],
        dpi: Optional[int] = None
    ) -> Image.Image:
        """
        Render page 1 to an RGB PIL image.

        Args:
            filepath: Path to the PDF.
            dpi: Resolution; the configured DPI when None.

        Raises:
            CorruptedFileError: If the page cannot be rendered.
        """
        path = self.validate_file(filepath)
        doc = self._open(path)
        try:
            zoom = (dpi or self.dpi) / 72.0
            pix = doc[0].get_pixmap(matrix=fitz.Matrix(zoom, zoom))
            image = Image.open(io.BytesIO(pix.tobytes("png")))
            if image.mode != 'RGB':
                image = image.convert('RGB')
            return image
        except RuntimeError as e:
            raise CorruptedFileError(str(path), str(e))
        finally:
            doc.close()
