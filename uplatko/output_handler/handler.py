"""
Main Output Handler Module.

Writes the generated artifacts to disk: the barcode PNG and, when
composition succeeded, the invoice PDF with the barcode stamped on it.
"""

from pathlib import Path
from typing import Dict, Optional, Union

from config import get_config
from uplatko.utils.logger import get_logger
from uplatko.utils.helpers import ensure_directory, safe_filename
from .barcode_generator import BarcodeResult

logger = get_logger(__name__)


class OutputHandler:
    """
    Saves barcode and composite PDF files.

    Attributes:
        output_dir: Directory the files are written to
        basename: File name stem shared by the PNG and PDF

    Example:
        >>> handler = OutputHandler(output_dir="outputs")
        >>> paths = handler.save(barcode, composite_pdf)
        >>> paths['png']
        PosixPath('outputs/uplatnica.png')
    """

    def __init__(
        self,
        output_dir: Optional[Union[str, Path]] = None,
        basename: Optional[str] = None
    ) -> None:
        self.output_dir = Path(output_dir or get_config("paths.output_dir", "outputs"))
        self.basename = safe_filename(basename or get_config("output.basename", "uplatnica"))

        logger.debug(f"OutputHandler initialized (dir={self.output_dir})")

    def save(
        self,
        barcode: BarcodeResult,
        composite_pdf: Optional[bytes] = None
    ) -> Dict[str, Path]:
        """
        Write the artifacts.

        Args:
            barcode: Rendered barcode.
            composite_pdf: PDF bytes with the barcode embedded, if any.

        Returns:
            Mapping of artifact kind ('png', 'pdf') to written path.
        """
        ensure_directory(self.output_dir)
        written: Dict[str, Path] = {}

        png_path = self.output_dir / f"{self.basename}.png"
        png_path.write_bytes(barcode.png_bytes)
        written['png'] = png_path
        logger.info(f"Barcode image: {png_path}")

        if composite_pdf is not None:
            pdf_path = self.output_dir / f"{self.basename}.pdf"
            pdf_path.write_bytes(composite_pdf)
            written['pdf'] = pdf_path
            logger.info(f"Composite PDF: {pdf_path}")

        return written
