#!/usr/bin/env python3
"""
Uplatko - HUB3 Payment Barcode Generator - Main Entry Point.

Reads a Croatian invoice PDF, extracts the payment details, lets the user
correct them and writes a HUB3 PDF417 barcode as PNG and stamped onto the
invoice PDF.

Usage:
    Command Line:
        python main.py --input racun.pdf
        python main.py --input racun.pdf --provider groq --set referenceNumber=12-345
        python main.py --input racun.pdf --extract-only

    Python:
        from main import run_pipeline
        paths = run_pipeline("racun.pdf", overrides={"description": "Racun 12"})
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import ConfigurationManager, get_config
from uplatko.utils.logger import setup_logger_from_config, get_logger
from uplatko.utils.helpers import parse_pair
from uplatko.utils.exceptions import UplatkoError, FormatViolationError
from uplatko.utils.credential_store import CredentialStore, KNOWN_PROVIDERS


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Generate a HUB3 payment barcode from an invoice PDF",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    Extract and generate with defaults:
        python main.py --input racun.pdf

    Use Groq and fill in the missing fields:
        python main.py --input racun.pdf --provider groq \\
            --set referenceNumber=1676-10-25 --set "description=Racun 12/2026"

    Only show what was extracted:
        python main.py --input racun.pdf --extract-only
        """
    )

    parser.add_argument(
        "--input", "-i",
        type=str,
        required=True,
        help="Invoice PDF"
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Output directory (default: outputs/)"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to custom configuration file"
    )

    # Extraction options
    parser.add_argument(
        "--provider", "-p",
        choices=KNOWN_PROVIDERS,
        default=None,
        help="AI extraction provider (default: stored selection, then config)"
    )

    parser.add_argument(
        "--api-key",
        type=str,
        default=None,
        help="API key for the selected provider (overrides stored key)"
    )

    parser.add_argument(
        "--remember",
        action="store_true",
        help="Store --provider and --api-key for later runs"
    )

    parser.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=[],
        metavar="FIELD=VALUE",
        help="Override an extracted field, e.g. --set amount=12,50 (repeatable)"
    )

    parser.add_argument(
        "--extract-only",
        action="store_true",
        help="Print extracted fields as JSON and exit"
    )

    # Output options
    parser.add_argument(
        "--no-pdf",
        action="store_true",
        help="Only write the barcode PNG"
    )

    parser.add_argument(
        "--preview",
        action="store_true",
        help="Also write a PNG preview of the stamped first page"
    )

    parser.add_argument(
        "--position",
        type=str,
        default=None,
        metavar="X,Y",
        help="Barcode top-left corner on the canvas (default: bottom right)"
    )

    parser.add_argument(
        "--canvas-size",
        type=str,
        default=None,
        metavar="W,H",
        help="Canvas size the position refers to (default: page size in points)"
    )

    parser.add_argument(
        "--barcode-size",
        type=str,
        default=None,
        metavar="W,H",
        help="Barcode size on the canvas (default from config)"
    )

    # Logging options
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only show warnings and errors"
    )

    return parser.parse_args(argv)


def initialize_system(args: argparse.Namespace) -> ConfigurationManager:
    """Load configuration and set up logging."""
    config = ConfigurationManager(args.config)
    setup_logger_from_config(quiet=args.quiet)

    if args.debug:
        import logging
        logging.getLogger("uplatko").setLevel(logging.DEBUG)
        for handler in logging.getLogger("uplatko").handlers:
            handler.setLevel(logging.DEBUG)

    logger = get_logger(__name__)
    logger.debug(f"Version: {config.get('project.version', '1.0.0')}")
    logger.debug(f"Input: {args.input}")
    return config


def parse_overrides(pairs: List[str]) -> Dict[str, str]:
    """
    Turn ["field=value", ...] into a dict.

    Raises:
        ValueError: If an entry has no "=".
    """
    overrides = {}
    for pair in pairs:
        if "=" not in pair:
            raise ValueError(f"Expected FIELD=VALUE, got: {pair!r}")
        key, value = pair.split("=", 1)
        overrides[key.strip()] = value
    return overrides


def select_provider(requested: Optional[str], store: CredentialStore) -> str:
    """Command line first, then the stored selection, then settings.yaml."""
    if requested:
        return requested
    stored = store.get_provider()
    if stored != "none":
        return stored
    return get_config("extraction.provider", "none") or "none"


def run_pipeline(
    input_path: str,
    output_dir: Optional[str] = None,
    provider: Optional[str] = None,
    api_key: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
    write_pdf: Optional[bool] = None,
    preview: bool = False,
    position: Optional[tuple] = None,
    canvas_size: Optional[tuple] = None,
    barcode_size: Optional[tuple] = None,
    store: Optional[CredentialStore] = None
) -> Dict[str, Path]:
    """
    Run the full invoice -> barcode pipeline.

    Args:
        input_path: Invoice PDF.
        output_dir: Where to write the artifacts.
        provider: "gemini", "groq", "none" or None for the stored selection.
        api_key: Key for the provider, overriding the stored one.
        overrides: User edits keyed by JSON field name.
        write_pdf: Whether to write the stamped PDF (config default).
        preview: Also render the stamped first page to PNG.
        position: Barcode (x, y) on the canvas; bottom right when None.
        canvas_size: Canvas (width, height); page 1 size in points when None.
        barcode_size: Barcode (width, height) on the canvas.
        store: Credential store; the default store when None.

    Returns:
        Mapping of artifact kind to written path.

    Raises:
        InputError: If the PDF cannot be read.
        FormatViolationError: If the completed record is invalid.
        CompositionError: If rendering or stamping fails.
    """
    from uplatko.input_handler import PDFProcessor
    from uplatko.extraction import ExtractionOrchestrator
    from uplatko.hub3 import Hub3Encoder, PaymentValidator, PartialPaymentRecord
    from uplatko.output_handler import (
        BarcodeGenerator,
        OutputHandler,
        PdfCompositor,
        default_position,
    )

    logger = get_logger(__name__)
    store = store or CredentialStore()

    # Phase 1: Text extraction
    pdf_processor = PDFProcessor()
    text = pdf_processor.extract_text(input_path)

    # Phase 2: Field extraction
    selected = select_provider(provider, store)
    lookup = (lambda name: api_key) if api_key else store.get_api_key
    outcome = ExtractionOrchestrator().resolve(text, selected, lookup)
    logger.info(f"Fields extracted via {outcome.source}")

    # Phase 3: Completion with user edits
    edits = PartialPaymentRecord.from_dict(overrides or {})
    if edits.ignored_keys:
        raise ValueError(f"Unknown field(s): {', '.join(edits.ignored_keys)}")
    payment, _ = PaymentValidator().build(outcome.record, edits)

    # Phase 4: HUB3 encoding and barcode rendering
    hub3_text = Hub3Encoder().encode(payment)
    barcode = BarcodeGenerator().generate(hub3_text)

    # Phase 5: Composition
    if write_pdf is None:
        write_pdf = get_config("output.write_pdf", True)

    composite = None
    if write_pdf:
        # Without a canvas the position is given in page points
        canvas_size = canvas_size or pdf_processor.get_first_page_size(input_path)
        barcode_size = barcode_size or (
            get_config("composition.barcode_width", 220),
            get_config("composition.barcode_height", 80),
        )
        position = position or default_position(canvas_size, barcode_size)
        composite = PdfCompositor().compose(
            Path(input_path).read_bytes(),
            barcode.png_bytes,
            position,
            canvas_size,
            barcode_size
        )

    # Phase 6: Output
    paths = OutputHandler(output_dir).save(barcode, composite)

    if preview and 'pdf' in paths:
        preview_path = paths['pdf'].with_name(paths['pdf'].stem + "_preview.png")
        pdf_processor.render_first_page(paths['pdf']).save(preview_path)
        paths['preview'] = preview_path
        logger.info(f"Preview: {preview_path}")

    return paths


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function - entry point for command-line execution.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    try:
        args = parse_arguments(argv)
        initialize_system(args)
        logger = get_logger(__name__)

        store = CredentialStore()
        if args.remember:
            if args.provider:
                store.set_provider(args.provider)
            if args.api_key and args.provider and args.provider != "none":
                store.set_api_key(args.provider, args.api_key)

        if args.extract_only:
            from uplatko.input_handler import PDFProcessor
            from uplatko.extraction import ExtractionOrchestrator

            text = PDFProcessor().extract_text(args.input)
            selected = select_provider(args.provider, store)
            lookup = (lambda name: args.api_key) if args.api_key else store.get_api_key
            outcome = ExtractionOrchestrator().resolve(text, selected, lookup)
            print(outcome.record.to_json())
            return 0

        paths = run_pipeline(
            input_path=args.input,
            output_dir=args.output,
            provider=args.provider,
            api_key=args.api_key,
            overrides=parse_overrides(args.overrides),
            write_pdf=False if args.no_pdf else None,
            preview=args.preview,
            position=parse_pair(args.position) if args.position else None,
            canvas_size=parse_pair(args.canvas_size) if args.canvas_size else None,
            barcode_size=parse_pair(args.barcode_size) if args.barcode_size else None,
            store=store
        )

        for kind, path in paths.items():
            print(f"{kind}: {path}")
        return 0

    except FormatViolationError as e:
        print("Payment data is incomplete or invalid:", file=sys.stderr)
        for error in e.errors:
            print(f"  - {error}", file=sys.stderr)
        print("Use --set FIELD=VALUE to fill in the missing fields.", file=sys.stderr)
        return 1

    except UplatkoError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
