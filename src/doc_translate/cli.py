#!/usr/bin/env python
"""
Command-line interface for the Scanned PDF Translation Pipeline.

Usage:
    doc-translate --input <scanned.pdf> --output <translated.pdf> [options]

Examples:
    # Translate an Assamese scan to English
    doc-translate --input scan.pdf --output scan_en.pdf

    # Also dump per-page extracted and translated text
    doc-translate --input scan.pdf --output scan_en.pdf --json scan_en.json

    # Bengali scan with EasyOCR
    doc-translate --input scan.pdf --output scan_en.pdf --ocr-engine easyocr \\
        --language ben --source-lang ben_Beng
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger("doc_translate")


def setup_argparser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Scanned PDF Translation - OCR a scanned PDF and overlay an English translation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Translate a PDF:
    doc-translate --input scan.pdf --output scan_en.pdf

  Save extracted and translated text as JSON:
    doc-translate --input scan.pdf --output scan_en.pdf --json texts.json

  Render at a lower resolution for faster OCR:
    doc-translate --input scan.pdf --output scan_en.pdf --dpi 300
        """
    )

    # Required arguments
    parser.add_argument(
        "--input", "-i",
        required=True,
        help="Input PDF file"
    )

    parser.add_argument(
        "--output", "-o",
        required=True,
        help="Output path for the translated PDF"
    )

    # Optional arguments
    parser.add_argument(
        "--json",
        default=None,
        help="Optional path for a JSON dump of per-page texts"
    )

    parser.add_argument(
        "--dpi",
        type=int,
        default=None,
        help="Rendering resolution for OCR (default: 380)"
    )

    parser.add_argument(
        "--ocr-engine",
        choices=["tesseract", "easyocr"],
        default=None,
        help="OCR engine (default: tesseract)"
    )

    parser.add_argument(
        "--language",
        default=None,
        help="OCR language code, e.g. 'asm' or 'ben' (default: asm)"
    )

    parser.add_argument(
        "--source-lang",
        default=None,
        help="Translation source language (default: asm_Beng)"
    )

    parser.add_argument(
        "--target-lang",
        default=None,
        help="Translation target language (default: eng_Latn)"
    )

    parser.add_argument(
        "--min-chars",
        type=int,
        default=None,
        help="Skip translation for pages with this many characters or fewer (default: 10)"
    )

    parser.add_argument(
        "--line-tolerance",
        type=int,
        default=None,
        help="Vertical tolerance in pixels for grouping words into lines (default: 10)"
    )

    parser.add_argument(
        "--max-pages",
        type=int,
        default=None,
        help="Only process the first N pages"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress non-error output"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 1.0.0"
    )

    return parser


def build_config(args):
    """Apply command-line overrides on top of the environment configuration."""
    from doc_translate.config import get_config

    config = get_config()

    if args.dpi is not None:
        config.raster.target_dpi = args.dpi
    if args.ocr_engine is not None:
        config.ocr.engine = args.ocr_engine
    if args.language is not None:
        config.ocr.language = args.language
    if args.source_lang is not None:
        config.translation.source_lang = args.source_lang
    if args.target_lang is not None:
        config.translation.target_lang = args.target_lang
    if args.min_chars is not None:
        config.translation.min_chars = args.min_chars
    if args.line_tolerance is not None:
        config.ocr.line_tolerance_px = args.line_tolerance
    if args.max_pages is not None:
        config.max_pages = args.max_pages

    return config


def check_dependencies(engine: str = "tesseract") -> bool:
    """Check if required dependencies are available."""
    missing = []

    try:
        import cv2
    except ImportError:
        missing.append("opencv-python")

    try:
        import fitz
    except ImportError:
        missing.append("pymupdf")

    try:
        import pdf2image
    except ImportError:
        missing.append("pdf2image")

    if engine == "tesseract":
        try:
            import pytesseract
            try:
                pytesseract.get_tesseract_version()
            except Exception:
                missing.append("tesseract-ocr (system package)")
        except ImportError:
            missing.append("pytesseract")
    elif engine == "easyocr":
        try:
            import easyocr
        except ImportError:
            missing.append("easyocr")

    if missing:
        logger.error("Missing required dependencies:")
        for dep in missing:
            logger.error(f"  - {dep}")
        logger.error("\nInstall with: pip install -e .")
        return False

    return True


def run_pipeline(args, config) -> int:
    """Run the translation pipeline."""
    from doc_translate.utils.io import load_pdf_bytes, save_json, ensure_dir
    from doc_translate.utils.assembler import DocumentTranslator

    start_time = time.time()

    input_path = Path(args.input)
    try:
        pdf_bytes = load_pdf_bytes(input_path)
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        return 1

    translator = DocumentTranslator(config)

    logger.info("Processing document...")
    try:
        job = translator.translate_document(pdf_bytes, filename=input_path.name)
    except Exception as e:
        logger.error(f"Processing failed: {e}")
        if args.verbose:
            raise
        return 1

    output_path = Path(args.output)
    ensure_dir(output_path.parent)
    output_path.write_bytes(job.document_bytes)
    logger.info(f"Saved translated PDF: {output_path}")

    if args.json:
        json_path = save_json(job.to_dict(), args.json)
        logger.info(f"Saved JSON: {json_path}")

    elapsed = time.time() - start_time
    degraded = [
        p.index + 1 for p in job.pages
        if p.status != "success" or p.translation.is_failed
    ]

    if not args.quiet:
        print("\n" + "=" * 60)
        print("TRANSLATION COMPLETE")
        print("=" * 60)
        print(f"Source: {input_path}")
        print(f"Output: {output_path}")
        print(f"Job id: {job.job_id}")
        print(f"Pages processed: {job.page_count}")
        print(f"Processing time: {elapsed:.2f}s")
        print(f"Degraded pages: {', '.join(map(str, degraded)) or 'none'}")
        print("=" * 60)

    return 0


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = setup_argparser()
    args = parser.parse_args(argv)

    config = build_config(args)

    # Configure logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger().setLevel(logging.ERROR)

    if not check_dependencies(config.ocr.engine):
        sys.exit(1)

    try:
        exit_code = run_pipeline(args, config)
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if args.verbose:
            raise
        sys.exit(1)


if __name__ == "__main__":
    main()
