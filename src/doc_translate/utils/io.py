"""
I/O utilities for the translation pipeline.

Handles:
- PDF loading and validation
- Page geometry reading
- Page rasterization with a pixel budget
- JSON serialization
- Directory management
"""

import json
import logging
import math
from pathlib import Path
from typing import List, Union, Any
from dataclasses import dataclass, asdict

import numpy as np

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF-"


class DocumentAssemblyError(RuntimeError):
    """The source document cannot be loaded, copied or written."""


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class PageInfo:
    """Geometry of one input page in PDF user-space units."""
    index: int  # 0-based
    width: float
    height: float


@dataclass
class RasterImage:
    """Bitmap rendered from a page."""
    image: np.ndarray  # BGR
    width: int
    height: int
    scale: float  # Pixels per PDF unit


# ============================================================================
# PDF Loading
# ============================================================================

def is_pdf_bytes(data: bytes) -> bool:
    """Check whether a buffer starts with the PDF header."""
    return bool(data) and data.lstrip()[:len(PDF_MAGIC)] == PDF_MAGIC


def load_pdf_bytes(pdf_path: Union[str, Path]) -> bytes:
    """
    Read a PDF file from disk.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not a PDF
    """
    pdf_path = Path(pdf_path)
    if not pdf_path.exists():
        raise FileNotFoundError(f"PDF file not found: {pdf_path}")

    data = pdf_path.read_bytes()
    if not is_pdf_bytes(data):
        raise ValueError(f"Not a PDF file: {pdf_path}")

    logger.debug(f"Loaded PDF: {pdf_path} ({len(data)} bytes)")
    return data


def read_page_geometry(pdf_bytes: bytes) -> List[PageInfo]:
    """
    Read the size of every page of a PDF.

    Args:
        pdf_bytes: Raw PDF document

    Returns:
        One PageInfo per page, in document order

    Raises:
        DocumentAssemblyError: If the document cannot be opened
    """
    import fitz

    try:
        doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    except Exception as e:
        raise DocumentAssemblyError(f"Failed to parse PDF: {e}") from e

    try:
        pages = [
            PageInfo(index=i, width=page.rect.width, height=page.rect.height)
            for i, page in enumerate(doc)
        ]
    finally:
        doc.close()

    logger.info(f"Read geometry for {len(pages)} page(s)")
    return pages


# ============================================================================
# PDF to Image Conversion
# ============================================================================

def compute_raster_scale(
    page_width: float,
    page_height: float,
    target_dpi: int = 380,
    base_dpi: int = 72,
    max_pixels: int = 25_000_000
) -> float:
    """
    Compute the pixels-per-unit scale for rendering a page.

    Starts from target_dpi / base_dpi and shrinks proportionally when the
    raster would exceed max_pixels, so width * height stays within the cap
    and the aspect ratio is preserved.

    Args:
        page_width: Page width in PDF units
        page_height: Page height in PDF units
        target_dpi: Desired rendering resolution
        base_dpi: Resolution of PDF user space
        max_pixels: Pixel area cap

    Returns:
        Effective scale factor
    """
    if page_width <= 0 or page_height <= 0:
        raise ValueError(f"Invalid page size: {page_width}x{page_height}")

    scale = target_dpi / base_dpi
    area = (page_width * scale) * (page_height * scale)

    if area > max_pixels:
        capped = math.sqrt(max_pixels / (page_width * page_height))
        logger.warning(
            f"Raster {page_width * scale:.0f}x{page_height * scale:.0f} exceeds "
            f"{max_pixels} pixels, scaling {scale:.3f} -> {capped:.3f}"
        )
        scale = capped

    return scale


def raster_size(page_width: float, page_height: float, scale: float) -> tuple:
    """Pixel dimensions of a page rendered at scale (never below 1x1)."""
    return (
        max(1, int(math.floor(page_width * scale))),
        max(1, int(math.floor(page_height * scale)))
    )


def rasterize_page(
    pdf_bytes: bytes,
    page: PageInfo,
    target_dpi: int = 380,
    base_dpi: int = 72,
    max_pixels: int = 25_000_000,
    thread_count: int = 1
) -> RasterImage:
    """
    Render one PDF page to an image using pdf2image (poppler backend).

    Args:
        pdf_bytes: Raw PDF document
        page: Page to render
        target_dpi: Desired rendering resolution
        base_dpi: Resolution of PDF user space
        max_pixels: Pixel area cap
        thread_count: Poppler worker threads

    Returns:
        RasterImage in BGR format

    Raises:
        ImportError: If pdf2image is not installed
        RuntimeError: If poppler is missing or the page cannot be rendered
    """
    try:
        from pdf2image import convert_from_bytes
        from pdf2image.exceptions import PDFPageCountError, PDFSyntaxError
    except ImportError:
        raise ImportError(
            "pdf2image is required. Install with: pip install pdf2image\n"
            "Also ensure poppler is installed on your system."
        )

    scale = compute_raster_scale(
        page.width, page.height,
        target_dpi=target_dpi, base_dpi=base_dpi, max_pixels=max_pixels
    )
    width, height = raster_size(page.width, page.height, scale)

    try:
        pil_images = convert_from_bytes(
            pdf_bytes,
            dpi=scale * base_dpi,
            first_page=page.index + 1,
            last_page=page.index + 1,
            size=(width, height),
            fmt='png',
            thread_count=thread_count
        )
    except (PDFPageCountError, PDFSyntaxError) as e:
        raise RuntimeError(f"Failed to render page {page.index + 1}: {e}")
    except Exception as e:
        if "poppler" in str(e).lower():
            raise RuntimeError(
                "Poppler is not installed. Install with:\n"
                "  macOS: brew install poppler\n"
                "  Linux: sudo apt-get install poppler-utils"
            )
        raise

    if not pil_images:
        raise RuntimeError(f"No image rendered for page {page.index + 1}")

    # RGB -> BGR for OpenCV compatibility
    img_array = np.array(pil_images[0].convert("RGB"))[:, :, ::-1].copy()
    h, w = img_array.shape[:2]

    logger.debug(f"Rasterized page {page.index + 1}: {w}x{h} (scale={scale:.3f})")
    return RasterImage(image=img_array, width=w, height=h, scale=scale)


# ============================================================================
# JSON Serialization
# ============================================================================

class EnhancedJSONEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy values and dataclasses."""

    def default(self, obj):
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.floating):
            return float(obj)
        if hasattr(obj, '__dataclass_fields__'):
            return asdict(obj)
        if isinstance(obj, Path):
            return str(obj)
        return super().default(obj)


def save_json(
    data: Any,
    output_path: Union[str, Path],
    indent: int = 2,
    ensure_ascii: bool = False
) -> Path:
    """
    Save data to a JSON file.

    Args:
        data: Data to serialize (dict, list, dataclass, etc.)
        output_path: Path to save the JSON file
        indent: Indentation level for pretty printing
        ensure_ascii: If True, escape non-ASCII characters

    Returns:
        Path to the saved file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=indent, ensure_ascii=ensure_ascii, cls=EnhancedJSONEncoder)

    logger.debug(f"Saved JSON: {output_path}")
    return output_path


# ============================================================================
# Directory Management
# ============================================================================

def ensure_dir(path: Union[str, Path]) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path
