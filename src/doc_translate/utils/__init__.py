"""
Utility modules for the translation pipeline.
"""

from .io import (
    PageInfo, RasterImage, DocumentAssemblyError,
    read_page_geometry, rasterize_page, compute_raster_scale, save_json, ensure_dir
)
from .images import PreprocessedVariant, build_variants, VARIANT_ORDER
from .layout import BoundingBox, reconstruct_lines
from .ocr_text import (
    OCRWord, OCRLine, OCRResult, PageMetrics,
    open_engine, recognize_variants, select_best_result
)
from .translator import (
    TranslationUnit, TranslationError, TranslationDispatcher, HuggingFaceTranslator
)
from .export import OverlayRenderer, layout_page_text
from .assembler import DocumentTranslator, TranslationJob, PageResult
from .cache import JobCache

__all__ = [
    # IO
    "PageInfo", "RasterImage", "DocumentAssemblyError",
    "read_page_geometry", "rasterize_page", "compute_raster_scale", "save_json", "ensure_dir",
    # Images
    "PreprocessedVariant", "build_variants", "VARIANT_ORDER",
    # Layout
    "BoundingBox", "reconstruct_lines",
    # OCR
    "OCRWord", "OCRLine", "OCRResult", "PageMetrics",
    "open_engine", "recognize_variants", "select_best_result",
    # Translation
    "TranslationUnit", "TranslationError", "TranslationDispatcher", "HuggingFaceTranslator",
    # Rendering
    "OverlayRenderer", "layout_page_text",
    # Assembly
    "DocumentTranslator", "TranslationJob", "PageResult",
    # Cache
    "JobCache",
]
