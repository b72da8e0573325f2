"""
Document assembler module for the translation pipeline.

Provides:
- Per-page and per-job data model (PageResult, TranslationJob)
- Pipeline orchestration: rasterize, preprocess, recognize, select,
  reconstruct lines, translate, render
- Per-page failure isolation
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from functools import partial
from typing import Callable, ContextManager, List, Optional, Dict, Any

from .io import PageInfo, RasterImage, read_page_geometry, rasterize_page
from .images import build_variants
from .layout import apply_line_reconstruction
from .ocr_text import (
    OCRResult, PageMetrics, open_engine, recognize_variants, select_best_result
)
from .translator import (
    HuggingFaceTranslator, TranslationDispatcher, TranslationUnit
)
from .export import OverlayRenderer

logger = logging.getLogger(__name__)


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class PageResult:
    """Outcome of extraction and translation for one page."""
    index: int
    extracted_text: str
    translation: TranslationUnit
    ocr_result: Optional[OCRResult] = None
    status: str = "success"  # success, render_failed, recognition_failed
    error: Optional[str] = None

    @property
    def translated_text(self) -> str:
        return self.translation.translated_text

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page_number": self.index + 1,
            "status": self.status,
            "error": self.error,
            "extracted_text": self.extracted_text,
            "translation": self.translation.to_dict(),
            "ocr": self.ocr_result.to_dict() if self.ocr_result else None
        }


@dataclass
class TranslationJob:
    """A finished end-to-end translation."""
    job_id: str
    filename: str
    extracted_texts: List[str]
    translated_texts: List[str]
    document_bytes: bytes
    created_at: str = ""
    pages: List[PageResult] = field(default_factory=list)

    def __post_init__(self):
        if not self.job_id:
            self.job_id = uuid.uuid4().hex
        if not self.created_at:
            self.created_at = datetime.now().isoformat()

    @property
    def page_count(self) -> int:
        return len(self.extracted_texts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "job_id": self.job_id,
            "filename": self.filename,
            "created_at": self.created_at,
            "pages": [p.to_dict() for p in self.pages]
        }


def _empty_translation() -> TranslationUnit:
    return TranslationUnit(source_text="", translated_text="", status="skipped")


# ============================================================================
# Document Translator
# ============================================================================

class DocumentTranslator:
    """
    Orchestrates the translation pipeline for one document at a time.

    Collaborators can be injected; by default they are built from the
    pipeline configuration:
    - translator: object with translate(text) -> str
    - engine_factory: zero-argument callable returning a context manager
      that yields an OCR engine
    - rasterizer: callable (pdf_bytes, PageInfo) -> RasterImage
    - renderer: object with render(pdf_bytes, texts) -> bytes
    """

    def __init__(
        self,
        config=None,
        translator=None,
        engine_factory: Optional[Callable[[], ContextManager[Any]]] = None,
        rasterizer: Optional[Callable[[bytes, PageInfo], RasterImage]] = None,
        renderer=None
    ):
        if config is None:
            from ..config import get_config
            config = get_config()
        self.config = config

        if translator is None:
            tc = config.translation
            translator = HuggingFaceTranslator(
                api_url=tc.api_url,
                source_lang=tc.source_lang,
                target_lang=tc.target_lang,
                api_token=tc.api_token,
                timeout=tc.timeout
            )
        self.dispatcher = TranslationDispatcher(
            translator,
            min_chars=config.translation.min_chars
        )

        if engine_factory is None:
            oc = config.ocr
            engine_factory = partial(
                open_engine,
                oc.engine,
                language=oc.language,
                tesseract_config=oc.tesseract_config,
                use_gpu=oc.use_gpu
            )
        self.engine_factory = engine_factory

        if rasterizer is None:
            rc = config.raster
            rasterizer = partial(
                rasterize_page,
                target_dpi=rc.target_dpi,
                base_dpi=rc.base_dpi,
                max_pixels=rc.max_pixels,
                thread_count=rc.thread_count
            )
        self.rasterizer = rasterizer

        if renderer is None:
            rc = config.render
            renderer = OverlayRenderer(
                font_name=rc.font_name,
                font_size=rc.font_size,
                margin=rc.margin,
                line_height_factor=rc.line_height_factor,
                paragraph_gap=rc.paragraph_gap,
                color=rc.color
            )
        self.renderer = renderer

    def translate_document(self, pdf_bytes: bytes, filename: str = "document.pdf") -> TranslationJob:
        """
        Translate a complete document.

        Args:
            pdf_bytes: Uploaded PDF
            filename: Original file name, kept for display

        Returns:
            TranslationJob with one extracted and one translated text per page

        Raises:
            DocumentAssemblyError: If the document cannot be read or written
        """
        start_time = time.time()
        logger.info(f"Starting translation of {filename}")

        pages = read_page_geometry(pdf_bytes)
        if self.config.max_pages is not None:
            pages = pages[:self.config.max_pages]

        results: List[PageResult] = []
        with self.engine_factory() as engine:
            for page in pages:
                results.append(self.process_page(engine, pdf_bytes, page))

        translated_texts = [r.translated_text for r in results]
        document_bytes = self.renderer.render(pdf_bytes, translated_texts, page_count=len(results))

        job = TranslationJob(
            job_id=uuid.uuid4().hex,
            filename=filename,
            extracted_texts=[r.extracted_text for r in results],
            translated_texts=translated_texts,
            document_bytes=document_bytes,
            pages=results
        )

        elapsed = time.time() - start_time
        failed = sum(1 for r in results if r.status != "success" or r.translation.is_failed)
        logger.info(
            f"Job {job.job_id}: {len(results)} page(s) in {elapsed:.2f}s "
            f"({failed} degraded)"
        )
        return job

    def process_page(self, engine, pdf_bytes: bytes, page: PageInfo) -> PageResult:
        """
        Extract and translate one page.

        Rendering and recognition errors are recorded on the result and
        leave the page's texts empty.
        """
        page_number = page.index + 1
        start_time = time.time()

        try:
            raster = self.rasterizer(pdf_bytes, page)
        except Exception as e:
            logger.error(f"Page {page_number}: rendering failed: {e}")
            return PageResult(
                index=page.index,
                extracted_text="",
                translation=_empty_translation(),
                status="render_failed",
                error=str(e)
            )

        metrics = PageMetrics(
            raster_width=raster.width,
            raster_height=raster.height,
            page_width=page.width,
            page_height=page.height,
            scale=raster.scale
        )

        pc = self.config.preprocess
        variants = build_variants(
            raster.image,
            gamma=pc.gamma,
            denoise_strength=pc.denoise_strength,
            contrast_clip_limit=pc.contrast_clip_limit,
            contrast_grid_size=pc.contrast_grid_size,
            sharpen_amount=pc.sharpen_amount,
            sharpen_sigma=pc.sharpen_sigma
        )
        # The raster is only needed for recognition
        del raster

        ocr_results = recognize_variants(engine, variants, metrics)
        best = select_best_result(ocr_results)

        if all(r.is_failed for r in ocr_results):
            errors = "; ".join(r.error or "" for r in ocr_results)
            logger.error(f"Page {page_number}: recognition failed on all variants")
            return PageResult(
                index=page.index,
                extracted_text="",
                translation=_empty_translation(),
                ocr_result=best,
                status="recognition_failed",
                error=errors
            )

        apply_line_reconstruction(best, self.config.ocr.line_tolerance_px)
        extracted = best.text
        logger.info(
            f"Page {page_number}: {len(extracted)} chars extracted "
            f"from {len(best.lines)} line(s)"
        )

        translation = self.dispatcher.dispatch(extracted, page_number=page_number)

        logger.info(f"Page {page_number} processed in {time.time() - start_time:.2f}s")
        return PageResult(
            index=page.index,
            extracted_text=extracted,
            translation=translation,
            ocr_result=best
        )
