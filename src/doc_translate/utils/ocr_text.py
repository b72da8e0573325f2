"""
Text OCR module for the translation pipeline.

Provides:
- OCR data model (words, lines, results, page metrics)
- Tesseract and EasyOCR engines returning word boxes with confidence
- Scoped engine lifetime (one engine per job, always released)
- Recognition of every preprocessed variant
- Best-variant selection by aggregate confidence
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any, Iterator, Sequence
import numpy as np

from .layout import BoundingBox
from .images import PreprocessedVariant, VARIANT_ORDER

logger = logging.getLogger(__name__)


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class OCRWord:
    """OCR result for a single word."""
    text: str
    confidence: float  # 0-100
    bbox: BoundingBox


@dataclass
class OCRLine:
    """Words judged to share a text line."""
    text: str
    confidence: float
    bbox: BoundingBox
    words: List[OCRWord] = field(default_factory=list)

    @classmethod
    def from_words(cls, words: List[OCRWord]) -> 'OCRLine':
        return cls(
            text=" ".join(w.text for w in words),
            confidence=float(np.mean([w.confidence for w in words])),
            bbox=BoundingBox.union([w.bbox for w in words]),
            words=list(words)
        )


@dataclass
class PageMetrics:
    """Dimensions needed to map raster pixels back to page units."""
    raster_width: int
    raster_height: int
    page_width: float
    page_height: float
    scale: float

    def to_page_bbox(self, bbox: BoundingBox) -> BoundingBox:
        """Convert a pixel box (top-left origin) to PDF units (bottom-left origin)."""
        return BoundingBox(
            x0=bbox.x0 / self.scale,
            y0=self.page_height - bbox.y1 / self.scale,
            x1=bbox.x1 / self.scale,
            y1=self.page_height - bbox.y0 / self.scale,
        )


@dataclass
class OCRResult:
    """Output of one recognition pass over one variant."""
    text: str
    confidence: float  # Mean word confidence, 0-100
    words: List[OCRWord] = field(default_factory=list)
    lines: List[OCRLine] = field(default_factory=list)
    metrics: Optional[PageMetrics] = None
    variant_tag: str = ""
    engine_used: str = ""
    status: str = "success"  # success, failed
    error: Optional[str] = None
    raw_text: Optional[str] = None  # Engine's flat text, before line reconstruction

    @property
    def is_failed(self) -> bool:
        return self.status == "failed"

    @classmethod
    def from_words(cls, words: List[OCRWord], **kwargs) -> 'OCRResult':
        confidence = float(np.mean([w.confidence for w in words])) if words else 0.0
        raw_text = " ".join(w.text for w in words)
        return cls(text="", confidence=confidence, words=list(words), raw_text=raw_text, **kwargs)

    @classmethod
    def failed(cls, error: str, **kwargs) -> 'OCRResult':
        return cls(text="", confidence=0.0, status="failed", error=error, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        lines = []
        for line in self.lines:
            entry = {
                "text": line.text,
                "confidence": round(line.confidence, 2),
                "bbox": line.bbox.to_tuple(),
            }
            if self.metrics is not None:
                entry["page_bbox"] = tuple(
                    round(v, 2) for v in self.metrics.to_page_bbox(line.bbox).to_tuple()
                )
            lines.append(entry)

        return {
            "text": self.text,
            "confidence": round(self.confidence, 2),
            "variant": self.variant_tag,
            "engine": self.engine_used,
            "status": self.status,
            "error": self.error,
            "lines": lines
        }


# ============================================================================
# Tesseract Engine
# ============================================================================

def parse_tesseract_data(data: Dict[str, List[Any]]) -> List[OCRWord]:
    """
    Convert pytesseract.image_to_data dict output into words.

    Entries with negative confidence (layout rows) or blank text are dropped.
    """
    words = []
    for i in range(len(data['text'])):
        text = str(data['text'][i]).strip()
        conf = float(data['conf'][i])

        if conf < 0 or not text:
            continue

        words.append(OCRWord(
            text=text,
            confidence=conf,
            bbox=BoundingBox.from_xywh(
                data['left'][i],
                data['top'][i],
                data['width'][i],
                data['height'][i]
            )
        ))
    return words


class TesseractEngine:
    """OCR using Tesseract."""

    name = "tesseract"

    def __init__(
        self,
        language: str = "asm",
        config: str = "--oem 1 --psm 3"
    ):
        try:
            import pytesseract
            self.pytesseract = pytesseract

            # Test that tesseract is installed
            pytesseract.get_tesseract_version()

        except Exception as e:
            raise ImportError(
                f"Tesseract not available: {e}\n"
                "Install with: pip install pytesseract\n"
                "Also install Tesseract and the language data: "
                "https://github.com/tesseract-ocr/tesseract"
            )

        self.language = language
        self.config = config

    def recognize_words(self, image: np.ndarray) -> List[OCRWord]:
        """Recognize words with bounding boxes and confidence."""
        data = self.pytesseract.image_to_data(
            image,
            lang=self.language,
            config=self.config,
            output_type=self.pytesseract.Output.DICT
        )
        return parse_tesseract_data(data)

    def close(self):
        # Tesseract runs as a subprocess per call
        self.pytesseract = None


# ============================================================================
# EasyOCR Engine
# ============================================================================

class EasyOCREngine:
    """OCR using EasyOCR."""

    name = "easyocr"

    def __init__(
        self,
        language: str = "as",
        use_gpu: bool = False
    ):
        try:
            import easyocr

            # Map Tesseract codes to EasyOCR codes
            lang_map = {"asm": "as", "ben": "bn", "eng": "en", "hin": "hi"}
            easy_lang = lang_map.get(language, language)

            self.reader = easyocr.Reader(
                [easy_lang],
                gpu=use_gpu,
                verbose=False
            )
        except ImportError:
            raise ImportError(
                "EasyOCR not available. Install with: pip install easyocr"
            )

        self.language = language

    def recognize_words(self, image: np.ndarray) -> List[OCRWord]:
        """Recognize text boxes; EasyOCR confidences (0-1) are rescaled to 0-100."""
        words = []
        for bbox_points, text, conf in self.reader.readtext(image):
            text = text.strip()
            if not text:
                continue

            # Convert polygon to bounding box
            xs = [p[0] for p in bbox_points]
            ys = [p[1] for p in bbox_points]
            words.append(OCRWord(
                text=text,
                confidence=float(conf) * 100.0,
                bbox=BoundingBox(min(xs), min(ys), max(xs), max(ys))
            ))
        return words

    def close(self):
        # Drop the loaded model weights
        self.reader = None


# ============================================================================
# Engine Lifetime
# ============================================================================

def create_engine(
    engine_name: str = "tesseract",
    language: str = "asm",
    tesseract_config: str = "--oem 1 --psm 3",
    use_gpu: bool = False
):
    """Create an OCR engine instance."""
    if engine_name == "tesseract":
        return TesseractEngine(language=language, config=tesseract_config)
    elif engine_name == "easyocr":
        return EasyOCREngine(language=language, use_gpu=use_gpu)
    else:
        raise ValueError(f"Unknown OCR engine: {engine_name}")


@contextmanager
def open_engine(
    engine_name: str = "tesseract",
    language: str = "asm",
    tesseract_config: str = "--oem 1 --psm 3",
    use_gpu: bool = False
) -> Iterator[Any]:
    """
    Acquire an OCR engine for the duration of a job.

    The engine is closed on every exit path, including exceptions raised
    while pages are being processed.
    """
    engine = create_engine(
        engine_name,
        language=language,
        tesseract_config=tesseract_config,
        use_gpu=use_gpu
    )
    logger.info(f"Initialized OCR engine: {engine_name} ({language})")
    try:
        yield engine
    finally:
        engine.close()
        logger.info(f"Released OCR engine: {engine_name}")


# ============================================================================
# Recognition and Selection
# ============================================================================

def recognize_variants(
    engine,
    variants: Sequence[PreprocessedVariant],
    metrics: Optional[PageMetrics] = None
) -> List[OCRResult]:
    """
    Run the engine once per variant.

    An engine error on one variant yields a failed, zero-confidence result
    for that variant; the other variants are still recognized.

    Returns:
        One OCRResult per variant, in input order
    """
    engine_name = getattr(engine, "name", type(engine).__name__)
    results = []

    for variant in variants:
        try:
            words = engine.recognize_words(variant.image)
        except Exception as e:
            logger.error(f"OCR failed on variant '{variant.tag}': {e}")
            results.append(OCRResult.failed(
                str(e),
                metrics=metrics,
                variant_tag=variant.tag,
                engine_used=engine_name
            ))
            continue

        result = OCRResult.from_words(
            words,
            metrics=metrics,
            variant_tag=variant.tag,
            engine_used=engine_name
        )
        logger.debug(
            f"Variant '{variant.tag}': {len(words)} words, "
            f"confidence {result.confidence:.1f}"
        )
        results.append(result)

    return results


def _variant_rank(tag: str) -> int:
    try:
        return VARIANT_ORDER.index(tag)
    except ValueError:
        return len(VARIANT_ORDER)


def select_best_result(results: Sequence[OCRResult]) -> OCRResult:
    """
    Pick the result with the highest aggregate confidence.

    A failed result never beats a successful one, even at zero confidence.
    Ties go to the variant that comes first in VARIANT_ORDER, then to the
    earlier position in results.
    """
    if not results:
        return OCRResult.failed("no recognition results")

    indexed = list(enumerate(results))
    _, best = max(
        indexed,
        key=lambda item: (
            not item[1].is_failed,
            item[1].confidence,
            -_variant_rank(item[1].variant_tag),
            -item[0]
        )
    )

    logger.info(
        f"Selected variant '{best.variant_tag}' "
        f"(confidence {best.confidence:.1f} of "
        f"{', '.join(f'{r.variant_tag}={r.confidence:.1f}' for r in results)})"
    )
    return best
