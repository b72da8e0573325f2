"""
Shared fixtures for the translation pipeline tests.
"""

import sys
from contextlib import contextmanager
from pathlib import Path

import numpy as np
import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


def make_pdf(num_pages: int = 1, width: float = 595, height: float = 842, text: str = "Original page") -> bytes:
    """Build a small PDF with a line of text on each page."""
    import fitz

    doc = fitz.open()
    for i in range(num_pages):
        page = doc.new_page(width=width, height=height)
        page.insert_text((72, 72), f"{text} {i + 1}", fontsize=12)
    data = doc.tobytes()
    doc.close()
    return data


def make_words(*specs):
    """Build OCRWords from (text, confidence, x0, y0) tuples."""
    from doc_translate.utils.ocr_text import OCRWord
    from doc_translate.utils.layout import BoundingBox

    return [
        OCRWord(text=text, confidence=conf, bbox=BoundingBox(x0, y0, x0 + 10 * len(text), y0 + 12))
        for text, conf, x0, y0 in specs
    ]


class ScriptedEngine:
    """
    OCR engine that replays one script entry per page.

    Each entry is a list of words (returned for every variant of that page)
    or an Exception raised for every variant of that page.
    """

    name = "scripted"

    def __init__(self, pages, variants_per_page=2):
        self.pages = list(pages)
        self.variants_per_page = variants_per_page
        self.calls = 0
        self.closed = False

    def recognize_words(self, image):
        page = self.calls // self.variants_per_page
        self.calls += 1
        entry = self.pages[page] if page < len(self.pages) else []
        if isinstance(entry, Exception):
            raise entry
        return list(entry)

    def close(self):
        self.closed = True


class FakeTranslator:
    """Translator recording its inputs."""

    def __init__(self, result="Translated text", error=None):
        self.result = result
        self.error = error
        self.calls = []

    def translate(self, text):
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return self.result


def fake_rasterizer(pdf_bytes, page):
    """Stand-in for poppler: a blank white page at scale 1."""
    from doc_translate.utils.io import RasterImage

    h, w = 120, 100
    return RasterImage(image=np.full((h, w, 3), 255, dtype=np.uint8), width=w, height=h, scale=1.0)


def scripted_engine_factory(engine):
    """Context manager factory that yields engine and closes it on exit."""

    @contextmanager
    def factory():
        try:
            yield engine
        finally:
            engine.close()

    return factory


@pytest.fixture
def pdf_factory():
    return make_pdf


@pytest.fixture
def pipeline_config():
    """Default configuration with timers disabled."""
    from doc_translate.config import PipelineConfig

    config = PipelineConfig()
    config.cache.schedule_eviction = False
    return config
