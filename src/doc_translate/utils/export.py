"""
Export module for the translation pipeline.

Provides:
- Greedy word-wrap layout of translated text within page margins
- Overlay of the wrapped text onto copies of the original pages (PyMuPDF)
"""

import logging
import re
from dataclasses import dataclass
from functools import partial
from typing import Callable, List, Optional, Sequence, Tuple

from .io import DocumentAssemblyError

logger = logging.getLogger(__name__)

PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class PlacedLine:
    """A line of text positioned in PDF user space (origin bottom-left)."""
    text: str
    x: float
    y: float  # Baseline
    width: float


# ============================================================================
# Text Layout
# ============================================================================

def measure_text(text: str, font_name: str = "helv", font_size: float = 9.0) -> float:
    """Rendered width of text in PDF units for a base-14 font."""
    import fitz
    return fitz.get_text_length(text, fontname=font_name, fontsize=font_size)


def _split_long_word(word: str, max_width: float, measure: Callable[[str], float]) -> List[str]:
    """Hard-break a word wider than max_width into pieces that fit."""
    if measure(word) <= max_width:
        return [word]

    pieces = []
    chunk = ""
    for char in word:
        if measure(chunk + char) <= max_width:
            chunk += char
            continue
        if chunk:
            pieces.append(chunk)
        # A single glyph wider than the column cannot be placed
        chunk = char if measure(char) <= max_width else ""
    if chunk:
        pieces.append(chunk)
    return pieces


def layout_page_text(
    text: str,
    page_width: float,
    page_height: float,
    font_size: float = 9.0,
    margin: float = 25.0,
    line_height_factor: float = 1.3,
    paragraph_gap: float = 0.5,
    measure: Optional[Callable[[str], float]] = None
) -> List[PlacedLine]:
    """
    Word-wrap text into lines that fit the page.

    Paragraphs are separated by blank lines and words by whitespace. Words
    are packed greedily while the line stays within page_width - 2 * margin.
    The first baseline sits at page_height - margin and each line moves down
    by font_size * line_height_factor, with an extra paragraph_gap of a line
    between paragraphs. Once the next baseline would fall below margin the
    remaining text is dropped.

    Args:
        text: Translated page text
        page_width: Page width in PDF units
        page_height: Page height in PDF units
        font_size: Font size in points
        margin: Margin on every side in PDF units
        line_height_factor: Line height as a multiple of font size
        paragraph_gap: Extra space between paragraphs, in line heights
        measure: Width function for a string; defaults to Helvetica metrics

    Returns:
        Placed lines, top to bottom
    """
    if measure is None:
        measure = partial(measure_text, font_name="helv", font_size=font_size)

    max_width = page_width - 2 * margin
    line_height = font_size * line_height_factor
    y = page_height - margin
    placed: List[PlacedLine] = []

    if not text or not text.strip() or max_width <= 0:
        return placed

    def emit(line: str) -> bool:
        nonlocal y
        if y < margin:
            return False
        placed.append(PlacedLine(text=line, x=margin, y=y, width=measure(line)))
        y -= line_height
        return True

    for paragraph in PARAGRAPH_BREAK.split(text):
        words = []
        for word in paragraph.split():
            words.extend(_split_long_word(word, max_width, measure))
        if not words:
            continue

        line = ""
        for word in words:
            candidate = f"{line} {word}" if line else word
            if measure(candidate) <= max_width:
                line = candidate
                continue
            if not emit(line):
                logger.debug(f"Truncated overflow after {len(placed)} lines")
                return placed
            line = word

        if line and not emit(line):
            logger.debug(f"Truncated overflow after {len(placed)} lines")
            return placed

        y -= line_height * paragraph_gap

    return placed


# ============================================================================
# Overlay Renderer
# ============================================================================

class OverlayRenderer:
    """Copy the source pages and draw translated text over them."""

    def __init__(
        self,
        font_name: str = "helv",
        font_size: float = 9.0,
        margin: float = 25.0,
        line_height_factor: float = 1.3,
        paragraph_gap: float = 0.5,
        color: Tuple[float, float, float] = (0.0, 0.0, 0.8)
    ):
        self.font_name = font_name
        self.font_size = font_size
        self.margin = margin
        self.line_height_factor = line_height_factor
        self.paragraph_gap = paragraph_gap
        self.color = color

    def measure(self, text: str) -> float:
        return measure_text(text, font_name=self.font_name, font_size=self.font_size)

    def layout(self, text: str, page_width: float, page_height: float) -> List[PlacedLine]:
        return layout_page_text(
            text,
            page_width,
            page_height,
            font_size=self.font_size,
            margin=self.margin,
            line_height_factor=self.line_height_factor,
            paragraph_gap=self.paragraph_gap,
            measure=self.measure
        )

    def render(
        self,
        source_pdf: bytes,
        translated_texts: Sequence[str],
        page_count: Optional[int] = None
    ) -> bytes:
        """
        Build the translated document.

        Args:
            source_pdf: Original PDF bytes (read-only)
            translated_texts: One text per page; empty text leaves the page as is
            page_count: Copy only the first page_count source pages (default: all)

        Returns:
            Output PDF bytes

        Raises:
            DocumentAssemblyError: If the source cannot be loaded or the output written
        """
        import fitz

        try:
            source = fitz.open(stream=source_pdf, filetype="pdf")
        except Exception as e:
            raise DocumentAssemblyError(f"Failed to load source PDF: {e}") from e

        output = fitz.open()
        try:
            if page_count is None:
                output.insert_pdf(source)
            elif page_count > 0:
                output.insert_pdf(source, from_page=0, to_page=page_count - 1)

            for index, page in enumerate(output):
                text = translated_texts[index] if index < len(translated_texts) else ""
                if not text:
                    continue
                drawn = self._draw_page(page, text)
                logger.debug(f"Page {index + 1}: drew {drawn} line(s)")

            data = output.tobytes(garbage=3, deflate=True)
        except Exception as e:
            raise DocumentAssemblyError(f"Failed to assemble translated PDF: {e}") from e
        finally:
            output.close()
            source.close()

        logger.info(f"Assembled translated PDF ({len(data)} bytes)")
        return data

    def _draw_page(self, page, text: str) -> int:
        import fitz

        height = page.rect.height
        lines = self.layout(text, page.rect.width, height)

        for line in lines:
            page.insert_text(
                fitz.Point(line.x, height - line.y),
                line.text,
                fontname=self.font_name,
                fontsize=self.font_size,
                color=self.color,
                overlay=True
            )
        return len(lines)
