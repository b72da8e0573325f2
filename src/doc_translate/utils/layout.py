"""
Line reconstruction for the translation pipeline.

Groups recognized words into reading-order lines using the vertical
position of each word's top edge. Works from flat word lists so it does not
depend on an OCR engine's own line grouping.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

logger = logging.getLogger(__name__)

DEFAULT_LINE_TOLERANCE = 10


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class BoundingBox:
    """Axis-aligned box in raster pixel coordinates."""
    x0: float
    y0: float
    x1: float
    y1: float

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    @property
    def height(self) -> float:
        return self.y1 - self.y0

    def to_tuple(self) -> Tuple[float, float, float, float]:
        return (self.x0, self.y0, self.x1, self.y1)

    @classmethod
    def from_xywh(cls, x: float, y: float, w: float, h: float) -> 'BoundingBox':
        return cls(x, y, x + w, y + h)

    @classmethod
    def union(cls, boxes: Sequence['BoundingBox']) -> 'BoundingBox':
        """Coordinate-wise min/max over boxes."""
        if not boxes:
            raise ValueError("Cannot take the union of zero boxes")
        return cls(
            min(b.x0 for b in boxes),
            min(b.y0 for b in boxes),
            max(b.x1 for b in boxes),
            max(b.y1 for b in boxes),
        )


# ============================================================================
# Line Reconstruction
# ============================================================================

def reconstruct_lines(words: Sequence, tolerance: float = DEFAULT_LINE_TOLERANCE) -> List:
    """
    Group words into lines by top-edge proximity.

    Words are stably sorted by bbox.y0. Walking that order, a new line starts
    whenever a word's y0 differs from the previous word's y0 by more than
    tolerance. Within a line words keep the order in which they were
    encountered; they are not re-sorted horizontally.

    Args:
        words: OCRWord-like objects with text, confidence and bbox
        tolerance: Maximum y0 gap, in pixels, between consecutive words of a line

    Returns:
        List of OCRLine, top to bottom
    """
    from .ocr_text import OCRLine

    if not words:
        return []

    ordered = sorted(words, key=lambda w: w.bbox.y0)

    groups: List[List] = []
    current: List = []
    previous_y0 = None

    for word in ordered:
        if previous_y0 is not None and abs(word.bbox.y0 - previous_y0) > tolerance:
            groups.append(current)
            current = []
        current.append(word)
        previous_y0 = word.bbox.y0

    if current:
        groups.append(current)

    lines = [OCRLine.from_words(group) for group in groups]
    logger.debug(f"Reconstructed {len(lines)} line(s) from {len(words)} word(s)")
    return lines


def apply_line_reconstruction(result, tolerance: float = DEFAULT_LINE_TOLERANCE):
    """
    Fill an OCRResult's lines and text from its words.

    Text is the newline-joined line texts; when there are no lines the
    engine's flat text is kept.
    """
    result.lines = reconstruct_lines(result.words, tolerance)
    if result.lines:
        result.text = "\n".join(line.text for line in result.lines)
    else:
        result.text = result.raw_text or ""
    return result
