"""
Tests for bounding boxes and line reconstruction.
"""

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from conftest import make_words


class TestBoundingBox:
    """Test BoundingBox class."""

    def test_bbox_properties(self):
        """Test bounding box computed properties."""
        from doc_translate.utils.layout import BoundingBox

        bbox = BoundingBox(10, 20, 110, 70)

        assert bbox.width == 100
        assert bbox.height == 50
        assert bbox.to_tuple() == (10, 20, 110, 70)

    def test_bbox_from_xywh(self):
        """Test creation from x, y, width, height."""
        from doc_translate.utils.layout import BoundingBox

        bbox = BoundingBox.from_xywh(10, 20, 100, 50)

        assert bbox.to_tuple() == (10, 20, 110, 70)

    def test_union(self):
        from doc_translate.utils.layout import BoundingBox

        merged = BoundingBox.union([
            BoundingBox(10, 20, 50, 40),
            BoundingBox(5, 25, 80, 35),
        ])

        assert merged.to_tuple() == (5, 20, 80, 40)

    def test_union_of_nothing_raises(self):
        from doc_translate.utils.layout import BoundingBox

        with pytest.raises(ValueError):
            BoundingBox.union([])


class TestReconstructLines:
    """Test vertical clustering of words into lines."""

    def test_clusters_by_top_edge(self):
        """Words at y0 10 and 11 share a line; 40 starts a new one."""
        from doc_translate.utils.layout import reconstruct_lines

        words = make_words(("ক", 90, 0, 10), ("খ", 80, 30, 11), ("গ", 70, 0, 40))

        lines = reconstruct_lines(words, tolerance=4)

        assert len(lines) == 2
        assert [w.bbox.y0 for w in lines[0].words] == [10, 11]
        assert [w.bbox.y0 for w in lines[1].words] == [40]
        assert lines[0].text == "ক খ"
        assert lines[1].text == "গ"

    def test_every_word_in_exactly_one_line(self):
        from doc_translate.utils.layout import reconstruct_lines

        words = make_words(
            ("a", 90, 0, 100), ("b", 90, 0, 5), ("c", 90, 0, 52),
            ("d", 90, 0, 7), ("e", 90, 0, 50), ("f", 90, 0, 103),
        )

        lines = reconstruct_lines(words, tolerance=4)
        grouped = [w for line in lines for w in line.words]

        assert len(grouped) == len(words)
        assert all(any(w is g for g in grouped) for w in words)
        assert [line.text for line in lines] == ["b d", "e c", "a f"]

    def test_lines_are_top_to_bottom(self):
        from doc_translate.utils.layout import reconstruct_lines

        words = make_words(("z", 90, 0, 300), ("y", 90, 0, 150), ("x", 90, 0, 10))

        lines = reconstruct_lines(words, tolerance=4)

        assert [line.bbox.y0 for line in lines] == [10, 150, 300]

    def test_stable_order_within_line(self):
        """Equal y0 keeps encounter order; words are not re-sorted by x."""
        from doc_translate.utils.layout import reconstruct_lines

        words = make_words(("second", 90, 200, 20), ("first", 90, 10, 20))

        lines = reconstruct_lines(words, tolerance=4)

        assert len(lines) == 1
        assert lines[0].text == "second first"

    def test_line_confidence_and_bbox(self):
        from doc_translate.utils.layout import reconstruct_lines

        words = make_words(("ab", 90, 0, 10), ("cd", 70, 40, 12))

        line = reconstruct_lines(words, tolerance=4)[0]

        assert line.confidence == pytest.approx(80.0)
        assert line.bbox.to_tuple() == (0, 10, 60, 24)

    def test_chained_drift_stays_on_one_line(self):
        """Each step is compared with the previous word, not the line start."""
        from doc_translate.utils.layout import reconstruct_lines

        words = make_words(("a", 90, 0, 10), ("b", 90, 0, 13), ("c", 90, 0, 16))

        lines = reconstruct_lines(words, tolerance=4)

        assert len(lines) == 1

    def test_empty_input(self):
        from doc_translate.utils.layout import reconstruct_lines

        assert reconstruct_lines([], tolerance=4) == []


class TestApplyLineReconstruction:
    """Test filling an OCRResult from its words."""

    def test_text_is_newline_joined(self):
        from doc_translate.utils.layout import apply_line_reconstruction
        from doc_translate.utils.ocr_text import OCRResult

        result = OCRResult.from_words(make_words(("one", 90, 0, 10), ("two", 90, 0, 60)))

        apply_line_reconstruction(result, tolerance=4)

        assert result.text == "one\ntwo"
        assert len(result.lines) == 2

    def test_no_words_keeps_raw_text(self):
        from doc_translate.utils.layout import apply_line_reconstruction
        from doc_translate.utils.ocr_text import OCRResult

        result = OCRResult(text="", confidence=0.0, raw_text="flat engine text")

        apply_line_reconstruction(result)

        assert result.lines == []
        assert result.text == "flat engine text"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
