"""
Tests for PDF loading, geometry and rasterization.
"""

import pytest
import json
import math
import shutil
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from conftest import make_pdf


class TestRasterScale:
    """Test resolution selection."""

    def test_default_is_target_over_base(self):
        from doc_translate.utils.io import compute_raster_scale

        scale = compute_raster_scale(595, 842, target_dpi=380, base_dpi=72, max_pixels=10**9)

        assert scale == pytest.approx(380 / 72)

    def test_large_page_is_capped(self):
        from doc_translate.utils.io import compute_raster_scale, raster_size

        scale = compute_raster_scale(2000, 3000, target_dpi=380, base_dpi=72, max_pixels=25_000_000)
        width, height = raster_size(2000, 3000, scale)

        assert scale < 380 / 72
        assert width * height <= 25_000_000
        assert width * height > 0.99 * 25_000_000

    def test_cap_preserves_aspect_ratio(self):
        from doc_translate.utils.io import compute_raster_scale, raster_size

        scale = compute_raster_scale(1000, 4000, max_pixels=1_000_000)
        width, height = raster_size(1000, 4000, scale)

        assert height / width == pytest.approx(4.0, rel=0.01)

    def test_page_at_exact_cap_is_untouched(self):
        from doc_translate.utils.io import compute_raster_scale

        scale = compute_raster_scale(100, 100, target_dpi=144, base_dpi=72, max_pixels=40_000)

        assert scale == pytest.approx(2.0)

    @pytest.mark.parametrize("size", [(0, 842), (595, 0), (-1, 10)])
    def test_invalid_size(self, size):
        from doc_translate.utils.io import compute_raster_scale

        with pytest.raises(ValueError):
            compute_raster_scale(*size)

    def test_raster_size_floors(self):
        from doc_translate.utils.io import raster_size

        assert raster_size(10.9, 20.5, 1.0) == (10, 20)
        assert raster_size(0.1, 0.1, 1.0) == (1, 1)


class TestPdfLoading:

    def test_is_pdf_bytes(self):
        from doc_translate.utils.io import is_pdf_bytes

        assert is_pdf_bytes(make_pdf(1))
        assert not is_pdf_bytes(b"PK\x03\x04 zip file")
        assert not is_pdf_bytes(b"")

    def test_load_pdf_bytes(self, tmp_path):
        from doc_translate.utils.io import load_pdf_bytes

        path = tmp_path / "scan.pdf"
        path.write_bytes(make_pdf(1))

        assert load_pdf_bytes(path) == path.read_bytes()

    def test_load_missing_file(self, tmp_path):
        from doc_translate.utils.io import load_pdf_bytes

        with pytest.raises(FileNotFoundError):
            load_pdf_bytes(tmp_path / "missing.pdf")

    def test_load_non_pdf(self, tmp_path):
        from doc_translate.utils.io import load_pdf_bytes

        path = tmp_path / "notes.pdf"
        path.write_text("just text")

        with pytest.raises(ValueError):
            load_pdf_bytes(path)

    def test_read_page_geometry(self):
        from doc_translate.utils.io import read_page_geometry

        pages = read_page_geometry(make_pdf(2, width=300, height=400))

        assert [(p.index, p.width, p.height) for p in pages] == [(0, 300, 400), (1, 300, 400)]

    def test_read_page_geometry_invalid(self):
        from doc_translate.utils.io import read_page_geometry, DocumentAssemblyError

        with pytest.raises(DocumentAssemblyError):
            read_page_geometry(b"garbage bytes")


class TestSaveJson:

    def test_save_json_handles_dataclasses(self, tmp_path):
        from doc_translate.utils.io import save_json, PageInfo

        out = save_json({"page": PageInfo(0, 595.0, 842.0)}, tmp_path / "nested" / "out.json")

        data = json.loads(Path(out).read_text(encoding="utf-8"))
        assert data["page"] == {"index": 0, "width": 595.0, "height": 842.0}


@pytest.mark.skipif(shutil.which("pdftoppm") is None, reason="Poppler not installed")
class TestRasterizePage:

    def test_renders_requested_size(self):
        from doc_translate.utils.io import rasterize_page, read_page_geometry, raster_size

        pdf = make_pdf(2, width=200, height=300)
        page = read_page_geometry(pdf)[1]

        raster = rasterize_page(pdf, page, target_dpi=144, base_dpi=72)

        assert raster.scale == pytest.approx(2.0)
        assert (raster.width, raster.height) == raster_size(200, 300, 2.0)
        assert raster.image.shape == (raster.height, raster.width, 3)
        assert math.isclose(raster.width / raster.height, 200 / 300, rel_tol=0.01)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
