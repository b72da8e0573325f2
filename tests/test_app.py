"""
Tests for the HTTP API.
"""

import pytest
import io
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from conftest import (
    make_pdf, make_words, ScriptedEngine, FakeTranslator,
    fake_rasterizer, scripted_engine_factory
)


class ExplodingPipeline:

    def translate_document(self, pdf_bytes, filename="document.pdf"):
        raise RuntimeError("OCR engine unavailable")


class FakeClock:

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(pipeline_config, clock):
    from doc_translate.utils.cache import JobCache

    cache = JobCache(ttl_seconds=pipeline_config.cache.ttl_seconds, clock=clock, schedule_eviction=False)
    yield cache
    cache.close()


@pytest.fixture
def client(pipeline_config, cache):
    from doc_translate.app import create_app
    from doc_translate.utils.assembler import DocumentTranslator

    engine = ScriptedEngine([
        make_words(("অসম", 90, 10, 10), ("এখন", 90, 60, 11), ("সুন্দৰ", 90, 10, 40), ("ৰাজ্য", 90, 90, 41))
    ])
    pipeline = DocumentTranslator(
        pipeline_config,
        translator=FakeTranslator(result="Assam is a beautiful state"),
        engine_factory=scripted_engine_factory(engine),
        rasterizer=fake_rasterizer
    )
    app = create_app(pipeline_config, pipeline=pipeline, cache=cache)
    app.testing = True
    return app.test_client()


def upload(client, data, filename="scan.pdf", content_type="application/pdf"):
    return client.post(
        "/api/translate",
        data={"file": (io.BytesIO(data), filename, content_type)},
        content_type="multipart/form-data"
    )


class TestTranslateEndpoint:

    def test_missing_file(self, client):
        response = client.post("/api/translate", data={}, content_type="multipart/form-data")

        assert response.status_code == 400
        assert response.get_json() == {"error": "No file uploaded"}

    def test_wrong_type(self, client):
        response = upload(client, b"hello", filename="notes.txt", content_type="text/plain")

        assert response.status_code == 400
        assert response.get_json() == {"error": "File must be a PDF"}

    def test_success(self, client, cache):
        response = upload(client, make_pdf(1))

        assert response.status_code == 200
        body = response.get_json()
        assert body["filename"] == "scan.pdf"
        assert body["pages"] == 1
        assert body["extractedTexts"] == ["অসম এখন\nসুন্দৰ ৰাজ্য"]
        assert body["translatedTexts"] == ["Assam is a beautiful state"]
        assert body["jobId"] in cache

    def test_pipeline_error(self, pipeline_config, cache):
        from doc_translate.app import create_app

        app = create_app(pipeline_config, pipeline=ExplodingPipeline(), cache=cache)
        response = upload(app.test_client(), make_pdf(1))

        assert response.status_code == 500
        assert response.get_json() == {"error": "OCR engine unavailable"}
        assert len(cache) == 0


class TestDownloadEndpoint:

    def test_download(self, client):
        import fitz

        job_id = upload(client, make_pdf(1)).get_json()["jobId"]

        response = client.get(f"/api/download/{job_id}")

        assert response.status_code == 200
        assert response.mimetype == "application/pdf"
        assert "translated_english.pdf" in response.headers["Content-Disposition"]

        doc = fitz.open(stream=response.data, filetype="pdf")
        try:
            assert doc.page_count == 1
            assert "Assam is a beautiful state" in doc[0].get_text()
        finally:
            doc.close()

    def test_unknown_job(self, client):
        response = client.get("/api/download/does-not-exist")

        assert response.status_code == 404
        assert response.get_json() == {"error": "Translation job not found or expired"}

    def test_expired_job(self, client, clock, pipeline_config):
        job_id = upload(client, make_pdf(1)).get_json()["jobId"]

        clock.now += pipeline_config.cache.ttl_seconds

        response = client.get(f"/api/download/{job_id}")

        assert response.status_code == 404


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
