#!/usr/bin/env python
"""
HTTP API for the Scanned PDF Translation Pipeline.

Run with:
    doc-translate-server

Endpoints:
- POST /api/translate          multipart upload (field "file", PDF only)
- GET  /api/download/<job_id>  translated PDF for a finished job
"""

import io
import logging

from flask import Flask, jsonify, request, send_file

from doc_translate.config import get_config
from doc_translate.utils.assembler import DocumentTranslator
from doc_translate.utils.cache import JobCache

logger = logging.getLogger(__name__)

PDF_MIMETYPE = "application/pdf"


def create_app(config=None, pipeline=None, cache=None) -> Flask:
    """
    Build the Flask application.

    Args:
        config: PipelineConfig (defaults to get_config())
        pipeline: object with translate_document(pdf_bytes, filename)
        cache: JobCache holding finished jobs

    Returns:
        Configured Flask app
    """
    config = config or get_config()
    pipeline = pipeline or DocumentTranslator(config)
    if cache is None:
        cache = JobCache(
            ttl_seconds=config.cache.ttl_seconds,
            schedule_eviction=config.cache.schedule_eviction
        )

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = config.server.max_upload_mb * 1024 * 1024
    app.extensions["job_cache"] = cache

    @app.post("/api/translate")
    def translate():
        upload = request.files.get("file")
        if upload is None:
            return jsonify({"error": "No file uploaded"}), 400

        if upload.mimetype != PDF_MIMETYPE:
            return jsonify({"error": "File must be a PDF"}), 400

        filename = upload.filename or "upload.pdf"
        logger.info(f"Starting translation process for {filename}...")

        try:
            job = pipeline.translate_document(upload.read(), filename=filename)
        except Exception as e:
            logger.exception(f"Translation error: {e}")
            return jsonify({"error": str(e) or "Translation failed"}), 500

        cache.insert(job)

        return jsonify({
            "jobId": job.job_id,
            "filename": filename,
            "pages": len(job.extracted_texts),
            "extractedTexts": job.extracted_texts,
            "translatedTexts": job.translated_texts,
        })

    @app.get("/api/download/<job_id>")
    def download(job_id: str):
        job = cache.lookup(job_id)
        if job is None:
            return jsonify({"error": "Translation job not found or expired"}), 404

        return send_file(
            io.BytesIO(job.document_bytes),
            mimetype=PDF_MIMETYPE,
            as_attachment=True,
            download_name=config.server.download_filename
        )

    @app.errorhandler(413)
    def too_large(_):
        return jsonify({
            "error": f"File exceeds {config.server.max_upload_mb} MB upload limit"
        }), 413

    return app


def main():
    """Run the development server."""
    config = get_config()
    app = create_app(config)
    app.run(host=config.server.host, port=config.server.port, debug=config.debug_mode)


if __name__ == "__main__":
    main()
