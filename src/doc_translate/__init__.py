"""
Scanned PDF Translation Pipeline
================================

Turns a scanned, non-Latin-script PDF into an English PDF that keeps the
original pages as background and overlays the translated text.

Main components:
- Page rasterization with a pixel budget
- Preprocessed image variants (gamma/denoise vs. adaptive contrast)
- Text OCR with best-variant selection
- Line reconstruction from word geometry
- Per-page translation with failure isolation
- Word-wrapped overlay rendering
- Time-limited job cache for downloads
"""

__version__ = "1.0.0"
__author__ = "Document Translation Team"
