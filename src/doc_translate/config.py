"""
Configuration and constants for the scanned-PDF translation pipeline.

This module provides:
- Global logging setup
- Rasterization and preprocessing parameters
- OCR engine selection
- Translation service configuration
- Overlay rendering, job cache and server settings
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple
import logging

# ============================================================================
# Logging Configuration
# ============================================================================

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("doc_translate")


# ============================================================================
# Processing Configuration
# ============================================================================

@dataclass
class RasterConfig:
    """Page rasterization configuration."""
    target_dpi: int = 380
    base_dpi: int = 72  # PDF user space is 72 units per inch
    max_pixels: int = 25_000_000  # Upper bound on width * height of a raster
    thread_count: int = 1


@dataclass
class PreprocessConfig:
    """Variant preprocessing configuration."""
    gamma: float = 1.2
    denoise_strength: int = 10
    contrast_clip_limit: float = 2.0
    contrast_grid_size: int = 8
    sharpen_amount: float = 1.0
    sharpen_sigma: float = 1.0


@dataclass
class OCRConfig:
    """OCR configuration."""
    engine: str = "tesseract"  # tesseract, easyocr
    # Tesseract traineddata code; "asm" = Assamese (Bengali script)
    language: str = "asm"
    tesseract_config: str = "--oem 1 --psm 3"
    use_gpu: bool = False
    # Max difference between word top edges (raster pixels) on one line
    line_tolerance_px: int = 10


@dataclass
class TranslationConfig:
    """Translation service configuration."""
    api_url: str = (
        "https://api-inference.huggingface.co/models/ai4bharat/indictrans2-indic-en-1B"
    )
    api_token: Optional[str] = None
    source_lang: str = "asm_Beng"
    target_lang: str = "eng_Latn"
    timeout: float = 60.0
    # Pages with this many characters or fewer are not sent for translation
    min_chars: int = 10


@dataclass
class RenderConfig:
    """Translated text overlay configuration."""
    font_name: str = "helv"  # PDF base-14 Helvetica
    font_size: float = 9.0
    margin: float = 25.0
    line_height_factor: float = 1.3
    paragraph_gap: float = 0.5  # In units of line height
    color: Tuple[float, float, float] = (0.0, 0.0, 0.8)


@dataclass
class CacheConfig:
    """Finished job cache configuration."""
    ttl_seconds: float = 30 * 60
    schedule_eviction: bool = True


@dataclass
class ServerConfig:
    """HTTP server configuration."""
    host: str = "0.0.0.0"
    port: int = 5000
    max_upload_mb: int = 50
    download_filename: str = "translated_english.pdf"


@dataclass
class PipelineConfig:
    """Main pipeline configuration."""
    raster: RasterConfig = field(default_factory=RasterConfig)
    preprocess: PreprocessConfig = field(default_factory=PreprocessConfig)
    ocr: OCRConfig = field(default_factory=OCRConfig)
    translation: TranslationConfig = field(default_factory=TranslationConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    # Global settings
    debug_mode: bool = False
    max_pages: Optional[int] = None  # None = process all pages


# ============================================================================
# Default Configuration Instance
# ============================================================================

def get_config() -> PipelineConfig:
    """Get the default pipeline configuration with environment overrides."""
    config = PipelineConfig()

    if os.environ.get("DOC_TRANSLATE_DEBUG", "").lower() == "true":
        config.debug_mode = True

    if os.environ.get("DOC_TRANSLATE_OCR_ENGINE"):
        config.ocr.engine = os.environ["DOC_TRANSLATE_OCR_ENGINE"]

    if os.environ.get("DOC_TRANSLATE_OCR_LANG"):
        config.ocr.language = os.environ["DOC_TRANSLATE_OCR_LANG"]

    if os.environ.get("DOC_TRANSLATE_DPI"):
        config.raster.target_dpi = int(os.environ["DOC_TRANSLATE_DPI"])

    if os.environ.get("DOC_TRANSLATE_TRANSLATION_URL"):
        config.translation.api_url = os.environ["DOC_TRANSLATE_TRANSLATION_URL"]

    if os.environ.get("DOC_TRANSLATE_TIMEOUT"):
        config.translation.timeout = float(os.environ["DOC_TRANSLATE_TIMEOUT"])

    if os.environ.get("DOC_TRANSLATE_CACHE_TTL"):
        config.cache.ttl_seconds = float(os.environ["DOC_TRANSLATE_CACHE_TTL"])

    if os.environ.get("PORT"):
        config.server.port = int(os.environ["PORT"])

    # Inference API credentials from environment
    config.translation.api_token = os.environ.get("HF_API_TOKEN")

    return config
