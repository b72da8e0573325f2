"""
Translation module for the translation pipeline.

Provides:
- HTTP client for a hosted translation model (Hugging Face Inference API)
- Source text cleanup before translation
- Per-page dispatch with failure isolation
"""

import logging
import re
import requests
from dataclasses import dataclass
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)

FAILURE_MARKER = "[Translation failed"


class TranslationError(Exception):
    """The translation service returned an error or an unusable response."""


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class TranslationUnit:
    """Text submitted for translation and the outcome."""
    source_text: str
    translated_text: str
    status: str = "success"  # success, skipped, failed
    error: Optional[str] = None

    @property
    def is_failed(self) -> bool:
        return self.status == "failed"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "translated_text": self.translated_text,
            "status": self.status,
            "error": self.error
        }


def failure_placeholder(error: Any) -> str:
    """Visible marker that stands in for a page's failed translation."""
    return f"{FAILURE_MARKER}: {error}]"


# ============================================================================
# Text Cleanup
# ============================================================================

def clean_source_text(text: str) -> str:
    """
    Strip markdown artefacts an OCR engine may emit.

    Removes heading markers, bold/italic asterisks, link targets and
    backticks; keeps line structure.
    """
    text = re.sub(r'^#+\s*', '', text, flags=re.MULTILINE)
    text = text.replace('**', '').replace('*', '')
    text = re.sub(r'\[([^\]]+)\]\([^)]+\)', r'\1', text)
    text = text.replace('`', '')
    return text.strip()


# ============================================================================
# Hugging Face Translator
# ============================================================================

class HuggingFaceTranslator:
    """Translation using a model hosted on the Hugging Face Inference API."""

    DEFAULT_URL = (
        "https://api-inference.huggingface.co/models/ai4bharat/indictrans2-indic-en-1B"
    )

    def __init__(
        self,
        api_url: str = DEFAULT_URL,
        source_lang: str = "asm_Beng",
        target_lang: str = "eng_Latn",
        api_token: Optional[str] = None,
        timeout: float = 60.0,
        session: Optional[requests.Session] = None
    ):
        self.api_url = api_url
        self.source_lang = source_lang
        self.target_lang = target_lang
        self.api_token = api_token
        self.timeout = timeout
        self.session = session or requests.Session()

    def translate(self, text: str) -> str:
        """
        Translate text with the configured language pair.

        Raises:
            TranslationError: On a non-success status or unknown response format
            requests.exceptions.RequestException: On network failure or timeout
        """
        if not text or not text.strip():
            return ""

        headers = {"Content-Type": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"

        data = {
            "inputs": text,
            "parameters": {
                "src_lang": self.source_lang,
                "tgt_lang": self.target_lang
            }
        }

        response = self.session.post(
            self.api_url,
            headers=headers,
            json=data,
            timeout=self.timeout
        )

        if not response.ok:
            logger.error(
                f"Translation API error: {response.status_code} "
                f"{response.reason} {response.text[:200]}"
            )
            raise TranslationError(
                f"Translation failed: {response.status_code} - {response.text}"
            )

        return self.parse_response(response.json())

    @staticmethod
    def parse_response(result: Any) -> str:
        """Extract the translated text from the known response shapes."""
        if isinstance(result, list) and result:
            first = result[0]
            if isinstance(first, dict) and first.get("translation_text"):
                return first["translation_text"]
        elif isinstance(result, dict) and isinstance(result.get("generated_text"), str):
            return result["generated_text"]
        elif isinstance(result, str):
            return result

        logger.error(f"Unexpected API response format: {str(result)[:200]}")
        raise TranslationError("Invalid translation response format")


# ============================================================================
# Per-page Dispatch
# ============================================================================

class TranslationDispatcher:
    """
    Sends one page's text to a translator and records the outcome.

    Pages with too little text are skipped without calling the translator.
    Failures become a visible placeholder so the job can continue.
    """

    def __init__(self, translator, min_chars: int = 10):
        self.translator = translator
        self.min_chars = min_chars

    def dispatch(self, text: str, page_number: int = 1) -> TranslationUnit:
        text = text or ""
        char_count = len(text.strip())

        if char_count <= self.min_chars:
            logger.info(f"Page {page_number} has insufficient text ({char_count} chars)")
            return TranslationUnit(source_text=text, translated_text="", status="skipped")

        cleaned = clean_source_text(text)
        logger.info(f"Page {page_number}: translating {len(cleaned)} chars")

        try:
            translated = self.translator.translate(cleaned)
        except (TranslationError, requests.exceptions.RequestException, ValueError) as e:
            logger.error(f"Translation failed for page {page_number}: {e}")
            return TranslationUnit(
                source_text=cleaned,
                translated_text=failure_placeholder(e),
                status="failed",
                error=str(e)
            )

        logger.debug(f"Page {page_number} translation: {translated[:200]}")
        return TranslationUnit(source_text=cleaned, translated_text=translated)
