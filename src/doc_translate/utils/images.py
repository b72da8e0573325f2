"""
Image preprocessing utilities for the translation pipeline.

Provides:
- Grayscale conversion
- Gamma correction
- Denoising (non-local means)
- Sharpening (unsharp mask)
- Contrast enhancement (CLAHE)
- Variant generation for OCR
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple
import numpy as np

logger = logging.getLogger(__name__)


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class PreprocessedVariant:
    """One preprocessed version of a page image submitted for OCR."""
    tag: str
    image: np.ndarray
    status: str = "success"  # success, fallback
    error: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.status == "fallback"


# ============================================================================
# Core Preprocessing Functions
# ============================================================================

def to_grayscale(image: np.ndarray) -> np.ndarray:
    """
    Convert image to grayscale if it's color.

    Args:
        image: Input image (BGR or grayscale)

    Returns:
        Grayscale image (a copy when the input is already gray)
    """
    import cv2

    if len(image.shape) == 2:
        return image.copy()
    elif len(image.shape) == 3:
        if image.shape[2] == 3:
            return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        elif image.shape[2] == 4:
            return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
        elif image.shape[2] == 1:
            return image.squeeze().copy()

    raise ValueError(f"Unexpected image shape: {image.shape}")


def adjust_gamma(image: np.ndarray, gamma: float = 1.2) -> np.ndarray:
    """
    Apply gamma correction through a lookup table.

    gamma > 1 darkens mid-tones, which thickens faint strokes on
    washed-out scans.
    """
    import cv2

    if gamma <= 0:
        raise ValueError(f"Gamma must be positive, got {gamma}")

    table = np.array(
        [((i / 255.0) ** gamma) * 255 for i in range(256)]
    ).clip(0, 255).astype(np.uint8)

    return cv2.LUT(image, table)


def denoise(
    image: np.ndarray,
    strength: int = 10,
    template_window_size: int = 7,
    search_window_size: int = 21
) -> np.ndarray:
    """
    Remove noise from a grayscale image using Non-local Means Denoising.

    Args:
        image: Grayscale image
        strength: Filter strength (higher = more denoising but more blur)
        template_window_size: Size of template patch (should be odd)
        search_window_size: Size of search area (should be odd)

    Returns:
        Denoised image
    """
    import cv2

    denoised = cv2.fastNlMeansDenoising(
        image,
        None,
        strength,
        template_window_size,
        search_window_size
    )

    logger.debug(f"Applied denoising with strength {strength}")
    return denoised


def sharpen(
    image: np.ndarray,
    amount: float = 1.0,
    sigma: float = 1.0
) -> np.ndarray:
    """
    Sharpen with an unsharp mask: image + amount * (image - blurred).

    Args:
        image: Input image
        amount: Weight of the high-frequency detail added back
        sigma: Gaussian blur sigma

    Returns:
        Sharpened image
    """
    import cv2

    blurred = cv2.GaussianBlur(image, (0, 0), sigma)
    sharpened = cv2.addWeighted(image, 1.0 + amount, blurred, -amount, 0)

    logger.debug(f"Applied unsharp mask (amount={amount}, sigma={sigma})")
    return sharpened


def enhance_contrast(
    image: np.ndarray,
    clip_limit: float = 2.0,
    grid_size: int = 8
) -> np.ndarray:
    """
    Enhance grayscale contrast using CLAHE (Contrast Limited Adaptive Histogram Equalization).

    Args:
        image: Grayscale image
        clip_limit: Threshold for contrast limiting
        grid_size: Size of grid for histogram equalization

    Returns:
        Contrast-enhanced image
    """
    import cv2

    clahe = cv2.createCLAHE(
        clipLimit=clip_limit,
        tileGridSize=(grid_size, grid_size)
    )

    enhanced = clahe.apply(image)

    logger.debug(f"Applied CLAHE contrast enhancement (clip={clip_limit})")
    return enhanced


# ============================================================================
# Variant Strategies
# ============================================================================

def grayscale_sharpened(
    image: np.ndarray,
    gamma: float = 1.2,
    denoise_strength: int = 10,
    sharpen_amount: float = 1.0,
    sharpen_sigma: float = 1.0,
    **_
) -> np.ndarray:
    """Grayscale -> gamma -> denoise -> sharpen. Suits clean, faint scans."""
    processed = to_grayscale(image)
    processed = adjust_gamma(processed, gamma)
    processed = denoise(processed, strength=denoise_strength)
    return sharpen(processed, amount=sharpen_amount, sigma=sharpen_sigma)


def adaptive_contrast(
    image: np.ndarray,
    contrast_clip_limit: float = 2.0,
    contrast_grid_size: int = 8,
    sharpen_amount: float = 1.0,
    sharpen_sigma: float = 1.0,
    **_
) -> np.ndarray:
    """Grayscale -> CLAHE -> sharpen. Suits unevenly lit or low-contrast scans."""
    processed = to_grayscale(image)
    processed = enhance_contrast(
        processed,
        clip_limit=contrast_clip_limit,
        grid_size=contrast_grid_size
    )
    return sharpen(processed, amount=sharpen_amount, sigma=sharpen_sigma)


# Order is the selector's tie-break order
VARIANT_STRATEGIES: List[Tuple[str, Callable[..., np.ndarray]]] = [
    ("grayscale-sharpened", grayscale_sharpened),
    ("adaptive-contrast", adaptive_contrast),
]

VARIANT_ORDER: Tuple[str, ...] = tuple(tag for tag, _ in VARIANT_STRATEGIES)


def build_variants(
    image: np.ndarray,
    gamma: float = 1.2,
    denoise_strength: int = 10,
    contrast_clip_limit: float = 2.0,
    contrast_grid_size: int = 8,
    sharpen_amount: float = 1.0,
    sharpen_sigma: float = 1.0
) -> List[PreprocessedVariant]:
    """
    Produce one preprocessed variant per strategy, in VARIANT_ORDER.

    The input image is never modified. When a strategy fails, its variant
    carries the untransformed image with status "fallback" so the page
    still gets recognized.

    Args:
        image: Raster page image (BGR or grayscale)
        gamma: Gamma for the grayscale-sharpened strategy
        denoise_strength: Non-local means strength
        contrast_clip_limit: CLAHE clip limit
        contrast_grid_size: CLAHE grid size
        sharpen_amount: Unsharp mask weight
        sharpen_sigma: Unsharp mask blur sigma

    Returns:
        List of PreprocessedVariant
    """
    params = dict(
        gamma=gamma,
        denoise_strength=denoise_strength,
        contrast_clip_limit=contrast_clip_limit,
        contrast_grid_size=contrast_grid_size,
        sharpen_amount=sharpen_amount,
        sharpen_sigma=sharpen_sigma,
    )

    variants = []
    for tag, strategy in VARIANT_STRATEGIES:
        try:
            processed = strategy(image, **params)
            variants.append(PreprocessedVariant(tag=tag, image=processed))
        except Exception as e:
            logger.warning(f"Variant '{tag}' failed, using untransformed image: {e}")
            variants.append(PreprocessedVariant(
                tag=tag,
                image=image.copy(),
                status="fallback",
                error=str(e)
            ))

    logger.debug(f"Built variants: {', '.join(v.tag for v in variants)}")
    return variants
