"""Image loading, cropping and format helpers.

Images are uint8 numpy arrays of shape (H, W, C) in BGR (C=3) or BGRA (C=4)
order, so channel indices line up with dispmap.channels.Channel.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from PIL import Image, UnidentifiedImageError

from dispmap.errors import FormatError, LoadError

logger = logging.getLogger(__name__)

OPAQUE_CHANNELS = 3
TRANSPARENT_CHANNELS = 4

_ALPHA_MODES = ("RGBA", "LA", "PA", "RGBa", "La")


@dataclass(frozen=True)
class Point:
    """Integer offset of one image's origin over another. x = column, y = row."""
    x: int = 0
    y: int = 0


def channels(image: np.ndarray) -> int:
    return image.shape[2] if image.ndim == 3 else 1


def is_opaque(image: np.ndarray) -> bool:
    return image.ndim == 3 and image.shape[2] == OPAQUE_CHANNELS


def is_transparent(image: np.ndarray) -> bool:
    return image.ndim == 3 and image.shape[2] == TRANSPARENT_CHANNELS and image.dtype == np.uint8


def describe(image: np.ndarray) -> str:
    h, w = image.shape[:2]
    return f"{w}x{h} channels:{channels(image)}"


def _has_alpha(img: Image.Image) -> bool:
    return img.mode in _ALPHA_MODES or "transparency" in img.info


def load_image(path: str, keep_alpha: bool = False) -> np.ndarray:
    """Load an image file as BGR, or BGRA when keep_alpha and it has alpha.

    With keep_alpha=True an image without an alpha band still comes back as
    3-channel BGR, so callers can reject it instead of getting a fake alpha.
    """
    try:
        with Image.open(path) as img:
            if keep_alpha and _has_alpha(img):
                rgba = np.asarray(img.convert("RGBA"))
                data = rgba[:, :, [2, 1, 0, 3]]
            else:
                data = np.asarray(img.convert("RGB"))[:, :, ::-1]
    except FileNotFoundError:
        raise LoadError(f"image not found: {path}") from None
    except (UnidentifiedImageError, OSError) as e:
        raise LoadError(f"cannot decode image {path}: {e}") from e

    data = np.ascontiguousarray(data, dtype=np.uint8)
    logger.info("%s size: %s", path, describe(data))
    return data


def save_image(image: np.ndarray, path: str) -> None:
    """Write a BGR or BGRA image to disk (format chosen by extension)."""
    if is_opaque(image):
        Image.fromarray(np.ascontiguousarray(image[:, :, ::-1]), "RGB").save(path)
    elif is_transparent(image):
        Image.fromarray(np.ascontiguousarray(image[:, :, [2, 1, 0, 3]]), "RGBA").save(path)
    else:
        raise FormatError(f"cannot save image with {channels(image)} channels")


def bgr_to_rgb(image: np.ndarray) -> np.ndarray:
    """Color channels in RGB order; alpha, if any, is dropped."""
    return image[:, :, 2::-1]


def crop(image: np.ndarray, x: int, y: int, width: int, height: int) -> np.ndarray:
    """Rectangular view into image; shares storage with it."""
    h, w = image.shape[:2]
    if x < 0 or y < 0 or width <= 0 or height <= 0 or x + width > w or y + height > h:
        raise FormatError(
            f"crop ({x}, {y}, {width}x{height}) does not fit in {w}x{h} image")
    return image[y:y + height, x:x + width]
