"""Alpha compositing of a BGRA foreground over a BGR background."""

from __future__ import annotations

import logging

import numpy as np

from dispmap.image import Point, is_opaque, is_transparent

logger = logging.getLogger(__name__)


def overlap(bg_shape: tuple, fg_shape: tuple, location: Point) -> tuple[slice, slice, slice, slice] | None:
    """Slices (bg rows, bg cols, fg rows, fg cols) covered by both images, or None."""
    bh, bw = bg_shape[:2]
    fh, fw = fg_shape[:2]
    y0, x0 = max(location.y, 0), max(location.x, 0)
    y1, x1 = min(bh, location.y + fh), min(bw, location.x + fw)
    if y0 >= y1 or x0 >= x1:
        return None
    return (slice(y0, y1), slice(x0, x1),
            slice(y0 - location.y, y1 - location.y), slice(x0 - location.x, x1 - location.x))


def overlay_image(background: np.ndarray, foreground: np.ndarray,
                  location: Point = Point(0, 0)) -> np.ndarray | None:
    """Blend a transparent foreground onto an opaque background.

    The result is a new 3-channel image the size of background. Where the
    foreground is placed (its origin at `location`) each color channel
    becomes bg * (1 - a) + fg * a, truncated, with a = alpha / 255; pixels
    with zero alpha keep the background value. The alpha channel itself is
    never copied to the output.
    """
    if not is_opaque(background) or not is_transparent(foreground):
        logger.error("overlay_image: background must be 3-channel and foreground "
                     "4-channel (background %s, foreground %s)",
                     background.shape, foreground.shape)
        return None

    output = background.copy()
    region = overlap(background.shape, foreground.shape, location)
    if region is None:
        return output

    by, bx, fy, fx = region
    bg = background[by, bx].astype(np.float64)
    fg = foreground[fy, fx]
    opacity = fg[:, :, 3:4].astype(np.float64) / 255.0
    blended = bg * (1.0 - opacity) + fg[:, :, :3].astype(np.float64) * opacity

    visible = opacity[:, :, 0] > 0
    dest = output[by, bx]
    dest[visible] = blended[visible].astype(np.uint8)
    return output
