"""Displacement map filter.

Each output pixel pulls its value from the target at an offset read from a
color channel of the map:

    out[y, x] = target[y + ((map_y(x, y) - 128) * scale_y) / 256,
                       x + ((map_x(x, y) - 128) * scale_x) / 256]

with division truncating toward zero and source coordinates clamped to the
last valid row/column.
"""

from __future__ import annotations

import logging

import numpy as np

from dispmap.channels import component_plane, is_valid_component
from dispmap.image import OPAQUE_CHANNELS, channels, is_transparent

logger = logging.getLogger(__name__)

NEUTRAL = 128
DIVISOR = 256


def _trunc_div(num: np.ndarray, den: int) -> np.ndarray:
    """Integer division rounding toward zero (numpy's // floors)."""
    q = np.abs(num) // den
    return np.where(num < 0, -q, q)


def displacement_offsets(map_image: np.ndarray, component_x, component_y,
                         scale_x: int, scale_y: int) -> tuple[np.ndarray, np.ndarray]:
    """Per-pixel (x, y) offsets encoded by the map, before clamping."""
    cx = component_plane(map_image, component_x).astype(np.int64)
    cy = component_plane(map_image, component_y).astype(np.int64)
    off_x = _trunc_div((cx - NEUTRAL) * int(scale_x), DIVISOR)
    off_y = _trunc_div((cy - NEUTRAL) * int(scale_y), DIVISOR)
    return off_x, off_y


def displacement_map_filter(map_image: np.ndarray, target: np.ndarray,
                            component_x, component_y,
                            scale_x: int, scale_y: int,
                            out: np.ndarray | None = None) -> np.ndarray | None:
    """Displace the pixels of target (BGRA) using the colors of map_image (BGR).

    Returns the remapped image, or None when the inputs are rejected; in that
    case the error is logged and `out`, if given, is left untouched. `out` is
    reused when it has target's shape and dtype, otherwise a new buffer is
    allocated.
    """
    if not (is_valid_component(component_x) and is_valid_component(component_y)):
        logger.error("displacement_map_filter: component_x and component_y "
                     "must be in range [0,2], got %r and %r", component_x, component_y)
        return None

    if map_image.shape[:2] != target.shape[:2] or not is_transparent(target):
        logger.error("displacement_map_filter: map and target need to have the same "
                     "dimensions and target must be 4-channel uint8 "
                     "(map %s, target %s)", map_image.shape, target.shape)
        return None

    if channels(map_image) != OPAQUE_CHANNELS:
        logger.error("displacement_map_filter: map must have %d channels, got %d",
                     OPAQUE_CHANNELS, channels(map_image))
        return None

    h, w = target.shape[:2]
    off_x, off_y = displacement_offsets(map_image, component_x, component_y,
                                        scale_x, scale_y)
    yy, xx = np.mgrid[0:h, 0:w]
    src_x = np.clip(xx + off_x, 0, w - 1)
    src_y = np.clip(yy + off_y, 0, h - 1)

    if out is None or out.shape != target.shape or out.dtype != target.dtype:
        out = np.empty_like(target)
    # fancy indexing copies before assignment, so out may alias target
    out[...] = target[src_y, src_x]
    return out
