"""Color channel selection for BGR pixels."""

from __future__ import annotations

import logging
from enum import IntEnum

import numpy as np

from dispmap.errors import ParameterError

logger = logging.getLogger(__name__)

_ALIASES = {"b": "BLUE", "g": "GREEN", "r": "RED"}


class Channel(IntEnum):
    """Color component of an opaque pixel, valued as its BGR index."""
    BLUE = 0
    GREEN = 1
    RED = 2

    @classmethod
    def parse(cls, value) -> Channel:
        """Accept a Channel, an index 0..2 or a name such as "red" / "r"."""
        if isinstance(value, Channel):
            return value
        if isinstance(value, str):
            name = value.strip()
            if name.isdecimal():
                return cls.parse(int(name))
            name = _ALIASES.get(name.lower(), name.upper())
            try:
                return cls[name]
            except KeyError:
                raise ParameterError(f"unknown channel '{value}'") from None
        if isinstance(value, (int, np.integer)) and not isinstance(value, bool):
            try:
                return cls(int(value))
            except ValueError:
                raise ParameterError(f"channel index {value} is not in range [0,2]") from None
        raise ParameterError(f"cannot interpret {value!r} as a channel")


def is_valid_component(component) -> bool:
    if isinstance(component, bool):
        return False
    return isinstance(component, (int, np.integer)) and 0 <= component <= 2


def get_component(pixel, component) -> int:
    """Return one component of a BGR pixel, or 0 for an invalid selector."""
    if not is_valid_component(component):
        logger.error("get_component: %r is not a valid component", component)
        return 0
    return int(pixel[int(component)])


def component_plane(image: np.ndarray, component) -> np.ndarray:
    """The 2-D plane of one color channel (a view, not a copy)."""
    return image[:, :, int(component)]
