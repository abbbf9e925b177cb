"""Filter and animation parameters, with JSON persistence."""

from __future__ import annotations
from dataclasses import dataclass, asdict, fields, replace
import json
import logging

from dispmap.channels import Channel
from dispmap.errors import ParameterError

logger = logging.getLogger(__name__)

ESC = 27

_INT_FIELDS = ("scale_x", "scale_y", "step", "delay_ms", "quit_key")


@dataclass
class FilterParams:
    """Everything the animated preview needs besides the images themselves."""
    component_x: Channel = Channel.RED
    component_y: Channel = Channel.RED
    scale_x: int = 20
    scale_y: int = 20
    # Pixels the crop window advances per frame
    step: int = 3
    # Wait between frames, also the key polling timeout
    delay_ms: int = 33
    quit_key: int = ESC
    map_path: str = "map.jpg"
    target_path: str = "target.png"
    title: str = "Displacement Map Filter"

    def __post_init__(self):
        self.component_x = Channel.parse(self.component_x)
        self.component_y = Channel.parse(self.component_y)
        for name in _INT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ParameterError(f"{name} must be an integer, got {value!r}")

    def to_dict(self) -> dict:
        d = asdict(self)
        d["component_x"] = self.component_x.name.lower()
        d["component_y"] = self.component_y.name.lower()
        return d

    @classmethod
    def from_dict(cls, d: dict) -> FilterParams:
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in d.items() if k in names})

    def with_overrides(self, **overrides) -> FilterParams:
        """Copy with the given fields replaced; None values are ignored."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def validate(self) -> None:
        if self.step < 1:
            raise ParameterError(f"step must be at least 1, got {self.step}")
        if self.delay_ms < 1:
            raise ParameterError(f"delay_ms must be at least 1, got {self.delay_ms}")


def read_params(path: str) -> FilterParams:
    """Parameters from a JSON file; raises ParameterError if it is unusable."""
    try:
        with open(path) as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ParameterError(f"cannot read parameters from {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ParameterError(f"{path} must hold a JSON object")
    return FilterParams.from_dict(raw)


def load_params(path: str) -> FilterParams:
    """Like read_params, but falls back to defaults."""
    try:
        return read_params(path)
    except ParameterError:
        logger.warning("Could not read parameters from %s, using defaults", path)
        return FilterParams()


def save_params(params: FilterParams, path: str) -> None:
    with open(path, "w") as f:
        json.dump(params.to_dict(), f, indent=2)
