"""Displacement map filter with an animated preview."""

from dispmap.channels import Channel, get_component
from dispmap.composite import overlay_image
from dispmap.image import Point
from dispmap.remap import displacement_map_filter

__all__ = ["Channel", "Point", "displacement_map_filter", "get_component", "overlay_image"]
