"""Animated preview: slide a target-sized window across the map, displace the
target through it and composite the result over the window.

Usage: python -m dispmap.animation [map.jpg] [target.png] [--scale-x 20] [--step 3] [--snapshot out.png]
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Iterator, Protocol

import numpy as np

from dispmap.composite import overlay_image
from dispmap.errors import DispmapError, FormatError
from dispmap.image import Point, crop, describe, is_transparent, load_image, save_image
from dispmap.params import FilterParams, read_params
from dispmap.remap import displacement_map_filter

logger = logging.getLogger(__name__)


class FrameSink(Protocol):
    """Where frames go: a window, or a recorder in tests."""
    def show(self, frame: np.ndarray) -> None: ...

    def wait_key(self, timeout_ms: int) -> int | None: ...

    def close(self) -> None: ...


def validate_inputs(map_image: np.ndarray, target: np.ndarray) -> None:
    """Startup checks; raises FormatError."""
    if not is_transparent(target):
        raise FormatError("A PNG image with transparent layer is required "
                          f"(target is {describe(target)})")
    mh, mw = map_image.shape[:2]
    th, tw = target.shape[:2]
    if tw > mw or th > mh:
        raise FormatError(f"Target needs to have smaller dimensions than map "
                          f"(target {tw}x{th}, map {mw}x{mh})")


def window_offsets(map_width: int, target_width: int, step: int) -> Iterator[int]:
    """Horizontal crop offsets; the first window is always produced."""
    offset = 0
    while True:
        yield offset
        offset += step
        if map_width - target_width <= offset:
            return


def render_frame(map_image: np.ndarray, target: np.ndarray, offset_x: int,
                 params: FilterParams) -> np.ndarray:
    th, tw = target.shape[:2]
    cropped = crop(map_image, offset_x, 0, tw, th)
    displaced = displacement_map_filter(cropped, target,
                                        params.component_x, params.component_y,
                                        params.scale_x, params.scale_y)
    if displaced is None:
        return cropped.copy()
    frame = overlay_image(cropped, displaced, Point(0, 0))
    return frame if frame is not None else cropped.copy()


class Animator:
    """Owns the sliding window offset and drives one frame at a time."""

    def __init__(self, map_image: np.ndarray, target: np.ndarray,
                 sink: FrameSink, params: FilterParams | None = None):
        self.map_image = map_image
        self.target = target
        self.sink = sink
        self.params = params or FilterParams()
        self.offset_x = 0
        self.frame_count = 0

    def run(self) -> int:
        """Play until the map is exhausted or the quit key is pressed."""
        p = self.params
        try:
            for offset in window_offsets(self.map_image.shape[1], self.target.shape[1], p.step):
                self.offset_x = offset
                frame = render_frame(self.map_image, self.target, offset, p)
                self.sink.show(frame)
                self.frame_count += 1
                key = self.sink.wait_key(p.delay_ms)
                if key == p.quit_key:
                    logger.info("Quit requested at offset %d", offset)
                    break
        finally:
            self.sink.close()
        return self.frame_count


def _parse_args(argv):
    parser = argparse.ArgumentParser(description="Displacement map filter preview")
    parser.add_argument("map", nargs="?", default=None, help="Opaque map image (default map.jpg)")
    parser.add_argument("target", nargs="?", default=None,
                        help="Target image with alpha channel (default target.png)")
    parser.add_argument("--config", type=str, default=None, metavar="FILE",
                        help="JSON file with filter parameters")
    parser.add_argument("--component-x", default=None, help="Map channel for x: blue, green, red or 0-2")
    parser.add_argument("--component-y", default=None, help="Map channel for y: blue, green, red or 0-2")
    parser.add_argument("--scale-x", type=int, default=None)
    parser.add_argument("--scale-y", type=int, default=None)
    parser.add_argument("--step", type=int, default=None, help="Window advance per frame in pixels")
    parser.add_argument("--delay", type=int, default=None, help="Milliseconds between frames")
    parser.add_argument("--snapshot", type=str, default=None, metavar="FILE",
                        help="Render the first frame to FILE and exit")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")

    try:
        params = read_params(args.config) if args.config else FilterParams()
        params = params.with_overrides(
            map_path=args.map, target_path=args.target,
            component_x=args.component_x, component_y=args.component_y,
            scale_x=args.scale_x, scale_y=args.scale_y,
            step=args.step, delay_ms=args.delay,
        )
        params.validate()
        map_image = load_image(params.map_path)
        target = load_image(params.target_path, keep_alpha=True)
        validate_inputs(map_image, target)
    except DispmapError as e:
        print(f"ERROR: {e}")
        return -1

    if args.snapshot:
        frame = render_frame(map_image, target, 0, params)
        try:
            save_image(frame, args.snapshot)
        except (OSError, ValueError) as e:
            print(f"ERROR: could not write {args.snapshot}: {e}")
            return -1
        print(f"Snapshot -> {args.snapshot}")
        return 0

    from dispmap.display import PygameDisplay
    display = PygameDisplay(params.title, params.quit_key)
    print("Press ESC to quit")
    frames = Animator(map_image, target, display, params).run()
    logger.info("Displayed %d frames", frames)
    return 0


if __name__ == "__main__":
    sys.exit(main())
