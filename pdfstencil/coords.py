"""Screen-pixel <-> page-relative rectangle conversion.

Rectangles drawn over a rendered page are stored as fractions of the page
width/height measured from the top-left corner, so they stay valid at any
render resolution. These helpers are pure; a container with a zero dimension
is "not ready" and callers must skip the conversion (see ``container_ready``).
"""

from __future__ import annotations

from typing import NamedTuple

MIN_DRAG_PX = 8


class PixelRect(NamedTuple):
    x: float
    y: float
    width: float
    height: float


class NormalizedRect(NamedTuple):
    x: float
    y: float
    width: float
    height: float


class ContainerSize(NamedTuple):
    width: float
    height: float


class Point(NamedTuple):
    x: float
    y: float


def container_ready(size: ContainerSize) -> bool:
    return size.width > 0 and size.height > 0


def to_normalized(rect: PixelRect, size: ContainerSize) -> NormalizedRect:
    return NormalizedRect(
        x=rect.x / size.width,
        y=rect.y / size.height,
        width=rect.width / size.width,
        height=rect.height / size.height,
    )


def to_pixels(rect: NormalizedRect, size: ContainerSize) -> PixelRect:
    return PixelRect(
        x=rect.x * size.width,
        y=rect.y * size.height,
        width=rect.width * size.width,
        height=rect.height * size.height,
    )


def rect_from_drag(start: Point, end: Point) -> PixelRect:
    """Turn two drag points (in any order) into a positive-size rectangle."""
    x1, x2 = min(start.x, end.x), max(start.x, end.x)
    y1, y2 = min(start.y, end.y), max(start.y, end.y)
    return PixelRect(x1, y1, x2 - x1, y2 - y1)


def is_noop_drag(rect: PixelRect, min_size: float = MIN_DRAG_PX) -> bool:
    """A drag is accepted only when both sides are strictly larger than ``min_size``."""
    return not (rect.width > min_size and rect.height > min_size)


def apply_drag(
    rect: PixelRect,
    mode: str,
    dx: float,
    dy: float,
    size: ContainerSize,
    min_size: float = MIN_DRAG_PX,
) -> PixelRect:
    """Move or resize ``rect`` by a mouse delta, keeping it inside the container.

    ``mode`` is ``"move"`` or one of the corner handles ``"nw"``, ``"ne"``,
    ``"se"``, ``"sw"``. Unknown modes leave the rectangle where it is (but
    still clamped).
    """
    x, y, width, height = rect

    if mode == "move":
        x += dx
        y += dy
    elif mode == "se":
        width = max(min_size, width + dx)
        height = max(min_size, height + dy)
    elif mode == "nw":
        x += dx
        y += dy
        width = max(min_size, width - dx)
        height = max(min_size, height - dy)
    elif mode == "ne":
        y += dy
        width = max(min_size, width + dx)
        height = max(min_size, height - dy)
    elif mode == "sw":
        x += dx
        width = max(min_size, width - dx)
        height = max(min_size, height + dy)

    if x < 0:
        x = 0
    if y < 0:
        y = 0
    if x + width > size.width:
        x = size.width - width
    if y + height > size.height:
        y = size.height - height

    return PixelRect(x, y, max(min_size, width), max(min_size, height))
