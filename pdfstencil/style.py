"""Font size / color cascade: field style -> fill default -> hard default."""

from __future__ import annotations

import logging
import math
import re
from typing import NamedTuple, Optional, Tuple

from .models import FieldStyle

logger = logging.getLogger(__name__)

FALLBACK_FONT_SIZE = 10.0
FALLBACK_COLOR = "#000000"

_HEX6 = re.compile(r"^#?([0-9a-fA-F]{6})$")
_HEX3 = re.compile(r"^#?([0-9a-fA-F]{3})$")

RGB = Tuple[float, float, float]


class ResolvedStyle(NamedTuple):
    font_size: float
    color: str
    rgb: RGB


def hex_to_rgb(color: str) -> Optional[RGB]:
    """``#RRGGBB`` (or ``RRGGBB`` / ``#RGB``) to 0..1 floats; None if unparseable."""
    color = (color or "").strip()
    m = _HEX6.match(color)
    if m:
        h = m.group(1)
    else:
        m = _HEX3.match(color)
        if not m:
            return None
        h = "".join(c * 2 for c in m.group(1))
    return tuple(int(h[i:i + 2], 16) / 255.0 for i in (0, 2, 4))


def _usable_size(size: Optional[float]) -> bool:
    return size is not None and math.isfinite(size) and size > 0


def resolve_style(field_style: Optional[FieldStyle], default_style: Optional[FieldStyle] = None) -> ResolvedStyle:
    font_size = FALLBACK_FONT_SIZE
    color = FALLBACK_COLOR
    rgb: RGB = (0.0, 0.0, 0.0)
    for style in (default_style, field_style):
        if style is None:
            continue
        if _usable_size(style.font_size):
            font_size = float(style.font_size)
        if style.color:
            parsed = hex_to_rgb(style.color)
            if parsed is None:
                logger.warning("Unparseable color %r, keeping %s", style.color, color)
                continue
            color, rgb = style.color, parsed
    return ResolvedStyle(font_size, color, rgb)


def parse_style(font_size_text: str = "", color_text: str = "") -> Optional[FieldStyle]:
    """Build a FieldStyle from free-text inputs; None when neither is usable."""
    try:
        size = float(font_size_text)
    except (TypeError, ValueError):
        size = None
    if size is not None and not math.isfinite(size):
        size = None
    color = (color_text or "").strip()

    if size is None and not color:
        return None
    return FieldStyle(font_size=size, color=color or None)
