"""
Module colours.

Every module label gets a stable dark colour derived from a hash of its text,
so a module keeps its colour across sessions without being configured.
Users may override colours; those overrides live in the session file.
"""

from __future__ import annotations

import colorsys
import math
import re
from typing import Dict, Iterable, Optional, Tuple


_HSL_RE = re.compile(r"^hsl\(\s*(-?\d+(?:\.\d+)?)\s*,\s*(\d+(?:\.\d+)?)%\s*,\s*(\d+(?:\.\d+)?)%\s*\)$")
_HEX_RE = re.compile(r"^#([0-9a-fA-F]{6})$")


def _to_int32(n: int) -> int:
    n &= 0xFFFFFFFF
    return n - 0x100000000 if n & 0x80000000 else n


def color_for_module(label: str) -> str:
    """
    Deterministic 'hsl(h, 50%, 25%)' colour for a module label.

    Uses the classic 32-bit "hash * 31 + char" string hash; the hue keeps
    the sign of the hash, which CSS accepts.
    """
    h = 0
    for ch in label:
        h = ord(ch) + (_to_int32(_to_int32(h) << 5) - h)
    hue = int(math.fmod(h, 360))
    return f"hsl({hue}, 50%, 25%)"


def assign_module_colors(labels: Iterable[str], existing: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """
    Return a copy of existing with a generated colour for every label that has none.
    """
    colors = dict(existing or {})
    for label in labels:
        if not colors.get(label):
            colors[label] = color_for_module(label)
    return colors


def css_color_to_rgb(value: str) -> Optional[Tuple[float, float, float]]:
    """
    Convert '#rrggbb' or 'hsl(h, s%, l%)' into an (r, g, b) tuple of floats in 0..1.

    Returns None for anything else.
    """
    text = (value or "").strip()

    m = _HEX_RE.match(text)
    if m:
        raw = m.group(1)
        return int(raw[0:2], 16) / 255, int(raw[2:4], 16) / 255, int(raw[4:6], 16) / 255

    m = _HSL_RE.match(text)
    if m:
        hue = (float(m.group(1)) % 360) / 360
        sat = float(m.group(2)) / 100
        light = float(m.group(3)) / 100
        return colorsys.hls_to_rgb(hue, light, sat)

    return None
