"""
Studio One ``.colorpalette`` serialization.

Each color is written as eight uppercase hex digits: an opaque alpha byte
``FF`` followed by the blue, green and red channels, in that order.
"""

import json
from typing import Dict, Iterable, List, Sequence

from .space import to_color


def format_color(rgb: Sequence[int]) -> str:
    """
    Format one RGB color as FFBBGGRR.

    >>> format_color((255, 0, 0))
    'FF0000FF'
    """
    r, g, b = to_color(rgb)
    return f"FF{b:02X}{g:02X}{r:02X}"


def export_palette(palette: Iterable[Sequence[int]]) -> Dict[str, List[str]]:
    """Build the .colorpalette document for a palette."""
    return {"colors": [format_color(color) for color in palette]}


def dumps_palette(palette: Iterable[Sequence[int]]) -> str:
    """Serialize a palette to .colorpalette JSON text."""
    return json.dumps(export_palette(palette), indent=2)
