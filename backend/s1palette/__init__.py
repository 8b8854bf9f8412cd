"""
S1 Palette Generator

Extracts representative colors from an image and expands them into
stylistically coherent palettes that can be exported as Studio One
``.colorpalette`` files.
"""

__version__ = "0.1.2"
