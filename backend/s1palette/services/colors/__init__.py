"""
S1 Palette Colors Module

Provides color-space conversions, perceptual distance, dominant color
extraction, harmonic palette expansion, stylistic harmonization and
palette refinement.
"""

__version__ = "0.1.2"
