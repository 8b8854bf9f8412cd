"""
Perceptual color distance (CIE76 delta-E).

The clustering step and the similarity filter share these functions so
that similarity thresholds mean the same thing in both places.
"""

from typing import Sequence

import numpy as np

from .space import rgb_to_lab_array


def delta_e_lab(lab_a: Sequence[float], lab_b: Sequence[float]) -> float:
    """Euclidean distance between two Lab triples."""
    dl = lab_a[0] - lab_b[0]
    da = lab_a[1] - lab_b[1]
    db = lab_a[2] - lab_b[2]
    return float(np.sqrt(dl * dl + da * da + db * db))


def delta_e(color_a: Sequence[int], color_b: Sequence[int]) -> float:
    """
    CIE76 delta-E between two RGB colors.

    Args:
        color_a: RGB triple (0-255)
        color_b: RGB triple (0-255)

    Returns:
        Non-negative distance; 0 when both map to the same Lab value
    """
    lab_a = rgb_to_lab_array([color_a])[0]
    lab_b = rgb_to_lab_array([color_b])[0]
    return delta_e_lab(lab_a, lab_b)


def pairwise_delta_e(lab_a: np.ndarray, lab_b: np.ndarray) -> np.ndarray:
    """
    Distance matrix between two sets of Lab colors.

    Args:
        lab_a: (N, 3) Lab array
        lab_b: (K, 3) Lab array

    Returns:
        (N, K) array of delta-E values
    """
    diff = lab_a[:, None, :] - lab_b[None, :, :]
    return np.sqrt((diff ** 2).sum(axis=2))
