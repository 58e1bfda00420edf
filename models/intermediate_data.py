"""Intermediate pipeline state."""

from dataclasses import dataclass
from typing import Optional
import numpy as np


@dataclass
class IntermediateData:
    """Per-stage outputs of one encode call, for inspection."""
    
    frequency_domain: Optional[np.ndarray] = None
    thresholded_coeffs: Optional[np.ndarray] = None
    compressed_luma: Optional[np.ndarray] = None
    subsampled_ycbcr: Optional[np.ndarray] = None
    palette: Optional[np.ndarray] = None
    palette_indices: Optional[np.ndarray] = None
