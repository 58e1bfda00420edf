"""Codec parameters."""

from dataclasses import dataclass
from typing import Literal

from utils.constants import DEFAULT_PAGE_SIZE, DEFAULT_SEGMENT_SIZE, MAX_HEADER_VALUE, MAX_PALETTE_COLORS

BACKEND_NAMES = ('reference', 'scipy', 'torch', 'auto')


@dataclass
class CodecParams:
    """Wack encoder parameters.

    `subsample_size` 0 stores a grayscale image (no chroma payload);
    `num_colors` 0 stores raw chroma instead of palette indices.
    """

    segment_size: int = DEFAULT_SEGMENT_SIZE
    threshold: float = 0.0
    subsample_size: int = 1
    num_colors: int = 0
    dither: bool = False
    grayscale_palette: bool = False
    subsample_mode: Literal['average', 'first'] = 'average'
    page_size: int = DEFAULT_PAGE_SIZE
    backend: str = 'reference'

    def __post_init__(self):
        if not (1 <= self.segment_size <= MAX_HEADER_VALUE):
            raise ValueError(f"Segment size must be 1-{MAX_HEADER_VALUE}, got {self.segment_size}")
        if not (0.0 <= self.threshold <= 1.0):
            raise ValueError(f"Threshold must be 0-1, got {self.threshold}")
        if not (0 <= self.subsample_size <= MAX_HEADER_VALUE):
            raise ValueError(f"Subsample size must be 0-{MAX_HEADER_VALUE}, got {self.subsample_size}")
        if not (0 <= self.num_colors <= MAX_PALETTE_COLORS):
            raise ValueError(f"Number of colors must be 0-{MAX_PALETTE_COLORS}, got {self.num_colors}")
        if self.subsample_mode not in ('average', 'first'):
            raise ValueError(f"Unknown subsample mode: {self.subsample_mode}")
        if self.page_size <= 0:
            raise ValueError(f"Page size must be positive, got {self.page_size}")
        if self.backend not in BACKEND_NAMES:
            raise ValueError(f"Unknown backend: {self.backend}")

    @property
    def is_grayscale(self) -> bool:
        return self.subsample_size == 0

    @property
    def uses_palette(self) -> bool:
        return self.num_colors > 0 and not self.is_grayscale
