"""Block-wise chroma subsampling."""

from typing import Literal

import numpy as np

from engines.block_processor import block_view
from models.planar_buffer import PlanarBuffer


def subsample_chroma(
    ycbcr: PlanarBuffer,
    segment_size: int,
    mode: Literal['average', 'first'] = 'average'
) -> None:
    """Flatten Cb/Cr over segment_size x segment_size blocks, in place.

    Luma is untouched. Segment sizes 0 and 1 are no-ops; trailing partial
    blocks keep their samples.
    """
    ycbcr.require_channels(3)
    if segment_size <= 1:
        return
    
    for channel in (1, 2):
        blocks = block_view(ycbcr.plane(channel), segment_size)
        if blocks.size == 0:
            continue
        if mode == 'average':
            value = blocks.mean(axis=(1, 3), dtype=np.float64, keepdims=True)
        elif mode == 'first':
            value = blocks[:, :1, :, :1].copy()
        else:
            raise ValueError(f"Unknown subsampling mode: {mode}")
        blocks[...] = np.broadcast_to(value, blocks.shape)
