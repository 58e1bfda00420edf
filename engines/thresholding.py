"""Coefficient thresholding and int16 packing."""

import math

import numpy as np

from engines.block_processor import block_view
from models.errors import ContractError
from models.planar_buffer import PlanarBuffer

INT16_MIN = np.iinfo(np.int16).min
INT16_MAX = np.iinfo(np.int16).max


def drop_count(fraction: float, segment_size: int) -> int:
    """Number of coefficients zeroed per block for a drop fraction in [0, 1]."""
    if not (0.0 <= fraction <= 1.0):
        raise ContractError(f"Threshold fraction must be 0-1, got {fraction}")
    return int(math.floor(fraction * segment_size * segment_size))


def retained_coefficients(count: int, segment_size: int) -> int:
    area = segment_size * segment_size
    return area - min(max(count, 0), area)


def threshold_coefficients(frequency_domain: PlanarBuffer, count: int, segment_size: int) -> PlanarBuffer:
    """Zero the last `count` coefficients of every block in row-major order.

    This is a positional cut, not a zig-zag low-pass. Returns a new float buffer.
    """
    frequency_domain.require_channels(1)
    if count < 0:
        raise ContractError(f"Threshold count must be non-negative, got {count}")
    plane = frequency_domain.data[:, :, 0].astype(np.float32)
    area = segment_size * segment_size
    cut = min(count, area)
    if cut:
        blocks = block_view(plane, segment_size)
        # (rows, cols, N*N) in per-block row-major order
        flat = blocks.transpose(0, 2, 1, 3).reshape(blocks.shape[0], blocks.shape[2], area)
        flat[:, :, area - cut:] = 0.0
        blocks[...] = flat.reshape(blocks.shape[0], blocks.shape[2], segment_size, segment_size).transpose(0, 2, 1, 3)
    return PlanarBuffer(plane[:, :, np.newaxis])


def to_int16(frequency_domain: PlanarBuffer) -> np.ndarray:
    """Round and saturate coefficients to an (h, w) int16 array."""
    frequency_domain.require_channels(1)
    plane = np.rint(frequency_domain.data[:, :, 0])
    return np.clip(plane, INT16_MIN, INT16_MAX).astype(np.int16)
