"""Block geometry: divisibility checks and block views."""

import numpy as np
from numpy.lib.stride_tricks import as_strided
from typing import Tuple

from models.errors import ContractError


def require_divisible(width: int, height: int, block_size: int) -> None:
    """Fail unless the image tiles exactly into block_size x block_size blocks."""
    if block_size <= 0:
        raise ContractError(f"Block size must be positive, got {block_size}")
    if width % block_size or height % block_size:
        raise ContractError(
            f"Image {width}x{height} is not divisible into {block_size}x{block_size} blocks"
        )


def covered_region(shape: Tuple[int, int], block_size: int) -> Tuple[int, int]:
    """Height and width covered by whole blocks; trailing rows/columns are excluded."""
    h, w = shape
    return (h // block_size) * block_size, (w // block_size) * block_size


def block_view(plane: np.ndarray, block_size: int) -> np.ndarray:
    """View a 2D plane as (rows, block_size, cols, block_size).

    Only whole blocks are covered. Writes through the view land in `plane`.
    """
    ch, cw = covered_region(plane.shape[:2], block_size)
    region = plane[:ch, :cw]
    s0, s1 = region.strides
    return as_strided(
        region,
        shape=(ch // block_size, block_size, cw // block_size, block_size),
        strides=(s0 * block_size, s0, s1 * block_size, s1),
    )
