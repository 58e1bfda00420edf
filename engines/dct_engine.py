"""Block DCT-II/DCT-III driven by a cosine basis lookup table."""

import threading

import numpy as np

from engines.block_processor import block_view, require_divisible
from models.errors import ContractError
from models.planar_buffer import PlanarBuffer
from utils.constants import LEVEL_SHIFT

_lut_lock = threading.Lock()
_current_lut = None


def create_dct_lut(size: int) -> np.ndarray:
    """LUT[k][n] = cos(pi * k / N * (n + 0.5)), read-only."""
    if size <= 0:
        raise ContractError(f"DCT size must be positive, got {size}")
    k = np.arange(size, dtype=np.float64)[:, np.newaxis]
    n = np.arange(size, dtype=np.float64)[np.newaxis, :]
    lut = np.cos(np.pi * k / size * (n + 0.5)).astype(np.float32)
    lut.setflags(write=False)
    return lut


def get_dct_lut(size: int) -> np.ndarray:
    """Shared LUT for `size`; rebuilt whenever a different size is requested."""
    global _current_lut
    with _lut_lock:
        if _current_lut is None or _current_lut.shape[0] != size:
            _current_lut = create_dct_lut(size)
        return _current_lut


def scaled_basis(lut: np.ndarray) -> np.ndarray:
    """Scaled basis M[k][n] = sqrt(2/N) * alpha(k) * LUT[k][n]."""
    size = lut.shape[0]
    alpha = np.ones(size, dtype=np.float32)
    alpha[0] = 1.0 / np.sqrt(2.0)
    return (np.sqrt(2.0 / size) * alpha[:, np.newaxis] * lut).astype(np.float32)


def check_lut(lut: np.ndarray, size: int) -> None:
    if lut.shape != (size, size):
        raise ContractError(f"LUT shape {lut.shape} does not match segment size {size}")


def dct_1d(values: np.ndarray, lut: np.ndarray) -> np.ndarray:
    """1D DCT-II along the last axis."""
    return values @ scaled_basis(lut).T


def idct_1d(coeffs: np.ndarray, lut: np.ndarray) -> np.ndarray:
    """1D inverse (DCT-III) along the last axis."""
    return coeffs @ scaled_basis(lut)


def dct2(block: np.ndarray, lut: np.ndarray) -> np.ndarray:
    """2D DCT of one N x N block: rows first, then columns."""
    rows = dct_1d(block, lut)
    return dct_1d(rows.T, lut).T


def idct2(coeffs: np.ndarray, lut: np.ndarray) -> np.ndarray:
    """2D inverse DCT of one N x N block."""
    rows = idct_1d(coeffs, lut)
    return idct_1d(rows.T, lut).T


def forward_blocks(plane: np.ndarray, segment_size: int, lut: np.ndarray) -> None:
    """In-place 2D DCT of every whole block of a float plane."""
    basis = scaled_basis(lut)
    blocks = block_view(plane, segment_size)
    blocks[...] = np.einsum('kn,ynxm,lm->ykxl', basis, blocks, basis, optimize=True)


def inverse_blocks(plane: np.ndarray, segment_size: int, lut: np.ndarray) -> None:
    """In-place 2D inverse DCT of every whole block of a float plane."""
    basis = scaled_basis(lut)
    blocks = block_view(plane, segment_size)
    blocks[...] = np.einsum('nk,ynxm,ml->ykxl', basis, blocks, basis, optimize=True)


def level_shift(luma: PlanarBuffer) -> np.ndarray:
    """Float plane centred around zero."""
    luma.require_channels(1)
    return luma.data[:, :, 0].astype(np.float32) - LEVEL_SHIFT


def to_image_domain(plane: np.ndarray) -> PlanarBuffer:
    """Undo the level shift and materialise 8-bit luma.

    Negative reconstructions are folded with abs() before clamping.
    """
    restored = np.abs(plane + LEVEL_SHIFT)
    pixels = np.clip(np.rint(restored), 0, 255).astype(np.uint8)
    return PlanarBuffer(pixels[:, :, np.newaxis])


def forward_dct(luma: PlanarBuffer, segment_size: int, lut: np.ndarray) -> PlanarBuffer:
    """Level shift (-128) then block DCT. Returns a new float buffer."""
    luma.require_channels(1)
    require_divisible(luma.width, luma.height, segment_size)
    check_lut(lut, segment_size)
    plane = level_shift(luma)
    forward_blocks(plane, segment_size, lut)
    return PlanarBuffer(plane[:, :, np.newaxis])


def inverse_dct(frequency_domain: PlanarBuffer, segment_size: int, lut: np.ndarray) -> PlanarBuffer:
    """Block inverse DCT then +128. Returns a new 8-bit buffer."""
    frequency_domain.require_channels(1)
    require_divisible(frequency_domain.width, frequency_domain.height, segment_size)
    check_lut(lut, segment_size)
    plane = frequency_domain.data[:, :, 0].astype(np.float32)
    inverse_blocks(plane, segment_size, lut)
    return to_image_domain(plane)
