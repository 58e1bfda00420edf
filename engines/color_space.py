"""Color space conversion and luma plane splicing."""

import numpy as np

from models.errors import ContractError
from models.planar_buffer import PlanarBuffer
from utils.constants import LEVEL_SHIFT, RGB_TO_YCBCR, YCBCR_TO_RGB


def rgb_to_ycbcr(rgb: PlanarBuffer) -> PlanarBuffer:
    """RGB(A) to YCbCr. Alpha is ignored; returns a new 3-channel float buffer."""
    rgb.require_channels(3, 4)
    pixels = rgb.data[:, :, :3].astype(np.float32)
    ycbcr = pixels @ RGB_TO_YCBCR.T
    ycbcr[:, :, 1:] += LEVEL_SHIFT
    return PlanarBuffer(ycbcr.astype(np.float32, copy=False))


def ycbcr_to_rgb(ycbcr: PlanarBuffer, include_alpha: bool = True) -> PlanarBuffer:
    """YCbCr to 8-bit RGB(A), clamped to [0, 255]."""
    ycbcr.require_channels(3)
    centered = ycbcr.data.astype(np.float32)
    centered[:, :, 1:] -= LEVEL_SHIFT
    rgb = np.clip(np.rint(centered @ YCBCR_TO_RGB.T), 0, 255).astype(np.uint8)
    if include_alpha:
        alpha = np.full(rgb.shape[:2] + (1,), 255, dtype=np.uint8)
        rgb = np.concatenate([rgb, alpha], axis=-1)
    return PlanarBuffer(rgb)


def extract_luma(ycbcr: PlanarBuffer) -> PlanarBuffer:
    """Copy channel 0 into a standalone 1-channel float buffer."""
    ycbcr.require_channels(3)
    return PlanarBuffer(ycbcr.data[:, :, :1].astype(np.float32))


def _check_luma(ycbcr: PlanarBuffer, luma: PlanarBuffer) -> None:
    ycbcr.require_channels(3)
    luma.require_channels(1)
    if (luma.width, luma.height) != (ycbcr.width, ycbcr.height):
        raise ContractError(
            f"Luma {luma.width}x{luma.height} does not match image {ycbcr.width}x{ycbcr.height}"
        )


def replace_luma(ycbcr: PlanarBuffer, luma: PlanarBuffer) -> None:
    """Overwrite channel 0 of `ycbcr` in place."""
    _check_luma(ycbcr, luma)
    ycbcr.data[:, :, 0] = luma.data[:, :, 0]


def insert_luma(ycbcr: PlanarBuffer, luma: PlanarBuffer) -> PlanarBuffer:
    """New YCbCr buffer with `luma` as channel 0; inputs are left alone."""
    _check_luma(ycbcr, luma)
    result = ycbcr.copy()
    replace_luma(result, luma)
    return result
