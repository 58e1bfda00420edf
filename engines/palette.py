"""Chroma palette construction and nearest-color quantization."""

import functools
import math

import numpy as np

from models.errors import ContractError
from models.planar_buffer import PlanarBuffer
from utils.constants import DITHER_MAX, DITHER_MIN, DITHER_SEED, DITHER_TILE_SIZE, MAX_PALETTE_COLORS

# Pixels matched per chunk; bounds the (pixels x colors) distance matrix.
_CHUNK_PIXELS = 1 << 16


@functools.lru_cache(maxsize=None)
def get_dither_tile() -> np.ndarray:
    """Process-wide 64x64 noise tile in [DITHER_MIN, DITHER_MAX], read-only."""
    rng = np.random.default_rng(DITHER_SEED)
    tile = rng.integers(DITHER_MIN, DITHER_MAX, size=(DITHER_TILE_SIZE, DITHER_TILE_SIZE),
                        endpoint=True, dtype=np.uint8)
    tile.setflags(write=False)
    return tile


def check_num_colors(num_colors: int) -> None:
    if not (1 <= num_colors <= MAX_PALETTE_COLORS):
        raise ContractError(f"Palette size must be 1-{MAX_PALETTE_COLORS}, got {num_colors}")


def grayscale_palette(num_colors: int) -> np.ndarray:
    """`num_colors` evenly spaced gray levels as (Cb, Cr) pairs."""
    check_num_colors(num_colors)
    stride = math.floor(256 / min(num_colors, 256))
    levels = np.arange(num_colors, dtype=np.float32) * stride
    return np.stack([levels, levels], axis=-1)


def distinct_chroma(ycbcr: PlanarBuffer) -> np.ndarray:
    """Distinct floored (Cb, Cr) pairs ordered by the pixel index where each was last seen."""
    ycbcr.require_channels(3)
    pairs = np.floor(ycbcr.data[:, :, 1:3].reshape(-1, 2))
    if len(pairs) == 0:
        return np.zeros((0, 2), dtype=np.float32)
    reversed_pairs = pairs[::-1]
    colors, first_in_reversed = np.unique(reversed_pairs, axis=0, return_index=True)
    last_seen = len(pairs) - 1 - first_in_reversed
    return colors[np.argsort(last_seen, kind='stable')].astype(np.float32)


def build_palette(ycbcr: PlanarBuffer, num_colors: int, grayscale: bool = False) -> np.ndarray:
    """Palette of exactly `num_colors` (Cb, Cr) entries, float32 (num_colors, 2).

    Color mode samples the distinct chroma pairs of the image with a fixed
    stride; missing entries are padded with (0, 0). Deterministic.
    """
    ycbcr.require_channels(3)
    if grayscale:
        return grayscale_palette(num_colors)
    check_num_colors(num_colors)

    colors = distinct_chroma(ycbcr)
    if len(colors) < num_colors:
        padding = np.zeros((num_colors - len(colors), 2), dtype=np.float32)
        colors = np.concatenate([colors, padding])
    total = len(colors)
    stride = total // min(num_colors, total)
    palette = colors[np.arange(num_colors) * stride]
    palette.setflags(write=False)
    return palette


def palette_to_bytes(palette: np.ndarray) -> np.ndarray:
    """Palette as (n, 2) uint8, clamped to [0, 255]."""
    return np.clip(palette, 0, 255).astype(np.uint8)


def dither_offsets(width: int, height: int, palette: np.ndarray) -> np.ndarray:
    """(h, w, 2) chroma perturbation tiled from the dither tile."""
    tile = get_dither_tile().astype(np.float32)
    size = tile.shape[0]
    ys = np.arange(height) % size
    xs = np.arange(width) % size
    noise_cb = tile[ys[:, None], xs[None, :]]
    noise_cr = tile.T[ys[:, None], xs[None, :]]
    centre = (DITHER_MIN + DITHER_MAX) / 2.0
    half_range = (DITHER_MAX - DITHER_MIN) / 2.0
    noise = (np.stack([noise_cb, noise_cr], axis=-1) - centre) / half_range
    return (noise * (palette_spacing(palette) / 2.0)).astype(np.float32)


def palette_spacing(palette: np.ndarray) -> float:
    """Median distance from each distinct palette entry to its nearest other entry.

    Repeated entries (the (0, 0) padding) are counted once.
    """
    palette = np.unique(np.asarray(palette, dtype=np.float64), axis=0)
    if len(palette) < 2:
        return 0.0
    diff = palette[:, None, :] - palette[None, :, :]
    dist = np.sqrt((diff ** 2).sum(axis=-1))
    np.fill_diagonal(dist, np.inf)
    nearest = dist.min(axis=1)
    nearest = nearest[np.isfinite(nearest)]
    return float(np.median(nearest)) if len(nearest) else 0.0


def nearest_indices(chroma: np.ndarray, palette: np.ndarray) -> np.ndarray:
    """Index of the closest palette entry for each (Cb, Cr) row; ties go to the lowest index."""
    palette = palette.astype(np.float32)
    result = np.empty(len(chroma), dtype=np.intp)
    for start in range(0, len(chroma), _CHUNK_PIXELS):
        chunk = chroma[start:start + _CHUNK_PIXELS]
        dist = ((chunk[:, None, :] - palette[None, :, :]) ** 2).sum(axis=-1)
        result[start:start + len(chunk)] = np.argmin(dist, axis=1)
    return result


def quantize(ycbcr: PlanarBuffer, palette: np.ndarray, dither: bool = False) -> np.ndarray:
    """Map every pixel's chroma to a palette index. Returns (h, w) uint8.

    With `dither` the match is made against chroma perturbed by the dither
    tile; the buffer itself is never modified.
    """
    ycbcr.require_channels(3)
    check_num_colors(len(palette))
    chroma = ycbcr.data[:, :, 1:3].astype(np.float32)
    if dither:
        chroma = chroma + dither_offsets(ycbcr.width, ycbcr.height, palette)
    indices = nearest_indices(chroma.reshape(-1, 2), palette)
    return indices.reshape(ycbcr.height, ycbcr.width).astype(np.uint8)


def apply_palette(ycbcr: PlanarBuffer, palette: np.ndarray, indices: np.ndarray) -> None:
    """Replace Cb/Cr with their palette colors, in place."""
    ycbcr.require_channels(3)
    if indices.shape != (ycbcr.height, ycbcr.width):
        raise ContractError(f"Index plane {indices.shape} does not match image {ycbcr.height}x{ycbcr.width}")
    if indices.size and int(indices.max()) >= len(palette):
        raise ContractError(f"Palette index {int(indices.max())} out of range for {len(palette)} colors")
    ycbcr.data[:, :, 1:3] = palette[indices]
