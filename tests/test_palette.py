"""Tests for palette construction and quantization."""

import numpy as np
import pytest
from engines.color_space import rgb_to_ycbcr
from engines.palette import (
    get_dither_tile, grayscale_palette, build_palette, distinct_chroma,
    quantize, apply_palette, palette_spacing, dither_offsets,
)
from models.errors import ContractError
from models.planar_buffer import PlanarBuffer
from utils.test_images import generate_colored_checkerboard, generate_chroma_stripes, generate_gradient


def _ycbcr(image: np.ndarray) -> PlanarBuffer:
    return rgb_to_ycbcr(PlanarBuffer.from_array(image))


def _chroma(values) -> PlanarBuffer:
    """1 x n YCbCr buffer with the given (Cb, Cr) pairs."""
    pairs = np.asarray(values, dtype=np.float32)
    data = np.zeros((1, len(pairs), 3), dtype=np.float32)
    data[0, :, 1:] = pairs
    return PlanarBuffer(data)


def test_dither_tile_is_shared_and_read_only():
    tile = get_dither_tile()
    assert tile.shape == (64, 64)
    assert tile.dtype == np.uint8
    assert tile.min() >= 100 and tile.max() <= 200
    assert get_dither_tile() is tile
    assert not tile.flags.writeable


def test_grayscale_palette_levels():
    palette = grayscale_palette(4)
    assert palette.tolist() == [[0, 0], [64, 64], [128, 128], [192, 192]]


def test_grayscale_mode_ignores_image():
    a = build_palette(_ycbcr(generate_gradient(16)), 8, grayscale=True)
    b = build_palette(_ycbcr(generate_chroma_stripes(16)), 8, grayscale=True)
    assert np.array_equal(a, b)


def test_build_palette_is_deterministic():
    ycbcr = _ycbcr(generate_gradient(64))
    assert np.array_equal(build_palette(ycbcr, 8), build_palette(ycbcr, 8))


def test_two_color_image_gives_both_pairs():
    ycbcr = _ycbcr(generate_colored_checkerboard(64))
    palette = build_palette(ycbcr, 2)
    expected = {tuple(p) for p in np.floor(ycbcr.data[:, :, 1:].reshape(-1, 2)).tolist()}
    assert len(expected) == 2
    assert {tuple(p) for p in palette.tolist()} == expected


def test_ordered_by_last_seen_and_padded():
    ycbcr = _ycbcr(generate_colored_checkerboard(64))
    palette = build_palette(ycbcr, 4)
    floored = np.floor(ycbcr.data[:, :, 1:])
    # bottom-right pixel is dark, so light was last seen first
    light, dark = floored[63, 31], floored[63, 63]
    assert np.array_equal(palette[0], light)
    assert np.array_equal(palette[1], dark)
    assert (palette[2:] == 0).all()


def test_stride_sampling():
    ycbcr = _ycbcr(generate_chroma_stripes(64))
    palette = build_palette(ycbcr, 4)
    floored = np.floor(ycbcr.data[:, :, 1:])
    expected = np.stack([floored[63, 8 * i] for i in (0, 2, 4, 6)])
    assert np.array_equal(palette, expected)


def test_distinct_chroma_last_seen_wins():
    ycbcr = _chroma([[1, 1], [2, 2], [1, 1]])
    assert distinct_chroma(ycbcr).tolist() == [[2, 2], [1, 1]]


def test_quantize_nearest():
    palette = np.array([[0, 0], [100, 100], [200, 200]], dtype=np.float32)
    indices = quantize(_chroma([[10, 5], [90, 120], [250, 190], [140, 160]]), palette)
    assert indices.dtype == np.uint8
    assert indices.tolist() == [[0, 1, 2, 1]]


def test_quantize_ties_go_to_lowest_index():
    palette = np.array([[100, 128], [102, 128]], dtype=np.float32)
    assert quantize(_chroma([[101, 128]]), palette).tolist() == [[0]]
    duplicate = np.array([[5, 5], [5, 5]], dtype=np.float32)
    assert quantize(_chroma([[5, 5]]), duplicate).tolist() == [[0]]


def test_quantize_does_not_mutate():
    ycbcr = _ycbcr(generate_gradient(32))
    before = ycbcr.data.copy()
    palette = build_palette(ycbcr, 8)
    quantize(ycbcr, palette, dither=False)
    quantize(ycbcr, palette, dither=True)
    assert np.array_equal(ycbcr.data, before)


def test_dither_breaks_up_bands():
    ycbcr = _ycbcr(generate_gradient(64))
    palette = build_palette(ycbcr, 8)
    plain = quantize(ycbcr, palette, dither=False)
    dithered = quantize(ycbcr, palette, dither=True)
    assert (plain != dithered).any()
    assert dithered.max() < 8
    assert np.array_equal(dithered, quantize(ycbcr, palette, dither=True))


def test_palette_spacing():
    palette = np.array([[0, 0], [3, 4], [100, 100]], dtype=np.float32)
    assert np.isclose(palette_spacing(palette), 5.0)
    assert palette_spacing(palette[:1]) == 0.0


def test_padding_does_not_collapse_spacing():
    ycbcr = _chroma([[140, 140], [120, 120], [100, 100]])
    palette = build_palette(ycbcr, 8)
    assert (palette[3:] == 0).all()
    assert np.isclose(palette_spacing(palette), np.hypot(20, 20))


def test_dither_with_padded_palette():
    palette = build_palette(_chroma([[140, 140], [120, 120], [100, 100]]), 8)
    ramp = np.linspace(100, 140, 64)
    ycbcr = _chroma(np.stack([ramp, ramp], axis=-1))
    plain = quantize(ycbcr, palette, dither=False)
    dithered = quantize(ycbcr, palette, dither=True)
    assert (plain != dithered).any()
    assert dithered.max() < 3


def test_dither_offsets_are_float32():
    palette = np.array([[0, 0], [64, 64], [128, 128]], dtype=np.float32)
    offsets = dither_offsets(70, 5, palette)
    assert offsets.shape == (5, 70, 2)
    assert offsets.dtype == np.float32
    assert np.array_equal(offsets[:, 64:], offsets[:, :6])


def test_apply_palette():
    ycbcr = _chroma([[10, 5], [190, 210]])
    palette = np.array([[0, 0], [200, 200]], dtype=np.float32)
    indices = quantize(ycbcr, palette)
    apply_palette(ycbcr, palette, indices)
    assert ycbcr.data[0, :, 1:].tolist() == [[0, 0], [200, 200]]


def test_apply_palette_rejects_bad_index():
    ycbcr = _chroma([[10, 5]])
    with pytest.raises(ContractError):
        apply_palette(ycbcr, np.zeros((2, 2), dtype=np.float32), np.array([[2]], dtype=np.uint8))


def test_palette_size_limits():
    ycbcr = _ycbcr(generate_gradient(8))
    with pytest.raises(ContractError):
        build_palette(ycbcr, 0)
    with pytest.raises(ContractError):
        build_palette(ycbcr, 257)
