"""Tests for block chroma subsampling."""

import cv2
import numpy as np
import pytest
from engines.color_space import rgb_to_ycbcr
from engines.subsampling import subsample_chroma
from models.errors import ContractError
from models.planar_buffer import PlanarBuffer
from utils.test_images import generate_noise, generate_chroma_stripes


def _noise_ycbcr(size: int = 16) -> PlanarBuffer:
    return rgb_to_ycbcr(PlanarBuffer.from_array(generate_noise(size)))


def test_average_matches_area_resize():
    """Block average equals an INTER_AREA downsample at integer factors."""
    ycbcr = _noise_ycbcr(16)
    cb = ycbcr.plane(1).copy()
    expected = cv2.resize(cb, (4, 4), interpolation=cv2.INTER_AREA)
    
    subsample_chroma(ycbcr, 4, mode='average')
    assert np.allclose(ycbcr.plane(1)[::4, ::4], expected, atol=1e-3)


def test_average_blocks_are_constant():
    ycbcr = _noise_ycbcr(16)
    subsample_chroma(ycbcr, 4, mode='average')
    for channel in (1, 2):
        plane = ycbcr.plane(channel)
        for by in range(0, 16, 4):
            for bx in range(0, 16, 4):
                block = plane[by:by + 4, bx:bx + 4]
                assert np.allclose(block, block[0, 0])


def test_first_sample_policy():
    ycbcr = _noise_ycbcr(16)
    original = ycbcr.data.copy()
    subsample_chroma(ycbcr, 4, mode='first')
    for by in range(0, 16, 4):
        for bx in range(0, 16, 4):
            for channel in (1, 2):
                block = ycbcr.data[by:by + 4, bx:bx + 4, channel]
                assert (block == original[by, bx, channel]).all()


def test_luma_untouched():
    ycbcr = _noise_ycbcr(16)
    luma = ycbcr.plane(0).copy()
    subsample_chroma(ycbcr, 8)
    assert np.array_equal(ycbcr.plane(0), luma)


def test_partial_blocks_left_alone():
    ycbcr = _noise_ycbcr(10)
    original = ycbcr.data.copy()
    subsample_chroma(ycbcr, 4)
    assert np.array_equal(ycbcr.data[8:, :, :], original[8:, :, :])
    assert np.array_equal(ycbcr.data[:, 8:, :], original[:, 8:, :])
    assert not np.array_equal(ycbcr.data[:8, :8, 1:], original[:8, :8, 1:])


def test_unit_and_zero_segments_are_noops():
    ycbcr = _noise_ycbcr(8)
    original = ycbcr.data.copy()
    subsample_chroma(ycbcr, 1)
    subsample_chroma(ycbcr, 0)
    assert np.array_equal(ycbcr.data, original)


def test_stripes_keep_block_aligned_colors():
    """Stripes 32 px wide survive 8x8 subsampling unchanged."""
    ycbcr = rgb_to_ycbcr(PlanarBuffer.from_array(generate_chroma_stripes(256)))
    original = ycbcr.data.copy()
    subsample_chroma(ycbcr, 8, mode='average')
    assert np.allclose(ycbcr.data, original, atol=1e-3)


def test_requires_three_channels():
    with pytest.raises(ContractError):
        subsample_chroma(PlanarBuffer.allocate(8, 8, 1), 4)


def test_unknown_mode():
    with pytest.raises(ValueError):
        subsample_chroma(_noise_ycbcr(8), 4, mode='median')
