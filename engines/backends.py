"""Swappable execution backends for the block DCT, subsampler and quantizer.

The reference backend defines the numbers; the others must agree with it
within float tolerance and block until their results are on the host.
"""

import logging
from typing import Literal

import numpy as np
from scipy.fft import dctn, idctn

from engines import dct_engine, palette, subsampling
from engines.block_processor import block_view, require_divisible
from engines.device import TORCH_AVAILABLE, detect_device, torch
from models.errors import ContractError
from models.planar_buffer import PlanarBuffer

logger = logging.getLogger(__name__)


class ReferenceBackend:
    """Numpy implementation driven by the cosine LUT."""

    name = 'reference'

    def forward_dct(self, luma: PlanarBuffer, segment_size: int, lut: np.ndarray) -> PlanarBuffer:
        return dct_engine.forward_dct(luma, segment_size, lut)

    def inverse_dct(self, frequency_domain: PlanarBuffer, segment_size: int, lut: np.ndarray) -> PlanarBuffer:
        return dct_engine.inverse_dct(frequency_domain, segment_size, lut)

    def subsample_chroma(self, ycbcr: PlanarBuffer, segment_size: int,
                         mode: Literal['average', 'first'] = 'average') -> None:
        subsampling.subsample_chroma(ycbcr, segment_size, mode)

    def quantize(self, ycbcr: PlanarBuffer, colors: np.ndarray, dither: bool = False) -> np.ndarray:
        return palette.quantize(ycbcr, colors, dither)


class ScipyBackend(ReferenceBackend):
    """Block DCT through scipy.fft with orthonormal scaling (same transform as the LUT)."""

    name = 'scipy'

    def forward_dct(self, luma, segment_size, lut):
        luma.require_channels(1)
        require_divisible(luma.width, luma.height, segment_size)
        plane = dct_engine.level_shift(luma)
        blocks = block_view(plane, segment_size)
        blocks[...] = dctn(blocks, type=2, norm='ortho', axes=(1, 3))
        return PlanarBuffer(plane[:, :, np.newaxis])

    def inverse_dct(self, frequency_domain, segment_size, lut):
        frequency_domain.require_channels(1)
        require_divisible(frequency_domain.width, frequency_domain.height, segment_size)
        plane = frequency_domain.data[:, :, 0].astype(np.float32)
        blocks = block_view(plane, segment_size)
        blocks[...] = idctn(blocks, type=2, norm='ortho', axes=(1, 3))
        return dct_engine.to_image_domain(plane)


class TorchBackend(ReferenceBackend):
    """Same math on a torch device; results are copied back before returning."""

    name = 'torch'

    def __init__(self, device: str | None = None):
        if not TORCH_AVAILABLE:
            raise RuntimeError("Torch backend requested but PyTorch is not installed")
        self.device = torch.device(device or detect_device().device)

    def _basis(self, lut: np.ndarray):
        return torch.from_numpy(dct_engine.scaled_basis(lut)).to(self.device)

    def _blocks(self, plane: np.ndarray, segment_size: int):
        h, w = plane.shape
        t = torch.from_numpy(np.ascontiguousarray(plane)).to(self.device)
        return t.reshape(h // segment_size, segment_size, w // segment_size, segment_size)

    def forward_dct(self, luma, segment_size, lut):
        luma.require_channels(1)
        require_divisible(luma.width, luma.height, segment_size)
        dct_engine.check_lut(lut, segment_size)
        basis = self._basis(lut)
        blocks = self._blocks(dct_engine.level_shift(luma), segment_size)
        out = torch.einsum('kn,ynxm,lm->ykxl', basis, blocks, basis)
        plane = out.reshape(luma.height, luma.width).cpu().numpy()
        return PlanarBuffer(plane.astype(np.float32)[:, :, np.newaxis])

    def inverse_dct(self, frequency_domain, segment_size, lut):
        frequency_domain.require_channels(1)
        require_divisible(frequency_domain.width, frequency_domain.height, segment_size)
        dct_engine.check_lut(lut, segment_size)
        basis = self._basis(lut)
        plane = frequency_domain.data[:, :, 0].astype(np.float32)
        blocks = self._blocks(plane, segment_size)
        out = torch.einsum('nk,ynxm,ml->ykxl', basis, blocks, basis)
        restored = out.reshape(frequency_domain.height, frequency_domain.width).cpu().numpy()
        return dct_engine.to_image_domain(restored)

    def quantize(self, ycbcr, colors, dither=False):
        ycbcr.require_channels(3)
        palette.check_num_colors(len(colors))
        chroma = ycbcr.data[:, :, 1:3].astype(np.float32)
        if dither:
            chroma = chroma + palette.dither_offsets(ycbcr.width, ycbcr.height, colors)
        points = torch.from_numpy(chroma.reshape(-1, 2)).to(self.device)
        entries = torch.from_numpy(np.asarray(colors, dtype=np.float32)).to(self.device)
        # argmin returns the first minimum, matching the reference tie-break
        dist = ((points[:, None, :] - entries[None, :, :]) ** 2).sum(dim=-1)
        indices = torch.argmin(dist, dim=1).cpu().numpy()
        return indices.reshape(ycbcr.height, ycbcr.width).astype(np.uint8)


_BACKENDS = {
    'reference': ReferenceBackend,
    'scipy': ScipyBackend,
    'torch': TorchBackend,
}


def get_backend(name: str = 'reference'):
    """Instantiate a backend by name; 'auto' prefers torch on CUDA."""
    if name == 'auto':
        info = detect_device()
        name = 'torch' if info.accelerated else 'reference'
        logger.info("Auto-selected %s backend on %s", name, info.describe())
    if name not in _BACKENDS:
        raise ContractError(f"Unknown backend: {name}")
    return _BACKENDS[name]()
