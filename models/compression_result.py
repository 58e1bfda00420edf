"""Compression result with metrics."""

from dataclasses import dataclass
import numpy as np


@dataclass
class CompressionResult:
    """Results from an encode/decode round trip."""
    
    original_image: np.ndarray
    reconstructed_image: np.ndarray
    container: bytes
    
    # Quality metrics
    psnr_y: float
    ssim_y: float
    psnr_rgb: float
    ssim_rgb: float
    
    # Size stats
    raw_size: int
    payload_size: int
    compressed_size: int
    retained_coeffs: int
    block_coeffs: int
    
    # Runtime
    encode_time_ms: float
    decode_time_ms: float
    
    @property
    def compression_ratio(self) -> float:
        return self.raw_size / max(self.compressed_size, 1)
    
    @property
    def bpp(self) -> float:
        h, w = self.original_image.shape[:2]
        return 8.0 * self.compressed_size / max(h * w, 1)
