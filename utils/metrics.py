"""Metrics: PSNR, SSIM and timing."""

import time
import numpy as np
from skimage.metrics import peak_signal_noise_ratio, structural_similarity
from typing import Dict

from utils.constants import RGB_TO_YCBCR


def luma_plane(rgb: np.ndarray) -> np.ndarray:
    """Luma with the codec's own weights."""
    return rgb[:, :, :3].astype(np.float64) @ RGB_TO_YCBCR[0].astype(np.float64)


def _ssim(a: np.ndarray, b: np.ndarray, **kwargs) -> float:
    # SSIM needs an odd window no larger than the image
    win = min(7, a.shape[0], a.shape[1])
    if win % 2 == 0:
        win -= 1
    if win < 3:
        return float('nan')
    return float(structural_similarity(a, b, win_size=win, data_range=255, **kwargs))


def compute_psnr_ssim(original_rgb: np.ndarray, reconstructed_rgb: np.ndarray) -> Dict[str, float]:
    """PSNR and SSIM on RGB and on the luma channel."""
    if np.array_equal(original_rgb, reconstructed_rgb):
        psnr_rgb = float('inf')
    else:
        psnr_rgb = peak_signal_noise_ratio(original_rgb, reconstructed_rgb, data_range=255)
    ssim_rgb = _ssim(original_rgb, reconstructed_rgb, channel_axis=2)
    
    original_y = luma_plane(original_rgb)
    recon_y = luma_plane(reconstructed_rgb)
    if np.array_equal(original_y, recon_y):
        psnr_y = float('inf')
    else:
        psnr_y = peak_signal_noise_ratio(original_y, recon_y, data_range=255)
    ssim_y = _ssim(original_y, recon_y)
    
    return {
        'psnr_rgb': float(psnr_rgb),
        'ssim_rgb': ssim_rgb,
        'psnr_y': float(psnr_y),
        'ssim_y': ssim_y
    }


class Timer:
    """Wall-clock timer for the encode and decode halves of a round trip."""
    
    def __init__(self):
        self.encode_time_ms = 0.0
        self.decode_time_ms = 0.0
    
    def measure_encode(self, func, *args, **kwargs):
        start = time.perf_counter()
        result = func(*args, **kwargs)
        self.encode_time_ms += (time.perf_counter() - start) * 1000.0
        return result
    
    def measure_decode(self, func, *args, **kwargs):
        start = time.perf_counter()
        result = func(*args, **kwargs)
        self.decode_time_ms += (time.perf_counter() - start) * 1000.0
        return result
