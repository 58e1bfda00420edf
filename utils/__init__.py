"""Shared utilities."""

from .metrics import compute_psnr_ssim, luma_plane, Timer
from .test_images import (
    generate_flat,
    generate_colored_checkerboard,
    generate_gradient,
    generate_chroma_stripes,
    generate_noise,
    generate_demo_image,
)
from .image_io import load_image, save_image, crop_to_multiple, read_container, write_container

__all__ = [
    'compute_psnr_ssim',
    'luma_plane',
    'Timer',
    'generate_flat',
    'generate_colored_checkerboard',
    'generate_gradient',
    'generate_chroma_stripes',
    'generate_noise',
    'generate_demo_image',
    'load_image',
    'save_image',
    'crop_to_multiple',
    'read_container',
    'write_container',
]
