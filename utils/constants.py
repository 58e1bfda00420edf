"""Codec constants."""

import numpy as np

DEFAULT_SEGMENT_SIZE = 8
DEFAULT_PAGE_SIZE = 1024

# Container header: width, height, dct segment, chroma segment, num colors
HEADER_FORMAT = '<5H'
HEADER_SIZE = 10
MAX_HEADER_VALUE = 0xFFFF
MAX_PALETTE_COLORS = 256

DITHER_TILE_SIZE = 64
DITHER_MIN = 100
DITHER_MAX = 200
DITHER_SEED = 0x5741434B

LEVEL_SHIFT = 128.0

# BT.709-style luma weights
RGB_TO_YCBCR = np.array([
    [0.2126, 0.7152, 0.0722],
    [-0.1146, -0.3854, 0.5],
    [0.5, -0.4542, -0.0458],
], dtype=np.float32)

YCBCR_TO_RGB = np.array([
    [1.0, 0.0, 1.5748],
    [1.0, -0.1873, -0.4681],
    [1.0, 1.8556, 0.0],
], dtype=np.float32)
