"""Codec engines - pure computation, no UI dependencies."""

from .color_space import rgb_to_ycbcr, ycbcr_to_rgb, extract_luma, replace_luma, insert_luma
from .dct_engine import create_dct_lut, get_dct_lut, forward_dct, inverse_dct
from .thresholding import drop_count, retained_coefficients, threshold_coefficients, to_int16
from .subsampling import subsample_chroma
from .palette import get_dither_tile, build_palette, quantize, apply_palette
from .container import WackHeader, WackRecord, pack_container, unpack_container, expected_payload_size
from .entropy import PageCompressor, PageDecompressor, compress_bytes, decompress_bytes
from .backends import ReferenceBackend, ScipyBackend, TorchBackend, get_backend
from .pipeline import encode, encode_ycbcr, decode, decode_to_ycbcr, compress_reconstruct

__all__ = [
    'rgb_to_ycbcr',
    'ycbcr_to_rgb',
    'extract_luma',
    'replace_luma',
    'insert_luma',
    'create_dct_lut',
    'get_dct_lut',
    'forward_dct',
    'inverse_dct',
    'drop_count',
    'retained_coefficients',
    'threshold_coefficients',
    'to_int16',
    'subsample_chroma',
    'get_dither_tile',
    'build_palette',
    'quantize',
    'apply_palette',
    'WackHeader',
    'WackRecord',
    'pack_container',
    'unpack_container',
    'expected_payload_size',
    'PageCompressor',
    'PageDecompressor',
    'compress_bytes',
    'decompress_bytes',
    'ReferenceBackend',
    'ScipyBackend',
    'TorchBackend',
    'get_backend',
    'encode',
    'encode_ycbcr',
    'decode',
    'decode_to_ycbcr',
    'compress_reconstruct',
]
