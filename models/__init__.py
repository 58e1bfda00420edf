"""Data models for buffers, parameters and results."""

from .errors import CodecError, ContractError, FormatError, EntropyError
from .planar_buffer import PlanarBuffer
from .codec_params import CodecParams
from .compression_result import CompressionResult
from .intermediate_data import IntermediateData

__all__ = [
    'CodecError',
    'ContractError',
    'FormatError',
    'EntropyError',
    'PlanarBuffer',
    'CodecParams',
    'CompressionResult',
    'IntermediateData',
]
