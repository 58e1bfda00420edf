"""Wack container layout: header, luma coefficients, chroma, palette."""

import struct
from dataclasses import dataclass
from typing import Optional

import numpy as np

from models.errors import ContractError, FormatError
from utils.constants import HEADER_FORMAT, HEADER_SIZE, MAX_HEADER_VALUE, MAX_PALETTE_COLORS

LUMA_DTYPE = np.dtype('<i2')


@dataclass(frozen=True)
class WackHeader:
    """Five little-endian u16 fields at the start of every container."""

    width: int
    height: int
    dct_segment_size: int
    chroma_segment_size: int
    num_colors: int

    @property
    def is_grayscale(self) -> bool:
        return self.chroma_segment_size == 0

    @property
    def has_palette(self) -> bool:
        return self.num_colors > 0

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def pack(self) -> bytes:
        fields = (self.width, self.height, self.dct_segment_size,
                  self.chroma_segment_size, self.num_colors)
        for value in fields:
            if not (0 <= value <= MAX_HEADER_VALUE):
                raise ContractError(f"Header field {value} does not fit in u16")
        return struct.pack(HEADER_FORMAT, *fields)

    @classmethod
    def unpack(cls, data: bytes) -> 'WackHeader':
        if len(data) < HEADER_SIZE:
            raise FormatError('header', f"need {HEADER_SIZE} bytes, got {len(data)}")
        return cls(*struct.unpack_from(HEADER_FORMAT, data, 0))


@dataclass
class WackRecord:
    """Decoded container contents.

    `chroma` is (h, w, 2) uint8 for raw storage, `indices` is (h, w) uint8
    for paletted storage; both are None for grayscale images.
    """

    header: WackHeader
    luma: np.ndarray
    chroma: Optional[np.ndarray] = None
    indices: Optional[np.ndarray] = None
    palette: Optional[np.ndarray] = None

    def chroma_pairs(self) -> Optional[np.ndarray]:
        """(h, w, 2) uint8 Cb/Cr, resolving palette indices if needed."""
        if self.indices is not None:
            return self.palette[self.indices]
        return self.chroma


def expected_payload_size(header: WackHeader) -> int:
    """Uncompressed container size implied by the header."""
    pixels = header.pixel_count
    size = HEADER_SIZE + 2 * pixels
    if not header.is_grayscale:
        size += pixels if header.has_palette else 2 * pixels
    return size + 2 * header.num_colors


def pack_container(
    header: WackHeader,
    luma: np.ndarray,
    chroma: Optional[np.ndarray] = None,
    indices: Optional[np.ndarray] = None,
    palette: Optional[np.ndarray] = None
) -> bytes:
    """Assemble the uncompressed container."""
    shape = (header.height, header.width)
    if luma.shape != shape:
        raise ContractError(f"Luma shape {luma.shape} does not match header {shape}")
    parts = [header.pack(), np.ascontiguousarray(luma, dtype=LUMA_DTYPE).tobytes()]

    if header.has_palette:
        if palette is None or palette.shape != (header.num_colors, 2):
            raise ContractError(f"Palette must have shape ({header.num_colors}, 2)")
    if not header.is_grayscale:
        if header.has_palette:
            if indices is None or indices.shape != shape:
                raise ContractError(f"Index plane must have shape {shape}")
            parts.append(np.ascontiguousarray(indices, dtype=np.uint8).tobytes())
        else:
            if chroma is None or chroma.shape != shape + (2,):
                raise ContractError(f"Chroma plane must have shape {shape + (2,)}")
            parts.append(np.ascontiguousarray(chroma, dtype=np.uint8).tobytes())
    if header.has_palette:
        parts.append(np.ascontiguousarray(palette, dtype=np.uint8).tobytes())

    payload = b''.join(parts)
    return payload


def unpack_container(data: bytes) -> WackRecord:
    """Parse and validate an uncompressed container."""
    header = WackHeader.unpack(data)
    if header.dct_segment_size == 0:
        raise FormatError('dct_segment_size', "must be non-zero")
    if header.width % header.dct_segment_size or header.height % header.dct_segment_size:
        raise FormatError(
            'dct_segment_size',
            f"{header.dct_segment_size} does not divide {header.width}x{header.height}"
        )
    if header.num_colors > MAX_PALETTE_COLORS:
        raise FormatError('num_colors', f"{header.num_colors} exceeds {MAX_PALETTE_COLORS}")
    expected = expected_payload_size(header)
    if len(data) != expected:
        raise FormatError('payload_length', f"expected {expected} bytes, got {len(data)}")

    shape = (header.height, header.width)
    pixels = header.pixel_count
    offset = HEADER_SIZE
    luma = np.frombuffer(data, dtype=LUMA_DTYPE, count=pixels, offset=offset).reshape(shape)
    offset += 2 * pixels

    record = WackRecord(header=header, luma=luma.astype(np.int16))
    if not header.is_grayscale:
        stride = 1 if header.has_palette else 2
        chroma = np.frombuffer(data, dtype=np.uint8, count=stride * pixels, offset=offset)
        offset += stride * pixels
        if header.has_palette:
            record.indices = chroma.reshape(shape)
        else:
            record.chroma = chroma.reshape(shape + (2,))
    if header.has_palette:
        record.palette = np.frombuffer(
            data, dtype=np.uint8, count=2 * header.num_colors, offset=offset
        ).reshape(header.num_colors, 2)
        if record.indices is not None and record.indices.size:
            worst = int(record.indices.max())
            if worst >= header.num_colors:
                raise FormatError('palette_index', f"index {worst} out of range for {header.num_colors} colors")
    return record
