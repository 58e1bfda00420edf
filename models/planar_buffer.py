"""Owned planar pixel/coefficient buffer."""

from typing import Optional

import numpy as np

from models.errors import ContractError

SUPPORTED_DTYPES = (np.dtype(np.uint8), np.dtype(np.float32))


class PlanarBuffer:
    """Interleaved `height x width x channels` array with one owner at a time.

    Element `(x, y, c)` sits at flat index `channels * (y * width + x) + c`,
    which is numpy's C order for shape `(height, width, channels)`.
    Whoever holds the buffer releases it exactly once.
    """

    def __init__(self, data: np.ndarray):
        if data.ndim != 3:
            raise ContractError(f"Planar data must be 3-D (h, w, c), got {data.ndim}-D")
        if data.dtype not in SUPPORTED_DTYPES:
            raise ContractError(f"Unsupported element type {data.dtype}")
        self._data: Optional[np.ndarray] = np.ascontiguousarray(data)
        self.height, self.width, self.channels = data.shape

    @classmethod
    def allocate(cls, width: int, height: int, channels: int, dtype=np.float32) -> 'PlanarBuffer':
        """Zero-filled buffer."""
        if width < 0 or height < 0 or channels < 1:
            raise ContractError(f"Invalid buffer shape {width}x{height}x{channels}")
        return cls(np.zeros((height, width, channels), dtype=dtype))

    @classmethod
    def from_array(cls, array: np.ndarray, dtype=None) -> 'PlanarBuffer':
        """Copy an (h, w) or (h, w, c) array into a new buffer."""
        arr = np.array(array, dtype=dtype, copy=True)
        if arr.ndim == 2:
            arr = arr[:, :, np.newaxis]
        return cls(arr)

    @property
    def data(self) -> np.ndarray:
        if self._data is None:
            raise ContractError("Buffer used after release")
        return self._data

    @property
    def dtype(self) -> np.dtype:
        return self.data.dtype

    @property
    def is_released(self) -> bool:
        return self._data is None

    def count(self) -> int:
        """Pixel count (width * height)."""
        return self.width * self.height

    def size(self) -> int:
        """Element count (width * height * channels)."""
        return self.count() * self.channels

    def plane(self, channel: int) -> np.ndarray:
        """View of one channel as (h, w)."""
        return self.data[:, :, channel]

    def copy(self) -> 'PlanarBuffer':
        return PlanarBuffer(self.data.copy())

    def release(self) -> None:
        if self._data is None:
            raise ContractError("Buffer released twice")
        self._data = None

    def require_channels(self, *allowed: int) -> None:
        if self.channels not in allowed:
            raise ContractError(
                f"Expected {' or '.join(map(str, allowed))} channels, got {self.channels}"
            )

    def __repr__(self) -> str:
        state = 'released' if self.is_released else str(self.dtype)
        return f"PlanarBuffer({self.width}x{self.height}x{self.channels}, {state})"
