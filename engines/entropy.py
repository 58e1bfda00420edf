"""Paged lossless byte compression (zlib/deflate)."""

import logging
import zlib
from typing import Callable, Iterable, Iterator

from models.errors import EntropyError
from utils.constants import DEFAULT_PAGE_SIZE

logger = logging.getLogger(__name__)


def iter_pages(data: bytes, page_size: int = DEFAULT_PAGE_SIZE) -> Iterator[bytes]:
    """Split `data` into fixed-size pages; the last page may be short."""
    if page_size <= 0:
        raise ValueError(f"Page size must be positive, got {page_size}")
    view = memoryview(data)
    for start in range(0, len(view), page_size):
        yield bytes(view[start:start + page_size])


class PageCompressor:
    """Push-style encoder: write() pages in, compressed chunks go to `sink`."""

    def __init__(self, sink: Callable[[bytes], None], page_size: int = DEFAULT_PAGE_SIZE,
                 level: int = zlib.Z_BEST_COMPRESSION):
        self.sink = sink
        self.page_size = page_size
        self.compressor = zlib.compressobj(level=level)
        self.finished = False

    def write(self, page: bytes) -> None:
        if self.finished:
            raise EntropyError("write after finish")
        if len(page) > self.page_size:
            raise ValueError(f"Page of {len(page)} bytes exceeds page size {self.page_size}")
        try:
            compressed = self.compressor.compress(page)
        except zlib.error as err:
            raise EntropyError(f"Deflate compression error: {err}") from err
        if compressed:
            self.sink(compressed)

    def finish(self) -> None:
        if self.finished:
            return
        try:
            tail = self.compressor.flush(zlib.Z_FINISH)
        except zlib.error as err:
            raise EntropyError(f"Deflate compression error: {err}") from err
        self.finished = True
        if tail:
            self.sink(tail)


class PageDecompressor:
    """Pull-style decoder: iterate to get decompressed pages of `page_size` bytes."""

    def __init__(self, source: Iterable[bytes], page_size: int = DEFAULT_PAGE_SIZE):
        self.source = iter(source)
        self.page_size = page_size
        self.decompressor = zlib.decompressobj()
        self.output_buffer = bytearray()

    def _fill(self) -> bool:
        """Feed one compressed page; False once the source is exhausted."""
        chunk = next(self.source, None)
        try:
            if chunk is None:
                self.output_buffer.extend(self.decompressor.flush())
                if not self.decompressor.eof:
                    raise EntropyError("Compressed stream is truncated")
                return False
            self.output_buffer.extend(self.decompressor.decompress(chunk))
        except zlib.error as err:
            raise EntropyError(f"Deflate decompression error: {err}") from err
        if self.decompressor.unused_data:
            raise EntropyError("Trailing data after end of compressed stream")
        return True

    def __iter__(self) -> Iterator[bytes]:
        exhausted = False
        while True:
            while len(self.output_buffer) < self.page_size and not exhausted:
                exhausted = not self._fill()
            if not self.output_buffer:
                return
            page = bytes(self.output_buffer[:self.page_size])
            del self.output_buffer[:self.page_size]
            yield page


def compress_bytes(data: bytes, page_size: int = DEFAULT_PAGE_SIZE) -> bytes:
    """Compress a whole buffer page by page."""
    output = bytearray()
    encoder = PageCompressor(output.extend, page_size)
    for page in iter_pages(data, page_size):
        encoder.write(page)
    encoder.finish()
    logger.debug("Compressed %d bytes to %d bytes", len(data), len(output))
    return bytes(output)


def decompress_bytes(data: bytes, page_size: int = DEFAULT_PAGE_SIZE) -> bytes:
    """Decompress a whole buffer; fails rather than returning partial output."""
    decoder = PageDecompressor(iter_pages(data, page_size), page_size)
    output = b''.join(decoder)
    logger.debug("Decompressed %d bytes to %d bytes", len(data), len(output))
    return output
