"""Tests for the paged deflate stage."""

import zlib

import numpy as np
import pytest
from engines.entropy import PageCompressor, PageDecompressor, compress_bytes, decompress_bytes, iter_pages
from models.errors import EntropyError


def _sample(size: int = 5000) -> bytes:
    rng = np.random.default_rng(1)
    return rng.integers(0, 8, size=size, dtype=np.uint8).tobytes()


def test_round_trip():
    data = _sample()
    assert decompress_bytes(compress_bytes(data)) == data


def test_round_trip_other_page_size():
    data = _sample(3000)
    assert decompress_bytes(compress_bytes(data, page_size=100), page_size=333) == data


def test_zeros_shrink():
    assert len(compress_bytes(bytes(10000))) < 200


def test_iter_pages():
    pages = list(iter_pages(bytes(2500), 1024))
    assert [len(p) for p in pages] == [1024, 1024, 452]


def test_push_encoder_emits_to_sink():
    chunks = []
    encoder = PageCompressor(chunks.append, page_size=1024)
    for page in iter_pages(_sample(), 1024):
        encoder.write(page)
    encoder.finish()
    assert chunks
    assert zlib.decompress(b''.join(chunks)) == _sample()


def test_pull_decoder_yields_full_pages():
    data = _sample(2500)
    compressed = compress_bytes(data)
    pages = list(PageDecompressor(iter_pages(compressed, 64), page_size=1024))
    assert [len(p) for p in pages] == [1024, 1024, 452]
    assert b''.join(pages) == data


def test_write_after_finish():
    encoder = PageCompressor(lambda chunk: None)
    encoder.finish()
    with pytest.raises(EntropyError):
        encoder.write(b'abc')


def test_oversized_page_rejected():
    encoder = PageCompressor(lambda chunk: None, page_size=4)
    with pytest.raises(ValueError):
        encoder.write(b'abcdef')


def test_truncated_stream():
    compressed = compress_bytes(_sample())
    with pytest.raises(EntropyError):
        decompress_bytes(compressed[:len(compressed) // 2])


def test_garbage_stream():
    with pytest.raises(EntropyError):
        decompress_bytes(b'not a deflate stream at all')


def test_empty_stream():
    with pytest.raises(EntropyError):
        decompress_bytes(b'')


def test_trailing_data():
    with pytest.raises(EntropyError):
        decompress_bytes(compress_bytes(b'hello') + b'extra')
