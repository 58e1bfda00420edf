"""Tests for the Wack container layout."""

import numpy as np
import pytest
from engines.container import WackHeader, pack_container, unpack_container, expected_payload_size
from models.errors import ContractError, FormatError


def _header(num_colors=0, chroma_segment_size=1, size=16):
    return WackHeader(width=size, height=size, dct_segment_size=8,
                      chroma_segment_size=chroma_segment_size, num_colors=num_colors)


def _luma(size=16):
    return np.arange(size * size, dtype=np.int16).reshape(size, size) - 100


def test_header_is_little_endian_u16():
    header = WackHeader(1, 2, 3, 4, 0x0105)
    assert header.pack() == bytes([1, 0, 2, 0, 3, 0, 4, 0, 5, 1])
    assert WackHeader.unpack(header.pack()) == header


def test_size_law():
    assert expected_payload_size(_header()) == 10 + 2 * 256 + 2 * 256
    assert expected_payload_size(_header(num_colors=2)) == 10 + 2 * 256 + 256 + 2 * 2
    assert expected_payload_size(_header(chroma_segment_size=0)) == 10 + 2 * 256


def test_raw_chroma_layout():
    chroma = np.full((16, 16, 2), 7, dtype=np.uint8)
    chroma[0, 0] = (200, 201)
    payload = pack_container(_header(), _luma(), chroma=chroma)
    assert len(payload) == expected_payload_size(_header())
    # luma[0, 0] = -100 as little-endian int16
    assert payload[10:12] == (-100).to_bytes(2, 'little', signed=True)
    assert payload[10 + 512:10 + 514] == bytes([200, 201])
    
    record = unpack_container(payload)
    assert record.header == _header()
    assert np.array_equal(record.luma, _luma())
    assert np.array_equal(record.chroma, chroma)
    assert record.indices is None and record.palette is None


def test_paletted_layout():
    indices = np.zeros((16, 16), dtype=np.uint8)
    indices[8:, :] = 1
    palette = np.array([[10, 20], [30, 40]], dtype=np.uint8)
    payload = pack_container(_header(num_colors=2), _luma(), indices=indices, palette=palette)
    assert payload[-4:] == bytes([10, 20, 30, 40])
    
    record = unpack_container(payload)
    assert np.array_equal(record.indices, indices)
    pairs = record.chroma_pairs()
    assert pairs[0, 0].tolist() == [10, 20]
    assert pairs[15, 15].tolist() == [30, 40]


def test_grayscale_has_no_chroma():
    payload = pack_container(_header(chroma_segment_size=0), _luma())
    record = unpack_container(payload)
    assert record.header.is_grayscale
    assert record.chroma_pairs() is None


def test_too_short():
    with pytest.raises(FormatError) as err:
        unpack_container(b'\x01\x00\x02')
    assert err.value.field == 'header'


def test_payload_length_mismatch():
    payload = pack_container(_header(chroma_segment_size=0), _luma())
    with pytest.raises(FormatError) as err:
        unpack_container(payload[:-1])
    assert err.value.field == 'payload_length'
    with pytest.raises(FormatError):
        unpack_container(payload + b'\x00')


def test_palette_index_out_of_range():
    indices = np.full((16, 16), 5, dtype=np.uint8)
    palette = np.zeros((2, 2), dtype=np.uint8)
    payload = pack_container(_header(num_colors=2), _luma(), indices=indices, palette=palette)
    with pytest.raises(FormatError) as err:
        unpack_container(payload)
    assert err.value.field == 'palette_index'


def test_bad_segment_size():
    zero = WackHeader(16, 16, 0, 0, 0).pack() + bytes(512)
    with pytest.raises(FormatError) as err:
        unpack_container(zero)
    assert err.value.field == 'dct_segment_size'
    
    uneven = WackHeader(16, 16, 5, 0, 0).pack() + bytes(512)
    with pytest.raises(FormatError) as err:
        unpack_container(uneven)
    assert err.value.field == 'dct_segment_size'


def test_too_many_colors():
    data = WackHeader(8, 8, 8, 1, 300).pack()
    with pytest.raises(FormatError) as err:
        unpack_container(data)
    assert err.value.field == 'num_colors'


def test_pack_contracts():
    with pytest.raises(ContractError):
        pack_container(_header(), _luma(8))
    with pytest.raises(ContractError):
        pack_container(_header(), _luma())
    with pytest.raises(ContractError):
        pack_container(_header(num_colors=2), _luma(), indices=np.zeros((16, 16), dtype=np.uint8))
    with pytest.raises(ContractError):
        WackHeader(70000, 1, 8, 1, 0).pack()
