#!/usr/bin/env python3
# vim: set expandtab tabstop=4 shiftwidth=4:

# Copyright (C) 2024 Christopher J. Kucera
#
# rct2save is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>

import io
import struct

import pytest

from rct2save.sawyercoding import SawyerEncoding, SawyerChunkWriter, encode_rotate, \
        encode_rle, encode_repeat, encode_chunk, calculate_checksum, rol8


def test_rol8():
    assert rol8(0x81, 1) == 0x03
    assert rol8(0x01, 7) == 0x80
    assert rol8(0x5A, 8) == 0x5A


def test_rotate_cycles_shift_amounts():
    assert encode_rotate(b'\x01'*5) == bytes([0x02, 0x08, 0x20, 0x80, 0x02])
    assert len(encode_rotate(bytes(range(100)))) == 100


def test_rotate_is_reversible(chunk_decoder):
    data = bytes(range(256))*3
    assert chunk_decoder(SawyerEncoding.ROTATE.value, encode_rotate(data)) == data


def test_rle_run():
    assert encode_rle(b'\x00'*10) == bytes([257-10, 0])


def test_rle_literal():
    assert encode_rle(b'abc') == b'\x02abc'


def test_rle_mixed(chunk_decoder):
    data = b'ab' + b'\x07'*200 + b'xyz' + b'\x01\x02\x02'
    encoded = encode_rle(data)
    # The 200-byte run has to be split, since runs max out at 125
    assert bytes([257-125, 7]) in encoded
    assert chunk_decoder(SawyerEncoding.RLE.value, encoded) == data


def test_rle_long_literal(chunk_decoder):
    data = bytes(i % 251 for i in range(1000))
    assert chunk_decoder(SawyerEncoding.RLE.value, encode_rle(data)) == data


def test_repeat_starts_with_literal():
    assert encode_repeat(b'') == b''
    assert encode_repeat(b'A') == b'\xffA'


def test_repeat_back_reference():
    # The second "AB" is a two-byte copy from two bytes back
    assert encode_repeat(b'ABAB') == bytes([0xFF, 0x41, 0xFF, 0x42, (2-1) | ((32-2) << 3)])


def test_rlecompressed_reversible(chunk_decoder):
    data = (b'\x00\x80\x0e\x0e\x00\x00\x01\x00'*40) + bytes(range(64)) + bytes(300)
    encoded = encode_chunk(data, SawyerEncoding.RLECOMPRESSED)
    assert len(encoded) < len(data)
    assert chunk_decoder(SawyerEncoding.RLECOMPRESSED.value, encoded) == data


def test_encode_chunk_unknown():
    with pytest.raises(ValueError):
        encode_chunk(b'abc', 'bogus')


def test_checksum():
    assert calculate_checksum(b'\x01\x02\x03') == 6


def test_chunk_writer(chunk_parser):
    stream = io.BytesIO()
    writer = SawyerChunkWriter(stream)
    written = writer.write_chunk(b'hello', SawyerEncoding.NONE)
    assert written == 10
    writer.write_chunk(bytes(50), SawyerEncoding.RLECOMPRESSED)
    checksum = writer.write_checksum()

    data = stream.getvalue()
    assert data[:10] == b'\x00\x05\x00\x00\x00hello'
    assert struct.unpack('<I', data[-4:])[0] == checksum
    assert checksum == sum(data[:-4])

    chunks, stored = chunk_parser(data)
    assert stored == checksum
    assert [encoding for encoding, _ in chunks] == [0, 2]
    assert writer.chunks[0] == (SawyerEncoding.NONE, 5, 5)
    assert writer.chunks[1][1] == 50
