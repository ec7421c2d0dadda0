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

import struct

from .datafile import LabelEnum

# Chunk framing for the legacy park files.  Each chunk is a five-byte
# header (encoding byte plus little-endian u32 payload length) followed
# by the encoded payload.  The whole file is then followed by a u32
# checksum, which is just the sum of every byte before it.

CHUNK_HEADER = struct.Struct('<BI')


class SawyerEncoding(LabelEnum):
    """
    Per-chunk payload encodings
    """

    NONE =          (0, 'None')
    RLE =           (1, 'RLE')
    RLECOMPRESSED = (2, 'RLE + Repeat')
    ROTATE =        (3, 'Rotate')


def rol8(value, shift):
    """
    Rotates a byte left by `shift` bits
    """
    shift &= 7
    return ((value << shift) | (value >> (8 - shift))) & 0xFF


def encode_rotate(data):
    """
    Byte-rotation obfuscation: each byte is rotated left, with the rotation
    amount cycling 1, 3, 5, 7, 1, ...  Not a compression scheme, so the
    output is the same length as the input.
    """
    output = bytearray(len(data))
    code = 1
    for idx, byte in enumerate(data):
        output[idx] = rol8(byte, code)
        code = (code + 2) % 8
    return bytes(output)


def encode_rle(data):
    """
    Run-length encodes `data`.  Output is a series of packets: a control byte
    `n` in 0..127 is followed by `n+1` literal bytes, while a control byte
    `257-n` (as a signed byte, -1..-124) is followed by a single byte which
    is repeated `n` times.  Runs are capped at 125 bytes and literal
    stretches at 126.
    """
    data = bytes(data)
    length = len(data)
    output = bytearray()
    src = 0
    count = 0
    literal_start = 0
    while src < length - 1:
        if (count and data[src] == data[src+1]) or count > 125:
            output.append(count - 1)
            output.extend(data[literal_start:literal_start+count])
            literal_start += count
            count = 0
        if data[src] == data[src+1]:
            while count < 125 and src + count < length:
                if data[src] != data[src+count]:
                    break
                count += 1
            output.append((257 - count) & 0xFF)
            output.append(data[src])
            src += count
            literal_start = src
            count = 0
        else:
            count += 1
            src += 1
    if src == length - 1:
        count += 1
    if count:
        output.append(count - 1)
        output.extend(data[literal_start:literal_start+count])
    return bytes(output)


def encode_repeat(data):
    """
    Back-reference ("repeat") encoding, applied before RLE for the
    `RLECOMPRESSED` encoding.  Every position either emits a literal (`0xFF`
    followed by the byte) or a single byte referring back up to 32 bytes
    into the already-processed data, copying 1 to 8 bytes from there.  The
    reference must lie entirely before the current position.

    When there are multiple candidate references, the longest one wins; of
    those, the one furthest back wins.
    """
    data = bytes(data)
    length = len(data)
    if length == 0:
        return b''
    output = bytearray([0xFF, data[0]])
    idx = 1
    while idx < length:
        search_start = max(0, idx - 32)
        best_index = None
        best_count = 0
        # `find` with an end bound of `idx` only matches references which
        # finish before the current position.
        for count in range(min(8, length - idx), 0, -1):
            found = data.find(data[idx:idx+count], search_start, idx)
            if found != -1:
                best_index = found
                best_count = count
                break
        if best_index is None:
            output.append(0xFF)
            output.append(data[idx])
            idx += 1
        else:
            output.append((best_count - 1) | ((32 - (idx - best_index)) << 3))
            idx += best_count
    return bytes(output)


def encode_chunk(data, encoding):
    """
    Encodes a chunk payload with the given `SawyerEncoding`
    """
    match encoding:
        case SawyerEncoding.NONE:
            return bytes(data)
        case SawyerEncoding.RLE:
            return encode_rle(data)
        case SawyerEncoding.RLECOMPRESSED:
            return encode_rle(encode_repeat(data))
        case SawyerEncoding.ROTATE:
            return encode_rotate(data)
        case _:
            raise ValueError(f'Unknown chunk encoding: {encoding}')


def calculate_checksum(data):
    """
    The file checksum: a plain 32-bit sum of every byte
    """
    return sum(data) & 0xFFFFFFFF


class SawyerChunkWriter():
    """
    Writes encoded chunks, one after another, to a stream.  The stream must
    be seekable and readable as well, since the checksum is computed by
    reading back everything which was written.
    """

    def __init__(self, stream):
        self.stream = stream
        self.chunks = []

    def write_chunk(self, data, encoding):
        """
        Encodes `data` and writes it out along with its chunk header.
        Returns the number of bytes written to the stream.
        """
        encoded = encode_chunk(data, encoding)
        self.stream.write(CHUNK_HEADER.pack(encoding.value, len(encoded)))
        self.stream.write(encoded)
        self.chunks.append((encoding, len(data), len(encoded)))
        return CHUNK_HEADER.size + len(encoded)

    def write_raw(self, data):
        """
        Writes already-framed data (such as packed objects) straight through
        """
        self.stream.write(data)

    def write_checksum(self):
        """
        Reads back everything written so far, and appends the checksum.
        Returns the checksum.
        """
        file_size = self.stream.tell()
        self.stream.seek(0)
        checksum = calculate_checksum(self.stream.read(file_size))
        self.stream.seek(file_size)
        self.stream.write(struct.pack('<I', checksum))
        return checksum
