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

from rct2save.state import ParkState, Ride, RideStation, RideRating, VehicleColour, \
        TrackColour
from rct2save.s6 import S6Image
from rct2save.sawyercoding import CHUNK_HEADER, SawyerEncoding


class Buffer():
    """
    A small stand-in for the output image, for testing fields on their own
    """

    def __init__(self, size=256):
        self.df = io.BytesIO(bytes(size))
        self.offset = 0
        self.parent = None
        self.debug_label = 'Buffer'

    def raw(self):
        return self.df.getvalue()


def ror8(value, shift):
    shift &= 7
    return ((value >> shift) | (value << (8 - shift))) & 0xFF


def decode_rotate(data):
    output = bytearray(len(data))
    code = 1
    for idx, byte in enumerate(data):
        output[idx] = ror8(byte, code)
        code = (code + 2) % 8
    return bytes(output)


def decode_rle(data):
    output = bytearray()
    idx = 0
    while idx < len(data):
        control = data[idx]
        if control & 0x80:
            output.extend(bytes([data[idx+1]]) * (257 - control))
            idx += 2
        else:
            output.extend(data[idx+1:idx+2+control])
            idx += 2 + control
    return bytes(output)


def decode_repeat(data):
    output = bytearray()
    idx = 0
    while idx < len(data):
        if data[idx] == 0xFF:
            output.append(data[idx+1])
            idx += 2
        else:
            count = (data[idx] & 7) + 1
            start = len(output) - 32 + (data[idx] >> 3)
            output.extend(output[start:start+count])
            idx += 1
    return bytes(output)


def decode_chunk(encoding, payload):
    match encoding:
        case SawyerEncoding.NONE.value:
            return payload
        case SawyerEncoding.RLE.value:
            return decode_rle(payload)
        case SawyerEncoding.RLECOMPRESSED.value:
            return decode_repeat(decode_rle(payload))
        case SawyerEncoding.ROTATE.value:
            return decode_rotate(payload)
    raise ValueError(f'Unknown encoding {encoding}')


def parse_chunks(data, skip_after_first=0):
    """
    Splits a written file into `(encoding, payload)` tuples, returning them
    along with the stored checksum.  `skip_after_first` bytes of raw data
    (packed objects) are expected after the first `n` chunks, given as an
    `(n, num_bytes)` tuple.
    """
    chunks = []
    idx = 0
    end = len(data) - 4
    while idx < end:
        if skip_after_first and len(chunks) == skip_after_first[0]:
            idx += skip_after_first[1]
            skip_after_first = 0
            continue
        encoding, length = CHUNK_HEADER.unpack_from(data, idx)
        idx += CHUNK_HEADER.size
        chunks.append((encoding, data[idx:idx+length]))
        idx += length
    checksum = struct.unpack('<I', data[end:])[0]
    return chunks, checksum


@pytest.fixture
def buffer():
    return Buffer()


@pytest.fixture
def chunk_parser():
    return parse_chunks


@pytest.fixture
def chunk_decoder():
    return decode_chunk


@pytest.fixture
def image():
    return S6Image()


@pytest.fixture
def blank_state():
    return ParkState()


@pytest.fixture
def populated_ride():
    ride = Ride(
            id=3,
            type=2,
            subtype=7,
            name=0x8001,
            inversions=5,
            sheltered_eighths=2,
            ratings=RideRating(excitement=650, intensity=540, nausea=320),
            num_stations=1,
            price=20,
            )
    ride.stations[0] = RideStation(
            start=(10, 12),
            height=14,
            length=6,
            entrance=(10, 11),
            exit=(11, 11),
            segment_length=1000,
            segment_time=60,
            )
    ride.vehicle_colours[0] = VehicleColour(body=4, trim=9, ternary=21)
    ride.track_colours[1] = TrackColour(main=1, additional=2, supports=3)
    return ride
