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

from rct2save.rct2text import utf8_to_rct2, fit_rct2, convert_field, is_null_or_empty


def test_plain_ascii():
    assert utf8_to_rct2('Hello') == b'Hello'


def test_latin1_passes_through():
    assert utf8_to_rct2('Café') == b'Caf\xe9'


def test_special_glyphs():
    assert utf8_to_rct2('€') == bytes([181])
    assert utf8_to_rct2('“Hi”') == bytes([180]) + b'Hi"'
    assert utf8_to_rct2('•▴▾◀') == bytes([188, 189, 190, 191])


def test_polish_letters():
    assert utf8_to_rct2('Łódź') == bytes([167, 0xF3, ord('d'), 253])
    assert utf8_to_rct2('ĄĆĘŃŚŹŻ') == bytes([159, 162, 166, 198, 208, 215, 216])
    assert utf8_to_rct2('ąćęłńśż') == bytes([221, 222, 230, 247, 240, 248, 254])


def test_multibyte():
    assert utf8_to_rct2('あ') == b'\xff\x30\x42'


def test_outside_bmp():
    assert utf8_to_rct2('a\U0001F600b') == b'a?b'


def test_bytes_input_stops_at_nul():
    assert utf8_to_rct2('Café\x00junk'.encode('utf-8')) == b'Caf\xe9'


def test_fit_does_not_split_multibyte():
    assert fit_rct2(b'ab\xff\x30\x42', 5) == b'ab\x00\x00\x00'
    assert fit_rct2(b'ab\xff\x30\x42', 6) == b'ab\xff\x30\x42\x00'


def test_fit_pads_and_terminates():
    assert fit_rct2(b'abc', 8) == b'abc' + bytes(5)
    assert fit_rct2(b'abcdefgh', 4) == b'abc\x00'


def test_convert_field_keeps_width():
    raw = 'Café あ'.encode('utf-8').ljust(16, b'\x00')
    assert convert_field(raw) == b'Caf\xe9 \xff\x30\x42'.ljust(16, b'\x00')


def test_null_or_empty():
    assert is_null_or_empty(b'')
    assert is_null_or_empty(b'\x00abc')
    assert not is_null_or_empty(b'a\x00')
