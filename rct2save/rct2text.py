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

# Conversion from UTF-8 text into the legacy single-byte text encoding.
# Codepoints below 256 are stored as-is, a handful of symbols have their
# own dedicated byte, anything else in the Basic Multilingual Plane is
# stored as a three-byte `0xFF hi lo` sequence, and anything beyond that
# becomes a question mark.

MULTIBYTE_MARKER = 0xFF

# Unicode codepoint -> legacy byte, for the glyphs which the legacy font
# has at a different spot than Latin-1 would put them.  Characters with no
# legacy glyph at all go out in the multibyte form.
UNICODE_TO_RCT2 = {
    # Polish letters
    0x0104: 159,    # A ogonek
    0x0106: 162,    # C acute
    0x0118: 166,    # E ogonek
    0x0141: 167,    # L stroke
    0x0143: 198,    # N acute
    0x015A: 208,    # S acute
    0x0179: 215,    # Z acute
    0x017B: 216,    # Z dot
    0x0105: 221,    # a ogonek
    0x0107: 222,    # c acute
    0x0119: 230,    # e ogonek
    0x0144: 240,    # n acute
    0x0142: 247,    # l stroke
    0x015B: 248,    # s acute
    0x017A: 253,    # z acute
    0x017C: 254,    # z dot

    # Symbols
    0x25B2: 160,    # up arrow
    0x25BC: 170,    # down arrow
    0x2713: 172,    # tick
    0x274C: 173,    # cross
    0x25B6: 175,    # right arrow
    0x201C: 180,    # opening quotes
    0x20AC: 181,    # euro
    0x207B: 187,    # superscript minus
    0x2022: 188,    # bullet
    0x25B4: 189,    # small up arrow
    0x25BE: 190,    # small down arrow
    0x25C0: 191,    # left arrow
    0x201D: 34,     # closing quotes
}


def convert_codepoint(codepoint):
    """
    Maps a single unicode codepoint to its legacy equivalent.  The return
    value may still be above 255, in which case it needs the multibyte
    form.
    """
    return UNICODE_TO_RCT2.get(codepoint, codepoint)


def utf8_to_rct2(text):
    """
    Converts `text` (a `str`, or UTF-8 `bytes`) to legacy-encoded bytes.
    Conversion stops at the first NUL.
    """
    if isinstance(text, (bytes, bytearray)):
        text = bytes(text).split(b'\x00', 1)[0].decode('utf-8', errors='ignore')
    output = bytearray()
    for char in text:
        codepoint = convert_codepoint(ord(char))
        if codepoint == 0:
            break
        if codepoint <= 0xFF:
            output.append(codepoint)
        elif codepoint <= 0xFFFF:
            output.append(MULTIBYTE_MARKER)
            output.append((codepoint >> 8) & 0xFF)
            output.append(codepoint & 0xFF)
        else:
            output.append(ord('?'))
    return bytes(output)


def fit_rct2(encoded, length):
    """
    Truncates already-converted text so that it fits in a `length`-byte
    field, including its NUL terminator, without splitting a multibyte
    sequence.  Returns exactly `length` bytes, NUL-padded.
    """
    output = bytearray()
    idx = 0
    while idx < len(encoded) and len(output) < length - 1:
        if encoded[idx] == MULTIBYTE_MARKER:
            if len(output) < length - 3:
                output.extend(encoded[idx:idx+3])
                idx += 3
            else:
                break
        else:
            output.append(encoded[idx])
            idx += 1
    output.extend(b'\x00' * (length - len(output)))
    return bytes(output)


def convert_field(raw, length=None):
    """
    In-place style conversion of a fixed-width field which currently holds
    UTF-8 text: returns the legacy-encoded replacement, of the same width.
    """
    if length is None:
        length = len(raw)
    return fit_rct2(utf8_to_rct2(raw), length)


def is_null_or_empty(raw):
    """
    Whether a fixed-width text field is empty
    """
    return len(raw) == 0 or raw[0] == 0
