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

import os
import sys
import enum
import struct
import collections

from . import is_debug

# "Generic" data processing for the S6 output image.  The image is one big
# fixed-size block of memory (an `io.BytesIO` object) and every field in
# it lives at a fixed offset.  Fields can be defined either in-line with
# each other (in which case there's no need to pass in an explicit offset),
# or by specifying an offset.  If passed in, the offset is expected to be
# *relative* to the passed-in parent offset.
#
# Unlike a savegame *editor*, we're mostly writing here, so field values
# are only read back from the image when somebody actually asks for them.
# The image starts out zero-filled, so any field we don't explicitly write
# ends up as zero rather than whatever was left over from a previous export.


class Bounds(enum.Enum):
    """
    Types of bounds that we'll check for
    """

    NONE = enum.auto()
    SIGNED = enum.auto()
    UNSIGNED = enum.auto()


# Low-level datatypes we'll be writing into the image
NumType = collections.namedtuple('NumType', ['num_bytes', 'struct_char', 'bounds'])
UInt8 =  NumType(1, 'B', Bounds.UNSIGNED)
Int8 =   NumType(1, 'b', Bounds.SIGNED)
UInt16 = NumType(2, 'H', Bounds.UNSIGNED)
Int16 =  NumType(2, 'h', Bounds.SIGNED)
UInt32 = NumType(4, 'I', Bounds.UNSIGNED)
Int32 =  NumType(4, 'i', Bounds.SIGNED)


def num_type_limits(num_type):
    """
    Returns a `(min_value, max_value)` tuple for the given `NumType`.  Either
    may be `None` if the type isn't bounds-checked.
    """
    match num_type.bounds:
        case Bounds.SIGNED:
            return (-(2**((num_type.num_bytes*8)-1)), 2**((num_type.num_bytes*8)-1)-1)
        case Bounds.UNSIGNED:
            return (0, 2**(num_type.num_bytes*8)-1)
        case _:
            return (None, None)


class Data():
    """
    Something living at a fixed spot in the output image.  `parent` must
    provide `df` (the image's `io.BytesIO`) and `offset`.  An explicit
    `offset` is taken relative to the parent; without one, the field starts
    wherever the image's filehandle currently sits, which lets records lay
    their fields out one after another.  The filehandle is left at the
    start of this field.
    """

    def __init__(self, debug_label, parent, /, offset=None):
        self.debug_label = debug_label
        self.parent = parent
        self.__indent = None
        self.df = self.parent.df
        if offset is None:
            self.offset = self.df.tell()
        else:
            self.offset = offset
            if self.parent is not None:
                self.offset += self.parent.offset
            self.df.seek(self.offset, os.SEEK_SET)

        # Debug mode reports where everything lands
        if is_debug():
            report = []
            absolute = self.offset
            report.append(f'0x{absolute:X} absolute')
            if self.parent is not None:
                relative = self.offset - self.parent.offset
                if relative != absolute:
                    report.append(f'0x{relative:X} from {self.parent.debug_label}')
            print('{}- {}:\t{}'.format(
                '  '*self._indent,
                self.debug_label,
                ",\t".join(report),
                ), file=sys.stderr)

    @property
    def _indent(self):
        """
        Nesting depth, for indenting the debug offset report
        """
        if self.__indent is None:
            self.__indent = 0
            cur = self
            while True:
                try:
                    cur = cur.parent
                    if cur is None:
                        break
                    self.__indent += 1
                except AttributeError:
                    break
        return self.__indent

    def fill(self, num_bytes, fill_byte=b'\x00'):
        """
        Overwrites `num_bytes` bytes starting at our offset with `fill_byte`.
        Leaves the filehandle at the end of the filled area.
        """
        self.df.seek(self.offset, os.SEEK_SET)
        self.df.write(fill_byte * num_bytes)


class NumData(Data):
    """
    A single little-endian number, laid out according to `num_type` (one of
    the `NumType`s above).  Writes go through the `value` property, which
    range-checks against the type and raises `ValueError` for anything
    which won't fit.  Reads come back from the image itself.
    """

    def __init__(self, debug_label, parent, num_type, /, offset=None):
        super().__init__(debug_label, parent, offset=offset)
        self.num_type = num_type
        self.struct_string = f'<{self.num_type.struct_char}'
        self.min_value, self.max_value = num_type_limits(self.num_type)
        self._value = None

        # We don't read anything in here; most fields are write-only as far
        # as we're concerned.  Skip past our data so that subsequent in-line
        # fields land in the right spot.
        self.df.seek(self.num_type.num_bytes, os.SEEK_CUR)

    @property
    def value(self):
        """
        Returns our raw value, reading it from the image if we haven't
        written (or read) it yet.
        """
        if self._value is None:
            self.df.seek(self.offset, os.SEEK_SET)
            self._value = struct.unpack(self.struct_string, self.df.read(self.num_type.num_bytes))[0]
            self._post_value_set()
        return self._value

    @value.setter
    def value(self, new_value):
        """
        Sets our new value, potentially doing bounds checking at the same time.
        Will raise a `ValueError` if the bounds have been exceeded.
        """
        if self.min_value is not None and new_value < self.min_value:
            raise ValueError(f'{self.debug_label}: Minimum value is {self.min_value} (got {new_value})')
        if self.max_value is not None and new_value > self.max_value:
            raise ValueError(f'{self.debug_label}: Maximum value is {self.max_value} (got {new_value})')
        self.df.seek(self.offset, os.SEEK_SET)
        self.df.write(struct.pack(self.struct_string, new_value))
        self._value = new_value
        self._post_value_set()

    def _post_value_set(self):
        """
        Hook for subclasses, run whenever `_value` changes
        """
        pass

    @property
    def label(self):
        return self.value

    def __str__(self):
        return str(self.label)

    def __eq__(self, other):
        if isinstance(other, NumData):
            return self.value == other.value
        return self.value == other

    __hash__ = Data.__hash__


class LabelEnum(enum.Enum):
    """
    Enum whose members are `(value, label)` tuples.  The label is what gets
    shown to users (in `--info` output and debug reporting).
    """

    def __new__(cls, value, label):
        obj = object.__new__(cls)
        obj._value_ = value
        obj.label = label
        return obj

    def __str__(self):
        return self.label


class NumChoiceData(NumData):
    """
    A number whose known values are listed by the `LabelEnum` class
    `choices`, such as the file type in the header or a sprite's
    identifier.  Values outside of `choices` can still be written; `choice`
    is `None` for those.
    """

    def __init__(self, debug_label, parent, num_type, choices, /, offset=None):
        self.choices = choices
        self.choice = None
        super().__init__(debug_label, parent, num_type, offset=offset)

    @NumData.value.setter
    def value(self, new_value):
        """
        Accepts either a raw number or a member of `choices`
        """
        if isinstance(new_value, self.choices):
            new_value = new_value.value
        # `super().value = new_value` doesn't work for property setters; see
        # https://github.com/python/cpython/issues/59170
        super(NumChoiceData, NumChoiceData).value.fset(self, new_value)

    def _post_value_set(self):
        try:
            self.choice = self.choices(self._value)
        except ValueError:
            self.choice = None

    @property
    def label(self):
        value = self.value
        if self.choice is None:
            return value
        else:
            return self.choice.label

    def __eq__(self, other):
        if isinstance(other, (NumData, LabelEnum)):
            return self.value == other.value
        return self.value == other

    __hash__ = NumData.__hash__


class NumArrayData(Data):
    """
    A fixed-length array of numeric data, all of the same `NumType`.  This
    is used for all the per-station / per-car / history tables in the image.
    Values are packed all at once via the `values` property; individual
    elements can also be set with `set(index, value)`.
    """

    def __init__(self, debug_label, parent, num_type, count, /, offset=None):
        super().__init__(debug_label, parent, offset=offset)
        self.num_type = num_type
        self.count = count
        self.min_value, self.max_value = num_type_limits(self.num_type)
        self.struct_string = f'<{self.count}{self.num_type.struct_char}'
        self.num_bytes = self.num_type.num_bytes*self.count
        self.df.seek(self.num_bytes, os.SEEK_CUR)

    def __len__(self):
        return self.count

    def _check(self, value):
        """
        Bounds-checks a single element, raising `ValueError` if it doesn't fit.
        """
        if self.min_value is not None and value < self.min_value:
            raise ValueError(f'{self.debug_label}: Minimum value is {self.min_value} (got {value})')
        if self.max_value is not None and value > self.max_value:
            raise ValueError(f'{self.debug_label}: Maximum value is {self.max_value} (got {value})')

    @property
    def values(self):
        """
        Reads the whole array back out of the image, as a list
        """
        self.df.seek(self.offset, os.SEEK_SET)
        return list(struct.unpack(self.struct_string, self.df.read(self.num_bytes)))

    @values.setter
    def values(self, new_values):
        """
        Writes the whole array.  If `new_values` is shorter than the array,
        the remaining elements are zeroed; if it's longer, a `ValueError` is
        raised.
        """
        new_values = list(new_values)
        if len(new_values) > self.count:
            raise ValueError(f'{self.debug_label}: at most {self.count} values can be stored (got {len(new_values)})')
        for value in new_values:
            self._check(value)
        new_values.extend([0]*(self.count-len(new_values)))
        self.df.seek(self.offset, os.SEEK_SET)
        self.df.write(struct.pack(self.struct_string, *new_values))

    def __getitem__(self, index):
        if index < 0 or index >= self.count:
            raise IndexError(f'{self.debug_label}: index {index} out of range')
        self.df.seek(self.offset + index*self.num_type.num_bytes, os.SEEK_SET)
        return struct.unpack(f'<{self.num_type.struct_char}', self.df.read(self.num_type.num_bytes))[0]

    def set(self, index, value):
        """
        Sets a single element of the array
        """
        if index < 0 or index >= self.count:
            raise IndexError(f'{self.debug_label}: index {index} out of range')
        self._check(value)
        self.df.seek(self.offset + index*self.num_type.num_bytes, os.SEEK_SET)
        self.df.write(struct.pack(f'<{self.num_type.struct_char}', value))

    def fill_value(self, value):
        """
        Sets every element of the array to `value`
        """
        self.values = [value]*self.count


class BytesData(Data):
    """
    A raw block of bytes of a fixed size.  Writes shorter than the block are
    padded with `pad_byte`; longer writes raise `ValueError`.
    """

    def __init__(self, debug_label, parent, num_bytes, /, offset=None, pad_byte=b'\x00'):
        super().__init__(debug_label, parent, offset=offset)
        self.num_bytes = num_bytes
        self.pad_byte = pad_byte
        self.df.seek(self.num_bytes, os.SEEK_CUR)

    def __len__(self):
        return self.num_bytes

    @property
    def value(self):
        self.df.seek(self.offset, os.SEEK_SET)
        return self.df.read(self.num_bytes)

    @value.setter
    def value(self, new_value):
        if not isinstance(new_value, (bytes, bytearray)):
            raise ValueError(f'{self.debug_label}: expected bytes, got {type(new_value).__name__}')
        if len(new_value) > self.num_bytes:
            raise ValueError(f'{self.debug_label}: at most {self.num_bytes} bytes can be stored (got {len(new_value)})')
        self.df.seek(self.offset, os.SEEK_SET)
        self.df.write(new_value)
        self.df.write(self.pad_byte * (self.num_bytes-len(new_value)))


class StringData(BytesData):
    """
    A fixed-width, NUL-terminated string field.  Setting `value` to a `str`
    stores it as UTF-8; `bytes` are stored as-is (used for text which has
    already been converted to the legacy encoding).  Anything which doesn't
    fit is truncated so that there's always room for the terminator.

    Reading `text` returns the bytes up to the first NUL.
    """

    def __init__(self, debug_label, parent, num_bytes, /, offset=None):
        super().__init__(debug_label, parent, num_bytes, offset=offset)

    @BytesData.value.setter
    def value(self, new_value):
        if isinstance(new_value, str):
            new_value = new_value.encode('utf-8')
        if not isinstance(new_value, (bytes, bytearray)):
            raise ValueError(f'{self.debug_label}: expected str or bytes, got {type(new_value).__name__}')
        new_value = bytes(new_value).split(b'\x00', 1)[0][:self.num_bytes-1]
        super(StringData, StringData).value.fset(self, new_value)

    def set_raw(self, new_value):
        """
        Writes `new_value` verbatim, without stopping at embedded NULs.  The
        legacy text encoding's multibyte sequences may legitimately contain
        zero bytes, so converted text goes in through here.  The caller is
        responsible for the terminator.
        """
        BytesData.value.fset(self, bytes(new_value)[:self.num_bytes])

    @property
    def text(self):
        """
        Returns the raw bytes of our string, without the terminator or padding
        """
        return self.value.split(b'\x00', 1)[0]

    def __str__(self):
        return self.text.decode('utf-8', errors='replace')


class BitmaskData(NumArrayData):
    """
    A packed bit-vector made up of a number of unsigned words.  Bit `n` lives
    in bit `n % bits_per_word` of word `n // bits_per_word`, with the words
    stored in ascending order.  `max_bits` is the number of bits which are
    actually meaningful.

    Bits are accumulated in memory and flushed to the image on each
    `set_bit`/`clear_bit`/`clear` call, so the individual words in the image
    are always current.
    """

    def __init__(self, debug_label, parent, num_type, count, max_bits, /, offset=None):
        super().__init__(debug_label, parent, num_type, count, offset=offset)
        if self.num_type.bounds != Bounds.UNSIGNED:
            raise RuntimeError('BitmaskData objects can only be populated with unsigned numeric data')
        self.bits_per_word = self.num_type.num_bytes*8
        if max_bits > self.bits_per_word*self.count:
            raise RuntimeError(f'{self.debug_label}: {max_bits} bits will not fit in {self.count} words')
        self.max_bits = max_bits
        self._words = [0]*self.count

    def __str__(self):
        """
        When being represented as a string, we'll default to our bit count.
        """
        return str(len(self))

    def __len__(self):
        """
        The number of bits set in our structure
        """
        return sum(word.bit_count() for word in self._words)

    def clear(self):
        """
        Fill the entire bit structure with 0s
        """
        self._words = [0]*self.count
        self.values = self._words

    def set_bit(self, bit):
        """
        Sets the specified bit within the bitfield.
        """
        if bit < 0 or bit >= self.max_bits:
            raise ValueError(f'Cannot alter bit {bit}; only {self.max_bits} are used')
        self._words[bit // self.bits_per_word] |= 1 << (bit % self.bits_per_word)
        self.set(bit // self.bits_per_word, self._words[bit // self.bits_per_word])

    def clear_bit(self, bit):
        """
        Clears the specified bit within the bitfield.
        """
        if bit < 0 or bit >= self.max_bits:
            raise ValueError(f'Cannot alter bit {bit}; only {self.max_bits} are used')
        self._words[bit // self.bits_per_word] &= ~(1 << (bit % self.bits_per_word))
        self.set(bit // self.bits_per_word, self._words[bit // self.bits_per_word])

    @property
    def words(self):
        """
        The words making up the bitmask, as they are stored in the image
        """
        return self.values
