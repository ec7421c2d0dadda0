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

import sys

__version__ = '0.1.0'

# Process-wide debug switch.  When set, every field in the output image
# reports its offsets to stderr as it's laid out.
DEBUG = False


def set_debug(debug=True):
    """
    Turns debug output on (or off, if `debug` is `False`)
    """
    global DEBUG
    DEBUG = debug


def is_debug():
    """
    Returns whether we're in debug mode
    """
    return DEBUG


def log_warning(message):
    """
    Reports a non-fatal problem found while exporting.  The export carries
    on regardless.
    """
    print(f'WARNING: {message}', file=sys.stderr)


def log_error(message):
    """
    Reports a data-quality problem which we've recovered from.
    """
    print(f'ERROR: {message}', file=sys.stderr)
