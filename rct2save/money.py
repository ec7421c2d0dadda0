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

# Money obfuscation and the loan hash.  Both work on 32-bit values; the
# results are returned as unsigned ints, ready to go into a UInt32 field.
# Inputs may be signed.

MONEY_XOR_KEY = 0xF4EC9621
LOAN_HASH_SEED = 0x70093A


def rol32(value, shift):
    value &= 0xFFFFFFFF
    return ((value << shift) | (value >> (32 - shift))) & 0xFFFFFFFF


def ror32(value, shift):
    value &= 0xFFFFFFFF
    return ((value >> shift) | (value << (32 - shift))) & 0xFFFFFFFF


def encrypt_money(money):
    """
    Scrambles a money value for storage (only used for the park's cash)
    """
    return rol32((money & 0xFFFFFFFF) ^ MONEY_XOR_KEY, 13)


def decrypt_money(value):
    """
    Inverse of `encrypt_money`.  Returns a signed value.
    """
    money = ror32(value, 13) ^ MONEY_XOR_KEY
    if money & 0x80000000:
        money -= 0x100000000
    return money


def get_loan_hash(initial_cash, bank_loan, max_bank_loan):
    """
    Rolling hash over the three loan-related finance values, checked by the
    game on load to detect tampering
    """
    value = LOAN_HASH_SEED
    value = ror32(value - initial_cash, 5)
    value = ror32(value - bank_loan, 7)
    value = ror32(value + max_bank_loan, 3)
    return value
