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

import json
import sys

import pytest

from rct2save import cli
from rct2save.s6 import has_image_support


def run_cli(monkeypatch, *args):
    monkeypatch.setattr(sys, 'argv', ['sv6', *[str(arg) for arg in args]])
    return cli.main()


def test_export_park(tmp_path, monkeypatch, capsys):
    park = tmp_path / 'park.json'
    park.write_text(json.dumps({
        'finances': {'cash': 5000},
        'rides': [{'id': 0, 'type': 3}],
        'track': [{'x': 5, 'y': 5, 'ride': 0}],
        }))
    output = tmp_path / 'park.sc6'
    args = ['-i', park, '-s', '--info', '--name', 'Test Park', output]
    if has_image_support:
        args[0:0] = ['--map-image', tmp_path / 'map.png']
    assert run_cli(monkeypatch, *args)
    assert output.exists()
    out = capsys.readouterr().out
    assert f'Wrote park to: {output}' in out
    assert 'Scenario: ' in out
    assert ' - Rides: 1' in out
    assert ' - Cash: 5,000' in out
    if has_image_support:
        assert (tmp_path / 'map.png').exists()


def test_refuses_overwrite(tmp_path, monkeypatch, capsys):
    output = tmp_path / 'park.sv6'
    output.write_bytes(b'original')
    monkeypatch.setattr('builtins.input', lambda prompt: 'n')
    assert not run_cli(monkeypatch, output)
    assert output.read_bytes() == b'original'
    assert 'NOTICE: File NOT written' in capsys.readouterr().out


class Args:
    force = False


def test_check_file_overwrite(tmp_path, monkeypatch):
    filename = tmp_path / 'existing'
    assert cli.check_file_overwrite(Args(), filename)
    filename.write_bytes(b'')
    monkeypatch.setattr('builtins.input', lambda prompt: 'Yes')
    assert cli.check_file_overwrite(Args(), filename)
    monkeypatch.setattr('builtins.input', lambda prompt: '')
    assert not cli.check_file_overwrite(Args(), filename)
    forced = Args()
    forced.force = True
    assert cli.check_file_overwrite(forced, filename)
