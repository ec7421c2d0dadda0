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

import pytest

from rct2save.state import ParkState, SpriteTable, Peep, Ride, ObjectCatalog, SpriteList, \
        SpriteIdentifier, add_track_element, blank_tile_elements, SPRITE_INDEX_NULL, \
        MAX_SPRITES, BANNER_NULL, RIDE_TYPE_NULL, TILE_ELEMENT_FLAG_LAST_TILE
from rct2save.s6 import TILES_SIZE
from rct2save.transcode import export_rides
from rct2save.repairs import sprite_list_find_cycle, check_for_sprite_list_cycles, \
        check_for_spatial_index_cycles, iter_sprite_list, fix_disjoint_sprites, \
        sprite_clear_all_unused, banner_index_of, scenario_fix_ghosts, \
        ride_all_has_any_track_elements, scenario_remove_trackless_rides, \
        convert_strings_to_rct2


def test_free_list_cycle(blank_state):
    sprites = blank_state.sprites
    assert check_for_sprite_list_cycles(blank_state) is None
    sprites[5].next = 2
    assert sprite_list_find_cycle(sprites, 0) == 5
    assert check_for_sprite_list_cycles(blank_state) == SpriteList.FREE.value
    # Checking on its own doesn't change anything
    assert sprites[5].next == 2
    assert check_for_sprite_list_cycles(blank_state, fix=True) == SpriteList.FREE.value
    assert sprites[5].next == SPRITE_INDEX_NULL
    assert check_for_sprite_list_cycles(blank_state) is None


def test_self_loop(blank_state):
    blank_state.sprites[0].next = 0
    assert sprite_list_find_cycle(blank_state.sprites, 0) == 0


def test_empty_list_has_no_cycle(blank_state):
    assert sprite_list_find_cycle(blank_state.sprites, SPRITE_INDEX_NULL) is None


def test_spatial_index_cycle(blank_state):
    sprites = blank_state.sprites
    sprites.allocate(Peep(x=320, y=320), SpriteList.PEEP)
    sprites.allocate(Peep(x=320, y=320), SpriteList.PEEP)
    assert check_for_spatial_index_cycles(blank_state) is None
    sprites[0].next_in_quadrant = 1
    bucket = check_for_spatial_index_cycles(blank_state, fix=True)
    assert bucket == (10 << 8) | 10
    assert sprites[0].next_in_quadrant == SPRITE_INDEX_NULL
    assert check_for_spatial_index_cycles(blank_state) is None


def test_iter_sprite_list(blank_state):
    sprites = blank_state.sprites
    sprites.allocate(Peep(), SpriteList.PEEP)
    sprites.allocate(Peep(), SpriteList.PEEP)
    assert list(iter_sprite_list(sprites, SpriteList.PEEP)) == [1, 0]
    assert list(iter_sprite_list(sprites, SpriteList.LITTER)) == []


def test_fix_disjoint_sprites(blank_state):
    sprites = blank_state.sprites
    sprites[100].next = SPRITE_INDEX_NULL
    count = fix_disjoint_sprites(blank_state)
    assert count == MAX_SPRITES - 101
    assert sprites.list_counts[SpriteList.FREE.value] == MAX_SPRITES
    assert sprites[100].next == 101
    assert sprites[101].previous == 100
    assert len(list(iter_sprite_list(sprites, SpriteList.FREE))) == MAX_SPRITES


def test_fix_disjoint_sprites_nothing_to_do(blank_state):
    blank_state.sprites.allocate(Peep(), SpriteList.PEEP)
    assert fix_disjoint_sprites(blank_state) == 0
    assert blank_state.sprites.list_counts[SpriteList.FREE.value] == MAX_SPRITES - 1


def test_fix_disjoint_sprites_empty_free_list():
    table = SpriteTable.blank()
    table.list_heads[SpriteList.FREE.value] = SPRITE_INDEX_NULL
    table.list_counts[SpriteList.FREE.value] = 0

    assert fix_disjoint_sprites(ParkState(sprites=table)) == MAX_SPRITES
    assert table.list_heads[SpriteList.FREE.value] == 0
    assert table[0].previous == SPRITE_INDEX_NULL


def test_sprite_clear_all_unused(blank_state):
    sprites = blank_state.sprites
    sprites.allocate(Peep(energy=50), SpriteList.PEEP)
    sprites[3].x = 50
    sprites[3].flags = 2
    sprite_clear_all_unused(blank_state)
    assert sprites[3].x == 0
    assert sprites[3].flags == 0
    assert sprites[3].next == 4
    assert sprites[3].previous == 2
    assert sprites[3].sprite_index == 3
    assert sprites[3].sprite_identifier == SpriteIdentifier.NULL.value
    assert sprites[0].energy == 50


def test_banner_index_of():
    catalog = ObjectCatalog(scrolling_walls={3}, scrolling_large_scenery={5})
    assert banner_index_of(bytes([0x1C, 0, 0, 0, 7, 0, 0, 0]), catalog) == 7
    assert banner_index_of(bytes([0x14, 0, 0, 0, 3, 9, 0, 0]), catalog) == 9
    assert banner_index_of(bytes([0x14, 0, 0, 0, 4, 9, 0, 0]), catalog) == BANNER_NULL
    assert banner_index_of(bytes([0x58, 0, 0, 0, 5, 0, 0xA0, 0x60]), catalog) == 0x6B
    assert banner_index_of(bytes([0x08, 0, 0, 0, 7, 0, 0, 0]), catalog) == BANNER_NULL


@pytest.fixture
def ghost_image(image):
    tiles = bytearray(blank_tile_elements())
    tiles[1] = 0
    ghost = bytes([0x1C, TILE_ELEMENT_FLAG_LAST_TILE | 0x10, 14, 16, 7, 0, 0, 0])
    tiles[8:8] = ghost
    image.tile_elements.value = bytes(tiles[:TILES_SIZE])
    image.banners[7].type.value = 1
    image.banners[7].string_idx.value = 0x8005
    image.custom_strings[5].value = 'hello'
    image.custom_strings[6].value = 'keep'
    return image


def test_scenario_fix_ghosts(ghost_image):
    scenario_fix_ghosts(ghost_image, ObjectCatalog())
    data = ghost_image.tile_elements.value
    # Tile 0's surface is its last element again, and tile 1 follows
    assert data[1] & TILE_ELEMENT_FLAG_LAST_TILE
    assert data[8] & 0x3C == 0
    assert data[9] & TILE_ELEMENT_FLAG_LAST_TILE
    for tile in ghost_image.tile_elements.iter_tiles(data):
        assert all(element[0] & 0x3C != 0x1C for element in tile)
    assert ghost_image.banners[7].type.value == BANNER_NULL
    assert ghost_image.custom_strings[5].value == bytes(32)
    assert ghost_image.custom_strings[6].text == b'keep'


def test_track_presence(blank_state):
    add_track_element(blank_state, 2, 2, 4)
    add_track_element(blank_state, 3, 3, 9, ghost=True)
    rides = ride_all_has_any_track_elements(
            blank_state.tile_elements,
            blank_state.next_free_tile_element_pointer_index,
            )
    assert rides == {4}


def test_remove_trackless_rides(image, blank_state):
    blank_state.rides.append(Ride(id=2, type=1))
    blank_state.rides.append(Ride(id=5, type=1, name=0x8003))
    add_track_element(blank_state, 1, 1, 2)
    add_track_element(blank_state, 3, 3, 5, ghost=True)
    export_rides(image.rides, blank_state)
    image.custom_strings[3].value = 'Ghost Train'

    assert scenario_remove_trackless_rides(image, blank_state) == [5]
    assert image.rides[2].type.value == 1
    assert image.rides[5].type.value == RIDE_TYPE_NULL
    assert image.custom_strings[3].value == bytes(32)


def test_convert_strings(image):
    image.scenario_name.value = 'Café'
    image.custom_strings[0].value = 'Über'
    image.news_items[0].text.value = '“Hi”'
    convert_strings_to_rct2(image)
    assert image.scenario_name.text == b'Caf\xe9'
    assert image.custom_strings[0].text == b'\xdcber'
    assert image.news_items[0].text.text == b'\xb4Hi"'
    assert image.custom_strings[1].value == bytes(32)
