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

import pytest

from rct2save.state import ParkState, SpriteTable, Sprite, Peep, Litter, Duck, \
        SpriteList, SpriteIdentifier, ObjectEntry, ObjectCatalog, TileElementType, \
        spatial_index_of, map_size_fields, add_track_element, state_from_dict, load_state, \
        is_user_string_id, SPRITE_INDEX_NULL, MAX_SPRITES, LOCATION_NULL, \
        SPATIAL_INDEX_LOCATION_NULL, MAXIMUM_MAP_SIZE, TILE_ELEMENT_SIZE, \
        TILE_ELEMENT_FLAG_LAST_TILE, TILE_ELEMENT_FLAG_GHOST, RIDE_TYPE_NULL


def test_blank_sprite_table():
    table = SpriteTable.blank()
    assert len(table) == MAX_SPRITES
    assert table.list_heads[SpriteList.FREE.value] == 0
    assert table.list_counts[SpriteList.FREE.value] == MAX_SPRITES
    assert table[0].previous == SPRITE_INDEX_NULL
    assert table[0].next == 1
    assert table[MAX_SPRITES-1].next == SPRITE_INDEX_NULL
    assert all(head == SPRITE_INDEX_NULL for head in table.list_heads[1:])


def test_spatial_index_of():
    assert spatial_index_of(LOCATION_NULL, 0) == SPATIAL_INDEX_LOCATION_NULL
    assert spatial_index_of(0, 0) == 0
    assert spatial_index_of(32, 0) == 256
    assert spatial_index_of(0, 32) == 1
    assert spatial_index_of(32*5 + 7, 32*3 + 31) == 5*256 + 3


def test_allocate_sprites():
    table = SpriteTable.blank()
    first = table.allocate(Peep(x=64, y=32), SpriteList.PEEP)
    second = table.allocate(Peep(x=64, y=32), SpriteList.PEEP)
    assert (first, second) == (0, 1)
    assert table.list_heads[SpriteList.FREE.value] == 2
    assert table[2].previous == SPRITE_INDEX_NULL
    assert table.list_counts[SpriteList.FREE.value] == MAX_SPRITES - 2

    # Newest sprite goes to the head of its list
    assert table.list_heads[SpriteList.PEEP.value] == 1
    assert table.list_counts[SpriteList.PEEP.value] == 2
    assert table[1].next == 0
    assert table[0].previous == 1
    assert table[1].linked_list_type_offset == SpriteList.PEEP.value*2
    assert table[1].sprite_index == 1

    bucket = spatial_index_of(64, 32)
    assert table.spatial_index[bucket] == 1
    assert table[1].next_in_quadrant == 0
    assert table[0].next_in_quadrant == SPRITE_INDEX_NULL


def test_allocate_when_full():
    table = SpriteTable(
            sprites=[Sprite()],
            list_heads=[SPRITE_INDEX_NULL]*6,
            list_counts=[0]*6,
            spatial_index=[SPRITE_INDEX_NULL],
            )
    with pytest.raises(RuntimeError):
        table.allocate(Litter(), SpriteList.LITTER)


def test_sprite_defaults():
    assert Sprite().sprite_identifier == SpriteIdentifier.NULL.value
    assert Litter().sprite_identifier == SpriteIdentifier.LITTER.value
    assert Duck().sprite_identifier == SpriteIdentifier.MISC.value
    assert len(Peep().thoughts) == 5
    assert Peep().thoughts[0] is not Peep().thoughts[0]


def test_object_entry_pack():
    entry = ObjectEntry(flags=0x8000, name='TWIST1', checksum=0x12345678)
    assert entry.pack() == b'\x00\x80\x00\x00TWIST1  \x78\x56\x34\x12'


def test_catalog_scrolling_text():
    catalog = ObjectCatalog(scrolling_walls={3}, scrolling_large_scenery={9})
    assert catalog.has_scrolling_text(TileElementType.WALL, 3)
    assert not catalog.has_scrolling_text(TileElementType.WALL, 9)
    assert catalog.has_scrolling_text(TileElementType.LARGE_SCENERY, 9)
    assert not catalog.has_scrolling_text(TileElementType.PATH, 3)
    assert catalog.get_loaded_entry(0) is None


def test_user_string_ids():
    assert is_user_string_id(0x8000)
    assert is_user_string_id(0x8FFF)
    assert not is_user_string_id(0x7FFF)
    assert not is_user_string_id(0x9000)


def test_map_size_fields():
    assert map_size_fields(150) == (4768, 4798, 4767)


def test_blank_park(blank_state):
    assert blank_state.rides_by_id() == {}
    assert blank_state.get_ride(0) is None
    assert blank_state.next_free_tile_element_pointer_index == MAXIMUM_MAP_SIZE*MAXIMUM_MAP_SIZE
    first = blank_state.tile_elements[:TILE_ELEMENT_SIZE]
    assert first[0] & 0x3C == TileElementType.SURFACE.value
    assert first[1] & TILE_ELEMENT_FLAG_LAST_TILE


def test_add_track_element(blank_state):
    add_track_element(blank_state, 1, 0, 7, base_height=20)
    elements = blank_state.tile_elements
    # Tile 0 is untouched
    assert elements[1] & TILE_ELEMENT_FLAG_LAST_TILE
    # Tile 1's surface is no longer last, and the track sits on top of it
    assert not elements[9] & TILE_ELEMENT_FLAG_LAST_TILE
    track = elements[16:24]
    assert track[0] == TileElementType.TRACK.value
    assert track[1] == TILE_ELEMENT_FLAG_LAST_TILE
    assert track[2] == 20
    assert track[7] == 7
    # Tile 2's surface got shifted along
    assert elements[24] == TileElementType.SURFACE.value
    assert blank_state.next_free_tile_element_pointer_index == MAXIMUM_MAP_SIZE*MAXIMUM_MAP_SIZE + 1


def test_add_ghost_track_element(blank_state):
    add_track_element(blank_state, 0, 0, 2, ghost=True)
    assert blank_state.tile_elements[9] == TILE_ELEMENT_FLAG_LAST_TILE | TILE_ELEMENT_FLAG_GHOST


def split_tiles(state, num_tiles):
    """
    Element types and flags for the first `num_tiles` tiles
    """
    tiles = []
    tile = []
    data = state.tile_elements
    for offset in range(0, state.next_free_tile_element_pointer_index*TILE_ELEMENT_SIZE, TILE_ELEMENT_SIZE):
        tile.append((data[offset] & 0x3C, data[offset+1] & TILE_ELEMENT_FLAG_LAST_TILE, data[offset+7]))
        if data[offset+1] & TILE_ELEMENT_FLAG_LAST_TILE:
            tiles.append(tile)
            tile = []
            if len(tiles) == num_tiles:
                break
    return tiles


def test_add_track_element_several_tiles(blank_state):
    surface = TileElementType.SURFACE.value
    track = TileElementType.TRACK.value
    last = TILE_ELEMENT_FLAG_LAST_TILE
    add_track_element(blank_state, 0, 0, 1)
    add_track_element(blank_state, 5, 0, 2)
    add_track_element(blank_state, 2, 1, 3)
    add_track_element(blank_state, 5, 0, 4)
    tiles = split_tiles(blank_state, MAXIMUM_MAP_SIZE+3)

    assert tiles[0] == [(surface, 0, 0), (track, last, 1)]
    for idx in range(1, 5):
        assert tiles[idx] == [(surface, last, 0)]
    assert tiles[5] == [(surface, 0, 0), (track, 0, 2), (track, last, 4)]
    assert tiles[6] == [(surface, last, 0)]
    assert tiles[MAXIMUM_MAP_SIZE+1] == [(surface, last, 0)]
    assert tiles[MAXIMUM_MAP_SIZE+2] == [(surface, 0, 0), (track, last, 3)]
    assert blank_state.next_free_tile_element_pointer_index == MAXIMUM_MAP_SIZE*MAXIMUM_MAP_SIZE + 4

    # Every tile is still accounted for
    assert len(split_tiles(blank_state, MAXIMUM_MAP_SIZE*MAXIMUM_MAP_SIZE)) == MAXIMUM_MAP_SIZE*MAXIMUM_MAP_SIZE


def test_state_from_dict():
    state = state_from_dict({
        'park_name': 5,
        'scenario_name': 'Test Park',
        'finances': {'cash': 10000, 'bank_loan': 5000},
        'rides': [
            {'id': 2, 'type': 1, 'stations': [{'start': [3, 4], 'entrance': [3, 5]}]},
            ],
        'research': {'invented_ride_types': [1, 2]},
        'sprites': [
            {'kind': 'peep', 'x': 100, 'y': 100, 'energy': 90},
            {'kind': 'duck', 'x': 10, 'y': 10},
            ],
        'track': [{'x': 3, 'y': 4, 'ride': 2}],
        })
    assert state.park_name == 5
    assert state.finances.cash == 10000
    assert state.finances.bank_loan == 5000
    ride = state.get_ride(2)
    assert ride.stations[0].start == (3, 4)
    assert ride.stations[0].entrance == (3, 5)
    assert ride.stations[0].exit is None
    assert state.research.ride_type_is_invented(2)
    assert not state.research.ride_type_is_invented(3)
    assert state.sprites.list_counts[SpriteList.PEEP.value] == 1
    assert state.sprites.list_counts[SpriteList.MISC.value] == 1
    assert state.sprites[0].energy == 90
    assert isinstance(state.sprites[1], Duck)
    assert state.next_free_tile_element_pointer_index == MAXIMUM_MAP_SIZE*MAXIMUM_MAP_SIZE + 1


def test_state_from_dict_unknown_field():
    with pytest.raises(ValueError):
        state_from_dict({'bogus': 1})
    with pytest.raises(ValueError):
        state_from_dict({'sprites': [{'kind': 'spaceship'}]})


def test_state_from_dict_raw_tiles_warns(capsys):
    state_from_dict({'tile_elements': 'abcd'})
    assert 'WARNING' in capsys.readouterr().err


def test_load_state(tmp_path):
    filename = tmp_path / 'park.json'
    filename.write_text(json.dumps({'map_size': 64, 'rides': [{'id': 0, 'type': RIDE_TYPE_NULL}]}))
    state = load_state(filename)
    assert state.map_size == 64
    assert state.rides_by_id() == {}
