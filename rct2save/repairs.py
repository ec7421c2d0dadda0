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

from .state import Sprite, SpriteIdentifier, SpriteList, TileElementType, \
        is_user_string_id, SPRITE_INDEX_NULL, MAX_SPRITES, NUM_SPRITE_LISTS, \
        SPATIAL_INDEX_SIZE, TILE_ELEMENT_SIZE, TILE_ELEMENT_TYPE_MASK, \
        TILE_ELEMENT_FLAG_GHOST, TILE_ELEMENT_FLAG_LAST_TILE, MAX_RIDES, \
        RIDE_TYPE_NULL, BANNER_NULL, MAX_BANNERS, MAX_USER_STRINGS
from .rct2text import convert_field, is_null_or_empty

# Repairs and fixups done around an export.  The sprite repairs operate on
# the live sprite table, before anything is transcoded; the others operate
# on the already-populated output image.


###
### Sprite lists
###

def sprite_list_find_cycle(sprites, head, link='next'):
    """
    Looks for a cycle in the sprite chain starting at `head` and following
    the `link` attribute of each sprite.  Returns the index of the sprite
    whose link closes the cycle (ie: the one pointing back into the
    chain), or `None` if the chain terminates.
    """
    def follow(index):
        return getattr(sprites[index], link)

    # Tortoise and hare, to find out if there's a cycle at all
    slow = head
    fast = head
    while True:
        if fast == SPRITE_INDEX_NULL:
            return None
        fast = follow(fast)
        if fast == SPRITE_INDEX_NULL:
            return None
        fast = follow(fast)
        slow = follow(slow)
        if slow == fast:
            break

    # Then the start of the cycle
    slow = head
    while slow != fast:
        slow = follow(slow)
        fast = follow(fast)
    entry = slow

    # And finally the node which links back to it
    node = entry
    while follow(node) != entry:
        node = follow(node)
    return node


def check_for_sprite_list_cycles(state, fix=False):
    """
    Checks each of the type-partitioned sprite lists for a cycle.  Returns
    the index of the first list with a cycle, or `None`.  If `fix` is set,
    that list's cycle is broken.
    """
    sprites = state.sprites
    for list_idx in range(NUM_SPRITE_LISTS):
        node = sprite_list_find_cycle(sprites, sprites.list_heads[list_idx], 'next')
        if node is not None:
            if fix:
                sprites[node].next = SPRITE_INDEX_NULL
            return list_idx
    return None


def check_for_spatial_index_cycles(state, fix=False):
    """
    Same as `check_for_sprite_list_cycles`, but for the spatial index.
    Returns the first bucket with a cycle, or `None`.
    """
    sprites = state.sprites
    for bucket in range(SPATIAL_INDEX_SIZE):
        head = sprites.spatial_index[bucket]
        if head == SPRITE_INDEX_NULL:
            continue
        node = sprite_list_find_cycle(sprites, head, 'next_in_quadrant')
        if node is not None:
            if fix:
                sprites[node].next_in_quadrant = SPRITE_INDEX_NULL
            return bucket
    return None


def iter_sprite_list(sprites, list_type):
    """
    Yields the indexes of every sprite on the given list, in order
    """
    index = sprites.list_heads[list_type.value]
    seen = 0
    while index != SPRITE_INDEX_NULL and seen < MAX_SPRITES:
        yield index
        index = sprites[index].next
        seen += 1


def fix_disjoint_sprites(state):
    """
    Free sprites which somehow aren't on the free list get tacked onto the
    end of it.  Returns the number of sprites which were reattached.  The
    free list's count is recomputed to match.
    """
    sprites = state.sprites
    free_indexes = list(iter_sprite_list(sprites, SpriteList.FREE))
    on_free_list = set(free_indexes)
    if free_indexes:
        tail = free_indexes[-1]
    else:
        tail = SPRITE_INDEX_NULL

    count = 0
    for idx, sprite in enumerate(sprites.sprites):
        if sprite.sprite_identifier != SpriteIdentifier.NULL.value or idx in on_free_list:
            continue
        sprite.previous = tail
        sprite.next = SPRITE_INDEX_NULL
        sprite.linked_list_type_offset = SpriteList.FREE.value*2
        if tail == SPRITE_INDEX_NULL:
            sprites.list_heads[SpriteList.FREE.value] = idx
        else:
            sprites[tail].next = idx
        tail = idx
        count += 1
    sprites.list_counts[SpriteList.FREE.value] = len(free_indexes) + count
    return count


def sprite_clear_all_unused(state):
    """
    Resets every sprite on the free list to a blank free sprite, keeping
    only its linkage
    """
    sprites = state.sprites
    for idx in list(iter_sprite_list(sprites, SpriteList.FREE)):
        old = sprites[idx]
        sprites.sprites[idx] = Sprite(
                next_in_quadrant=old.next_in_quadrant,
                next=old.next,
                previous=old.previous,
                linked_list_type_offset=SpriteList.FREE.value*2,
                sprite_index=idx,
                )


###
### Output image fixups
###

def banner_index_of(element, catalog):
    """
    Returns the banner index attached to a raw tile element, or `BANNER_NULL`
    if it doesn't have one.  Walls and large scenery only carry banners if
    their object has scrolling text.
    """
    match element[0] & TILE_ELEMENT_TYPE_MASK:
        case TileElementType.BANNER.value:
            return element[4]
        case TileElementType.WALL.value:
            if catalog.has_scrolling_text(TileElementType.WALL, element[4]):
                return element[5]
        case TileElementType.LARGE_SCENERY.value:
            entry_index = struct.unpack_from('<H', element, 4)[0] & 0x3FF
            if catalog.has_scrolling_text(TileElementType.LARGE_SCENERY, entry_index):
                return (element[0] & 0xC0) | ((element[6] & 0xE0) >> 2) | ((element[7] & 0xE0) >> 5)
    return BANNER_NULL


def clear_user_string(image, string_id):
    """
    Blanks out the user string `string_id`, if it is one
    """
    if is_user_string_id(string_id):
        image.custom_strings[string_id % MAX_USER_STRINGS].value = b''


def scenario_fix_ghosts(image, catalog):
    """
    Removes ghost elements from the image's tile elements, compacting each
    tile's remaining elements down towards the start of the table.  Any
    banners attached to removed ghosts are freed.
    """
    data = image.tile_elements.value
    output = bytearray()
    for tile in image.tile_elements.iter_tiles(data):
        survivors = []
        for element in tile:
            if element[1] & TILE_ELEMENT_FLAG_GHOST:
                banner_index = banner_index_of(element, catalog)
                if banner_index < MAX_BANNERS:
                    banner = image.banners[banner_index]
                    if banner.type.value != BANNER_NULL:
                        banner.type.value = BANNER_NULL
                        clear_user_string(image, banner.string_idx.value)
            else:
                survivors.append(bytearray(element))
        if survivors:
            # The tile's original last element may have been a ghost
            survivors[-1][1] |= TILE_ELEMENT_FLAG_LAST_TILE
        for element in survivors:
            output.extend(element)
    image.tile_elements.value = bytes(output) + data[len(output):]


def ride_all_has_any_track_elements(tile_elements, used_count):
    """
    Returns the set of ride indexes which have at least one non-ghost
    track element among the first `used_count` tile elements
    """
    rides = set()
    for idx in range(0, used_count*TILE_ELEMENT_SIZE, TILE_ELEMENT_SIZE):
        if tile_elements[idx] & TILE_ELEMENT_TYPE_MASK != TileElementType.TRACK.value:
            continue
        if tile_elements[idx+1] & TILE_ELEMENT_FLAG_GHOST:
            continue
        rides.add(tile_elements[idx+7])
    return rides


def scenario_remove_trackless_rides(image, state):
    """
    Empties out any ride slot in the image whose ride has no track on the
    live map.  Returns the list of ride indexes which were removed.
    """
    has_track = ride_all_has_any_track_elements(
            state.tile_elements,
            state.next_free_tile_element_pointer_index,
            )
    removed = []
    for idx in range(MAX_RIDES):
        if idx in has_track:
            continue
        ride = image.rides[idx]
        if ride.type.value == RIDE_TYPE_NULL:
            continue
        ride.type.value = RIDE_TYPE_NULL
        clear_user_string(image, ride.name.value)
        removed.append(idx)
    return removed


def convert_strings_to_rct2(image):
    """
    Converts the image's free-text fields from UTF-8 to the legacy
    encoding, in place
    """
    for field in (image.scenario_completed_name, image.scenario_name, image.scenario_description):
        field.set_raw(convert_field(field.value))
    for idx in range(MAX_USER_STRINGS):
        record = image.custom_strings[idx]
        raw = record.value
        if not is_null_or_empty(raw):
            record.set_raw(convert_field(raw))
    for news_item in image.news_items:
        raw = news_item.text.value
        if not is_null_or_empty(raw):
            news_item.text.set_raw(convert_field(raw))
