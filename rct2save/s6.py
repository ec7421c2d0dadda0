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
import os

from .datafile import UInt8, Int8, UInt16, Int16, UInt32, Int32, \
        Data, NumData, NumChoiceData, NumArrayData, BytesData, StringData, \
        BitmaskData, LabelEnum
from .sawyercoding import SawyerEncoding
from .state import SpriteIdentifier, MiscSpriteType, TileElementType, \
        MAX_SPRITES, NUM_SPRITE_LISTS, MAX_TILE_ELEMENTS, TILE_ELEMENT_SIZE, \
        TILE_ELEMENT_TYPE_MASK, TILE_ELEMENT_FLAG_LAST_TILE, MAXIMUM_MAP_SIZE, \
        MAX_RIDES, RIDE_TYPE_COUNT, MAX_RIDE_OBJECTS, MAX_RESEARCHED_SCENERY_ITEMS, \
        MAX_STATIONS, MAX_CARS_PER_TRAIN, MAX_VEHICLES_PER_RIDE, NUM_COLOUR_SCHEMES, \
        CUSTOMER_HISTORY_SIZE, DOWNTIME_HISTORY_SIZE, RIDE_MEASUREMENT_MAX_ITEMS, \
        MAX_PEEP_SPAWNS, MAX_PARK_ENTRANCES, MAX_AWARDS, MAX_NEWS_ITEMS, MAX_BANNERS, \
        MAX_USER_STRINGS, USER_STRING_MAX_LENGTH, MAX_MAP_ANIMATIONS, MAX_STAFF, \
        STAFF_PATROL_AREA_SIZE, OBJECT_ENTRY_COUNT, NUM_EXPENDITURE_MONTHS, \
        NUM_EXPENDITURE_TYPES, FINANCE_HISTORY_SIZE, PARK_HISTORY_SIZE, \
        PEEP_WARNING_THROTTLE_SIZE, NUM_TRACK_CONFIGURATIONS, EXPANSION_PACK_NAMES_SIZE

try:
    from PIL import Image
    has_image_support = True
except ModuleNotFoundError:
    has_image_support = False

# The S6 output image.  This is one big fixed-size block laid out exactly
# like the on-disk park structure (before chunking).  The exporter fills
# it in field-by-field, and then the chunk table below slices it up into
# the chunks which actually get written.

S6_RCT2_VERSION = 120001
S6_MAGIC_NUMBER = 0x00031144
S6_GAME_VERSION_NUMBER = 201028

RCT_XY8_UNDEFINED = 0xFFFF
PEEP_SPAWN_UNDEFINED = 0xFFFF
MAX_INVERSIONS = 31
MAX_GOLF_HOLES = 31
MAX_RIDE_MEASUREMENTS = 8
MAX_RESEARCH_ITEMS = 500
MAX_CAMPAIGNS = 20
MAX_CAMPAIGN_REFERENCES = 22
CAMPAIGN_ACTIVE_FLAG = 0x80
NEWS_ITEM_TEXT_SIZE = 256

# Region layout
HEADER_OFFSET = 0x0
HEADER_SIZE = 0x20
INFO_OFFSET = HEADER_OFFSET + HEADER_SIZE
INFO_SIZE = 0x198
OBJECTS_OFFSET = INFO_OFFSET + INFO_SIZE
OBJECT_ENTRY_SIZE = 16
OBJECTS_SIZE = OBJECT_ENTRY_COUNT*OBJECT_ENTRY_SIZE
MISC_OFFSET = OBJECTS_OFFSET + OBJECTS_SIZE
MISC_SIZE = 16
TILES_OFFSET = MISC_OFFSET + MISC_SIZE
TILES_SIZE = MAX_TILE_ELEMENTS*TILE_ELEMENT_SIZE
TAIL_OFFSET = TILES_OFFSET + TILES_SIZE
TAIL_SIZE = 0x2E8570
IMAGE_SIZE = TAIL_OFFSET + TAIL_SIZE

# The scenario tail is split up into these regions (offset relative to the
# start of the tail, then length)
SCENARIO_TAIL_CHUNKS = [
        ('Tile Pointer Index + Sprites', 0x0, 0x27104C),
        ('Guests In Park', 0x27148C, 4),
        ('Last Guests In Park', 0x271810, 8),
        ('Park Rating', 0x2718F8, 2),
        ('Research', 0x27193A, 1082),
        ('Current Expenditure', 0x271F74, 16),
        ('Park Value', 0x272184, 4),
        ('Company Value Onwards', 0x272388, 0x761E8),
        ]


class S6Type(LabelEnum):
    """
    The kind of file being written
    """

    SAVEDGAME = (0, 'Saved Game')
    SCENARIO =  (1, 'Scenario')


class ResearchItemMarker(LabelEnum):
    """
    Special values found in the research item list
    """

    SEPARATOR = (0xFFFFFFFF, 'Separator')
    END =       (0xFFFFFFFE, 'End')
    END_2 =     (0xFFFFFFFD, 'End 2')


class RecordArray(Data):
    """
    A fixed-length array of same-sized records.  Records are only built
    when asked for, since most of the time we're just writing a handful of
    them and blanking out the rest.  A record class other than the default
    may be asked for (for the differently-laid-out sprite variants, say)
    so long as it's the same size.
    """

    def __init__(self, debug_label, parent, record_class, count, offset=None):
        super().__init__(debug_label, parent, offset=offset)
        self.record_class = record_class
        self.record_size = record_class.SIZE
        self.count = count
        self.df.seek(self.record_size*self.count, os.SEEK_CUR)

    def __len__(self):
        return self.count

    def __getitem__(self, index):
        return self.record(index)

    def record(self, index, record_class=None):
        """
        Returns the record at `index`, laid out as `record_class` (or our
        default record class)
        """
        if record_class is None:
            record_class = self.record_class
        if record_class.SIZE != self.record_size:
            raise TypeError(f'{self.debug_label}: {record_class.__name__} is not {self.record_size} bytes')
        if index < 0 or index >= self.count:
            raise IndexError(f'{self.debug_label}: index {index} out of range')
        return record_class(f'{self.debug_label} {index}', self, offset=index*self.record_size)

    def clear(self, fill_byte=b'\x00'):
        """
        Blanks out every record in the array
        """
        self.fill(self.record_size*self.count, fill_byte)

    def clear_record(self, index, fill_byte=b'\x00'):
        self.df.seek(self.offset + index*self.record_size, os.SEEK_SET)
        self.df.write(fill_byte * self.record_size)

    def raw(self, index):
        """
        Returns the raw bytes for a single record
        """
        self.df.seek(self.offset + index*self.record_size, os.SEEK_SET)
        return self.df.read(self.record_size)


class XY8Data(NumData):
    """
    A tile coordinate packed into two bytes (x in the low byte, y in the
    high).  `None` is stored as the all-ones "undefined" marker rather
    than as tile (0, 0).
    """

    def __init__(self, debug_label, parent, offset=None):
        super().__init__(debug_label, parent, UInt16, offset=offset)

    def set_coord(self, coord):
        if coord is None:
            self.value = RCT_XY8_UNDEFINED
        else:
            x, y = coord
            self.value = (x & 0xFF) | ((y & 0xFF) << 8)

    @property
    def coord(self):
        if self.value == RCT_XY8_UNDEFINED:
            return None
        return (self.value & 0xFF, self.value >> 8)


class ObjectEntryData(Data):
    """
    One loaded-object descriptor
    """

    SIZE = OBJECT_ENTRY_SIZE

    def __init__(self, debug_label, parent, offset=None):
        super().__init__(debug_label, parent, offset=offset)
        self.flags = NumData('Flags', self, UInt32)
        self.name = BytesData('Name', self, 8, pad_byte=b' ')
        self.checksum = NumData('Checksum', self, UInt32)

    def set_entry(self, entry):
        self.flags.value = entry.flags
        self.name.value = entry.name.encode('latin-1')[:8]
        self.checksum.value = entry.checksum

    def set_absent(self):
        """
        Marks this slot as empty, which is all-ones rather than all-zeroes
        """
        self.fill(ObjectEntryData.SIZE, b'\xFF')

    @property
    def is_absent(self):
        self.df.seek(self.offset, os.SEEK_SET)
        return self.df.read(ObjectEntryData.SIZE) == b'\xFF'*ObjectEntryData.SIZE


class S6Header(Data):

    def __init__(self, debug_label, parent, offset=None):
        super().__init__(debug_label, parent, offset=offset)
        self.type = NumChoiceData('Type', self, UInt8, S6Type)
        self.classic_flag = NumData('Classic Flag', self, UInt8)
        self.num_packed_objects = NumData('Num Packed Objects', self, UInt16)
        self.version = NumData('Version', self, UInt32)
        self.magic_number = NumData('Magic Number', self, UInt32)


class S6Info(Data):
    """
    Scenario information, shown in the scenario select screen
    """

    def __init__(self, debug_label, parent, offset=None):
        super().__init__(debug_label, parent, offset=offset)
        self.editor_step = NumData('Editor Step', self, UInt8)
        self.category = NumData('Category', self, UInt8)
        self.objective_type = NumData('Objective Type', self, UInt8)
        self.objective_arg_1 = NumData('Objective Arg 1', self, UInt8)
        self.objective_arg_2 = NumData('Objective Arg 2', self, Int32)
        self.objective_arg_3 = NumData('Objective Arg 3', self, Int16)
        self.name = StringData('Name', self, 64, offset=0x48)
        self.details = StringData('Details', self, 256)
        self.entry = ObjectEntryData('Entry', self)


class MiscFields(Data):
    """
    The small date / RNG chunk
    """

    def __init__(self, debug_label, parent, offset=None):
        super().__init__(debug_label, parent, offset=offset)
        self.elapsed_months = NumData('Elapsed Months', self, UInt16)
        self.current_day = NumData('Current Day', self, UInt16)
        self.scenario_ticks = NumData('Scenario Ticks', self, UInt32)
        self.scenario_srand_0 = NumData('RNG State 0', self, UInt32)
        self.scenario_srand_1 = NumData('RNG State 1', self, UInt32)


class TileElements(BytesData):
    """
    The map's tile element table.  Elements are eight bytes apiece, and each
    tile's elements are stored consecutively, with the last one on each
    tile flagged as such.  Tiles are stored in y-major order.
    """

    # Colours used when rendering a preview of the map
    PREVIEW_COLOURS = {
            TileElementType.TRACK: (200, 40, 40),
            TileElementType.ENTRANCE: (230, 200, 40),
            TileElementType.PATH: (150, 150, 150),
            TileElementType.LARGE_SCENERY: (30, 90, 30),
            TileElementType.SMALL_SCENERY: (40, 110, 40),
            TileElementType.WALL: (120, 80, 50),
            TileElementType.BANNER: (220, 220, 220),
            }
    PREVIEW_PRIORITY = [
            TileElementType.TRACK,
            TileElementType.ENTRANCE,
            TileElementType.PATH,
            TileElementType.LARGE_SCENERY,
            TileElementType.SMALL_SCENERY,
            TileElementType.WALL,
            TileElementType.BANNER,
            ]
    PREVIEW_WATER = (40, 80, 200)

    def __init__(self, debug_label, parent, offset=None):
        super().__init__(debug_label, parent, TILES_SIZE, offset=offset)

    def iter_tiles(self, data=None):
        """
        Yields a list of raw elements for each tile, in storage order.
        Stops once every tile on the full-size map has been seen.
        """
        if data is None:
            data = self.value
        tile = []
        num_tiles = 0
        for idx in range(0, len(data), TILE_ELEMENT_SIZE):
            element = data[idx:idx+TILE_ELEMENT_SIZE]
            tile.append(element)
            if element[1] & TILE_ELEMENT_FLAG_LAST_TILE:
                yield tile
                tile = []
                num_tiles += 1
                if num_tiles == MAXIMUM_MAP_SIZE*MAXIMUM_MAP_SIZE:
                    break

    @staticmethod
    def preview_colour(elements):
        """
        Picks a preview colour for a single tile
        """
        types = {element[0] & TILE_ELEMENT_TYPE_MASK for element in elements}
        for element_type in TileElements.PREVIEW_PRIORITY:
            if element_type.value in types:
                return TileElements.PREVIEW_COLOURS[element_type]
        for element in elements:
            if element[0] & TILE_ELEMENT_TYPE_MASK == TileElementType.SURFACE.value:
                if element[5] & 0x1F:
                    return TileElements.PREVIEW_WATER
                shade = min(255, 60 + element[2]*3)
                return (shade//3, shade, shade//3)
        return (0, 0, 0)

    def export_image(self, filename):
        """
        Exports a one-pixel-per-tile overview of the map to the filename
        `filename`.  The format should be dynamically decided by Pillow
        based on the filename extension.
        """
        global has_image_support
        if not has_image_support:
            raise RuntimeError('Pillow module does not seem to be available; export_image is not usable')
        pixels = [TileElements.preview_colour(tile) for tile in self.iter_tiles()]
        pixels.extend([(0, 0, 0)]*(MAXIMUM_MAP_SIZE*MAXIMUM_MAP_SIZE - len(pixels)))
        im = Image.new('RGB', (MAXIMUM_MAP_SIZE, MAXIMUM_MAP_SIZE))
        im.putdata(pixels)
        im.save(filename)


###
### Sprites
###

class SpriteRecord(Data):
    """
    One sprite slot.  Every variant starts with these common fields; the
    subclasses lay out the rest of the slot.
    """

    SIZE = 0x100

    def __init__(self, debug_label, parent, offset=None):
        super().__init__(debug_label, parent, offset=offset)
        self.sprite_identifier = NumChoiceData('Sprite Identifier', self, UInt8, SpriteIdentifier)
        self.type = NumData('Type', self, UInt8)
        self.next_in_quadrant = NumData('Next In Quadrant', self, UInt16)
        self.next = NumData('Next', self, UInt16)
        self.previous = NumData('Previous', self, UInt16)
        self.linked_list_type_offset = NumData('Linked List Type Offset', self, UInt8)
        self.sprite_height_negative = NumData('Sprite Height Negative', self, UInt8)
        self.sprite_index = NumData('Sprite Index', self, UInt16)
        self.flags = NumData('Flags', self, UInt16)
        self.x = NumData('X', self, Int16)
        self.y = NumData('Y', self, Int16)
        self.z = NumData('Z', self, Int16)
        self.sprite_width = NumData('Sprite Width', self, UInt8)
        self.sprite_height_positive = NumData('Sprite Height Positive', self, UInt8)
        self.sprite_left = NumData('Sprite Left', self, Int16)
        self.sprite_top = NumData('Sprite Top', self, Int16)
        self.sprite_right = NumData('Sprite Right', self, Int16)
        self.sprite_bottom = NumData('Sprite Bottom', self, Int16)
        self.sprite_direction = NumData('Sprite Direction', self, UInt8)


class VehicleRecord(SpriteRecord):

    def __init__(self, debug_label, parent, offset=None):
        super().__init__(debug_label, parent, offset=offset)
        self.vehicle_sprite_type = NumData('Vehicle Sprite Type', self, UInt8)
        self.bank_rotation = NumData('Bank Rotation', self, UInt8)
        self.remaining_distance = NumData('Remaining Distance', self, Int32, 0x24)
        self.velocity = NumData('Velocity', self, Int32)
        self.acceleration = NumData('Acceleration', self, Int32)
        self.ride = NumData('Ride', self, UInt8)
        self.vehicle_type = NumData('Vehicle Type', self, UInt8)
        self.colour_body = NumData('Body Colour', self, UInt8)
        self.colour_trim = NumData('Trim Colour', self, UInt8)
        self.track_progress = NumData('Track Progress', self, UInt16)
        self.track_type_and_direction = NumData('Track Type/Direction', self, Int16)
        self.track_x = NumData('Track X', self, Int16)
        self.track_y = NumData('Track Y', self, Int16)
        self.track_z = NumData('Track Z', self, Int16)
        self.next_vehicle_on_train = NumData('Next Vehicle On Train', self, UInt16)
        self.prev_vehicle_on_ride = NumData('Prev Vehicle On Ride', self, UInt16)
        self.next_vehicle_on_ride = NumData('Next Vehicle On Ride', self, UInt16)
        self.var_44 = NumData('var_44', self, UInt16)
        self.mass = NumData('Mass', self, UInt16)
        self.update_flags = NumData('Update Flags', self, UInt16)
        self.swing_sprite = NumData('Swing Sprite', self, UInt8)
        self.current_station = NumData('Current Station', self, UInt8)
        self.current_time = NumData('Current Time', self, Int16)
        self.crash_z = NumData('Crash Z', self, Int16)
        self.status = NumData('Status', self, UInt8)
        self.sub_state = NumData('Sub State', self, UInt8)
        self.peep = NumArrayData('Peeps', self, UInt16, 32)
        self.peep_tshirt_colours = NumArrayData('Peep T-Shirt Colours', self, UInt8, 32)
        self.num_seats = NumData('Num Seats', self, UInt8)
        self.num_peeps = NumData('Num Peeps', self, UInt8)
        self.next_free_seat = NumData('Next Free Seat', self, UInt8)
        self.restraints_position = NumData('Restraints Position', self, UInt8)
        self.crash_x = NumData('Crash X', self, Int16)
        self.sound2_flags = NumData('Sound 2 Flags', self, UInt16)
        self.spin_sprite = NumData('Spin Sprite', self, UInt8)
        self.sound1_id = NumData('Sound 1 ID', self, UInt8)
        self.sound1_volume = NumData('Sound 1 Volume', self, UInt8)
        self.sound2_id = NumData('Sound 2 ID', self, UInt8)
        self.sound2_volume = NumData('Sound 2 Volume', self, UInt8)
        self.sound_vector_factor = NumData('Sound Vector Factor', self, Int8)
        self.time_waiting = NumData('Time Waiting', self, UInt16)
        self.speed = NumData('Speed', self, UInt8)
        self.powered_acceleration = NumData('Powered Acceleration', self, UInt8)
        self.dodgems_collision_direction = NumData('Dodgems Collision Direction', self, UInt8)
        self.animation_frame = NumData('Animation Frame', self, UInt8)
        self.var_C8 = NumData('var_C8', self, UInt16, 0xC8)
        self.var_CA = NumData('var_CA', self, UInt16)
        self.scream_sound_id = NumData('Scream Sound ID', self, UInt8)
        self.var_CD = NumData('var_CD', self, UInt8)
        self.var_CE = NumData('var_CE', self, UInt8)
        self.var_CF = NumData('var_CF', self, UInt8)
        self.lost_time_out = NumData('Lost Time Out', self, UInt16)
        self.vertical_drop_countdown = NumData('Vertical Drop Countdown', self, Int8)
        self.var_D3 = NumData('var_D3', self, UInt8)
        self.mini_golf_current_animation = NumData('Mini Golf Current Animation', self, UInt8)
        self.mini_golf_flags = NumData('Mini Golf Flags', self, UInt8)
        self.ride_subtype = NumData('Ride Subtype', self, UInt8)
        self.colours_extended = NumData('Extended Colours', self, UInt8)
        self.seat_rotation = NumData('Seat Rotation', self, UInt8)
        self.target_seat_rotation = NumData('Target Seat Rotation', self, UInt8)


class PeepThoughtData(Data):

    def __init__(self, debug_label, parent, offset=None):
        super().__init__(debug_label, parent, offset=offset)
        self.type = NumData('Type', self, UInt8)
        self.item = NumData('Item', self, UInt8)
        self.freshness = NumData('Freshness', self, UInt8)
        self.fresh_timeout = NumData('Fresh Timeout', self, UInt8)


class XYZD8Data(Data):
    """
    Tile coordinate plus direction, one byte each
    """

    def __init__(self, debug_label, parent, offset=None):
        super().__init__(debug_label, parent, offset=offset)
        self.x = NumData('X', self, UInt8)
        self.y = NumData('Y', self, UInt8)
        self.z = NumData('Z', self, UInt8)
        self.direction = NumData('Direction', self, UInt8)


class PeepRecord(SpriteRecord):
    """
    Guests and staff share a layout; a handful of the guest-specific
    fields are reused for staff statistics.
    """

    def __init__(self, debug_label, parent, offset=None):
        super().__init__(debug_label, parent, offset=offset)
        self.name_string_idx = NumData('Name String', self, UInt16, 0x22)
        self.next_x = NumData('Next X', self, UInt16)
        self.next_y = NumData('Next Y', self, UInt16)
        self.next_z = NumData('Next Z', self, UInt8)
        self.next_flags = NumData('Next Flags', self, UInt8)
        self.outside_of_park = NumData('Outside Of Park', self, UInt8)
        self.state = NumData('State', self, UInt8)
        self.sub_state = NumData('Sub State', self, UInt8)
        self.sprite_type = NumData('Sprite Type', self, UInt8)
        self.peep_type = NumData('Peep Type', self, UInt8)
        self.no_of_rides = NumData('Num Rides', self, UInt8)
        self.tshirt_colour = NumData('T-Shirt Colour', self, UInt8)
        self.trousers_colour = NumData('Trousers Colour', self, UInt8)
        self.destination_x = NumData('Destination X', self, UInt16)
        self.destination_y = NumData('Destination Y', self, UInt16)
        self.destination_tolerance = NumData('Destination Tolerance', self, UInt8)
        self.var_37 = NumData('var_37', self, UInt8)
        self.energy = NumData('Energy', self, UInt8)
        self.energy_target = NumData('Energy Target', self, UInt8)
        self.happiness = NumData('Happiness', self, UInt8)
        self.happiness_target = NumData('Happiness Target', self, UInt8)
        self.nausea = NumData('Nausea', self, UInt8)
        self.nausea_target = NumData('Nausea Target', self, UInt8)
        self.hunger = NumData('Hunger', self, UInt8)
        self.thirst = NumData('Thirst', self, UInt8)
        self.toilet = NumData('Toilet', self, UInt8)
        self.mass = NumData('Mass', self, UInt8)
        self.time_to_consume = NumData('Time To Consume', self, UInt8)
        self.intensity = NumData('Intensity', self, UInt8)
        self.nausea_tolerance = NumData('Nausea Tolerance', self, UInt8)
        self.window_invalidate_flags = NumData('Window Invalidate Flags', self, UInt8)
        self.paid_on_drink = NumData('Paid On Drink', self, Int16)
        self.ride_types_been_on = NumArrayData('Ride Types Been On', self, UInt8, 16)
        self.item_extra_flags = NumData('Item Extra Flags', self, UInt32)
        self.photo2_ride_ref = NumData('Photo 2 Ride', self, UInt8)
        self.photo3_ride_ref = NumData('Photo 3 Ride', self, UInt8)
        self.photo4_ride_ref = NumData('Photo 4 Ride', self, UInt8)
        self.current_ride = NumData('Current Ride', self, UInt8, 0x68)
        self.current_ride_station = NumData('Current Ride Station', self, UInt8)
        self.current_train = NumData('Current Train', self, UInt8)
        self.time_to_sitdown = NumData('Time To Sit Down', self, UInt8)
        self.special_sprite = NumData('Special Sprite', self, UInt8)
        self.action_sprite_type = NumData('Action Sprite Type', self, UInt8)
        self.next_action_sprite_type = NumData('Next Action Sprite Type', self, UInt8)
        self.action_sprite_image_offset = NumData('Action Sprite Image Offset', self, UInt8)
        self.action = NumData('Action', self, UInt8)
        self.action_frame = NumData('Action Frame', self, UInt8)
        self.step_progress = NumData('Step Progress', self, UInt8)
        self.next_in_queue = NumData('Next In Queue', self, UInt16)
        self.direction = NumData('Direction', self, UInt8, 0x76)
        self.interaction_ride_index = NumData('Interaction Ride', self, UInt8)
        self.time_in_queue = NumData('Time In Queue', self, UInt16)
        self.rides_been_on = NumArrayData('Rides Been On', self, UInt8, 32)
        self.id = NumData('ID', self, UInt32)
        self.cash_in_pocket = NumData('Cash In Pocket', self, Int32)
        self.cash_spent = NumData('Cash Spent', self, Int32)
        self.time_in_park = NumData('Time In Park', self, Int32)
        self.rejoin_queue_timeout = NumData('Rejoin Queue Timeout', self, Int8)
        self.previous_ride = NumData('Previous Ride', self, UInt8)
        self.previous_ride_time_out = NumData('Previous Ride Timeout', self, UInt16)
        self.thoughts = [PeepThoughtData(f'Thought {idx}', self) for idx in range(5)]
        self.path_check_optimisation = NumData('Path Check Optimisation', self, UInt8)
        self.guest_heading_to_ride_id = NumData('Heading To Ride', self, UInt8)
        self.peep_is_lost_countdown = NumData('Lost Countdown', self, UInt8)
        self.photo1_ride_ref = NumData('Photo 1 Ride', self, UInt8)
        self.peep_flags = NumData('Peep Flags', self, UInt32)
        self.pathfind_goal = XYZD8Data('Pathfind Goal', self)
        self.pathfind_history = [XYZD8Data(f'Pathfind History {idx}', self) for idx in range(4)]
        self.no_action_frame_num = NumData('No Action Frame Num', self, UInt8)
        self.litter_count = NumData('Litter Count', self, UInt8)
        self.time_on_ride = NumData('Time On Ride', self, UInt8)
        self.disgusting_count = NumData('Disgusting Count', self, UInt8)
        self.paid_to_enter = NumData('Paid To Enter', self, Int16)
        self.paid_on_rides = NumData('Paid On Rides', self, Int16)
        self.paid_on_food = NumData('Paid On Food', self, Int16)
        self.paid_on_souvenirs = NumData('Paid On Souvenirs', self, Int16)
        self.no_of_food = NumData('Num Food', self, UInt8)
        self.no_of_drinks = NumData('Num Drinks', self, UInt8)
        self.no_of_souvenirs = NumData('Num Souvenirs', self, UInt8)
        self.vandalism_seen = NumData('Vandalism Seen', self, UInt8)
        self.voucher_type = NumData('Voucher Type', self, UInt8)
        self.voucher_arguments = NumData('Voucher Arguments', self, UInt8)
        self.surroundings_thought_timeout = NumData('Surroundings Thought Timeout', self, UInt8)
        self.angriness = NumData('Angriness', self, UInt8)
        self.time_lost = NumData('Time Lost', self, UInt8)
        self.days_in_queue = NumData('Days In Queue', self, UInt8)
        self.balloon_colour = NumData('Balloon Colour', self, UInt8)
        self.umbrella_colour = NumData('Umbrella Colour', self, UInt8)
        self.hat_colour = NumData('Hat Colour', self, UInt8)
        self.favourite_ride = NumData('Favourite Ride', self, UInt8)
        self.favourite_ride_rating = NumData('Favourite Ride Rating', self, UInt8)
        self.item_standard_flags = NumData('Item Standard Flags', self, UInt32, 0xFA)


class LitterRecord(SpriteRecord):

    def __init__(self, debug_label, parent, offset=None):
        super().__init__(debug_label, parent, offset=offset)
        self.creation_tick = NumData('Creation Tick', self, UInt32, 0x24)


class SteamParticleRecord(SpriteRecord):

    def __init__(self, debug_label, parent, offset=None):
        super().__init__(debug_label, parent, offset=offset)
        self.time_to_move = NumData('Time To Move', self, UInt16, 0x24)
        self.frame = NumData('Frame', self, UInt16)


class MoneyEffectRecord(SpriteRecord):

    def __init__(self, debug_label, parent, offset=None):
        super().__init__(debug_label, parent, offset=offset)
        self.move_delay = NumData('Move Delay', self, UInt16, 0x24)
        self.num_movements = NumData('Num Movements', self, UInt8)
        self.vertical = NumData('Vertical', self, UInt8)
        self.value = NumData('Value', self, Int32)
        self.offset_x = NumData('Offset X', self, Int16, 0x44)
        self.wiggle = NumData('Wiggle', self, UInt16)


class CrashedVehicleParticleRecord(SpriteRecord):

    def __init__(self, debug_label, parent, offset=None):
        super().__init__(debug_label, parent, offset=offset)
        self.time_to_live = NumData('Time To Live', self, UInt16, 0x24)
        self.frame = NumData('Frame', self, UInt16)
        self.colour = NumArrayData('Colour', self, UInt8, 2, offset=0x2C)
        self.crashed_sprite_base = NumData('Crashed Sprite Base', self, UInt16)
        self.velocity_x = NumData('Velocity X', self, Int16)
        self.velocity_y = NumData('Velocity Y', self, Int16)
        self.velocity_z = NumData('Velocity Z', self, Int16)
        self.acceleration_x = NumData('Acceleration X', self, Int32, 0x38)
        self.acceleration_y = NumData('Acceleration Y', self, Int32)
        self.acceleration_z = NumData('Acceleration Z', self, Int32)


class ParticleRecord(SpriteRecord):
    """
    Explosion clouds and flares, and crash splashes
    """

    def __init__(self, debug_label, parent, offset=None):
        super().__init__(debug_label, parent, offset=offset)
        self.frame = NumData('Frame', self, UInt16, 0x26)


class JumpingFountainRecord(SpriteRecord):

    def __init__(self, debug_label, parent, offset=None):
        super().__init__(debug_label, parent, offset=offset)
        self.num_ticks_alive = NumData('Num Ticks Alive', self, UInt8, 0x26)
        self.frame = NumData('Frame', self, UInt8)
        self.fountain_flags = NumData('Fountain Flags', self, UInt8, 0x2F)
        self.target_x = NumData('Target X', self, Int16)
        self.target_y = NumData('Target Y', self, Int16)
        self.iteration = NumData('Iteration', self, UInt16, 0x46)


class BalloonRecord(SpriteRecord):

    def __init__(self, debug_label, parent, offset=None):
        super().__init__(debug_label, parent, offset=offset)
        self.popped = NumData('Popped', self, UInt16, 0x24)
        self.time_to_move = NumData('Time To Move', self, UInt8)
        self.frame = NumData('Frame', self, UInt8)
        self.colour = NumData('Colour', self, UInt8, 0x2C)


class DuckRecord(SpriteRecord):

    def __init__(self, debug_label, parent, offset=None):
        super().__init__(debug_label, parent, offset=offset)
        self.frame = NumData('Frame', self, UInt8, 0x26)
        self.target_x = NumData('Target X', self, Int16, 0x30)
        self.target_y = NumData('Target Y', self, Int16)
        self.state = NumData('State', self, UInt8, 0x48)


MISC_SPRITE_RECORDS = {
        MiscSpriteType.STEAM_PARTICLE: SteamParticleRecord,
        MiscSpriteType.MONEY_EFFECT: MoneyEffectRecord,
        MiscSpriteType.CRASHED_VEHICLE_PARTICLE: CrashedVehicleParticleRecord,
        MiscSpriteType.EXPLOSION_CLOUD: ParticleRecord,
        MiscSpriteType.CRASH_SPLASH: ParticleRecord,
        MiscSpriteType.EXPLOSION_FLARE: ParticleRecord,
        MiscSpriteType.JUMPING_FOUNTAIN_WATER: JumpingFountainRecord,
        MiscSpriteType.JUMPING_FOUNTAIN_SNOW: JumpingFountainRecord,
        MiscSpriteType.BALLOON: BalloonRecord,
        MiscSpriteType.DUCK: DuckRecord,
        }


###
### Rides
###

class RideRecord(Data):

    SIZE = 0x260

    def __init__(self, debug_label, parent, offset=None):
        super().__init__(debug_label, parent, offset=offset)
        self.type = NumData('Type', self, UInt8)
        self.subtype = NumData('Subtype', self, UInt8)
        self.mode = NumData('Mode', self, UInt8, 0x4)
        self.colour_scheme_type = NumData('Colour Scheme Type', self, UInt8)
        self.vehicle_colours = NumArrayData('Vehicle Colours', self, UInt8, MAX_CARS_PER_TRAIN*2)
        self.status = NumData('Status', self, UInt8, 0x49)
        self.name = NumData('Name', self, UInt16)
        self.name_arguments = NumData('Name Arguments', self, UInt32)
        self.overall_view = XY8Data('Overall View', self)
        self.station_starts = [XY8Data(f'Station {idx} Start', self) for idx in range(MAX_STATIONS)]
        self.station_heights = NumArrayData('Station Heights', self, UInt8, MAX_STATIONS)
        self.station_length = NumArrayData('Station Length', self, UInt8, MAX_STATIONS)
        self.station_depart = NumArrayData('Station Depart', self, UInt8, MAX_STATIONS)
        self.train_at_station = NumArrayData('Train At Station', self, UInt8, MAX_STATIONS)
        self.entrances = [XY8Data(f'Station {idx} Entrance', self) for idx in range(MAX_STATIONS)]
        self.exits = [XY8Data(f'Station {idx} Exit', self) for idx in range(MAX_STATIONS)]
        self.last_peep_in_queue = NumArrayData('Last Peep In Queue', self, UInt16, MAX_STATIONS)
        self.vehicles = NumArrayData('Vehicles', self, UInt16, MAX_VEHICLES_PER_RIDE, offset=0x86)
        self.depart_flags = NumData('Depart Flags', self, UInt8)
        self.num_stations = NumData('Num Stations', self, UInt8)
        self.num_vehicles = NumData('Num Vehicles', self, UInt8)
        self.num_cars_per_train = NumData('Num Cars Per Train', self, UInt8)
        self.proposed_num_vehicles = NumData('Proposed Num Vehicles', self, UInt8)
        self.proposed_num_cars_per_train = NumData('Proposed Num Cars Per Train', self, UInt8)
        self.max_trains = NumData('Max Trains', self, UInt8)
        self.min_max_cars_per_train = NumData('Min/Max Cars Per Train', self, UInt8)
        self.min_waiting_time = NumData('Min Waiting Time', self, UInt8)
        self.max_waiting_time = NumData('Max Waiting Time', self, UInt8)
        self.operation_option = NumData('Operation Option', self, UInt8)
        self.boat_hire_return_direction = NumData('Boat Hire Return Direction', self, UInt8)
        self.boat_hire_return_position = XY8Data('Boat Hire Return Position', self)
        self.measurement_index = NumData('Measurement Index', self, UInt8)
        self.special_track_elements = NumData('Special Track Elements', self, UInt8)
        self.max_speed = NumData('Max Speed', self, Int32, 0xD8)
        self.average_speed = NumData('Average Speed', self, Int32)
        self.current_test_segment = NumData('Current Test Segment', self, UInt8)
        self.average_speed_test_timeout = NumData('Average Speed Test Timeout', self, UInt8)
        self.length = NumArrayData('Segment Length', self, Int32, MAX_STATIONS, offset=0xE4)
        self.time = NumArrayData('Segment Time', self, UInt16, MAX_STATIONS)
        self.max_positive_vertical_g = NumData('Max Positive Vertical G', self, Int16)
        self.max_negative_vertical_g = NumData('Max Negative Vertical G', self, Int16)
        self.max_lateral_g = NumData('Max Lateral G', self, Int16)
        self.previous_vertical_g = NumData('Previous Vertical G', self, Int16)
        self.previous_lateral_g = NumData('Previous Lateral G', self, Int16)
        self.testing_flags = NumData('Testing Flags', self, UInt32, 0x108)
        self.cur_test_track_location = XY8Data('Current Test Track Location', self)
        self.turn_count_default = NumData('Turn Count (Default)', self, UInt16)
        self.turn_count_banked = NumData('Turn Count (Banked)', self, UInt16)
        self.turn_count_sloped = NumData('Turn Count (Sloped)', self, UInt16)
        # Inversion count (or holes, for mini golf) in the bottom five bits,
        # sheltered eighths in the top three
        self.inversions = NumData('Inversions', self, UInt8)
        self.drops = NumData('Drops', self, UInt8)
        self.start_drop_height = NumData('Start Drop Height', self, UInt8)
        self.highest_drop_height = NumData('Highest Drop Height', self, UInt8)
        self.sheltered_length = NumData('Sheltered Length', self, Int32)
        self.var_11C = NumData('var_11C', self, UInt16)
        self.num_sheltered_sections = NumData('Num Sheltered Sections', self, UInt8)
        self.cur_test_track_z = NumData('Current Test Track Z', self, UInt8)
        self.cur_num_customers = NumData('Current Num Customers', self, UInt16)
        self.num_customers_timeout = NumData('Num Customers Timeout', self, UInt16)
        self.num_customers = NumArrayData('Num Customers', self, UInt16, CUSTOMER_HISTORY_SIZE)
        self.price = NumData('Price', self, Int16)
        self.chairlift_bullwheel_location = [XY8Data(f'Bullwheel {idx}', self) for idx in range(2)]
        self.chairlift_bullwheel_z = NumArrayData('Bullwheel Z', self, UInt8, 2)
        self.excitement = NumData('Excitement', self, Int16)
        self.intensity = NumData('Intensity', self, Int16)
        self.nausea = NumData('Nausea', self, Int16)
        self.value = NumData('Value', self, UInt16)
        self.chairlift_bullwheel_rotation = NumData('Bullwheel Rotation', self, UInt16)
        self.satisfaction = NumData('Satisfaction', self, UInt8)
        self.satisfaction_time_out = NumData('Satisfaction Timeout', self, UInt8)
        self.satisfaction_next = NumData('Satisfaction Next', self, UInt8)
        self.window_invalidate_flags = NumData('Window Invalidate Flags', self, UInt8)
        self.total_customers = NumData('Total Customers', self, UInt32, 0x150)
        self.total_profit = NumData('Total Profit', self, Int32)
        self.popularity = NumData('Popularity', self, UInt8)
        self.popularity_time_out = NumData('Popularity Timeout', self, UInt8)
        self.popularity_next = NumData('Popularity Next', self, UInt8)
        self.num_riders = NumData('Num Riders', self, UInt8)
        self.music_tune_id = NumData('Music Tune', self, UInt8)
        self.slide_in_use = NumData('Slide In Use', self, UInt8)
        self.slide_peep = NumData('Slide Peep', self, UInt16)
        self.slide_peep_t_shirt_colour = NumData('Slide Peep T-Shirt Colour', self, UInt8, 0x16E)
        self.spiral_slide_progress = NumData('Spiral Slide Progress', self, UInt8, 0x176)
        self.build_date = NumData('Build Date', self, Int16, 0x180)
        self.upkeep_cost = NumData('Upkeep Cost', self, Int16)
        self.race_winner = NumData('Race Winner', self, UInt16)
        self.music_position = NumData('Music Position', self, UInt32, 0x188)
        self.breakdown_reason_pending = NumData('Breakdown Reason Pending', self, UInt8)
        self.mechanic_status = NumData('Mechanic Status', self, UInt8)
        self.mechanic = NumData('Mechanic', self, UInt16)
        self.inspection_station = NumData('Inspection Station', self, UInt8)
        self.broken_vehicle = NumData('Broken Vehicle', self, UInt8)
        self.broken_car = NumData('Broken Car', self, UInt8)
        self.breakdown_reason = NumData('Breakdown Reason', self, UInt8)
        self.price_secondary = NumData('Secondary Price', self, Int16)
        self.reliability = NumData('Reliability', self, UInt16)
        self.unreliability_factor = NumData('Unreliability Factor', self, UInt8)
        self.downtime = NumData('Downtime', self, UInt8)
        self.inspection_interval = NumData('Inspection Interval', self, UInt8)
        self.last_inspection = NumData('Last Inspection', self, UInt8)
        self.downtime_history = NumArrayData('Downtime History', self, UInt8, DOWNTIME_HISTORY_SIZE)
        self.no_primary_items_sold = NumData('Primary Items Sold', self, UInt32)
        self.no_secondary_items_sold = NumData('Secondary Items Sold', self, UInt32)
        self.breakdown_sound_modifier = NumData('Breakdown Sound Modifier', self, UInt8)
        self.not_fixed_timeout = NumData('Not Fixed Timeout', self, UInt8)
        self.last_crash_type = NumData('Last Crash Type', self, UInt8)
        self.connected_message_throttle = NumData('Connected Message Throttle', self, UInt8)
        self.income_per_hour = NumData('Income Per Hour', self, Int32)
        self.profit = NumData('Profit', self, Int32)
        self.queue_time = NumArrayData('Queue Time', self, UInt8, MAX_STATIONS)
        self.track_colour_main = NumArrayData('Track Colour (Main)', self, UInt8, NUM_COLOUR_SCHEMES)
        self.track_colour_additional = NumArrayData('Track Colour (Additional)', self, UInt8, NUM_COLOUR_SCHEMES)
        self.track_colour_supports = NumArrayData('Track Colour (Supports)', self, UInt8, NUM_COLOUR_SCHEMES)
        self.music = NumData('Music', self, UInt8)
        self.entrance_style = NumData('Entrance Style', self, UInt8)
        self.vehicle_change_timeout = NumData('Vehicle Change Timeout', self, UInt16)
        self.num_block_brakes = NumData('Num Block Brakes', self, UInt8)
        self.lift_hill_speed = NumData('Lift Hill Speed', self, UInt8)
        self.guests_favourite = NumData('Guests Favourite', self, UInt16)
        self.lifecycle_flags = NumData('Lifecycle Flags', self, UInt32)
        self.vehicle_colours_extended = NumArrayData('Extended Vehicle Colours', self, UInt8, MAX_CARS_PER_TRAIN)
        self.total_air_time = NumData('Total Air Time', self, UInt16)
        self.current_test_station = NumData('Current Test Station', self, UInt8)
        self.num_circuits = NumData('Num Circuits', self, UInt8)
        self.cable_lift_x = NumData('Cable Lift X', self, Int16)
        self.cable_lift_y = NumData('Cable Lift Y', self, Int16)
        self.cable_lift_z = NumData('Cable Lift Z', self, UInt8)
        self.cable_lift = NumData('Cable Lift', self, UInt16, 0x1FE)
        self.queue_length = NumArrayData('Queue Length', self, UInt16, MAX_STATIONS)


class RideMeasurementRecord(Data):

    SIZE = 0x4B0C

    def __init__(self, debug_label, parent, offset=None):
        super().__init__(debug_label, parent, offset=offset)
        self.ride_index = NumData('Ride Index', self, UInt8)
        self.flags = NumData('Flags', self, UInt8)
        self.last_use_tick = NumData('Last Use Tick', self, UInt32)
        self.num_items = NumData('Num Items', self, UInt16)
        self.current_item = NumData('Current Item', self, UInt16)
        self.vehicle_index = NumData('Vehicle Index', self, UInt8)
        self.current_station = NumData('Current Station', self, UInt8)
        self.velocity = NumArrayData('Velocity', self, Int8, RIDE_MEASUREMENT_MAX_ITEMS)
        self.altitude = NumArrayData('Altitude', self, UInt8, RIDE_MEASUREMENT_MAX_ITEMS)
        self.vertical = NumArrayData('Vertical', self, Int8, RIDE_MEASUREMENT_MAX_ITEMS)
        self.lateral = NumArrayData('Lateral', self, Int8, RIDE_MEASUREMENT_MAX_ITEMS)


class RideRatingsCalcDataRecord(Data):

    SIZE = 0x4C

    def __init__(self, debug_label, parent, offset=None):
        super().__init__(debug_label, parent, offset=offset)
        self.proximity_x = NumData('Proximity X', self, UInt16)
        self.proximity_y = NumData('Proximity Y', self, UInt16)
        self.proximity_z = NumData('Proximity Z', self, UInt16)
        self.proximity_start_x = NumData('Proximity Start X', self, UInt16)
        self.proximity_start_y = NumData('Proximity Start Y', self, UInt16)
        self.proximity_start_z = NumData('Proximity Start Z', self, UInt16)
        self.current_ride = NumData('Current Ride', self, UInt8)
        self.state = NumData('State', self, UInt8)
        self.proximity_track_type = NumData('Proximity Track Type', self, UInt8)
        self.proximity_base_height = NumData('Proximity Base Height', self, UInt8)
        self.proximity_total = NumData('Proximity Total', self, UInt16)
        self.proximity_scores = NumArrayData('Proximity Scores', self, UInt16, 26)
        self.num_brakes = NumData('Num Brakes', self, UInt16)
        self.num_reversers = NumData('Num Reversers', self, UInt16)
        self.station_flags = NumData('Station Flags', self, UInt16)


###
### Smaller park records
###

class PeepSpawnRecord(Data):

    SIZE = 6

    def __init__(self, debug_label, parent, offset=None):
        super().__init__(debug_label, parent, offset=offset)
        self.x = NumData('X', self, UInt16)
        self.y = NumData('Y', self, UInt16)
        # Stored in units of 16
        self.z = NumData('Z', self, UInt8)
        self.direction = NumData('Direction', self, UInt8)


class AwardRecord(Data):

    SIZE = 4

    def __init__(self, debug_label, parent, offset=None):
        super().__init__(debug_label, parent, offset=offset)
        self.time = NumData('Time', self, UInt16)
        self.type = NumData('Type', self, UInt16)


class ResearchItemRecord(Data):

    SIZE = 5

    def __init__(self, debug_label, parent, offset=None):
        super().__init__(debug_label, parent, offset=offset)
        self.raw_value = NumData('Raw Value', self, UInt32)
        self.category = NumData('Category', self, UInt8)


class BannerRecord(Data):

    SIZE = 8

    def __init__(self, debug_label, parent, offset=None):
        super().__init__(debug_label, parent, offset=offset)
        self.type = NumData('Type', self, UInt8)
        self.flags = NumData('Flags', self, UInt8)
        self.string_idx = NumData('String', self, UInt16)
        self.colour = NumData('Colour', self, UInt8)
        self.text_colour = NumData('Text Colour', self, UInt8)
        self.x = NumData('X', self, UInt8)
        self.y = NumData('Y', self, UInt8)


class UserStringRecord(StringData):

    SIZE = USER_STRING_MAX_LENGTH

    def __init__(self, debug_label, parent, offset=None):
        super().__init__(debug_label, parent, USER_STRING_MAX_LENGTH, offset=offset)


class MapAnimationRecord(Data):

    SIZE = 6

    def __init__(self, debug_label, parent, offset=None):
        super().__init__(debug_label, parent, offset=offset)
        self.base_z = NumData('Base Z', self, UInt8)
        self.type = NumData('Type', self, UInt8)
        self.x = NumData('X', self, UInt16)
        self.y = NumData('Y', self, UInt16)


class NewsItemRecord(Data):

    SIZE = 0x10C

    def __init__(self, debug_label, parent, offset=None):
        super().__init__(debug_label, parent, offset=offset)
        self.type = NumData('Type', self, UInt8)
        self.flags = NumData('Flags', self, UInt8)
        self.assoc = NumData('Assoc', self, UInt32)
        self.ticks = NumData('Ticks', self, UInt16)
        self.month_year = NumData('Month/Year', self, UInt16)
        self.day = NumData('Day', self, UInt8)
        self.text = StringData('Text', self, NEWS_ITEM_TEXT_SIZE, offset=0xC)


class ParkEntrances(Data):
    """
    Park entrances are stored column-wise: all the X coordinates, then all
    the Ys, and so on.
    """

    def __init__(self, debug_label, parent, offset=None):
        super().__init__(debug_label, parent, offset=offset)
        self.x = NumArrayData('X', self, Int16, MAX_PARK_ENTRANCES)
        self.y = NumArrayData('Y', self, Int16, MAX_PARK_ENTRANCES)
        self.z = NumArrayData('Z', self, Int16, MAX_PARK_ENTRANCES)
        self.direction = NumArrayData('Direction', self, UInt8, MAX_PARK_ENTRANCES)


###
### The image itself
###

class S6Image():
    """
    The full output image.  This pretends to be a `Data` object (with `df`,
    `offset`, and `parent` attributes) so that the region and field
    classes can hang off of it.  The backing buffer starts out zeroed.
    """

    def __init__(self):
        self.df = io.BytesIO(bytes(IMAGE_SIZE))
        self.parent = None
        self.offset = 0
        self.debug_label = 'S6 Image'
        self._parse()

    def _parse(self):
        self.df.seek(0)

        self.header = S6Header('Header', self, HEADER_OFFSET)
        self.info = S6Info('Scenario Info', self, INFO_OFFSET)
        self.objects = RecordArray('Objects', self, ObjectEntryData, OBJECT_ENTRY_COUNT, OBJECTS_OFFSET)
        self.misc = MiscFields('Misc', self, MISC_OFFSET)
        self.tile_elements = TileElements('Tile Elements', self, TILES_OFFSET)

        # Everything after the tile elements.  Offsets are relative to the
        # start of this region.
        self.tail = Data('Tail', self, TAIL_OFFSET)
        tail = self.tail
        self.next_free_tile_element_pointer_index = NumData('Next Free Tile Element', tail, UInt32)
        self.sprites = RecordArray('Sprites', tail, SpriteRecord, MAX_SPRITES)
        self.sprite_lists_head = NumArrayData('Sprite List Heads', tail, UInt16, NUM_SPRITE_LISTS)
        self.sprite_lists_count = NumArrayData('Sprite List Counts', tail, UInt16, NUM_SPRITE_LISTS)
        self.park_name = NumData('Park Name', tail, UInt16)
        self.park_name_args = NumData('Park Name Args', tail, UInt32, 0x271020)
        self.initial_cash = NumData('Initial Cash', tail, Int32)
        self.current_loan = NumData('Current Loan', tail, Int32)
        self.park_flags = NumData('Park Flags', tail, UInt32)
        self.park_entrance_fee = NumData('Park Entrance Fee', tail, Int16)
        self.rct1_park_entrance_x = NumData('RCT1 Park Entrance X', tail, UInt16)
        self.rct1_park_entrance_y = NumData('RCT1 Park Entrance Y', tail, UInt16)
        self.rct1_park_entrance_z = NumData('RCT1 Park Entrance Z', tail, UInt16, 0x271038)
        self.peep_spawns = RecordArray('Peep Spawns', tail, PeepSpawnRecord, MAX_PEEP_SPAWNS)
        self.guest_count_change_modifier = NumData('Guest Count Change Modifier', tail, UInt8)
        self.current_research_level = NumData('Research Funding Level', tail, UInt8)
        self.researched_ride_types = BitmaskData('Researched Ride Types', tail, UInt32, 8, RIDE_TYPE_COUNT, offset=0x27104C)
        self.researched_ride_entries = BitmaskData('Researched Ride Entries', tail, UInt32, 8, MAX_RIDE_OBJECTS)
        self.researched_track_types_a = NumArrayData('Researched Track Types (A)', tail, UInt32, NUM_TRACK_CONFIGURATIONS)
        self.researched_track_types_b = NumArrayData('Researched Track Types (B)', tail, UInt32, NUM_TRACK_CONFIGURATIONS)
        self.guests_in_park = NumData('Guests In Park', tail, UInt16)
        self.guests_heading_for_park = NumData('Guests Heading For Park', tail, UInt16)
        self.expenditure_table = NumArrayData('Expenditure Table', tail, Int32, NUM_EXPENDITURE_MONTHS*NUM_EXPENDITURE_TYPES)
        self.last_guests_in_park = NumData('Last Guests In Park', tail, UInt16)
        self.handyman_colour = NumData('Handyman Colour', tail, UInt8, 0x271815)
        self.mechanic_colour = NumData('Mechanic Colour', tail, UInt8)
        self.security_colour = NumData('Security Colour', tail, UInt8)
        self.researched_scenery_items = BitmaskData('Researched Scenery', tail, UInt32, 56, MAX_RESEARCHED_SCENERY_ITEMS)
        self.park_rating = NumData('Park Rating', tail, UInt16)
        self.park_rating_history = NumArrayData('Park Rating History', tail, UInt8, PARK_HISTORY_SIZE)
        self.guests_in_park_history = NumArrayData('Guests In Park History', tail, UInt8, PARK_HISTORY_SIZE)
        self.active_research_types = NumData('Active Research Types', tail, UInt8)
        self.research_progress_stage = NumData('Research Progress Stage', tail, UInt8)
        self.last_researched_item_subject = NumData('Last Researched Item', tail, UInt32)
        self.next_research_item = NumData('Next Research Item', tail, UInt32, 0x271D28)
        self.research_progress = NumData('Research Progress', tail, UInt16)
        self.next_research_category = NumData('Next Research Category', tail, UInt8)
        self.next_research_expected_day = NumData('Research Expected Day', tail, UInt8)
        self.next_research_expected_month = NumData('Research Expected Month', tail, UInt8)
        self.guest_initial_happiness = NumData('Guest Initial Happiness', tail, UInt8)
        self.park_size = NumData('Park Size', tail, UInt16)
        self.guest_generation_probability = NumData('Guest Generation Probability', tail, UInt16)
        self.total_ride_value_for_money = NumData('Total Ride Value For Money', tail, UInt16)
        self.maximum_loan = NumData('Maximum Loan', tail, Int32)
        self.guest_initial_cash = NumData('Guest Initial Cash', tail, Int16)
        self.guest_initial_hunger = NumData('Guest Initial Hunger', tail, UInt8)
        self.guest_initial_thirst = NumData('Guest Initial Thirst', tail, UInt8)
        self.objective_type = NumData('Objective Type', tail, UInt8)
        self.objective_year = NumData('Objective Year', tail, UInt8)
        self.objective_currency = NumData('Objective Currency', tail, Int32, 0x271D44)
        self.objective_guests = NumData('Objective Guests', tail, UInt16)
        self.campaign_weeks_left = NumArrayData('Campaign Weeks Left', tail, UInt8, MAX_CAMPAIGNS)
        self.campaign_ride_index = NumArrayData('Campaign Ride Index', tail, UInt8, MAX_CAMPAIGN_REFERENCES)
        self.balance_history = NumArrayData('Balance History', tail, Int32, FINANCE_HISTORY_SIZE)
        self.current_expenditure = NumData('Current Expenditure', tail, Int32)
        self.current_profit = NumData('Current Profit', tail, Int32)
        self.weekly_profit_average_dividend = NumData('Weekly Profit Dividend', tail, Int32)
        self.weekly_profit_average_divisor = NumData('Weekly Profit Divisor', tail, UInt16)
        self.weekly_profit_history = NumArrayData('Weekly Profit History', tail, Int32, FINANCE_HISTORY_SIZE, offset=0x271F84)
        self.park_value = NumData('Park Value', tail, Int32)
        self.park_value_history = NumArrayData('Park Value History', tail, Int32, FINANCE_HISTORY_SIZE)

        # The final (and largest) scenario chunk
        self.company = Data('Company', tail, 0x272388)
        company = self.company
        self.completed_company_value = NumData('Completed Company Value', company, Int32)
        self.total_admissions = NumData('Total Admissions', company, UInt32)
        self.income_from_admissions = NumData('Income From Admissions', company, Int32)
        self.company_value = NumData('Company Value', company, Int32)
        self.peep_warning_throttle = NumArrayData('Peep Warning Throttle', company, UInt8, PEEP_WARNING_THROTTLE_SIZE)
        self.awards = RecordArray('Awards', company, AwardRecord, MAX_AWARDS)
        self.land_price = NumData('Land Price', company, Int16)
        self.construction_rights_price = NumData('Construction Rights Price', company, Int16)
        self.word_01358774 = NumData('word_01358774', company, UInt16)
        self.cd_key = NumData('CD Key', company, UInt32, 0x38)
        self.game_version_number = NumData('Game Version', company, UInt32, 0x7C)
        self.completed_company_value_record = NumData('Company Value Record', company, Int32)
        self.loan_hash = NumData('Loan Hash', company, UInt32)
        self.ride_count = NumData('Ride Count', company, UInt16)
        self.historical_profit = NumData('Historical Profit', company, Int32, 0x90)
        self.scenario_completed_name = StringData('Scenario Completed By', company, 32, offset=0x98)
        self.cash = NumData('Cash (Encrypted)', company, UInt32)
        self.park_rating_casualty_penalty = NumData('Casualty Penalty', company, UInt16, 0xEE)
        self.map_size_units = NumData('Map Size Units', company, UInt16)
        self.map_size_minus_2 = NumData('Map Size Minus 2', company, UInt16)
        self.map_size = NumData('Map Size', company, UInt16)
        self.map_max_xy = NumData('Map Max XY', company, UInt16)
        self.same_price_throughout = NumData('Same Price Throughout', company, UInt32)
        self.suggested_max_guests = NumData('Suggested Max Guests', company, UInt16)
        self.park_rating_warning_days = NumData('Park Rating Warning Days', company, UInt16)
        self.last_entrance_style = NumData('Last Entrance Style', company, UInt8)
        self.rct1_water_colour = NumData('RCT1 Water Colour', company, UInt8)
        self.research_items = RecordArray('Research Items', company, ResearchItemRecord, MAX_RESEARCH_ITEMS, 0x104)
        self.map_base_z = NumData('Map Base Z', company, UInt16)
        self.scenario_name = StringData('Scenario Name', company, 64)
        self.scenario_description = StringData('Scenario Description', company, 256)
        self.current_interest_rate = NumData('Interest Rate', company, UInt8)
        self.same_price_throughout_extended = NumData('Same Price Throughout (Extended)', company, UInt32, 0xC0C)
        self.park_entrances = ParkEntrances('Park Entrances', company)
        self.scenario_filename = StringData('Scenario Filename', company, 256)
        self.saved_expansion_pack_names = BytesData('Expansion Packs', company, EXPANSION_PACK_NAMES_SIZE)
        self.banners = RecordArray('Banners', company, BannerRecord, MAX_BANNERS)
        self.custom_strings = RecordArray('User Strings', company, UserStringRecord, MAX_USER_STRINGS)
        self.game_ticks_1 = NumData('Game Ticks', company, UInt32)
        self.rides = RecordArray('Rides', company, RideRecord, MAX_RIDES)
        self.saved_age = NumData('Saved Age', company, UInt16)
        self.saved_view_x = NumData('Saved View X', company, UInt16)
        self.saved_view_y = NumData('Saved View Y', company, UInt16)
        self.saved_view_zoom = NumData('Saved View Zoom', company, UInt8)
        self.saved_view_rotation = NumData('Saved View Rotation', company, UInt8)
        self.map_animations = RecordArray('Map Animations', company, MapAnimationRecord, MAX_MAP_ANIMATIONS)
        self.num_map_animations = NumData('Num Map Animations', company, UInt16)
        self.ride_ratings_calc_data = RideRatingsCalcDataRecord('Ride Ratings Calc', company, 0x32E44)
        self.ride_measurements = RecordArray('Ride Measurements', company, RideMeasurementRecord, MAX_RIDE_MEASUREMENTS, 0x32ECC)
        self.next_guest_index = NumData('Next Guest Index', company, UInt16)
        self.grass_and_scenery_tilepos = NumData('Grass/Scenery Tile Position', company, UInt16, 0x58730)
        self.patrol_areas = NumArrayData('Staff Patrol Areas', company, UInt32, MAX_STAFF*STAFF_PATROL_AREA_SIZE)
        self.staff_modes = NumArrayData('Staff Modes', company, UInt8, MAX_STAFF)
        self.byte_13CA740 = NumData('byte_13CA740', company, UInt8, 0x72000)
        self.byte_13CA742 = BytesData('byte_13CA742', company, 4, offset=0x72002)
        self.climate = NumData('Climate', company, UInt8)
        self.climate_update_timer = NumData('Climate Update Timer', company, UInt16, 0x72008)
        self.current_weather = NumData('Current Weather', company, UInt8)
        self.next_weather = NumData('Next Weather', company, UInt8)
        self.temperature = NumData('Temperature', company, Int8)
        self.next_temperature = NumData('Next Temperature', company, Int8)
        self.current_weather_effect = NumData('Current Weather Effect', company, UInt8)
        self.next_weather_effect = NumData('Next Weather Effect', company, UInt8)
        self.current_weather_gloom = NumData('Current Weather Gloom', company, UInt8)
        self.next_weather_gloom = NumData('Next Weather Gloom', company, UInt8)
        self.current_rain_level = NumData('Current Rain Level', company, UInt8)
        self.next_rain_level = NumData('Next Rain Level', company, UInt8)
        self.news_items = RecordArray('News Items', company, NewsItemRecord, MAX_NEWS_ITEMS)
        self.rct1_scenario_flags = NumData('RCT1 Scenario Flags', company, UInt32, 0x76030)
        self.wide_path_tile_loop_x = NumData('Wide Path Tile Loop X', company, UInt16)
        self.wide_path_tile_loop_y = NumData('Wide Path Tile Loop Y', company, UInt16)

    def read(self, offset, length):
        """
        Returns `length` raw bytes from the absolute `offset`
        """
        self.df.seek(offset, os.SEEK_SET)
        return self.df.read(length)

    def chunk_table(self, is_scenario):
        """
        Returns the list of image regions which get written out as chunks,
        in order, as `(label, offset, length, encoding)` tuples.  Packed
        objects are written in between the info and object chunks, and
        aren't part of the image, so they're not listed.
        """
        chunks = [('Header', HEADER_OFFSET, HEADER_SIZE, SawyerEncoding.ROTATE)]
        if is_scenario:
            chunks.append(('Scenario Info', INFO_OFFSET, INFO_SIZE, SawyerEncoding.ROTATE))
        chunks.append(('Objects', OBJECTS_OFFSET, OBJECTS_SIZE, SawyerEncoding.ROTATE))
        chunks.append(('Misc', MISC_OFFSET, MISC_SIZE, SawyerEncoding.RLECOMPRESSED))
        chunks.append(('Tile Elements', TILES_OFFSET, TILES_SIZE, SawyerEncoding.RLECOMPRESSED))
        if is_scenario:
            for label, offset, length in SCENARIO_TAIL_CHUNKS:
                chunks.append((label, TAIL_OFFSET+offset, length, SawyerEncoding.RLECOMPRESSED))
        else:
            chunks.append(('Everything Else', TAIL_OFFSET, TAIL_SIZE, SawyerEncoding.RLECOMPRESSED))
        return chunks
