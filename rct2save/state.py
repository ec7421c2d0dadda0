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
import struct
import typing
import dataclasses
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Dict, Set

from . import log_warning
from .datafile import LabelEnum

# The live park state which gets exported.  In the running game this is
# spread all over the place; here it's one explicit context object
# (`ParkState`) which the exporter only ever reads from.  Apart from the
# pre-export sprite list repairs, nothing in here is modified by an export.

SPRITE_INDEX_NULL = 0xFFFF
MAX_SPRITES = 10000
NUM_SPRITE_LISTS = 6
MAXIMUM_MAP_SIZE = 256
SPATIAL_INDEX_LOCATION_NULL = MAXIMUM_MAP_SIZE*MAXIMUM_MAP_SIZE
SPATIAL_INDEX_SIZE = SPATIAL_INDEX_LOCATION_NULL + 1
LOCATION_NULL = -32768

MAX_TILE_ELEMENTS = 0x30000
TILE_ELEMENT_SIZE = 8
TILE_ELEMENT_TYPE_MASK = 0x3C
TILE_ELEMENT_FLAG_GHOST = 0x10
TILE_ELEMENT_FLAG_LAST_TILE = 0x80

MAX_RIDES = 255
RIDE_TYPE_NULL = 255
RIDE_TYPE_MINI_GOLF = 85
RIDE_TYPE_COUNT = 91
MAX_RIDE_OBJECTS = 128
MAX_RESEARCHED_SCENERY_ITEMS = 1792
MAX_STATIONS = 4
MAX_CARS_PER_TRAIN = 32
MAX_VEHICLES_PER_RIDE = 32
NUM_COLOUR_SCHEMES = 4
CUSTOMER_HISTORY_SIZE = 10
DOWNTIME_HISTORY_SIZE = 8
RIDE_MEASUREMENT_MAX_ITEMS = 4800

MAX_PEEP_SPAWNS = 2
MAX_PARK_ENTRANCES = 4
MAX_AWARDS = 4
MAX_NEWS_ITEMS = 61
MAX_BANNERS = 250
BANNER_NULL = 255
MAX_USER_STRINGS = 1024
USER_STRING_MAX_LENGTH = 32
USER_STRING_START = 0x8000
USER_STRING_END = 0x8FFF
MAX_MAP_ANIMATIONS = 2000
MAX_STAFF = 204
STAFF_PATROL_AREA_SIZE = 128
OBJECT_ENTRY_COUNT = 721
NUM_EXPENDITURE_MONTHS = 16
NUM_EXPENDITURE_TYPES = 14
FINANCE_HISTORY_SIZE = 128
PARK_HISTORY_SIZE = 32
PEEP_WARNING_THROTTLE_SIZE = 16
NUM_TRACK_CONFIGURATIONS = 128
EXPANSION_PACK_NAMES_SIZE = 3256

MONEY32_UNDEFINED = -0x80000000
RESEARCH_ITEM_NULL = 0xFFFFFFFF


class SpriteIdentifier(LabelEnum):
    """
    The top-level kind of a sprite slot
    """

    VEHICLE = (0, 'Vehicle')
    PEEP =    (1, 'Peep')
    MISC =    (2, 'Misc')
    LITTER =  (3, 'Litter')
    NULL =    (255, 'Free')


class MiscSpriteType(LabelEnum):
    """
    Sub-kinds of misc sprites, stored in the common `type` field
    """

    STEAM_PARTICLE =            (0, 'Steam Particle')
    MONEY_EFFECT =              (1, 'Money Effect')
    CRASHED_VEHICLE_PARTICLE =  (2, 'Crashed Vehicle Particle')
    EXPLOSION_CLOUD =           (3, 'Explosion Cloud')
    CRASH_SPLASH =              (4, 'Crash Splash')
    EXPLOSION_FLARE =           (5, 'Explosion Flare')
    JUMPING_FOUNTAIN_WATER =    (6, 'Jumping Fountain (Water)')
    BALLOON =                   (7, 'Balloon')
    DUCK =                      (8, 'Duck')
    JUMPING_FOUNTAIN_SNOW =     (9, 'Jumping Fountain (Snow)')


class SpriteList(LabelEnum):
    """
    The type-partitioned sprite lists
    """

    FREE =       (0, 'Free')
    TRAIN_HEAD = (1, 'Train Heads')
    PEEP =       (2, 'Peeps')
    MISC =       (3, 'Misc')
    LITTER =     (4, 'Litter')
    VEHICLE =    (5, 'Vehicles')


class CampaignType(LabelEnum):
    """
    Marketing campaign types
    """

    PARK_ENTRY_FREE =    (0, 'Free Park Entry')
    RIDE_FREE =          (1, 'Free Ride')
    PARK_ENTRY_HALF =    (2, 'Half-Price Park Entry')
    FOOD_OR_DRINK_FREE = (3, 'Free Food or Drink')
    PARK =               (4, 'Park Advertising')
    RIDE =               (5, 'Ride Advertising')


class TileElementType(LabelEnum):
    """
    Tile element types, as stored in the (masked) first byte of an element
    """

    SURFACE =       (0x00, 'Surface')
    PATH =          (0x04, 'Path')
    TRACK =         (0x08, 'Track')
    SMALL_SCENERY = (0x0C, 'Small Scenery')
    ENTRANCE =      (0x10, 'Entrance')
    WALL =          (0x14, 'Wall')
    LARGE_SCENERY = (0x18, 'Large Scenery')
    BANNER =        (0x1C, 'Banner')
    CORRUPT =       (0x20, 'Corrupt')


def is_user_string_id(string_id):
    """
    Whether a string id refers to one of the park's user strings
    """
    return USER_STRING_START <= string_id <= USER_STRING_END


###
### Object catalog
###

@dataclass
class ObjectEntry:
    """Descriptor of a loaded object, as stored in the catalog table"""
    flags: int = 0
    name: str = ''
    checksum: int = 0

    def pack(self):
        """
        The 16-byte on-disk form of this entry.  Names are space-padded to
        eight characters.
        """
        name = self.name.encode('latin-1')[:8].ljust(8, b' ')
        return struct.pack('<I8sI', self.flags, name, self.checksum)


@dataclass
class PackedObject:
    """A custom object to be embedded in the file, with its already-encoded data chunk"""
    entry: ObjectEntry
    data: bytes = b''


@dataclass
class ObjectCatalog:
    """
    The loaded-object collaborator.  `entries` maps catalog slot indexes
    to their loaded entries; slots which aren't present are empty.
    `packable` lists the custom objects which can be embedded in an export.
    `scrolling_walls` and `scrolling_large_scenery` hold the entry indexes of
    wall / large scenery objects which carry scrolling banner text.
    """
    entries: Dict[int, ObjectEntry] = field(default_factory=dict)
    packable: List[PackedObject] = field(default_factory=list)
    scrolling_walls: Set[int] = field(default_factory=set)
    scrolling_large_scenery: Set[int] = field(default_factory=set)

    def get_loaded_entry(self, index):
        """
        Returns the entry loaded into catalog slot `index`, or `None`
        """
        return self.entries.get(index)

    def get_packable_objects(self):
        return list(self.packable)

    def write_packed_objects(self, writer, objects):
        """
        Writes each object's entry followed by its data chunk, verbatim
        """
        for obj in objects:
            writer.write_raw(obj.entry.pack())
            writer.write_raw(obj.data)

    def has_scrolling_text(self, element_type, entry_index):
        """
        Whether the given wall or large scenery object has a banner attached
        """
        if element_type == TileElementType.WALL:
            return entry_index in self.scrolling_walls
        elif element_type == TileElementType.LARGE_SCENERY:
            return entry_index in self.scrolling_large_scenery
        return False


###
### Sprites
###

@dataclass
class Sprite:
    """Fields common to every sprite slot.  A bare `Sprite` is a free slot."""
    sprite_identifier: int = SpriteIdentifier.NULL.value
    type: int = 0
    next_in_quadrant: int = SPRITE_INDEX_NULL
    next: int = SPRITE_INDEX_NULL
    previous: int = SPRITE_INDEX_NULL
    linked_list_type_offset: int = 0
    sprite_height_negative: int = 0
    sprite_index: int = 0
    flags: int = 0
    x: int = 0
    y: int = 0
    z: int = 0
    sprite_width: int = 0
    sprite_height_positive: int = 0
    sprite_left: int = 0
    sprite_top: int = 0
    sprite_right: int = 0
    sprite_bottom: int = 0
    sprite_direction: int = 0


@dataclass
class VehicleColour:
    body: int = 0
    trim: int = 0
    ternary: int = 0


@dataclass
class Vehicle(Sprite):
    sprite_identifier: int = SpriteIdentifier.VEHICLE.value
    vehicle_sprite_type: int = 0
    bank_rotation: int = 0
    remaining_distance: int = 0
    velocity: int = 0
    acceleration: int = 0
    ride: int = 0
    vehicle_type: int = 0
    colours: VehicleColour = field(default_factory=VehicleColour)
    track_progress: int = 0
    # Track type in the upper bits, direction in the bottom two
    track_type_and_direction: int = 0
    track_x: int = 0
    track_y: int = 0
    track_z: int = 0
    next_vehicle_on_train: int = SPRITE_INDEX_NULL
    prev_vehicle_on_ride: int = SPRITE_INDEX_NULL
    next_vehicle_on_ride: int = SPRITE_INDEX_NULL
    var_44: int = 0
    mass: int = 0
    update_flags: int = 0
    swing_sprite: int = 0
    current_station: int = 0
    current_time: int = 0
    crash_z: int = 0
    status: int = 0
    sub_state: int = 0
    peep: List[int] = field(default_factory=lambda: [SPRITE_INDEX_NULL]*32)
    peep_tshirt_colours: List[int] = field(default_factory=lambda: [0]*32)
    num_seats: int = 0
    num_peeps: int = 0
    next_free_seat: int = 0
    restraints_position: int = 0
    crash_x: int = 0
    sound2_flags: int = 0
    spin_sprite: int = 0
    sound1_id: int = 255
    sound1_volume: int = 0
    sound2_id: int = 255
    sound2_volume: int = 0
    sound_vector_factor: int = 0
    time_waiting: int = 0
    speed: int = 0
    powered_acceleration: int = 0
    dodgems_collision_direction: int = 0
    animation_frame: int = 0
    var_C8: int = 0
    var_CA: int = 0
    scream_sound_id: int = 255
    var_CD: int = 0
    var_CE: int = 0
    var_CF: int = 0
    lost_time_out: int = 0
    vertical_drop_countdown: int = 0
    var_D3: int = 0
    mini_golf_current_animation: int = 0
    mini_golf_flags: int = 0
    ride_subtype: int = 255
    colours_extended: int = 0
    seat_rotation: int = 4
    target_seat_rotation: int = 4


@dataclass
class PeepThought:
    type: int = 0xFF
    item: int = 0
    freshness: int = 0
    fresh_timeout: int = 0


@dataclass
class PathfindPosition:
    x: int = 0xFF
    y: int = 0xFF
    z: int = 0xFF
    direction: int = 0xFF


@dataclass
class Peep(Sprite):
    """Guests and staff"""
    sprite_identifier: int = SpriteIdentifier.PEEP.value
    name_string_idx: int = 0
    next_x: int = 0
    next_y: int = 0
    next_z: int = 0
    next_flags: int = 0
    outside_of_park: int = 0
    state: int = 0
    sub_state: int = 0
    sprite_type: int = 0
    peep_type: int = 0
    no_of_rides: int = 0
    tshirt_colour: int = 0
    trousers_colour: int = 0
    destination_x: int = 0
    destination_y: int = 0
    destination_tolerance: int = 0
    var_37: int = 0
    energy: int = 0
    energy_target: int = 0
    happiness: int = 0
    happiness_target: int = 0
    nausea: int = 0
    nausea_target: int = 0
    hunger: int = 0
    thirst: int = 0
    toilet: int = 0
    mass: int = 0
    time_to_consume: int = 0
    intensity: int = 0
    nausea_tolerance: int = 0
    window_invalidate_flags: int = 0
    paid_on_drink: int = 0
    ride_types_been_on: List[int] = field(default_factory=lambda: [0]*16)
    item_extra_flags: int = 0
    photo2_ride_ref: int = 0
    photo3_ride_ref: int = 0
    photo4_ride_ref: int = 0
    current_ride: int = 0
    current_ride_station: int = 0
    current_train: int = 0
    time_to_sitdown: int = 0
    special_sprite: int = 0
    action_sprite_type: int = 0
    next_action_sprite_type: int = 0
    action_sprite_image_offset: int = 0
    action: int = 0
    action_frame: int = 0
    step_progress: int = 0
    next_in_queue: int = SPRITE_INDEX_NULL
    direction: int = 0
    interaction_ride_index: int = 0
    time_in_queue: int = 0
    rides_been_on: List[int] = field(default_factory=lambda: [0]*32)
    id: int = 0
    cash_in_pocket: int = 0
    cash_spent: int = 0
    time_in_park: int = 0
    rejoin_queue_timeout: int = 0
    previous_ride: int = 0
    previous_ride_time_out: int = 0
    thoughts: List[PeepThought] = field(default_factory=lambda: [PeepThought() for _ in range(5)])
    path_check_optimisation: int = 0
    guest_heading_to_ride_id: int = 0
    peep_is_lost_countdown: int = 0
    photo1_ride_ref: int = 0
    peep_flags: int = 0
    pathfind_goal: PathfindPosition = field(default_factory=PathfindPosition)
    pathfind_history: List[PathfindPosition] = field(default_factory=lambda: [PathfindPosition() for _ in range(4)])
    no_action_frame_num: int = 0
    litter_count: int = 0
    time_on_ride: int = 0
    disgusting_count: int = 0
    paid_to_enter: int = 0
    paid_on_rides: int = 0
    paid_on_food: int = 0
    paid_on_souvenirs: int = 0
    no_of_food: int = 0
    no_of_drinks: int = 0
    no_of_souvenirs: int = 0
    vandalism_seen: int = 0
    voucher_type: int = 0
    voucher_arguments: int = 0
    surroundings_thought_timeout: int = 0
    angriness: int = 0
    time_lost: int = 0
    days_in_queue: int = 0
    balloon_colour: int = 0
    umbrella_colour: int = 0
    hat_colour: int = 0
    favourite_ride: int = 0
    favourite_ride_rating: int = 0
    item_standard_flags: int = 0


@dataclass
class Litter(Sprite):
    sprite_identifier: int = SpriteIdentifier.LITTER.value
    creation_tick: int = 0


@dataclass
class SteamParticle(Sprite):
    sprite_identifier: int = SpriteIdentifier.MISC.value
    type: int = MiscSpriteType.STEAM_PARTICLE.value
    time_to_move: int = 0
    frame: int = 0


@dataclass
class MoneyEffect(Sprite):
    sprite_identifier: int = SpriteIdentifier.MISC.value
    type: int = MiscSpriteType.MONEY_EFFECT.value
    move_delay: int = 0
    num_movements: int = 0
    vertical: int = 0
    value: int = 0
    offset_x: int = 0
    wiggle: int = 0


@dataclass
class CrashedVehicleParticle(Sprite):
    sprite_identifier: int = SpriteIdentifier.MISC.value
    type: int = MiscSpriteType.CRASHED_VEHICLE_PARTICLE.value
    time_to_live: int = 0
    frame: int = 0
    colour: List[int] = field(default_factory=lambda: [0, 0])
    crashed_sprite_base: int = 0
    velocity_x: int = 0
    velocity_y: int = 0
    velocity_z: int = 0
    acceleration_x: int = 0
    acceleration_y: int = 0
    acceleration_z: int = 0


@dataclass
class Particle(Sprite):
    """Explosion clouds, explosion flares and crash splashes"""
    sprite_identifier: int = SpriteIdentifier.MISC.value
    type: int = MiscSpriteType.EXPLOSION_CLOUD.value
    frame: int = 0


@dataclass
class JumpingFountain(Sprite):
    sprite_identifier: int = SpriteIdentifier.MISC.value
    type: int = MiscSpriteType.JUMPING_FOUNTAIN_WATER.value
    num_ticks_alive: int = 0
    frame: int = 0
    fountain_flags: int = 0
    target_x: int = 0
    target_y: int = 0
    iteration: int = 0


@dataclass
class Balloon(Sprite):
    sprite_identifier: int = SpriteIdentifier.MISC.value
    type: int = MiscSpriteType.BALLOON.value
    popped: int = 0
    time_to_move: int = 0
    frame: int = 0
    colour: int = 0


@dataclass
class Duck(Sprite):
    sprite_identifier: int = SpriteIdentifier.MISC.value
    type: int = MiscSpriteType.DUCK.value
    frame: int = 0
    target_x: int = 0
    target_y: int = 0
    state: int = 0


# Names used for sprites in park description files
SPRITE_KINDS = {
    'vehicle': (Vehicle, SpriteList.VEHICLE),
    'peep': (Peep, SpriteList.PEEP),
    'litter': (Litter, SpriteList.LITTER),
    'steam_particle': (SteamParticle, SpriteList.MISC),
    'money_effect': (MoneyEffect, SpriteList.MISC),
    'crashed_vehicle_particle': (CrashedVehicleParticle, SpriteList.MISC),
    'particle': (Particle, SpriteList.MISC),
    'jumping_fountain': (JumpingFountain, SpriteList.MISC),
    'balloon': (Balloon, SpriteList.MISC),
    'duck': (Duck, SpriteList.MISC),
    }


def spatial_index_of(x, y):
    """
    Spatial index bucket for a sprite at world coordinates (`x`, `y`)
    """
    if x == LOCATION_NULL:
        return SPATIAL_INDEX_LOCATION_NULL
    return ((x & 0x1FE0) << 3) | ((y & 0x1FE0) >> 5)


@dataclass
class SpriteTable:
    """
    The fixed-size sprite table along with its two indexing structures: the
    type-partitioned doubly-linked lists (`list_heads`/`list_counts`, linked
    via `next`/`previous`) and the spatial index (linked via
    `next_in_quadrant`).
    """
    sprites: List[Sprite] = field(default_factory=list)
    list_heads: List[int] = field(default_factory=list)
    list_counts: List[int] = field(default_factory=list)
    spatial_index: List[int] = field(default_factory=list)

    @staticmethod
    def blank():
        """
        A table with every slot free, chained together in index order
        """
        sprites = []
        for idx in range(MAX_SPRITES):
            sprites.append(Sprite(
                sprite_index=idx,
                next=idx+1 if idx < MAX_SPRITES-1 else SPRITE_INDEX_NULL,
                previous=idx-1 if idx > 0 else SPRITE_INDEX_NULL,
                linked_list_type_offset=SpriteList.FREE.value*2,
                ))
        return SpriteTable(
                sprites=sprites,
                list_heads=[0] + [SPRITE_INDEX_NULL]*(NUM_SPRITE_LISTS-1),
                list_counts=[MAX_SPRITES] + [0]*(NUM_SPRITE_LISTS-1),
                spatial_index=[SPRITE_INDEX_NULL]*SPATIAL_INDEX_SIZE,
                )

    def __getitem__(self, index):
        return self.sprites[index]

    def __len__(self):
        return len(self.sprites)

    def allocate(self, sprite, sprite_list):
        """
        Takes the first slot off the free list, puts `sprite` into it, and
        links it into the head of `sprite_list` and into the spatial index.
        Returns the slot index.  Raises `RuntimeError` if the table is full.
        """
        free_head = self.list_heads[SpriteList.FREE.value]
        if free_head == SPRITE_INDEX_NULL:
            raise RuntimeError('No free sprite slots left')
        old = self.sprites[free_head]

        # Unlink from the free list
        self.list_heads[SpriteList.FREE.value] = old.next
        if old.next != SPRITE_INDEX_NULL:
            self.sprites[old.next].previous = SPRITE_INDEX_NULL
        self.list_counts[SpriteList.FREE.value] -= 1

        # Link into the requested list
        sprite.sprite_index = free_head
        sprite.linked_list_type_offset = sprite_list.value*2
        sprite.previous = SPRITE_INDEX_NULL
        sprite.next = self.list_heads[sprite_list.value]
        if sprite.next != SPRITE_INDEX_NULL:
            self.sprites[sprite.next].previous = free_head
        self.list_heads[sprite_list.value] = free_head
        self.list_counts[sprite_list.value] += 1

        # And into the spatial index
        bucket = spatial_index_of(sprite.x, sprite.y)
        sprite.next_in_quadrant = self.spatial_index[bucket]
        self.spatial_index[bucket] = free_head

        self.sprites[free_head] = sprite
        return free_head


###
### Rides
###

@dataclass
class TrackColour:
    main: int = 0
    additional: int = 0
    supports: int = 0


@dataclass
class RideRating:
    excitement: int = 0
    intensity: int = 0
    nausea: int = 0


@dataclass
class RideStation:
    """
    Per-station data.  Coordinates are (x, y) tile coordinate tuples, or
    `None` where nothing has been placed.
    """
    start: Optional[Tuple[int, int]] = None
    height: int = 0
    length: int = 0
    depart: int = 0
    train_at_station: int = 255
    entrance: Optional[Tuple[int, int]] = None
    exit: Optional[Tuple[int, int]] = None
    last_peep_in_queue: int = SPRITE_INDEX_NULL
    segment_length: int = 0
    segment_time: int = 0
    queue_time: int = 0
    queue_length: int = 0


@dataclass
class RideMeasurement:
    """On-ride telemetry buffer, owned by a ride"""
    flags: int = 0
    last_use_tick: int = 0
    num_items: int = 0
    current_item: int = 0
    vehicle_index: int = 0
    current_station: int = 0
    velocity: List[int] = field(default_factory=list)
    altitude: List[int] = field(default_factory=list)
    vertical: List[int] = field(default_factory=list)
    lateral: List[int] = field(default_factory=list)


@dataclass
class Ride:
    id: int = 0
    type: int = RIDE_TYPE_NULL
    subtype: int = 255
    mode: int = 0
    colour_scheme_type: int = 0
    vehicle_colours: List[VehicleColour] = field(default_factory=lambda: [VehicleColour() for _ in range(MAX_CARS_PER_TRAIN)])
    status: int = 0
    name: int = 0
    name_arguments: int = 0
    overall_view: Optional[Tuple[int, int]] = None
    stations: List[RideStation] = field(default_factory=lambda: [RideStation() for _ in range(MAX_STATIONS)])
    vehicles: List[int] = field(default_factory=lambda: [SPRITE_INDEX_NULL]*MAX_VEHICLES_PER_RIDE)
    depart_flags: int = 0
    num_stations: int = 0
    num_vehicles: int = 0
    num_cars_per_train: int = 0
    proposed_num_vehicles: int = 0
    proposed_num_cars_per_train: int = 0
    max_trains: int = 0
    min_max_cars_per_train: int = 0
    min_waiting_time: int = 0
    max_waiting_time: int = 0
    operation_option: int = 0
    boat_hire_return_direction: int = 0
    boat_hire_return_position: Optional[Tuple[int, int]] = None
    special_track_elements: int = 0
    max_speed: int = 0
    average_speed: int = 0
    current_test_segment: int = 0
    average_speed_test_timeout: int = 0
    max_positive_vertical_g: int = 0
    max_negative_vertical_g: int = 0
    max_lateral_g: int = 0
    previous_vertical_g: int = 0
    previous_lateral_g: int = 0
    testing_flags: int = 0
    cur_test_track_location: Optional[Tuple[int, int]] = None
    turn_count_default: int = 0
    turn_count_banked: int = 0
    turn_count_sloped: int = 0
    inversions: int = 0
    holes: int = 0
    sheltered_eighths: int = 0
    drops: int = 0
    start_drop_height: int = 0
    highest_drop_height: int = 0
    sheltered_length: int = 0
    var_11C: int = 0
    num_sheltered_sections: int = 0
    cur_test_track_z: int = 0
    cur_num_customers: int = 0
    num_customers_timeout: int = 0
    num_customers: List[int] = field(default_factory=lambda: [0]*CUSTOMER_HISTORY_SIZE)
    price: int = 0
    chairlift_bullwheel_location: List[Optional[Tuple[int, int]]] = field(default_factory=lambda: [None, None])
    chairlift_bullwheel_z: List[int] = field(default_factory=lambda: [0, 0])
    ratings: RideRating = field(default_factory=RideRating)
    value: int = 0
    chairlift_bullwheel_rotation: int = 0
    satisfaction: int = 0
    satisfaction_time_out: int = 0
    satisfaction_next: int = 0
    window_invalidate_flags: int = 0
    total_customers: int = 0
    total_profit: int = 0
    popularity: int = 0
    popularity_time_out: int = 0
    popularity_next: int = 0
    num_riders: int = 0
    music_tune_id: int = 0
    slide_in_use: int = 0
    slide_peep: int = 0
    slide_peep_t_shirt_colour: int = 0
    spiral_slide_progress: int = 0
    build_date: int = 0
    upkeep_cost: int = 0
    race_winner: int = SPRITE_INDEX_NULL
    music_position: int = 0
    breakdown_reason_pending: int = 0
    mechanic_status: int = 0
    mechanic: int = SPRITE_INDEX_NULL
    inspection_station: int = 0
    broken_vehicle: int = 0
    broken_car: int = 0
    breakdown_reason: int = 255
    price_secondary: int = 0
    reliability: int = 0
    unreliability_factor: int = 0
    downtime: int = 0
    inspection_interval: int = 0
    last_inspection: int = 0
    downtime_history: List[int] = field(default_factory=lambda: [0]*DOWNTIME_HISTORY_SIZE)
    no_primary_items_sold: int = 0
    no_secondary_items_sold: int = 0
    breakdown_sound_modifier: int = 0
    not_fixed_timeout: int = 0
    last_crash_type: int = 0
    connected_message_throttle: int = 0
    income_per_hour: int = 0
    profit: int = 0
    track_colours: List[TrackColour] = field(default_factory=lambda: [TrackColour() for _ in range(NUM_COLOUR_SCHEMES)])
    music: int = 0
    entrance_style: int = 0
    vehicle_change_timeout: int = 0
    num_block_brakes: int = 0
    lift_hill_speed: int = 0
    guests_favourite: int = 0
    lifecycle_flags: int = 0
    total_air_time: int = 0
    current_test_station: int = 0
    num_circuits: int = 0
    cable_lift_x: int = 0
    cable_lift_y: int = 0
    cable_lift_z: int = 0
    cable_lift: int = SPRITE_INDEX_NULL
    measurement: Optional[RideMeasurement] = None


@dataclass
class RideRatingsCalcData:
    """State of the incremental ride rating calculation"""
    proximity_x: int = 0
    proximity_y: int = 0
    proximity_z: int = 0
    proximity_start_x: int = 0
    proximity_start_y: int = 0
    proximity_start_z: int = 0
    current_ride: int = 255
    state: int = 0
    proximity_track_type: int = 0
    proximity_base_height: int = 0
    proximity_total: int = 0
    proximity_scores: List[int] = field(default_factory=lambda: [0]*26)
    num_brakes: int = 0
    num_reversers: int = 0
    station_flags: int = 0


###
### Park-level bits and pieces
###

@dataclass
class ScenarioInfo:
    """The scenario description shown in the scenario selector"""
    editor_step: int = 0
    category: int = 0
    objective_type: int = 0
    objective_arg_1: int = 0
    objective_arg_2: int = 0
    objective_arg_3: int = 0
    name: str = ''
    details: str = ''
    entry: ObjectEntry = field(default_factory=ObjectEntry)


@dataclass
class PeepSpawn:
    """A guest spawn point, in world coordinates"""
    x: int = 0
    y: int = 0
    z: int = 0
    direction: int = 0


@dataclass
class ParkEntrance:
    x: int = LOCATION_NULL
    y: int = LOCATION_NULL
    z: int = 0
    direction: int = 0


@dataclass
class MarketingCampaign:
    type: int = 0
    weeks_left: int = 0
    ride_id: Optional[int] = None
    shop_item_type: Optional[int] = None


@dataclass
class ResearchItem:
    raw_value: int = RESEARCH_ITEM_NULL
    category: int = 0


@dataclass
class ResearchState:
    """
    Research progress.  The `invented_*` sets hold the indexes of ride
    types, ride entries and scenery items which have been researched.
    """
    priorities: int = 0
    progress_stage: int = 0
    progress: int = 0
    funding_level: int = 0
    expected_day: int = 0
    expected_month: int = 0
    last_item: Optional[ResearchItem] = None
    next_item: Optional[ResearchItem] = None
    invented_items: List[ResearchItem] = field(default_factory=list)
    uninvented_items: List[ResearchItem] = field(default_factory=list)
    invented_ride_types: Set[int] = field(default_factory=set)
    invented_ride_entries: Set[int] = field(default_factory=set)
    invented_scenery_items: Set[int] = field(default_factory=set)
    # Track configurations each ride type supports, as 64-bit masks
    ride_type_track_configurations: List[int] = field(default_factory=lambda: [0]*NUM_TRACK_CONFIGURATIONS)

    def ride_type_is_invented(self, ride_type):
        return ride_type in self.invented_ride_types

    def ride_entry_is_invented(self, ride_entry_index):
        return ride_entry_index in self.invented_ride_entries

    def scenery_is_invented(self, scenery_index):
        return scenery_index in self.invented_scenery_items


@dataclass
class Award:
    time: int = 0
    type: int = 0


@dataclass
class Banner:
    type: int = BANNER_NULL
    flags: int = 0
    string_idx: int = 0
    colour: int = 0
    text_colour: int = 0
    x: int = 0
    y: int = 0


@dataclass
class NewsItem:
    type: int = 0
    flags: int = 0
    assoc: int = 0
    ticks: int = 0
    month_year: int = 0
    day: int = 0
    text: str = ''


@dataclass
class MapAnimation:
    base_z: int = 0
    type: int = 0
    x: int = 0
    y: int = 0


@dataclass
class WeatherState:
    weather: int = 0
    temperature: int = 0
    weather_effect: int = 0
    weather_gloom: int = 0
    rain_level: int = 0


@dataclass
class ClimateState:
    climate: int = 0
    update_timer: int = 0
    current: WeatherState = field(default_factory=WeatherState)
    next: WeatherState = field(default_factory=WeatherState)


@dataclass
class DateState:
    months_elapsed: int = 0
    month_ticks: int = 0
    scenario_ticks: int = 0
    current_ticks: int = 0


@dataclass
class Finances:
    """All park money values are signed 32-bit"""
    cash: int = 0
    initial_cash: int = 0
    bank_loan: int = 0
    max_bank_loan: int = 0
    bank_loan_interest_rate: int = 0
    current_expenditure: int = 0
    current_profit: int = 0
    weekly_profit_average_dividend: int = 0
    weekly_profit_average_divisor: int = 0
    historical_profit: int = 0
    park_value: int = 0
    company_value: int = 0
    company_value_record: int = MONEY32_UNDEFINED
    completed_company_value: int = MONEY32_UNDEFINED
    total_admissions: int = 0
    total_income_from_admissions: int = 0
    land_price: int = 0
    construction_rights_price: int = 0
    cash_history: List[int] = field(default_factory=lambda: [MONEY32_UNDEFINED]*FINANCE_HISTORY_SIZE)
    weekly_profit_history: List[int] = field(default_factory=lambda: [MONEY32_UNDEFINED]*FINANCE_HISTORY_SIZE)
    park_value_history: List[int] = field(default_factory=lambda: [MONEY32_UNDEFINED]*FINANCE_HISTORY_SIZE)
    # Flattened [month][expenditure type]
    expenditure_table: List[int] = field(default_factory=lambda: [0]*(NUM_EXPENDITURE_MONTHS*NUM_EXPENDITURE_TYPES))


def map_size_fields(map_size):
    """
    The derived map size values for a map of `map_size` tiles square, as a
    `(units, minus_2, max_xy)` tuple
    """
    return (map_size*32 - 32, map_size*32 - 2, map_size*32 - 33)


def blank_tile_elements():
    """
    A tile element table with one flat grass surface element on every tile
    """
    surface = bytes([
        TileElementType.SURFACE.value,
        TILE_ELEMENT_FLAG_LAST_TILE,
        14, 14,
        0, 0, 1, 0,
        ])
    num_tiles = MAXIMUM_MAP_SIZE*MAXIMUM_MAP_SIZE
    elements = bytearray(surface * num_tiles)
    elements.extend(bytes((MAX_TILE_ELEMENTS-num_tiles)*TILE_ELEMENT_SIZE))
    return elements


@dataclass
class ParkState:
    """
    Everything which goes into an exported park.  A default-constructed
    `ParkState` is a valid blank park.
    """
    objects: ObjectCatalog = field(default_factory=ObjectCatalog)
    scenario_info: ScenarioInfo = field(default_factory=ScenarioInfo)
    date: DateState = field(default_factory=DateState)
    scenario_srand_0: int = 0
    scenario_srand_1: int = 0

    # Map
    tile_elements: bytearray = field(default_factory=blank_tile_elements)
    next_free_tile_element_pointer_index: int = MAXIMUM_MAP_SIZE*MAXIMUM_MAP_SIZE
    map_size: int = 150
    map_base_z: int = 0
    grass_and_scenery_tilepos: int = 0
    wide_path_tile_loop_x: int = 0
    wide_path_tile_loop_y: int = 0
    map_animations: List[MapAnimation] = field(default_factory=list)

    sprites: SpriteTable = field(default_factory=SpriteTable.blank)

    # Park
    park_name: int = 0
    park_name_args: int = 0
    park_flags: int = 0
    park_entrance_fee: int = 0
    park_rating: int = 0
    park_rating_history: List[int] = field(default_factory=lambda: [255]*PARK_HISTORY_SIZE)
    guests_in_park_history: List[int] = field(default_factory=lambda: [255]*PARK_HISTORY_SIZE)
    park_size: int = 0
    park_rating_casualty_penalty: int = 0
    peep_spawns: List[PeepSpawn] = field(default_factory=list)
    park_entrances: List[ParkEntrance] = field(default_factory=list)
    last_entrance_style: int = 0
    same_price_throughout: int = 0
    awards: List[Award] = field(default_factory=list)
    marketing_campaigns: List[MarketingCampaign] = field(default_factory=list)
    banners: List[Banner] = field(default_factory=list)
    user_strings: List[str] = field(default_factory=list)
    news_items: List[NewsItem] = field(default_factory=list)

    # Guests and staff
    guests_in_park: int = 0
    guests_heading_for_park: int = 0
    guests_in_park_last_week: int = 0
    guest_change_modifier: int = 0
    guest_generation_probability: int = 0
    suggested_guest_maximum: int = 0
    guest_initial_happiness: int = 0
    guest_initial_cash: int = 0
    guest_initial_hunger: int = 0
    guest_initial_thirst: int = 0
    next_guest_number: int = 1
    peep_warning_throttle: List[int] = field(default_factory=lambda: [0]*PEEP_WARNING_THROTTLE_SIZE)
    staff_handyman_colour: int = 0
    staff_mechanic_colour: int = 0
    staff_security_colour: int = 0
    staff_patrol_areas: List[int] = field(default_factory=lambda: [0]*(MAX_STAFF*STAFF_PATROL_AREA_SIZE))
    staff_modes: List[int] = field(default_factory=lambda: [0]*MAX_STAFF)

    # Rides
    rides: List[Ride] = field(default_factory=list)
    ride_count: int = 0
    total_ride_value_for_money: int = 0
    ride_ratings_calc_data: RideRatingsCalcData = field(default_factory=RideRatingsCalcData)

    research: ResearchState = field(default_factory=ResearchState)
    finances: Finances = field(default_factory=Finances)
    climate: ClimateState = field(default_factory=ClimateState)

    # Scenario
    scenario_name: str = ''
    scenario_details: str = ''
    scenario_filename: str = ''
    scenario_completed_by: str = ''
    scenario_objective_type: int = 0
    scenario_objective_year: int = 0
    scenario_objective_currency: int = 0
    scenario_objective_num_guests: int = 0
    scenario_park_rating_warning_days: int = 0
    scenario_expansion_packs: bytes = bytes(EXPANSION_PACK_NAMES_SIZE)

    # Saved view
    saved_age: int = 0
    saved_view_x: int = 0
    saved_view_y: int = 0
    saved_view_zoom: int = 0
    saved_view_rotation: int = 0

    unk_13ca740: int = 0

    def get_ride(self, ride_id):
        """
        Returns the ride in slot `ride_id`, or `None` if the slot is empty
        """
        for ride in self.rides:
            if ride.id == ride_id and ride.type != RIDE_TYPE_NULL:
                return ride
        return None

    def rides_by_id(self):
        """
        Returns a dict of occupied ride slots
        """
        return {ride.id: ride for ride in self.rides if ride.type != RIDE_TYPE_NULL}


###
### Park description files
###

# Fields which are built up by the loader itself rather than being
# read in directly
LOADER_SPECIAL_FIELDS = {'sprites', 'tile_elements'}


def _convert(hint, value):
    """
    Converts a value read from JSON into the type described by `hint`
    """
    if value is None:
        return None
    if dataclasses.is_dataclass(hint):
        return _build(hint, value)
    origin = typing.get_origin(hint)
    args = typing.get_args(hint)
    if origin is typing.Union:
        inner = [arg for arg in args if arg is not type(None)][0]
        return _convert(inner, value)
    elif origin is list:
        return [_convert(args[0], item) for item in value]
    elif origin is tuple:
        return tuple(value)
    elif origin is set:
        return set(value)
    elif origin is dict:
        key_type, value_type = args
        return {key_type(key): _convert(value_type, item) for key, item in value.items()}
    elif hint in (bytes, bytearray):
        return hint(bytes.fromhex(value))
    return value


def _build(cls, data, skip=frozenset()):
    """
    Builds a dataclass of type `cls` from a JSON dict.  Keys which aren't
    present keep their defaults; unknown keys raise `ValueError`.
    """
    hints = typing.get_type_hints(cls)
    known = {f.name for f in dataclasses.fields(cls)}
    kwargs = {}
    for key, value in data.items():
        if key in skip:
            continue
        if key not in known:
            raise ValueError(f'Unknown {cls.__name__} field: {key}')
        kwargs[key] = _convert(hints[key], value)
    return cls(**kwargs)


def state_from_dict(data):
    """
    Builds a `ParkState` from a park description dict.  Sprites are given
    as a list of dicts with a `kind` key (see `SPRITE_KINDS`), and get
    allocated into a blank sprite table in order.  Track pieces can be
    given as a `track` list of `{x, y, ride, base_height}` dicts, which
    get stacked on top of the blank map's surface elements.
    """
    state = _build(ParkState, data, skip=LOADER_SPECIAL_FIELDS | {'track'})
    for sprite_data in data.get('sprites', []):
        sprite_data = dict(sprite_data)
        kind = sprite_data.pop('kind', None)
        if kind not in SPRITE_KINDS:
            raise ValueError(f'Unknown sprite kind: {kind}')
        sprite_class, sprite_list = SPRITE_KINDS[kind]
        state.sprites.allocate(_build(sprite_class, sprite_data), sprite_list)
    if 'tile_elements' in data:
        log_warning('Raw tile element data is not supported in park descriptions; ignoring')
    for piece in data.get('track', []):
        add_track_element(state, piece['x'], piece['y'], piece['ride'], piece.get('base_height', 14))
    return state


def load_state(filename):
    """
    Loads a park description JSON file
    """
    with open(filename) as df:
        return state_from_dict(json.load(df))


def _tile_end(elements, used, tile):
    """
    Byte offset just past the last element of `tile`, found by counting
    last-for-tile flags from the start of the element table
    """
    seen = 0
    for offset in range(0, used, TILE_ELEMENT_SIZE):
        if elements[offset+1] & TILE_ELEMENT_FLAG_LAST_TILE:
            if seen == tile:
                return offset + TILE_ELEMENT_SIZE
            seen += 1
    raise RuntimeError(f'Tile {tile} not found in tile element table')


def add_track_element(state, x, y, ride_index, base_height=14, ghost=False):
    """
    Adds a track element for `ride_index` on top of tile (`x`, `y`), after
    whatever is already there.  All later elements get shifted along by
    one, and `next_free_tile_element_pointer_index` is bumped.
    """
    elements = state.tile_elements
    used = state.next_free_tile_element_pointer_index*TILE_ELEMENT_SIZE
    if used + TILE_ELEMENT_SIZE > len(elements):
        raise RuntimeError('No free tile elements left')
    insert_at = _tile_end(elements, used, y*MAXIMUM_MAP_SIZE + x)

    # The previous top element is no longer the last one on the tile
    elements[insert_at-TILE_ELEMENT_SIZE+1] &= ~TILE_ELEMENT_FLAG_LAST_TILE & 0xFF
    flags = TILE_ELEMENT_FLAG_LAST_TILE
    if ghost:
        flags |= TILE_ELEMENT_FLAG_GHOST
    element = bytes([TileElementType.TRACK.value, flags, base_height, base_height+2, 0, 0, 0, ride_index])
    elements[insert_at:used+TILE_ELEMENT_SIZE] = element + elements[insert_at:used]
    state.next_free_tile_element_pointer_index += 1
