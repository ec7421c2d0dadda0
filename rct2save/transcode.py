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

from . import log_warning
from .state import SpriteIdentifier, MiscSpriteType, CampaignType, \
        RIDE_TYPE_NULL, RIDE_TYPE_MINI_GOLF, MAX_RIDES, MAX_PEEP_SPAWNS, \
        MAX_PARK_ENTRANCES, MAX_BANNERS, MAX_USER_STRINGS, MAX_NEWS_ITEMS, \
        MAX_AWARDS, MAX_MAP_ANIMATIONS, OBJECT_ENTRY_COUNT, NUM_SPRITE_LISTS, \
        BANNER_NULL, MAX_STATIONS, ParkEntrance, RideStation
from .s6 import VehicleRecord, PeepRecord, LitterRecord, SteamParticleRecord, \
        MoneyEffectRecord, CrashedVehicleParticleRecord, ParticleRecord, \
        JumpingFountainRecord, BalloonRecord, DuckRecord, MISC_SPRITE_RECORDS, \
        ResearchItemMarker, MAX_INVERSIONS, MAX_GOLF_HOLES, MAX_RIDE_MEASUREMENTS, \
        MAX_RESEARCH_ITEMS, MAX_CAMPAIGNS, MAX_CAMPAIGN_REFERENCES, \
        CAMPAIGN_ACTIVE_FLAG, PEEP_SPAWN_UNDEFINED

# Field transcoders: these copy live objects from `state` into the fixed
# record layouts from `s6`.  Most fields are a straight 1:1 copy, and are
# just listed by name below; anything which needs packing, saturation, or
# sentinel handling gets done by hand.

COMMON_SPRITE_FIELDS = (
        'sprite_identifier', 'type', 'next_in_quadrant', 'next', 'previous',
        'linked_list_type_offset', 'sprite_height_negative', 'sprite_index',
        'flags', 'x', 'y', 'z', 'sprite_width', 'sprite_height_positive',
        'sprite_left', 'sprite_top', 'sprite_right', 'sprite_bottom',
        'sprite_direction',
        )

VEHICLE_FIELDS = (
        'vehicle_sprite_type', 'bank_rotation', 'remaining_distance', 'velocity',
        'acceleration', 'ride', 'vehicle_type', 'track_progress',
        'track_type_and_direction', 'track_x', 'track_y', 'track_z',
        'next_vehicle_on_train', 'prev_vehicle_on_ride', 'next_vehicle_on_ride',
        'var_44', 'mass', 'update_flags', 'swing_sprite', 'current_station',
        'current_time', 'crash_z', 'status', 'sub_state', 'num_seats', 'num_peeps',
        'next_free_seat', 'restraints_position', 'crash_x', 'sound2_flags',
        'spin_sprite', 'sound1_id', 'sound1_volume', 'sound2_id', 'sound2_volume',
        'sound_vector_factor', 'time_waiting', 'speed', 'powered_acceleration',
        'dodgems_collision_direction', 'animation_frame', 'var_C8', 'var_CA',
        'scream_sound_id', 'var_CD', 'var_CE', 'var_CF', 'lost_time_out',
        'vertical_drop_countdown', 'var_D3', 'mini_golf_current_animation',
        'mini_golf_flags', 'ride_subtype', 'colours_extended', 'seat_rotation',
        'target_seat_rotation',
        )

PEEP_FIELDS = (
        'name_string_idx', 'next_x', 'next_y', 'next_z', 'next_flags',
        'outside_of_park', 'state', 'sub_state', 'sprite_type', 'peep_type',
        'no_of_rides', 'tshirt_colour', 'trousers_colour', 'destination_x',
        'destination_y', 'destination_tolerance', 'var_37', 'energy',
        'energy_target', 'happiness', 'happiness_target', 'nausea',
        'nausea_target', 'hunger', 'thirst', 'toilet', 'mass', 'time_to_consume',
        'intensity', 'nausea_tolerance', 'window_invalidate_flags',
        'paid_on_drink', 'item_extra_flags', 'photo2_ride_ref', 'photo3_ride_ref',
        'photo4_ride_ref', 'current_ride', 'current_ride_station', 'current_train',
        'time_to_sitdown', 'special_sprite', 'action_sprite_type',
        'next_action_sprite_type', 'action_sprite_image_offset', 'action',
        'action_frame', 'step_progress', 'next_in_queue', 'direction',
        'interaction_ride_index', 'time_in_queue', 'id', 'cash_in_pocket',
        'cash_spent', 'time_in_park', 'rejoin_queue_timeout', 'previous_ride',
        'previous_ride_time_out', 'path_check_optimisation',
        'guest_heading_to_ride_id', 'peep_is_lost_countdown', 'photo1_ride_ref',
        'peep_flags', 'no_action_frame_num', 'litter_count', 'time_on_ride',
        'disgusting_count', 'paid_to_enter', 'paid_on_rides', 'paid_on_food',
        'paid_on_souvenirs', 'no_of_food', 'no_of_drinks', 'no_of_souvenirs',
        'vandalism_seen', 'voucher_type', 'voucher_arguments',
        'surroundings_thought_timeout', 'angriness', 'time_lost', 'days_in_queue',
        'balloon_colour', 'umbrella_colour', 'hat_colour', 'favourite_ride',
        'favourite_ride_rating', 'item_standard_flags',
        )

# Per-record-class field lists for misc sprites.  Lists are written as
# whole arrays.
MISC_SPRITE_FIELDS = {
        SteamParticleRecord: ('time_to_move', 'frame'),
        MoneyEffectRecord: ('move_delay', 'num_movements', 'vertical', 'value', 'offset_x', 'wiggle'),
        CrashedVehicleParticleRecord: (
            'time_to_live', 'frame', 'colour', 'crashed_sprite_base',
            'velocity_x', 'velocity_y', 'velocity_z',
            'acceleration_x', 'acceleration_y', 'acceleration_z',
            ),
        ParticleRecord: ('frame',),
        JumpingFountainRecord: ('num_ticks_alive', 'frame', 'fountain_flags', 'target_x', 'target_y', 'iteration'),
        BalloonRecord: ('popped', 'time_to_move', 'frame', 'colour'),
        DuckRecord: ('frame', 'target_x', 'target_y', 'state'),
        }

RIDE_FIELDS = (
        'type', 'subtype', 'mode', 'colour_scheme_type', 'status', 'name',
        'name_arguments', 'depart_flags', 'num_stations', 'num_vehicles',
        'num_cars_per_train', 'proposed_num_vehicles', 'proposed_num_cars_per_train',
        'max_trains', 'min_max_cars_per_train', 'min_waiting_time',
        'max_waiting_time', 'operation_option', 'boat_hire_return_direction',
        'special_track_elements', 'max_speed', 'average_speed',
        'current_test_segment', 'average_speed_test_timeout',
        'max_positive_vertical_g', 'max_negative_vertical_g', 'max_lateral_g',
        'previous_vertical_g', 'previous_lateral_g', 'testing_flags',
        'turn_count_default', 'turn_count_banked', 'turn_count_sloped', 'drops',
        'start_drop_height', 'highest_drop_height', 'sheltered_length', 'var_11C',
        'num_sheltered_sections', 'cur_test_track_z', 'cur_num_customers',
        'num_customers_timeout', 'num_customers', 'price', 'chairlift_bullwheel_z',
        'value', 'chairlift_bullwheel_rotation', 'satisfaction',
        'satisfaction_time_out', 'satisfaction_next', 'window_invalidate_flags',
        'total_customers', 'total_profit', 'popularity', 'popularity_time_out',
        'popularity_next', 'num_riders', 'music_tune_id', 'slide_in_use',
        'slide_peep', 'slide_peep_t_shirt_colour', 'spiral_slide_progress',
        'build_date', 'upkeep_cost', 'race_winner', 'music_position',
        'breakdown_reason_pending', 'mechanic_status', 'mechanic',
        'inspection_station', 'broken_vehicle', 'broken_car', 'breakdown_reason',
        'price_secondary', 'reliability', 'unreliability_factor', 'downtime',
        'inspection_interval', 'last_inspection', 'downtime_history',
        'no_primary_items_sold', 'no_secondary_items_sold',
        'breakdown_sound_modifier', 'not_fixed_timeout', 'last_crash_type',
        'connected_message_throttle', 'income_per_hour', 'profit', 'music',
        'entrance_style', 'vehicle_change_timeout', 'num_block_brakes',
        'lift_hill_speed', 'guests_favourite', 'lifecycle_flags', 'vehicles',
        'total_air_time', 'current_test_station', 'num_circuits', 'cable_lift_x',
        'cable_lift_y', 'cable_lift_z', 'cable_lift',
        )

RIDE_MEASUREMENT_FIELDS = (
        'flags', 'last_use_tick', 'num_items', 'current_item', 'vehicle_index',
        'current_station', 'velocity', 'altitude', 'vertical', 'lateral',
        )

RIDE_RATINGS_CALC_FIELDS = (
        'proximity_x', 'proximity_y', 'proximity_z', 'proximity_start_x',
        'proximity_start_y', 'proximity_start_z', 'current_ride', 'state',
        'proximity_track_type', 'proximity_base_height', 'proximity_total',
        'proximity_scores', 'num_brakes', 'num_reversers', 'station_flags',
        )


def copy_fields(record, obj, names):
    """
    Copies the attributes `names` from `obj` into the identically-named
    fields of `record`.  List attributes are written as whole arrays.
    """
    for name in names:
        value = getattr(obj, name)
        if isinstance(value, list):
            getattr(record, name).values = value
        else:
            getattr(record, name).value = value


###
### Rides
###

def pack_inversions(ride):
    """
    Packs a ride's inversion count (or hole count, for mini golf) into the
    bottom five bits, saturating rather than wrapping, with the sheltered
    eighths in the top three bits
    """
    if ride.type == RIDE_TYPE_MINI_GOLF:
        count = min(ride.holes, MAX_GOLF_HOLES)
    else:
        count = min(ride.inversions, MAX_INVERSIONS)
    return count | (ride.sheltered_eighths << 5)


def export_ride(record, ride):
    """
    Transcodes a single live ride into `record`
    """
    record.fill(record.SIZE)
    copy_fields(record, ride, RIDE_FIELDS)

    colours = []
    for colour in ride.vehicle_colours:
        colours.append(colour.body)
        colours.append(colour.trim)
    record.vehicle_colours.values = colours
    record.vehicle_colours_extended.values = [colour.ternary for colour in ride.vehicle_colours]

    record.overall_view.set_coord(ride.overall_view)
    stations = list(ride.stations[:MAX_STATIONS])
    stations.extend([RideStation() for _ in range(MAX_STATIONS-len(stations))])
    for idx, station in enumerate(stations):
        record.station_starts[idx].set_coord(station.start)
        record.entrances[idx].set_coord(station.entrance)
        record.exits[idx].set_coord(station.exit)
    record.station_heights.values = [s.height for s in stations]
    record.station_length.values = [s.length for s in stations]
    record.station_depart.values = [s.depart for s in stations]
    record.train_at_station.values = [s.train_at_station for s in stations]
    record.last_peep_in_queue.values = [s.last_peep_in_queue for s in stations]
    record.length.values = [s.segment_length for s in stations]
    record.time.values = [s.segment_time for s in stations]
    record.queue_time.values = [s.queue_time for s in stations]
    record.queue_length.values = [s.queue_length for s in stations]

    record.boat_hire_return_position.set_coord(ride.boat_hire_return_position)
    record.cur_test_track_location.set_coord(ride.cur_test_track_location)
    for idx, location in enumerate(ride.chairlift_bullwheel_location):
        record.chairlift_bullwheel_location[idx].set_coord(location)

    record.inversions.value = pack_inversions(ride)

    record.excitement.value = ride.ratings.excitement
    record.intensity.value = ride.ratings.intensity
    record.nausea.value = ride.ratings.nausea

    record.track_colour_main.values = [c.main for c in ride.track_colours]
    record.track_colour_additional.values = [c.additional for c in ride.track_colours]
    record.track_colour_supports.values = [c.supports for c in ride.track_colours]

    # Filled in by the measurement export, if this ride keeps one
    record.measurement_index.value = 0xFF


def rides_in_range(state):
    """
    Occupied ride slots which fit in the file
    """
    return {ride_id: ride for ride_id, ride in state.rides_by_id().items()
            if 0 <= ride_id < MAX_RIDES}


def export_rides(rides_array, state):
    """
    Writes every ride slot.  Unoccupied slots are zeroed and tagged as
    empty.  Rides which can't be stored, or which share a slot with a
    later ride, are dropped with a warning.
    """
    seen = set()
    for ride in state.rides:
        if ride.type == RIDE_TYPE_NULL:
            continue
        if not 0 <= ride.id < MAX_RIDES:
            log_warning(f'Ride {ride.id} is out of range, only {MAX_RIDES} ride slots can be saved')
        elif ride.id in seen:
            log_warning(f'Ride {ride.id} is defined more than once; only the last one will be saved')
        seen.add(ride.id)

    rides = rides_in_range(state)
    for idx in range(MAX_RIDES):
        record = rides_array[idx]
        if idx in rides:
            export_ride(record, rides[idx])
        else:
            record.fill(record.SIZE)
            record.type.value = RIDE_TYPE_NULL


def select_ride_measurements(measurements, capacity=MAX_RIDE_MEASUREMENTS):
    """
    Picks which measurement buffers to keep when there are more of them than
    the file has room for.  Buffers used most recently win.  Returns the
    indexes (into `measurements`) of the buffers to keep.
    """
    indexes = list(range(len(measurements)))
    if len(indexes) > capacity:
        indexes.sort(key=lambda idx: measurements[idx].last_use_tick, reverse=True)
        indexes = indexes[:capacity]
    return indexes


def export_ride_measurement(record, measurement):
    copy_fields(record, measurement, RIDE_MEASUREMENT_FIELDS)


def export_ride_measurements(image, state):
    """
    Writes the ride measurement slots, linking each one to its ride (and
    back again).  Must be called after the rides themselves have been
    written.
    """
    owned = [(ride.id, ride.measurement) for ride in rides_in_range(state).values()
            if ride.measurement is not None]
    keep = select_ride_measurements([measurement for _, measurement in owned])

    image.ride_measurements.clear()
    for slot in range(MAX_RIDE_MEASUREMENTS):
        record = image.ride_measurements[slot]
        if slot < len(keep):
            ride_id, measurement = owned[keep[slot]]
            export_ride_measurement(record, measurement)
            record.ride_index.value = ride_id
            image.rides[ride_id].measurement_index.value = slot
        else:
            record.ride_index.value = 0xFF


def export_ride_ratings_calc_data(record, calc_data):
    copy_fields(record, calc_data, RIDE_RATINGS_CALC_FIELDS)


###
### Sprites
###

def export_sprite_common(record, sprite):
    copy_fields(record, sprite, COMMON_SPRITE_FIELDS)


def export_sprite_vehicle(record, vehicle):
    copy_fields(record, vehicle, VEHICLE_FIELDS)
    record.colour_body.value = vehicle.colours.body
    record.colour_trim.value = vehicle.colours.trim
    record.peep.values = vehicle.peep
    record.peep_tshirt_colours.values = vehicle.peep_tshirt_colours


def export_sprite_peep(record, peep):
    copy_fields(record, peep, PEEP_FIELDS)
    record.ride_types_been_on.values = peep.ride_types_been_on
    record.rides_been_on.values = peep.rides_been_on
    for thought_record, thought in zip(record.thoughts, peep.thoughts):
        copy_fields(thought_record, thought, ('type', 'item', 'freshness', 'fresh_timeout'))
    copy_fields(record.pathfind_goal, peep.pathfind_goal, ('x', 'y', 'z', 'direction'))
    for history_record, history in zip(record.pathfind_history, peep.pathfind_history):
        copy_fields(history_record, history, ('x', 'y', 'z', 'direction'))


def export_sprite_litter(record, litter):
    record.creation_tick.value = litter.creation_tick


def export_sprite_misc(sprites_array, index, sprite):
    """
    Misc sprites come in a number of flavours, each with its own layout.
    Unknown flavours only get their common header written.
    """
    try:
        misc_type = MiscSpriteType(sprite.type)
    except ValueError:
        log_warning(f'Misc. sprite type {sprite.type} can not be exported.')
        return
    record_class = MISC_SPRITE_RECORDS[misc_type]
    record = sprites_array.record(index, record_class)
    copy_fields(record, sprite, MISC_SPRITE_FIELDS[record_class])


def export_sprite(sprites_array, index, sprite):
    """
    Writes a single sprite slot.  The whole slot is zeroed first, the
    common header is written for every kind of sprite, and the rest is
    dispatched on the sprite identifier.
    """
    sprites_array.clear_record(index)
    export_sprite_common(sprites_array.record(index), sprite)
    match sprite.sprite_identifier:
        case SpriteIdentifier.VEHICLE.value:
            export_sprite_vehicle(sprites_array.record(index, VehicleRecord), sprite)
        case SpriteIdentifier.PEEP.value:
            export_sprite_peep(sprites_array.record(index, PeepRecord), sprite)
        case SpriteIdentifier.MISC.value:
            export_sprite_misc(sprites_array, index, sprite)
        case SpriteIdentifier.LITTER.value:
            export_sprite_litter(sprites_array.record(index, LitterRecord), sprite)
        case SpriteIdentifier.NULL.value:
            pass
        case _:
            log_warning(f'Sprite identifier {sprite.sprite_identifier} can not be exported.')


def export_sprites(image, sprite_table):
    """
    Writes the whole sprite table, along with the list heads and counts
    """
    for idx, sprite in enumerate(sprite_table.sprites):
        export_sprite(image.sprites, idx, sprite)
    image.sprite_lists_head.values = sprite_table.list_heads[:NUM_SPRITE_LISTS]
    image.sprite_lists_count.values = sprite_table.list_counts[:NUM_SPRITE_LISTS]


###
### Bitmasks and index tables
###

def build_researched_bitmask(bitmask, count, predicate):
    """
    Sets bit `n` of `bitmask` for every index `n` below `count` for which
    `predicate(n)` is true.  Everything else is cleared.
    """
    bitmask.clear()
    for idx in range(count):
        if predicate(idx):
            bitmask.set_bit(idx)


def split_track_configurations(configurations):
    """
    Splits the 64-bit per-ride-type track configuration masks into the two
    tables of 32-bit words they're stored as
    """
    low = [config & 0xFFFFFFFF for config in configurations]
    high = [(config >> 32) & 0xFFFFFFFF for config in configurations]
    return low, high


def export_marketing_campaigns(image, campaigns):
    """
    Only active campaigns get written.  Campaigns which target a ride or a
    shop item also have that written into the parallel reference table.
    """
    weeks_left = [0]*MAX_CAMPAIGNS
    references = [0]*MAX_CAMPAIGN_REFERENCES
    for campaign in campaigns:
        weeks_left[campaign.type] = campaign.weeks_left | CAMPAIGN_ACTIVE_FLAG
        match campaign.type:
            case CampaignType.RIDE_FREE.value | CampaignType.RIDE.value:
                if campaign.ride_id is not None:
                    references[campaign.type] = campaign.ride_id
            case CampaignType.FOOD_OR_DRINK_FREE.value:
                if campaign.shop_item_type is not None:
                    references[campaign.type] = campaign.shop_item_type
    image.campaign_weeks_left.values = weeks_left
    image.campaign_ride_index.values = references


def export_peep_spawns(spawns_array, spawns):
    for idx in range(MAX_PEEP_SPAWNS):
        record = spawns_array[idx]
        if idx < len(spawns):
            spawn = spawns[idx]
            record.x.value = spawn.x
            record.y.value = spawn.y
            record.z.value = spawn.z // 16
            record.direction.value = spawn.direction
        else:
            record.x.value = PEEP_SPAWN_UNDEFINED
            record.y.value = PEEP_SPAWN_UNDEFINED
            record.z.value = 0
            record.direction.value = 0


def export_park_entrances(entrances_data, entrances):
    entrances = list(entrances[:MAX_PARK_ENTRANCES])
    entrances.extend([ParkEntrance() for _ in range(MAX_PARK_ENTRANCES-len(entrances))])
    entrances_data.x.values = [e.x for e in entrances]
    entrances_data.y.values = [e.y for e in entrances]
    entrances_data.z.values = [e.z for e in entrances]
    entrances_data.direction.values = [e.direction for e in entrances]


def export_research_list(items_array, research):
    """
    Writes the research list: invented items, a separator, uninvented
    items, and then the two end markers.  If there are too many items to
    fit, the list is truncated.
    """
    invented = list(research.invented_items)
    uninvented = list(research.uninvented_items)
    room = MAX_RESEARCH_ITEMS - 3
    if len(invented) + len(uninvented) > room:
        log_warning(f'Research list has {len(invented)+len(uninvented)} items, only {room} can be saved')
        invented = invented[:room]
        uninvented = uninvented[:room-len(invented)]

    items_array.clear()
    idx = 0
    for item in invented:
        items_array[idx].raw_value.value = item.raw_value
        items_array[idx].category.value = item.category
        idx += 1
    items_array[idx].raw_value.value = ResearchItemMarker.SEPARATOR.value
    idx += 1
    for item in uninvented:
        items_array[idx].raw_value.value = item.raw_value
        items_array[idx].category.value = item.category
        idx += 1
    items_array[idx].raw_value.value = ResearchItemMarker.END.value
    items_array[idx+1].raw_value.value = ResearchItemMarker.END_2.value


def export_object_catalog(objects_array, catalog):
    """
    Writes the loaded-object table.  Empty slots are all-ones.
    """
    for idx in range(OBJECT_ENTRY_COUNT):
        entry = catalog.get_loaded_entry(idx)
        if entry is None:
            objects_array[idx].set_absent()
        else:
            objects_array[idx].set_entry(entry)


def export_banners(banners_array, banners):
    for idx in range(MAX_BANNERS):
        record = banners_array[idx]
        if idx < len(banners):
            copy_fields(record, banners[idx], ('type', 'flags', 'string_idx', 'colour', 'text_colour', 'x', 'y'))
        else:
            record.type.value = BANNER_NULL


def export_user_strings(strings_array, user_strings):
    for idx, text in enumerate(user_strings[:MAX_USER_STRINGS]):
        strings_array[idx].value = text


def export_news_items(news_array, news_items):
    for idx, item in enumerate(news_items[:MAX_NEWS_ITEMS]):
        copy_fields(news_array[idx], item, ('type', 'flags', 'assoc', 'ticks', 'month_year', 'day', 'text'))


def export_awards(awards_array, awards):
    for idx, award in enumerate(awards[:MAX_AWARDS]):
        copy_fields(awards_array[idx], award, ('time', 'type'))


def export_map_animations(image, animations):
    if len(animations) > MAX_MAP_ANIMATIONS:
        log_warning(f'{len(animations)} map animations found, only {MAX_MAP_ANIMATIONS} can be saved')
        animations = animations[:MAX_MAP_ANIMATIONS]
    for idx, animation in enumerate(animations):
        copy_fields(image.map_animations[idx], animation, ('base_z', 'type', 'x', 'y'))
    image.num_map_animations.value = len(animations)
