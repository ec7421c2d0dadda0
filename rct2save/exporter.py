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

from . import log_error
from .state import map_size_fields, RIDE_TYPE_COUNT, MAX_RIDE_OBJECTS, \
        MAX_RESEARCHED_SCENERY_ITEMS, RESEARCH_ITEM_NULL
from .s6 import S6Image, S6Type, S6_RCT2_VERSION, S6_MAGIC_NUMBER, S6_GAME_VERSION_NUMBER
from .money import encrypt_money, get_loan_hash
from .rct2text import utf8_to_rct2, fit_rct2
from .sawyercoding import SawyerChunkWriter
from .repairs import check_for_sprite_list_cycles, check_for_spatial_index_cycles, \
        fix_disjoint_sprites, sprite_clear_all_unused, scenario_fix_ghosts, \
        scenario_remove_trackless_rides, convert_strings_to_rct2
from . import transcode


class S6Exporter():
    """
    Builds an S6 image out of a `ParkState`, and writes it out.  Call
    `export()` to populate `image`, and then `save()` to write it.

    `export_objects_list`, if given, is the list of `PackedObject`s which
    get embedded in the file.  If `remove_trackless_rides` is set, any
    ride without track on the map is dropped from the image.
    """

    def __init__(self, state, export_objects_list=None, remove_trackless_rides=False):
        self.state = state
        if export_objects_list is None:
            self.export_objects_list = []
        else:
            self.export_objects_list = list(export_objects_list)
        self.remove_trackless_rides = remove_trackless_rides
        self.image = None
        self.writer = None

    def check_sprites(self):
        """
        Pre-export sprite table checks.  A cycle in any of the sprite lists
        would send a loading game into an infinite loop, so those are fatal.
        Free sprites which have fallen off the free list get put back on.
        """
        bucket = check_for_spatial_index_cycles(self.state, fix=False)
        if bucket is not None:
            raise RuntimeError(f'Sprite spatial index bucket {bucket} contains a cycle')
        list_idx = check_for_sprite_list_cycles(self.state, fix=False)
        if list_idx is not None:
            raise RuntimeError(f'Sprite list {list_idx} contains a cycle')
        disjoint = fix_disjoint_sprites(self.state)
        if disjoint > 0:
            log_error(f'Found {disjoint} disjoint null sprites')

    def export(self):
        """
        Populates a fresh image from our park state.  Returns the image.
        """
        state = self.state
        finances = state.finances
        research = state.research
        climate = state.climate

        self.check_sprites()
        self.image = S6Image()
        image = self.image

        # Scenario info
        info = state.scenario_info
        image.info.editor_step.value = info.editor_step
        image.info.category.value = info.category
        image.info.objective_type.value = info.objective_type
        image.info.objective_arg_1.value = info.objective_arg_1
        image.info.objective_arg_2.value = info.objective_arg_2
        image.info.objective_arg_3.value = info.objective_arg_3
        image.info.name.set_raw(fit_rct2(utf8_to_rct2(info.name), len(image.info.name)))
        image.info.details.set_raw(fit_rct2(utf8_to_rct2(info.details), len(image.info.details)))
        image.info.entry.set_entry(info.entry)

        transcode.export_object_catalog(image.objects, state.objects)

        image.misc.elapsed_months.value = state.date.months_elapsed
        image.misc.current_day.value = state.date.month_ticks
        image.misc.scenario_ticks.value = state.date.scenario_ticks
        image.misc.scenario_srand_0.value = state.scenario_srand_0
        image.misc.scenario_srand_1.value = state.scenario_srand_1

        # Map and sprites
        image.tile_elements.value = bytes(state.tile_elements)
        image.next_free_tile_element_pointer_index.value = state.next_free_tile_element_pointer_index
        sprite_clear_all_unused(state)
        transcode.export_sprites(image, state.sprites)

        # Park
        image.park_name.value = state.park_name
        image.park_name_args.value = state.park_name_args
        image.initial_cash.value = finances.initial_cash
        image.current_loan.value = finances.bank_loan
        image.park_flags.value = state.park_flags
        image.park_entrance_fee.value = state.park_entrance_fee
        transcode.export_peep_spawns(image.peep_spawns, state.peep_spawns)
        image.guest_count_change_modifier.value = state.guest_change_modifier
        image.current_research_level.value = research.funding_level

        # Research bitmasks
        transcode.build_researched_bitmask(image.researched_ride_types,
                RIDE_TYPE_COUNT, research.ride_type_is_invented)
        transcode.build_researched_bitmask(image.researched_ride_entries,
                MAX_RIDE_OBJECTS, research.ride_entry_is_invented)
        track_low, track_high = transcode.split_track_configurations(research.ride_type_track_configurations)
        image.researched_track_types_a.values = track_low
        image.researched_track_types_b.values = track_high

        image.guests_in_park.value = state.guests_in_park
        image.guests_heading_for_park.value = state.guests_heading_for_park
        image.expenditure_table.values = finances.expenditure_table
        image.last_guests_in_park.value = state.guests_in_park_last_week
        image.handyman_colour.value = state.staff_handyman_colour
        image.mechanic_colour.value = state.staff_mechanic_colour
        image.security_colour.value = state.staff_security_colour
        transcode.build_researched_bitmask(image.researched_scenery_items,
                MAX_RESEARCHED_SCENERY_ITEMS, research.scenery_is_invented)

        image.park_rating.value = state.park_rating
        image.park_rating_history.values = state.park_rating_history
        image.guests_in_park_history.values = state.guests_in_park_history

        # Research state
        image.active_research_types.value = research.priorities
        image.research_progress_stage.value = research.progress_stage
        if research.last_item is None:
            image.last_researched_item_subject.value = RESEARCH_ITEM_NULL
        else:
            image.last_researched_item_subject.value = research.last_item.raw_value
        if research.next_item is None:
            image.next_research_item.value = RESEARCH_ITEM_NULL
        else:
            image.next_research_item.value = research.next_item.raw_value
            image.next_research_category.value = research.next_item.category
        image.research_progress.value = research.progress
        image.next_research_expected_day.value = research.expected_day
        image.next_research_expected_month.value = research.expected_month

        # Guest generation and objectives
        image.guest_initial_happiness.value = state.guest_initial_happiness
        image.park_size.value = state.park_size
        image.guest_generation_probability.value = state.guest_generation_probability
        image.total_ride_value_for_money.value = state.total_ride_value_for_money
        image.maximum_loan.value = finances.max_bank_loan
        image.guest_initial_cash.value = state.guest_initial_cash
        image.guest_initial_hunger.value = state.guest_initial_hunger
        image.guest_initial_thirst.value = state.guest_initial_thirst
        image.objective_type.value = state.scenario_objective_type
        image.objective_year.value = state.scenario_objective_year
        image.objective_currency.value = state.scenario_objective_currency
        image.objective_guests.value = state.scenario_objective_num_guests
        transcode.export_marketing_campaigns(image, state.marketing_campaigns)

        # Finances
        image.balance_history.values = finances.cash_history
        image.current_expenditure.value = finances.current_expenditure
        image.current_profit.value = finances.current_profit
        image.weekly_profit_average_dividend.value = finances.weekly_profit_average_dividend
        image.weekly_profit_average_divisor.value = finances.weekly_profit_average_divisor
        image.weekly_profit_history.values = finances.weekly_profit_history
        image.park_value.value = finances.park_value
        image.park_value_history.values = finances.park_value_history

        image.completed_company_value.value = finances.completed_company_value
        image.total_admissions.value = finances.total_admissions
        image.income_from_admissions.value = finances.total_income_from_admissions
        image.company_value.value = finances.company_value
        image.peep_warning_throttle.values = state.peep_warning_throttle
        transcode.export_awards(image.awards, state.awards)
        image.land_price.value = finances.land_price
        image.construction_rights_price.value = finances.construction_rights_price
        image.completed_company_value_record.value = finances.company_value_record
        image.loan_hash.value = get_loan_hash(finances.initial_cash, finances.bank_loan, finances.max_bank_loan)
        image.ride_count.value = state.ride_count
        image.historical_profit.value = finances.historical_profit
        image.scenario_completed_name.value = state.scenario_completed_by
        image.cash.value = encrypt_money(finances.cash)
        image.park_rating_casualty_penalty.value = state.park_rating_casualty_penalty

        # Map size
        units, minus_2, max_xy = map_size_fields(state.map_size)
        image.map_size_units.value = units
        image.map_size_minus_2.value = minus_2
        image.map_size.value = state.map_size
        image.map_max_xy.value = max_xy

        image.same_price_throughout.value = state.same_price_throughout & 0xFFFFFFFF
        image.suggested_max_guests.value = state.suggested_guest_maximum
        image.park_rating_warning_days.value = state.scenario_park_rating_warning_days
        image.last_entrance_style.value = state.last_entrance_style

        transcode.export_research_list(image.research_items, research)
        image.map_base_z.value = state.map_base_z
        image.scenario_name.value = state.scenario_name
        image.scenario_description.value = state.scenario_details
        image.current_interest_rate.value = finances.bank_loan_interest_rate
        image.same_price_throughout_extended.value = (state.same_price_throughout >> 32) & 0xFFFFFFFF
        transcode.export_park_entrances(image.park_entrances, state.park_entrances)
        image.saved_expansion_pack_names.value = bytes(state.scenario_expansion_packs)
        transcode.export_banners(image.banners, state.banners)
        transcode.export_user_strings(image.custom_strings, state.user_strings)
        image.game_ticks_1.value = state.date.current_ticks

        # Rides
        transcode.export_rides(image.rides, state)
        image.saved_age.value = state.saved_age
        image.saved_view_x.value = state.saved_view_x
        image.saved_view_y.value = state.saved_view_y
        image.saved_view_zoom.value = state.saved_view_zoom
        image.saved_view_rotation.value = state.saved_view_rotation
        transcode.export_map_animations(image, state.map_animations)
        transcode.export_ride_ratings_calc_data(image.ride_ratings_calc_data, state.ride_ratings_calc_data)
        transcode.export_ride_measurements(image, state)

        # Staff
        image.next_guest_index.value = state.next_guest_number
        image.grass_and_scenery_tilepos.value = state.grass_and_scenery_tilepos
        image.patrol_areas.values = state.staff_patrol_areas
        image.staff_modes.values = state.staff_modes
        image.byte_13CA740.value = state.unk_13ca740

        # Climate
        image.climate.value = climate.climate
        image.climate_update_timer.value = climate.update_timer
        image.current_weather.value = climate.current.weather
        image.next_weather.value = climate.next.weather
        image.temperature.value = climate.current.temperature
        image.next_temperature.value = climate.next.temperature
        image.current_weather_effect.value = climate.current.weather_effect
        image.next_weather_effect.value = climate.next.weather_effect
        image.current_weather_gloom.value = climate.current.weather_gloom
        image.next_weather_gloom.value = climate.next.weather_gloom
        image.current_rain_level.value = climate.current.rain_level
        image.next_rain_level.value = climate.next.rain_level

        transcode.export_news_items(image.news_items, state.news_items)
        image.scenario_filename.value = state.scenario_filename
        image.wide_path_tile_loop_x.value = state.wide_path_tile_loop_x
        image.wide_path_tile_loop_y.value = state.wide_path_tile_loop_y

        # Post-pass fixups on the image
        if self.remove_trackless_rides:
            scenario_remove_trackless_rides(image, state)
        scenario_fix_ghosts(image, state.objects)
        convert_strings_to_rct2(image)

        return image

    def save(self, stream, is_scenario):
        """
        Writes our exported image to `stream` as chunks, followed by the
        checksum.  `stream` must be readable and seekable as well as
        writable.  Returns the chunk writer.
        """
        if self.image is None:
            raise RuntimeError('export() must be called before save()')
        image = self.image

        if is_scenario:
            image.header.type.value = S6Type.SCENARIO
        else:
            image.header.type.value = S6Type.SAVEDGAME
        image.header.classic_flag.value = 0
        image.header.num_packed_objects.value = len(self.export_objects_list)
        image.header.version.value = S6_RCT2_VERSION
        image.header.magic_number.value = S6_MAGIC_NUMBER
        image.game_version_number.value = S6_GAME_VERSION_NUMBER

        self.writer = SawyerChunkWriter(stream)
        for label, offset, length, encoding in image.chunk_table(is_scenario):
            # Packed objects go in between the info and the object table
            if label == 'Objects' and self.export_objects_list:
                self.state.objects.write_packed_objects(self.writer, self.export_objects_list)
            self.writer.write_chunk(image.read(offset, length), encoding)
        self.writer.write_checksum()
        return self.writer

    def save_game(self, filename):
        with open(filename, 'w+b') as df:
            return self.save(df, False)

    def save_scenario(self, filename):
        with open(filename, 'w+b') as df:
            return self.save(df, True)


def scenario_save(state, filename, is_scenario=False, export_objects=False, remove_trackless_rides=True):
    """
    Exports `state` and writes it to `filename`.  If anything goes wrong
    while writing, the partially-written file is removed and the exception
    re-raised.  Returns the exporter.
    """
    exporter = S6Exporter(state, remove_trackless_rides=remove_trackless_rides)
    if export_objects:
        exporter.export_objects_list = state.objects.get_packable_objects()
    exporter.export()
    try:
        if is_scenario:
            exporter.save_scenario(filename)
        else:
            exporter.save_game(filename)
    except Exception:
        if os.path.exists(filename):
            os.remove(filename)
        raise
    return exporter


def save_game(state, filename, export_objects=False, remove_trackless_rides=True):
    return scenario_save(state, filename, is_scenario=False,
            export_objects=export_objects, remove_trackless_rides=remove_trackless_rides)


def save_scenario(state, filename, export_objects=False, remove_trackless_rides=True):
    return scenario_save(state, filename, is_scenario=True,
            export_objects=export_objects, remove_trackless_rides=remove_trackless_rides)
