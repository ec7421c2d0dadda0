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

from rct2save.state import Ride, RideMeasurement, Peep, Litter, Duck, Sprite, \
        SpriteTable, SpriteIdentifier, SpriteList, MarketingCampaign, CampaignType, \
        PeepSpawn, ParkEntrance, ResearchState, ResearchItem, ObjectCatalog, \
        ObjectEntry, Banner, MapAnimation, RIDE_TYPE_NULL, RIDE_TYPE_MINI_GOLF, \
        BANNER_NULL, LOCATION_NULL
from rct2save.s6 import ResearchItemMarker, PeepRecord, DuckRecord, LitterRecord, \
        PEEP_SPAWN_UNDEFINED
from rct2save.transcode import pack_inversions, export_ride, export_rides, \
        select_ride_measurements, export_ride_measurements, export_sprite, \
        export_sprites, build_researched_bitmask, split_track_configurations, \
        export_marketing_campaigns, export_peep_spawns, export_park_entrances, \
        export_research_list, export_object_catalog, export_banners, \
        export_map_animations


def test_inversions_saturate():
    ride = Ride(type=2, inversions=300, sheltered_eighths=3)
    assert pack_inversions(ride) == 31 | (3 << 5)
    ride = Ride(type=2, inversions=4)
    assert pack_inversions(ride) == 4


def test_mini_golf_packs_holes():
    ride = Ride(type=RIDE_TYPE_MINI_GOLF, inversions=2, holes=18, sheltered_eighths=1)
    assert pack_inversions(ride) == 18 | (1 << 5)


def test_export_ride(image, populated_ride):
    record = image.rides[3]
    export_ride(record, populated_ride)
    assert record.type.value == 2
    assert record.subtype.value == 7
    assert record.name.value == 0x8001
    assert record.price.value == 20
    assert record.inversions.value == 5 | (2 << 5)
    assert record.excitement.value == 650
    assert record.station_starts[0].coord == (10, 12)
    assert record.entrances[0].value == 10 | (11 << 8)
    assert record.exits[0].coord == (11, 11)
    assert record.station_heights[0] == 14
    assert record.length[0] == 1000
    # Unused stations are flagged as undefined, not tile (0, 0)
    assert record.entrances[1].value == 0xFFFF
    assert record.station_starts[3].coord is None
    assert record.overall_view.value == 0xFFFF
    assert record.vehicle_colours[0] == 4
    assert record.vehicle_colours[1] == 9
    assert record.vehicle_colours_extended[0] == 21
    assert record.track_colour_main[1] == 1
    assert record.track_colour_additional[1] == 2
    assert record.track_colour_supports[1] == 3
    assert record.measurement_index.value == 0xFF


def test_export_ride_short_station_list(image):
    ride = Ride(id=0, type=1)
    ride.stations = ride.stations[:1]
    export_ride(image.rides[0], ride)
    assert image.rides[0].exits[3].value == 0xFFFF


def test_export_rides_marks_empty_slots(image, blank_state, populated_ride):
    blank_state.rides.append(populated_ride)
    export_rides(image.rides, blank_state)
    assert image.rides[3].type.value == 2
    assert image.rides[0].type.value == RIDE_TYPE_NULL
    assert image.rides[254].type.value == RIDE_TYPE_NULL


def test_export_rides_warns_on_unstorable_rides(image, blank_state, capsys):
    blank_state.rides.append(Ride(id=300, type=4))
    blank_state.rides.append(Ride(id=2, type=5))
    blank_state.rides.append(Ride(id=2, type=6))
    blank_state.rides.append(Ride(id=9, type=RIDE_TYPE_NULL))
    export_rides(image.rides, blank_state)
    err = capsys.readouterr().err
    assert 'WARNING: Ride 300 is out of range' in err
    assert 'WARNING: Ride 2 is defined more than once' in err
    assert 'Ride 9' not in err
    assert image.rides[2].type.value == 6


def test_export_rides_no_warnings_for_valid_rides(image, blank_state, populated_ride, capsys):
    blank_state.rides.append(populated_ride)
    export_rides(image.rides, blank_state)
    assert capsys.readouterr().err == ''


def test_select_measurements_keeps_most_recent():
    measurements = [RideMeasurement(last_use_tick=tick) for tick in [10, 50, 5, 90, 30]]
    assert set(select_ride_measurements(measurements, capacity=3)) == {1, 3, 4}


def test_select_measurements_under_capacity():
    measurements = [RideMeasurement(last_use_tick=tick) for tick in [10, 50, 5]]
    assert select_ride_measurements(measurements, capacity=3) == [0, 1, 2]
    assert select_ride_measurements([]) == []


def test_export_ride_measurements(image, blank_state, populated_ride):
    populated_ride.measurement = RideMeasurement(num_items=2, velocity=[5, -5])
    blank_state.rides.append(populated_ride)
    blank_state.rides.append(Ride(id=7, type=1))
    export_rides(image.rides, blank_state)
    export_ride_measurements(image, blank_state)

    assert image.ride_measurements[0].ride_index.value == 3
    assert image.ride_measurements[0].num_items.value == 2
    assert image.ride_measurements[0].velocity[1] == -5
    assert image.rides[3].measurement_index.value == 0
    assert image.rides[7].measurement_index.value == 0xFF
    for slot in range(1, 8):
        assert image.ride_measurements[slot].ride_index.value == 0xFF


def test_export_peep_sprite(image):
    peep = Peep(x=100, y=200, z=16, energy=96, cash_in_pocket=500)
    peep.thoughts[1].type = 4
    peep.pathfind_goal.x = 12
    export_sprite(image.sprites, 5, peep)
    record = image.sprites.record(5, PeepRecord)
    assert record.sprite_identifier.choice == SpriteIdentifier.PEEP
    assert record.x.value == 100
    assert record.energy.value == 96
    assert record.cash_in_pocket.value == 500
    assert record.thoughts[0].type.value == 0xFF
    assert record.thoughts[1].type.value == 4
    assert record.pathfind_goal.x.value == 12


def test_export_sprite_clears_old_contents(image):
    export_sprite(image.sprites, 0, Peep(energy=96))
    export_sprite(image.sprites, 0, Litter(creation_tick=1234))
    assert image.sprites.record(0, PeepRecord).energy.value == 0
    assert image.sprites.record(0, LitterRecord).creation_tick.value == 1234


def test_export_misc_sprite(image):
    export_sprite(image.sprites, 9, Duck(target_x=-40, state=2))
    record = image.sprites.record(9, DuckRecord)
    assert record.target_x.value == -40
    assert record.state.value == 2


def test_unknown_misc_sprite_warns(image, capsys):
    sprite = Sprite(sprite_identifier=SpriteIdentifier.MISC.value, type=42, x=7)
    export_sprite(image.sprites, 2, sprite)
    assert 'Misc. sprite type 42 can not be exported.' in capsys.readouterr().err
    # The common header still gets written
    assert image.sprites[2].x.value == 7


def test_unknown_sprite_identifier_warns(image, capsys):
    export_sprite(image.sprites, 2, Sprite(sprite_identifier=77))
    assert 'Sprite identifier 77 can not be exported.' in capsys.readouterr().err
    assert image.sprites[2].sprite_identifier.value == 77


def test_free_sprite_is_silent(image, capsys):
    export_sprite(image.sprites, 2, Sprite(next=3))
    assert capsys.readouterr().err == ''
    assert image.sprites[2].next.value == 3


def test_export_sprites_lists(image):
    table = SpriteTable.blank()
    table.allocate(Peep(), SpriteList.PEEP)
    export_sprites(image, table)
    assert image.sprite_lists_head[SpriteList.FREE.value] == 1
    assert image.sprite_lists_head[SpriteList.PEEP.value] == 0
    assert image.sprite_lists_count[SpriteList.PEEP.value] == 1
    assert image.sprites[9999].sprite_identifier.value == SpriteIdentifier.NULL.value


def test_researched_bitmask(image):
    research = ResearchState(invented_ride_types={0, 33, 90})
    build_researched_bitmask(image.researched_ride_types, 91, research.ride_type_is_invented)
    assert image.researched_ride_types.words[0] == 1
    assert image.researched_ride_types.words[1] == 2
    assert image.researched_ride_types.words[2] == 1 << (90-64)


def test_researched_bitmask_word_boundaries(image):
    research = ResearchState(invented_scenery_items={0, 31, 32, 63, 199})
    bitmask = image.researched_scenery_items
    build_researched_bitmask(bitmask, 200, research.scenery_is_invented)
    words = bitmask.words
    assert words[0] == 0x80000001
    assert words[1] == 0x80000001
    assert words[6] == 1 << 7
    assert all(word == 0 for idx, word in enumerate(words) if idx not in (0, 1, 6))
    assert len(bitmask) == 5


def test_split_track_configurations():
    low, high = split_track_configurations([0x1234567800000001, 0])
    assert low == [1, 0]
    assert high == [0x12345678, 0]


def test_marketing_campaigns(image):
    export_marketing_campaigns(image, [
        MarketingCampaign(type=CampaignType.RIDE.value, weeks_left=3, ride_id=12),
        MarketingCampaign(type=CampaignType.FOOD_OR_DRINK_FREE.value, weeks_left=1, shop_item_type=7),
        MarketingCampaign(type=CampaignType.PARK.value, weeks_left=2),
        ])
    weeks = image.campaign_weeks_left.values
    refs = image.campaign_ride_index.values
    assert weeks[CampaignType.RIDE.value] == 0x83
    assert weeks[CampaignType.FOOD_OR_DRINK_FREE.value] == 0x81
    assert weeks[CampaignType.PARK.value] == 0x82
    assert weeks[CampaignType.RIDE_FREE.value] == 0
    assert refs[CampaignType.RIDE.value] == 12
    assert refs[CampaignType.FOOD_OR_DRINK_FREE.value] == 7
    assert refs[CampaignType.PARK.value] == 0


def test_peep_spawns(image):
    export_peep_spawns(image.peep_spawns, [PeepSpawn(x=320, y=640, z=112, direction=2)])
    assert image.peep_spawns[0].x.value == 320
    assert image.peep_spawns[0].z.value == 7
    assert image.peep_spawns[0].direction.value == 2
    assert image.peep_spawns[1].x.value == PEEP_SPAWN_UNDEFINED
    assert image.peep_spawns[1].y.value == PEEP_SPAWN_UNDEFINED


def test_park_entrances(image):
    export_park_entrances(image.park_entrances, [ParkEntrance(x=64, y=96, z=14, direction=1)])
    assert image.park_entrances.x.values == [64] + [LOCATION_NULL]*3
    assert image.park_entrances.direction.values == [1, 0, 0, 0]


def test_research_list_markers(image):
    research = ResearchState(
            invented_items=[ResearchItem(raw_value=0x10, category=1)],
            uninvented_items=[ResearchItem(raw_value=0x20, category=2), ResearchItem(raw_value=0x30)],
            )
    export_research_list(image.research_items, research)
    values = [image.research_items[idx].raw_value.value for idx in range(6)]
    assert values == [
            0x10,
            ResearchItemMarker.SEPARATOR.value,
            0x20,
            0x30,
            ResearchItemMarker.END.value,
            ResearchItemMarker.END_2.value,
            ]
    assert image.research_items[2].category.value == 2


def test_research_list_truncates(image, capsys):
    research = ResearchState(invented_items=[ResearchItem(raw_value=1)]*600)
    export_research_list(image.research_items, research)
    assert 'WARNING' in capsys.readouterr().err
    assert image.research_items[497].raw_value.value == ResearchItemMarker.SEPARATOR.value
    assert image.research_items[498].raw_value.value == ResearchItemMarker.END.value
    assert image.research_items[499].raw_value.value == ResearchItemMarker.END_2.value


def test_object_catalog(image):
    catalog = ObjectCatalog(entries={1: ObjectEntry(flags=1, name='PTCT1', checksum=99)})
    export_object_catalog(image.objects, catalog)
    assert image.objects[0].is_absent
    assert not image.objects[1].is_absent
    assert image.objects[1].name.value == b'PTCT1   '
    assert image.objects[1].checksum.value == 99
    assert image.objects[720].is_absent


def test_banners(image):
    export_banners(image.banners, [Banner(type=3, string_idx=0x8002, x=5, y=6)])
    assert image.banners[0].type.value == 3
    assert image.banners[0].string_idx.value == 0x8002
    assert image.banners[1].type.value == BANNER_NULL
    assert image.banners[249].type.value == BANNER_NULL


def test_map_animations(image, capsys):
    export_map_animations(image, [MapAnimation(type=2, x=64, y=32)]*2001)
    assert 'WARNING' in capsys.readouterr().err
    assert image.num_map_animations.value == 2000
    assert image.map_animations[1999].x.value == 64
