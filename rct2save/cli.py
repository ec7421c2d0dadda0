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
import sys
import argparse
from . import __version__, set_debug
from .state import ParkState, SpriteList, load_state
from .s6 import has_image_support
from .exporter import scenario_save


def check_file_overwrite(args, filename):
    """
    Checks to see if a file that we intend to write to exists.  If the --force
    option has been specified, there will only be a printed alert about the
    overwrite.  Otherwise, we will ask the user for confirmation.

    Will return `True` if we should go ahead with the save, or `False`
    otherwise.
    """
    do_write = True
    if os.path.exists(filename):
        if args.force:
            print(f'NOTICE: Overwriting existing file "{filename}"!')
        else:
            do_write = False
            response = input(f'WARNING: Filename "{filename}" already exists.  Overwrite? (y/N)> ')
            if response.strip().lower()[:1] == 'y':
                do_write = True
    return do_write


def print_export_info(exporter, filename, is_scenario):
    """
    Shows the chunk table for a freshly-written file, along with a summary
    of what went into it
    """
    state = exporter.state
    if is_scenario:
        kind = 'Scenario'
    else:
        kind = 'Saved Game'
    header = f'{kind}: {filename}'
    print('')
    print(header)
    print('-'*len(header))
    print(f'(processed by rct2save v{__version__})')
    print('')
    print(' - Chunks:')
    chunk_table = exporter.image.chunk_table(is_scenario)
    for idx, ((label, _, _, _), (encoding, raw_len, enc_len)) in enumerate(zip(chunk_table, exporter.writer.chunks)):
        print(f'   {idx:2d}. {label:30s} {encoding.label:13s} {raw_len:9,d} -> {enc_len:9,d} bytes')
    if exporter.export_objects_list:
        print(f' - Packed Objects: {len(exporter.export_objects_list)}')
    print(f' - Rides: {len(state.rides_by_id())}')
    print(f' - Guests/Staff: {state.sprites.list_counts[SpriteList.PEEP.value]}')
    print(f' - Free Sprite Slots: {state.sprites.list_counts[SpriteList.FREE.value]}')
    print(f' - Cash: {state.finances.cash:,d}')
    print('')


def main():
    """
    Main CLI app.  Returns `True` if a file was saved out, or `False`
    otherwise.
    """

    parser = argparse.ArgumentParser(
            description=f'RCT2 S6 Park Exporter v{__version__}',
            )

    parser.add_argument('filename',
            nargs=1,
            type=str,
            help='Filename to write to',
            )

    ###
    ### Control options
    ###

    control = parser.add_argument_group('Control Arguments', 'General control of the export process')

    control.add_argument('-i', '--input',
            type=str,
            metavar='FILENAME',
            help="""
                Park description (JSON) to export.  If not specified, a blank park
                will be exported.
                """,
            )

    control.add_argument('--info',
            action='store_true',
            help='Show the chunk layout of the written file, plus a summary of the park',
            )

    control.add_argument('-d', '--debug',
            action='store_true',
            help="""
                Show debugging output, which will show the offsets (both absolute and relative) for
                all data in the exported image.  This info will be written to stderr.
                """,
            )

    control.add_argument('-f', '--force',
            action='store_true',
            help='Do not prompt to confirm overwriting files',
            )

    ###
    ### Output options
    ###

    output = parser.add_argument_group('Output Options', 'Options which affect the written file')

    output.add_argument('-s', '--scenario',
            action='store_true',
            help='Write a scenario rather than a saved game',
            )

    output.add_argument('-p', '--pack-objects',
            action='store_true',
            dest='pack_objects',
            help='Embed the park\'s custom objects in the file',
            )

    output.add_argument('--keep-trackless-rides',
            action='store_true',
            help="""
                By default, any ride which no longer has track on the map will be left
                out of the written file.  This option will keep them in.
                """,
            )

    output.add_argument('--name',
            type=str,
            help='Scenario name to use (overrides the name in the park description)',
            )

    output.add_argument('--details',
            type=str,
            help='Scenario details to use (overrides the details in the park description)',
            )

    if has_image_support:

        output.add_argument('--map-image',
                type=str,
                metavar='FILENAME',
                help="""
                    Export an overview of the written map as an image, with one pixel
                    per tile.  The format is chosen from the filename extension.
                    """,
                )

    args = parser.parse_args()
    args.filename = args.filename[0]

    if args.debug:
        set_debug()

    # Load up the park
    if args.input:
        print(f'Loading park description: {args.input}')
        state = load_state(args.input)
    else:
        print('NOTICE: No park description given, exporting a blank park')
        state = ParkState()

    if args.name is not None:
        state.scenario_info.name = args.name
        state.scenario_name = args.name
    if args.details is not None:
        state.scenario_info.details = args.details
        state.scenario_details = args.details

    if not check_file_overwrite(args, args.filename):
        print('NOTICE: File NOT written')
        return False

    if args.debug:
        print('Showing data offsets:', file=sys.stderr)
        print('', file=sys.stderr)
    exporter = scenario_save(state, args.filename,
            is_scenario=args.scenario,
            export_objects=args.pack_objects,
            remove_trackless_rides=not args.keep_trackless_rides,
            )
    if args.debug:
        print('', file=sys.stderr)
    print(f'Wrote park to: {args.filename}')

    if args.info:
        print_export_info(exporter, args.filename, args.scenario)

    if has_image_support and args.map_image:
        if check_file_overwrite(args, args.map_image):
            exporter.image.tile_elements.export_image(args.map_image)
            print(f'Map overview exported to: {args.map_image}')
        else:
            print('NOTICE: Map overview NOT exported')

    return True


if __name__ == '__main__':
    main()
