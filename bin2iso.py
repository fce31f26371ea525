#!/usr/bin/env python3

""" bin2iso.py: Split bin/cue CD images into .iso data tracks and .wav audio
tracks, or guess a cue sheet for a bare bin image.
"""
import argparse
import logging
import sys
import inquirer
from cdsplit.conversion import convert_cue, cue_from_bin
from cdsplit.error_number import ErrorNumber, ImageError
from cdsplit.options import ConversionOptions, GapPolicy, DEFAULT_RMS_THRESHOLD, DEFAULT_MIN_GAP_WIDTH

__version__ = '2.0'

# Require at least Python 3.7
assert sys.version_info >= (3, 7)

logger = logging.getLogger('bin2iso')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='bin2iso',
        description='Converts RAW format (.bin/.cue) files to ISO/WAV format. '
                    'Can also create a .cue file for a .bin file.')
    parser.add_argument('cuefile', help='the .cue file to read, or to write with --cuefrom')
    parser.add_argument('output_dir', nargs='?', default='.', help='where to put the converted tracks')
    parser.add_argument('-n', '--nogaps', action='store_true', help='discard any data in pregaps')
    parser.add_argument('-a', '--gaps', action='store_true',
                        help='only keep pregaps that are not silent (counts non-zero samples)')
    parser.add_argument('-p', '--pregaps', action='store_true',
                        help="keep pregaps at the start of their own track, don't convert them to postgaps")
    parser.add_argument('-t', '--track', type=int, metavar='N', help='extract only track N')
    parser.add_argument('-i', '--inplace', action='store_true',
                        help='truncate the .bin file after each track is written, uses minimal disk space')
    parser.add_argument('-b', '--nob', action='store_true',
                        help="don't use overburn data past 334873 sectors in the last track")
    parser.add_argument('-y', '--yes', action='store_true', help="don't ask before converting in place")
    parser.add_argument('-c', '--cuefrom', metavar='BINFILE',
                        help='create a .cue file for BINFILE, looking for track gaps in the audio')
    parser.add_argument('-l', '--level', type=int, default=DEFAULT_RMS_THRESHOLD, metavar='N',
                        help='audio sample level a track gap has to stay below (default %(default)s)')
    parser.add_argument('-w', '--width', type=int, default=DEFAULT_MIN_GAP_WIDTH, metavar='N',
                        help='minimum sectors of quiet audio that make a gap (default %(default)s)')
    parser.add_argument('-v', '--verbose', action='store_true', help='log debug detail')
    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")
    return parser


def parse_args(argv=None) -> argparse.Namespace:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.track is not None and args.inplace:
        parser.error("-t/--track and -i/--inplace can't be used together")
    return args


def options_from_args(args: argparse.Namespace) -> ConversionOptions:
    if args.nogaps:
        gap_policy = GapPolicy.Discard
    elif args.gaps:
        gap_policy = GapPolicy.Auto
    else:
        gap_policy = GapPolicy.Preserve

    return ConversionOptions(gap_policy=gap_policy,
                             all_post_gaps=not args.pregaps,
                             no_overburn=args.nob,
                             single_track=args.track,
                             rms_threshold=args.level,
                             min_gap_width=args.width,
                             in_place=args.inplace,
                             output_dir=args.output_dir)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format='%(message)s')

    try:
        options = options_from_args(args)
        if args.cuefrom:
            cue_from_bin(args.cuefrom, args.cuefile, options)
            return ErrorNumber.NoError

        if options.in_place and not args.yes:
            confirmed = inquirer.confirm(f"The source image of {args.cuefile} will be truncated as tracks "
                                         "are written, continue?", default=False)
            if not confirmed:
                logger.info("Cancelled, nothing was converted")
                return ErrorNumber.NoError

        convert_cue(args.cuefile, options)
    except ImageError as ex:
        logger.error(f"Error: {ex}")
        return ex.error_number
    except ValueError as ex:
        logger.error(f"Error: {ex}")
        return ErrorNumber.InvalidArgument

    return ErrorNumber.NoError


if __name__ == '__main__':
    sys.exit(main())
