import os
from cdsplit.CD.cd_types import TrackMode, enum_name
from cdsplit.CD.msf import format_msf
from cdsplit.analysis.segment import infer_layout
from cdsplit.cue.export import export_cue
from cdsplit.cue.geometry import resolve_geometry
from cdsplit.cue.parser import read_cue_sheet
from cdsplit.cue.structs import TrackList
from cdsplit.error_number import ErrorNumber, ImageError, SourceReadError
from cdsplit.options import ConversionOptions
from cdsplit.write import write_track, truncate_source, WAV_HEADER
import logging

logger = logging.getLogger(__name__)


def log_track_plan(track_list: TrackList):
    logger.info("Track  Type                 Bps   Start     Sectors        Offsets                Output")
    logger.info("=" * 100)
    for track in track_list:
        last_sector = track.data_start + max(track.total_sectors - 1, 0)
        last_offset = max(track.end_offset - 1, track.start_offset)
        logger.info(f"{track.number:<7}{enum_name(TrackMode, track.mode):<21}{track.sector_size:<6}"
                    f"{format_msf(track.data_start):<10}{f'{track.data_start}-{last_sector}':<15}"
                    f"{f'{track.start_offset}-{last_offset}':<23}"
                    f"{track.output_name} ({track.byte_length >> 20} Mb)")


def close_sources(track_list: TrackList):
    closed = set()
    for track in track_list:
        if track.source is not None and id(track.source) not in closed:
            track.source.close()
            closed.add(id(track.source))


def remove_empty_sources(track_list: TrackList):
    removed = set()
    for track in track_list:
        source = track.source
        if source is None or source.base_path in removed:
            continue
        if source.length == 0:
            source.close()
            logger.info(f"Removing empty source {source.filename}")
            try:
                os.remove(source.base_path)
            except OSError as ex:
                raise SourceReadError(f"Unable to remove \"{source.base_path}\": {ex}") from ex
            removed.add(source.base_path)


def _rename_single_track(track_list: TrackList, options: ConversionOptions) -> bool:
    # A lone 2048 byte track spanning its whole file is already an ISO image
    if len(track_list) != 1:
        return False
    track = track_list[0]
    if track.mode != TrackMode.Mode1_2048 or track.start_offset != 0 or track.end_offset != track.source.length:
        return False

    target = os.path.join(options.output_dir, track.output_name)
    logger.info(f"Renaming {track.source.filename} to {target}")
    track.source.close()
    try:
        os.rename(track.source.base_path, target)
    except OSError as ex:
        raise ImageError(f"Unable to rename \"{track.source.base_path}\": {ex}", ErrorNumber.CannotOpenFile) from ex
    return True


def convert_cue(cue_path: str, options: ConversionOptions = None) -> TrackList:
    """
    Splits the image a layout sheet describes into one output per track:
    .wav for audio and .iso user data for everything else. Tracks are
    written last to first, so in place conversion can cut each one off the
    end of its source once written.
    """
    options = options or ConversionOptions()
    track_list = read_cue_sheet(cue_path, options)
    try:
        resolve_geometry(track_list)
        log_track_plan(track_list)

        os.makedirs(options.output_dir, exist_ok=True)
        if options.in_place and _rename_single_track(track_list, options):
            return track_list

        if options.single_track is not None and not any(t.number == options.single_track for t in track_list):
            logger.warning(f"Track {options.single_track} not found in {os.path.basename(cue_path)}")

        for track in reversed(track_list.tracks):
            if options.single_track is not None and track.number != options.single_track:
                continue
            write_track(track, options.output_dir)
            if options.in_place:
                truncate_source(track)

        if options.in_place:
            remove_empty_sources(track_list)
    finally:
        close_sources(track_list)

    return track_list


def cue_from_bin(bin_path: str, cue_path: str, options: ConversionOptions = None) -> TrackList:
    """
    Guesses the track layout of a bare image and writes a layout sheet for
    it. The leading data track is identified from its headers, the audio
    after it is split wherever a long enough quiet gap is found.
    """
    options = options or ConversionOptions()
    name = os.path.basename(bin_path)
    extension = os.path.splitext(name)[1].lower()

    try:
        stream = open(bin_path, 'rb')
    except OSError as ex:
        raise SourceReadError(f"Unable to open \"{bin_path}\": {ex}", ErrorNumber.CannotOpenFile) from ex

    with stream:
        if extension == '.wav':
            logger.info(".wav binfile - Skipping wav header")
            stream.seek(WAV_HEADER.size)
        elif extension == '.cdi':
            logger.warning("Sorry, I don't know how to read DiscJuggler images")
            logger.warning("Output will most likely be garbage")
        track_list = infer_layout(stream, name, options)

    text = export_cue(track_list)
    logger.info(f"Writing {cue_path}")
    for line in text.splitlines():
        logger.debug(f" {line}")
    try:
        with open(cue_path, 'w', encoding='utf-8', newline='\n') as cue_file:
            cue_file.write(text)
    except OSError as ex:
        raise ImageError(f"Unable to create \"{cue_path}\": {ex}", ErrorNumber.CannotOpenFile) from ex

    return track_list
