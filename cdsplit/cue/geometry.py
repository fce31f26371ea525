from dataclasses import replace
from typing import Dict, Optional, List
from cdsplit.CD.cd_types import CD74_MAX_SECTORS, MAX_TRACK_NUMBER
from cdsplit.error_number import GeometryError
from cdsplit.options import GapPolicy
from .gaps import pregap_has_audio
from .structs import Track, TrackList, output_name
import logging

logger = logging.getLogger(__name__)


def _file_size(track: Track, file_sizes: Optional[Dict[str, int]]) -> int:
    if file_sizes is not None and track.source_file_name in file_sizes:
        return file_sizes[track.source_file_name]
    if track.source is None:
        raise GeometryError(f"Track {track.number} has no source file to measure")
    return track.source.length


def check_indexes(tracks: List[Track]):
    for track in tracks:
        if track.pregap_start < 0:
            track.pregap_start = 0
        if track.data_start < 0:
            track.data_start = 0
        if track.pregap_start > track.data_start:
            raise GeometryError(f"Index0 > Index1 on track {track.number}")


def check_contiguous_files(tracks: List[Track]):
    seen = set()
    previous = None
    for track in tracks:
        if track.source_file_name != previous:
            if track.source_file_name in seen:
                logger.warning(f"FILE \"{track.source_file_name}\" is declared again at track {track.number}, "
                               "its tracks are expected to be listed together")
            seen.add(track.source_file_name)
            previous = track.source_file_name


def _keep_pregap(track: Track, offset: int, policy: GapPolicy) -> bool:
    if policy == GapPolicy.Discard:
        return False
    if policy == GapPolicy.Auto:
        return pregap_has_audio(track, offset)
    return True


def resolve_geometry(track_list: TrackList, file_sizes: Optional[Dict[str, int]] = None) -> TrackList:
    """
    Fills in start_offset and total_sectors for every track.

    Each track runs from its INDEX 01 to the next track's INDEX 00, or to the
    end of its source file when the next track lives in another file. Since
    sector sizes can change from track to track, byte offsets are summed up
    incrementally per source file. Tracks have to be in ascending order and
    each FILE is expected to be declared once.
    """
    tracks = track_list.tracks
    check_indexes(tracks)
    check_contiguous_files(tracks)

    if track_list.gap_policy == GapPolicy.Discard:
        logger.info("Note: Discarding any pregap data")
    elif track_list.all_post_gaps:
        logger.info("Note: Appending any pregap data to end of audio tracks")
    else:
        logger.info("Note: Saving any pregap data without changes")

    track_offset = 0
    for i, track in enumerate(tracks):
        track.start_offset = track_offset

        pregap_frames = track.pregap_frames
        if pregap_frames != 0:
            if _keep_pregap(track, track_offset, track_list.gap_policy):
                logger.info(f"Note: track {track.number} pregap = {pregap_frames} frames")

                if track_list.all_post_gaps:
                    # Turn the pregap into a postgap of the previous audio track
                    previous = tracks[i - 1] if i > 0 else None
                    if (previous is not None and previous.is_audio and track_offset != 0
                            and previous.source_file_name == track.source_file_name):
                        previous.total_sectors += pregap_frames
                    track_offset += pregap_frames * track.sector_size
                    track.start_offset = track_offset
                else:
                    track.data_start = track.pregap_start
            else:
                track_offset += pregap_frames * track.sector_size
                track.start_offset = track_offset

        if i + 1 == len(tracks) or tracks[i + 1].source_file_name != track.source_file_name:
            # Final track, or next track is in a different file: track runs to end of file
            track_bytes = _file_size(track, file_sizes) - track_offset
            if track_bytes < 0:
                raise GeometryError(f"Track {track.number} Index1 past file end")
            if track_bytes % track.sector_size != 0:
                logger.warning(f"Track {track.number} bytesize {track_bytes} not divisible by its "
                               f"sector size {track.sector_size}")
            track.total_sectors = track_bytes // track.sector_size
            track_offset = 0
        else:
            next_track = tracks[i + 1]
            if track.data_start > next_track.pregap_start:
                raise GeometryError(f"Track {track.number} Index1 past next track's Index0")
            track.total_sectors = next_track.pregap_start - track.data_start
            track_offset += track.total_sectors * track.sector_size

        if track.total_sectors == 0:
            logger.warning(f"Track {track.number} is empty")

        logger.debug(f" Track {track.number}: start offset {track.start_offset}, {track.total_sectors} sectors "
                     f"of {track.sector_size} bytes")

    if track_list.no_overburn:
        split_overburn(track_list)

    return track_list


def disc_end_sector(tracks: List[Track]) -> int:
    end = 0
    for i, track in enumerate(tracks):
        if i + 1 == len(tracks) or tracks[i + 1].source_file_name != track.source_file_name:
            end += track.data_start + track.total_sectors
    return end


def split_overburn(track_list: TrackList) -> Optional[Track]:
    """
    Moves any sectors past the 74 minute mark out of the last track into a
    track of their own, so overburn data doesn't end up in the last output.
    """
    tracks = track_list.tracks
    end = disc_end_sector(tracks)
    if not tracks or end <= CD74_MAX_SECTORS:
        return None

    last = tracks[-1]
    overflow = end - CD74_MAX_SECTORS
    if overflow >= last.total_sectors:
        logger.warning(f"Overburn data starts before track {last.number}, not splitting it off")
        return None

    if last.number >= MAX_TRACK_NUMBER:
        logger.warning(f"No track number left after track {last.number} for overburn data, not splitting it off")
        return None

    kept = last.total_sectors - overflow
    number = last.number + 1
    overburn = replace(last,
                       number=number,
                       pregap_start=last.data_start + kept,
                       data_start=last.data_start + kept,
                       start_offset=last.start_offset + kept * last.sector_size,
                       total_sectors=overflow,
                       output_name=output_name(last.source_file_name, number, last.mode))
    last.total_sectors = kept
    track_list.append(overburn)
    logger.info(f"Note: {overflow} sectors of overburn data moved to {overburn.output_name}")
    return overburn
