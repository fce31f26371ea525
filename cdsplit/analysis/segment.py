import os
from dataclasses import dataclass
from typing import BinaryIO, List, Tuple
import numpy as np
from cdsplit.CD.cd_types import TrackMode, RAW_SECTOR_SIZE, MAX_TRACK_NUMBER
from cdsplit.cue.structs import Track, TrackList
from cdsplit.error_number import CapacityExceeded, MalformedLayout
from cdsplit.options import ConversionOptions
from .identify import analyse_track, stream_length
import logging

logger = logging.getLogger(__name__)

# A sector also needs this many loud samples before it can end a gap
MIN_SAMPLE_HITS = 120

CHUNK_SECTORS = 1024


@dataclass
class TrackSplit:
    pregap_start: int
    """First sector at the quietest level of the gap, becomes INDEX 00"""

    data_start: int
    """Last sector at the quietest level of the gap, becomes INDEX 01"""


def sector_loudness(chunk: bytes, sector_size: int, limit_squared: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Per-sector loudness of a run of audio sectors, using the first 2352 bytes
    of each as 16-bit little endian samples. Returns the mean squared sample
    per byte and the number of samples whose square exceeds limit_squared.
    """
    count = len(chunk) // sector_size
    frames = np.frombuffer(chunk, dtype=np.uint8, count=count * sector_size).reshape(count, sector_size)
    samples = np.ascontiguousarray(frames[:, :RAW_SECTOR_SIZE]).view('<i2').astype(np.int64)
    squared = samples * samples
    rms = squared.sum(axis=1) // RAW_SECTOR_SIZE
    hits = np.count_nonzero(squared > limit_squared, axis=1)
    return rms, hits


class AudioSegmenter:
    """
    Finds track boundaries in audio by looking for runs of quiet sectors.
    Every gap at least min_gap_width sectors long that is followed by a loud
    sector gives one split, placed around the quietest sectors of the gap.
    """

    def __init__(self, rms_threshold: int, min_gap_width: int):
        self.limit_squared = rms_threshold * rms_threshold
        self.min_gap_width = min_gap_width
        self.splits: List[TrackSplit] = []
        self._gap_sectors = 0
        self._lowest = 0
        self._lowest0 = 0
        self._lowest1 = 0

    def feed(self, sector: int, rms: int, hits: int):
        if rms > self.limit_squared and hits > MIN_SAMPLE_HITS:
            if self._gap_sectors:
                if self._gap_sectors >= self.min_gap_width:
                    logger.debug(f" Gap of {self._gap_sectors} sectors ends at {sector}, "
                                 f"split at {self._lowest0}-{self._lowest1}")
                    self.splits.append(TrackSplit(self._lowest0, self._lowest1))
                self._gap_sectors = 0
            return

        if self._gap_sectors:
            if rms <= self._lowest:
                if rms != self._lowest:
                    self._lowest = rms
                    self._lowest0 = sector
                self._lowest1 = sector
        else:
            self._lowest = rms
            self._lowest0 = sector
            self._lowest1 = sector
        self._gap_sectors += 1

    def segment(self, stream: BinaryIO, sector_size: int, first_sector: int) -> List[TrackSplit]:
        if sector_size < RAW_SECTOR_SIZE:
            raise ValueError(f"Audio sector size {sector_size} is smaller than {RAW_SECTOR_SIZE}")

        sector = first_sector
        while True:
            chunk = stream.read(CHUNK_SECTORS * sector_size)
            if len(chunk) < sector_size:
                if chunk:
                    logger.debug(f" Ignoring {len(chunk)} trailing bytes past the last whole sector")
                break

            rms, hits = sector_loudness(chunk, sector_size, self.limit_squared)
            for level, hit_count in zip(rms.tolist(), hits.tolist()):
                self.feed(sector, level, hit_count)
                sector += 1

            if len(chunk) % sector_size:
                logger.debug(f" Ignoring {len(chunk) % sector_size} trailing bytes past the last whole sector")
                break

        return self.splits


def infer_layout(stream: BinaryIO, source_file_name: str, options: ConversionOptions) -> TrackList:
    """
    Builds a track list for a bare image: an optional leading data track
    found by analyse_track, followed by audio tracks split at quiet gaps.
    Sector indexes count from the stream position on entry.
    """
    track_list = TrackList()
    number = 0

    analysis = analyse_track(stream)
    if analysis.sectors:
        number += 1
        track = Track.create(number, analysis.mode, source_file_name, analysis.sector_size)
        track.pregap_start = track.data_start = 0
        track_list.append(track)

    if analysis.subchannel_bytes:
        audio_mode, audio_size = TrackMode.AudioWithSubchannel, RAW_SECTOR_SIZE + analysis.subchannel_bytes
    else:
        audio_mode, audio_size = TrackMode.Audio, RAW_SECTOR_SIZE

    first_audio = analysis.sectors
    has_audio = stream_length(stream) - stream.tell() >= audio_size

    segmenter = AudioSegmenter(options.rms_threshold, options.min_gap_width)
    splits = segmenter.segment(stream, audio_size, first_audio) if has_audio else []

    # Audio ahead of the first gap gets a track of its own
    if has_audio and not (splits and splits[0].pregap_start == first_audio):
        splits.insert(0, TrackSplit(first_audio, first_audio))

    for split in splits:
        number += 1
        if number > MAX_TRACK_NUMBER:
            raise CapacityExceeded(f"Too many tracks found, at most {MAX_TRACK_NUMBER} are supported")
        track = Track.create(number, audio_mode, source_file_name, audio_size)
        track.pregap_start = split.pregap_start
        track.data_start = split.data_start
        track_list.append(track)

    if not track_list:
        raise MalformedLayout(f"No data track or audio sectors found in {os.path.basename(source_file_name)}")

    logger.info(f"Found {len(track_list)} tracks in {os.path.basename(source_file_name)}")
    return track_list
