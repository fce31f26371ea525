import io
from dataclasses import dataclass
from typing import BinaryIO
from cdsplit.CD.cd_types import TrackMode, RAW_SECTOR_SIZE, SYNC_MARK, mode_from_cue
from cdsplit.CD.sector import Sector
from cdsplit.CD.volume import VolumeDescriptor, ISO_DESCRIPTOR_OFFSET
import logging

logger = logging.getLogger(__name__)

SNIFF_LENGTH = 50000

# Candidate sector sizes for images that carry sync patterns
MIN_SYNCED_SECTOR_SIZE = 2064
MAX_SYNCED_SECTOR_SIZE = 2556

# A Mode2/2336 image has its descriptor at sector 16 past the 8 byte subheader
MODE2_2336_DESCRIPTOR_OFFSET = 16 * 2336 + 8

# Both 2048 and 2336 need to repeat at most 147 times to be 2352-aligned
MAX_ALIGN_SECTORS = 147


@dataclass
class TrackAnalysis:
    mode: TrackMode = TrackMode.Audio
    sector_size: int = RAW_SECTOR_SIZE
    sectors: int = 0
    """Length of the data track, 0 when the track looks like audio"""

    subchannel_bytes: int = 0
    """Bytes past the raw 2352 in each sector, assumed to be subchannel data"""


def stream_length(stream: BinaryIO) -> int:
    position = stream.tell()
    length = stream.seek(0, io.SEEK_END)
    stream.seek(position)
    return length


def _analyse_synced(stream: BinaryIO, buffer: bytes, read_pos: int, file_size: int,
                    result: TrackAnalysis) -> int:
    # The same pattern has to repeat one sector later, with a later time index
    # and the same mode byte.
    time_a = Sector.header_time(buffer)
    mode_byte = Sector.header_mode(buffer)

    for sector_size in range(MIN_SYNCED_SECTOR_SIZE, MAX_SYNCED_SECTOR_SIZE + 4, 4):
        if len(buffer) < sector_size + 16:
            break
        if not Sector.has_sync(buffer, sector_size):
            continue
        if Sector.header_time(buffer, sector_size) <= time_a or Sector.header_mode(buffer, sector_size) != mode_byte:
            continue

        logger.info(f"(Track has sync pattern, indicates mode {mode_byte})")
        mode = mode_from_cue(f"MODE{mode_byte}/{sector_size}")
        if mode is None:
            logger.warning(f"(Sector layout MODE{mode_byte}/{sector_size} is not supported; "
                           "treating the track as audio)")
            return 0
        result.mode = mode
        result.sector_size = sector_size

        # The ISO volume descriptor is at sector 16, past the sector preamble
        header_offset = sector_size * 16 + (16 if mode_byte == 1 else 24)
        sectors = VolumeDescriptor.block_count(buffer, header_offset)
        if sectors == 0:
            logger.info("(ISO descriptor was not found)")

        available = file_size - read_pos
        if sectors * sector_size > available:
            logger.warning(f"ISO descriptor claims {sectors} sectors, only {available // sector_size} present")
            sectors = available // sector_size
        track_bytes = sectors * sector_size

        # The image should go straight into audio after the end of ISO data, but
        # there may be several empty sectors with just the sync pattern.
        while True:
            stream.seek(read_pos + track_bytes)
            if stream.read(12) != SYNC_MARK:
                break
            track_bytes += sector_size
            sectors += 1

        # Remaining sizes not divisible by 2352 may mean audio with embedded subchannel data
        remaining = file_size - read_pos - track_bytes
        if remaining % RAW_SECTOR_SIZE != 0 and remaining % sector_size != 0:
            logger.warning(f"Remaining image size {remaining} is not divisible by {RAW_SECTOR_SIZE} or {sector_size}")
        elif sector_size < RAW_SECTOR_SIZE:
            logger.warning(f"Remaining image size {remaining} uses unexpected sector size {sector_size}")
        elif sector_size > RAW_SECTOR_SIZE:
            result.subchannel_bytes = sector_size - RAW_SECTOR_SIZE
            logger.info(f"(Audio sectors embed {result.subchannel_bytes} bytes of subchannel data)")

        result.sectors = sectors
        return track_bytes

    logger.warning("(Found sync pattern but failed to recognise sector size; can't convert correctly)")
    return 0


def _analyse_unsynced(buffer: bytes, read_pos: int, file_size: int, result: TrackAnalysis) -> int:
    # No sync pattern, so probably raw 2048 byte user data or an audio track
    sectors = VolumeDescriptor.block_count(buffer, ISO_DESCRIPTOR_OFFSET)
    if sectors:
        logger.info("(Track has an ISO descriptor, indicates raw user data)")
        result.mode, result.sector_size = TrackMode.Mode1_2048, 2048
    else:
        sectors = VolumeDescriptor.block_count(buffer, MODE2_2336_DESCRIPTOR_OFFSET)
        if sectors:
            logger.info("(Track has an ISO descriptor, indicates mode2/2336)")
            result.mode, result.sector_size = TrackMode.Mode2_2336, 2336
        elif VolumeDescriptor.is_udf(buffer, ISO_DESCRIPTOR_OFFSET):
            logger.info("(Track has a UDF ISO descriptor)")
            result.mode, result.sector_size = TrackMode.Mode1_2048, 2048
            sectors = (file_size - read_pos) // 2048
        else:
            logger.info("(No sync pattern or ISO descriptor recognised, probably audio track)")
            return 0

    sector_size = result.sector_size
    available = file_size - read_pos
    if sectors * sector_size > available:
        logger.warning(f"ISO descriptor claims {sectors} sectors, only {available // sector_size} present")
        sectors = available // sector_size

    # There may be extra sectors after the official end of ISO data, likely all
    # zeroed out. Make sure the rest of the file splits into whole 2352 byte blocks.
    track_bytes = sectors * sector_size
    remaining = available - track_bytes
    count = 0
    while remaining > 0 and remaining % RAW_SECTOR_SIZE != 0:
        if count == MAX_ALIGN_SECTORS or remaining < sector_size:
            count = None
            break
        remaining -= sector_size
        count += 1

    if count is None:
        logger.warning("Failed to align ISO track end, may still be ok")
    else:
        track_bytes += count * sector_size
        sectors += count

    result.sectors = sectors
    return track_bytes


def analyse_track(stream: BinaryIO) -> TrackAnalysis:
    """
    Works out what kind of track starts at the current stream position from
    its first 50000 bytes. The stream is left at the end of the detected
    track, or where it started when the track looks like audio.
    """
    read_pos = stream.tell()
    buffer = stream.read(SNIFF_LENGTH)
    file_size = stream_length(stream)
    result = TrackAnalysis()

    if len(buffer) >= 16 and Sector.has_sync(buffer):
        track_bytes = _analyse_synced(stream, buffer, read_pos, file_size, result)
    else:
        track_bytes = _analyse_unsynced(buffer, read_pos, file_size, result)

    if result.sectors == 0:
        result.mode, result.sector_size = TrackMode.Audio, RAW_SECTOR_SIZE
        track_bytes = 0

    stream.seek(read_pos + track_bytes)
    return result
