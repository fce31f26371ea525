import numpy as np
from cdsplit.CD.cd_types import RAW_SECTOR_SIZE
from cdsplit.error_number import SourceReadError
from .structs import Track
import logging

logger = logging.getLogger(__name__)

# More than 1/8 of a raw sector worth of non-zero 32-bit words means the
# pregap holds real audio rather than silence padding.
NONZERO_WORD_LIMIT = RAW_SECTOR_SIZE >> 3


def count_nonzero_words(data: bytes, sector_size: int) -> int:
    sectors = len(data) // sector_size
    frames = np.frombuffer(data, dtype=np.uint8, count=sectors * sector_size).reshape(sectors, sector_size)
    # Subchannel bytes past the raw sector are not sample data
    packed = np.ascontiguousarray(frames[:, :RAW_SECTOR_SIZE]).view('<u4')
    return int(np.count_nonzero(packed))


def pregap_has_audio(track: Track, offset: int) -> bool:
    """
    Reads the pregap of a track, starting at byte offset, and decides if it
    is worth keeping.
    """
    if track.source is None:
        raise SourceReadError(f"Track {track.number} has no source to read its pregap from")

    frames = track.pregap_frames
    data = track.source.read_at(offset, frames * track.sector_size)
    nonzero = count_nonzero_words(data, track.sector_size)

    keep = nonzero > NONZERO_WORD_LIMIT
    logger.info(f"{nonzero} non-zero sample pairs in pregap data: {'Save' if keep else 'Discard'}")
    return keep
