import io
import os
import struct
from cdsplit.CD.cd_types import DESCRIPTIONS
from cdsplit.CD.sector import Sector
from cdsplit.cue.structs import Track
from cdsplit.error_number import ErrorNumber, ImageError, SourceReadError
import logging

logger = logging.getLogger(__name__)

INBUF_SIZE = 4 * 1024 * 1024

# RIFF/WAVE header for 44.1kHz 16-bit stereo PCM
WAV_HEADER = struct.Struct('<4sI4s4sIHHIIHH4sI')
WAV_FORMAT_PCM = 1
WAV_CHANNELS = 2
WAV_SAMPLE_RATE = 44100
WAV_BITS_PER_SAMPLE = 16
WAV_BLOCK_ALIGN = WAV_CHANNELS * WAV_BITS_PER_SAMPLE // 8
WAV_BYTE_RATE = WAV_SAMPLE_RATE * WAV_BLOCK_ALIGN


def wav_header(data_bytes: int) -> bytes:
    # RIFF size counts everything after its own field: 36 header bytes plus the data
    return WAV_HEADER.pack(b'RIFF', data_bytes + WAV_HEADER.size - 8, b'WAVE',
                           b'fmt ', 16, WAV_FORMAT_PCM, WAV_CHANNELS, WAV_SAMPLE_RATE, WAV_BYTE_RATE,
                           WAV_BLOCK_ALIGN, WAV_BITS_PER_SAMPLE,
                           b'data', data_bytes)


def write_track(track: Track, output_dir: str = '.') -> str:
    """
    Extracts the user data of one resolved track into <output_dir>/<output_name>.
    Audio gets a WAV header. A source that ends early is padded with zeros so
    the output always holds total_sectors sectors.
    """
    if track.source is None:
        raise SourceReadError(f"Track {track.number} has no source file")

    path = os.path.join(output_dir, track.output_name)
    logger.info(f"Writing {path} ({DESCRIPTIONS[track.mode]}, {track.total_sectors} sectors)")

    layout = track.layout
    sector_size = track.sector_size
    chunk_sectors = max(1, INBUF_SIZE // sector_size)
    stream = track.source.get_data_fork_stream()

    try:
        output = open(path, 'wb')
    except OSError as ex:
        raise ImageError(f"Unable to create \"{path}\": {ex}", ErrorNumber.CannotOpenFile) from ex

    with output:
        if track.is_audio:
            output.write(wav_header(track.total_sectors * track.payload_size))

        try:
            stream.seek(track.start_offset, io.SEEK_SET)
        except OSError as ex:
            raise SourceReadError(f"Could not seek to track {track.number} location: {ex}") from ex

        remaining = track.total_sectors
        premature_eof = False
        while remaining:
            count = min(remaining, chunk_sectors)
            wanted = count * sector_size
            try:
                buffer = stream.read(wanted) if not premature_eof else b''
            except OSError as ex:
                raise SourceReadError(f"Read error in track {track.number}: {ex}") from ex

            if len(buffer) < wanted:
                if not premature_eof:
                    logger.warning(f"Premature EOF in {track.source.filename}, "
                                   f"padding track {track.number} with zeros")
                    premature_eof = True
                buffer += bytes(wanted - len(buffer))

            if layout.predata == 0 and layout.postdata == 0:
                output.write(buffer)
            else:
                view = memoryview(buffer)
                output.write(b''.join(Sector.get_user_data(layout, view[i * sector_size:(i + 1) * sector_size])
                                      for i in range(count)))
            remaining -= count

    logger.debug(f" Wrote {track.total_sectors * track.payload_size} bytes to {path}")
    return path


def truncate_source(track: Track):
    """
    Cuts the source file down to the track's truncation point, releasing the
    space of everything that has already been extracted.
    """
    point = track.truncation_point
    logger.info(f"Truncating {track.source.filename} to {point} bytes")
    stream = track.source.get_data_fork_stream()
    try:
        stream.flush()
        stream.truncate(point)
    except OSError as ex:
        raise SourceReadError(f"Unable to truncate \"{track.source.filename}\": {ex}") from ex
