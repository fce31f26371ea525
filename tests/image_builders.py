"""Builders for small synthetic CD images used across the test modules."""

import struct

from cdsplit.CD.cd_types import SYNC_MARK, RAW_SECTOR_SIZE
from cdsplit.CD.volume import ISO_VOLUME_DESCRIPTOR, UDF_VOLUME_DESCRIPTOR


def raw_sector(mode_byte: int, time: int, fill: int = 0, sector_size: int = RAW_SECTOR_SIZE,
               user_data: bytes = b"") -> bytes:
    """A sector starting with sync + header; user data follows the preamble."""
    header = SYNC_MARK + bytes([(time >> 16) & 0xFF, (time >> 8) & 0xFF, time & 0xFF, mode_byte])
    preamble = header + (bytes(8) if mode_byte == 2 else b"")
    body = user_data + bytes([fill]) * (sector_size - len(preamble) - len(user_data))
    return preamble + body


def iso_descriptor(block_count: int, block_size: int = 2048) -> bytes:
    """A 2048 byte primary volume descriptor."""
    descriptor = bytearray(2048)
    descriptor[0:8] = ISO_VOLUME_DESCRIPTOR
    descriptor[8:40] = b"TEST SYSTEM".ljust(32)
    descriptor[40:72] = b"TEST VOLUME".ljust(32)
    struct.pack_into("<I", descriptor, 80, block_count)
    struct.pack_into(">I", descriptor, 84, block_count)
    struct.pack_into("<H", descriptor, 128, block_size)
    struct.pack_into(">H", descriptor, 130, block_size)
    return bytes(descriptor)


def iso_image(block_count: int, udf: bool = False) -> bytes:
    """A plain 2048 byte/sector image with its descriptor at sector 16."""
    image = bytearray(block_count * 2048)
    if udf:
        image[0x8000:0x8008] = UDF_VOLUME_DESCRIPTOR
    else:
        image[0x8000:0x8800] = iso_descriptor(block_count)
    return bytes(image)


def audio_sector(level: int, subchannel: bytes = b"") -> bytes:
    """One raw audio sector where every 16-bit sample has the given value."""
    return struct.pack("<h", level) * (RAW_SECTOR_SIZE // 2) + subchannel


def audio_run(levels) -> bytes:
    return b"".join(audio_sector(level) for level in levels)


class FakeSource:
    """Stands in for an IFilter over an in-memory image."""

    def __init__(self, data: bytes, filename: str = "image.bin"):
        self.data = data
        self.filename = filename

    @property
    def length(self) -> int:
        return len(self.data)

    def read_at(self, offset: int, size: int) -> bytes:
        return self.data[offset:offset + size]
