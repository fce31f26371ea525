import struct
from dataclasses import dataclass
from typing import Optional
import logging

logger = logging.getLogger(__name__)

ISO_VOLUME_DESCRIPTOR = b'\x01CD001\x01\x00'  # CDs
UDF_VOLUME_DESCRIPTOR = b'\x00BEA01\x01\x00'  # DVDs

# The primary volume descriptor sits at sector 16 of the user data
ISO_DESCRIPTOR_OFFSET = 0x8000


@dataclass
class PrimaryVolumeDescriptor:
    system_id: str = ""
    """Bytes 8 to 39"""

    volume_id: str = ""
    """Bytes 40 to 71"""

    volume_block_count: int = 0
    """Bytes 80 to 83, little endian half of the both-endian field"""

    logical_block_size: int = 0
    """Bytes 128 to 129, little endian half of the both-endian field"""


class VolumeDescriptor:
    MODULE_NAME = "ISO9660 volume descriptor decoder"

    @staticmethod
    def decode(buffer: bytes, offset: int = 0) -> Optional[PrimaryVolumeDescriptor]:
        header = bytes(buffer[offset:offset + 132])
        if len(header) < 132 or header[:8] != ISO_VOLUME_DESCRIPTOR:
            return None

        decoded = PrimaryVolumeDescriptor()
        decoded.system_id = header[8:40].decode('ascii', errors='replace').rstrip()
        decoded.volume_id = header[40:72].decode('ascii', errors='replace').rstrip()
        decoded.volume_block_count = struct.unpack_from('<I', header, 80)[0]
        decoded.logical_block_size = struct.unpack_from('<H', header, 128)[0]

        logger.info(f"(System ID: {decoded.system_id})")
        logger.info(f"(Volume ID: {decoded.volume_id})")
        logger.info(f"(ISO track size: {decoded.volume_block_count} blocks * {decoded.logical_block_size} bytes)")
        if decoded.logical_block_size != 2048:
            logger.warning("Unexpected block size, probably wrong")
        return decoded

    @staticmethod
    def block_count(buffer: bytes, offset: int = 0) -> int:
        descriptor = VolumeDescriptor.decode(buffer, offset)
        return descriptor.volume_block_count if descriptor else 0

    @staticmethod
    def is_udf(buffer: bytes, offset: int = 0) -> bool:
        return bytes(buffer[offset:offset + 8]) == UDF_VOLUME_DESCRIPTOR
