from typing import Union
from cdsplit.CD.cd_types import SYNC_MARK, SectorLayout

Buffer = Union[bytes, bytearray, memoryview]


class Sector:
    SYNC_MARK = SYNC_MARK

    @staticmethod
    def get_user_data(layout: SectorLayout, sector: Buffer) -> memoryview:
        """
        Strips the leading and trailing metadata of one stored sector and
        returns a view over the user data, no copy is made.
        """
        view = memoryview(sector)
        return view[layout.predata:layout.sector_size - layout.postdata]

    @staticmethod
    def has_sync(buffer: Buffer, offset: int = 0) -> bool:
        return bytes(buffer[offset:offset + 12]) == SYNC_MARK

    @staticmethod
    def header_time(buffer: Buffer, offset: int = 0) -> int:
        # BCD minute/second/frame from the sector header, compared as one number
        return (buffer[offset + 12] << 16) | (buffer[offset + 13] << 8) | buffer[offset + 14]

    @staticmethod
    def header_mode(buffer: Buffer, offset: int = 0) -> int:
        return buffer[offset + 15]
