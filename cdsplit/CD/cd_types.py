from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Optional

# Physical CD sector, and one frame of 44.1kHz 16-bit stereo audio
RAW_SECTOR_SIZE = 2352
FRAMES_PER_SECOND = 75
SECONDS_PER_MINUTE = 60

# got this from easycd pro by looking at a blank disk so it may be off
CD74_MAX_SECTORS = 334873

MAX_TRACK_NUMBER = 99
TRACK_LIST_CAPACITY = 100

SYNC_MARK = b'\x00\xFF\xFF\xFF\xFF\xFF\xFF\xFF\xFF\xFF\xFF\x00'


class TrackMode(IntEnum):
    Audio = 0
    AudioWithSubchannel = 10
    Mode1_2352 = 20
    Mode1_2048 = 30
    Mode1_2448 = 40
    Mode2_2352 = 50
    Mode2_2336 = 60
    Mode2_2448 = 70

    @property
    def is_audio(self) -> bool:
        return self in (TrackMode.Audio, TrackMode.AudioWithSubchannel)

    @property
    def extension(self) -> str:
        return '.wav' if self.is_audio else '.iso'


@dataclass(frozen=True)
class SectorLayout:
    sector_size: int
    """Bytes per sector as stored in the image"""

    predata: int = 0
    """Sync, header and subheader bytes ahead of the user data"""

    postdata: int = 0
    """EDC/ECC or subchannel bytes after the user data"""

    @property
    def payload_size(self) -> int:
        return self.sector_size - self.predata - self.postdata


# Mode2/2336 images drop the 16 sync+header bytes of the physical sector, so its
# predata only covers the 8 byte subheader.
SECTOR_LAYOUTS: Dict[TrackMode, SectorLayout] = {
    TrackMode.Audio:               SectorLayout(2352),
    TrackMode.AudioWithSubchannel: SectorLayout(2448, 0, 96),
    TrackMode.Mode1_2352:          SectorLayout(2352, 16, 288),
    TrackMode.Mode1_2048:          SectorLayout(2048),
    TrackMode.Mode1_2448:          SectorLayout(2448, 16, 384),
    TrackMode.Mode2_2352:          SectorLayout(2352, 24, 280),
    TrackMode.Mode2_2336:          SectorLayout(2336, 8, 280),
    TrackMode.Mode2_2448:          SectorLayout(2448, 24, 376),
}

CUE_MODE_NAMES: Dict[str, TrackMode] = {
    'AUDIO': TrackMode.Audio,
    'MODE1/2352': TrackMode.Mode1_2352,
    'MODE1/2048': TrackMode.Mode1_2048,
    'MODE1/2448': TrackMode.Mode1_2448,
    'MODE2/2352': TrackMode.Mode2_2352,
    'MODE2/2336': TrackMode.Mode2_2336,
    'MODE2/2448': TrackMode.Mode2_2448,
}

DESCRIPTIONS: Dict[TrackMode, str] = {
    TrackMode.Audio: 'Audio',
    TrackMode.AudioWithSubchannel: 'Audio with subchannel data',
    TrackMode.Mode1_2352: 'Mode1/2352',
    TrackMode.Mode1_2048: 'Mode1/2048',
    TrackMode.Mode1_2448: 'Mode1/2448',
    TrackMode.Mode2_2352: 'Mode2/2352',
    TrackMode.Mode2_2336: 'Mode2/2336',
    TrackMode.Mode2_2448: 'Mode2/2448',
}


def audio_subchannel_layout(sector_size: int) -> SectorLayout:
    """
    Layout for an AUDIO/<n> track. Anything past the raw 2352 bytes is
    subchannel data appended to each sample frame.
    """
    if sector_size <= 0:
        raise ValueError(f"Invalid audio sector size {sector_size}")
    return SectorLayout(sector_size, 0, max(0, sector_size - RAW_SECTOR_SIZE))


def sector_layout(mode: TrackMode, sector_size: Optional[int] = None) -> SectorLayout:
    if mode == TrackMode.AudioWithSubchannel and sector_size is not None:
        return audio_subchannel_layout(sector_size)
    return SECTOR_LAYOUTS[mode]


def mode_from_cue(text: str) -> Optional[TrackMode]:
    return CUE_MODE_NAMES.get(text)


def cue_mode_name(mode: TrackMode, sector_size: int) -> str:
    if mode == TrackMode.AudioWithSubchannel:
        return f"AUDIO/{sector_size}"
    return next(name for name, value in CUE_MODE_NAMES.items() if value == mode)


def enum_name(enum_class, value) -> str:
    try:
        return enum_class(value).name
    except ValueError:
        return f"Unknown({value})"
