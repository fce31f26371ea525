import re
from typing import Tuple
from cdsplit.CD.cd_types import FRAMES_PER_SECOND, SECONDS_PER_MINUTE

REGEX_MSF = r'^(?P<min>\d+):(?P<sec>\d+):(?P<frame>\d+)$'

_msf_pattern = re.compile(REGEX_MSF)


def msf_to_sector(minutes: int, seconds: int, frames: int) -> int:
    return (minutes * SECONDS_PER_MINUTE + seconds) * FRAMES_PER_SECOND + frames


def sector_to_msf(sector: int) -> Tuple[int, int, int]:
    return (sector // FRAMES_PER_SECOND // SECONDS_PER_MINUTE,
            (sector // FRAMES_PER_SECOND) % SECONDS_PER_MINUTE,
            sector % FRAMES_PER_SECOND)


def format_msf(sector: int) -> str:
    minutes, seconds, frames = sector_to_msf(sector)
    return f"{minutes:02d}:{seconds:02d}:{frames:02d}"


def parse_msf(text: str) -> int:
    """
    Converts a mm:ss:ff time index to an absolute sector index.
    Raises ValueError for anything that isn't a valid time index.
    """
    match = _msf_pattern.match(text.strip())
    if not match:
        raise ValueError(f"Invalid time index '{text}'")
    minutes, seconds, frames = (int(match.group(g)) for g in ('min', 'sec', 'frame'))
    if seconds >= SECONDS_PER_MINUTE or frames >= FRAMES_PER_SECOND:
        raise ValueError(f"Time index '{text}' out of range")
    return msf_to_sector(minutes, seconds, frames)
