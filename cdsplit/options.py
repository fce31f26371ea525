from dataclasses import dataclass
from enum import Enum
from typing import Optional


class GapPolicy(Enum):
    Discard = 'discard'
    Auto = 'auto'
    Preserve = 'preserve'


DEFAULT_RMS_THRESHOLD = 80
DEFAULT_MIN_GAP_WIDTH = 48  # 0.64 seconds


@dataclass
class ConversionOptions:
    gap_policy: GapPolicy = GapPolicy.Preserve
    """What happens to the INDEX 00 to INDEX 01 range of a track"""

    all_post_gaps: bool = False
    """Kept pregaps are appended to the previous audio track instead"""

    no_overburn: bool = False
    """Move data past the 74 minute mark into its own output"""

    single_track: Optional[int] = None
    """Only write the track with this number"""

    rms_threshold: int = DEFAULT_RMS_THRESHOLD
    """Sectors with RMS at or below this level may belong to a track gap"""

    min_gap_width: int = DEFAULT_MIN_GAP_WIDTH
    """Quiet sectors needed in a row before a track split is made"""

    in_place: bool = False
    """Truncate the source image after each track has been written"""

    output_dir: str = "."

    def __post_init__(self):
        if not isinstance(self.gap_policy, GapPolicy):
            self.gap_policy = GapPolicy(self.gap_policy)
        if self.rms_threshold < 0:
            raise ValueError(f"RMS threshold must not be negative: {self.rms_threshold}")
        if self.min_gap_width < 0:
            raise ValueError(f"Gap width must not be negative: {self.min_gap_width}")
        if self.in_place and self.single_track is not None:
            raise ValueError("Can't extract a single track in place")
