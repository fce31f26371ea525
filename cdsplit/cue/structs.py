import os
from dataclasses import dataclass, field
from typing import List, Optional, Iterator
from cdsplit.CD.cd_types import (
    TrackMode, SectorLayout, sector_layout, TRACK_LIST_CAPACITY
)
from cdsplit.error_number import CapacityExceeded
from cdsplit.ifilter import IFilter
from cdsplit.options import GapPolicy

UNSET = -1


def output_name(source_file_name: str, number: int, mode: TrackMode) -> str:
    # <source file without extension>-<track number>.<wav or iso>
    base, _ = os.path.splitext(source_file_name)
    return f"{base}-{number:02d}{mode.extension}"


@dataclass
class Track:
    number: int = 0
    mode: TrackMode = TrackMode.Audio
    source_file_name: str = ""
    pregap_start: int = UNSET
    """Sector index of INDEX 00 within the source file"""

    data_start: int = UNSET
    """Sector index of INDEX 01 within the source file"""

    start_offset: int = 0
    """Byte offset of the first extracted sector, set by geometry resolution"""

    total_sectors: int = 0
    sector_size: int = 2352
    predata: int = 0
    postdata: int = 0
    output_name: str = ""
    source: Optional[IFilter] = field(default=None, repr=False, compare=False)

    @classmethod
    def create(cls, number: int, mode: TrackMode, source_file_name: str,
               sector_size: Optional[int] = None, source: Optional[IFilter] = None) -> 'Track':
        layout = sector_layout(mode, sector_size)
        return cls(number=number,
                   mode=mode,
                   source_file_name=source_file_name,
                   sector_size=layout.sector_size,
                   predata=layout.predata,
                   postdata=layout.postdata,
                   output_name=output_name(source_file_name, number, mode),
                   source=source)

    @property
    def layout(self) -> SectorLayout:
        return SectorLayout(self.sector_size, self.predata, self.postdata)

    @property
    def payload_size(self) -> int:
        return self.sector_size - self.predata - self.postdata

    @property
    def is_audio(self) -> bool:
        return self.mode.is_audio

    @property
    def pregap_frames(self) -> int:
        return self.data_start - self.pregap_start

    @property
    def byte_length(self) -> int:
        return self.total_sectors * self.sector_size

    @property
    def end_offset(self) -> int:
        return self.start_offset + self.byte_length

    @property
    def truncation_point(self) -> int:
        """
        Once this track has been extracted, nothing at or past this offset of
        the source is needed by the tracks still to be processed.
        """
        return self.start_offset


@dataclass
class TrackList:
    tracks: List[Track] = field(default_factory=list)
    gap_policy: GapPolicy = GapPolicy.Preserve
    all_post_gaps: bool = False
    no_overburn: bool = False
    capacity: int = TRACK_LIST_CAPACITY

    def append(self, track: Track):
        if len(self.tracks) >= self.capacity:
            raise CapacityExceeded(f"Too many tracks, at most {self.capacity} are supported")
        self.tracks.append(track)

    def source_names(self) -> List[str]:
        names = []
        for track in self.tracks:
            if track.source_file_name not in names:
                names.append(track.source_file_name)
        return names

    def __iter__(self) -> Iterator[Track]:
        return iter(self.tracks)

    def __len__(self) -> int:
        return len(self.tracks)

    def __getitem__(self, index: int) -> Track:
        return self.tracks[index]
