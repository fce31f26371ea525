from typing import List
from cdsplit.CD.cd_types import cue_mode_name
from cdsplit.CD.msf import format_msf
from .structs import TrackList


def export_cue(track_list: TrackList) -> str:
    """
    Renders a track list in the sheet grammar the parser reads back, one
    FILE block per run of tracks sharing a source file.
    """
    lines: List[str] = []
    active_file = None

    for track in track_list:
        if track.source_file_name != active_file:
            active_file = track.source_file_name
            lines.append(f"FILE \"{active_file}\" BINARY")

        lines.append(f"  TRACK {track.number:02d} {cue_mode_name(track.mode, track.sector_size)}")
        pregap_start = max(track.pregap_start, 0)
        data_start = max(track.data_start, 0)
        if track.is_audio and pregap_start < data_start:
            lines.append(f"    INDEX 00 {format_msf(pregap_start)}")
        lines.append(f"    INDEX 01 {format_msf(data_start)}")

    return '\n'.join(lines) + '\n'
