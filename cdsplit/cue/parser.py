import os
import re
from typing import Callable, Optional, Dict
from cdsplit.CD.cd_types import TrackMode, MAX_TRACK_NUMBER, mode_from_cue
from cdsplit.CD.msf import parse_msf
from cdsplit.error_number import MalformedLayout, CapacityExceeded, SourceReadError, ErrorNumber
from cdsplit.ifilter import IFilter
from cdsplit.options import ConversionOptions
from .constants import *
from .structs import Track, TrackList, UNSET
import logging

logger = logging.getLogger(__name__)

SourceOpener = Callable[[str], IFilter]

regex_file = re.compile(REGEX_FILE)
regex_track = re.compile(REGEX_TRACK)
regex_index = re.compile(REGEX_INDEX)
regex_ignored = re.compile(REGEX_IGNORED)
regex_audio_subchannel = re.compile(REGEX_AUDIO_SUBCHANNEL)


def parse_file_name(text: str, line_number: int = 0) -> str:
    """
    Extracts the name from the argument part of a FILE directive. Quotes are
    optional, an unquoted name ends at the first space. Anything left of a
    path separator is dropped, since directory references in sheets are
    invalid more often than not. The trailing file type is ignored.
    """
    name = []
    terminator = ' '
    position = 0
    text = text.lstrip(' ')

    while position < len(text) and text[position] != terminator:
        char = text[position]
        if ord(char) < 32:
            pass
        elif char in '/\\':
            name = []
        elif char == '"':
            terminator = '"'
        else:
            name.append(char)
        position += 1

    if terminator == '"' and position >= len(text):
        raise MalformedLayout(f"Unpaired \" in 'FILE' at line {line_number}")
    if not name:
        raise MalformedLayout(f"Empty name for 'FILE' at line {line_number}")
    return ''.join(name)


def parse_track_mode(text: str, number: int, line_number: int) -> tuple:
    """Returns the track mode and the declared sector size for AUDIO/<n> tracks."""
    if text.startswith(AUDIO_SUBCHANNEL_PREFIX):
        match = regex_audio_subchannel.match(text)
        if not match or int(match.group('size')) == 0:
            raise MalformedLayout(f"Track {number:02d} - Bad audio sector size: [{text}] at line {line_number}")
        return TrackMode.AudioWithSubchannel, int(match.group('size'))

    mode = mode_from_cue(text)
    if mode is None:
        raise MalformedLayout(f"Track {number:02d} - Unknown mode: [{text}] at line {line_number}")
    return mode, None


class CueParser:
    MODULE_NAME = "CUE sheet parser"

    def __init__(self, opener: Optional[SourceOpener] = None, options: Optional[ConversionOptions] = None):
        self._opener = opener
        self._options = options or ConversionOptions()
        self._sources: Dict[str, IFilter] = {}
        self.track_list = TrackList(gap_policy=self._options.gap_policy,
                                    all_post_gaps=self._options.all_post_gaps,
                                    no_overburn=self._options.no_overburn)
        self.active_file = ""
        self.current_track: Optional[Track] = None

    def _open_source(self, name: str) -> Optional[IFilter]:
        if self._opener is None:
            return None
        if name not in self._sources:
            self._sources[name] = self._opener(name)
        return self._sources[name]

    def parse(self, text: str) -> TrackList:
        for line_number, line in enumerate(text.splitlines(), 1):
            self.parse_line(line, line_number)

        if not self.track_list.tracks:
            raise MalformedLayout("No TRACKs in cue sheet")
        return self.track_list

    def parse_line(self, line: str, line_number: int = 0):
        line = line.strip()
        if not line:
            return

        match_file = regex_file.match(line)
        match_track = regex_track.match(line)
        match_index = regex_index.match(line)
        match_ignored = regex_ignored.match(line)

        if match_file:
            self.active_file = parse_file_name(match_file.group('rest'), line_number)
            self.current_track = None
            logger.debug(f" Found FILE '{self.active_file}' at line {line_number}")
        elif match_track:
            self._parse_track(match_track, line, line_number)
        elif match_index:
            self._parse_index(match_index, line, line_number)
        elif match_ignored:
            logger.debug(f" Ignoring {match_ignored.group('directive')} at line {line_number}")
        else:
            logger.warning(f"Unrecognised line in CUE: \"{line}\"")

    def _parse_track(self, match, line: str, line_number: int):
        if len(self.track_list) >= MAX_TRACK_NUMBER:
            raise CapacityExceeded(f"Too many tracks at line {line_number}, at most {MAX_TRACK_NUMBER} are supported")
        if not self.active_file:
            raise MalformedLayout(f"TRACK before FILE at line {line_number}")
        if not match.group('number') or not match.group('mode'):
            raise MalformedLayout(f"Malformed TRACK \"{line}\" at line {line_number}")

        number = int(match.group('number'))
        if not 1 <= number <= MAX_TRACK_NUMBER:
            raise MalformedLayout(f"Track number {number} out of range at line {line_number}")
        if self.track_list.tracks and number <= self.track_list.tracks[-1].number:
            raise MalformedLayout(f"Track number {number} does not follow track "
                                  f"{self.track_list.tracks[-1].number} at line {line_number}")

        mode, sector_size = parse_track_mode(match.group('mode'), number, line_number)
        track = Track.create(number, mode, self.active_file, sector_size, self._open_source(self.active_file))
        self.track_list.append(track)
        self.current_track = track
        logger.debug(f" Found TRACK {number:02d} {match.group('mode')} at line {line_number}")

    def _parse_index(self, match, line: str, line_number: int):
        track = self.current_track
        if track is None:
            raise MalformedLayout(f"INDEX without TRACK at line {line_number}")
        if not match.group('index') or not match.group('address'):
            raise MalformedLayout(f"Malformed INDEX \"{line}\" at line {line_number}")

        index = int(match.group('index'))
        if index >= 2:
            raise MalformedLayout(f"Unexpected INDEX number: {match.group('index')} at line {line_number}")

        try:
            sector = parse_msf(match.group('address'))
        except ValueError as ex:
            raise MalformedLayout(f"{ex} at line {line_number}") from ex

        if index == 0:
            if not track.is_audio:
                raise MalformedLayout(f"Index 0 pregap defined on non-audio track {track.number}")
            track.pregap_start = sector
            if track.data_start == UNSET:
                track.data_start = sector
        else:
            track.data_start = sector
            if track.pregap_start == UNSET:
                track.pregap_start = sector
        logger.debug(f" Found INDEX {index:02d} {match.group('address')} (sector {sector}) at line {line_number}")


def parse_cue_sheet(text: str, opener: Optional[SourceOpener] = None,
                    options: Optional[ConversionOptions] = None) -> TrackList:
    return CueParser(opener, options).parse(text)


def read_cue_sheet(cue_path: str, options: Optional[ConversionOptions] = None) -> TrackList:
    """
    Parses a sheet from disk, resolving FILE names next to the sheet itself.
    """
    options = options or ConversionOptions()
    try:
        with open(cue_path, 'rb') as cue_stream:
            cue_content = cue_stream.read().decode('utf-8', errors='replace')
    except OSError as ex:
        raise SourceReadError(f"Unable to open \"{cue_path}\": {ex}", ErrorNumber.CannotOpenFile) from ex

    cue_directory = os.path.dirname(cue_path)
    return parse_cue_sheet(cue_content,
                           lambda name: IFilter.open_caseless(cue_directory, name, options.in_place),
                           options)
