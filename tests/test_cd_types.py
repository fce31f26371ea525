"""Tests for the sector mode table, time indexes and sector level helpers."""

import pytest

from cdsplit.CD.cd_types import (
    TrackMode, SECTOR_LAYOUTS, RAW_SECTOR_SIZE, sector_layout, audio_subchannel_layout,
    mode_from_cue, cue_mode_name, enum_name,
)
from cdsplit.CD.msf import msf_to_sector, sector_to_msf, format_msf, parse_msf
from cdsplit.CD.sector import Sector

from image_builders import raw_sector


class TestSectorModeTable:
    """Every mode splits its stored sector into predata, user data and postdata."""

    @pytest.mark.parametrize("mode", list(TrackMode))
    def test_layout_adds_up(self, mode):
        layout = sector_layout(mode)
        assert layout.predata + layout.payload_size + layout.postdata == layout.sector_size

    @pytest.mark.parametrize("mode, size, predata, postdata", [
        (TrackMode.Audio, 2352, 0, 0),
        (TrackMode.Mode1_2352, 2352, 16, 288),
        (TrackMode.Mode1_2048, 2048, 0, 0),
        (TrackMode.Mode1_2448, 2448, 16, 384),
        (TrackMode.Mode2_2352, 2352, 24, 280),
        (TrackMode.Mode2_2336, 2336, 8, 280),
        (TrackMode.Mode2_2448, 2448, 24, 376),
    ])
    def test_known_layouts(self, mode, size, predata, postdata):
        layout = SECTOR_LAYOUTS[mode]
        assert (layout.sector_size, layout.predata, layout.postdata) == (size, predata, postdata)

    def test_data_modes_carry_2048_or_2336_bytes(self):
        assert sector_layout(TrackMode.Mode1_2352).payload_size == 2048
        assert sector_layout(TrackMode.Mode2_2448).payload_size == 2048
        assert sector_layout(TrackMode.Mode2_2336).payload_size == 2048

    def test_audio_with_subchannel_keeps_raw_samples(self):
        layout = audio_subchannel_layout(2448)
        assert layout.predata == 0
        assert layout.postdata == 96
        assert layout.payload_size == RAW_SECTOR_SIZE

    def test_audio_with_subchannel_rejects_zero_size(self):
        with pytest.raises(ValueError):
            audio_subchannel_layout(0)

    def test_mode_names(self):
        assert mode_from_cue("MODE2/2336") == TrackMode.Mode2_2336
        assert mode_from_cue("MODE3/2352") is None
        assert cue_mode_name(TrackMode.Mode1_2048, 2048) == "MODE1/2048"
        assert cue_mode_name(TrackMode.AudioWithSubchannel, 2448) == "AUDIO/2448"

    def test_extensions(self):
        assert TrackMode.Audio.extension == ".wav"
        assert TrackMode.AudioWithSubchannel.extension == ".wav"
        assert TrackMode.Mode2_2352.extension == ".iso"

    def test_enum_name(self):
        assert enum_name(TrackMode, 30) == "Mode1_2048"
        assert enum_name(TrackMode, 31) == "Unknown(31)"


class TestTimeIndex:
    """mm:ss:ff time indexes and sector numbers."""

    def test_conversion(self):
        assert msf_to_sector(0, 2, 0) == 150
        assert msf_to_sector(74, 24, 73) == (74 * 60 + 24) * 75 + 73
        assert parse_msf("01:02:03") == (62 * 75) + 3

    @pytest.mark.parametrize("sector", [0, 1, 74, 75, 4499, 4500, 334873])
    def test_format_and_parse_are_inverse(self, sector):
        assert parse_msf(format_msf(sector)) == sector
        minutes, seconds, frames = sector_to_msf(sector)
        assert msf_to_sector(minutes, seconds, frames) == sector

    def test_format_pads_fields(self):
        assert format_msf(150) == "00:02:00"

    @pytest.mark.parametrize("text", ["00:60:00", "00:00:75", "1:2", "aa:bb:cc", ""])
    def test_invalid_time_index(self, text):
        with pytest.raises(ValueError):
            parse_msf(text)


class TestSectorDemux:
    """User data extraction for every sector layout."""

    @pytest.mark.parametrize("mode", list(TrackMode))
    def test_user_data_is_the_middle_of_the_sector(self, mode):
        layout = sector_layout(mode)
        sector = bytes(i % 251 for i in range(layout.sector_size))
        user_data = Sector.get_user_data(layout, sector)
        assert len(user_data) == layout.payload_size
        assert bytes(user_data) == sector[layout.predata:layout.sector_size - layout.postdata]

    def test_header_fields(self):
        sector = raw_sector(2, 0x000215)
        assert Sector.has_sync(sector)
        assert Sector.header_time(sector) == 0x000215
        assert Sector.header_mode(sector) == 2

    def test_no_sync_in_silence(self):
        assert not Sector.has_sync(bytes(RAW_SECTOR_SIZE))
