"""Tests for identifying the leading track of a bare image."""

import io
import logging

from cdsplit.CD.cd_types import TrackMode, RAW_SECTOR_SIZE
from cdsplit.CD.volume import VolumeDescriptor, ISO_DESCRIPTOR_OFFSET
from cdsplit.analysis.identify import analyse_track, MODE2_2336_DESCRIPTOR_OFFSET

from image_builders import raw_sector, iso_descriptor, iso_image, audio_run


def synced_image(mode_byte, count, sector_size=RAW_SECTOR_SIZE):
    return b"".join(raw_sector(mode_byte, 0x000200 + i, sector_size=sector_size) for i in range(count))


class TestSyncedTracks:
    """Images that store full sectors with sync patterns."""

    def test_mode1_2352(self):
        stream = io.BytesIO(synced_image(1, 2))
        analysis = analyse_track(stream)
        assert analysis.mode == TrackMode.Mode1_2352
        assert analysis.sector_size == 2352
        assert analysis.sectors == 2
        assert analysis.subchannel_bytes == 0
        assert stream.tell() == 2 * 2352

    def test_mode2_2352_followed_by_audio(self):
        stream = io.BytesIO(synced_image(2, 3) + audio_run([1000] * 4))
        analysis = analyse_track(stream)
        assert analysis.mode == TrackMode.Mode2_2352
        assert analysis.sectors == 3
        assert stream.tell() == 3 * 2352

    def test_iso_descriptor_gives_track_length(self):
        sectors = [raw_sector(1, 0x000200 + i) for i in range(20)]
        sectors[16] = raw_sector(1, 0x000200 + 16, user_data=iso_descriptor(18))
        # Two trailing sectors with only the sync pattern belong to the data track
        stream = io.BytesIO(b"".join(sectors) + audio_run([1000] * 2))
        analysis = analyse_track(stream)
        assert analysis.sectors == 20
        assert stream.tell() == 20 * 2352

    def test_sector_with_subchannel(self):
        stream = io.BytesIO(synced_image(1, 2, sector_size=2448))
        analysis = analyse_track(stream)
        assert analysis.mode == TrackMode.Mode1_2448
        assert analysis.sector_size == 2448
        assert analysis.subchannel_bytes == 96

    def test_unsupported_sector_size_is_audio(self, caplog):
        stream = io.BytesIO(synced_image(1, 2, sector_size=2064))
        with caplog.at_level(logging.WARNING):
            analysis = analyse_track(stream)
        assert "not supported" in caplog.text
        assert analysis.mode == TrackMode.Audio
        assert analysis.sectors == 0
        assert stream.tell() == 0

    def test_single_synced_sector_is_unrecognised(self, caplog):
        stream = io.BytesIO(synced_image(1, 1))
        with caplog.at_level(logging.WARNING):
            analysis = analyse_track(stream)
        assert "failed to recognise sector size" in caplog.text
        assert analysis.sectors == 0
        assert stream.tell() == 0


class TestUnsyncedTracks:
    """Images holding bare user data, or audio."""

    def test_iso_2048(self):
        stream = io.BytesIO(iso_image(20))
        analysis = analyse_track(stream)
        assert analysis.mode == TrackMode.Mode1_2048
        assert analysis.sector_size == 2048
        assert analysis.sectors == 20
        assert stream.tell() == 20 * 2048

    def test_iso_end_is_aligned_to_audio(self):
        stream = io.BytesIO(iso_image(20) + bytes(2048) + audio_run([1000] * 3))
        analysis = analyse_track(stream)
        assert analysis.sectors == 21
        assert stream.tell() == 21 * 2048

    def test_unalignable_end_is_a_warning(self, caplog):
        stream = io.BytesIO(iso_image(20) + bytes(100))
        with caplog.at_level(logging.WARNING):
            analysis = analyse_track(stream)
        assert "Failed to align" in caplog.text
        assert analysis.sectors == 20

    def test_mode2_2336(self):
        image = bytearray(20 * 2336)
        image[MODE2_2336_DESCRIPTOR_OFFSET:MODE2_2336_DESCRIPTOR_OFFSET + 2048] = iso_descriptor(20)
        stream = io.BytesIO(bytes(image))
        analysis = analyse_track(stream)
        assert analysis.mode == TrackMode.Mode2_2336
        assert analysis.sectors == 20
        assert stream.tell() == 20 * 2336

    def test_udf_uses_whole_file(self):
        stream = io.BytesIO(iso_image(24, udf=True))
        analysis = analyse_track(stream)
        assert analysis.mode == TrackMode.Mode1_2048
        assert analysis.sectors == 24

    def test_audio(self):
        stream = io.BytesIO(audio_run([0, 1000, 1000]))
        analysis = analyse_track(stream)
        assert analysis.mode == TrackMode.Audio
        assert analysis.sectors == 0
        assert stream.tell() == 0

    def test_analysis_starts_at_stream_position(self):
        stream = io.BytesIO(bytes(44) + audio_run([1000] * 2))
        stream.seek(44)
        analysis = analyse_track(stream)
        assert analysis.sectors == 0
        assert stream.tell() == 44


class TestVolumeDescriptor:
    """ISO 9660 primary volume descriptor fields."""

    def test_decode(self):
        descriptor = VolumeDescriptor.decode(iso_image(30), ISO_DESCRIPTOR_OFFSET)
        assert descriptor.volume_block_count == 30
        assert descriptor.logical_block_size == 2048
        assert descriptor.volume_id == "TEST VOLUME"

    def test_missing(self):
        assert VolumeDescriptor.decode(bytes(0x9000), ISO_DESCRIPTOR_OFFSET) is None
        assert VolumeDescriptor.block_count(bytes(10), ISO_DESCRIPTOR_OFFSET) == 0
