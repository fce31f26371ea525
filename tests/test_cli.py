"""Tests for the bin2iso command line."""

import pytest

import bin2iso
from cdsplit.error_number import ErrorNumber
from cdsplit.options import GapPolicy

from image_builders import iso_image, audio_run


@pytest.fixture
def disc(tmp_path):
    (tmp_path / "disc.bin").write_bytes(iso_image(20) + audio_run([1000] * 4))
    cue = tmp_path / "disc.cue"
    cue.write_text('FILE "disc.bin" BINARY\n'
                   '  TRACK 01 MODE1/2048\n    INDEX 01 00:00:00\n'
                   '  TRACK 02 AUDIO\n    INDEX 01 00:00:20\n')
    return cue


class TestOptions:
    """Flags map onto conversion options."""

    def options(self, *argv):
        return bin2iso.options_from_args(bin2iso.parse_args(["disc.cue", *argv]))

    def test_defaults(self):
        options = self.options()
        assert options.gap_policy == GapPolicy.Preserve
        assert options.all_post_gaps
        assert not options.no_overburn
        assert options.single_track is None
        assert options.output_dir == "."

    def test_gap_flags(self):
        assert self.options("-n").gap_policy == GapPolicy.Discard
        assert self.options("-a").gap_policy == GapPolicy.Auto
        assert self.options("-n", "-a").gap_policy == GapPolicy.Discard
        assert not self.options("-p").all_post_gaps

    def test_values(self):
        options = self.options("out", "-t", "3", "-b", "-l", "100", "-w", "20")
        assert options.output_dir == "out"
        assert options.single_track == 3
        assert options.no_overburn
        assert (options.rms_threshold, options.min_gap_width) == (100, 20)

    def test_track_and_inplace_conflict(self):
        with pytest.raises(SystemExit) as excinfo:
            bin2iso.parse_args(["disc.cue", "-t", "1", "-i"])
        assert excinfo.value.code == 2


class TestMain:
    """Exit codes and conversion runs through main()."""

    def test_convert(self, disc, tmp_path):
        assert bin2iso.main([str(disc), str(tmp_path / "out")]) == ErrorNumber.NoError
        assert (tmp_path / "out" / "disc-01.iso").exists()
        assert (tmp_path / "out" / "disc-02.wav").exists()

    def test_missing_cue(self, tmp_path):
        assert bin2iso.main([str(tmp_path / "missing.cue")]) == ErrorNumber.CannotOpenFile

    def test_negative_level(self, disc):
        assert bin2iso.main([str(disc), "-l", "-1"]) == ErrorNumber.InvalidArgument

    def test_cue_from_bin(self, tmp_path):
        (tmp_path / "music.bin").write_bytes(audio_run([1000] * 3))
        cue = tmp_path / "music.cue"
        assert bin2iso.main([str(cue), "-c", str(tmp_path / "music.bin")]) == ErrorNumber.NoError
        assert cue.read_text().startswith('FILE "music.bin" BINARY\n')

    def test_cue_from_empty_bin(self, tmp_path):
        (tmp_path / "empty.bin").write_bytes(b"")
        cue = tmp_path / "empty.cue"
        assert bin2iso.main([str(cue), "-c", str(tmp_path / "empty.bin")]) == ErrorNumber.InvalidData
        assert not cue.exists()

    def test_in_place_asks_first(self, disc, tmp_path, monkeypatch):
        monkeypatch.setattr(bin2iso.inquirer, "confirm", lambda *args, **kwargs: False)
        assert bin2iso.main([str(disc), str(tmp_path), "-i"]) == ErrorNumber.NoError
        assert (tmp_path / "disc.bin").exists()
        assert not (tmp_path / "disc-01.iso").exists()

    def test_in_place_with_yes(self, disc, tmp_path):
        assert bin2iso.main([str(disc), str(tmp_path), "-i", "-y"]) == ErrorNumber.NoError
        assert not (tmp_path / "disc.bin").exists()
        assert (tmp_path / "disc-01.iso").stat().st_size == 20 * 2048
        assert (tmp_path / "disc-02.wav").stat().st_size == 44 + 4 * 2352
