import io

import pytest

from emuident.common.exceptions import (
    PlaylistParseError,
    StreamError,
    TrackNotFoundError,
    TrackSpanError,
)
from emuident.playlist.cue import (
    CandidateTracker,
    iter_cue_files,
    locate_cue_track,
    next_cue_file,
    timestamp_to_offset,
)


def make_bin(path, size):
    path.write_bytes(b"\x00" * size)
    return path


def make_cue(tmp_path, body, name="game.cue"):
    cue = tmp_path / name
    cue.write_bytes(body.encode("latin-1"))
    return cue


SINGLE_TRACK = 'FILE "game.bin" BINARY\n  TRACK 01 MODE1/2352\n    INDEX 01 00:02:00\n'


class TestTimestamp:
    def test_conversion(self):
        assert timestamp_to_offset("00:00:00") == 0
        assert timestamp_to_offset("00:02:00") == 2 * 75 * 2352
        assert timestamp_to_offset("01:00:01") == (60 * 75 + 1) * 2352

    @pytest.mark.parametrize("stamp", ["0:02:00", "00:02", "00:02:00:00", "aa:bb:cc", "00:02:000"])
    def test_rejects_malformed(self, stamp):
        assert timestamp_to_offset(stamp) is None


class TestCandidateTracker:
    def test_resolve_records_best(self, tmp_path):
        t = CandidateTracker()
        t.open(100, 1)
        assert t.resolve(300, tmp_path / "a.bin") is True
        assert t.best.offset == 100
        assert t.best.size == 200
        assert not t.is_open

    def test_equal_size_keeps_first(self, tmp_path):
        t = CandidateTracker()
        t.open(0, 1)
        t.resolve(50, tmp_path / "a.bin")
        t.open(100, 2)
        assert t.resolve(150, tmp_path / "b.bin") is False
        assert t.best.path == tmp_path / "a.bin"
        assert not t.is_open

    def test_resolve_without_candidate(self, tmp_path):
        assert CandidateTracker().resolve(10, tmp_path / "a.bin") is False

    def test_double_open_is_a_bug(self):
        t = CandidateTracker()
        t.open(0, 1)
        with pytest.raises(RuntimeError):
            t.open(10, 2)

    def test_negative_span(self, tmp_path):
        t = CandidateTracker("x.cue")
        t.open(500, 1)
        with pytest.raises(TrackSpanError) as exc_info:
            t.resolve(100, tmp_path / "a.bin")
        assert exc_info.value.start == 500
        assert exc_info.value.end == 100
        assert not t.is_open


class TestLocateCueTrack:
    def test_single_track(self, tmp_path):
        size = 400_000
        make_bin(tmp_path / "game.bin", size)
        cue = make_cue(tmp_path, SINGLE_TRACK)

        track = locate_cue_track(cue, first=True)
        assert track.offset == 352800
        assert track.size == size - 352800
        assert track.path == tmp_path / "game.bin"

    def test_largest_wins_across_files(self, tmp_path):
        make_bin(tmp_path / "small.bin", 10)
        make_bin(tmp_path / "big.bin", 100)
        cue = make_cue(
            tmp_path,
            'FILE "small.bin" BINARY\n  TRACK 01 MODE1/2352\n    INDEX 01 00:00:00\n'
            'FILE "big.bin" BINARY\n  TRACK 02 MODE1/2352\n    INDEX 01 00:00:00\n',
        )

        best = locate_cue_track(cue, first=False)
        assert best.path == tmp_path / "big.bin"
        assert best.size == 100

        first = locate_cue_track(cue, first=True)
        assert first.path == tmp_path / "small.bin"
        assert first.size == 10

    def test_first_follows_file_order(self, tmp_path):
        make_bin(tmp_path / "big.bin", 100)
        make_bin(tmp_path / "small.bin", 10)
        cue = make_cue(
            tmp_path,
            'FILE "big.bin" BINARY\n  TRACK 01 MODE1/2352\n    INDEX 01 00:00:00\n'
            'FILE "small.bin" BINARY\n  TRACK 02 MODE1/2352\n    INDEX 01 00:00:00\n',
        )
        assert locate_cue_track(cue, first=True).path == tmp_path / "big.bin"

    def test_multi_track_single_file(self, tmp_path):
        body = (
            'FILE "disc.bin" BINARY\n'
            "  TRACK 01 MODE1/2352\n    INDEX 01 00:00:00\n"
            "  TRACK 02 AUDIO\n    INDEX 00 00:01:00\n    INDEX 01 00:01:02\n"
            "  TRACK 03 MODE1/2352\n    INDEX 01 00:02:00\n"
        )
        cue = make_cue(tmp_path, body)

        # Track 3 runs from 00:02:00 to the end of a 300-sector file
        make_bin(tmp_path / "disc.bin", 300 * 2352)
        track = locate_cue_track(cue)
        assert (track.offset, track.size) == (352800, 150 * 2352)

        # Shorter file: track 1 (00:00:00 to 00:01:00) is the larger one
        make_bin(tmp_path / "disc.bin", 200 * 2352)
        track = locate_cue_track(cue)
        assert (track.offset, track.size) == (0, 75 * 2352)

    def test_pregap_index_does_not_reopen(self, tmp_path):
        make_bin(tmp_path / "game.bin", 500_000)
        cue = make_cue(
            tmp_path,
            'FILE "game.bin" BINARY\n  TRACK 01 MODE2/2352\n'
            "    INDEX 00 00:00:00\n    INDEX 01 00:02:00\n",
        )
        track = locate_cue_track(cue)
        assert track.offset == 0
        assert track.size == 500_000

    def test_redump_layout_picks_data_file(self, tmp_path):
        make_bin(tmp_path / "Game (Track 1).bin", 50_000)
        make_bin(tmp_path / "Game (Track 2).bin", 90_000)
        make_bin(tmp_path / "Game (Track 3).bin", 30_000)
        cue = make_cue(
            tmp_path,
            'FILE "Game (Track 1).bin" BINARY\n  TRACK 01 MODE2/2352\n    INDEX 01 00:00:00\n'
            'FILE "Game (Track 2).bin" BINARY\n  TRACK 02 AUDIO\n'
            "    INDEX 00 00:00:00\n    INDEX 01 00:02:00\n"
            'FILE "Game (Track 3).bin" BINARY\n  TRACK 03 AUDIO\n    INDEX 01 00:00:00\n',
        )
        track = locate_cue_track(cue)
        assert track.path == tmp_path / "Game (Track 1).bin"
        assert (track.offset, track.size) == (0, 50_000)

    def test_lowercase_directives(self, tmp_path):
        make_bin(tmp_path / "game.bin", 400_000)
        cue = make_cue(tmp_path, 'file "game.bin" binary\n  track 01 mode1/2352\n    index 01 00:02:00\n')
        assert locate_cue_track(cue).offset == 352800

    def test_unknown_directives_are_skipped(self, tmp_path):
        make_bin(tmp_path / "game.bin", 1000)
        cue = make_cue(
            tmp_path,
            'REM GENRE Action\nCATALOG 0000000000000\nFILE "game.bin" BINARY\n'
            "  TRACK 01 MODE1/2352\n    FLAGS DCP\n    INDEX 01 00:00:00\n",
        )
        assert locate_cue_track(cue).size == 1000

    def test_bad_timestamp(self, tmp_path):
        make_bin(tmp_path / "game.bin", 1000)
        cue = make_cue(tmp_path, 'FILE "game.bin" BINARY\n  TRACK 01 MODE1/2352\n    INDEX 01 0:02:00\n')
        with pytest.raises(PlaylistParseError, match="timestamp"):
            locate_cue_track(cue)

    def test_index_without_file(self, tmp_path):
        cue = make_cue(
            tmp_path,
            "TRACK 01 MODE1/2352\nINDEX 01 00:00:00\nTRACK 02 MODE1/2352\nINDEX 01 00:01:00\n",
        )
        with pytest.raises(PlaylistParseError, match="INDEX antes de FILE"):
            locate_cue_track(cue)

    def test_incomplete_directive(self, tmp_path):
        cue = make_cue(tmp_path, 'FILE "game.bin" BINARY\n  TRACK 01')
        with pytest.raises(PlaylistParseError, match="TRACK incompleto"):
            locate_cue_track(cue)

    def test_span_error(self, tmp_path):
        make_bin(tmp_path / "game.bin", 1000)
        cue = make_cue(tmp_path, 'FILE "game.bin" BINARY\n  TRACK 01 MODE1/2352\n    INDEX 01 00:01:00\n')
        with pytest.raises(TrackSpanError):
            locate_cue_track(cue)

    def test_audio_only(self, tmp_path):
        make_bin(tmp_path / "music.bin", 1000)
        cue = make_cue(tmp_path, 'FILE "music.bin" BINARY\n  TRACK 01 AUDIO\n    INDEX 01 00:00:00\n')
        with pytest.raises(TrackNotFoundError):
            locate_cue_track(cue)

    def test_missing_track_file(self, tmp_path):
        cue = make_cue(tmp_path, SINGLE_TRACK)
        with pytest.raises(TrackNotFoundError):
            locate_cue_track(cue)

    def test_missing_cue(self, tmp_path):
        with pytest.raises(StreamError) as exc_info:
            locate_cue_track(tmp_path / "nope.cue")
        assert exc_info.value.errno is not None


class TestNextCueFile:
    BODY = (
        b'FILE "Game (Track 1).bin" BINARY\r\n  TRACK 01 MODE2/2352\r\n    INDEX 01 00:00:00\r\n'
        b'FILE "Game (Track 2).bin" BINARY\r\n  TRACK 02 AUDIO\r\n    INDEX 01 00:00:00\r\n'
    )

    def test_steps_through_files(self, tmp_path):
        cue_path = tmp_path / "Game.cue"
        fp = io.BytesIO(self.BODY)
        assert next_cue_file(fp, cue_path) == tmp_path / "Game (Track 1).bin"
        assert next_cue_file(fp, cue_path) == tmp_path / "Game (Track 2).bin"
        assert next_cue_file(fp, cue_path) is None
        assert not fp.closed

    def test_iter_cue_files(self, tmp_path):
        cue = tmp_path / "Game.cue"
        cue.write_bytes(self.BODY)
        assert list(iter_cue_files(cue)) == [
            tmp_path / "Game (Track 1).bin",
            tmp_path / "Game (Track 2).bin",
        ]
