"""Unit tests for joining segments into mixes"""

import unittest
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from clipmix.exceptions import Cancelled, ToolFailure
from clipmix.ffprobe import ProbeSession
from clipmix.video.concatenation import (
    build_crossfade_filter, calc_fade_duration, concat_cut,
    concatenate_segments, escape_concat_path
)
from fakes import FakeRunner


class TestFadeDuration(unittest.TestCase):
    def test_fade_is_bounded(self):
        for prev, next_ in [(0.01, 0.01), (0.09, 5), (100, 200), (10, 0.2), (3, 4)]:
            fade = calc_fade_duration(prev, next_)
            self.assertGreaterEqual(fade, 0.05)
            self.assertLessEqual(fade, 0.5)

    def test_fade_values(self):
        self.assertEqual(calc_fade_duration(0.05, 10), 0.05)
        self.assertEqual(calc_fade_duration(1, 2), 0.2)
        self.assertEqual(calc_fade_duration(12, 10), 0.5)


class TestCrossfadeFilter(unittest.TestCase):
    def test_two_segments(self):
        graph, video, audio = build_crossfade_filter([10, 10])
        self.assertEqual(
            graph,
            "[0:v][1:v]xfade=transition=fade:duration=0.5:offset=9.5[v1];"
            "[0:a][1:a]acrossfade=d=0.5[a1]"
        )
        self.assertEqual((video, audio), ("[v1]", "[a1]"))

    def test_chained_offsets(self):
        """Each offset is the running length minus the next fade"""
        graph, video, audio = build_crossfade_filter([10, 10, 10])
        self.assertIn("[v1][2:v]xfade=transition=fade:duration=0.5:offset=19[v2]", graph)
        self.assertIn("[a1][2:a]acrossfade=d=0.5[a2]", graph)
        self.assertEqual((video, audio), ("[v2]", "[a2]"))

    def test_requires_two_segments(self):
        with self.assertRaises(ValueError):
            build_crossfade_filter([10])


class TestConcatList(unittest.TestCase):
    def test_escape_quote(self):
        self.assertEqual(
            escape_concat_path(Path("/tmp/it's here.mp4")),
            "file '/tmp/it'\\''s here.mp4'"
        )


def test_concat_copy_falls_back_to_reencode(tmp_path: Path):
    runner = MagicMock()
    runner.run.side_effect = [ToolFailure("Non-monotonous DTS"), ""]
    lines = []
    segments = [tmp_path / "a.mp4", tmp_path / "b.mp4"]
    output = tmp_path / "mix.mp4"

    concat_cut(runner, segments, output, log_line=lines.append)

    first, second = (call[0][0] for call in runner.run.call_args_list)
    assert "copy" in first
    assert "libx264" in second
    assert lines == ["Concat copy failed, re-encoding: Non-monotonous DTS"]
    assert list(tmp_path.iterdir()) == []


def test_concat_list_contents(tmp_path: Path):
    seen = []

    def record(cmd):
        list_file = Path(cmd[cmd.index("-i") + 1])
        seen.append(list_file.read_text(encoding="utf-8"))
        return ""

    runner = MagicMock()
    runner.run.side_effect = record
    segments = [tmp_path / "a.mp4", tmp_path / "b.mp4"]
    concat_cut(runner, segments, tmp_path / "mix.mp4")

    assert seen == [f"file '{segments[0].as_posix()}'\nfile '{segments[1].as_posix()}'\n"]


def test_concat_does_not_retry_after_cancel(tmp_path: Path):
    runner = MagicMock()
    runner.run.side_effect = Cancelled()
    with pytest.raises(Cancelled):
        concat_cut(runner, [tmp_path / "a.mp4"], tmp_path / "mix.mp4")
    assert runner.run.call_count == 1


def test_concat_reencode_failure_propagates(tmp_path: Path):
    runner = MagicMock()
    runner.run.side_effect = [ToolFailure("bad"), ToolFailure("still bad")]
    with pytest.raises(ToolFailure):
        concat_cut(runner, [tmp_path / "a.mp4"], tmp_path / "mix.mp4")


def test_crossfade_uses_probed_durations(tmp_path: Path):
    runner = FakeRunner(durations={"a.mp4": 10.0, "b.mp4": 1.0})
    session = ProbeSession(runner)
    segments = [tmp_path / "a.mp4", tmp_path / "b.mp4"]
    output = tmp_path / "mixes" / "mix.mp4"

    concatenate_segments(runner, session, segments, output, crossfade=True)

    cmd = runner.ffmpeg_commands()[-1]
    graph = cmd[cmd.index("-filter_complex") + 1]
    assert "duration=0.2:offset=9.8" in graph
    assert output.exists()


def test_crossfade_single_segment_uses_cut(tmp_path: Path):
    runner = FakeRunner()
    concatenate_segments(runner, ProbeSession(runner), [tmp_path / "a.mp4"],
                         tmp_path / "mix.mp4", crossfade=True)
    (cmd,) = runner.ffmpeg_commands()
    assert "-filter_complex" not in cmd
    assert "concat" in cmd


def test_concatenate_nothing():
    with pytest.raises(ValueError):
        concatenate_segments(MagicMock(), MagicMock(), [], Path("/tmp/mix.mp4"))


if __name__ == "__main__":
    unittest.main()
