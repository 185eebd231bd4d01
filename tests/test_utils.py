"""Unit tests for file helpers and dependency lookup"""

import unittest
from pathlib import Path
from unittest.mock import patch

import pytest

from clipmix.config import FFMPEG, FFPROBE
from clipmix.context import RunContext
from clipmix.exceptions import ClipmixError, DependencyError
from clipmix.runner import ToolRunner
from clipmix.utils import (
    base_name, check_dependencies, discover_videos, move_processed,
    resolve_tool, resolve_tools, scoped_directory, unique_name
)


def test_discover_videos_filters_and_sorts(tmp_path: Path):
    for name in ("b.mkv", "A.MP4", "c.avi", "d.mov", "e.webm", "notes.txt"):
        (tmp_path / name).touch()
    (tmp_path / "nested.mp4").mkdir()

    assert [p.name for p in discover_videos(tmp_path)] == ["A.MP4", "b.mkv", "c.avi", "d.mov"]


def test_move_processed_replaces_existing(tmp_path: Path):
    source = tmp_path / "clip.mp4"
    source.write_text("new")
    processed = tmp_path / "processed"
    processed.mkdir()
    (processed / "clip.mp4").write_text("old")

    destination = move_processed(source, processed)

    assert destination == processed / "clip.mp4"
    assert destination.read_text() == "new"
    assert not source.exists()


def test_scoped_directory_removed_on_error(tmp_path: Path):
    work = tmp_path / "work" / "clip"
    with pytest.raises(RuntimeError):
        with scoped_directory(work) as path:
            (path / "scene_1.mp4").touch()
            raise RuntimeError("boom")
    assert not work.exists()


class TestUtils(unittest.TestCase):
    def test_base_name_strips_safe_suffix(self):
        self.assertEqual(base_name(Path("/in/holiday_safe.mp4")), "holiday")
        self.assertEqual(base_name(Path("/in/holiday.mov")), "holiday")

    @patch("clipmix.utils.shutil.which", return_value="/usr/bin/ffmpeg")
    def test_resolve_tool_from_path(self, mock_which):
        self.assertEqual(resolve_tool("ffmpeg-test-binary"), "/usr/bin/ffmpeg")

    @patch("clipmix.utils.shutil.which", return_value=None)
    def test_resolve_tool_missing(self, mock_which):
        with self.assertRaises(DependencyError):
            resolve_tool("ffmpeg-test-binary")

    @patch("clipmix.utils.resolve_tool", side_effect=DependencyError("missing"))
    def test_check_dependencies(self, mock_resolve):
        self.assertFalse(check_dependencies())

    def test_error_rendering(self):
        error = ClipmixError("Something failed", module="segmentation")
        self.assertEqual(str(error), "[segmentation] Something failed")
        self.assertEqual(ClipmixError("x").module, "unknown")


if __name__ == "__main__":
    unittest.main()


def test_tools_folder_binaries_are_used(tmp_path: Path):
    """A tools/ folder holding the only ffmpeg/ffprobe is found and actually run"""
    for tool in (FFMPEG, FFPROBE):
        (tmp_path / tool).write_text("")

    with patch("clipmix.utils.TOOLS_DIR", tmp_path), \
            patch("clipmix.utils.shutil.which", return_value=None):
        assert check_dependencies()
        tools = resolve_tools()

    assert tools == {FFMPEG: str(tmp_path / FFMPEG), FFPROBE: str(tmp_path / FFPROBE)}

    runner = ToolRunner(RunContext(poll_interval=0.01), tools=tools)
    with patch("clipmix.runner.subprocess.Popen") as mock_popen:
        process = mock_popen.return_value
        process.communicate.return_value = ("12.0\n", "")
        process.returncode = 0
        assert runner.run([FFPROBE, "-v", "error", "in.mp4"]) == "12.0\n"
    assert mock_popen.call_args[0][0][0] == str(tmp_path / FFPROBE)


def test_unique_name_numbers_repeats():
    taken = set()
    assert [unique_name("clip", taken) for _ in range(3)] == ["clip", "clip_2", "clip_3"]
    assert unique_name("other", taken) == "other"
