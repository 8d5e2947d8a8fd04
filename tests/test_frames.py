"""Unit tests for the frame sampler and directory helpers."""

from pathlib import Path
from unittest.mock import patch

import pytest

from vodsync.analyzers.frames import capture_order, sample
from vodsync.ffutil import FRAME_PATTERN, ExtractionFailed
from vodsync.files import delete_files, list_files
from vodsync.models import ROI


def _fake_extract(count: int):
    """Stand-in for ffmpeg that writes *count* numbered frames."""
    def extract(input_path, output_dir, period=4.0, roi=None):
        for i in range(count, 0, -1):
            (output_dir / f"frame_{i:04d}.png").write_bytes(b"png")
    return extract


class TestFiles:
    def test_list_files_sorted_and_files_only(self, tmp_path):
        (tmp_path / "b.png").write_bytes(b"")
        (tmp_path / "a.png").write_bytes(b"")
        (tmp_path / "sub").mkdir()
        assert list_files(tmp_path) == [tmp_path / "a.png", tmp_path / "b.png"]

    def test_delete_files_keeps_subdirectories(self, tmp_path):
        (tmp_path / "a.png").write_bytes(b"")
        (tmp_path / "sub").mkdir()
        delete_files(tmp_path)
        assert list_files(tmp_path) == []
        assert (tmp_path / "sub").is_dir()


class TestSample:
    @patch("vodsync.analyzers.frames.ffutil.extract_frames")
    def test_returns_frames_in_capture_order(self, mock_extract, tmp_path):
        mock_extract.side_effect = _fake_extract(12)
        frames = sample(Path("clip.mp4"), tmp_path / "images")
        assert [f.name for f in frames] == [f"frame_{i:04d}.png" for i in range(1, 13)]

    @patch("vodsync.analyzers.frames.ffutil.extract_frames")
    def test_clears_previous_run(self, mock_extract, tmp_path):
        out = tmp_path / "images"
        out.mkdir()
        (out / "frame_0001.png").write_bytes(b"old")
        (out / "frame_0099.png").write_bytes(b"old")
        (out / "notes.txt").write_text("stale")
        mock_extract.side_effect = _fake_extract(2)

        frames = sample(Path("clip.mp4"), out)

        assert [f.name for f in frames] == ["frame_0001.png", "frame_0002.png"]
        assert sorted(p.name for p in out.iterdir()) == ["frame_0001.png", "frame_0002.png"]
        assert (out / "frame_0001.png").read_bytes() == b"png"

    @patch("vodsync.analyzers.frames.ffutil.extract_frames")
    def test_creates_output_dir_and_passes_roi(self, mock_extract, tmp_path):
        out = tmp_path / "nested" / "images"
        roi = ROI(x=1, y=2, w=3, h=4)
        sample(Path("clip.mp4"), out, roi=roi, period=2.0)
        assert out.is_dir()
        mock_extract.assert_called_once_with(Path("clip.mp4"), out, period=2.0, roi=roi)

    @patch("vodsync.analyzers.frames.ffutil.extract_frames")
    def test_extraction_failure_propagates(self, mock_extract, tmp_path):
        mock_extract.side_effect = ExtractionFailed("decode error")
        with pytest.raises(ExtractionFailed):
            sample(Path("clip.mp4"), tmp_path)

    @patch("vodsync.analyzers.frames.ffutil.extract_frames")
    def test_order_survives_wider_frame_numbers(self, mock_extract, tmp_path):
        def extract(input_path, output_dir, period=4.0, roi=None):
            for i in range(10001, 0, -1):
                (output_dir / (FRAME_PATTERN % i)).write_bytes(b"")
        mock_extract.side_effect = extract

        frames = sample(Path("clip.mp4"), tmp_path / "images", period=1.0)

        assert [capture_order(f)[0] for f in frames] == list(range(1, 10002))
        assert frames[999].name == "frame_1000.png"
        assert frames[1000].name == "frame_1001.png"
        assert frames[-1].name == "frame_10001.png"

    def test_unknown_files_sort_last(self):
        paths = [Path("notes.txt"), Path("frame_10000.png"), Path("frame_0999.png")]
        assert [p.name for p in sorted(paths, key=capture_order)] == [
            "frame_0999.png", "frame_10000.png", "notes.txt",
        ]
