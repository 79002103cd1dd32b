"""Unit tests for LogRecorder."""

import io
import logging
from datetime import datetime

import pytest

from ybuild.build import LogRecorder, OutputMultiplexer


@pytest.fixture
def output():
    return OutputMultiplexer(console=io.StringIO())


def fixed_clock():
    return datetime(2026, 10, 18, 21, 16, 5)


class TestLogRecorder:
    """Test cases for LogRecorder start/stop."""

    def test_creates_timestamped_log(self, tmp_path, output):
        recorder = LogRecorder(tmp_path / "logs", "yb_build", "release", output, clock=fixed_clock)
        log_path = recorder.start(["release", "--clean"])
        recorder.stop(0)

        assert log_path == tmp_path / "logs" / "yb_build_release_2026-10-18_21_16_05.log"
        assert log_path.is_file()

    def test_header_output_and_footer(self, tmp_path, output):
        """Test the command line header, captured tool output and exit code footer."""
        recorder = LogRecorder(tmp_path, "yb_build", "debug", output, clock=fixed_clock)
        log_path = recorder.start(["--target", "yb-master"])
        output.write_line("[100%] Built target yb-master")
        recorder.stop(2)

        lines = log_path.read_text().splitlines()
        assert lines[0] == "yb_build_debug command line: --target yb-master"
        assert "[100%] Built target yb-master" in lines
        assert lines[-2:] == ["+++++++", "exit code 2"]

    def test_latest_symlink(self, tmp_path, output):
        """Test that the latest symlink follows the most recent log."""
        stamps = iter([datetime(2026, 10, 18, 9, 0, 0), datetime(2026, 10, 18, 10, 0, 0)])
        recorder = LogRecorder(tmp_path, "yb_build", "debug", output, clock=lambda: next(stamps))

        first = recorder.start([])
        recorder.stop(0)
        second = recorder.start([])
        recorder.stop(0)

        latest = recorder.latest_symlink_path
        assert latest.name == "yb_build_debug_latest.log"
        assert latest.is_symlink()
        assert latest.resolve() == second.resolve()
        assert first.exists()

    def test_same_second_gets_unique_name(self, tmp_path, output):
        """Test that two logs in the same second never overwrite each other."""
        first_recorder = LogRecorder(tmp_path, "yb_build", "debug", output, clock=fixed_clock)
        first = first_recorder.start([])
        first_recorder.stop(0)

        second_recorder = LogRecorder(tmp_path, "yb_build", "debug", output, clock=fixed_clock)
        second = second_recorder.start([])
        second_recorder.stop(1)

        assert first != second
        assert second.name == "yb_build_debug_2026-10-18_21_16_05_1.log"
        assert first.read_text().splitlines()[-1] == "exit code 0"

    def test_pipeline_log_records_are_captured(self, tmp_path, output):
        recorder = LogRecorder(tmp_path, "yb_build", "debug", output, clock=fixed_clock)
        log_path = recorder.start([])
        logging.getLogger("ybuild.test").warning("cmake reran")
        recorder.stop(0)

        assert "cmake reran" in log_path.read_text()

    def test_stop_detaches(self, tmp_path, output):
        recorder = LogRecorder(tmp_path, "yb_build", "debug", output, clock=fixed_clock)
        recorder.start([])
        assert output.recording is True
        recorder.stop(0)
        assert output.recording is False

    def test_stop_without_start_is_noop(self, tmp_path, output):
        LogRecorder(tmp_path, "yb_build", "debug", output).stop(0)
        assert not tmp_path.joinpath("yb_build_debug_latest.log").exists()
