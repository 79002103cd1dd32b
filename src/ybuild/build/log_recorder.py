"""Build log recording.

Output of delegated tools flows through an OutputMultiplexer, which always
echoes to the console and, while a LogRecorder is active, also appends every
line to the log file. Log records from the pipeline itself reach the same
file through a logging handler, so the file reads like the console did.

Log layout (--save-log):
    <log_dir>/
    ├── yb_build_release_2026-10-18_21_16_05.log
    ├── yb_build_release_2026-10-18_22_40_51.log
    └── yb_build_release_latest.log -> yb_build_release_2026-10-18_22_40_51.log
"""

import logging
import os
import shlex
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Sequence, TextIO

from ..logging_setup import LOG_FORMAT

logger = logging.getLogger(__name__)

LOG_TIMESTAMP_FORMAT = "%Y-%m-%d_%H_%M_%S"


class OutputMultiplexer:
    """Thread-safe sink duplicating delegated tool output to console and log file."""

    def __init__(self, console: Optional[TextIO] = None):
        """Initialize multiplexer.

        Args:
            console: Console stream (defaults to sys.stdout at write time)
        """
        self._console = console
        self._lock = threading.Lock()
        self._file_handle: Optional[TextIO] = None

    @property
    def recording(self) -> bool:
        return self._file_handle is not None

    def attach_file(self, file_handle: TextIO) -> None:
        with self._lock:
            self._file_handle = file_handle

    def detach_file(self) -> None:
        with self._lock:
            if self._file_handle is not None:
                self._file_handle.flush()
            self._file_handle = None

    def write_line(self, line: str) -> None:
        """Write a line to the console and, when recording, to the log file."""
        with self._lock:
            console = self._console or sys.stdout
            console.write(line + "\n")
            console.flush()
            if self._file_handle is not None:
                self._file_handle.write(line + "\n")
                self._file_handle.flush()


class LogRecorder:
    """Captures one pipeline run into a uniquely named, timestamped log file.

    Example usage:
        recorder = LogRecorder(Path("~/logs"), "yb_build", "release", output)
        recorder.start(["release", "--clean"])
        try:
            exit_code = run_pipeline()
        finally:
            recorder.stop(exit_code)
    """

    def __init__(
        self,
        log_dir: Path,
        script_name: str,
        build_type: str,
        output: OutputMultiplexer,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.log_dir = Path(log_dir)
        self.prefix = f"{script_name}_{build_type}"
        self.output = output
        self._clock = clock
        self.log_path: Optional[Path] = None
        self._file_handle: Optional[TextIO] = None
        self._handler: Optional[logging.Handler] = None

    @property
    def latest_symlink_path(self) -> Path:
        return self.log_dir / f"{self.prefix}_latest.log"

    def start(self, log_args: Sequence[str]) -> Path:
        """Open a new log file, repoint the latest symlink and begin capturing.

        Args:
            log_args: Command-line arguments recorded in the log header
                (already stripped of --save-log)

        Returns:
            Path to the new log file
        """
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.log_path, self._file_handle = self._open_unique_log()
        self._refresh_latest_symlink(self.log_path)

        self._file_handle.write(f"{self.prefix} command line: {shlex.join(log_args)}\n")
        self._file_handle.flush()

        self._handler = logging.StreamHandler(self._file_handle)
        self._handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(self._handler)
        self.output.attach_file(self._file_handle)

        logger.info(f"Logging to {self.log_path} (also symlinked to {self.latest_symlink_path})")
        return self.log_path

    def stop(self, exit_code: int) -> None:
        """Stop capturing, write the exit code footer and close the file."""
        if self._file_handle is None:
            return

        self.output.detach_file()
        if self._handler is not None:
            logging.getLogger().removeHandler(self._handler)
            self._handler = None

        self._file_handle.write("+++++++\n")
        self._file_handle.write(f"exit code {exit_code}\n")
        self._file_handle.close()
        self._file_handle = None

        logger.info(f"Log saved to {self.log_path} (also symlinked to {self.latest_symlink_path})")

    def _open_unique_log(self):
        stamp = self._clock().strftime(LOG_TIMESTAMP_FORMAT)
        base = f"{self.prefix}_{stamp}"
        attempt = 0
        while True:
            name = f"{base}.log" if attempt == 0 else f"{base}_{attempt}.log"
            path = self.log_dir / name
            try:
                return path, open(path, "x", encoding="utf-8")
            except FileExistsError:
                attempt += 1

    def _refresh_latest_symlink(self, target: Path) -> None:
        # Build the new link beside the old one and rename over it
        tmp_link = self.log_dir / f".{self.latest_symlink_path.name}.{os.getpid()}.tmp"
        tmp_link.unlink(missing_ok=True)
        os.symlink(target.resolve(), tmp_link)
        os.replace(tmp_link, self.latest_symlink_path)
