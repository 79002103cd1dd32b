"""Delegated process execution.

Runs external tools (git, cmake, make, ctest, mvn, test binaries) with stdout
and stderr merged, streaming every line into the OutputMultiplexer so the
console and an optional log file see the same output.

Design:
    - Blocks until the tool exits; stages never overlap
    - Returns the exit status instead of raising, callers decide what it means
    - Missing executable maps to 127 and a non-executable one to 126, as a shell would
    - A tool killed by signal N reports 128+N
    - On KeyboardInterrupt the child's process tree is terminated and the
      interrupt re-raised; nothing else is cleaned up
"""

import logging
import shlex
import subprocess
from pathlib import Path
from typing import Callable, Mapping, Optional, Sequence

import psutil

from .log_recorder import OutputMultiplexer

logger = logging.getLogger(__name__)

EXIT_COMMAND_NOT_FOUND = 127
EXIT_NOT_EXECUTABLE = 126
EXIT_SIGNAL_BASE = 128


class ProcessRunner:
    """Runs one delegated command at a time."""

    def __init__(self, output: Optional[OutputMultiplexer] = None):
        """Initialize runner.

        Args:
            output: Sink for the command's output (console only if None)
        """
        self.output = output or OutputMultiplexer()

    def run(
        self,
        cmd: Sequence[str],
        cwd: Path,
        env: Optional[Mapping[str, str]] = None,
        line_filter: Optional[Callable[[str], bool]] = None,
    ) -> int:
        """Run a command to completion.

        Args:
            cmd: Command and arguments
            cwd: Working directory
            env: Full environment for the child (inherits ours if None)
            line_filter: Only lines for which this returns True are shown

        Returns:
            Exit status of the command
        """
        cmd = [str(part) for part in cmd]
        logger.info(f"+ {shlex.join(cmd)}  (in {cwd})")

        try:
            proc = subprocess.Popen(
                cmd,
                cwd=str(cwd),
                env=dict(env) if env is not None else None,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,
                text=True,
                errors="replace",
                bufsize=1,
            )
        except FileNotFoundError:
            logger.error(f"Command not found: {cmd[0]}")
            return EXIT_COMMAND_NOT_FOUND
        except PermissionError:
            logger.error(f"Command is not executable: {cmd[0]}")
            return EXIT_NOT_EXECUTABLE

        try:
            assert proc.stdout is not None
            for raw_line in proc.stdout:
                line = raw_line.rstrip("\r\n")
                if line_filter is None or line_filter(line):
                    self.output.write_line(line)
            return _exit_status(proc.wait())
        except KeyboardInterrupt:
            _terminate_process_tree(proc.pid)
            raise
        finally:
            if proc.stdout is not None:
                proc.stdout.close()


def _exit_status(returncode: int) -> int:
    # Killed by signal N: report 128+N, as a shell would
    if returncode < 0:
        return EXIT_SIGNAL_BASE - returncode
    return returncode


def _terminate_process_tree(root_pid: int, timeout: float = 3.0) -> None:
    """Terminate a process and all of its children, children first."""
    try:
        root = psutil.Process(root_pid)
        processes = root.children(recursive=True) + [root]
    except psutil.NoSuchProcess:
        return

    for proc in processes:
        try:
            proc.terminate()
        except psutil.NoSuchProcess:
            pass

    _gone, alive = psutil.wait_procs(processes, timeout=timeout)
    for proc in alive:
        try:
            proc.kill()
            logger.warning(f"Force killed stubborn process {proc.pid}")
        except psutil.NoSuchProcess:
            pass
