"""Confirmation gate for destructive clean operations.

A clean build of the whole tree takes a long time, so running --clean twice
within an hour is usually a mistake. When attached to a terminal, the gate
asks for confirmation in that case unless --force is given.
"""

import logging
import re
import shutil
import sys
import time
from pathlib import Path
from typing import Callable

from ..config.build_config import BuildConfiguration
from ..errors import GateAbort
from .markers import CleanTimestamp, ThirdPartyMarker

logger = logging.getLogger(__name__)

RECENT_CLEAN_SECONDS = 3600
CONFIRM_PROMPT = "Do you still want to do a clean build? [y/N] "
_AFFIRMATIVE = re.compile(r"[yY]")


def _stdin_is_tty() -> bool:
    return sys.stdin is not None and sys.stdin.isatty()


class CleanGate:
    """Guards --clean and --clean-thirdparty.

    Example usage:
        gate = CleanGate(CleanTimestamp(settings.build_parent_dir))
        gate.run(config, build_root, ThirdPartyMarker(build_root))
    """

    def __init__(
        self,
        timestamp: CleanTimestamp,
        is_interactive: Callable[[], bool] = _stdin_is_tty,
        prompt: Callable[[str], str] = input,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize gate.

        Args:
            timestamp: Persisted record of the last clean
            is_interactive: Returns True when attached to a terminal
            prompt: Reads the user's answer (input() signature)
            clock: Current time in epoch seconds
        """
        self.timestamp = timestamp
        self.is_interactive = is_interactive
        self.prompt = prompt
        self.clock = clock

    def run(self, config: BuildConfiguration, build_root: Path, marker: ThirdPartyMarker) -> None:
        """Confirm if needed, record the clean, then remove the build root for --clean.

        Args:
            config: Resolved configuration
            build_root: Build root to remove when config.clean is set
            marker: Third-party marker; its state survives a plain clean

        Raises:
            GateAbort: If the user declines. Nothing has been modified at that point.
        """
        if not config.any_clean:
            return

        if self.is_interactive():
            now = self.clock()
            self._confirm_if_recent(now, config.force)
            self.timestamp.write(now)

        if config.clean:
            self._remove_build_root(build_root, marker)

    def _confirm_if_recent(self, now: float, force: bool) -> None:
        last_clean = self.timestamp.read()
        if last_clean is None or force:
            return

        seconds_ago = int(now - last_clean)
        if seconds_ago >= RECENT_CLEAN_SECONDS:
            return

        logger.warning(f"Last clean build was performed less than an hour ({seconds_ago} sec) ago")
        try:
            answer = self.prompt(CONFIRM_PROMPT)
        except EOFError:
            answer = ""
        if not _AFFIRMATIVE.fullmatch(answer.strip()):
            raise GateAbort("Operation canceled")

    @staticmethod
    def _remove_build_root(build_root: Path, marker: ThirdPartyMarker) -> None:
        # Third-party dependencies live outside the build root, so a plain
        # clean does not invalidate them
        thirdparty_built = marker.is_set()

        logger.info(f"Removing '{build_root}' (--clean specified)")
        if build_root.exists():
            shutil.rmtree(build_root)

        if thirdparty_built:
            marker.set()
