"""Persisted build state.

The only state carried between invocations lives in two small files:

- ThirdPartyMarker: an empty file whose existence means the third-party
  bootstrap completed (and the build that followed it succeeded).
- CleanTimestamp: epoch seconds of the last destructive clean, used to ask
  for confirmation before cleaning again within the hour.
"""

import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

THIRDPARTY_MARKER_NAME = "built_thirdparty"
CLEAN_TIMESTAMP_NAME = "last_clean_timestamp"


class ThirdPartyMarker:
    """Zero-content marker file under the build root."""

    def __init__(self, build_root: Path):
        self.path = Path(build_root) / THIRDPARTY_MARKER_NAME

    def is_set(self) -> bool:
        return self.path.is_file()

    def set(self) -> None:
        """Create the marker (and the build root if needed)."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.touch()

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)

    def __repr__(self) -> str:
        return f"ThirdPartyMarker({self.path}, set={self.is_set()})"


class CleanTimestamp:
    """Epoch-seconds record of the last clean build."""

    def __init__(self, build_parent_dir: Path):
        """Initialize timestamp record.

        Args:
            build_parent_dir: <src_root>/build (shared by all build roots)
        """
        self.path = Path(build_parent_dir) / CLEAN_TIMESTAMP_NAME

    def read(self) -> Optional[int]:
        """Read the recorded timestamp.

        Returns:
            Epoch seconds, or None if the file is missing or unreadable
        """
        if not self.path.is_file():
            return None
        content = self.path.read_text(encoding="utf-8").strip()
        try:
            return int(content)
        except ValueError:
            logger.warning(f"Ignoring malformed clean timestamp in {self.path}: '{content}'")
            return None

    def write(self, timestamp: float) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(f"{int(timestamp)}\n", encoding="utf-8")
