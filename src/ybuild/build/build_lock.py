"""Advisory lock around build-root-mutating stages.

Two invocations against the same build root would otherwise race on the
Makefile, the third-party marker and the clean. The lock is an OS file lock
(filelock.FileLock) on a file next to the build root, not inside it, so
--clean cannot delete it:

    build/
    ├── .debug-gcc-dynamic.lock         # OS lock, held for the whole run
    └── .debug-gcc-dynamic.lock.owner   # Who holds it (diagnostics only)

The operating system drops the lock when its holder exits or crashes, so a
lock left behind by a dead build never blocks the next one. The owner file is
written only after the lock is held and is never used to decide ownership:

    {"pid": 4242, "hostname": "devbox", "started_at": 1760822165.2, "argv": ["release"]}

A held lock fails the build immediately; ybuild never waits for another build.
"""

import json
import logging
import os
import socket
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional, Sequence

from filelock import FileLock
from filelock import Timeout as FileLockTimeout

from ..errors import BuildLockError

logger = logging.getLogger(__name__)


@dataclass
class LockOwner:
    """Owner metadata stored beside the lock file."""

    pid: int
    hostname: str
    started_at: float = field(default_factory=time.time)
    argv: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LockOwner":
        return cls(
            pid=int(data["pid"]),
            hostname=str(data["hostname"]),
            started_at=float(data["started_at"]),
            argv=list(data.get("argv", [])),
        )


class BuildRootLock:
    """Non-blocking OS file lock for one build root.

    Example usage:
        with BuildRootLock.for_build_root(build_root, argv):
            run_stages()
    """

    def __init__(self, lock_path: Path, argv: Sequence[str] = ()):
        self.lock_path = Path(lock_path)
        self.owner_path = self.lock_path.with_name(self.lock_path.name + ".owner")
        self.argv = list(argv)
        # Acquired and released on the pipeline thread; no per-thread state
        self._file_lock = FileLock(str(self.lock_path), thread_local=False)
        self._owner: Optional[LockOwner] = None

    @classmethod
    def for_build_root(cls, build_root: Path, argv: Sequence[str] = ()) -> "BuildRootLock":
        build_root = Path(build_root)
        return cls(build_root.parent / f".{build_root.name}.lock", argv)

    @property
    def held(self) -> bool:
        return self._owner is not None

    def acquire(self) -> None:
        """Take the lock without waiting.

        Raises:
            BuildLockError: If another invocation holds the lock
        """
        if self.held:
            return

        self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._file_lock.acquire(timeout=0)
        except FileLockTimeout:
            raise BuildLockError(self._describe_holder())

        self._owner = LockOwner(pid=os.getpid(), hostname=socket.gethostname(), argv=self.argv)
        self.owner_path.write_text(json.dumps(self._owner.to_dict()), encoding="utf-8")
        logger.debug(f"Acquired build lock {self.lock_path}")

    def release(self) -> None:
        """Release the lock if this instance holds it."""
        if self._owner is None:
            return
        self.owner_path.unlink(missing_ok=True)
        self._file_lock.release()
        self._owner = None
        logger.debug(f"Released build lock {self.lock_path}")

    def read_owner(self) -> Optional[LockOwner]:
        """Read the recorded owner, or None if missing or unreadable."""
        try:
            data = json.loads(self.owner_path.read_text(encoding="utf-8"))
            return LockOwner.from_dict(data)
        except FileNotFoundError:
            return None
        except (ValueError, KeyError, TypeError) as e:
            logger.debug(f"Unreadable build lock owner {self.owner_path}: {e}")
            return None

    def _describe_holder(self) -> str:
        # The holder may not have written its owner file yet
        owner = self.read_owner()
        if owner is None:
            return f"Build root is locked by another ybuild invocation ({self.lock_path})"
        return (
            f"Build root is locked by pid {owner.pid} on {owner.hostname} "
            f"(started {time.ctime(owner.started_at)}, args: {' '.join(owner.argv)})"
        )

    def __enter__(self) -> "BuildRootLock":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()
