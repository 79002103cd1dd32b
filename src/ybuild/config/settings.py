"""Environment-derived settings for ybuild.

Settings are resolved once per invocation. Every value can be overridden
through an environment variable so CI machines and developer checkouts can
share the same entry point:

    YB_SRC_ROOT         Source tree root (default: current directory)
    YB_THIRDPARTY_DIR   Third-party dependency tree (default: <src_root>/thirdparty)
    YB_COMPILER_TYPE    Default compiler when neither --gcc nor --clang is given
    YB_LINK             Default link mode when --static is not given
    YBUILD_LOG_DIR      Directory for --save-log output (default: ~/logs)
    YBUILD_JOBS         Parallelism hint passed to make and ctest (default: 8)
"""

import os
import platform
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_JOBS = 8
SCRIPT_NAME = "yb_build"


class SettingsError(ValueError):
    """Raised when an environment override holds an invalid value."""


@dataclass(frozen=True)
class Settings:
    """Paths and defaults shared by all pipeline stages."""

    src_root: Path
    thirdparty_dir: Path
    log_dir: Path
    default_compiler_type: str = "gcc"
    default_link_mode: str = "dynamic"
    jobs: int = DEFAULT_JOBS
    script_name: str = SCRIPT_NAME

    @property
    def build_parent_dir(self) -> Path:
        """Directory holding every build root plus the clean timestamp."""
        return self.src_root / "build"

    @property
    def java_dir(self) -> Path:
        """Maven project root."""
        return self.src_root / "java"

    @property
    def fix_rpath_script(self) -> Path:
        """Script that rewrites shared library search paths after linking."""
        return self.src_root / "build-support" / "fix_rpath.py"

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        cwd: Optional[Path] = None,
    ) -> "Settings":
        """Resolve settings from environment variables.

        Args:
            environ: Environment mapping (defaults to os.environ)
            cwd: Fallback source root (defaults to the current directory)

        Returns:
            Resolved Settings

        Raises:
            SettingsError: If YBUILD_JOBS is not a positive integer
        """
        if environ is None:
            environ = os.environ

        src_env = environ.get("YB_SRC_ROOT")
        if src_env:
            src_root = Path(src_env).resolve()
        else:
            src_root = Path(cwd if cwd is not None else Path.cwd()).resolve()

        thirdparty_env = environ.get("YB_THIRDPARTY_DIR")
        thirdparty_dir = Path(thirdparty_env).resolve() if thirdparty_env else src_root / "thirdparty"

        log_env = environ.get("YBUILD_LOG_DIR")
        log_dir = Path(log_env).expanduser() if log_env else Path.home() / "logs"

        jobs_env = environ.get("YBUILD_JOBS", "")
        if jobs_env:
            try:
                jobs = int(jobs_env)
            except ValueError:
                raise SettingsError(f"YBUILD_JOBS must be an integer, got '{jobs_env}'")
            if jobs < 1:
                raise SettingsError(f"YBUILD_JOBS must be positive, got {jobs}")
        else:
            jobs = DEFAULT_JOBS

        return cls(
            src_root=src_root,
            thirdparty_dir=thirdparty_dir,
            log_dir=log_dir,
            default_compiler_type=environ.get("YB_COMPILER_TYPE") or _platform_compiler(),
            default_link_mode=environ.get("YB_LINK") or "dynamic",
            jobs=jobs,
        )


def _platform_compiler() -> str:
    # Apple ships clang only
    return "clang" if platform.system() == "Darwin" else "gcc"
