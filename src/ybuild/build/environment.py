"""Environment passed to delegated tools.

The pipeline itself never reads or writes os.environ for configuration. The
variables CMake, make and the helper scripts expect are materialized here, at
the boundary call into each tool.
"""

import os
from pathlib import Path
from typing import Dict, Mapping, Optional

from ..config.build_config import BuildConfiguration
from ..config.settings import Settings


def thirdparty_bin_dir(settings: Settings) -> Path:
    """Directory with the cmake (and other tools) built by the third-party bootstrap."""
    return settings.thirdparty_dir / "installed" / "bin"


def delegated_env(
    config: BuildConfiguration,
    settings: Settings,
    extra: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """Build the environment for one delegated tool invocation.

    Args:
        config: Resolved build configuration
        settings: Environment settings
        extra: Stage-specific variables (e.g., NO_REBUILD_THIRDPARTY)
        base: Starting environment (defaults to a copy of os.environ)

    Returns:
        New environment mapping; the base is never modified
    """
    env = dict(os.environ if base is None else base)
    env["YB_SRC_ROOT"] = str(settings.src_root)
    env["YB_COMPILER_TYPE"] = config.compiler_type.value
    env["YB_LINK"] = config.link_mode.value

    # Prefer the cmake built by the third-party bootstrap over the system one
    path = env.get("PATH", "")
    bin_dir = str(thirdparty_bin_dir(settings))
    env["PATH"] = f"{bin_dir}{os.pathsep}{path}" if path else bin_dir

    if config.verbose:
        env["YB_SHOW_COMPILER_COMMAND_LINE"] = "1"

    if extra:
        env.update(extra)
    return env
