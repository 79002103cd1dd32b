"""Build root resolution.

Every (build_type, compiler_type, link_mode) combination gets its own
directory under <src_root>/build, so switching between e.g. debug and release
never discards the other configuration's incremental state:

    build/
    ├── last_clean_timestamp            # Epoch seconds of the last clean
    ├── .debug-gcc-dynamic.lock         # Advisory lock (while a build runs)
    ├── debug-gcc-dynamic/
    │   ├── Makefile                    # Generated by CMake
    │   ├── built_thirdparty            # Third-party marker
    │   └── bin/                        # Test binaries
    └── release-clang-static/
"""

from pathlib import Path
from typing import Union

from ..config.build_config import BuildConfiguration, BuildType, CompilerType, LinkMode
from ..errors import InvalidBuildTypeError


class BuildRootResolver:
    """Maps a configuration to its canonical output directory."""

    def __init__(self, build_parent_dir: Path):
        """Initialize resolver.

        Args:
            build_parent_dir: Directory holding all build roots (<src_root>/build)
        """
        self.build_parent_dir = Path(build_parent_dir)

    def resolve(
        self,
        build_type: Union[BuildType, str],
        compiler_type: Union[CompilerType, str],
        link_mode: Union[LinkMode, str],
    ) -> Path:
        """Get the build root for a configuration triple.

        Args:
            build_type: Build type (e.g., 'debug', 'asan')
            compiler_type: Compiler type ('gcc' or 'clang')
            link_mode: Link mode ('dynamic' or 'static')

        Returns:
            Path to the build root (not created)

        Raises:
            InvalidBuildTypeError: If any component is outside its enumeration
        """
        try:
            build_type = BuildType(build_type)
        except ValueError:
            raise InvalidBuildTypeError(
                f"Invalid build type '{build_type}'. Expected one of: {', '.join(BuildType.values())}"
            )
        try:
            compiler_type = CompilerType(compiler_type)
            link_mode = LinkMode(link_mode)
        except ValueError as e:
            raise InvalidBuildTypeError(str(e))

        name = f"{build_type.value}-{compiler_type.value}-{link_mode.value}"
        return self.build_parent_dir / name

    def for_config(self, config: BuildConfiguration) -> Path:
        """Get the build root for a resolved configuration."""
        return self.resolve(config.build_type, config.compiler_type, config.link_mode)
