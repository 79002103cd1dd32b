"""Build configuration parsing.

Turns the command line into a single immutable BuildConfiguration before any
stage runs. Build type literals and rocksdb_* target tokens may be interleaved
with flags, e.g.:

    ybuild --clean release --target yb-master rocksdb_db_test

Anything the parser does not recognize raises UsageError, so a typo never
gets as far as removing a build directory.
"""

import argparse
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from .. import __version__
from ..errors import UsageError
from .settings import Settings

logger = logging.getLogger(__name__)

SAVE_LOG_FLAG = "--save-log"
PASSTHROUGH_TARGET_PREFIX = "rocksdb_"
ROCKSDB_ALL_TARGETS = "build_rocksdb_all_targets"


class BuildType(str, Enum):
    """Named build profiles."""

    DEBUG = "debug"
    FASTDEBUG = "fastdebug"
    RELEASE = "release"
    PROFILE_GEN = "profile_gen"
    PROFILE_BUILD = "profile_build"
    ASAN = "asan"
    TSAN = "tsan"

    @property
    def is_sanitizer(self) -> bool:
        return self in (BuildType.ASAN, BuildType.TSAN)

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]


class CompilerType(str, Enum):
    GCC = "gcc"
    CLANG = "clang"


class LinkMode(str, Enum):
    DYNAMIC = "dynamic"
    STATIC = "static"


# Sanitizer builds compile with fastdebug flags plus instrumentation
_SANITIZER_CMAKE_OPTIONS = {
    BuildType.ASAN: ("-DYB_USE_ASAN=1", "-DYB_USE_UBSAN=1"),
    BuildType.TSAN: ("-DYB_USE_TSAN=1",),
}


@dataclass(frozen=True)
class BuildConfiguration:
    """Fully resolved options for one invocation.

    Constructed once by ConfigResolver and never mutated afterwards.
    """

    build_type: BuildType = BuildType.DEBUG
    build_type_specified: bool = False
    compiler_type: CompilerType = CompilerType.GCC
    link_mode: LinkMode = LinkMode.DYNAMIC
    verbose: bool = False
    force_run_cmake: bool = False
    clean: bool = False
    clean_thirdparty: bool = False
    force: bool = False
    rocksdb_only: bool = False
    no_ccache: bool = False
    skip_java: bool = False
    run_java_tests: bool = False
    save_log: bool = False
    fix_rpath: bool = True
    targets: Tuple[str, ...] = ()
    cxx_test_name: Optional[str] = None
    passthrough_targets: Tuple[str, ...] = ()
    original_args: Tuple[str, ...] = ()

    @property
    def cmake_build_type(self) -> str:
        """Value passed as -DCMAKE_BUILD_TYPE."""
        if self.build_type.is_sanitizer:
            return BuildType.FASTDEBUG.value
        return self.build_type.value

    @property
    def cmake_options(self) -> Tuple[str, ...]:
        """Build-type specific CMake options (sanitizer switches)."""
        return _SANITIZER_CMAKE_OPTIONS.get(self.build_type, ())

    @property
    def log_args(self) -> Tuple[str, ...]:
        """Original arguments without the log-trigger option."""
        return tuple(arg for arg in self.original_args if arg != SAVE_LOG_FLAG)

    @property
    def any_clean(self) -> bool:
        return self.clean or self.clean_thirdparty


class _RaisingArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises UsageError instead of exiting."""

    def error(self, message: str):  # type: ignore[override]
        raise UsageError(f"{message}\n\n{self.format_usage().strip()}")


class ConfigResolver:
    """Parses command-line arguments into a BuildConfiguration.

    Example usage:
        resolver = ConfigResolver(Settings.from_env())
        config = resolver.resolve(["release", "--clean"])
        assert config.build_type is BuildType.RELEASE
    """

    def __init__(self, settings: Settings):
        """Initialize resolver.

        Args:
            settings: Environment settings providing compiler/link defaults
        """
        self.settings = settings

    @staticmethod
    def build_parser(prog: str = "ybuild") -> argparse.ArgumentParser:
        """Create the argument parser used by resolve()."""
        parser = _RaisingArgumentParser(
            prog=prog,
            allow_abbrev=False,
            description="Build the native C++ tree and, optionally, the java tree.",
            epilog="Build types:\n  " + ", ".join(BuildType.values()) + " (default: debug)",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        parser.add_argument(
            "tokens",
            nargs="*",
            default=[],
            metavar="build_type",
            help="Build type, or a rocksdb_* target passed straight to make",
        )
        parser.add_argument("--version", action="version", version=f"{prog} {__version__}")
        parser.add_argument("--verbose", action="store_true", help="Show debug output from CMake and make")
        parser.add_argument(
            "--force-run-cmake",
            action="store_true",
            help="Always run CMake, even if the generated Makefile and third-party marker exist",
        )
        parser.add_argument("--clean", action="store_true", help="Remove the build directory before building")
        parser.add_argument(
            "--clean-thirdparty",
            action="store_true",
            help="Remove previously built third-party dependencies and rebuild them. Does not imply --clean",
        )
        parser.add_argument(
            "-f",
            "--force",
            action="store_true",
            help="Do not ask for confirmation when cleaning shortly after a previous clean",
        )
        parser.add_argument("--rocksdb-only", action="store_true", help="Only build RocksDB code (all targets)")
        parser.add_argument("--no-ccache", action="store_true", help="Do not use ccache")

        compiler_group = parser.add_mutually_exclusive_group()
        compiler_group.add_argument(
            "--gcc",
            dest="compiler_type",
            action="store_const",
            const=CompilerType.GCC.value,
            help="Use the gcc C/C++ compiler",
        )
        compiler_group.add_argument(
            "--clang",
            dest="compiler_type",
            action="store_const",
            const=CompilerType.CLANG.value,
            help="Use the clang C/C++ compiler",
        )

        parser.add_argument(
            "--skip-java",
            "--skip-java-build",
            dest="skip_java",
            action="store_true",
            help="Do not package and install java source code",
        )
        parser.add_argument("--run-java-tests", action="store_true", help="Run the java unit tests")
        parser.add_argument("--static", action="store_true", help="Force a static build")
        parser.add_argument(
            "--target",
            dest="targets",
            action="append",
            default=[],
            metavar="TARGET",
            help="Pass the given target to make (repeatable)",
        )
        parser.add_argument(
            "--cxx-test",
            dest="cxx_test_name",
            default=None,
            metavar="TEST_NAME",
            help="Build and run the given C++ test directly. Implies --skip-java",
        )
        parser.add_argument(
            "--no-fix-rpath",
            dest="fix_rpath",
            action="store_false",
            help="Skip running fix_rpath.py",
        )
        parser.add_argument(
            SAVE_LOG_FLAG,
            dest="save_log",
            action="store_true",
            help="Save the build output to a timestamped log file",
        )
        return parser

    def resolve(self, argv: Sequence[str]) -> BuildConfiguration:
        """Parse arguments into a configuration.

        Args:
            argv: Command-line arguments (without the program name)

        Returns:
            Immutable BuildConfiguration

        Raises:
            UsageError: For unknown options, unknown bare tokens or invalid
                compiler/link defaults from the environment
        """
        args = self.build_parser().parse_intermixed_args(list(argv))

        build_type = BuildType.DEBUG
        build_type_specified = False
        passthrough: List[str] = []
        for token in args.tokens or []:
            if token in BuildType.values():
                build_type = BuildType(token)
                build_type_specified = True
            elif token.startswith(PASSTHROUGH_TARGET_PREFIX):
                passthrough.append(token)
            else:
                raise UsageError(f"Invalid option: '{token}'")

        compiler_type = self._resolve_compiler(args.compiler_type, build_type)
        link_mode = self._resolve_link_mode(args.static)

        targets = list(args.targets)
        skip_java = args.skip_java
        if args.cxx_test_name:
            skip_java = True
            if args.cxx_test_name not in targets:
                targets.append(args.cxx_test_name)

        return BuildConfiguration(
            build_type=build_type,
            build_type_specified=build_type_specified,
            compiler_type=compiler_type,
            link_mode=link_mode,
            verbose=args.verbose,
            force_run_cmake=args.force_run_cmake,
            clean=args.clean,
            clean_thirdparty=args.clean_thirdparty,
            force=args.force,
            rocksdb_only=args.rocksdb_only,
            no_ccache=args.no_ccache,
            skip_java=skip_java,
            run_java_tests=args.run_java_tests,
            save_log=args.save_log,
            fix_rpath=args.fix_rpath,
            targets=tuple(targets),
            cxx_test_name=args.cxx_test_name,
            passthrough_targets=tuple(passthrough),
            original_args=tuple(argv),
        )

    def _resolve_compiler(self, explicit: Optional[str], build_type: BuildType) -> CompilerType:
        name = explicit or self.settings.default_compiler_type
        try:
            compiler_type = CompilerType(name)
        except ValueError:
            raise UsageError(
                f"Unsupported compiler type '{name}' (YB_COMPILER_TYPE). "
                f"Expected one of: {', '.join(c.value for c in CompilerType)}"
            )

        if build_type.is_sanitizer and compiler_type is not CompilerType.CLANG:
            if explicit:
                logger.warning(f"{build_type.value} builds require clang, ignoring --{explicit}")
            compiler_type = CompilerType.CLANG
        return compiler_type

    def _resolve_link_mode(self, static: bool) -> LinkMode:
        if static:
            return LinkMode.STATIC
        name = self.settings.default_link_mode
        try:
            return LinkMode(name)
        except ValueError:
            raise UsageError(
                f"Unsupported link mode '{name}' (YB_LINK). "
                f"Expected one of: {', '.join(m.value for m in LinkMode)}"
            )
