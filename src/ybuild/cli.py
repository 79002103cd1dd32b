"""
Command-line interface for ybuild.

This module provides the `ybuild` CLI tool for building the native C++ tree.
"""

import sys
from dataclasses import dataclass
from typing import Optional, Sequence

from ybuild import __version__
from ybuild.build import BuildPipeline
from ybuild.cli_utils import BuildSummaryPrinter, ErrorFormatter
from ybuild.config import BuildConfiguration, ConfigResolver, Settings
from ybuild.config.settings import SettingsError
from ybuild.errors import UsageError
from ybuild.logging_setup import setup_logging


@dataclass
class BuildArgs:
    """Arguments for the build command."""

    config: BuildConfiguration
    settings: Settings


def build_command(args: BuildArgs) -> None:
    """Build the native tree (and the java tree unless skipped).

    Examples:
        ybuild                          # Debug build
        ybuild release                  # Release build
        ybuild asan --clean             # Clean ASAN build (asks if cleaned < 1h ago)
        ybuild --cxx-test util_test     # Build and run a single C++ test
        ybuild --save-log release       # Also write ~/logs/yb_build_release_<ts>.log
    """
    config = args.config
    print(f"ybuild v{__version__}")
    print(f"Building {config.build_type.value} ({config.compiler_type.value}, {config.link_mode.value})...")

    try:
        pipeline = BuildPipeline(config, args.settings)
        result = pipeline.run()
        BuildSummaryPrinter.print_result(result)
        sys.exit(result.exit_code)

    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, config.verbose)


def main(argv: Optional[Sequence[str]] = None) -> None:
    """ybuild - build orchestration for the native C++ tree."""
    if argv is None:
        argv = sys.argv[1:]

    try:
        settings = Settings.from_env()
        config = ConfigResolver(settings).resolve(argv)
    except UsageError as e:
        ErrorFormatter.handle_usage_error(e)
        return
    except SettingsError as e:
        ErrorFormatter.handle_usage_error(UsageError(str(e)))
        return

    setup_logging(config.verbose)
    build_command(BuildArgs(config=config, settings=settings))


if __name__ == "__main__":
    main()
