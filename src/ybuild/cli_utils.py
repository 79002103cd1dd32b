"""CLI utility functions for ybuild.

This module provides common utilities used by the CLI including:
- Error handling and formatting
- Build summary output
"""

import sys
import traceback

from ybuild.build.pipeline import BuildResult
from ybuild.errors import EXIT_INTERRUPTED, YBuildError


class ErrorFormatter:
    """Formats and displays error messages with ANSI color codes."""

    # ANSI color codes
    RED = "\033[1;31m"
    GREEN = "\033[1;32m"
    YELLOW = "\033[1;33m"
    RESET = "\033[0m"

    @staticmethod
    def print_error(title: str, message: str) -> None:
        """Print formatted error message.

        Args:
            title: Error title (e.g., "Invalid usage", "Build failed")
            message: Error message details
        """
        print()
        print(f"{ErrorFormatter.RED}✗ {title}{ErrorFormatter.RESET}")
        print()
        print(message)
        print()

    @staticmethod
    def print_success(message: str) -> None:
        print()
        print(f"{ErrorFormatter.GREEN}✓ {message}{ErrorFormatter.RESET}")

    @staticmethod
    def print_warning(message: str) -> None:
        print()
        print(f"{ErrorFormatter.YELLOW}✗ {message}{ErrorFormatter.RESET}")

    @staticmethod
    def handle_usage_error(error: YBuildError) -> None:
        """Report a command-line error and exit before anything ran.

        Args:
            error: UsageError (or settings error wrapped in one)
        """
        ErrorFormatter.print_error("Invalid usage", str(error))
        print("Run with --help to see the supported options and build types.")
        sys.exit(error.exit_code)

    @staticmethod
    def handle_keyboard_interrupt() -> None:
        ErrorFormatter.print_warning("Build interrupted")
        sys.exit(EXIT_INTERRUPTED)

    @staticmethod
    def handle_unexpected_error(error: Exception, verbose: bool = False) -> None:
        """Handle unexpected errors with standard formatting.

        Args:
            error: The exception to handle
            verbose: Whether to print traceback
        """
        message = f"{type(error).__name__}: {error}"
        ErrorFormatter.print_error("Unexpected error", message)

        if verbose:
            print("Traceback:")
            print(traceback.format_exc())

        sys.exit(1)


class BuildSummaryPrinter:
    """Prints the outcome of a pipeline run."""

    @staticmethod
    def print_result(result: BuildResult) -> None:
        if result.success:
            ErrorFormatter.print_success("Build successful!")
        else:
            ErrorFormatter.print_error(f"Build failed (exit code {result.exit_code})", result.message)

        if result.build_root is not None:
            print(f"Build root: {result.build_root}")
        if result.stages:
            print(f"Stages:     {', '.join(result.stages)}")
        if result.log_path is not None:
            print(f"Log:        {result.log_path}")
        print(f"Build time: {result.build_time:.2f}s")
