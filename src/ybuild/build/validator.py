"""Post-build steps: rpath fixing, test binary validation, single test execution.

A test binary that CMake registered but make never produced means a target
was silently dropped from the build graph. That is reported as a
ValidationFailure, separate from a compile failure.
"""

import logging
from pathlib import Path

from ..config.build_config import BuildConfiguration
from ..config.settings import Settings
from ..errors import DelegatedStageFailure, ValidationFailure
from .environment import delegated_env
from .process_runner import ProcessRunner

logger = logging.getLogger(__name__)


def _is_failure_line(line: str) -> bool:
    return "Failed" in line


class PostBuildValidator:
    """Validates the artifact set produced by a successful make."""

    def __init__(self, settings: Settings, runner: ProcessRunner):
        self.settings = settings
        self.runner = runner

    @staticmethod
    def cxx_test_path(build_root: Path, test_name: str) -> Path:
        return Path(build_root) / "bin" / test_name

    def fix_rpath(self, config: BuildConfiguration, build_root: Path) -> bool:
        """Normalize shared library search paths of the built binaries.

        Returns:
            True if fix_rpath.py ran, False if it was disabled

        Raises:
            DelegatedStageFailure: If fix_rpath.py exits nonzero
        """
        if not config.fix_rpath:
            logger.info("Skipping fix_rpath.py (--no-fix-rpath specified)")
            return False

        exit_code = self.runner.run(
            [self.settings.fix_rpath_script, "--build-root", build_root],
            cwd=self.settings.src_root,
            env=delegated_env(config, self.settings),
        )
        if exit_code != 0:
            raise DelegatedStageFailure("fix_rpath.py", exit_code)
        return True

    def validate(self, config: BuildConfiguration, build_root: Path) -> None:
        """Check that every test binary referenced by the build files exists.

        Runs ctest in existence-only mode; only the lines reporting failures
        are shown.

        Raises:
            ValidationFailure: If any registered test binary is missing
        """
        logger.info("Checking if all test binaries referenced by CMakeLists.txt files exist.")
        exit_code = self.runner.run(
            ["ctest", f"-j{self.settings.jobs}"],
            cwd=build_root,
            env=delegated_env(config, self.settings, {"YB_CHECK_TEST_EXISTENCE_ONLY": "1"}),
            line_filter=_is_failure_line,
        )
        if exit_code != 0:
            raise ValidationFailure("Some test binaries referenced in CMakeLists.txt files do not exist")

        if config.cxx_test_name:
            test_path = self.cxx_test_path(build_root, config.cxx_test_name)
            if not test_path.is_file():
                raise ValidationFailure(f"Test binary {test_path} does not exist after a successful build")

    def run_cxx_test(self, config: BuildConfiguration, build_root: Path) -> None:
        """Run the single test requested with --cxx-test directly (not through ctest).

        Raises:
            DelegatedStageFailure: With the test's exit status if it fails
        """
        if not config.cxx_test_name:
            return

        test_path = self.cxx_test_path(build_root, config.cxx_test_name)
        # TODO: rocksdb_* tests are built under rocksdb-build/, not bin/
        exit_code = self.runner.run(
            [test_path],
            cwd=build_root,
            env=delegated_env(config, self.settings),
        )
        if exit_code != 0:
            raise DelegatedStageFailure(config.cxx_test_name, exit_code)
