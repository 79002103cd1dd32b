"""Build Executor.

This module runs make in the build root and reports its exit status.

Design:
    - Passes a bounded -j parallelism hint; no parallelism of our own
    - Never raises on a failed build, so the summary line is always printed
    - The caller turns a nonzero status into the pipeline's exit code
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List

from ..config.build_config import ROCKSDB_ALL_TARGETS, BuildConfiguration
from ..config.settings import Settings
from .environment import delegated_env
from .process_runner import ProcessRunner

logger = logging.getLogger(__name__)


@dataclass
class BuildStepResult:
    """Outcome of the make invocation."""

    exit_code: int
    elapsed: float

    @property
    def success(self) -> bool:
        return self.exit_code == 0


class BuildExecutor:
    """Invokes the compilation step."""

    def __init__(self, settings: Settings, runner: ProcessRunner):
        """Initialize build executor.

        Args:
            settings: Settings providing the parallelism hint
            runner: Runner for the make process
        """
        self.settings = settings
        self.runner = runner

    def make_args(self, config: BuildConfiguration) -> List[str]:
        """Build the make command line (without the executable).

        Order: parallelism, pass-through tokens, stage options, explicit targets.
        """
        args = [f"-j{self.settings.jobs}"]
        args.extend(config.passthrough_targets)
        if config.rocksdb_only:
            args.append(ROCKSDB_ALL_TARGETS)
        if config.verbose:
            args.extend(["VERBOSE=1", "SH=bash -x"])
        args.extend(config.targets)
        return args

    def execute(self, config: BuildConfiguration, build_root: Path) -> BuildStepResult:
        """Run make and capture its status.

        Args:
            config: Resolved configuration
            build_root: Directory holding the generated Makefile

        Returns:
            BuildStepResult with make's exit status and the elapsed time
        """
        logger.info(f"Running make in {build_root}")
        start_time = time.time()
        exit_code = self.runner.run(
            ["make"] + self.make_args(config),
            cwd=build_root,
            env=delegated_env(config, self.settings),
        )
        elapsed = time.time() - start_time
        logger.info(f"Non-java build finished with exit code {exit_code} in {elapsed:.1f}s")
        return BuildStepResult(exit_code=exit_code, elapsed=elapsed)
