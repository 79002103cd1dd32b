"""CMake generation.

Running CMake is skipped when the generated Makefile exists and the
third-party marker is set. make re-runs CMake by itself whenever a
CMakeLists.txt changes, so this only decides whether we must invoke it
explicitly.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from ..config.build_config import BuildConfiguration
from ..config.settings import Settings
from ..errors import DelegatedStageFailure
from .environment import delegated_env
from .markers import THIRDPARTY_MARKER_NAME
from .process_runner import ProcessRunner

logger = logging.getLogger(__name__)

BUILD_CONTROL_FILE = "Makefile"


@dataclass
class GenerationDecision:
    """Whether CMake must run, and why."""

    run: bool
    reasons: List[str] = field(default_factory=list)
    # Hint to the third-party bootstrap invoked by CMake, not a guarantee
    skip_thirdparty_rebuild: bool = False


class ConfigGenerationTrigger:
    """Decides whether the build-file generator must re-run."""

    @staticmethod
    def decide(config: BuildConfiguration, build_root: Path, thirdparty_built: bool) -> GenerationDecision:
        """Evaluate the trigger conditions.

        Args:
            config: Resolved configuration (for --force-run-cmake)
            build_root: Build root that should hold the generated Makefile
            thirdparty_built: Whether the third-party marker is set

        Returns:
            GenerationDecision
        """
        reasons = []
        if config.force_run_cmake:
            reasons.append("--force-run-cmake specified")
        if not (Path(build_root) / BUILD_CONTROL_FILE).is_file():
            reasons.append(f"no {BUILD_CONTROL_FILE} in {build_root}")
        if not thirdparty_built:
            reasons.append("third-party dependencies not marked as built")

        return GenerationDecision(
            run=bool(reasons),
            reasons=reasons,
            skip_thirdparty_rebuild=thirdparty_built,
        )


class CMakeGenerator:
    """Invokes cmake in the build root."""

    def __init__(self, settings: Settings, runner: ProcessRunner):
        self.settings = settings
        self.runner = runner

    def cmake_args(self, config: BuildConfiguration) -> List[str]:
        """Build the cmake command line (without the executable)."""
        args = list(config.cmake_options)
        args.append(f"-DCMAKE_BUILD_TYPE={config.cmake_build_type}")
        if config.no_ccache:
            args.append("-DYB_NO_CCACHE=1")
        if config.verbose:
            args.extend(["-Wdev", "--debug-output", "--trace", "-DYB_VERBOSE=1"])
        args.append(str(self.settings.src_root))
        return args

    def generate(self, config: BuildConfiguration, build_root: Path, decision: GenerationDecision) -> None:
        """Run cmake.

        Raises:
            DelegatedStageFailure: If cmake exits nonzero
        """
        extra = {}
        if decision.skip_thirdparty_rebuild:
            logger.info(
                f"{build_root / THIRDPARTY_MARKER_NAME} is present, setting NO_REBUILD_THIRDPARTY=1 before running cmake"
            )
            extra["NO_REBUILD_THIRDPARTY"] = "1"

        logger.info(f"Running cmake in {build_root} ({'; '.join(decision.reasons)})")
        exit_code = self.runner.run(
            ["cmake"] + self.cmake_args(config),
            cwd=build_root,
            env=delegated_env(config, self.settings, extra),
        )
        if exit_code != 0:
            raise DelegatedStageFailure("cmake", exit_code)
