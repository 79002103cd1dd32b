"""
Build pipeline for ybuild.

This module runs the stages of one build invocation in order:

1. Resolve the build root for (build_type, compiler_type, link_mode)
2. Lock the build root against concurrent invocations
3. Clean gate (confirmation, clean timestamp, build root removal)
4. Third-party invalidation (--clean-thirdparty)
5. CMake generation, if the trigger says so
6. make
7. Mark third-party dependencies as built
8. fix_rpath.py
9. Test binary existence check
10. Single C++ test (--cxx-test)
11. Java build

Any failure short-circuits the remaining stages and its exit code becomes
the result's exit code.
"""

import logging
import shlex
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..config.build_config import BuildConfiguration
from ..config.settings import Settings
from ..errors import EXIT_INTERRUPTED, DelegatedStageFailure, YBuildError
from .build_executor import BuildExecutor
from .build_lock import BuildRootLock
from .build_root import BuildRootResolver
from .clean_gate import CleanGate
from .generation import CMakeGenerator, ConfigGenerationTrigger
from .java_build import SecondaryBuildStage
from .log_recorder import LogRecorder, OutputMultiplexer
from .markers import CleanTimestamp
from .process_runner import ProcessRunner
from .thirdparty import ThirdPartyCache
from .validator import PostBuildValidator

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Result of a complete pipeline run."""

    success: bool
    exit_code: int
    build_root: Optional[Path]
    build_time: float
    message: str
    stages: List[str] = field(default_factory=list)
    log_path: Optional[Path] = None


class BuildPipeline:
    """
    Runs every stage of one build invocation.

    Example usage:
        settings = Settings.from_env()
        config = ConfigResolver(settings).resolve(sys.argv[1:])
        result = BuildPipeline(config, settings).run()
        sys.exit(result.exit_code)
    """

    def __init__(
        self,
        config: BuildConfiguration,
        settings: Settings,
        runner: Optional[ProcessRunner] = None,
        gate: Optional[CleanGate] = None,
        output: Optional[OutputMultiplexer] = None,
    ):
        """
        Initialize build pipeline.

        Args:
            config: Resolved configuration
            settings: Environment settings
            runner: Runner for delegated tools (created over `output` if None)
            gate: Clean gate (interactive defaults if None)
            output: Output sink shared by the runner and the log recorder
        """
        self.config = config
        self.settings = settings
        self.output = output or (runner.output if runner is not None else OutputMultiplexer())
        self.runner = runner or ProcessRunner(self.output)
        self.gate = gate or CleanGate(CleanTimestamp(settings.build_parent_dir))
        self.build_root: Optional[Path] = None
        self.stages: List[str] = []

    def run(self) -> BuildResult:
        """
        Execute the pipeline.

        Returns:
            BuildResult; failures are reported through it, not raised
        """
        start_time = time.time()
        recorder: Optional[LogRecorder] = None
        log_path: Optional[Path] = None

        if self.config.save_log:
            recorder = LogRecorder(
                self.settings.log_dir,
                self.settings.script_name,
                self.config.build_type.value,
                self.output,
            )
            log_path = recorder.start(self.config.log_args)

        exit_code = 1
        try:
            self._run_stages()
            exit_code = 0
            message = "Build successful"
        except YBuildError as e:
            exit_code = e.exit_code
            message = str(e)
            logger.error(message)
        except KeyboardInterrupt:
            exit_code = EXIT_INTERRUPTED
            raise
        finally:
            if recorder is not None:
                recorder.stop(exit_code)

        return BuildResult(
            success=exit_code == 0,
            exit_code=exit_code,
            build_root=self.build_root,
            build_time=time.time() - start_time,
            message=message,
            stages=list(self.stages),
            log_path=log_path,
        )

    def _run_stages(self) -> None:
        config = self.config
        settings = self.settings

        if config.verbose:
            logger.debug(f"build_type={config.build_type.value}, cmake_build_type={config.cmake_build_type}")
            logger.debug(f"{settings.script_name} command line: {shlex.join(config.original_args)}")

        build_root = BuildRootResolver(settings.build_parent_dir).for_config(config)
        self.build_root = build_root

        with BuildRootLock.for_build_root(build_root, config.original_args):
            thirdparty = ThirdPartyCache(settings, build_root, self.runner)

            if config.any_clean:
                self.gate.run(config, build_root, thirdparty.marker)
                self.stages.append("clean_gate")

            build_root.mkdir(parents=True, exist_ok=True)

            if config.clean_thirdparty:
                thirdparty.invalidate(config)
                self.stages.append("clean_thirdparty")

            decision = ConfigGenerationTrigger.decide(config, build_root, thirdparty.is_built())
            if decision.run:
                CMakeGenerator(settings, self.runner).generate(config, build_root, decision)
                self.stages.append("cmake")

            build_result = BuildExecutor(settings, self.runner).execute(config, build_root)
            self.stages.append("make")
            if not build_result.success:
                raise DelegatedStageFailure("make", build_result.exit_code)

            thirdparty.mark_built()

            validator = PostBuildValidator(settings, self.runner)
            if validator.fix_rpath(config, build_root):
                self.stages.append("fix_rpath")

            validator.validate(config, build_root)
            self.stages.append("validate")

            if config.cxx_test_name:
                validator.run_cxx_test(config, build_root)
                self.stages.append("cxx_test")

            if SecondaryBuildStage(settings, self.runner).run(config):
                self.stages.append("java")
