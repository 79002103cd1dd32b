"""Java (Maven) build stage.

Runs after the native build succeeds unless --skip-java (or --cxx-test) was
given. Java unit tests are skipped unless --run-java-tests is set; they add a
couple of minutes to the build.
"""

import logging
import time
from typing import List

from ..config.build_config import BuildConfiguration
from ..config.settings import Settings
from ..errors import DelegatedStageFailure
from .environment import delegated_env
from .process_runner import ProcessRunner

logger = logging.getLogger(__name__)


class SecondaryBuildStage:
    """Invokes `mvn install` in the java tree."""

    def __init__(self, settings: Settings, runner: ProcessRunner):
        self.settings = settings
        self.runner = runner

    @staticmethod
    def mvn_args(config: BuildConfiguration) -> List[str]:
        if config.run_java_tests:
            return ["install"]
        return ["install", "-DskipTests"]

    def run(self, config: BuildConfiguration) -> bool:
        """Run the java build.

        Returns:
            True if the stage ran, False if it was skipped

        Raises:
            DelegatedStageFailure: If mvn exits nonzero
        """
        if config.skip_java:
            logger.debug("Skipping java build")
            return False

        start_time = time.time()
        exit_code = self.runner.run(
            ["mvn"] + self.mvn_args(config),
            cwd=self.settings.java_dir,
            env=delegated_env(config, self.settings),
        )
        if exit_code != 0:
            raise DelegatedStageFailure("java build (mvn)", exit_code)
        logger.info(f"Java build finished in {time.time() - start_time:.1f}s")
        return True
