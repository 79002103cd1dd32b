"""Third-party dependency cache.

The third-party bootstrap (run from within CMake) is expensive. Whether it
has to run again is decided solely by the ThirdPartyMarker in the build root;
there is no dependency tracking beyond that. The marker is set only after
make succeeds, so a failed build that follows a fresh bootstrap leaves it
absent and the next invocation regenerates.
"""

import logging
from pathlib import Path

from ..config.build_config import BuildConfiguration
from ..config.settings import Settings
from ..errors import DelegatedStageFailure
from .environment import delegated_env
from .markers import ThirdPartyMarker
from .process_runner import ProcessRunner

logger = logging.getLogger(__name__)


class ThirdPartyCache:
    """Marker-based skip logic for the third-party bootstrap."""

    def __init__(self, settings: Settings, build_root: Path, runner: ProcessRunner):
        self.settings = settings
        self.marker = ThirdPartyMarker(build_root)
        self.runner = runner

    @property
    def thirdparty_dir(self) -> Path:
        return self.settings.thirdparty_dir

    def is_built(self) -> bool:
        return self.marker.is_set()

    def mark_built(self) -> None:
        self.marker.set()

    def invalidate(self, config: BuildConfiguration) -> None:
        """Reset the third-party tree to a pristine state and clear the marker.

        Raises:
            DelegatedStageFailure: If git clean fails
        """
        logger.info("Removing and re-building third-party dependencies (--clean-thirdparty specified)")
        self.marker.clear()

        if not self.thirdparty_dir.is_dir():
            logger.warning(f"Third-party directory {self.thirdparty_dir} does not exist, nothing to clean")
            return

        exit_code = self.runner.run(
            ["git", "clean", "-dxf"],
            cwd=self.thirdparty_dir,
            env=delegated_env(config, self.settings),
        )
        if exit_code != 0:
            raise DelegatedStageFailure("git clean of third-party tree", exit_code)
