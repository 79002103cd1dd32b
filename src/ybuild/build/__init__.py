"""
Build stages for ybuild.

This package provides the pipeline and the stages it drives:
- Build root resolution and persisted markers
- Clean confirmation gate
- Third-party cache and CMake generation trigger
- make execution and post-build validation
- Java build and log recording
"""

from .build_executor import BuildExecutor, BuildStepResult
from .build_lock import BuildRootLock, LockOwner
from .build_root import BuildRootResolver
from .clean_gate import CleanGate
from .generation import CMakeGenerator, ConfigGenerationTrigger, GenerationDecision
from .java_build import SecondaryBuildStage
from .log_recorder import LogRecorder, OutputMultiplexer
from .markers import CleanTimestamp, ThirdPartyMarker
from .pipeline import BuildPipeline, BuildResult
from .process_runner import ProcessRunner
from .thirdparty import ThirdPartyCache
from .validator import PostBuildValidator

__all__ = [
    "BuildExecutor",
    "BuildPipeline",
    "BuildResult",
    "BuildRootLock",
    "BuildRootResolver",
    "BuildStepResult",
    "CMakeGenerator",
    "CleanGate",
    "CleanTimestamp",
    "ConfigGenerationTrigger",
    "GenerationDecision",
    "LockOwner",
    "LogRecorder",
    "OutputMultiplexer",
    "PostBuildValidator",
    "ProcessRunner",
    "SecondaryBuildStage",
    "ThirdPartyCache",
    "ThirdPartyMarker",
]
