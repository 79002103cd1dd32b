"""Configuration for ybuild: command-line parsing and environment settings."""

from .build_config import (
    BuildConfiguration,
    BuildType,
    CompilerType,
    ConfigResolver,
    LinkMode,
)
from .settings import Settings

__all__ = [
    "BuildConfiguration",
    "BuildType",
    "CompilerType",
    "ConfigResolver",
    "LinkMode",
    "Settings",
]
