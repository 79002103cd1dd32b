"""ybuild - build orchestration for the native C++ tree.

Decides when the expensive stages (third-party bootstrap, CMake generation)
have to run, drives make, checks the test binaries and optionally runs the
java build.
"""

__version__ = "0.1.0"
