"""Unit tests for environment-derived settings."""

from pathlib import Path

import pytest

from ybuild.config import Settings
from ybuild.config.settings import DEFAULT_JOBS, SettingsError


class TestSettings:
    """Test cases for Settings.from_env()."""

    def test_defaults_from_cwd(self, tmp_path):
        """Test that an empty environment roots everything at the given directory."""
        settings = Settings.from_env(environ={}, cwd=tmp_path)

        assert settings.src_root == tmp_path.resolve()
        assert settings.thirdparty_dir == tmp_path.resolve() / "thirdparty"
        assert settings.log_dir == Path.home() / "logs"
        assert settings.jobs == DEFAULT_JOBS
        assert settings.default_link_mode == "dynamic"
        assert settings.default_compiler_type in ("gcc", "clang")

    def test_environment_overrides(self, tmp_path):
        """Test that every supported variable overrides its default."""
        environ = {
            "YB_SRC_ROOT": str(tmp_path / "src"),
            "YB_THIRDPARTY_DIR": str(tmp_path / "tp"),
            "YBUILD_LOG_DIR": str(tmp_path / "logs"),
            "YBUILD_JOBS": "32",
            "YB_COMPILER_TYPE": "clang",
            "YB_LINK": "static",
        }
        settings = Settings.from_env(environ=environ, cwd=tmp_path)

        assert settings.src_root == (tmp_path / "src").resolve()
        assert settings.thirdparty_dir == (tmp_path / "tp").resolve()
        assert settings.log_dir == tmp_path / "logs"
        assert settings.jobs == 32
        assert settings.default_compiler_type == "clang"
        assert settings.default_link_mode == "static"

    def test_derived_paths(self, tmp_path):
        """Test paths derived from the source root."""
        settings = Settings.from_env(environ={}, cwd=tmp_path)
        root = tmp_path.resolve()

        assert settings.build_parent_dir == root / "build"
        assert settings.java_dir == root / "java"
        assert settings.fix_rpath_script == root / "build-support" / "fix_rpath.py"

    @pytest.mark.parametrize("jobs", ["many", "0", "-4"])
    def test_invalid_jobs(self, tmp_path, jobs):
        """Test that YBUILD_JOBS must be a positive integer."""
        with pytest.raises(SettingsError):
            Settings.from_env(environ={"YBUILD_JOBS": jobs}, cwd=tmp_path)

    def test_darwin_defaults_to_clang(self, tmp_path, monkeypatch):
        """Test the platform compiler default on macOS."""
        monkeypatch.setattr("ybuild.config.settings.platform.system", lambda: "Darwin")
        assert Settings.from_env(environ={}, cwd=tmp_path).default_compiler_type == "clang"

    def test_linux_defaults_to_gcc(self, tmp_path, monkeypatch):
        monkeypatch.setattr("ybuild.config.settings.platform.system", lambda: "Linux")
        assert Settings.from_env(environ={}, cwd=tmp_path).default_compiler_type == "gcc"
