"""Unit tests for BuildExecutor."""

import dataclasses

from ybuild.build import BuildExecutor
from ybuild.config import ConfigResolver


def resolve(settings, *args):
    return ConfigResolver(settings).resolve(list(args))


class TestBuildExecutor:
    """Test cases for the make invocation."""

    def test_make_args_default(self, settings, fake_runner):
        """Test that a plain build only passes the parallelism hint."""
        assert BuildExecutor(settings, fake_runner).make_args(resolve(settings)) == ["-j8"]

    def test_make_args_order(self, settings, fake_runner):
        """Test pass-through tokens, stage options and targets in order."""
        config = resolve(
            settings,
            "rocksdb_db_test",
            "--rocksdb-only",
            "--verbose",
            "--target",
            "yb-master",
            "--cxx-test",
            "foo_test",
        )
        args = BuildExecutor(settings, fake_runner).make_args(config)
        assert args == [
            "-j8",
            "rocksdb_db_test",
            "build_rocksdb_all_targets",
            "VERBOSE=1",
            "SH=bash -x",
            "yb-master",
            "foo_test",
        ]

    def test_jobs_from_settings(self, settings, fake_runner):
        executor = BuildExecutor(dataclasses.replace(settings, jobs=2), fake_runner)
        assert executor.make_args(resolve(settings))[0] == "-j2"

    def test_execute_success(self, settings, fake_runner, tmp_path):
        result = BuildExecutor(settings, fake_runner).execute(resolve(settings), tmp_path)

        assert result.success is True
        assert result.exit_code == 0
        assert result.elapsed >= 0
        call = fake_runner.calls_to("make")[0]
        assert call.cwd == tmp_path

    def test_execute_failure_is_returned_not_raised(self, settings, fake_runner, tmp_path):
        """Test that a failing make reports its exact status without raising."""
        fake_runner.exit_codes["make"] = 2
        result = BuildExecutor(settings, fake_runner).execute(resolve(settings), tmp_path)

        assert result.success is False
        assert result.exit_code == 2

    def test_verbose_shows_compiler_command_line(self, settings, fake_runner, tmp_path):
        BuildExecutor(settings, fake_runner).execute(resolve(settings, "--verbose"), tmp_path)
        assert fake_runner.calls_to("make")[0].env["YB_SHOW_COMPILER_COMMAND_LINE"] == "1"
