"""Shared fixtures for the ybuild unit tests."""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

from ybuild.build.log_recorder import OutputMultiplexer
from ybuild.config import Settings


@dataclass
class RecordedCall:
    """One delegated command seen by FakeRunner."""

    cmd: List[str]
    cwd: Path
    env: Optional[Dict[str, str]]

    @property
    def program(self) -> str:
        return Path(self.cmd[0]).name


class FakeRunner:
    """Stands in for ProcessRunner: records commands instead of running them.

    Exit codes and side effects are keyed by program name (e.g. 'make').
    """

    def __init__(self):
        self.output = OutputMultiplexer()
        self.calls: List[RecordedCall] = []
        self.exit_codes: Dict[str, int] = {}
        self.side_effects: Dict[str, Callable[[RecordedCall], None]] = {}

    def run(self, cmd, cwd, env=None, line_filter=None) -> int:
        call = RecordedCall(cmd=[str(part) for part in cmd], cwd=Path(cwd), env=dict(env) if env else None)
        self.calls.append(call)
        effect = self.side_effects.get(call.program)
        if effect is not None:
            effect(call)
        return self.exit_codes.get(call.program, 0)

    @property
    def programs(self) -> List[str]:
        return [call.program for call in self.calls]

    def calls_to(self, program: str) -> List[RecordedCall]:
        return [call for call in self.calls if call.program == program]


def _generate_makefile(call: RecordedCall) -> None:
    (call.cwd / "Makefile").write_text("all:\n")


@pytest.fixture
def settings(tmp_path):
    """Settings rooted in a temporary source tree."""
    src_root = tmp_path / "yugabyte"
    thirdparty_dir = src_root / "thirdparty"
    thirdparty_dir.mkdir(parents=True)
    (src_root / "java").mkdir()
    return Settings(
        src_root=src_root,
        thirdparty_dir=thirdparty_dir,
        log_dir=tmp_path / "logs",
        default_compiler_type="gcc",
        default_link_mode="dynamic",
        jobs=8,
    )


@pytest.fixture
def fake_runner():
    """FakeRunner whose cmake writes a Makefile like the real generator."""
    runner = FakeRunner()
    runner.side_effects["cmake"] = _generate_makefile
    return runner
