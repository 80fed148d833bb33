import asyncio
import os
import shutil
import sys

import pytest

from execution import ArtifactStore, ExecutionResult, ProcessRunner
from execution.models import ErrorKind

requires_gxx = pytest.mark.skipif(shutil.which("g++") is None, reason="g++ not installed")
requires_java = pytest.mark.skipif(
    shutil.which("javac") is None or shutil.which("java") is None,
    reason="JDK not installed"
)


class FakeRunner(ProcessRunner):
    """Records every call; returns queued results, or success by default"""

    def __init__(self, results=None, side_effect=None, delay=0.0):
        self.calls = []
        self.results = list(results or [])
        self.side_effect = side_effect
        self.delay = delay
        self.active = 0
        self.max_active = 0

    async def run(
        self,
        command,
        args=(),
        input_data='',
        timeout_ms=5000,
        step='Execution',
        failure_kind=ErrorKind.RUNTIME_FAILED,
        cwd=None
    ):
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            call = {
                "command": command,
                "args": list(args),
                "input_data": input_data,
                "timeout_ms": timeout_ms,
                "step": step,
                "failure_kind": failure_kind,
                "cwd": cwd,
                "files": sorted(os.listdir(cwd)) if cwd else [],
            }
            self.calls.append(call)
            if self.side_effect:
                self.side_effect(call)
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.results:
                return self.results.pop(0)
            return ExecutionResult.ok("")
        finally:
            self.active -= 1


def touch(path, when_ns=None):
    with open(path, "wb") as f:
        f.write(b"x")
    if when_ns is not None:
        os.utime(path, ns=(when_ns, when_ns))


@pytest.fixture
def store(tmp_path):
    return ArtifactStore(str(tmp_path / "sandbox"), max_files=5)


@pytest.fixture
def python_bin():
    return sys.executable
