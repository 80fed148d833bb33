"""
Process runner for build and run steps

The runner is the only component that touches external processes, so a
containerized backend can replace LocalProcessRunner without changing the
executors that drive it.
"""

import asyncio
import logging
import os
import signal
import time
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple

from .config import EXECUTION_TIMEOUT_MS, MAX_OUTPUT_BYTES
from .models import ErrorKind, ExecutionResult

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = '\n[output truncated]'
_CHUNK_SIZE = 64 * 1024
_DRAIN_GRACE_S = 1.0


class ProcessRunner(ABC):
    """Abstract base class for process runners"""

    @abstractmethod
    async def run(
        self,
        command: str,
        args: Sequence[str] = (),
        input_data: str = '',
        timeout_ms: int = EXECUTION_TIMEOUT_MS,
        step: str = 'Execution',
        failure_kind: ErrorKind = ErrorKind.RUNTIME_FAILED,
        cwd: Optional[str] = None
    ) -> ExecutionResult:
        """
        Run one external process to completion or until the deadline

        Args:
            command: Executable to start
            args: Arguments passed to the executable
            input_data: Text piped to stdin (followed by a newline if non-empty)
            timeout_ms: Wall-clock deadline in milliseconds
            step: Label used in default failure messages ("Execution", "Compilation")
            failure_kind: Error kind reported on a nonzero exit
            cwd: Working directory for the process

        Returns:
            ExecutionResult settled exactly once
        """
        pass


class LocalProcessRunner(ProcessRunner):
    """
    Runs processes directly on the host.

    WARNING: no isolation beyond the deadline and the output cap.
    """

    def __init__(self, max_output_bytes: int = MAX_OUTPUT_BYTES):
        self.max_output_bytes = max_output_bytes

    async def run(
        self,
        command: str,
        args: Sequence[str] = (),
        input_data: str = '',
        timeout_ms: int = EXECUTION_TIMEOUT_MS,
        step: str = 'Execution',
        failure_kind: ErrorKind = ErrorKind.RUNTIME_FAILED,
        cwd: Optional[str] = None
    ) -> ExecutionResult:
        start_time = time.monotonic()
        program = os.path.basename(command)

        try:
            process = await asyncio.create_subprocess_exec(
                command,
                *args,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=cwd,
                start_new_session=True  # own process group, killed as a unit
            )
        except OSError as e:
            logger.error(f"Failed to start {program}: {e}", exc_info=True)
            return ExecutionResult.failure(
                ErrorKind.INTERNAL_ERROR,
                f"{step} environment unavailable",
                duration_ms=_elapsed_ms(start_time)
            )

        readers = [
            asyncio.ensure_future(self._read(process.stdout)),
            asyncio.ensure_future(self._read(process.stderr)),
        ]
        feeder = asyncio.ensure_future(self._feed(process.stdin, input_data))
        timed_out = False
        try:
            try:
                # The deadline races process exit only; leftover children holding the pipes do not count
                return_code = await asyncio.wait_for(process.wait(), timeout=timeout_ms / 1000)
            except asyncio.TimeoutError:
                timed_out = True
            # Kill the whole session so no descendant outlives the run
            await self._kill(process)
            (stdout, stdout_cut), (stderr, stderr_cut) = await self._collect(readers)
        finally:
            for task in [feeder, *readers]:
                if not task.done():
                    task.cancel()
            await self._kill(process)
            _close_transport(process)

        if timed_out:
            logger.warning(f"{program} (pid {process.pid}) exceeded {timeout_ms} ms and was killed")
            return ExecutionResult.failure(
                ErrorKind.TIMEOUT,
                f"{step} timed out",
                exit_code=process.returncode,
                duration_ms=_elapsed_ms(start_time)
            )

        output = _decode(stdout, stdout_cut)
        error = _decode(stderr, stderr_cut)
        duration_ms = _elapsed_ms(start_time)
        logger.info(f"{program} exited with code {return_code} in {duration_ms:.0f} ms")

        if return_code == 0:
            return ExecutionResult.ok(output, exit_code=return_code, duration_ms=duration_ms)
        return ExecutionResult.failure(
            failure_kind,
            error or f"{step} failed",
            exit_code=return_code,
            duration_ms=duration_ms
        )

    async def _read(self, stream: asyncio.StreamReader) -> Tuple[bytes, bool]:
        """Drain a stream, keeping at most max_output_bytes"""
        chunks = []
        kept = 0
        truncated = False
        while True:
            chunk = await stream.read(_CHUNK_SIZE)
            if not chunk:
                break
            room = self.max_output_bytes - kept
            if len(chunk) > room:
                truncated = True
                chunk = chunk[:max(room, 0)]
            if chunk:
                chunks.append(chunk)
                kept += len(chunk)
        return b''.join(chunks), truncated

    @staticmethod
    async def _feed(stdin: asyncio.StreamWriter, input_data: str) -> None:
        # Close stdin even without input, otherwise programs reading it block until the deadline
        try:
            if input_data:
                stdin.write((input_data + '\n').encode('utf-8'))
                await stdin.drain()
        except (BrokenPipeError, ConnectionResetError):
            logger.debug("Process closed stdin before reading all input")
        finally:
            stdin.close()

    @staticmethod
    async def _kill(process: asyncio.subprocess.Process) -> None:
        # The group may outlive the leader, so signal it even after the leader exited
        try:
            if hasattr(os, 'killpg'):
                os.killpg(process.pid, signal.SIGKILL)
            elif process.returncode is None:
                process.kill()
        except ProcessLookupError:
            pass
        except PermissionError:
            if process.returncode is None:
                process.kill()
        await process.wait()

    @staticmethod
    async def _collect(readers) -> List[Tuple[bytes, bool]]:
        """Wait briefly for the readers to hit EOF; a reader still blocked yields nothing"""
        await asyncio.wait(readers, timeout=_DRAIN_GRACE_S)
        results = []
        for task in readers:
            if task.done() and not task.cancelled() and task.exception() is None:
                results.append(task.result())
            else:
                task.cancel()
                results.append((b'', False))
        return results


def _close_transport(process: asyncio.subprocess.Process) -> None:
    # asyncio only releases the pipe fds once every pipe reached EOF
    transport = getattr(process, '_transport', None)
    if transport is not None:
        transport.close()


def _decode(data: bytes, truncated: bool) -> str:
    text = data.decode('utf-8', errors='replace')
    return text + TRUNCATION_MARKER if truncated else text


def _elapsed_ms(start_time: float) -> float:
    return (time.monotonic() - start_time) * 1000
