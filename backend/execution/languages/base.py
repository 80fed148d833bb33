"""
Shared build-then-run flow for language executors
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from ..artifacts import ArtifactStore
from ..models import ErrorKind, ExecutionResult
from ..sandbox import ProcessRunner

logger = logging.getLogger(__name__)


class LanguageExecutor(ABC):
    """
    One supported language.

    Subclasses describe file names and command lines; ``execute`` writes the
    source, runs the optional build step, runs the program and always deletes
    every file it created.
    """

    language: str = ''
    extension: str = ''
    # Executors with fixed file names run one submission at a time
    serialized: bool = False

    def __init__(self):
        self._lock = asyncio.Lock() if self.serialized else None

    def source_name(self, submission_id: str) -> str:
        return f"{submission_id}{self.extension}"

    def binary_name(self, submission_id: str) -> Optional[str]:
        """Name of the compiled artifact, or None for interpreted languages"""
        return None

    def build_command(self, source: str, binary: Optional[str]) -> Optional[List[str]]:
        return None

    @abstractmethod
    def run_command(self, source: str, binary: Optional[str], directory: str) -> List[str]:
        pass

    def build_outputs(self, store: ArtifactStore) -> List[str]:
        """Names of extra files the build step produced besides the binary"""
        return []

    async def execute(
        self,
        submission_id: str,
        code: bytes,
        input_data: str,
        store: ArtifactStore,
        runner: ProcessRunner,
        timeout_ms: int,
        compile_timeout_ms: int
    ) -> ExecutionResult:
        if self._lock is None:
            return await self._execute(
                submission_id, code, input_data, store, runner, timeout_ms, compile_timeout_ms
            )
        async with self._lock:
            return await self._execute(
                submission_id, code, input_data, store, runner, timeout_ms, compile_timeout_ms
            )

    async def _execute(
        self,
        submission_id: str,
        code: bytes,
        input_data: str,
        store: ArtifactStore,
        runner: ProcessRunner,
        timeout_ms: int,
        compile_timeout_ms: int
    ) -> ExecutionResult:
        source = store.write(self.source_name(submission_id), code)
        created = [source.path]
        try:
            binary_path = None
            binary_name = self.binary_name(submission_id)
            if binary_name:
                binary_path = store.expect(binary_name).path
                created.append(binary_path)

            build = self.build_command(source.path, binary_path)
            if build:
                result = await runner.run(
                    build[0],
                    build[1:],
                    timeout_ms=compile_timeout_ms,
                    step='Compilation',
                    failure_kind=ErrorKind.COMPILE_FAILED,
                    cwd=store.directory
                )
                if not result.success:
                    logger.info(f"{self.language} build failed for {submission_id}: {result.errorKind.value}")
                    return result
                extra = store.adopt(self.build_outputs(store))
                created.extend(a.path for a in extra)

            command = self.run_command(source.path, binary_path, store.directory)
            return await runner.run(
                command[0],
                command[1:],
                input_data=input_data,
                timeout_ms=timeout_ms,
                cwd=store.directory
            )
        finally:
            store.delete(created)
