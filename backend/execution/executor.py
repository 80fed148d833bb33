"""
Main executor that routes to language-specific executors
"""

import logging
import os
from typing import Dict, Optional

from .artifacts import ArtifactStore
from .config import COMPILE_TIMEOUT_MS, EXECUTION_TIMEOUT_MS, MAX_FILE_SIZE
from .languages import LanguageExecutor, default_executors
from .models import ErrorKind, ExecutionError, ExecutionResult
from .sandbox import LocalProcessRunner, ProcessRunner

logger = logging.getLogger(__name__)


class ExecutionService:
    """Validates a submission, picks its executor and returns a well-formed result"""

    def __init__(
        self,
        store: Optional[ArtifactStore] = None,
        runner: Optional[ProcessRunner] = None,
        executors: Optional[Dict[str, LanguageExecutor]] = None,
        max_file_size: int = MAX_FILE_SIZE,
        timeout_ms: int = EXECUTION_TIMEOUT_MS,
        compile_timeout_ms: int = COMPILE_TIMEOUT_MS
    ):
        self.store = store or ArtifactStore()
        self.runner = runner or LocalProcessRunner()
        self.executors = executors if executors is not None else default_executors()
        self.max_file_size = max_file_size
        self.timeout_ms = timeout_ms
        self.compile_timeout_ms = compile_timeout_ms

    @property
    def languages(self):
        return sorted(self.executors)

    async def execute(self, language: str, code: str, input_data: str = '') -> ExecutionResult:
        """
        Execute a submission

        Args:
            language: Language identifier (e.g. "python", "cpp", "java")
            code: Source code
            input_data: Text piped to the program's stdin

        Returns:
            ExecutionResult; failures are reported through errorKind, never raised
        """
        source = code.encode('utf-8')
        if len(source) > self.max_file_size:
            logger.info(f"Rejected {language} submission of {len(source)} bytes")
            return ExecutionResult.failure(
                ErrorKind.SIZE_LIMIT_EXCEEDED,
                f"File size exceeds {_format_size(self.max_file_size)} limit"
            )

        executor = self.executors.get(language)
        if executor is None:
            return ExecutionResult.failure(ErrorKind.UNSUPPORTED_LANGUAGE, "Unsupported language")

        submission_id = self.store.new_submission_id()
        logger.info(f"Executing {language} submission {submission_id} ({len(source)} bytes)")

        try:
            self.store.reserve_slot()
            result = await executor.execute(
                submission_id,
                source,
                input_data or '',
                self.store,
                self.runner,
                self.timeout_ms,
                self.compile_timeout_ms
            )
        except (ExecutionError, OSError) as e:
            logger.error(f"Internal error while executing {submission_id}: {e}", exc_info=True)
            return ExecutionResult.failure(ErrorKind.INTERNAL_ERROR, "Internal error while executing code")

        if not result.success:
            logger.info(f"Submission {submission_id} failed: {result.errorKind.value}")
        return self._scrub(result)

    def _scrub(self, result: ExecutionResult) -> ExecutionResult:
        """Strip the artifact directory from text shown to the caller"""
        prefix = self.store.directory + os.sep
        if prefix not in result.output and prefix not in result.errorMessage:
            return result
        return result.model_copy(update={
            'output': result.output.replace(prefix, ''),
            'errorMessage': result.errorMessage.replace(prefix, ''),
        })


def _format_size(size: int) -> str:
    if size >= 1024 * 1024 and size % (1024 * 1024) == 0:
        return f"{size // (1024 * 1024)}MB"
    return f"{size} bytes"


_service: Optional[ExecutionService] = None


def get_execution_service() -> ExecutionService:
    """Process-wide service, created on first use"""
    global _service
    if _service is None:
        _service = ExecutionService()
    return _service
