"""
Result models for code execution
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ErrorKind(str, Enum):
    SIZE_LIMIT_EXCEEDED = 'SizeLimitExceeded'
    UNSUPPORTED_LANGUAGE = 'UnsupportedLanguage'
    COMPILE_FAILED = 'CompileFailed'
    RUNTIME_FAILED = 'RuntimeFailed'
    TIMEOUT = 'Timeout'
    INTERNAL_ERROR = 'InternalError'


class ArtifactRole(str, Enum):
    SOURCE = 'source'
    COMPILED_BINARY = 'compiledBinary'


class ExecutionResult(BaseModel):
    """Outcome of one build or run step, or of a whole submission"""
    model_config = ConfigDict(frozen=True)

    success: bool
    output: str = ''
    errorMessage: str = ''
    errorKind: Optional[ErrorKind] = None
    exitCode: Optional[int] = None
    durationMs: float = 0

    @classmethod
    def ok(cls, output: str, exit_code: int = 0, duration_ms: float = 0) -> 'ExecutionResult':
        return cls(success=True, output=output, exitCode=exit_code, durationMs=duration_ms)

    @classmethod
    def failure(
        cls,
        kind: ErrorKind,
        message: str,
        exit_code: Optional[int] = None,
        duration_ms: float = 0
    ) -> 'ExecutionResult':
        return cls(
            success=False,
            errorKind=kind,
            errorMessage=message,
            exitCode=exit_code,
            durationMs=duration_ms
        )

    def to_response(self) -> dict:
        """Wire shape returned by POST /run"""
        if self.success:
            return {'success': True, 'output': self.output}
        return {'success': False, 'error': self.errorMessage}


class ExecutionError(Exception):
    """Base class for failures unrelated to the submitted code"""


class ArtifactError(ExecutionError):
    """Raised when the artifact directory cannot be written"""
