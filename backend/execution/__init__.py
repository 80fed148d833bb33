"""
Code execution module: artifact store, process runner and language executors
"""

from .artifacts import Artifact, ArtifactStore
from .executor import ExecutionService, get_execution_service
from .models import ArtifactError, ArtifactRole, ErrorKind, ExecutionError, ExecutionResult
from .sandbox import LocalProcessRunner, ProcessRunner

__all__ = [
    'Artifact',
    'ArtifactStore',
    'ArtifactError',
    'ArtifactRole',
    'ErrorKind',
    'ExecutionError',
    'ExecutionResult',
    'ExecutionService',
    'LocalProcessRunner',
    'ProcessRunner',
    'get_execution_service',
]
