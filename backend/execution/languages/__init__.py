"""
Language-specific executors
"""

from typing import Dict

from .base import LanguageExecutor
from .c_executor import CExecutor
from .cpp_executor import CppExecutor
from .java_executor import JavaExecutor
from .python_executor import PythonExecutor


def default_executors() -> Dict[str, LanguageExecutor]:
    """Fresh executor instances keyed by language identifier"""
    executors = [CExecutor(), CppExecutor(), JavaExecutor(), PythonExecutor()]
    return {e.language: e for e in executors}


__all__ = [
    'LanguageExecutor',
    'CExecutor',
    'CppExecutor',
    'JavaExecutor',
    'PythonExecutor',
    'default_executors',
]
