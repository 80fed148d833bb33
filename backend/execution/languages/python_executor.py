"""
Python language executor
"""

from typing import List, Optional

from ..config import PYTHON_BIN
from .base import LanguageExecutor


class PythonExecutor(LanguageExecutor):
    language = 'python'
    extension = '.py'

    def __init__(self, interpreter: str = PYTHON_BIN):
        super().__init__()
        self.interpreter = interpreter

    def run_command(self, source: str, binary: Optional[str], directory: str) -> List[str]:
        return [self.interpreter, source]
