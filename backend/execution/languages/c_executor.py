"""
C language executor
"""

from typing import List, Optional

from ..config import CC
from .base import LanguageExecutor


class CExecutor(LanguageExecutor):
    language = 'c'
    extension = '.c'

    def __init__(self, compiler: str = CC):
        super().__init__()
        self.compiler = compiler

    def binary_name(self, submission_id: str) -> Optional[str]:
        return f"{submission_id}.out"

    def build_command(self, source: str, binary: Optional[str]) -> Optional[List[str]]:
        # -lm last so math symbols resolve after the object that needs them
        return [self.compiler, source, '-o', binary, '-lm']

    def run_command(self, source: str, binary: Optional[str], directory: str) -> List[str]:
        return [binary]
