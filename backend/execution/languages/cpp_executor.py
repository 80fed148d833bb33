"""
C++ language executor
"""

from typing import List, Optional

from ..config import CXX
from .base import LanguageExecutor


class CppExecutor(LanguageExecutor):
    """Compiles with g++ into ``<submission>.out`` and runs the binary directly"""

    language = 'cpp'
    extension = '.cpp'

    def __init__(self, compiler: str = CXX):
        super().__init__()
        self.compiler = compiler

    def binary_name(self, submission_id: str) -> Optional[str]:
        return f"{submission_id}.out"

    def build_command(self, source: str, binary: Optional[str]) -> Optional[List[str]]:
        return [self.compiler, '-std=c++17', source, '-o', binary]

    def run_command(self, source: str, binary: Optional[str], directory: str) -> List[str]:
        return [binary]
