"""
Java language executor
"""

import glob
import os
from typing import List, Optional

from ..artifacts import ArtifactStore
from ..config import JAVA, JAVAC
from .base import LanguageExecutor

MAIN_CLASS = 'Main'


class JavaExecutor(LanguageExecutor):
    """
    Compiles ``Main.java`` with javac and runs ``java -cp <artifact dir> Main``

    javac requires the file name to match the public class, so every
    submission uses the same Main.java / Main.class pair in the shared
    directory. Submissions are therefore serialized.
    """

    language = 'java'
    extension = '.java'
    serialized = True

    def __init__(self, compiler: str = JAVAC, runtime: str = JAVA):
        super().__init__()
        self.compiler = compiler
        self.runtime = runtime

    def source_name(self, submission_id: str) -> str:
        return f"{MAIN_CLASS}.java"

    def binary_name(self, submission_id: str) -> Optional[str]:
        return f"{MAIN_CLASS}.class"

    def build_command(self, source: str, binary: Optional[str]) -> Optional[List[str]]:
        return [self.compiler, source]

    def run_command(self, source: str, binary: Optional[str], directory: str) -> List[str]:
        return [self.runtime, '-cp', directory, MAIN_CLASS]

    def build_outputs(self, store: ArtifactStore) -> List[str]:
        # Nested and anonymous classes compile to Main$<name>.class
        pattern = os.path.join(glob.escape(store.directory), f"{MAIN_CLASS}$*.class")
        return sorted(os.path.basename(p) for p in glob.glob(pattern))
