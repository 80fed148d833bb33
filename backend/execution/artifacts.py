"""
Shared artifact directory with a bounded number of live files
"""

import logging
import os
import threading
import time
import uuid
from dataclasses import dataclass
from typing import Dict, Iterable, List, NamedTuple

from .config import ARTIFACT_DIR, MAX_FILES
from .models import ArtifactError, ArtifactRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Artifact:
    """A file written to the shared directory on behalf of one submission"""
    path: str
    role: ArtifactRole
    created_at: float


class _Entry(NamedTuple):
    created_ns: int
    name: str
    path: str


class ArtifactStore:
    """
    Owns the shared artifact directory.

    Listing, eviction and admission run under one lock so concurrent
    submissions cannot push the directory past ``max_files``. Paths handed
    out by ``write``, ``expect`` or ``adopt`` stay held until ``delete`` releases them;
    eviction removes unheld files first and only falls back to held ones
    when nothing else can make room.
    """

    def __init__(self, directory: str = ARTIFACT_DIR, max_files: int = MAX_FILES):
        if max_files < 1:
            raise ValueError("max_files must be at least 1")
        self.directory = os.path.abspath(directory)
        self.max_files = max_files
        self._lock = threading.Lock()
        self._held: Dict[str, Artifact] = {}
        os.makedirs(self.directory, exist_ok=True)

    @staticmethod
    def new_submission_id() -> str:
        return f"code_{time.time_ns()}_{uuid.uuid4().hex[:8]}"

    def path_for(self, name: str) -> str:
        """
        Resolve a bare file name inside the artifact directory

        Raises:
            ValueError: If the name would escape the directory
        """
        if not name or os.path.basename(name) != name or name in ('.', '..'):
            raise ValueError(f"Invalid artifact name: {name!r}")
        return os.path.join(self.directory, name)

    def reserve_slot(self) -> None:
        """Evict the oldest artifacts until one more file fits under the bound"""
        with self._lock:
            self._make_room(1)

    def write(self, name: str, data: bytes, role: ArtifactRole = ArtifactRole.SOURCE) -> Artifact:
        """
        Admit a new artifact and persist ``data`` to it

        Raises:
            ArtifactError: If the file cannot be written
        """
        path = self.path_for(name)
        with self._lock:
            self._make_room(0 if self._occupies(path) else 1)
            try:
                with open(path, 'wb') as f:
                    f.write(data)
            except OSError as e:
                logger.error(f"Failed to write artifact {name}: {e}")
                raise ArtifactError("Failed to store submission") from e
            artifact = Artifact(path=path, role=role, created_at=time.time())
            self._held[path] = artifact
        return artifact

    def expect(self, name: str, role: ArtifactRole = ArtifactRole.COMPILED_BINARY) -> Artifact:
        """Reserve room for a file an external tool (e.g. a compiler) will create"""
        path = self.path_for(name)
        with self._lock:
            self._make_room(0 if self._occupies(path) else 1)
            artifact = Artifact(path=path, role=role, created_at=time.time())
            self._held[path] = artifact
        return artifact

    def adopt(self, names: Iterable[str], role: ArtifactRole = ArtifactRole.COMPILED_BINARY) -> List[Artifact]:
        """Take ownership of files a build step already created, evicting others to stay within the bound"""
        with self._lock:
            artifacts = []
            for name in names:
                path = self.path_for(name)
                artifact = Artifact(path=path, role=role, created_at=time.time())
                self._held[path] = artifact
                artifacts.append(artifact)
            self._make_room(0)
        return artifacts

    def delete(self, paths: Iterable[str]) -> None:
        """Remove the given files; missing files are ignored and failures only logged"""
        for path in paths:
            with self._lock:
                self._held.pop(path, None)
                try:
                    os.remove(path)
                except FileNotFoundError:
                    pass
                except OSError as e:
                    logger.warning(f"Failed to delete artifact {os.path.basename(path)}: {e}")

    def live_count(self) -> int:
        return len(self._list_files())

    def held_paths(self) -> List[str]:
        with self._lock:
            return list(self._held)

    def _occupies(self, path: str) -> bool:
        return path in self._held or os.path.isfile(path)

    def _list_files(self) -> List[_Entry]:
        entries = []
        try:
            with os.scandir(self.directory) as it:
                for entry in it:
                    try:
                        if entry.is_file():
                            entries.append(_Entry(entry.stat().st_mtime_ns, entry.name, entry.path))
                    except FileNotFoundError:
                        # Removed by a concurrent cleanup between listing and stat
                        continue
        except FileNotFoundError:
            os.makedirs(self.directory, exist_ok=True)
        return entries

    def _make_room(self, needed: int) -> None:
        entries = self._list_files()
        on_disk = {e.path for e in entries}
        pending = sum(1 for p in self._held if p not in on_disk)
        excess = len(entries) + pending + needed - self.max_files
        if excess <= 0:
            return

        # Unheld files first, then oldest by creation time
        entries.sort(key=lambda e: (e.path in self._held, e.created_ns, e.name))
        for entry in entries[:excess]:
            if entry.path in self._held:
                logger.warning(f"Evicting in-flight artifact {entry.name} to stay within {self.max_files} files")
                self._held.pop(entry.path, None)
            try:
                os.remove(entry.path)
                logger.info(f"Evicted artifact {entry.name}")
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.error(f"Failed to delete old file {entry.name}: {e}")
