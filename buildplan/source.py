"""Read-only access to the project tree being planned."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
import logging
import os

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirEntry:
    """One entry of a directory listing."""

    name: str
    is_dir: bool


class SourceAccessor(ABC):
    """
    Path-addressable view of a project.

    All paths are relative to the project root. Missing files and
    directories are reported as ``None`` (or ``False`` for ``exists``),
    never raised.
    """

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Return True if the path exists in the project."""

    @abstractmethod
    def read_file(self, path: str) -> Optional[bytes]:
        """Return the file contents, or None when it cannot be read."""

    @abstractmethod
    def list_dir(self, path: str) -> Optional[List[DirEntry]]:
        """Return the directory entries, or None when it cannot be listed."""

    def read_text(self, path: str) -> Optional[str]:
        """Read a file and decode it as UTF-8, replacing undecodable bytes."""
        content = self.read_file(path)
        if content is None:
            return None
        return content.decode('utf-8', errors='replace')


class LocalSource(SourceAccessor):
    """Source accessor backed by a directory on the local filesystem."""

    def __init__(self, root: Path):
        """
        Initialize accessor for a project directory.

        Args:
            root: Path to the project root
        """
        self.root = Path(root)

    def _resolve(self, path: str) -> Optional[Path]:
        """Map a project-relative path onto the filesystem, refusing escapes.

        The check is lexical: symlinks inside the project are followed even
        when they point elsewhere, as shared manifests in monorepos do.
        """
        relative = os.path.normpath(path.strip('/') or '.')
        if relative == '..' or relative.startswith('..' + os.sep) or os.path.isabs(relative):
            logger.warning(f"Refusing path outside project root: {path}")
            return None
        return self.root / relative

    def exists(self, path: str) -> bool:
        full_path = self._resolve(path)
        return full_path is not None and full_path.exists()

    def read_file(self, path: str) -> Optional[bytes]:
        full_path = self._resolve(path)
        if full_path is None:
            return None
        try:
            return full_path.read_bytes()
        except OSError:
            return None

    def list_dir(self, path: str) -> Optional[List[DirEntry]]:
        full_path = self._resolve(path)
        if full_path is None:
            return None
        try:
            children = sorted(full_path.iterdir(), key=lambda child: child.name)
        except OSError:
            return None
        return [DirEntry(name=child.name, is_dir=child.is_dir()) for child in children]

    def __repr__(self) -> str:
        return f"LocalSource({str(self.root)!r})"
