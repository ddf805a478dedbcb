"""Fixtures shared by the test modules."""

from pathlib import Path
from typing import Dict, List, Optional

from buildplan.source import DirEntry, LocalSource, SourceAccessor


def create_test_repo(repo_path: Path, files: Dict[str, str]) -> Path:
    """Create a test repository structure."""
    repo_path.mkdir(parents=True, exist_ok=True)

    for file_path, content in files.items():
        full_path = repo_path / file_path
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_text(content)

    return repo_path


class CountingSource(SourceAccessor):
    """Source accessor that records every probe it serves."""

    def __init__(self, root: Path):
        self.inner = LocalSource(root)
        self.calls: List[str] = []

    def exists(self, path: str) -> bool:
        self.calls.append(f'exists:{path}')
        return self.inner.exists(path)

    def read_file(self, path: str) -> Optional[bytes]:
        self.calls.append(f'read_file:{path}')
        return self.inner.read_file(path)

    def list_dir(self, path: str) -> Optional[List[DirEntry]]:
        self.calls.append(f'list_dir:{path}')
        return self.inner.list_dir(path)
