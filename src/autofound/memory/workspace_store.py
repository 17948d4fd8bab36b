"""
Per-agent workspace storage used by the file and memory tools.

Keys are slash-separated relative paths such as ``<user>/agents/<agent>/MEMORY.md``.  The default
implementation keeps them as plain files under ``settings.DATA_DIR``.
"""

import logging
from datetime import (
    datetime,
    timezone,
)
from pathlib import Path
from typing import (
    List,
    Protocol,
)

from pydantic import BaseModel

from autofound.core.errors import ToolExecutionError

logger = logging.getLogger(__name__)


class FileInfo(BaseModel):
    """Listing entry for one stored file."""

    key: str
    size: int
    last_modified: str | None = None


class WorkspaceStore(Protocol):
    """Storage capability consumed by the workspace tools."""

    def read(self, key: str) -> str | None:
        """Return the file content, or *None* if it does not exist."""

    def write(self, key: str, content: str) -> None:
        """Create or overwrite *key*."""

    def list(self, prefix: str) -> List[FileInfo]:
        """List files whose key starts with *prefix*."""

    def delete(self, key: str) -> None:
        """Remove *key* if present."""


class LocalWorkspaceStore:
    """Filesystem-backed :class:`WorkspaceStore`."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if path != self.root and self.root not in path.parents:
            raise ToolExecutionError(f"Path escapes the workspace: {key}")
        return path

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #
    def read(self, key: str) -> str | None:
        path = self._path(key)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, key: str, content: str) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        logger.debug("Wrote %d chars to %s", len(content), key)

    def list(self, prefix: str) -> List[FileInfo]:
        base = self._path(prefix)
        directory = base if prefix.endswith("/") or base.is_dir() else base.parent
        if not directory.is_dir():
            return []
        files: List[FileInfo] = []
        for path in sorted(directory.rglob("*")):
            if not path.is_file():
                continue
            key = path.relative_to(self.root).as_posix()
            if not key.startswith(prefix.rstrip("/")):
                continue
            stat = path.stat()
            modified = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc).isoformat()
            files.append(FileInfo(key=key, size=stat.st_size, last_modified=modified))
        return files

    def delete(self, key: str) -> None:
        path = self._path(key)
        if path.is_file():
            path.unlink()
