"""Source roots: scanning them for files and mapping files to namespaces."""

import os
import posixpath
from pathlib import Path
from typing import Iterable, Optional

from ..config import TreemapConfig
from ..logging_config import get_logger

logger = get_logger(__name__)


def _posix(path: str) -> str:
    return path.replace("\\", "/")


class SourceLayout:
    """Where the project's sources live and which parts to ignore."""

    def __init__(
        self,
        project_root: Path,
        source_directories: Iterable[str],
        excluded_directories: Iterable[str] = (),
        extensions: Iterable[str] = (".py",),
    ):
        self.project_root = _posix(str(project_root)).rstrip("/") or "/"
        self.source_directories = [_posix(d).strip("/") for d in source_directories]
        self.excluded_directories = [_posix(d).strip("/") for d in excluded_directories]
        self.extensions = tuple(e.lower() for e in extensions)

    @classmethod
    def from_config(cls, config: TreemapConfig) -> "SourceLayout":
        return cls(
            project_root=config.root_path,
            source_directories=config.source_directories,
            excluded_directories=config.excluded_directories,
            extensions=config.source_extensions,
        )

    # ── Paths ──────────────────────────────────────────────────

    def _absolute(self, path: str) -> str:
        path = _posix(path)
        if posixpath.isabs(path):
            return posixpath.normpath(path)
        return posixpath.normpath(posixpath.join(self.project_root, path))

    def _source_root(self, source_dir: str) -> str:
        if not source_dir or source_dir == ".":
            return self.project_root
        return posixpath.join(self.project_root, source_dir)

    def relative_to_project(self, path: str) -> Optional[str]:
        """Project-relative form of *path*, or None when it lies outside."""
        absolute = self._absolute(path)
        prefix = self.project_root.rstrip("/") + "/"
        if absolute.startswith(prefix):
            return absolute[len(prefix):]
        return None

    def is_excluded(self, path: str) -> bool:
        relative = self.relative_to_project(path)
        if relative is None:
            return False
        for excluded in self.excluded_directories:
            if relative == excluded or relative.startswith(excluded + "/"):
                return True
        return False

    def namespace_for(self, path: str) -> str:
        """Slash-joined namespace of *path*; ``""`` means directly in a source root.

        The first source root containing the file wins. Files outside every
        root are placed by their directory relative to the project root, and
        files outside the project by their parent directory's name.
        """
        absolute = self._absolute(path)

        for source_dir in self.source_directories:
            root = self._source_root(source_dir)
            if absolute.startswith(root.rstrip("/") + "/"):
                after = absolute[len(root.rstrip("/")) + 1:]
                directory = posixpath.dirname(after)
                return "" if directory in ("", ".") else directory

        relative = self.relative_to_project(absolute)
        if relative is not None:
            directory = posixpath.dirname(relative)
            return "" if directory in ("", ".") else directory

        return posixpath.basename(posixpath.dirname(absolute))

    # ── Scanning ───────────────────────────────────────────────

    def discover(self) -> list[str]:
        """All source files under the configured roots, minus exclusions.

        Directories that disappear or cannot be listed mid-scan are skipped.
        """
        found: list[str] = []
        for source_dir in self.source_directories:
            root = self._source_root(source_dir)
            if not os.path.isdir(root):
                logger.debug(f"Source directory not found, skipping: {root}")
                continue

            for dirpath, dirnames, filenames in os.walk(root, onerror=self._on_walk_error):
                dirpath = _posix(dirpath)
                dirnames[:] = sorted(
                    d for d in dirnames if not self.is_excluded(posixpath.join(dirpath, d))
                )
                for filename in sorted(filenames):
                    if not filename.lower().endswith(self.extensions):
                        continue
                    full_path = posixpath.join(dirpath, filename)
                    if self.is_excluded(full_path):
                        continue
                    # Vanished since listing
                    if not os.path.isfile(full_path):
                        continue
                    found.append(full_path)

        logger.debug(f"Discovered {len(found)} source files")
        return found

    @staticmethod
    def _on_walk_error(error: OSError) -> None:
        logger.debug(f"Skipping unreadable directory: {error}")
