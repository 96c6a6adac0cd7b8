"""
Source file discovery.

This module handles:
- Walking configured search roots for C++ implementation files
- Rewriting discovered paths relative to the project root
- Merging discovered files with explicitly declared build files
- Reporting missing search roots without aborting discovery
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import Iterable, Iterator, List

from ..errors import MissingSearchRoot

IMPLEMENTATION_EXTENSIONS = (".cc", ".cxx", ".cpp")


@dataclass
class SourceCollection:
    """Source files found for one build."""

    discovered: List[str] = field(default_factory=list)    # From search roots
    declared: List[str] = field(default_factory=list)      # Explicit build files
    missing_roots: List[MissingSearchRoot] = field(default_factory=list)

    def all_sources(self) -> List[str]:
        """Discovered files followed by declared ones, without duplicates."""
        seen = set()
        merged = []
        for source in self.discovered + self.declared:
            if source not in seen:
                seen.add(source)
                merged.append(source)
        return merged


class SourceScanner:
    """
    Scans search roots for implementation files.

    The scanner:
    1. Resolves each search root against the project directory
    2. Recursively collects .cc/.cxx/.cpp files in sorted order per directory
    3. Logs and records roots that do not exist, then carries on
    4. Appends explicit build files in declaration order
    5. Returns a SourceCollection with project-relative POSIX paths
    """

    def __init__(self, project_dir: Path):
        """
        Initialize source scanner.

        Args:
            project_dir: Root project directory
        """
        self.project_dir = Path(project_dir).resolve()

    def scan(
        self,
        search_roots: Iterable[str] = (),
        build_files: Iterable[str] = ()
    ) -> SourceCollection:
        """
        Scan for all source files.

        Args:
            search_roots: Directories to search, relative to the project root
            build_files: Explicitly declared source files

        Returns:
            SourceCollection with all discovered and declared sources
        """
        collection = SourceCollection()

        for root in search_roots:
            try:
                collection.discovered.extend(self._scan_root(root))
            except MissingSearchRoot as e:
                logging.error(str(e))
                collection.missing_roots.append(e)

        for build_file in build_files:
            collection.declared.append(self.relative_to_project(build_file))

        return collection

    def _scan_root(self, root: str) -> List[str]:
        """
        Collect implementation files below one search root.

        Raises:
            MissingSearchRoot: If the root does not exist or is not a directory
        """
        root_path = self.project_dir / root
        try:
            is_dir = root_path.is_dir()
        except OSError:
            is_dir = False
        if not is_dir:
            raise MissingSearchRoot(root)

        return [
            PurePath(os.path.relpath(path, self.project_dir)).as_posix()
            for path in self._walk(root_path)
        ]

    def _walk(self, directory: Path) -> Iterator[Path]:
        try:
            entries = sorted(directory.iterdir())
        except OSError as e:
            logging.debug(f"Skipping unreadable directory {directory}: {e}")
            return

        for entry in entries:
            try:
                if entry.is_symlink() and entry.is_dir():
                    continue
                if entry.is_dir():
                    yield from self._walk(entry)
                elif entry.is_file() and entry.suffix in IMPLEMENTATION_EXTENSIONS:
                    yield entry
            except OSError as e:
                logging.debug(f"Skipping {entry}: {e}")

    def relative_to_project(self, path) -> str:
        """Rewrite a path relative to the project root as a POSIX string."""
        path = Path(path)
        if path.is_absolute():
            relative = os.path.relpath(path.resolve(), self.project_dir)
        else:
            relative = os.path.normpath(path)
        return PurePath(relative).as_posix()
