"""Generated script cache.

The cache directory holds the generated build script, the hash of its last
written content, and the executor's own log and deps database:

    .ninjaforge/
    ├── build.ninja        # Generated script
    ├── script.sha256      # SHA256 of the last written script
    ├── .ninja_log         # Written by ninja
    └── .ninja_deps        # Header dependencies collected by ninja

Rewriting an unchanged script is skipped so its modification time only moves
when the build description actually changed.
"""

import hashlib
import logging
from pathlib import Path

from ..errors import CacheDirectoryCreationFailure
from .script_generator import CACHE_DIR, SCRIPT_NAME

HASH_FILE_NAME = "script.sha256"


class ScriptCache:
    """Manages the ninjaforge cache directory of a project."""

    def __init__(self, project_dir: Path):
        """Initialize cache manager.

        Args:
            project_dir: Project root directory
        """
        self.project_dir = Path(project_dir)
        self.cache_dir = self.project_dir / CACHE_DIR
        self.script_path = self.cache_dir / SCRIPT_NAME
        self.hash_path = self.cache_dir / HASH_FILE_NAME

    @staticmethod
    def hash_script(text: str) -> str:
        """SHA256 hex digest of script text."""
        return hashlib.sha256(text.encode("utf-8")).hexdigest()

    def ensure_directories(self, *extra: Path) -> None:
        """Create the cache directory and any extra directories.

        Raises:
            CacheDirectoryCreationFailure: If a directory cannot be created
        """
        for directory in (self.cache_dir, *extra):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise CacheDirectoryCreationFailure(
                    f"Failed to create directory {directory}: {e}"
                ) from e

    def cached_hash(self) -> str:
        try:
            return self.hash_path.read_text(encoding="utf-8").strip()
        except OSError:
            return ""

    def is_current(self, text: str) -> bool:
        """Check whether the script on disk already has this content."""
        return self.script_path.exists() and self.cached_hash() == self.hash_script(text)

    def write_script(self, text: str) -> bool:
        """Write the script unless the cached copy is identical.

        Returns:
            True if the script was written, False if it was already current
        """
        if self.is_current(text):
            logging.debug(f"Build script unchanged, keeping {self.script_path}")
            return False

        self.ensure_directories()
        with open(self.script_path, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
        self.hash_path.write_text(self.hash_script(text), encoding="utf-8")
        logging.debug(f"Wrote build script {self.script_path}")
        return True
