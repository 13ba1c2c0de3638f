"""
Patch file storage: one flat directory, one file per generated artifact.

Writes are independent per file name; no locking. A same-name write replaces
the previous file.
"""

import logging
from pathlib import Path

from sqlpatch.models import GeneratedArtifact

logger = logging.getLogger(__name__)


class ArtifactWriteError(OSError):
    """Raised when a generated patch file cannot be written."""

    pass


class ArtifactStore:
    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def ensure_directory(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, file_name: str) -> Path:
        """Path of *file_name* inside the store; rejects anything that is not a bare name."""
        name = Path(file_name).name
        if not name or name != file_name:
            raise ValueError(f"Invalid artifact file name: {file_name!r}")
        return self.directory / name

    def write(self, artifact: GeneratedArtifact) -> Path:
        path = self.path_for(artifact.file_name)
        try:
            path.write_text(artifact.content, encoding="utf-8")
        except OSError as e:
            logger.error("Cannot write patch file %s: %s", path, e)
            raise ArtifactWriteError(f"Cannot write patch file {artifact.file_name}: {e}") from e
        return path
