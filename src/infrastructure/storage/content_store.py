# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Content-addressed file storage.

Artifacts are addressed by a relative name derived from the content hash
of the upload that produced them:

    <hash>.xml                      original upload
    consolidated/<hash>.<format>    generated consolidated export

Writes go to a temporary file in the target directory and are moved into
place with os.replace, so a reader never sees a partial file and two
writers of the same name leave one complete copy behind.

Blocking filesystem calls run in a worker thread via asyncio.to_thread.
"""

import asyncio
import hashlib
import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when an artifact cannot be read or written."""

    pass


class ArtifactNotFoundError(StorageError):
    """Raised when a requested artifact does not exist."""

    pass


def content_hash(data: bytes, algorithm: str = "sha256") -> str:
    """Compute the hex digest used as storage key.

    Args:
        data: Raw bytes.
        algorithm: hashlib algorithm name.

    Returns:
        Lowercase hex digest.
    """
    return hashlib.new(algorithm, data).hexdigest()


class ContentStore:
    """Filesystem store for hash-addressed artifacts.

    Attributes:
        root: Base directory. Created on first write.
    """

    def __init__(self, root: Path | str) -> None:
        """Initialize the store.

        Args:
            root: Base directory for artifacts.
        """
        self.root = Path(root)

    def path_for(self, name: str) -> Path:
        """Resolve a relative artifact name to a path under root.

        Args:
            name: Relative artifact name, e.g. "consolidated/ab12.csv".

        Returns:
            Absolute path of the artifact.

        Raises:
            StorageError: If the name escapes the store root.
        """
        root = self.root.resolve()
        path = (root / name).resolve()
        if path == root or root not in path.parents:
            raise StorageError(f"Invalid artifact name: {name!r}")
        return path

    async def put(self, name: str, data: bytes) -> Path:
        """Write an artifact atomically.

        Args:
            name: Relative artifact name.
            data: Content to store.

        Returns:
            Path of the stored artifact.

        Raises:
            StorageError: If the write fails.
        """
        path = self.path_for(name)
        try:
            await asyncio.to_thread(self._write, path, data)
        except OSError as e:
            raise StorageError(f"Failed to store artifact {name}: {e}") from e

        logger.debug("Stored artifact: name=%s, bytes=%d", name, len(data))
        return path

    async def get(self, name: str) -> bytes:
        """Read an artifact.

        Args:
            name: Relative artifact name.

        Returns:
            Stored bytes.

        Raises:
            ArtifactNotFoundError: If the artifact does not exist.
            StorageError: If the read fails.
        """
        path = self.path_for(name)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError as e:
            raise ArtifactNotFoundError(f"Artifact not found: {name}") from e
        except OSError as e:
            raise StorageError(f"Failed to read artifact {name}: {e}") from e

    async def exists(self, name: str) -> bool:
        """Check whether an artifact is stored.

        Args:
            name: Relative artifact name.

        Returns:
            True if a file exists for the name.
        """
        path = self.path_for(name)
        return await asyncio.to_thread(path.is_file)

    @staticmethod
    def _write(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp-", suffix=path.suffix)
        try:
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(data)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
