# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Content-addressed artifact storage."""

from src.infrastructure.storage.content_store import (
    ArtifactNotFoundError,
    ContentStore,
    StorageError,
    content_hash,
)

__all__ = [
    "ArtifactNotFoundError",
    "ContentStore",
    "StorageError",
    "content_hash",
]
