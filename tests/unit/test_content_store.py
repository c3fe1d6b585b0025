# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the content store."""

import hashlib

import pytest

from src.infrastructure.storage import (
    ArtifactNotFoundError,
    ContentStore,
    StorageError,
    content_hash,
)


class TestContentHash:
    """Tests for content_hash."""

    def test_sha256_by_default(self):
        """Test the default digest is SHA-256 hex."""
        assert content_hash(b"abc") == hashlib.sha256(b"abc").hexdigest()

    def test_deterministic(self):
        """Test identical bytes give identical hashes."""
        assert content_hash(b"<Importacao/>") == content_hash(b"<Importacao/>")
        assert content_hash(b"a") != content_hash(b"b")

    def test_other_algorithm(self):
        """Test another hashlib algorithm can be selected."""
        assert content_hash(b"abc", "md5") == hashlib.md5(b"abc").hexdigest()


class TestContentStore:
    """Tests for ContentStore."""

    @pytest.mark.asyncio
    async def test_put_and_get(self, content_store):
        """Test stored bytes are read back unchanged."""
        path = await content_store.put("abc.xml", b"<Importacao/>")

        assert path.is_file()
        assert await content_store.get("abc.xml") == b"<Importacao/>"
        assert await content_store.exists("abc.xml") is True

    @pytest.mark.asyncio
    async def test_put_creates_subdirectories(self, content_store):
        """Test nested names create their directory."""
        await content_store.put("consolidated/abc.csv", b"RA,Nome\n")

        assert await content_store.get("consolidated/abc.csv") == b"RA,Nome\n"

    @pytest.mark.asyncio
    async def test_put_overwrites(self, content_store):
        """Test writing the same name replaces the content."""
        await content_store.put("abc.xml", b"old")
        await content_store.put("abc.xml", b"new")

        assert await content_store.get("abc.xml") == b"new"

    @pytest.mark.asyncio
    async def test_no_temporary_files_left(self, content_store):
        """Test the atomic write leaves only the final file."""
        await content_store.put("abc.xml", b"data")

        assert [p.name for p in content_store.root.iterdir()] == ["abc.xml"]

    @pytest.mark.asyncio
    async def test_missing_artifact(self, content_store):
        """Test reading a missing artifact raises ArtifactNotFoundError."""
        assert await content_store.exists("missing.xml") is False

        with pytest.raises(ArtifactNotFoundError):
            await content_store.get("missing.xml")

    @pytest.mark.parametrize("name", ["../escape.xml", "consolidated/../../escape.xml", ""])
    def test_rejects_names_outside_root(self, content_store, name):
        """Test path traversal is rejected."""
        with pytest.raises(StorageError):
            content_store.path_for(name)

    def test_root_accepts_string(self, tmp_path):
        """Test the root may be given as a string."""
        store = ContentStore(str(tmp_path))

        assert store.path_for("a.xml") == (tmp_path / "a.xml").resolve()
