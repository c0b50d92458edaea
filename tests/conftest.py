"""Shared test fixtures for the lexpatch test suite."""

from __future__ import annotations

import pytest

from lexpatch.config import LexpatchConfig
from lexpatch.repository import DocumentRepository
from lexpatch.storage.memory import InMemoryBlobStore


@pytest.fixture
def config() -> LexpatchConfig:
    """Default test configuration."""
    return LexpatchConfig()


@pytest.fixture
def store() -> InMemoryBlobStore:
    """Empty in-memory blob store."""
    return InMemoryBlobStore()


@pytest.fixture
def repo(store: InMemoryBlobStore, config: LexpatchConfig) -> DocumentRepository:
    """Repository with ``"file-1"`` already open."""
    repository = DocumentRepository(store, config)
    repository.open("file-1")
    return repository
