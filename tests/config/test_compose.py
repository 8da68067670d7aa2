"""Tests for the composition root (settings -> adapters -> use cases)."""

import pytest

from postvault.application.ports import BlobStorePort, MetadataStorePort
from postvault.application.use_cases.post_repository import PostRepository
from postvault.application.use_cases.sweep_orphaned_blobs import SweepOrphanedBlobs
from postvault.config.compose import Container, build_container
from postvault.config.settings import AppSettings
from postvault.domain.errors import DomainError
from postvault.infrastructure.blobstores.filesystem_blob_store import FilesystemBlobStore
from postvault.infrastructure.blobstores.in_memory_blob_store import InMemoryBlobStore
from postvault.infrastructure.metadata.in_memory_metadata_store import InMemoryMetadataStore
from postvault.infrastructure.metadata.sqlite_adapter import SqliteMetadataStore
from postvault.infrastructure.telemetry.otel_adapter import NoopTelemetry

ENV_VARS = [
    "METADATA_BACKEND",
    "SQLITE_PATH",
    "BLOBSTORE_BACKEND",
    "BLOB_ROOT",
    "MINIO_SECURE",
    "MINIO_REGION",
    "TELEMETRY_ENABLED",
    "LOG_LEVEL",
    "SWEEP_GRACE_SECONDS",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_settings_defaults():
    settings = AppSettings()
    assert settings.metadata_backend == "sqlite"
    assert settings.blobstore_backend == "fs"
    assert settings.minio_secure is True
    assert settings.minio_region is None
    assert settings.telemetry_enabled is False
    assert settings.log_level == "INFO"
    assert settings.sweep_grace_seconds == 300


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("METADATA_BACKEND", "MEMORY")
    monkeypatch.setenv("MINIO_SECURE", "false")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("SWEEP_GRACE_SECONDS", "60")

    settings = AppSettings()
    assert settings.metadata_backend == "memory"
    assert settings.minio_secure is False
    assert settings.log_level == "DEBUG"
    assert settings.sweep_grace_seconds == 60


def test_memory_backends(monkeypatch):
    monkeypatch.setenv("METADATA_BACKEND", "memory")
    monkeypatch.setenv("BLOBSTORE_BACKEND", "memory")
    container = build_container()

    assert isinstance(container.get_metadata_store(), InMemoryMetadataStore)
    assert isinstance(container.get_blob_store(), InMemoryBlobStore)
    assert isinstance(container.get_telemetry(), NoopTelemetry)


def test_sqlite_and_filesystem_backends(monkeypatch, tmp_path):
    monkeypatch.setenv("SQLITE_PATH", str(tmp_path / "meta.sqlite3"))
    monkeypatch.setenv("BLOB_ROOT", str(tmp_path / "blobs"))
    container = build_container()

    metadata = container.get_metadata_store()
    assert isinstance(metadata, SqliteMetadataStore)
    assert isinstance(metadata, MetadataStorePort)
    assert isinstance(container.get_blob_store(), FilesystemBlobStore)
    assert isinstance(container.get_blob_store(), BlobStorePort)
    assert (tmp_path / "meta.sqlite3").exists()
    metadata.close()


def test_use_cases_share_cached_adapters(monkeypatch):
    monkeypatch.setenv("METADATA_BACKEND", "memory")
    monkeypatch.setenv("BLOBSTORE_BACKEND", "memory")
    container = build_container()

    repo = container.get_post_repository()
    sweep = container.get_sweep_use_case()
    assert isinstance(repo, PostRepository)
    assert isinstance(sweep, SweepOrphanedBlobs)
    assert repo.metadata is sweep.metadata
    assert repo.blobs is sweep.blobs


def test_injected_adapters_take_precedence(metadata, blobs, clock):
    container = Container(AppSettings(), metadata=metadata, blobs=blobs, clock=clock)
    repo = container.get_post_repository()
    assert repo.metadata is metadata
    assert repo.blobs is blobs
    assert repo.clock is clock


def test_unsupported_backends_raise(monkeypatch):
    monkeypatch.setenv("METADATA_BACKEND", "postgres")
    monkeypatch.setenv("BLOBSTORE_BACKEND", "gcs")
    container = build_container()

    with pytest.raises(DomainError, match="metadata backend"):
        container.get_metadata_store()
    with pytest.raises(DomainError, match="blob store backend"):
        container.get_blob_store()
