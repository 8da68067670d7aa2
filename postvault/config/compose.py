"""Dependency injection container with environment-driven wiring.

Single place that picks adapters from settings and injects them into the
use cases; every other layer stays free of configuration.
"""

from __future__ import annotations

import logging
from pathlib import Path

from postvault.application.ports import BlobStorePort, ClockPort, MetadataStorePort, TelemetryPort
from postvault.application.use_cases.post_repository import PostRepository
from postvault.application.use_cases.sweep_orphaned_blobs import SweepOrphanedBlobs
from postvault.config.settings import AppSettings
from postvault.domain.errors import DomainError
from postvault.infrastructure.time.system_clock import SystemClock


class Container:
    """Dependency injection container for application components.

    Responsibilities:
    1. Read settings from environment (via AppSettings)
    2. Choose adapters based on settings (metadata_backend, blobstore_backend)
    3. Inject dependencies into use cases

    Adapters are built lazily and cached, so one container shares its
    stores between every use case it hands out.
    """

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        metadata: MetadataStorePort | None = None,
        blobs: BlobStorePort | None = None,
        clock: ClockPort | None = None,
        telemetry: TelemetryPort | None = None,
    ) -> None:
        """Initialize container with settings.

        Args:
            settings: Application settings (default: load from environment)
            metadata, blobs, clock, telemetry: Pre-built adapters that take
                precedence over the settings-driven ones (tests, embedding)
        """
        self.settings = settings or AppSettings()
        self._metadata = metadata
        self._blobs = blobs
        self._clock = clock
        self._telemetry = telemetry

    # ===== Adapters =====

    def get_metadata_store(self) -> MetadataStorePort:
        if self._metadata is None:
            self._metadata = self._build_metadata_store()
        return self._metadata

    def get_blob_store(self) -> BlobStorePort:
        if self._blobs is None:
            self._blobs = self._build_blob_store()
        return self._blobs

    def get_clock(self) -> ClockPort:
        if self._clock is None:
            self._clock = SystemClock()
        return self._clock

    def get_telemetry(self) -> TelemetryPort:
        if self._telemetry is None:
            self._telemetry = self._build_telemetry()
        return self._telemetry

    # ===== Use Cases =====

    def get_post_repository(self) -> PostRepository:
        return PostRepository(
            metadata=self.get_metadata_store(),
            blobs=self.get_blob_store(),
            clock=self.get_clock(),
            telemetry=self.get_telemetry(),
        )

    def get_sweep_use_case(self) -> SweepOrphanedBlobs:
        return SweepOrphanedBlobs(
            metadata=self.get_metadata_store(),
            blobs=self.get_blob_store(),
            clock=self.get_clock(),
        )

    # ===== Private Builder Methods =====

    def _build_metadata_store(self) -> MetadataStorePort:
        """Build metadata store based on settings.metadata_backend.

        Supports: sqlite | memory
        """
        backend = self.settings.metadata_backend

        if backend == "memory":
            from postvault.infrastructure.metadata.in_memory_metadata_store import (
                InMemoryMetadataStore,
            )

            return InMemoryMetadataStore()

        if backend == "sqlite":
            from postvault.infrastructure.metadata.sqlite_adapter import (
                SqliteConfig,
                SqliteMetadataStore,
            )

            return SqliteMetadataStore.open(SqliteConfig(path=Path(self.settings.sqlite_path)))

        raise DomainError(f"Unsupported metadata backend: {backend}")

    def _build_blob_store(self) -> BlobStorePort:
        """Build blob store based on settings.blobstore_backend.

        Supports: fs | minio | memory
        """
        backend = self.settings.blobstore_backend

        if backend == "memory":
            from postvault.infrastructure.blobstores.in_memory_blob_store import InMemoryBlobStore

            return InMemoryBlobStore(clock=self.get_clock())

        if backend == "fs":
            from postvault.infrastructure.blobstores.filesystem_blob_store import (
                FilesystemBlobStore,
            )

            return FilesystemBlobStore(Path(self.settings.blob_root))

        if backend == "minio":
            from postvault.infrastructure.blobstores.minio_adapter import (
                MinioBlobStoreAdapter,
                MinioConfig,
            )

            cfg = MinioConfig(
                endpoint=self.settings.minio_endpoint,
                access_key=self.settings.minio_access_key,
                secret_key=self.settings.minio_secret_key,
                bucket_name=self.settings.minio_bucket,
                secure=self.settings.minio_secure,
                region=self.settings.minio_region,
            )
            return MinioBlobStoreAdapter(cfg)

        raise DomainError(f"Unsupported blob store backend: {backend}")

    def _build_telemetry(self) -> TelemetryPort:
        """Build telemetry adapter based on settings.telemetry_enabled."""
        from postvault.infrastructure.telemetry.otel_adapter import (
            NoopTelemetry,
            OpenTelemetryAdapter,
            OtelConfig,
        )

        if not self.settings.telemetry_enabled:
            return NoopTelemetry()

        cfg = OtelConfig(
            service_name="postvault",
            otlp_endpoint=self.settings.otlp_endpoint or None,
            environment=self.settings.telemetry_environment,
        )
        return OpenTelemetryAdapter(cfg)


# ===== Convenience Functions =====


def build_container(settings: AppSettings | None = None) -> Container:
    """Build dependency injection container with settings.

    Example:
        container = build_container()
        repo = container.get_post_repository()
        result = await repo.create(CreatePostInput(...))
    """
    return Container(settings)


def configure_logging(settings: AppSettings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
