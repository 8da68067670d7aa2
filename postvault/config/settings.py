"""Application settings with environment-driven configuration.

This is the ONLY place where environment variables are read. All other
layers receive settings via dependency injection.
"""

import os
from dataclasses import dataclass, field


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass(frozen=True)
class AppSettings:
    """Application settings loaded from environment variables."""

    # ===== Metadata Store Configuration =====
    metadata_backend: str = field(
        default_factory=lambda: os.getenv("METADATA_BACKEND", "sqlite").lower()
    )
    # Supported: "sqlite" | "memory" (for testing)

    sqlite_path: str = field(
        default_factory=lambda: os.getenv("SQLITE_PATH", "var/postvault.sqlite3")
    )

    # ===== Blob Storage Configuration =====
    blobstore_backend: str = field(
        default_factory=lambda: os.getenv("BLOBSTORE_BACKEND", "fs").lower()
    )
    # Supported: "fs" | "minio" | "memory" (for testing)

    blob_root: str = field(default_factory=lambda: os.getenv("BLOB_ROOT", "var/blobs"))

    minio_endpoint: str = field(
        default_factory=lambda: os.getenv("MINIO_ENDPOINT", "localhost:9000")
    )
    minio_access_key: str = field(default_factory=lambda: os.getenv("MINIO_ACCESS_KEY", ""))
    minio_secret_key: str = field(default_factory=lambda: os.getenv("MINIO_SECRET_KEY", ""))
    minio_bucket: str = field(default_factory=lambda: os.getenv("MINIO_BUCKET", "posts"))
    minio_secure: bool = field(default_factory=lambda: _flag("MINIO_SECURE", "true"))
    minio_region: str | None = field(default_factory=lambda: os.getenv("MINIO_REGION") or None)

    # ===== Telemetry Configuration =====
    telemetry_enabled: bool = field(default_factory=lambda: _flag("TELEMETRY_ENABLED", "false"))
    otlp_endpoint: str = field(default_factory=lambda: os.getenv("OTLP_ENDPOINT", ""))
    # Empty string = no OTLP export

    telemetry_environment: str = field(
        default_factory=lambda: os.getenv("TELEMETRY_ENVIRONMENT", "production")
    )

    # ===== Logging =====
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())

    # ===== Maintenance =====
    sweep_grace_seconds: int = field(
        default_factory=lambda: int(os.getenv("SWEEP_GRACE_SECONDS", "300"))
    )
    # Blobs younger than this are never treated as orphans
