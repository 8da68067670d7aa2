"""Application ports package.

Re-exports the store, clock and telemetry ports consumed by the use cases.
"""

from postvault.application.ports.blob_store_port import BlobInfo, BlobObject, BlobStorePort
from postvault.application.ports.clock_port import ClockPort
from postvault.application.ports.metadata_store_port import MetadataStorePort
from postvault.application.ports.telemetry_port import TelemetryPort

__all__ = [
    "BlobInfo",
    "BlobObject",
    "BlobStorePort",
    "ClockPort",
    "MetadataStorePort",
    "TelemetryPort",
]
