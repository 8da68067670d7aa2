"""Domain errors (typed) for the post stores.

Business outcomes (slug taken, post missing) are returned as ``Result``
failures by the repository. The classes below are what the store adapters
raise; the repository translates the two expected ones and lets every
``StorageError`` propagate.
"""


class DomainError(Exception):
    """Base class for domain-specific errors."""


class StorageError(DomainError):
    """Unexpected failure of a backing store."""


class MetadataStoreError(StorageError):
    """Metadata (relational) store failed or is misconfigured."""


class BlobStoreError(StorageError):
    """Blob (object) store failed or is misconfigured."""


class SlugConflictError(DomainError):
    """Insert rejected by the metadata store's unique slug constraint."""

    def __init__(self, slug: str) -> None:
        super().__init__(f"slug already exists: {slug}")
        self.slug = slug


class PostNotFoundError(DomainError):
    """No metadata row exists for the slug."""

    def __init__(self, slug: str) -> None:
        super().__init__(f"post not found: {slug}")
        self.slug = slug
