"""Tests for domain errors."""

from postvault.domain.errors import (
    BlobStoreError,
    DomainError,
    MetadataStoreError,
    PostNotFoundError,
    SlugConflictError,
    StorageError,
)


def test_store_errors_are_storage_errors():
    assert isinstance(MetadataStoreError("db down"), StorageError)
    assert isinstance(BlobStoreError("bucket gone"), StorageError)
    assert isinstance(StorageError("x"), DomainError)


def test_business_errors_are_not_storage_errors():
    """Conflict and not-found are translated by the repository, never propagated."""
    assert not isinstance(SlugConflictError("a"), StorageError)
    assert not isinstance(PostNotFoundError("a"), StorageError)
    assert isinstance(SlugConflictError("a"), DomainError)


def test_errors_carry_slug():
    err = SlugConflictError("hello")
    assert err.slug == "hello"
    assert str(err) == "slug already exists: hello"

    err = PostNotFoundError("missing")
    assert err.slug == "missing"
    assert str(err) == "post not found: missing"
