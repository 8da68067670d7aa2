"""Tests for the content digest (pure function)."""

import hashlib

from postvault.domain.services import content_hasher


def test_hash_is_sha256_hex_of_utf8_bytes():
    meta = content_hasher.compute("hello")
    assert meta.hash == "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"
    assert meta.length == 5


def test_empty_content():
    meta = content_hasher.compute("")
    assert meta.length == 0
    assert meta.hash == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


def test_length_counts_bytes_not_characters():
    meta = content_hasher.compute("日本語 é")
    assert meta.length == len("日本語 é".encode("utf-8")) == 12
    assert meta.hash == hashlib.sha256("日本語 é".encode("utf-8")).hexdigest()


def test_deterministic_and_content_sensitive():
    assert content_hasher.compute("## Title\n") == content_hasher.compute("## Title\n")
    assert content_hasher.compute("a").hash != content_hasher.compute("b").hash
