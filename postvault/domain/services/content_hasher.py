"""Content digest for post bodies.

Pure function, no state: the digest covers the UTF-8 bytes of the text and
is what ends up in ``PostRecord.content_hash``.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass


@dataclass(frozen=True)
class ContentMeta:
    length: int
    hash: str


def compute(content: str) -> ContentMeta:
    data = content.encode("utf-8")
    return ContentMeta(length=len(data), hash=hashlib.sha256(data).hexdigest())
