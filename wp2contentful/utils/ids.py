from __future__ import annotations

import hashlib
from typing import Optional

ENTRY_ID_LENGTH = 10


def derive_id(key: str, length: Optional[int] = ENTRY_ID_LENGTH) -> str:
    """
    Derive a deterministic Contentful ID from a stable natural key.

    The ID is the SHA-256 hex digest of ``key`` truncated to ``length``
    characters.  Passing ``length=None`` returns the full 64 character
    digest, which is what assets use.  Re-running an import therefore
    resolves every post, category and attachment to the same remote ID.
    """
    digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
    if length is None:
        return digest
    return digest[:length]
