"""resgen/naming.py — deterministic names for generated variables.

Generated variable names are derived from a per-prefix counter, so the
same input always produces byte-for-byte the same output.  Byte buffers
are keyed by a SHA-256 digest of their content.
"""

from __future__ import annotations

import hashlib
from collections import Counter
from typing import Union

__all__ = ["NameGenerator", "content_hash"]


def content_hash(data: Union[bytes, bytearray, memoryview]) -> str:
    """Return the hex SHA-256 digest of *data*."""
    return hashlib.sha256(bytes(data)).hexdigest()


class NameGenerator:
    """Mints unique C identifiers such as ``tree0``, ``tree1``, ``file0``.

    Counters are independent per prefix and start at zero.  One generator
    is owned by one compilation.
    """

    def __init__(self) -> None:
        self._counters: Counter[str] = Counter()

    def next_index(self, prefix: str) -> int:
        index = self._counters[prefix]
        self._counters[prefix] += 1
        return index

    def next(self, prefix: str) -> str:
        return f"{prefix}{self.next_index(prefix)}"
