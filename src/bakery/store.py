"""
bakery.store

Named collection of embedded payloads.

A program that embeds several assets registers each word sequence under a
name and decodes by name. Entries may be kept compressed; they are
expanded through a decompressor callable on every access, so the store
itself never caches decoded data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

import numpy as np

from .compression import Decompressor, words_from_compressed, zlib_decompress
from .decoder import decode, decode_into
from .errors import PayloadNotFoundError
from .header import Header, WordsLike, as_words, element_count, parse_header

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Entry:
    data: object
    uncompressed_length: Optional[int] = None

    @property
    def compressed(self) -> bool:
        return self.uncompressed_length is not None


class PayloadStore:
    """
    In-memory payload registry keyed by name.

    Uncompressed entries are held as word arrays. Compressed entries are
    held as (bytes, uncompressed_length) and run through `decompress`
    (zlib by default, or a per-call override) when accessed.
    """

    def __init__(
        self,
        payloads: Optional[Mapping[str, WordsLike]] = None,
        *,
        decompress: Decompressor = zlib_decompress,
    ) -> None:
        self._entries: Dict[str, _Entry] = {}
        self.decompress = decompress
        for name, words in (payloads or {}).items():
            self.add(name, words)

    def add(self, name: str, words: WordsLike) -> None:
        """Register an uncompressed word sequence; replaces any previous entry."""
        w = as_words(words).copy()
        w.setflags(write=False)
        parse_header(w)
        self._entries[name] = _Entry(w)
        logger.debug("store add name=%s words=%d", name, w.size)

    def add_compressed(self, name: str, data: bytes, uncompressed_length: int) -> None:
        """Register a compressed word sequence; replaces any previous entry."""
        self._entries[name] = _Entry(bytes(data), int(uncompressed_length))
        logger.debug("store add_compressed name=%s bytes=%d raw=%d", name, len(data), uncompressed_length)

    def names(self) -> List[str]:
        return list(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def _entry(self, name: str) -> _Entry:
        try:
            return self._entries[name]
        except KeyError:
            raise PayloadNotFoundError(name) from None

    def words(self, name: str, *, decompress: Optional[Decompressor] = None) -> np.ndarray:
        entry = self._entry(name)
        if not entry.compressed:
            return entry.data  # type: ignore[return-value]
        fn = decompress if decompress is not None else self.decompress
        return words_from_compressed(entry.data, entry.uncompressed_length, fn)  # type: ignore[arg-type]

    def header(self, name: str, *, decompress: Optional[Decompressor] = None) -> Header:
        return parse_header(self.words(name, decompress=decompress))

    def element_count(self, name: str, dtype=None, *, decompress: Optional[Decompressor] = None) -> int:
        return element_count(self.header(name, decompress=decompress), dtype)

    def decode(self, name: str, dtype, *, decompress: Optional[Decompressor] = None) -> np.ndarray:
        return decode(self.words(name, decompress=decompress), dtype)

    def decode_into(self, name: str, out: np.ndarray, *, decompress: Optional[Decompressor] = None) -> int:
        return decode_into(self.words(name, decompress=decompress), out)
