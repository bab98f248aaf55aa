"""
bakery.compression

Compression boundary for embedded payloads.

The decoder never compresses or decompresses. A loader that keeps payloads
compressed hands the compressed bytes and the uncompressed length to a
decompressor callable and passes the resulting words on. zlib is the
default on both sides; callers are free to plug in anything with the same
shape.
"""

from __future__ import annotations

import zlib
from typing import Callable, Tuple

import numpy as np

from .errors import HeaderFormatError
from .header import WordsLike, as_words, words_to_bytes

# (compressed_bytes, expected_length) -> raw_bytes
Decompressor = Callable[[bytes, int], bytes]


def zlib_decompress(data: bytes, expected_length: int) -> bytes:
    return zlib.decompress(bytes(data), bufsize=max(1, int(expected_length)))


def compress_words(words: WordsLike, *, level: int = 9) -> Tuple[bytes, int]:
    """
    zlib-compress the byte image of a word sequence.

    Returns (compressed_bytes, uncompressed_length).
    """
    raw = words_to_bytes(words)
    return zlib.compress(raw, level=int(level)), len(raw)


def words_from_compressed(
    data: bytes,
    expected_length: int,
    decompress: Decompressor = zlib_decompress,
) -> np.ndarray:
    """
    Run `decompress` and view the result as a word sequence.

    The decompressor must return exactly `expected_length` bytes.
    """
    raw = decompress(bytes(data), int(expected_length))
    if len(raw) != int(expected_length):
        raise HeaderFormatError(f"Decompressor returned {len(raw)} bytes, expected {int(expected_length)}")
    return as_words(raw)
