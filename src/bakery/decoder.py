"""
bakery.decoder

Payload decoding: turns a word sequence into an array of caller-chosen
element type.

Three output modes share one dispatch rule. DUAL_COLOR_IMAGE payloads are
an index plane expanded through the two-color palette; GENERIC and IMAGE
payloads are copied verbatim and reinterpreted as the element type.

    decode_fixed(words, dtype, header)   exact-length array, header known ahead
    decode(words, dtype)                 array sized from the stored header
    decode_into(words, out)              fills a caller-allocated array

Element types are anything `np.dtype` accepts. Multi-channel pixels are
best described with a structured dtype, see `pixel_dtype`.

All functions are pure single passes over a read-only word sequence, so
concurrent decodes of the same buffer need no coordination.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from .bitplane import byte_count_from_bit_count, reconstruct_into, sized_color_pair
from .errors import CapacityError, FormatMismatchError, HeaderFormatError, HeaderMismatchError
from .header import (
    MAX_BPP,
    PAYLOAD_OFFSET_WORDS,
    WORD_BYTES,
    Header,
    PayloadKind,
    WordsLike,
    as_words,
    element_count,
    parse_header,
)

logger = logging.getLogger(__name__)

__all__ = ["pixel_dtype", "payload_bytes", "decode_fixed", "decode", "decode_into"]

_CHANNEL_NAMES = ("r", "g", "b", "a")
_GRAY_NAMES = ("l", "a")


def pixel_dtype(bpp: int) -> np.dtype:
    """
    Structured dtype with one uint8 field per channel.

    bpp=1 and bpp=2 use gray/alpha names (l, a); bpp=3 and bpp=4 use r, g,
    b and a.
    """
    bpp = int(bpp)
    if bpp < 1 or bpp > MAX_BPP:
        raise FormatMismatchError(f"Pixels hold 1..{MAX_BPP} channels, got {bpp}")
    names = _GRAY_NAMES if bpp <= 2 else _CHANNEL_NAMES
    return np.dtype([(name, np.uint8) for name in names[:bpp]])


def payload_bytes(words: WordsLike, head: Optional[Header] = None) -> np.ndarray:
    """
    Read-only uint8 view of the populated payload bytes.

    The view covers ceil(bit_count / 8) bytes starting at word 3. A word
    sequence too short to hold them raises HeaderFormatError.
    """
    w = as_words(words)
    if head is None:
        head = parse_header(w)
    n = byte_count_from_bit_count(head.bit_count)
    available = max(0, w.size - PAYLOAD_OFFSET_WORDS) * WORD_BYTES
    if n > available:
        raise HeaderFormatError(f"Header declares {n} payload bytes, word sequence holds {available}")
    if n == 0:
        return np.zeros(0, dtype=np.uint8)
    view = w[PAYLOAD_OFFSET_WORDS:].view(np.uint8)[:n]
    view.setflags(write=False)
    return view


def _check_element_type(head: Header, dtype: np.dtype) -> None:
    if head.kind == PayloadKind.DUAL_COLOR_IMAGE and dtype.itemsize != head.bpp:
        raise FormatMismatchError(
            f"Element type {dtype} is {dtype.itemsize} bytes but the payload stores {head.bpp} bytes per pixel"
        )


def _fill(out: np.ndarray, w: np.ndarray, head: Header, count: int) -> None:
    payload = payload_bytes(w, head)
    if head.kind == PayloadKind.DUAL_COLOR_IMAGE:
        color0, color1 = sized_color_pair(head, head.bpp)
        reconstruct_into(out, count, payload, color0, color1)
    elif count > 0:
        nbytes = count * out.dtype.itemsize
        out[:count] = np.frombuffer(payload[:nbytes].tobytes(), dtype=out.dtype)


def decode_fixed(words: WordsLike, dtype, head: Header) -> np.ndarray:
    """
    Decode into an array whose length is fixed by a header known ahead of time.

    The header stored in `words` must equal `head`, and `head` must resolve
    to at least one element of `dtype`.
    """
    dtype = np.dtype(dtype)
    _check_element_type(head, dtype)
    count = element_count(head, dtype)
    if count <= 0:
        raise CapacityError(f"Payload holds no complete element of type {dtype}")

    w = as_words(words)
    stored = parse_header(w)
    if stored != head:
        raise HeaderMismatchError(f"Stored header {stored} differs from expected {head}")

    out = np.empty(count, dtype=dtype)
    _fill(out, w, head, count)
    logger.debug("decode_fixed kind=%s count=%d dtype=%s", head.kind.name, count, dtype)
    return out


def decode(words: WordsLike, dtype) -> np.ndarray:
    """Decode into a newly allocated array sized from the stored header."""
    dtype = np.dtype(dtype)
    w = as_words(words)
    head = parse_header(w)
    _check_element_type(head, dtype)
    count = element_count(head, dtype)

    out = np.empty(count, dtype=dtype)
    _fill(out, w, head, count)
    logger.debug("decode kind=%s count=%d dtype=%s", head.kind.name, count, dtype)
    return out


def decode_into(words: WordsLike, out: np.ndarray) -> int:
    """
    Decode into the caller-supplied 1-D array `out` and return the element count.

    The element type is taken from `out.dtype`. Preconditions: `out` holds
    at least `element_count(words, out.dtype)` elements and does not share
    memory with `words`. Both are checked by assertions only, so running
    under `python -O` skips them. Elements past the count are left untouched.
    """
    w = as_words(words)
    head = parse_header(w)
    _check_element_type(head, out.dtype)
    count = element_count(head, out.dtype)

    assert out.ndim == 1 and out.shape[0] >= count, "destination holds fewer elements than the payload"
    assert not np.may_share_memory(out, w), "destination overlaps the source words"

    _fill(out, w, head, count)
    logger.debug("decode_into kind=%s count=%d dtype=%s", head.kind.name, count, out.dtype)
    return count
