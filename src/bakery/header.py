"""
bakery.header

Header layout, word handling and element-count rules for embedded payloads.

A payload is a flat sequence of little-endian 64-bit words. The first three
words are reserved for the header, the payload proper always starts at
word 3:

    word 0 (always)            kind[u8] bpp[u8] pad[u16] bit_count[u32]
    word 1 (kind != GENERIC)   width[u16] height[u16] pad[u32]
    word 2 (DUAL_COLOR_IMAGE)  color0[u32] color1[u32]
    word 3..                   payload, ceil(bit_count / 8) meaningful bytes

Fields are packed low-to-high inside each word with explicit shifts, so the
layout does not depend on the host byte order. Words that are not meaningful
for a kind are never read, which lets a GENERIC payload with no data be
supplied as a single word.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Sequence, Union

import numpy as np

from .errors import HeaderFormatError, UnsupportedKindError

# ===================== Constants =====================

WORD_BYTES = 8
HEADER_WORDS = 3
PAYLOAD_OFFSET_WORDS = 3
MAX_BPP = 4

_U8 = 0xFF
_U16 = 0xFFFF
_U32 = 0xFFFFFFFF

WordsLike = Union[np.ndarray, Sequence[int], bytes, bytearray, memoryview]


class PayloadKind(IntEnum):
    GENERIC = 0
    IMAGE = 1
    DUAL_COLOR_IMAGE = 2


def header_word_count(kind: PayloadKind) -> int:
    """Number of leading words that carry header fields for `kind`."""
    kind = PayloadKind(kind)
    if kind == PayloadKind.GENERIC:
        return 1
    if kind == PayloadKind.IMAGE:
        return 2
    return 3


# ===================== Header type =====================

def _check_range(name: str, value: int, mask: int) -> None:
    if value < 0 or value > mask:
        raise HeaderFormatError(f"{name}={value} does not fit in its header field")


@dataclass(frozen=True)
class Header:
    """
    Decoded payload header.

    Fields that have no meaning for `kind` are None: GENERIC headers carry no
    dimensions, and only DUAL_COLOR_IMAGE headers carry the two palette
    colors. Use the `generic`, `image` and `dual_color_image` constructors
    rather than filling the fields by hand.
    """

    kind: PayloadKind
    bpp: int
    bit_count: int
    width: Optional[int] = None
    height: Optional[int] = None
    color0: Optional[int] = None
    color1: Optional[int] = None

    def __post_init__(self) -> None:
        try:
            kind = PayloadKind(self.kind)
        except ValueError:
            raise HeaderFormatError(f"Unknown payload kind {self.kind}") from None
        object.__setattr__(self, "kind", kind)

        _check_range("bpp", int(self.bpp), _U8)
        _check_range("bit_count", int(self.bit_count), _U32)

        has_dims = kind != PayloadKind.GENERIC
        if has_dims and not (1 <= int(self.bpp) <= MAX_BPP):
            raise HeaderFormatError(f"{kind.name} header needs bpp in 1..{MAX_BPP}, got {self.bpp}")
        has_colors = kind == PayloadKind.DUAL_COLOR_IMAGE
        for name, mask, present in (
            ("width", _U16, has_dims),
            ("height", _U16, has_dims),
            ("color0", _U32, has_colors),
            ("color1", _U32, has_colors),
        ):
            value = getattr(self, name)
            if present:
                if value is None:
                    raise HeaderFormatError(f"{kind.name} header requires {name}")
                _check_range(name, int(value), mask)
            elif value is not None:
                raise HeaderFormatError(f"{kind.name} header has no {name} field")

    @classmethod
    def generic(cls, bit_count: int) -> "Header":
        return cls(PayloadKind.GENERIC, 0, int(bit_count))

    @classmethod
    def image(cls, bpp: int, width: int, height: int, bit_count: Optional[int] = None) -> "Header":
        if bit_count is None:
            bit_count = int(width) * int(height) * int(bpp) * 8
        return cls(PayloadKind.IMAGE, int(bpp), int(bit_count), width=int(width), height=int(height))

    @classmethod
    def dual_color_image(
        cls,
        bpp: int,
        width: int,
        height: int,
        color0: int,
        color1: int,
        bit_count: Optional[int] = None,
    ) -> "Header":
        if bit_count is None:
            bit_count = int(width) * int(height)
        return cls(
            PayloadKind.DUAL_COLOR_IMAGE,
            int(bpp),
            int(bit_count),
            width=int(width),
            height=int(height),
            color0=int(color0),
            color1=int(color1),
        )

    @property
    def is_image(self) -> bool:
        return self.kind in (PayloadKind.IMAGE, PayloadKind.DUAL_COLOR_IMAGE)

    @property
    def word_count(self) -> int:
        return header_word_count(self.kind)


# ===================== Word sequences =====================

def as_words(words: WordsLike) -> np.ndarray:
    """
    Normalise a word sequence into a 1-D little-endian uint64 array.

    Accepts a numpy array, a sequence of Python ints, or a bytes-like object
    whose length is a multiple of 8. Integer arrays with 8-byte items hold
    one word per element; arrays with 1-byte items are taken as the byte
    image of the words. Arrays that are already `<u8` are returned without
    copying.
    """
    if isinstance(words, np.ndarray):
        if words.ndim != 1:
            raise HeaderFormatError("Word sequence must be one-dimensional")
        if words.dtype.kind not in "ui":
            raise HeaderFormatError(f"Word sequence has non-integer dtype {words.dtype}")
        if words.dtype.itemsize == 1:
            return as_words(memoryview(np.ascontiguousarray(words)).cast("B"))
        if words.dtype.itemsize != WORD_BYTES:
            raise HeaderFormatError(f"Word arrays need {WORD_BYTES}-byte items, got dtype {words.dtype}")
        return np.ascontiguousarray(words.astype("<u8", copy=False))

    if isinstance(words, (bytes, bytearray, memoryview)):
        raw = memoryview(words).cast("B")
        if len(raw) % WORD_BYTES:
            raise HeaderFormatError(f"Byte length {len(raw)} is not a multiple of {WORD_BYTES}")
        return np.frombuffer(raw, dtype="<u8")

    try:
        return np.array([int(w) for w in words], dtype="<u8")
    except OverflowError:
        raise HeaderFormatError("Word value outside the unsigned 64-bit range") from None


def words_to_bytes(words: WordsLike) -> bytes:
    """Serialise a word sequence to its little-endian byte image."""
    return as_words(words).tobytes()


# ===================== Header codec =====================

def pack_header(head: Header) -> np.ndarray:
    """
    Pack `head` into the three leading words.

    Words that carry no field for the header's kind are zero.
    """
    out = np.zeros(HEADER_WORDS, dtype=np.uint64)
    out[0] = int(head.kind) | (int(head.bpp) << 8) | (int(head.bit_count) << 32)
    if head.kind != PayloadKind.GENERIC:
        out[1] = int(head.width) | (int(head.height) << 16)
    if head.kind == PayloadKind.DUAL_COLOR_IMAGE:
        out[2] = int(head.color0) | (int(head.color1) << 32)
    return out


def _kind_of(words: np.ndarray) -> PayloadKind:
    if words.size < 1:
        raise HeaderFormatError("Word sequence too short for header")
    value = int(words[0]) & _U8
    try:
        return PayloadKind(value)
    except ValueError:
        raise HeaderFormatError(f"Unknown payload kind {value}") from None


def parse_header(words: WordsLike) -> Header:
    """
    Parse the header at the front of a word sequence.

    Word 1 is read only for image kinds and word 2 only for
    DUAL_COLOR_IMAGE; a sequence shorter than the kind requires raises
    HeaderFormatError instead of reading past its end.
    """
    w = as_words(words)
    kind = _kind_of(w)
    if w.size < header_word_count(kind):
        raise HeaderFormatError(f"{kind.name} header needs {header_word_count(kind)} words, got {w.size}")

    w0 = int(w[0])
    bpp = (w0 >> 8) & _U8
    bit_count = (w0 >> 32) & _U32

    if kind == PayloadKind.GENERIC:
        return Header(kind, bpp, bit_count)

    w1 = int(w[1])
    width = w1 & _U16
    height = (w1 >> 16) & _U16
    if kind == PayloadKind.IMAGE:
        return Header(kind, bpp, bit_count, width=width, height=height)

    w2 = int(w[2])
    return Header(
        kind,
        bpp,
        bit_count,
        width=width,
        height=height,
        color0=w2 & _U32,
        color1=(w2 >> 32) & _U32,
    )


def is_image(words: WordsLike) -> bool:
    return _kind_of(as_words(words)) != PayloadKind.GENERIC


def get_width(words: WordsLike) -> Optional[int]:
    """Image width in pixels, or None for generic payloads."""
    w = as_words(words)
    if not is_image(w):
        return None
    return parse_header(w).width


def get_height(words: WordsLike) -> Optional[int]:
    """Image height in pixels, or None for generic payloads."""
    w = as_words(words)
    if not is_image(w):
        return None
    return parse_header(w).height


# ===================== Element counts =====================

def element_count(source: Union[Header, WordsLike], dtype=None) -> int:
    """
    Number of elements the payload decodes to.

    Without `dtype` the count is only defined for images, where it is the
    pixel count; a GENERIC payload raises UnsupportedKindError because no
    element size can be inferred. With `dtype`, DUAL_COLOR_IMAGE still
    yields the pixel count, while GENERIC and IMAGE yield the number of
    whole `dtype` elements in the populated payload bytes. A trailing
    partial element is dropped.

    `source` may be a parsed Header or a raw word sequence.
    """
    head = source if isinstance(source, Header) else parse_header(source)

    if dtype is None:
        if head.kind == PayloadKind.GENERIC:
            raise UnsupportedKindError("Generic payloads need an element type to count elements")
        return int(head.width) * int(head.height)

    if head.kind == PayloadKind.DUAL_COLOR_IMAGE:
        return element_count(head)

    itemsize = np.dtype(dtype).itemsize
    if itemsize <= 0:
        raise UnsupportedKindError(f"Element type {np.dtype(dtype)} has no size")
    return (int(head.bit_count) // 8) // itemsize
