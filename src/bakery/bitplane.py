"""
bakery.bitplane

Expansion of 1-bit index planes into two-color pixel arrays.

A DUAL_COLOR_IMAGE payload stores one selector bit per pixel, most
significant bit first inside every byte. Selector 0 picks color0 and
selector 1 picks color1. Palette entries are raw byte patterns that are
reinterpreted as the caller's element type; no color conversion happens.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from .errors import FormatMismatchError, HeaderFormatError, UnsupportedKindError
from .header import MAX_BPP, Header, PayloadKind


def byte_count_from_bit_count(bit_count: int) -> int:
    """Bytes needed to hold `bit_count` bits (ceil(bit_count / 8))."""
    bit_count = int(bit_count)
    return bit_count // 8 + (1 if bit_count % 8 else 0)


def sized_color_pair(head: Header, bpp: int) -> Tuple[bytes, bytes]:
    """
    Palette entries of `head`, truncated to `bpp` bytes each.

    The stored 32-bit colors are split into their four little-endian bytes
    and the first `bpp` of them are kept, in stored order.
    """
    if head.kind != PayloadKind.DUAL_COLOR_IMAGE:
        raise UnsupportedKindError(f"{head.kind.name} payloads have no palette")
    bpp = int(bpp)
    if bpp < 1 or bpp > MAX_BPP:
        raise FormatMismatchError(f"Palette colors hold 1..{MAX_BPP} bytes, got bpp={bpp}")
    color0 = int(head.color0).to_bytes(4, "little")[:bpp]
    color1 = int(head.color1).to_bytes(4, "little")[:bpp]
    return color0, color1


def selector_bits(count: int, plane) -> np.ndarray:
    """
    Extract `count` selector bits from a packed index plane.

    Bit i lives in byte i // 8 at position 7 - i % 8 counted from the least
    significant bit, so the first pixel of every byte is its MSB.
    """
    count = int(count)
    plane = np.frombuffer(plane, dtype=np.uint8) if not isinstance(plane, np.ndarray) else plane
    needed = byte_count_from_bit_count(count)
    if plane.size < needed:
        raise HeaderFormatError(f"Index plane holds {plane.size} bytes, {needed} needed for {count} pixels")

    idx = np.arange(count, dtype=np.int64)
    shift = (7 - (idx & 7)).astype(np.uint8)
    return (plane[idx >> 3] >> shift) & np.uint8(1)


def _palette(color0: bytes, color1: bytes, dtype: np.dtype) -> np.ndarray:
    if len(color0) != dtype.itemsize or len(color1) != dtype.itemsize:
        raise FormatMismatchError(
            f"Palette entries are {len(color0)}/{len(color1)} bytes, element type {dtype} is {dtype.itemsize}"
        )
    return np.frombuffer(bytes(color0) + bytes(color1), dtype=dtype)


def reconstruct(count: int, plane, color0: bytes, color1: bytes, dtype) -> np.ndarray:
    """
    Expand `count` pixels of an index plane into a new array of `dtype`.

    `color0` and `color1` must each be exactly `dtype.itemsize` bytes.
    """
    dtype = np.dtype(dtype)
    palette = _palette(color0, color1, dtype)
    return palette[selector_bits(count, plane)]


def reconstruct_into(out: np.ndarray, count: int, plane, color0: bytes, color1: bytes) -> None:
    """Like `reconstruct`, but writes the first `count` elements of `out` in place."""
    palette = _palette(color0, color1, out.dtype)
    np.take(palette, selector_bits(count, plane), out=out[:count])
