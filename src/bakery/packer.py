"""
bakery.packer

Reference packer: turns source assets into word sequences the decoder
understands.

Typical usage:

    from bakery.packer import pack_image_file, emit_python_source

    words = pack_image_file("icon.png")
    with open("icon_data.py", "w", encoding="utf-8") as f:
        f.write(emit_python_source("ICON", words))

The packer writes exactly the layout documented in bakery.header: three
header words followed by the payload, zero-padded to a whole word.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

import numpy as np
from PIL import Image

from .errors import BakeryError
from .header import MAX_BPP, WORD_BYTES, Header, WordsLike, as_words, pack_header

logger = logging.getLogger(__name__)

__all__ = [
    "pack_generic",
    "pack_image",
    "pack_dual_color_image",
    "pack_image_file",
    "load_image_u8",
    "emit_python_source",
]

_NATIVE_MODES = ("L", "LA", "RGB", "RGBA")


def _assemble(head: Header, payload: bytes) -> np.ndarray:
    pad = (-len(payload)) % WORD_BYTES
    body = np.frombuffer(bytes(payload) + b"\x00" * pad, dtype="<u8").astype(np.uint64)
    return np.concatenate([pack_header(head), body])


def _as_pixels(pixels) -> np.ndarray:
    arr = np.asarray(pixels)
    if arr.dtype != np.uint8:
        raise BakeryError(f"Pixels must be uint8, got {arr.dtype}")
    if arr.ndim == 2:
        arr = arr[:, :, None]
    if arr.ndim != 3 or not (1 <= arr.shape[2] <= MAX_BPP):
        raise BakeryError(f"Pixels must be (H, W) or (H, W, 1..{MAX_BPP}), got shape {arr.shape}")
    return np.ascontiguousarray(arr)


def _color_to_int(color: np.ndarray) -> int:
    raw = bytes(color.tobytes())
    return int.from_bytes(raw + b"\x00" * (4 - len(raw)), "little")


def pack_generic(data) -> np.ndarray:
    """Pack an arbitrary byte blob as a GENERIC payload."""
    raw = data.tobytes() if isinstance(data, np.ndarray) else bytes(data)
    head = Header.generic(len(raw) * 8)
    logger.debug("pack_generic bytes=%d", len(raw))
    return _assemble(head, raw)


def pack_image(pixels) -> np.ndarray:
    """
    Pack an (H, W) or (H, W, C) uint8 array as an IMAGE payload.

    Pixels are stored row-major with channels interleaved; bpp is C.
    """
    arr = _as_pixels(pixels)
    h, w, c = arr.shape
    head = Header.image(bpp=c, width=w, height=h)
    logger.debug("pack_image %dx%d bpp=%d", w, h, c)
    return _assemble(head, arr.tobytes())


def _split_two_colors(flat: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    if flat.shape[0] == 0:
        zero = np.zeros(flat.shape[1], dtype=np.uint8)
        return zero, zero, np.zeros(0, dtype=np.uint8)

    color0 = flat[0]
    is_color0 = np.all(flat == color0, axis=1)
    others = flat[~is_color0]
    color1 = others[0] if others.shape[0] else color0
    if not np.all(others == color1):
        raise BakeryError("Image has more than two colors")
    return color0, color1, (~is_color0).astype(np.uint8)


def pack_dual_color_image(pixels) -> np.ndarray:
    """
    Pack an image with at most two distinct colors as a DUAL_COLOR_IMAGE payload.

    color0 is the color of the first pixel in row-major order and color1
    the other one (color0 again for single-colored images). Every pixel is
    stored as one selector bit, most significant bit first.
    """
    arr = _as_pixels(pixels)
    h, w, c = arr.shape
    color0, color1, selectors = _split_two_colors(arr.reshape(-1, c))
    plane = np.packbits(selectors, bitorder="big")

    head = Header.dual_color_image(
        bpp=c,
        width=w,
        height=h,
        color0=_color_to_int(color0),
        color1=_color_to_int(color1),
    )
    logger.debug("pack_dual_color_image %dx%d bpp=%d", w, h, c)
    return _assemble(head, plane.tobytes())


def load_image_u8(path: str) -> np.ndarray:
    """
    Load an image from disk as a uint8 array.

    L, LA, RGB and RGBA images keep their channel count. Anything else is
    converted to RGBA when it carries transparency and to RGB otherwise.
    """
    with Image.open(path) as img:
        if img.mode not in _NATIVE_MODES:
            has_alpha = "A" in img.getbands() or "transparency" in img.info
            img = img.convert("RGBA" if has_alpha else "RGB")
        return np.array(img, dtype=np.uint8)


def pack_image_file(path: str, *, dual_color: Optional[bool] = None) -> np.ndarray:
    """
    Pack an image file.

    With `dual_color=None` the DUAL_COLOR_IMAGE form is used whenever the
    image has at most two colors.
    """
    arr = _as_pixels(load_image_u8(path))
    if dual_color is None:
        flat = arr.reshape(-1, arr.shape[2])
        dual_color = np.unique(flat, axis=0).shape[0] <= 2
    if dual_color:
        return pack_dual_color_image(arr)
    return pack_image(arr)


def emit_python_source(name: str, words: WordsLike, *, per_line: int = 4) -> str:
    """
    Render `words` as a Python assignment of a tuple of hex literals.

    The result can be written to a module and imported, which embeds the
    asset without any file access at load time.
    """
    if not name.isidentifier():
        raise ValueError(f"{name!r} is not a valid Python identifier")
    per_line = max(1, int(per_line))
    w = as_words(words)
    lines = [f"{name} = ("]
    for start in range(0, w.size, per_line):
        row = ", ".join(f"0x{int(v):016x}" for v in w[start:start + per_line])
        lines.append(f"    {row},")
    lines.append(")")
    return "\n".join(lines) + "\n"
