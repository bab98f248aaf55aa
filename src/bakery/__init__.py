"""
bakery

Codec for binary assets embedded in program data as 64-bit word sequences.

This package keeps a hard separation between:
- header layout and element counts (bakery.header)
- two-color index plane expansion (bakery.bitplane)
- payload decoding into numpy arrays (bakery.decoder)
- the compression boundary (bakery.compression)
- producing word sequences from source assets (bakery.packer)
- named payload lookup (bakery.store)

Only the header codec and the decoder are needed at load time; the packer
is the build-side counterpart.
"""

from __future__ import annotations

__all__ = [
    "__version__",
    "PayloadKind",
    "Header",
    "parse_header",
    "pack_header",
    "is_image",
    "get_width",
    "get_height",
    "element_count",
    "as_words",
    "words_to_bytes",
    "pixel_dtype",
    "payload_bytes",
    "decode_fixed",
    "decode",
    "decode_into",
    "reconstruct",
    "compress_words",
    "words_from_compressed",
    "zlib_decompress",
    "pack_generic",
    "pack_image",
    "pack_dual_color_image",
    "pack_image_file",
    "emit_python_source",
    "PayloadStore",
    "BakeryError",
    "HeaderFormatError",
    "UnsupportedKindError",
    "FormatMismatchError",
    "HeaderMismatchError",
    "CapacityError",
    "PayloadNotFoundError",
]

__version__ = "0.1.0"


from .errors import (  # noqa: E402
    BakeryError,
    CapacityError,
    FormatMismatchError,
    HeaderFormatError,
    HeaderMismatchError,
    PayloadNotFoundError,
    UnsupportedKindError,
)
from .header import (  # noqa: E402
    Header,
    PayloadKind,
    as_words,
    element_count,
    get_height,
    get_width,
    is_image,
    pack_header,
    parse_header,
    words_to_bytes,
)
from .bitplane import reconstruct  # noqa: E402
from .decoder import decode, decode_fixed, decode_into, payload_bytes, pixel_dtype  # noqa: E402
from .compression import compress_words, words_from_compressed, zlib_decompress  # noqa: E402
from .packer import (  # noqa: E402
    emit_python_source,
    pack_dual_color_image,
    pack_generic,
    pack_image,
    pack_image_file,
)
from .store import PayloadStore  # noqa: E402
