"""
bakery.errors

Exception types raised by the header codec and the payload decoder.
"""

from __future__ import annotations


class BakeryError(ValueError):
    """Base class for every contract violation reported by bakery."""


class HeaderFormatError(BakeryError):
    """Raised when a word sequence does not hold a well-formed header or payload."""


class UnsupportedKindError(BakeryError):
    """Raised when an operation is not defined for the header's payload kind."""


class FormatMismatchError(BakeryError):
    """Raised when the element type does not match the stored pixel width."""


class HeaderMismatchError(BakeryError):
    """Raised when a fixed-capacity decode is given a header that differs from the stored one."""


class CapacityError(BakeryError):
    """Raised when a fixed-capacity decode would produce no elements."""


class PayloadNotFoundError(KeyError):
    """Raised when a payload store has no entry under the requested name."""
