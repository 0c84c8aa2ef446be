"""
Exceptions raised while encoding or decoding bencode data.
"""
from typing import Optional


class BencodeError(ValueError):
    """Base class for all bencode encoding and decoding errors."""

    def __init__(self, message: str, offset: Optional[int] = None):
        self.offset = offset
        if offset is not None:
            message = f"{message} at offset {offset}"
        super().__init__(message)


class UnexpectedEnd(BencodeError):
    """Input ran out in the middle of a token."""
    pass


class InvalidToken(BencodeError):
    """A byte that does not start any bencode production."""
    pass


class InvalidInteger(BencodeError):
    """Malformed integer: bad digits, leading zero, -0 or overflow."""
    pass


class InvalidLength(BencodeError):
    """Malformed length prefix of a byte string."""
    pass


class InvalidUtf8(BencodeError):
    """A dictionary key or a requested string view is not valid UTF-8."""
    pass


class DuplicateKey(BencodeError):
    """The same key appears twice in one dictionary."""
    pass


class TrailingData(BencodeError):
    """Extra bytes after a complete top-level value."""
    pass


class UnsortedKeys(BencodeError):
    """Dictionary keys out of canonical order (strict decoding only)."""
    pass


class NestingTooDeep(BencodeError):
    """Lists and dictionaries nested deeper than the decoder allows."""
    pass


class TypeMismatch(BencodeError):
    """
    A value could not be mapped to or from the requested shape.

    Attributes:
        path: Dotted location of the failing field inside the record
            (e.g. ``info.files[0].length``), or None at the top level.
    """

    def __init__(self, message: str, path: Optional[str] = None,
                 offset: Optional[int] = None):
        self.path = path
        if path:
            message = f"{message} (at '{path}')"
        super().__init__(message, offset)
