"""
Recursive-descent bencode decoder.

One lookahead byte selects the production:

* ``i`` - integer, ``i<digits>e``
* ``0``-``9`` - byte string, ``<length>:<bytes>``
* ``l`` - list, ``l<values>e``
* ``d`` - dictionary, ``d<string key><value>...e``

Decoding is all-or-nothing: the first malformed token raises a
:class:`~bencodec.errors.BencodeError` carrying its byte offset.
"""
import logging
import re
from typing import Any, Optional, Tuple, Union

from . import config
from .errors import (
    BencodeError,
    DuplicateKey,
    InvalidInteger,
    InvalidLength,
    InvalidToken,
    InvalidUtf8,
    NestingTooDeep,
    TrailingData,
    UnexpectedEnd,
    UnsortedKeys,
)
from .mapping import from_value
from .value import INT_MAX, INT_MIN, Dict, Int, List, Text, Value

logger = logging.getLogger(__name__)

INTEGER_START = ord('i')
LIST_START = ord('l')
DICT_START = ord('d')
END = ord('e')
COLON = ord(':')

_INTEGER = re.compile(rb'-?(0|[1-9][0-9]*)')
_LENGTH = re.compile(rb'0|[1-9][0-9]*')
_SIGNED_DIGITS = re.compile(rb'-?[0-9]*')
_DIGITS = re.compile(rb'[0-9]*')

# Longest digit run that can still fit in 64 bits (with sign)
_MAX_DIGITS = 20


def _is_digit(char: int) -> bool:
    return 0x30 <= char <= 0x39


class Decoder:
    """
    Decodes bencoded bytes into a Value.

    Args:
        data: The bencoded input. ``str`` input is encoded as UTF-8 first.
        strict: Reject dictionaries whose keys are not in canonical order.
            Defaults to ``config.STRICT_KEY_ORDER``.
        max_depth: Maximum nesting of lists and dictionaries.
            Defaults to ``config.MAX_DEPTH``.
    """

    def __init__(self, data: Union[bytes, bytearray, memoryview, str],
                 strict: Optional[bool] = None, max_depth: Optional[int] = None):
        if isinstance(data, str):
            data = data.encode('utf-8')
        elif isinstance(data, (bytearray, memoryview)):
            data = bytes(data)
        elif not isinstance(data, bytes):
            raise TypeError(f"bencode data should be bytes, not {type(data).__name__}")
        self._data = data
        self._index = 0
        self.strict = config.STRICT_KEY_ORDER if strict is None else strict
        self.max_depth = config.MAX_DEPTH if max_depth is None else max_depth

    def decode(self) -> Value:
        """
        Decode the whole input as exactly one value.

        Raises:
            BencodeError: On the first malformed token, or if bytes remain
                after the value
        """
        self._index = 0
        value = self._decode_value(0)
        if self._index != len(self._data):
            raise TrailingData(
                f"{len(self._data) - self._index} unexpected byte(s) after value", self._index)
        return value

    def _peek(self) -> int:
        if self._index >= len(self._data):
            raise UnexpectedEnd("Unexpected end of data", self._index)
        return self._data[self._index]

    def _decode_value(self, depth: int) -> Value:
        char = self._peek()
        if char == INTEGER_START:
            return self._decode_int()
        elif _is_digit(char):
            return Text(self._decode_string())
        elif char == LIST_START:
            return self._decode_list(depth + 1)
        elif char == DICT_START:
            return self._decode_dict(depth + 1)
        else:
            raise InvalidToken(f"Unexpected token {bytes([char])!r}", self._index)

    def _decode_int(self) -> Int:
        start = self._index + 1  # Skip 'i'
        end = _SIGNED_DIGITS.match(self._data, start).end()
        if end == len(self._data):
            raise UnexpectedEnd("Unterminated integer", end)
        if self._data[end] != END:
            raise InvalidInteger(f"Unexpected byte {self._data[end:end + 1]!r} in integer", end)

        digits = self._data[start:end]
        if not _INTEGER.fullmatch(digits) or digits == b'-0':
            raise InvalidInteger(f"Malformed integer {digits!r}", start)
        if len(digits) > _MAX_DIGITS:
            raise InvalidInteger("Integer does not fit in 64 bits", start)
        number = int(digits)
        if not INT_MIN <= number <= INT_MAX:
            raise InvalidInteger(f"Integer {number} does not fit in 64 bits", start)

        self._index = end + 1  # Skip 'e'
        return Int(number)

    def _decode_string(self) -> bytes:
        start = self._index
        colon = _DIGITS.match(self._data, start).end()
        if colon == len(self._data):
            raise UnexpectedEnd("Unterminated string length", colon)
        if self._data[colon] != COLON:
            raise InvalidLength(
                f"Unexpected byte {self._data[colon:colon + 1]!r} in string length", colon)

        prefix = self._data[start:colon]
        if not _LENGTH.fullmatch(prefix):
            raise InvalidLength(f"Malformed string length {prefix!r}", start)

        begin = colon + 1
        available = len(self._data) - begin
        if len(prefix) > _MAX_DIGITS or int(prefix) > available:
            raise UnexpectedEnd(
                f"String of length {prefix.decode('ascii')} needs more than the "
                f"{available} byte(s) left", len(self._data))

        self._index = begin + int(prefix)
        return self._data[begin:self._index]

    def _enter(self, depth: int) -> None:
        if depth > self.max_depth:
            raise NestingTooDeep(f"Nesting exceeds {self.max_depth} levels", self._index)
        self._index += 1  # Skip 'l' or 'd'

    def _decode_list(self, depth: int) -> List:
        self._enter(depth)
        items = []
        while self._peek() != END:
            items.append(self._decode_value(depth))
        self._index += 1  # Skip 'e'
        return List(items)

    def _decode_dict(self, depth: int) -> Dict:
        self._enter(depth)
        entries = []
        seen = set()
        previous = None
        while self._peek() != END:
            key_start = self._index
            raw = self._decode_key()
            try:
                key = raw.decode('utf-8')
            except UnicodeDecodeError as e:
                raise InvalidUtf8(f"Dictionary key {raw!r} is not valid UTF-8", key_start) from e
            if key in seen:
                raise DuplicateKey(f"Duplicate dictionary key {key!r}", key_start)
            if self.strict and previous is not None and raw < previous:
                raise UnsortedKeys(f"Key {key!r} sorts before the key preceding it", key_start)
            seen.add(key)
            previous = raw
            entries.append((key, raw, self._decode_value(depth)))
        self._index += 1  # Skip 'e'
        return Dict._from_entries(entries)

    def _decode_key(self) -> bytes:
        if not _is_digit(self._data[self._index]):
            raise InvalidToken("Dictionary keys must be strings", self._index)
        return self._decode_string()

    def value_span(self, key: str) -> Optional[Tuple[int, int]]:
        """
        Find where one entry of a top-level dictionary sits in the input.

        Args:
            key: The dictionary key to look for

        Returns:
            (start, end) offsets of the entry's value as it appears in the
            input, or None if the input is not a dictionary or lacks the key

        Raises:
            BencodeError: If the input is malformed before the entry ends
        """
        self._index = 0
        if self._peek() != DICT_START:
            return None
        self._enter(1)
        wanted = key.encode('utf-8')
        while self._peek() != END:
            raw = self._decode_key()
            start = self._index
            self._decode_value(1)
            if raw == wanted:
                return start, self._index
        return None


def decode(data: Union[bytes, bytearray, memoryview, str], into: Any = None,
           strict: Optional[bool] = None, max_depth: Optional[int] = None) -> Any:
    """
    Decode bencoded data.

    Args:
        data: The bencoded input
        into: Optional target type (a dataclass record, ``List[int]``, ...).
            When omitted the raw Value is returned.
        strict: Reject dictionary keys that are not in canonical order
        max_depth: Maximum nesting of lists and dictionaries

    Returns:
        The decoded Value, or an instance of ``into``

    Raises:
        BencodeError: If the data is malformed or does not fit ``into``
    """
    try:
        value = Decoder(data, strict=strict, max_depth=max_depth).decode()
    except BencodeError as e:
        logger.debug(f"Rejected bencode input: {e}")
        raise
    logger.debug(f"Decoded {type(value).__name__} from {len(data)} bytes")

    if into is None:
        return value
    return from_value(value, into)


def bdecode(data: Union[bytes, bytearray, memoryview, str]) -> Value:
    """Decode bencoded data."""
    return decode(data)
