"""
Canonical bencode encoder.
"""
import logging
from typing import Any, List

from .errors import TypeMismatch
from .value import Dict, Int, List as ListValue, Text, Value, to_value

logger = logging.getLogger(__name__)


class Encoder:
    """
    Serializes values to canonical bencode.

    Integers are written without leading zeros, byte strings verbatim after
    their length, and dictionaries in ascending byte order of their keys.
    The output only depends on the value, never on how it was built.
    """

    def __init__(self):
        self._chunks: List[bytes] = []

    def encode(self, value: Value) -> bytes:
        """
        Encode a value.

        Args:
            value: The value to encode

        Returns:
            The bencoded data as bytes
        """
        self._chunks = []
        self._encode_value(value)
        data = b''.join(self._chunks)
        self._chunks = []
        return data

    def _encode_value(self, value: Value) -> None:
        if isinstance(value, Int):
            self._chunks.append(b'i%de' % value.value)
        elif isinstance(value, Text):
            self._encode_text(value.data)
        elif isinstance(value, ListValue):
            self._chunks.append(b'l')
            for item in value.items:
                self._encode_value(item)
            self._chunks.append(b'e')
        elif isinstance(value, Dict):
            self._chunks.append(b'd')
            for key, item in value.raw_items():
                self._encode_text(key)
                self._encode_value(item)
            self._chunks.append(b'e')
        else:
            raise TypeMismatch(f"Cannot encode {type(value).__name__}")

    def _encode_text(self, data: bytes) -> None:
        self._chunks.append(b'%d:' % len(data))
        self._chunks.append(data)


def encode(obj: Any) -> bytes:
    """
    Encode a value, native Python data or a dataclass record to bencode.

    Args:
        obj: A Value, or anything :func:`bencodec.value.to_value` accepts

    Returns:
        The canonical bencoded data as bytes

    Raises:
        TypeMismatch: If the object has no bencode representation
        InvalidUtf8: If a dictionary key is not valid UTF-8
    """
    value = to_value(obj)
    data = Encoder().encode(value)
    logger.debug(f"Encoded {type(value).__name__} into {len(data)} bytes")
    return data


def bencode(obj: Any) -> bytes:
    """Encode an object to bencode format."""
    return encode(obj)
