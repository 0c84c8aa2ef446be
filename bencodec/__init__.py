"""
bencodec - bencode encoding and decoding for BitTorrent metadata.

Converts between bencoded bytes and an in-memory Value (Int, Text, List,
Dict), and maps values to and from dataclass records.
"""

from .errors import (
    BencodeError,
    DuplicateKey,
    InvalidInteger,
    InvalidLength,
    InvalidToken,
    InvalidUtf8,
    NestingTooDeep,
    TrailingData,
    TypeMismatch,
    UnexpectedEnd,
    UnsortedKeys,
)
from .value import Value, Int, Text, List, Dict, to_value
from .mapping import bkey, dump_record, from_value
from .encoder import Encoder, encode, bencode
from .decoder import Decoder, decode, bdecode

__version__ = "0.1.0"
__all__ = [
    # Value model
    "Value",
    "Int",
    "Text",
    "List",
    "Dict",
    "to_value",
    # Codec
    "Encoder",
    "encode",
    "bencode",
    "Decoder",
    "decode",
    "bdecode",
    # Typed records
    "bkey",
    "dump_record",
    "from_value",
    # Errors
    "BencodeError",
    "UnexpectedEnd",
    "InvalidToken",
    "InvalidInteger",
    "InvalidLength",
    "InvalidUtf8",
    "DuplicateKey",
    "TrailingData",
    "TypeMismatch",
    "UnsortedKeys",
    "NestingTooDeep",
]
