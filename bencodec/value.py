"""
In-memory representation of bencode data.

Every decodable datum is exactly one of four variants:

* ``Int``  - a 64-bit signed integer
* ``Text`` - a byte string that may or may not be valid UTF-8
* ``List`` - an ordered sequence of values
* ``Dict`` - UTF-8 string keys mapped to values, always kept sorted by the
  raw bytes of the key
"""
import bisect
import dataclasses
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Tuple
from typing import Dict as TDict
from typing import List as TList

from .errors import InvalidInteger, InvalidUtf8, TypeMismatch

INT_MIN = -2 ** 63
INT_MAX = 2 ** 63 - 1


class Value:
    """
    Base of the four bencode variants.

    The ``as_*`` accessors narrow a value to one variant and return None
    when the value is of a different variant.

    ``as_list`` and ``as_dict`` return the live container, so edits through
    them change the value in place. ``Int`` and ``Text`` are immutable:
    replace them rather than editing their payload.
    """
    __slots__ = ()

    def as_int(self) -> Optional[int]:
        return None

    def as_bytes(self) -> Optional[bytes]:
        return None

    def as_str(self) -> Optional[str]:
        """
        Get the value as a string.

        Returns:
            The decoded string, or None if the value is not Text

        Raises:
            InvalidUtf8: If the value is Text but not valid UTF-8
        """
        return None

    def as_list(self) -> Optional[TList['Value']]:
        return None

    def as_dict(self) -> Optional['Dict']:
        return None

    def to_python(self) -> Any:
        """Convert to plain Python data (int, bytes, list, dict)."""
        raise NotImplementedError


@dataclass(frozen=True)
class Int(Value):
    """A 64-bit signed integer."""
    value: int

    def __post_init__(self):
        if not isinstance(self.value, int):
            raise TypeMismatch(f"Int requires an integer, not {type(self.value).__name__}")
        # bool is stored as a plain int
        object.__setattr__(self, 'value', int(self.value))
        if not INT_MIN <= self.value <= INT_MAX:
            raise InvalidInteger(f"Integer {self.value} does not fit in 64 bits")

    def as_int(self) -> Optional[int]:
        return self.value

    def to_python(self) -> int:
        return self.value

    def __repr__(self) -> str:
        return f"Int({self.value})"

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Text(Value):
    """A byte string. The payload is kept verbatim and need not be UTF-8."""
    data: bytes

    def __post_init__(self):
        data = self.data
        if isinstance(data, str):
            data = data.encode('utf-8')
        elif isinstance(data, (bytearray, memoryview)):
            data = bytes(data)
        elif not isinstance(data, bytes):
            raise TypeMismatch(f"Text requires bytes or str, not {type(data).__name__}")
        object.__setattr__(self, 'data', data)

    def __len__(self) -> int:
        return len(self.data)

    def as_bytes(self) -> Optional[bytes]:
        return self.data

    def as_str(self) -> Optional[str]:
        try:
            return self.data.decode('utf-8')
        except UnicodeDecodeError as e:
            raise InvalidUtf8(f"Text {self.data!r} is not valid UTF-8: {e.reason}") from e

    def to_python(self) -> bytes:
        return self.data

    def __repr__(self) -> str:
        return f"Text({self.data!r})"

    def __str__(self) -> str:
        return '"' + self.data.decode('utf-8', errors='replace') + '"'


@dataclass(eq=True)
class List(Value):
    """An ordered list of values."""
    items: TList[Value] = field(default_factory=list)

    def __post_init__(self):
        self.items = [to_value(item) for item in self.items]

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Value]:
        return iter(self.items)

    def __getitem__(self, index):
        return self.items[index]

    def append(self, item: Any) -> None:
        self.items.append(to_value(item))

    def as_list(self) -> Optional[TList[Value]]:
        return self.items

    def to_python(self) -> list:
        return [item.to_python() for item in self.items]

    def __repr__(self) -> str:
        return f"List({self.items!r})"

    def __str__(self) -> str:
        return '[' + ', '.join(str(item) for item in self.items) + ']'


def _check_key(key: Any) -> Tuple[str, bytes]:
    """Validate a dictionary key, returning it as (text, raw UTF-8 bytes)."""
    if isinstance(key, str):
        try:
            return key, key.encode('utf-8')
        except UnicodeEncodeError as e:
            raise InvalidUtf8(f"Dictionary key {key!r} is not valid UTF-8: {e.reason}") from e
    if isinstance(key, (bytes, bytearray, memoryview)):
        raw = bytes(key)
        try:
            return raw.decode('utf-8'), raw
        except UnicodeDecodeError as e:
            raise InvalidUtf8(f"Dictionary key {raw!r} is not valid UTF-8: {e.reason}") from e
    if isinstance(key, Text):
        return _check_key(key.data)
    raise TypeMismatch(f"Dictionary keys must be strings, not {type(key).__name__}")


class Dict(Value, MutableMapping):
    """
    A dictionary with UTF-8 string keys.

    Keys are kept in ascending order of their raw UTF-8 bytes at all times,
    so iteration (and therefore encoding) is always canonical no matter how
    the dictionary was built. A single insertion lands at its sorted
    position; construction and ``update`` append the new keys and sort once.
    Keys may be given as ``str`` or as UTF-8 ``bytes``; values are converted
    with :func:`to_value`.
    """

    def __init__(self, entries: Any = None, **kwargs: Any):
        self._raw: TList[bytes] = []
        self._keys: TList[str] = []
        self._values: TDict[str, Value] = {}
        if entries is not None or kwargs:
            self.update(() if entries is None else entries, **kwargs)

    @classmethod
    def _from_entries(cls, entries: TList[Tuple[str, bytes, Value]]) -> 'Dict':
        """Build from already validated (text, raw, value) triples."""
        result = cls()
        result._merge(entries)
        return result

    def _merge(self, entries: TList[Tuple[str, bytes, Value]]) -> None:
        # New keys are appended, then sorted once if any arrived out of order
        in_order = True
        for text, raw, value in entries:
            if text not in self._values:
                if self._raw and raw < self._raw[-1]:
                    in_order = False
                self._raw.append(raw)
                self._keys.append(text)
            self._values[text] = value
        if not in_order:
            order = sorted(zip(self._raw, self._keys))
            self._raw = [raw for raw, _ in order]
            self._keys = [text for _, text in order]

    def update(self, other: Any = (), **kwargs: Any) -> None:
        """Add or replace several entries, sorting the keys at most once."""
        if isinstance(other, Mapping):
            pairs = list(other.items())
        elif hasattr(other, 'keys'):
            pairs = [(key, other[key]) for key in other.keys()]
        else:
            pairs = list(other)
        pairs.extend(kwargs.items())
        self._merge([(*_check_key(key), to_value(value)) for key, value in pairs])

    def __getitem__(self, key: Any) -> Value:
        text, _ = _check_key(key)
        return self._values[text]

    def __setitem__(self, key: Any, value: Any) -> None:
        text, raw = _check_key(key)
        value = to_value(value)
        if text not in self._values:
            index = bisect.bisect_left(self._raw, raw)
            self._raw.insert(index, raw)
            self._keys.insert(index, text)
        self._values[text] = value

    def __delitem__(self, key: Any) -> None:
        text, raw = _check_key(key)
        if text not in self._values:
            raise KeyError(key)
        index = bisect.bisect_left(self._raw, raw)
        del self._raw[index]
        del self._keys[index]
        del self._values[text]

    def __contains__(self, key: Any) -> bool:
        try:
            text, _ = _check_key(key)
        except (InvalidUtf8, TypeMismatch):
            return False
        return text in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._keys))

    def __len__(self) -> int:
        return len(self._keys)

    def raw_items(self) -> Iterator[Tuple[bytes, Value]]:
        """Yield (key bytes, value) pairs in canonical order."""
        for raw, text in zip(self._raw, self._keys):
            yield raw, self._values[text]

    def as_dict(self) -> Optional['Dict']:
        return self

    def to_python(self) -> dict:
        return {key: self._values[key].to_python() for key in self._keys}

    def __repr__(self) -> str:
        inner = ', '.join(f"{key!r}: {self._values[key]!r}" for key in self._keys)
        return f"Dict({{{inner}}})"

    def __str__(self) -> str:
        if not self._keys:
            return '{}'
        inner = ', '.join(f"{key}: {self._values[key]}" for key in self._keys)
        return '{ ' + inner + ' }'


def to_value(obj: Any) -> Value:
    """
    Convert a Python object to a Value.

    Accepts Values (returned unchanged), ints and bools, bytes-like objects,
    strings, lists and tuples, mappings, objects with a ``__bencode__()``
    method, and dataclass records.

    Raises:
        TypeMismatch: If the object has no bencode representation
    """
    if isinstance(obj, Value):
        return obj
    if isinstance(obj, int):
        return Int(obj)
    if isinstance(obj, (bytes, bytearray, memoryview, str)):
        return Text(obj)
    if isinstance(obj, (list, tuple)):
        return List(list(obj))
    if isinstance(obj, Mapping):
        return Dict(obj)
    if hasattr(obj, '__bencode__'):
        return to_value(obj.__bencode__())
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        from .mapping import dump_record
        return dump_record(obj)
    raise TypeMismatch(f"Cannot represent {type(obj).__name__} as bencode")
