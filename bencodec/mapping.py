"""
Mapping between dataclass records and bencode values.

Records are plain dataclasses. Each field maps to the dictionary key of the
same name unless the field is declared with :func:`bkey`, which is needed for
keys such as ``"piece length"`` that are not valid Python identifiers::

    @dataclass
    class FileInfo:
        length: int
        path: List[str]
        md5sum: Optional[str] = None

Fields holding None are left out when encoding; dictionary keys with no
matching field are ignored when decoding.
"""
import dataclasses
import logging
from typing import Any, Union, get_args, get_origin, get_type_hints

from .errors import InvalidUtf8, TypeMismatch
from .value import Dict, List, Value, to_value

logger = logging.getLogger(__name__)

BENCODE_KEY = 'bencode_key'

_NONE_TYPE = type(None)


def bkey(name: str, **kwargs: Any) -> Any:
    """
    Declare a dataclass field stored under a custom dictionary key.

    Args:
        name: The bencode dictionary key
        **kwargs: Passed through to ``dataclasses.field`` (default, etc.)
    """
    metadata = dict(kwargs.pop('metadata', None) or {})
    metadata[BENCODE_KEY] = name
    return dataclasses.field(metadata=metadata, **kwargs)


def field_key(f: dataclasses.Field) -> str:
    """Return the dictionary key a dataclass field is stored under."""
    return f.metadata.get(BENCODE_KEY, f.name)


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def dump_record(obj: Any, path: str = '') -> Dict:
    """
    Convert a dataclass instance to a Dict, field by field.

    Raises:
        TypeMismatch: If a field holds something with no bencode form
    """
    result = Dict()
    for f in dataclasses.fields(obj):
        item = getattr(obj, f.name)
        if item is None:
            continue
        key = field_key(f)
        result[key] = _dump(item, _join(path, key))
    return result


def _dump(item: Any, path: str) -> Value:
    if isinstance(item, Value):
        return item
    if dataclasses.is_dataclass(item) and not isinstance(item, type):
        return dump_record(item, path)
    if isinstance(item, (list, tuple)):
        return List([_dump(elem, f"{path}[{i}]") for i, elem in enumerate(item)])
    if isinstance(item, dict):
        return Dict((key, _dump(elem, _join(path, str(key)))) for key, elem in item.items())
    try:
        return to_value(item)
    except TypeMismatch as e:
        raise TypeMismatch(f"Cannot represent {type(item).__name__} as bencode", path) from e


def _is_optional(target: Any) -> bool:
    return get_origin(target) is Union and _NONE_TYPE in get_args(target)


def _mismatch(expected: str, value: Value, path: str) -> TypeMismatch:
    return TypeMismatch(f"Expected {expected}, found {type(value).__name__}", path or None)


def from_value(value: Value, target: Any, path: str = '') -> Any:
    """
    Build an instance of ``target`` from a decoded value.

    Args:
        value: The decoded bencode value
        target: A dataclass, int, bool, bytes, str, Optional/Union, List[...],
            Dict[str, ...], a Value class, or Any
        path: Location of ``value`` inside the enclosing record

    Returns:
        The converted object

    Raises:
        TypeMismatch: If the value does not have the shape ``target`` needs
        InvalidUtf8: If a str is requested from Text that is not UTF-8
    """
    if target is Any:
        return value.to_python()

    if isinstance(target, type) and issubclass(target, Value):
        if not isinstance(value, target):
            raise _mismatch(target.__name__, value, path)
        return value

    if target is bool:
        number = value.as_int()
        if number is None:
            raise _mismatch('an integer', value, path)
        return bool(number)

    if target is int:
        number = value.as_int()
        if number is None:
            raise _mismatch('an integer', value, path)
        return number

    if target is bytes:
        data = value.as_bytes()
        if data is None:
            raise _mismatch('a byte string', value, path)
        return data

    if target is str:
        try:
            text = value.as_str()
        except InvalidUtf8 as e:
            if not path:
                raise
            raise InvalidUtf8(f"{e} (at '{path}')") from e
        if text is None:
            raise _mismatch('a string', value, path)
        return text

    origin = get_origin(target)
    args = get_args(target)

    if origin is Union:
        candidates = [arg for arg in args if arg is not _NONE_TYPE]
        if len(candidates) == 1:
            return from_value(value, candidates[0], path)
        for candidate in candidates:
            try:
                return from_value(value, candidate, path)
            except (TypeMismatch, InvalidUtf8):
                continue
        raise _mismatch(' or '.join(_type_name(arg) for arg in candidates), value, path)

    if target is list or origin is list:
        items = value.as_list()
        if items is None:
            raise _mismatch('a list', value, path)
        item_type = args[0] if args else Any
        return [from_value(item, item_type, f"{path}[{i}]") for i, item in enumerate(items)]

    if target is dict or origin is dict:
        entries = value.as_dict()
        if entries is None:
            raise _mismatch('a dictionary', value, path)
        if args and args[0] is not str:
            raise TypeMismatch(f"Dictionary keys map to str, not {_type_name(args[0])}", path or None)
        item_type = args[1] if args else Any
        return {key: from_value(item, item_type, _join(path, key)) for key, item in entries.items()}

    if dataclasses.is_dataclass(target) and isinstance(target, type):
        return load_record(value, target, path)

    raise TypeMismatch(f"Unsupported target type {_type_name(target)}", path or None)


def load_record(value: Value, cls: type, path: str = '') -> Any:
    """Build a dataclass instance from a Dict value."""
    entries = value.as_dict()
    if entries is None:
        raise _mismatch(f"a dictionary for {cls.__name__}", value, path)

    hints = get_type_hints(cls)
    kwargs = {}
    for f in dataclasses.fields(cls):
        if not f.init:
            continue
        key = field_key(f)
        location = _join(path, key)
        if key not in entries:
            if f.default is not dataclasses.MISSING or f.default_factory is not dataclasses.MISSING:
                continue
            if _is_optional(hints[f.name]):
                kwargs[f.name] = None
                continue
            raise TypeMismatch(f"Missing required key '{key}' for {cls.__name__}", location)
        kwargs[f.name] = from_value(entries[key], hints[f.name], location)

    known = {field_key(f) for f in dataclasses.fields(cls)}
    unknown = [key for key in entries if key not in known]
    if unknown:
        logger.debug(f"Ignoring unknown keys for {cls.__name__}: {', '.join(unknown)}")
    return cls(**kwargs)


def _type_name(target: Any) -> str:
    return getattr(target, '__name__', None) or repr(target)
