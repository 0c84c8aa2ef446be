"""Tests for the dataclass record mapping."""

from dataclasses import dataclass, field
from typing import Any, Dict as TDict, List as TList, Optional, Union

import pytest
from bencodec import (
    Dict,
    Int,
    InvalidUtf8,
    List,
    Text,
    TypeMismatch,
    Value,
    bkey,
    decode,
    dump_record,
    encode,
    from_value,
)


@dataclass
class Peer:
    ip: str
    port: int
    peer_id: Optional[bytes] = bkey('peer id', default=None)


@dataclass
class Announce:
    interval: int
    peers: TList[Peer]
    complete: int = 0
    tracker_id: Optional[str] = bkey('tracker id', default=None)
    tags: TList[str] = field(default_factory=list)


class TestDumpRecord:
    """Test converting records to values."""

    def test_fields_become_keys(self):
        """Each field is stored under its name or declared key."""
        value = dump_record(Peer(ip="10.0.0.1", port=6881, peer_id=b"-PC0001-"))
        assert value == Dict({"ip": "10.0.0.1", "port": 6881, "peer id": b"-PC0001-"})

    def test_none_fields_omitted(self):
        """Fields holding None are left out."""
        value = dump_record(Peer(ip="10.0.0.1", port=6881))
        assert "peer id" not in value
        assert len(value) == 2

    def test_nested_records(self):
        """Records inside lists are converted recursively."""
        announce = Announce(interval=1800, peers=[Peer(ip="a", port=1)])
        value = dump_record(announce)
        assert value["peers"][0] == Dict({"ip": "a", "port": 1})
        assert value["tags"] == List([])

    def test_encode_record(self):
        """encode accepts records directly."""
        data = encode(Peer(ip="a", port=1))
        assert data == b"d2:ip1:a4:porti1ee"

    def test_unrepresentable_field(self):
        """The error names the failing field."""
        @dataclass
        class Bad:
            ratio: float

        with pytest.raises(TypeMismatch) as exc_info:
            dump_record(Bad(ratio=0.5))
        assert exc_info.value.path == "ratio"

    def test_unrepresentable_nested(self):
        """Paths include list indexes."""
        @dataclass
        class Holder:
            items: list

        with pytest.raises(TypeMismatch) as exc_info:
            dump_record(Holder(items=[1, 2.5]))
        assert exc_info.value.path == "items[1]"


class TestFromValue:
    """Test building records from values."""

    def test_scalars(self):
        """Scalar targets narrow the value."""
        assert from_value(Int(5), int) == 5
        assert from_value(Int(1), bool) is True
        assert from_value(Text(b"ab"), bytes) == b"ab"
        assert from_value(Text(b"ab"), str) == "ab"

    def test_scalar_mismatch(self):
        """A wrong variant raises TypeMismatch."""
        with pytest.raises(TypeMismatch):
            from_value(Text(b"5"), int)
        with pytest.raises(TypeMismatch):
            from_value(Int(5), str)

    def test_invalid_utf8(self):
        """A str field over non-UTF-8 bytes raises InvalidUtf8."""
        with pytest.raises(InvalidUtf8):
            from_value(Text(b"\xff"), str)

    def test_containers(self):
        """Typed lists and dicts convert their items."""
        assert from_value(List([1, 2]), TList[int]) == [1, 2]
        assert from_value(Dict({"a": "x"}), TDict[str, str]) == {"a": "x"}
        assert from_value(List([1, b"x"]), list) == [1, b"x"]

    def test_any_and_value(self):
        """Any yields plain data; Value classes yield the value itself."""
        value = Dict({"a": [1]})
        assert from_value(value, Any) == {"a": [1]}
        assert from_value(value, Value) is value
        assert from_value(value, Dict) is value
        with pytest.raises(TypeMismatch):
            from_value(value, List)

    def test_union(self):
        """Union members are tried in order."""
        assert from_value(Int(3), Union[str, int]) == 3
        assert from_value(Text(b"x"), Union[str, int]) == "x"
        with pytest.raises(TypeMismatch):
            from_value(List([]), Union[str, int])

    def test_record(self):
        """Records are built from dictionaries."""
        value = Dict({
            "interval": 1800,
            "peers": [{"ip": "10.0.0.1", "port": 6881, "peer id": b"abc"}],
            "tracker id": "t1",
        })
        announce = from_value(value, Announce)
        assert announce == Announce(
            interval=1800,
            peers=[Peer(ip="10.0.0.1", port=6881, peer_id=b"abc")],
            complete=0,
            tracker_id="t1",
        )

    def test_unknown_keys_ignored(self):
        """Keys without a field are skipped."""
        value = Dict({"ip": "a", "port": 1, "extra": "ignored"})
        assert from_value(value, Peer) == Peer(ip="a", port=1)

    def test_missing_required(self):
        """A missing required key names its path."""
        value = Dict({"interval": 1, "peers": [{"ip": "a"}]})
        with pytest.raises(TypeMismatch) as exc_info:
            from_value(value, Announce)
        assert exc_info.value.path == "peers[0].port"

    def test_wrong_shape(self):
        """A non-dictionary cannot become a record."""
        with pytest.raises(TypeMismatch):
            from_value(List([]), Peer)

    def test_non_str_dict_keys(self):
        """Dictionary targets must be keyed by str."""
        with pytest.raises(TypeMismatch):
            from_value(Dict({"1": 1}), TDict[int, int])


class TestTypedDecode:
    """Test decode with a target type."""

    def test_round_trip(self):
        """A record survives encode and decode."""
        announce = Announce(interval=900, peers=[Peer(ip="b", port=2, peer_id=b"\x00\x01")],
                            complete=3, tags=["x", "y"])
        assert decode(encode(announce), into=Announce) == announce

    def test_into_list(self):
        """Generic targets work at the top level."""
        assert decode(b"li1ei2ee", into=TList[int]) == [1, 2]

    def test_mismatch_is_bencode_error(self):
        """Mapping failures share the error taxonomy."""
        with pytest.raises(ValueError):
            decode(b"i1e", into=Peer)
