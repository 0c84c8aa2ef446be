"""Tests for the canonical encoder."""

from collections import OrderedDict

import pytest
from bencodec import Dict, Encoder, Int, InvalidUtf8, List, Text, TypeMismatch, decode, encode


class TestEncodeValue:
    """Test encoding of each variant."""

    def test_int(self):
        """Integers are written in canonical decimal form."""
        assert encode(Int(1995)) == b"i1995e"
        assert encode(Int(0)) == b"i0e"
        assert encode(Int(-5)) == b"i-5e"

    def test_int_limits(self):
        """The full 64-bit range encodes."""
        assert encode(Int(2 ** 63 - 1)) == b"i9223372036854775807e"
        assert encode(Int(-2 ** 63)) == b"i-9223372036854775808e"

    def test_text(self):
        """Byte strings are length prefixed."""
        assert encode(Text(b"foo")) == b"3:foo"
        assert encode(Text(b"")) == b"0:"

    def test_text_binary(self):
        """Non-UTF-8 payloads are written verbatim."""
        assert encode(Text(b"\x00\xff:e")) == b"4:\x00\xff:e"

    def test_text_length_is_byte_count(self):
        """The prefix counts bytes, not characters."""
        assert encode(Text("é")) == b"2:\xc3\xa9"

    def test_list(self):
        """Lists keep their order."""
        assert encode(List([Int(1995), Text(b"foo")])) == b"li1995e3:fooe"
        assert encode(List()) == b"le"

    def test_dict(self):
        """Dictionaries are written with sorted keys."""
        val = Dict({"foo": 1995, "bar": "faz"})
        assert encode(val) == b"d3:bar3:faz3:fooi1995ee"
        assert encode(Dict()) == b"de"

    def test_nested(self):
        """Containers nest."""
        val = Dict({"spam": List([Text(b"a"), Text(b"b")]), "n": Dict({"x": 1})})
        assert encode(val) == b"d1:nd1:xi1ee4:spaml1:a1:bee"


class TestCanonicalOrder:
    """Test that dictionary keys are always emitted in byte order."""

    def test_insertion_order_ignored(self):
        """Insertion order never leaks into the output."""
        first = Dict()
        first["b"] = 1
        first["a"] = 2
        second = Dict()
        second["a"] = 2
        second["b"] = 1
        assert encode(first) == encode(second) == b"d1:ai2e1:bi1ee"

    def test_byte_order(self):
        """Keys sort by raw bytes, so uppercase comes first."""
        assert encode({"b": 1, "B": 2}) == b"d1:Bi2e1:bi1ee"

    def test_multibyte_keys(self):
        """UTF-8 keys sort by their encoded bytes."""
        assert encode({"é": 1, "z": 2}) == b"d1:zi2e2:\xc3\xa9i1ee"

    def test_ordered_dict_input(self):
        """An ordered mapping in reverse order is still sorted."""
        data = OrderedDict([("z", 1), ("a", 2)])
        assert encode(data) == b"d1:ai2e1:zi1ee"


class TestEncodeNative:
    """Test encoding of plain Python data."""

    def test_native_types(self):
        """int, str, bytes, list, tuple and dict are accepted."""
        assert encode(42) == b"i42e"
        assert encode("spam") == b"4:spam"
        assert encode(b"spam") == b"4:spam"
        assert encode([1, "a"]) == b"li1e1:ae"
        assert encode((1, 2)) == b"li1ei2ee"
        assert encode({"cow": "moo", "spam": "eggs"}) == b"d3:cow3:moo4:spam4:eggse"

    def test_bool(self):
        """Booleans encode as 0 and 1."""
        assert encode(True) == b"i1e"
        assert encode(False) == b"i0e"

    def test_unsupported_type(self):
        """Sets and floats have no bencode form."""
        with pytest.raises(TypeMismatch):
            encode({1, 2, 3})
        with pytest.raises(TypeMismatch):
            encode([1.5])

    def test_invalid_key(self):
        """Dictionary keys must be valid UTF-8."""
        with pytest.raises(InvalidUtf8):
            encode({b"\xff": 1})

    def test_non_string_key(self):
        """Dictionary keys must be strings."""
        with pytest.raises(TypeMismatch):
            encode({1: "a"})


class TestEncoderClass:
    """Test the reusable Encoder."""

    def test_reuse(self):
        """An encoder can be used for several values."""
        encoder = Encoder()
        assert encoder.encode(Int(1)) == b"i1e"
        assert encoder.encode(Text(b"ab")) == b"2:ab"

    def test_rejects_non_value(self):
        """Encoder.encode only takes values."""
        with pytest.raises(TypeMismatch):
            Encoder().encode(5)


class TestRoundTrip:
    """Test encode/decode consistency."""

    VALUES = [
        Int(0),
        Int(-1),
        Text(b""),
        Text(b"\xff\x00"),
        List([Int(1), List([]), Dict()]),
        Dict({"announce": "http://tracker/announce",
              "info": {"piece length": 262144, "pieces": b"\x01" * 20}}),
    ]

    @pytest.mark.parametrize("value", VALUES)
    def test_decode_encode(self, value):
        """decode(encode(v)) == v for canonical values."""
        assert decode(encode(value)) == value

    @pytest.mark.parametrize("value", VALUES)
    def test_idempotent(self, value):
        """Re-encoding a decoded value reproduces the bytes."""
        data = encode(value)
        assert encode(decode(data)) == data
