import io
import struct

import pytest

from npzio.core.common import HOST_BYTE_ORDER, NPY_MAGIC
from npzio.core.config import config
from npzio.core.dtype import Bool, Complex128, Float64, Int8, Int32, Uint8
from npzio.core.header import (
    Header,
    encode_header,
    parse_bool,
    parse_char,
    parse_descr,
    parse_header,
    parse_header_text,
    parse_integer,
    parse_string,
    parse_tuple,
    read_header,
)
from npzio.errors import (
    MalformedHeaderError,
    NotAnArrayFileError,
    UnsupportedTypeError,
    UnsupportedVersionError,
)


def _prefix(text: str, *, version: bytes = b"\x01\x00") -> bytes:
    body = text.encode("ascii")
    return NPY_MAGIC + version + struct.pack("<H", len(body)) + body


class TestProductions:
    """
    Each production consumes a prefix and returns the position just past it.
    """

    @staticmethod
    def test_parse_char() -> None:
        assert parse_char("{'a'", 0, "{") == ("{", 1)
        with pytest.raises(MalformedHeaderError, match="expected '\\('"):
            parse_char("[1]", 0, "(")

    @staticmethod
    def test_parse_char_at_end() -> None:
        with pytest.raises(MalformedHeaderError, match="end of header"):
            parse_char("{", 1, "}")

    @staticmethod
    @pytest.mark.parametrize(
        ("text", "pos", "expected"),
        [
            ("'descr': ", 0, ("descr", 7)),
            ("''", 0, ("", 2)),
            ("{'shape'}", 1, ("shape", 8)),
        ],
    )
    def test_parse_string(text: str, pos: int, expected: tuple[str, int]) -> None:
        assert parse_string(text, pos) == expected

    @staticmethod
    @pytest.mark.parametrize("text", ["'descr", '"descr"', "descr'"])
    def test_parse_string_invalid(text: str) -> None:
        with pytest.raises(MalformedHeaderError):
            parse_string(text, 0)

    @staticmethod
    @pytest.mark.parametrize(
        ("text", "expected"), [("True, ", (True, 4)), ("False}", (False, 5))]
    )
    def test_parse_bool(text: str, expected: tuple[bool, int]) -> None:
        assert parse_bool(text, 0) == expected

    @staticmethod
    @pytest.mark.parametrize("text", ["true", "FALSE", "1", "", "Tru"])
    def test_parse_bool_invalid(text: str) -> None:
        with pytest.raises(MalformedHeaderError, match="True or False"):
            parse_bool(text, 0)

    @staticmethod
    @pytest.mark.parametrize(
        ("text", "expected"),
        [("3,", (3, 1)), ("123)", (123, 3)), ("12L, ", (12, 3)), ("0", (0, 1))],
    )
    def test_parse_integer(text: str, expected: tuple[int, int]) -> None:
        assert parse_integer(text, 0) == expected

    @staticmethod
    @pytest.mark.parametrize("text", ["x", "", "-1", " 1", "L"])
    def test_parse_integer_invalid(text: str) -> None:
        with pytest.raises(MalformedHeaderError, match="a digit"):
            parse_integer(text, 0)

    @staticmethod
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("()", ()),
            ("(3,)", (3,)),
            ("(2, 3)", (2, 3)),
            ("( 2 , 3 , )", (2, 3)),
            ("(4L, 5L)", (4, 5)),
            ("(0, 7)", (0, 7)),
        ],
    )
    def test_parse_tuple(text: str, expected: tuple[int, ...]) -> None:
        assert parse_tuple(text, 0) == (expected, len(text))

    @staticmethod
    @pytest.mark.parametrize("text", ["(2 3)", "(2,", "(a)", "[2, 3]", "(2,, 3)", "(2; 3)"])
    def test_parse_tuple_invalid(text: str) -> None:
        with pytest.raises(MalformedHeaderError):
            parse_tuple(text, 0)

    @staticmethod
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("'<f8'", (Float64, "<")),
            ("'>f8'", (Float64, ">")),
            ("'|u1'", (Uint8, "|")),
            ("'<u1'", (Uint8, "<")),
            ("'|b1'", (Bool, "|")),
            ("'<c16'", (Complex128, "<")),
        ],
    )
    def test_parse_descr(text: str, expected: tuple[object, str]) -> None:
        assert parse_descr(text, 0) == (expected, len(text))

    @staticmethod
    @pytest.mark.parametrize("text", ["'|f8'", "'=f8'", "'f8'", "'<'", "''", "<f8"])
    def test_parse_descr_malformed(text: str) -> None:
        with pytest.raises(MalformedHeaderError):
            parse_descr(text, 0)

    @staticmethod
    @pytest.mark.parametrize("text", ["'<U10'", "'|O'", "'<M8[s]'", "'<i3'"])
    def test_parse_descr_unsupported(text: str) -> None:
        with pytest.raises(UnsupportedTypeError):
            parse_descr(text, 0)


class TestParseHeader:
    @staticmethod
    def test_row_major() -> None:
        text = "{'descr': '<i4', 'fortran_order': False, 'shape': (2, 3), }"
        header, pos = parse_header(text)
        assert pos == len(text)
        assert header == Header(Int32, (2, 3), fortran_order=False, byte_order="<")

    @staticmethod
    @pytest.mark.parametrize(
        "text",
        [
            "{'shape': (3,), 'fortran_order': True, 'descr': '>f8'}",
            "{'fortran_order': True, 'descr': '>f8', 'shape': (3,),}",
            "{ 'descr' : '>f8' ,\n'fortran_order':True,'shape':( 3 , ) , }",
            "  {'descr': '>f8', 'fortran_order': True, 'shape': (3L,), }        \n",
        ],
    )
    def test_key_order_and_whitespace(text: str) -> None:
        assert parse_header_text(text) == Header(
            Float64, (3,), fortran_order=True, byte_order=">"
        )

    @staticmethod
    @pytest.mark.parametrize(
        ("text", "match"),
        [
            ("{'descr': '<f8', 'fortran_order': True, 'bogus': (3,), }", "bogus"),
            ("{'descr': '<f8', 'shape': (3,), }", "missing"),
            ("{'descr': '<f8', 'fortran_order': True}", "missing"),
            ("{'descr': '<f8', 'descr': '<f8', 'shape': (3,)}", "missing"),
            ("{'descr': '<f8', 'fortran_order': True, 'shape': (3,), } x", "end of header"),
            ("{'descr': '<f8', 'fortran_order': True, 'shape': (3,), }}", "end of header"),
            (
                "{'descr': '<f8', 'fortran_order': True, 'shape': (3,), 'descr': '<f8'}",
                "'}'",
            ),
            ("{'descr': '<f8', 'fortran_order': true, 'shape': (3,), }", "True or False"),
            ("{'descr': '<f8', 'fortran_order': True, 'shape': (3, x), }", "a digit"),
            ("{'descr", "closing quote"),
            ("'descr': '<f8'", "'{'"),
            ("{'descr': '<f8' 'fortran_order': True, 'shape': (3,)}", "','"),
            ("{'descr' '<f8', 'fortran_order': True, 'shape': (3,)}", "':'"),
            ("", "end of header"),
        ],
    )
    def test_malformed(text: str, match: str) -> None:
        with pytest.raises(MalformedHeaderError, match=match):
            parse_header_text(text)


class TestHeader:
    @staticmethod
    def test_defaults() -> None:
        assert Header(Float64, (3,)).byte_order == HOST_BYTE_ORDER
        assert Header(Float64, (3,)).fortran_order is True
        assert Header(Uint8, (3,)).byte_order == "|"
        assert Header(Int8, ()).byte_order == "|"

    @staticmethod
    def test_derived_properties() -> None:
        header = Header(Complex128, (2, 3), byte_order=">")
        assert header.ndim == 2
        assert header.size == 6
        assert header.nbytes == 96
        assert header.descr == ">c16"
        assert header.dtype == Complex128.to_numpy
        assert header.file_dtype.byteorder in (">", "=")
        assert header.file_dtype.newbyteorder("=") == Complex128.to_numpy

    @staticmethod
    @pytest.mark.parametrize(("shape", "size"), [((), 1), ((0,), 0), ((4, 0, 2), 0), ((5,), 5)])
    def test_size(shape: tuple[int, ...], size: int) -> None:
        assert Header(Int32, shape).size == size

    @staticmethod
    def test_negative_extent() -> None:
        with pytest.raises(ValueError, match="non-negative"):
            Header(Int32, (2, -1))

    @staticmethod
    @pytest.mark.parametrize(
        ("shape", "text"),
        [
            ((3,), "{'descr': '<f8', 'fortran_order': True, 'shape': (3,), }"),
            ((2, 3), "{'descr': '<f8', 'fortran_order': True, 'shape': (2, 3), }"),
            ((), "{'descr': '<f8', 'fortran_order': True, 'shape': (), }"),
        ],
    )
    def test_to_text(shape: tuple[int, ...], text: str) -> None:
        assert Header(Float64, shape, byte_order="<").to_text() == text

    @staticmethod
    def test_to_text_parses_back() -> None:
        header = Header(Int32, (4, 5, 6), fortran_order=False, byte_order=">")
        assert parse_header_text(header.to_text()) == header


class TestEncodeHeader:
    @staticmethod
    @pytest.mark.parametrize("kind", [Bool, Int8, Int32, Float64, Complex128])
    @pytest.mark.parametrize(
        "shape", [(), (3,), (2, 3), (10**12,), tuple(range(1, 30)), (1,) * 7]
    )
    def test_alignment(kind: type, shape: tuple[int, ...]) -> None:
        prefix = encode_header(Header(kind, shape))
        assert prefix.startswith(NPY_MAGIC + b"\x01\x00")
        assert len(prefix) % 16 == 0
        assert prefix.endswith(b"\n")
        (header_len,) = struct.unpack("<H", prefix[8:10])
        assert header_len == len(prefix) - 10
        text = prefix[10:].decode("ascii")
        assert text.rstrip(" \n") == Header(kind, shape).to_text()

    @staticmethod
    def test_exact_bytes() -> None:
        prefix = encode_header(Header(Float64, (3,), byte_order="<"))
        text = "{'descr': '<f8', 'fortran_order': True, 'shape': (3,), }"
        assert prefix == NPY_MAGIC + b"\x01\x00" + b"F\x00" + text.encode() + b" " * 13 + b"\n"

    @staticmethod
    def test_version_2() -> None:
        header = Header(Float64, (1,) * 25_000)
        prefix = encode_header(header)
        assert prefix[6:8] == b"\x02\x00"
        assert len(prefix) % 16 == 0
        (header_len,) = struct.unpack("<I", prefix[8:12])
        assert header_len == len(prefix) - 12
        assert read_header(io.BytesIO(prefix)) == header


class TestReadHeader:
    @staticmethod
    def test_roundtrip_leaves_stream_at_payload() -> None:
        header = Header(Int32, (2, 3), fortran_order=False, byte_order="<")
        stream = io.BytesIO(encode_header(header) + b"payload")
        assert read_header(stream) == header
        assert stream.read() == b"payload"

    @staticmethod
    @pytest.mark.parametrize("data", [b"", b"\x93NUM", b"\x93NUMPX\x01\x00", b"PK\x03\x04xx"])
    def test_wrong_magic(data: bytes) -> None:
        with pytest.raises(NotAnArrayFileError):
            read_header(io.BytesIO(data))

    @staticmethod
    @pytest.mark.parametrize("version", [b"\x00\x00", b"\x03\x00", b"\xff\x01"])
    def test_unsupported_version(version: bytes) -> None:
        text = "{'descr': '<f8', 'fortran_order': True, 'shape': (3,), }"
        with pytest.raises(UnsupportedVersionError):
            read_header(io.BytesIO(_prefix(text, version=version)))

    @staticmethod
    def test_minor_version_is_ignored() -> None:
        text = "{'descr': '<f8', 'fortran_order': True, 'shape': (3,), }"
        header = read_header(io.BytesIO(_prefix(text, version=b"\x01\x07")))
        assert header.shape == (3,)

    @staticmethod
    @pytest.mark.parametrize(
        "data",
        [
            NPY_MAGIC + b"\x01",
            NPY_MAGIC + b"\x01\x00\x10",
            NPY_MAGIC + b"\x02\x00\x10\x00\x00",
            NPY_MAGIC + b"\x01\x00\x64\x00{'descr': '<f8'",
        ],
    )
    def test_truncated(data: bytes) -> None:
        with pytest.raises(MalformedHeaderError, match="Truncated"):
            read_header(io.BytesIO(data))

    @staticmethod
    def test_non_ascii() -> None:
        data = NPY_MAGIC + b"\x01\x00\x04\x00{\xe9}\n"
        with pytest.raises(MalformedHeaderError, match="ASCII"):
            read_header(io.BytesIO(data))

    @staticmethod
    def test_max_header_size() -> None:
        data = encode_header(Header(Float64, (3,)))
        with config.set({"read.max_header_size": 16}):
            with pytest.raises(MalformedHeaderError, match="configured maximum"):
                read_header(io.BytesIO(data))
        assert read_header(io.BytesIO(data)).shape == (3,)
