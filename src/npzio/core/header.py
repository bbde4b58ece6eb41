"""
Parsing and serialization of NPY headers.

An NPY stream starts with a fixed prefix: the magic string, a two-byte version, a little-endian
length field and a header text. The header text is a Python dictionary literal such as::

    {'descr': '<f8', 'fortran_order': False, 'shape': (3, 4), }

The parser below is a small recursive-descent parser. Every production is a function
``parse_x(text, pos)`` that consumes a prefix of ``text`` starting at ``pos`` and returns the
parsed value together with the position just past it. Whitespace between tokens is skipped
by the caller of each production, never by the production itself.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Final, cast

import numpy as np

from npzio.core.common import (
    HEADER_ALIGN,
    HOST_BYTE_ORDER,
    LENGTH_FIELD_FORMATS,
    NPY_MAGIC,
    VERSION_LEN,
    ByteOrder,
    ShapeLike,
    parse_shape,
    product,
    read_exact,
)
from npzio.core.config import config
from npzio.core.dtype import ElementKind, code_to_kind
from npzio.errors import MalformedHeaderError, NotAnArrayFileError, UnsupportedVersionError

if TYPE_CHECKING:
    from typing import BinaryIO

    import numpy.typing as npt

__all__ = [
    "Header",
    "encode_header",
    "parse_bool",
    "parse_char",
    "parse_descr",
    "parse_header",
    "parse_header_text",
    "parse_integer",
    "parse_string",
    "parse_tuple",
    "read_header",
]

HEADER_KEYS: Final = ("descr", "fortran_order", "shape")
_WHITESPACE: Final = " \t\n\r\f\v"


@dataclass(frozen=True)
class Header:
    """
    The metadata of one NPY array.

    Attributes
    ----------
    kind : type[ElementKind]
        The element kind named by the ``descr`` entry.
    byte_order : {"<", ">", "|"}
        The byte order of the payload. ``"|"`` is only used for single-byte kinds.
    fortran_order : bool
        True if the payload enumerates elements with the first axis varying fastest.
    shape : tuple of int
        The extent of each axis. An empty shape denotes a scalar.
    """

    kind: type[ElementKind]
    byte_order: ByteOrder
    fortran_order: bool
    shape: ShapeLike

    def __init__(
        self,
        kind: type[ElementKind],
        shape: ShapeLike,
        *,
        fortran_order: bool = True,
        byte_order: ByteOrder | None = None,
    ) -> None:
        shape_parsed = parse_shape(shape)
        byte_order_parsed = parse_byte_order(kind, byte_order)
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "byte_order", byte_order_parsed)
        object.__setattr__(self, "fortran_order", bool(fortran_order))
        object.__setattr__(self, "shape", shape_parsed)

    @property
    def ndim(self) -> int:
        return len(self.shape)

    @property
    def size(self) -> int:
        return product(self.shape)

    @property
    def nbytes(self) -> int:
        return self.size * self.kind.byte_count

    @property
    def dtype(self) -> np.dtype[Any]:
        """The native numpy dtype that the payload decodes to."""
        return self.kind.to_numpy

    @property
    def file_dtype(self) -> np.dtype[Any]:
        """The numpy dtype of the payload as it is laid out in the stream."""
        if self.byte_order == "|":
            return self.kind.to_numpy
        return self.kind.to_numpy.newbyteorder(self.byte_order)

    @property
    def descr(self) -> str:
        return f"{self.byte_order}{self.kind.code}"

    def to_native(self, data: npt.NDArray[Any]) -> npt.NDArray[Any]:
        """Convert elements read in the stream byte order to native byte order."""
        return data.astype(self.dtype, copy=True)

    def to_text(self) -> str:
        """Serialize this header as an unpadded dictionary literal."""
        return (
            f"{{'descr': '{self.descr}', "
            f"'fortran_order': {self.fortran_order}, "
            f"'shape': {self.shape}, }}"
        )


def parse_byte_order(kind: type[ElementKind], data: str | None) -> ByteOrder:
    if data is None:
        return "|" if kind.byte_count == 1 else HOST_BYTE_ORDER
    if data == "|":
        if kind.byte_count != 1:
            raise MalformedHeaderError(
                f"Byte order '|' is only valid for single-byte types, got {kind.code!r}."
            )
        return data
    if data in ("<", ">"):
        return cast(ByteOrder, data)
    raise MalformedHeaderError(f"Unsupported endian character {data!r}.")


def _found(text: str, pos: int) -> str:
    return text[pos : pos + 10] if pos < len(text) else "end of header"


def skip_whitespace(text: str, pos: int) -> int:
    while pos < len(text) and text[pos] in _WHITESPACE:
        pos += 1
    return pos


def parse_char(text: str, pos: int, char: str) -> tuple[str, int]:
    if not text.startswith(char, pos):
        raise MalformedHeaderError(pos, repr(char), _found(text, pos))
    return char, pos + 1


def parse_string(text: str, pos: int) -> tuple[str, int]:
    _, pos = parse_char(text, pos, "'")
    end = text.find("'", pos)
    if end == -1:
        raise MalformedHeaderError(pos, "a closing quote", _found(text, pos))
    return text[pos:end], end + 1


def parse_bool(text: str, pos: int) -> tuple[bool, int]:
    if text.startswith("True", pos):
        return True, pos + 4
    if text.startswith("False", pos):
        return False, pos + 5
    raise MalformedHeaderError(pos, "True or False", _found(text, pos))


def parse_integer(text: str, pos: int) -> tuple[int, int]:
    end = pos
    while end < len(text) and text[end] in "0123456789":
        end += 1
    if end == pos:
        raise MalformedHeaderError(pos, "a digit", _found(text, pos))
    value = int(text[pos:end])
    # tolerate the long-integer suffix written by old Python 2 producers
    if text.startswith("L", end):
        end += 1
    return value, end


def parse_tuple(text: str, pos: int) -> tuple[ShapeLike, int]:
    _, pos = parse_char(text, pos, "(")
    items: list[int] = []
    while True:
        pos = skip_whitespace(text, pos)
        if text.startswith(")", pos):
            break
        value, pos = parse_integer(text, pos)
        items.append(value)
        pos = skip_whitespace(text, pos)
        if text.startswith(")", pos):
            break
        _, pos = parse_char(text, pos, ",")
    _, pos = parse_char(text, pos, ")")
    return tuple(items), pos


def parse_descr(text: str, pos: int) -> tuple[tuple[type[ElementKind], ByteOrder], int]:
    start = pos
    descr, pos = parse_string(text, pos)
    if len(descr) < 2 or descr[0] not in "<>|":
        raise MalformedHeaderError(start, "an endian character followed by a type code", descr)
    kind = code_to_kind(descr[1:])
    return (kind, parse_byte_order(kind, descr[0])), pos


def parse_header(text: str, pos: int = 0) -> tuple[Header, int]:
    """
    Parse an NPY header dictionary.

    Parameters
    ----------
    text : str
        The header text.
    pos : int
        The position of the opening brace.

    Returns
    -------
    tuple[Header, int]
        The header and the position just past the closing brace.
    """
    _, pos = parse_char(text, skip_whitespace(text, pos), "{")

    entries: dict[str, Any] = {}
    for _ in HEADER_KEYS:
        pos = skip_whitespace(text, pos)
        # a trailing comma may directly precede the closing brace
        if text.startswith("}", pos):
            break
        key_pos = pos
        key, pos = parse_string(text, pos)
        pos = skip_whitespace(text, pos)
        _, pos = parse_char(text, pos, ":")
        pos = skip_whitespace(text, pos)
        if key == "descr":
            entries[key], pos = parse_descr(text, pos)
        elif key == "fortran_order":
            entries[key], pos = parse_bool(text, pos)
        elif key == "shape":
            entries[key], pos = parse_tuple(text, pos)
        else:
            raise MalformedHeaderError(key_pos, f"one of the keys {HEADER_KEYS}", key)
        pos = skip_whitespace(text, pos)
        if text.startswith("}", pos):
            break
        _, pos = parse_char(text, pos, ",")
    pos = skip_whitespace(text, pos)
    _, pos = parse_char(text, pos, "}")

    missing = [key for key in HEADER_KEYS if key not in entries]
    if missing:
        raise MalformedHeaderError(f"Header is missing the required keys {missing}.")

    kind, byte_order = entries["descr"]
    header = Header(
        kind,
        entries["shape"],
        fortran_order=entries["fortran_order"],
        byte_order=byte_order,
    )
    return header, pos


def parse_header_text(text: str) -> Header:
    """Parse a complete header text, rejecting anything after the closing brace."""
    header, pos = parse_header(text)
    pos = skip_whitespace(text, pos)
    if pos != len(text):
        raise MalformedHeaderError(pos, "end of header", _found(text, pos))
    return header


def _pad_header_text(text: str, major: int) -> bytes:
    prefix_len = len(NPY_MAGIC) + VERSION_LEN + struct.calcsize(LENGTH_FIELD_FORMATS[major])
    # one byte is reserved for the terminating newline
    padding = -(prefix_len + len(text) + 1) % HEADER_ALIGN
    return (text + " " * padding + "\n").encode("ascii")


def encode_header(header: Header) -> bytes:
    """
    Serialize the full NPY prefix for ``header``.

    The result holds the magic string, the version, the header length field and the
    padded header text. Its length is a multiple of 16 so that the payload that follows
    it is aligned. Version 1.0 is used whenever the header text fits a 16 bit length field.
    """
    text = header.to_text()
    major = 1
    body = _pad_header_text(text, major)
    if len(body) > 0xFFFF:
        major = 2
        body = _pad_header_text(text, major)
        if len(body) > 0xFFFFFFFF:
            raise MalformedHeaderError(
                f"Header text of {len(body)} bytes does not fit a version 2.0 length field."
            )
    length = struct.pack(LENGTH_FIELD_FORMATS[major], len(body))
    return NPY_MAGIC + bytes([major, 0]) + length + body


def read_magic(stream: BinaryIO) -> tuple[int, int]:
    magic = read_exact(stream, len(NPY_MAGIC))
    if magic != NPY_MAGIC:
        raise NotAnArrayFileError(NPY_MAGIC, magic)
    version = read_exact(stream, VERSION_LEN)
    if len(version) != VERSION_LEN:
        raise MalformedHeaderError(f"Truncated version field: got {len(version)} bytes.")
    major, minor = version[0], version[1]
    if major not in LENGTH_FIELD_FORMATS:
        raise UnsupportedVersionError(major, minor)
    return major, minor


def read_header(stream: BinaryIO) -> Header:
    """
    Read an NPY prefix from ``stream`` and parse its header.

    On return the stream is positioned at the first byte of the payload.

    Parameters
    ----------
    stream : BinaryIO
        A readable binary stream positioned at the start of an NPY stream.

    Returns
    -------
    Header
    """
    major, _ = read_magic(stream)
    length_format = LENGTH_FIELD_FORMATS[major]
    length_field = read_exact(stream, struct.calcsize(length_format))
    if len(length_field) != struct.calcsize(length_format):
        raise MalformedHeaderError(
            f"Truncated header length field: expected {struct.calcsize(length_format)} bytes, "
            f"got {len(length_field)}."
        )
    (header_len,) = struct.unpack(length_format, length_field)

    max_header_size = config.get("read.max_header_size")
    if max_header_size is not None and header_len > max_header_size:
        raise MalformedHeaderError(
            f"Header length {header_len} exceeds the configured maximum of {max_header_size}."
        )

    raw = read_exact(stream, header_len)
    if len(raw) != header_len:
        raise MalformedHeaderError(
            f"Truncated header text: expected {header_len} bytes, got {len(raw)}."
        )
    try:
        text = raw.decode("ascii")
    except UnicodeDecodeError as e:
        raise MalformedHeaderError(f"Header text is not ASCII: {e}") from e
    return parse_header_text(text)
