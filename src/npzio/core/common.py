from __future__ import annotations

import functools
import operator
from collections.abc import Iterable
from typing import BinaryIO, Final, Literal, TypeAlias

import numpy as np

ShapeLike: TypeAlias = tuple[int, ...]
ByteOrder = Literal["<", ">", "|"]

NPY_MAGIC: Final = b"\x93NUMPY"
ZIP_MAGIC: Final = b"PK\x03\x04"
# an archive with no entries is just an end-of-central-directory record
ZIP_EMPTY_MAGIC: Final = b"PK\x05\x06"
MAX_MAGIC_LEN: Final = max(len(NPY_MAGIC), len(ZIP_MAGIC), len(ZIP_EMPTY_MAGIC))

NPY_SUFFIX: Final = ".npy"
VERSION_LEN: Final = 2
HEADER_ALIGN: Final = 16

# width of the little-endian header length field, by major version
LENGTH_FIELD_FORMATS: Final = {1: "<H", 2: "<I"}

HOST_BYTE_ORDER: Final[ByteOrder] = "<" if np.little_endian else ">"


def product(tup: Iterable[int]) -> int:
    return functools.reduce(operator.mul, tup, 1)


def parse_shape(data: Iterable[int]) -> ShapeLike:
    shape = tuple(data)
    for axis, extent in enumerate(shape):
        if not isinstance(extent, (int, np.integer)) or isinstance(extent, bool):
            raise TypeError(f"Expected an integer for axis {axis}, got {extent!r}.")
        if extent < 0:
            raise ValueError(f"Expected a non-negative extent for axis {axis}, got {extent}.")
    return tuple(int(extent) for extent in shape)


def strip_npy_suffix(name: str) -> str:
    """Map an archive entry name to the logical name of the array it holds."""
    if name.endswith(NPY_SUFFIX):
        return name[: -len(NPY_SUFFIX)]
    return name


def read_exact(stream: BinaryIO, count: int) -> bytes:
    """
    Read up to ``count`` bytes, retrying until the stream is exhausted.

    The result is shorter than ``count`` only if the stream ended first.
    """
    chunks = []
    remaining = count
    while remaining > 0:
        chunk = stream.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)
