from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final, TypeAlias

import numpy as np

from npzio.codecs.bytes import BytesCodec
from npzio.codecs.transpose import TransposeCodec
from npzio.core.common import read_exact
from npzio.core.dtype import kind_from_native
from npzio.core.header import Header, encode_header, read_header
from npzio.errors import ShortWriteError

if TYPE_CHECKING:
    from typing import BinaryIO

    import numpy.typing as npt

__all__ = [
    "Value",
    "header_for",
    "read_array",
    "read_payload",
    "write_array",
]

Value: TypeAlias = "npt.NDArray[Any] | np.generic"

_TRANSPOSE: Final = TransposeCodec()
_BYTES: Final = BytesCodec()


def read_payload(stream: BinaryIO, header: Header) -> Value:
    """
    Read and decode the payload that follows an NPY header.

    Parameters
    ----------
    stream : BinaryIO
        A readable binary stream positioned at the first payload byte.
    header : Header
        The header that was read from the same stream.

    Returns
    -------
    numpy.ndarray or numpy.generic
        An array with the shape of the header, or a bare scalar if the shape is empty.
    """
    data = read_exact(stream, _BYTES.compute_encoded_size(header))
    flat = _BYTES.decode(data, header)
    array = _TRANSPOSE.decode(flat, header)
    if header.ndim == 0:
        return array[()]
    return array


def read_array(stream: BinaryIO) -> Value:
    header = read_header(stream)
    return read_payload(stream, header)


def header_for(value: npt.ArrayLike) -> Header:
    """Returns the header that ``write_array`` emits for ``value``."""
    array = np.asarray(value)
    return Header(kind_from_native(array.dtype), array.shape, fortran_order=True)


def _write_checked(stream: BinaryIO, data: bytes) -> None:
    written = stream.write(data)
    # streams that report nothing are assumed to have taken everything
    if written is not None and written != len(data):
        raise ShortWriteError(len(data), written)


def write_array(stream: BinaryIO, value: npt.ArrayLike) -> None:
    """
    Write ``value`` to ``stream`` as a complete NPY stream.

    The payload is always written with the first axis varying fastest and in the byte
    order of the host.

    Parameters
    ----------
    stream : BinaryIO
        A writable binary stream.
    value : numpy.typing.ArrayLike
        A scalar or an array of one of the registered element kinds.
    """
    array = np.asarray(value)
    header = header_for(array)
    payload = _BYTES.encode(_TRANSPOSE.encode(array, header), header)
    _write_checked(stream, encode_header(header))
    _write_checked(stream, payload)
