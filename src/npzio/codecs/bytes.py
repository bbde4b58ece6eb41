from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import numpy as np

from npzio.abc.codec import ArrayBytesCodec
from npzio.errors import ShortReadError

if TYPE_CHECKING:
    import numpy.typing as npt

    from npzio.core.header import Header


@dataclass(frozen=True)
class BytesCodec(ArrayBytesCodec):
    """
    Converts between an NPY payload and a flat array of native-endian elements.

    The payload is read in the byte order declared by the header and converted to the
    byte order of the host. Writing converts elements to the byte order declared by the
    header.
    """

    def decode(self, data: bytes, header: Header) -> npt.NDArray[Any]:
        expected = self.compute_encoded_size(header)
        if len(data) != expected:
            raise ShortReadError(expected, len(data))
        if header.size == 0:
            return np.empty(0, dtype=header.dtype)
        as_stored = np.frombuffer(data, dtype=header.file_dtype, count=header.size)
        return header.to_native(as_stored)

    def encode(self, data: npt.NDArray[Any], header: Header) -> bytes:
        if data.dtype != header.file_dtype:
            data = data.astype(header.file_dtype)
        # the layout step has already flattened the array in payload order
        return data.tobytes()
