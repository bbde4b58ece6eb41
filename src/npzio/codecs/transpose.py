from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from npzio.abc.codec import ArrayArrayCodec

if TYPE_CHECKING:
    import numpy.typing as npt

    from npzio.core.header import Header


@dataclass(frozen=True)
class TransposeCodec(ArrayArrayCodec):
    """
    Reconciles the element order of a payload with the shape of its header.

    A payload with ``fortran_order`` set enumerates elements with the first axis varying
    fastest and maps onto the header shape directly. Otherwise the last axis varies fastest:
    the elements are read as an array of the reversed shape with the first axis varying
    fastest, and the axes of that array are then reversed.
    """

    def decode(self, data: npt.NDArray[Any], header: Header) -> npt.NDArray[Any]:
        if header.fortran_order:
            return data.reshape(header.shape, order="F")
        reversed_shape = header.shape[::-1]
        array = data.reshape(reversed_shape, order="F")
        if array.ndim > 1:
            array = array.transpose(tuple(range(array.ndim - 1, -1, -1)))
        return array

    def encode(self, data: npt.NDArray[Any], header: Header) -> npt.NDArray[Any]:
        return data.ravel(order="F" if header.fortran_order else "C")
