from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import numpy as np
import numpy.typing as npt

if TYPE_CHECKING:
    from npzio.core.header import Header

__all__ = [
    "ArrayArrayCodec",
    "ArrayBytesCodec",
    "BaseCodec",
    "CodecInput",
    "CodecOutput",
]

CodecInput = TypeVar("CodecInput", bound=np.ndarray[Any, Any] | bytes)
CodecOutput = TypeVar("CodecOutput", bound=np.ndarray[Any, Any] | bytes)


@dataclass(frozen=True)
class BaseCodec(Generic[CodecInput, CodecOutput]):
    """Generic base class for the steps that turn an NPY payload into an array.

    Warnings
    --------
    This class is not intended to be used directly, please use
    ArrayArrayCodec or ArrayBytesCodec for subclassing.
    """

    @abstractmethod
    def decode(self, data: CodecOutput, header: Header) -> CodecInput:
        """Decode one payload according to ``header``.

        Parameters
        ----------
        data : CodecOutput
        header : Header

        Returns
        -------
        CodecInput
        """
        ...

    @abstractmethod
    def encode(self, data: CodecInput, header: Header) -> CodecOutput:
        """Encode one value according to ``header``.

        Parameters
        ----------
        data : CodecInput
        header : Header

        Returns
        -------
        CodecOutput
        """
        ...

    def compute_encoded_size(self, header: Header) -> int:
        """Returns the number of payload bytes ``header`` describes.

        Parameters
        ----------
        header : Header

        Returns
        -------
        int
        """
        return header.nbytes


class ArrayArrayCodec(BaseCodec[npt.NDArray[Any], npt.NDArray[Any]]):
    """Base class for array-to-array codecs."""


class ArrayBytesCodec(BaseCodec[npt.NDArray[Any], bytes]):
    """Base class for array-to-bytes codecs."""
