"""
# Overview

This module holds the registry of element kinds that can be stored in an NPY stream.

Each element kind is a class deriving from `ElementKind`. It records the type code used in
the ``descr`` entry of an NPY header (the part after the byte-order character), the number
of bytes per element, and the native numpy dtype that values of this kind decode to.

The set of kinds is fixed: booleans, signed and unsigned integers of width 1, 2, 4 and 8,
floats of width 2, 4 and 8, and complex numbers of width 8 and 16. `TYPE_MAPS` lists them in
order, and the two lookup tables built from it form a bijection between type codes and kinds.

## dtype lookup

```
from npzio.core.dtype import code_to_kind, kind_to_code

code_to_kind("f8")  # returns Float64
code_to_kind("U10")  # UnsupportedTypeError

kind_to_code(Int16)  # returns "i2"
kind_to_code(np.dtype(">i2"))  # returns "i2", byte order is not part of the code
kind_to_code("float32")  # returns "f4"
kind_to_code(np.dtype("datetime64[s]"))  # UnsupportedTypeError
```
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Final

import numpy as np

from npzio.errors import UnsupportedTypeError

if TYPE_CHECKING:
    from collections.abc import Mapping

    import numpy.typing as npt

__all__ = [
    "TYPE_MAPS",
    "ElementKind",
    "code_to_kind",
    "kind_from_native",
    "kind_to_code",
]


class FrozenClassVariables(type):
    def __setattr__(cls, attr: str, value: object) -> None:
        if hasattr(cls, attr):
            raise ValueError(f"Attribute {attr} on ElementKind class can not be changed once set.")
        super().__setattr__(attr, value)


class ElementKind(metaclass=FrozenClassVariables):
    name: str
    code: str
    byte_count: int
    to_numpy: np.dtype[Any]

    def __init_subclass__(cls, **kwargs: object) -> None:
        required_attrs = ["name", "code", "byte_count", "to_numpy"]
        for attr in required_attrs:
            if not hasattr(cls, attr):
                raise ValueError(f"{attr} is a required attribute for an element kind.")

        cls._validate()

        super().__init_subclass__(**kwargs)

    @classmethod
    def _validate(cls) -> None:
        if cls.byte_count <= 0:
            raise ValueError("byte_count must be a positive integer.")
        if cls.to_numpy.itemsize != cls.byte_count:
            raise ValueError(
                f"byte_count of {cls.name} is {cls.byte_count}, "
                f"but {cls.to_numpy} has an item size of {cls.to_numpy.itemsize}."
            )


class Bool(ElementKind):
    name = "bool"
    code = "b1"
    byte_count = 1
    to_numpy = np.dtype("bool")


class Int8(ElementKind):
    name = "int8"
    code = "i1"
    byte_count = 1
    to_numpy = np.dtype("int8")


class Int16(ElementKind):
    name = "int16"
    code = "i2"
    byte_count = 2
    to_numpy = np.dtype("int16")


class Int32(ElementKind):
    name = "int32"
    code = "i4"
    byte_count = 4
    to_numpy = np.dtype("int32")


class Int64(ElementKind):
    name = "int64"
    code = "i8"
    byte_count = 8
    to_numpy = np.dtype("int64")


class Uint8(ElementKind):
    name = "uint8"
    code = "u1"
    byte_count = 1
    to_numpy = np.dtype("uint8")


class Uint16(ElementKind):
    name = "uint16"
    code = "u2"
    byte_count = 2
    to_numpy = np.dtype("uint16")


class Uint32(ElementKind):
    name = "uint32"
    code = "u4"
    byte_count = 4
    to_numpy = np.dtype("uint32")


class Uint64(ElementKind):
    name = "uint64"
    code = "u8"
    byte_count = 8
    to_numpy = np.dtype("uint64")


class Float16(ElementKind):
    name = "float16"
    code = "f2"
    byte_count = 2
    to_numpy = np.dtype("float16")


class Float32(ElementKind):
    name = "float32"
    code = "f4"
    byte_count = 4
    to_numpy = np.dtype("float32")


class Float64(ElementKind):
    name = "float64"
    code = "f8"
    byte_count = 8
    to_numpy = np.dtype("float64")


class Complex64(ElementKind):
    name = "complex64"
    code = "c8"
    byte_count = 8
    to_numpy = np.dtype("complex64")


class Complex128(ElementKind):
    name = "complex128"
    code = "c16"
    byte_count = 16
    to_numpy = np.dtype("complex128")


TYPE_MAPS: Final[tuple[tuple[str, type[ElementKind]], ...]] = (
    ("b1", Bool),
    ("i1", Int8),
    ("i2", Int16),
    ("i4", Int32),
    ("i8", Int64),
    ("u1", Uint8),
    ("u2", Uint16),
    ("u4", Uint32),
    ("u8", Uint64),
    ("f2", Float16),
    ("f4", Float32),
    ("f8", Float64),
    ("c8", Complex64),
    ("c16", Complex128),
)

_CODE_TO_KIND: Final[Mapping[str, type[ElementKind]]] = MappingProxyType(dict(TYPE_MAPS))
_KIND_TO_CODE: Final[Mapping[type[ElementKind], str]] = MappingProxyType(
    {kind: code for code, kind in TYPE_MAPS}
)
# keyed on (numpy kind character, item size), which ignores byte order and type aliases
_NATIVE_TO_KIND: Final[Mapping[tuple[str, int], type[ElementKind]]] = MappingProxyType(
    {(kind.to_numpy.kind, kind.byte_count): kind for _, kind in TYPE_MAPS}
)


def code_to_kind(code: str) -> type[ElementKind]:
    try:
        return _CODE_TO_KIND[code]
    except KeyError:
        raise UnsupportedTypeError(code, tuple(_CODE_TO_KIND)) from None


def kind_from_native(dtype: npt.DTypeLike) -> type[ElementKind]:
    """
    Find the element kind of a native numpy dtype.

    Parameters
    ----------
    dtype : numpy.typing.DTypeLike
        Anything ``numpy.dtype`` accepts. The byte order is ignored.

    Returns
    -------
    type[ElementKind]
    """
    try:
        native = np.dtype(dtype)
    except TypeError:
        raise UnsupportedTypeError(dtype, tuple(_CODE_TO_KIND)) from None
    if native.fields is not None or native.subdtype is not None:
        raise UnsupportedTypeError(native, tuple(_CODE_TO_KIND))
    try:
        return _NATIVE_TO_KIND[native.kind, native.itemsize]
    except KeyError:
        raise UnsupportedTypeError(native, tuple(_CODE_TO_KIND)) from None


def kind_to_code(kind: type[ElementKind] | npt.DTypeLike) -> str:
    if isinstance(kind, type) and issubclass(kind, ElementKind):
        try:
            return _KIND_TO_CODE[kind]
        except KeyError:
            raise UnsupportedTypeError(kind.__name__, tuple(_CODE_TO_KIND)) from None
    return _KIND_TO_CODE[kind_from_native(kind)]
