"""
Reading and writing NPZ archives.

An NPZ archive is a store holding one complete NPY stream per array. The entry for an array
named ``x`` is called ``x.npy``; readers accept the name with or without that suffix.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, TypeVar
from warnings import warn

import numpy as np

from npzio.core.common import NPY_SUFFIX, strip_npy_suffix
from npzio.core.config import config
from npzio.core.header import Header, read_header
from npzio.core.npy import Value, header_for, read_array, write_array
from npzio.errors import NpzUserWarning

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from typing import BinaryIO

    import numpy.typing as npt

    from npzio.abc.store import Store

__all__ = ["read_archive", "read_archive_headers", "write_archive"]

T = TypeVar("T")


def _selected(store: Store, names: Iterable[str] | None) -> list[tuple[str, str]]:
    """Pair each requested entry name with its logical name, in store order."""
    keys = list(store.list())
    if names is None:
        return [(key, strip_npy_suffix(key)) for key in keys]
    wanted = set(names)
    return [
        (key, strip_npy_suffix(key))
        for key in keys
        if key in wanted or strip_npy_suffix(key) in wanted
    ]


def _read_entries(
    store: Store, names: Iterable[str] | None, read: Callable[[BinaryIO], T]
) -> dict[str, T]:
    out: dict[str, T] = {}
    for key, name in _selected(store, names):
        with store.open(key, mode="r") as f:
            out[name] = read(f)
    return out


def read_archive(store: Store, names: Iterable[str] | None = None) -> dict[str, Value]:
    """
    Read arrays from an NPZ archive.

    Parameters
    ----------
    store : Store
        The archive.
    names : iterable of str, optional
        The arrays to read, with or without the ``.npy`` suffix. Defaults to all entries.
        Entries that are not requested are never opened.

    Returns
    -------
    dict[str, numpy.ndarray | numpy.generic]
        The decoded values keyed by their logical names. If any requested entry fails to
        decode, the error propagates and nothing is returned.
    """
    return _read_entries(store, names, read_array)


def read_archive_headers(store: Store, names: Iterable[str] | None = None) -> dict[str, Header]:
    """Like ``read_archive``, but stop after each header and skip the payloads."""
    return _read_entries(store, names, read_header)


def write_archive(store: Store, values: Mapping[str, npt.ArrayLike]) -> None:
    """
    Write each value of ``values`` to its own ``<name>.npy`` entry of ``store``.

    Every value is checked before the first entry is created, so a value of an unsupported
    element kind leaves the store untouched. An I/O failure part way through leaves the
    entries written so far in the store.
    """
    if not isinstance(values, Mapping):
        raise TypeError(f"Expected a mapping of names to values, got {type(values)}.")
    if len(values) == 0 and config.get("archive.warn_empty"):
        warn(
            f"No data to be written to {store}. "
            "The archive may not be readable as intended.",
            category=NpzUserWarning,
            stacklevel=2,
        )
    arrays = {name: np.asarray(value) for name, value in values.items()}
    for array in arrays.values():
        header_for(array)
    for name, array in arrays.items():
        with store.open(name + NPY_SUFFIX, mode="w") as f:
            write_array(f, array)
