from __future__ import annotations

import os
import zipfile
from collections.abc import Mapping
from contextlib import contextmanager
from logging import getLogger
from typing import TYPE_CHECKING, Literal, TypeAlias

from npzio.abc.store import Store
from npzio.archive import read_archive, read_archive_headers, write_archive
from npzio.core.common import MAX_MAGIC_LEN, NPY_MAGIC, ZIP_EMPTY_MAGIC, ZIP_MAGIC
from npzio.core.header import read_header as read_npy_header
from npzio.core.npy import read_array, write_array
from npzio.errors import NotAnArrayFileError
from npzio.storage import ZipStore

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from typing import BinaryIO

    import numpy.typing as npt

    from npzio.core.header import Header
    from npzio.core.npy import Value

__all__ = ["load", "read_header", "save", "savez"]

_LOG = getLogger(__name__)

FileLike: TypeAlias = "str | os.PathLike[str] | BinaryIO"
FormatLiteral = Literal["npy", "npz"]


@contextmanager
def _open_file(file: FileLike, mode: Literal["r", "w"]) -> Iterator[BinaryIO]:
    """Open ``file`` if it is a path; file objects are used as-is and left open."""
    if isinstance(file, (str, os.PathLike)):
        with open(file, mode + "b") as f:
            yield f
    else:
        yield file


def _sniff_format(f: BinaryIO, file: FileLike) -> FormatLiteral:
    start = f.tell()
    magic = f.read(MAX_MAGIC_LEN)
    f.seek(start)
    if magic.startswith((ZIP_MAGIC, ZIP_EMPTY_MAGIC)):
        return "npz"
    if magic.startswith(NPY_MAGIC):
        return "npy"
    raise NotAnArrayFileError(f"Not an NPY or NPZ/Zip file: {file}")


@contextmanager
def _corrupt_zip_as_error(file: FileLike) -> Iterator[None]:
    try:
        yield
    except zipfile.BadZipFile as e:
        raise NotAnArrayFileError(f"Corrupt NPZ/Zip file {file}: {e}") from e


def load(
    file: FileLike | Store, names: Iterable[str] | None = None
) -> Value | dict[str, Value]:
    """
    Read an NPY file or the arrays of an NPZ file.

    Parameters
    ----------
    file : str, os.PathLike, file-like or Store
        The file to read. File objects must be seekable and opened in binary mode.
    names : iterable of str, optional
        Only used for NPZ files: the arrays to read. Defaults to all of them.

    Returns
    -------
    numpy.ndarray, numpy.generic or dict
        The value stored in an NPY file, or a dict mapping names to values for an NPZ file.

    Raises
    ------
    NotAnArrayFileError
        If ``file`` is neither an NPY file nor a readable ZIP archive.

    Notes
    -----
    Zero-dimensional arrays are returned as the scalar they contain.
    """
    if isinstance(file, Store):
        return read_archive(file, names)
    with _open_file(file, "r") as f:
        file_format = _sniff_format(f, file)
        _LOG.debug("Reading %s as %s.", file, file_format)
        if file_format == "npz":
            with _corrupt_zip_as_error(file), ZipStore(f, mode="r") as store:
                return read_archive(store, names)
        return read_array(f)


def read_header(
    file: FileLike | Store, names: Iterable[str] | None = None
) -> Header | dict[str, Header]:
    """
    Read only the header of an NPY file, or the headers of the arrays of an NPZ file.

    The header describes the element kind and shape of an array without reading its data.
    Arguments are the same as for ``load``.
    """
    if isinstance(file, Store):
        return read_archive_headers(file, names)
    with _open_file(file, "r") as f:
        file_format = _sniff_format(f, file)
        _LOG.debug("Reading headers of %s as %s.", file, file_format)
        if file_format == "npz":
            with _corrupt_zip_as_error(file), ZipStore(f, mode="r") as store:
                return read_archive_headers(store, names)
        return read_npy_header(f)


def save(file: FileLike, value: npt.ArrayLike) -> None:
    """
    Write ``value`` to the NPY file ``file``.

    Unlike ``numpy.save``, no ``.npy`` extension is appended to ``file``. An existing
    file is overwritten.
    """
    with _open_file(file, "w") as f:
        write_array(f, value)


def savez(file: FileLike | Store, *args: npt.ArrayLike, **kwargs: npt.ArrayLike) -> None:
    """
    Write several values to the NPZ file ``file``.

    Positional values are stored as ``arr_0``, ``arr_1`` and so on, keyword values under
    their keyword. A single mapping passed positionally is stored with its own keys.
    Unlike ``numpy.savez``, no ``.npz`` extension is appended to ``file``. An existing
    file is overwritten.

    Examples
    --------
    >>> savez("temp.npz", np.ones((2, 2)), x=np.ones(3), y=3)  # doctest: +SKIP
    >>> sorted(load("temp.npz"))  # doctest: +SKIP
    ['arr_0', 'x', 'y']
    """
    values: dict[str, npt.ArrayLike]
    if len(args) == 1 and isinstance(args[0], Mapping):
        values = dict(args[0])
    else:
        values = {f"arr_{i}": value for i, value in enumerate(args)}
    for name, value in kwargs.items():
        if name in values:
            raise ValueError(f"Cannot use un-named variables and keyword {name}.")
        values[name] = value

    if isinstance(file, Store):
        write_archive(file, values)
        return
    with _open_file(file, "w") as f, ZipStore(f, mode="w") as store:
        write_archive(store, values)
