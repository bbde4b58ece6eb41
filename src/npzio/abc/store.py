from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from collections.abc import Iterator
    from contextlib import AbstractContextManager
    from types import TracebackType
    from typing import BinaryIO, Self

__all__ = ["AccessModeLiteral", "Store"]

AccessModeLiteral = Literal["r", "w"]


class Store(ABC):
    """
    Abstract base class for containers of named byte streams.

    An NPZ archive is a store whose entries each hold one complete NPY stream.
    """

    _read_only: bool
    _is_open: bool

    def __init__(self, *, read_only: bool = False) -> None:
        self._is_open = False
        self._read_only = read_only

    @property
    def read_only(self) -> bool:
        """Is the store read-only?"""
        return self._read_only

    def _check_writable(self) -> None:
        """Raise an exception if the store is not writable."""
        if self.read_only:
            raise ValueError("store was opened in read-only mode and does not support writing")

    def __enter__(self) -> Self:
        """Enter a context manager that will close the store upon exiting."""
        if not self._is_open:
            self._open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        """Close the store."""
        self.close()

    def _open(self) -> None:
        """
        Open the store.

        Raises
        ------
        ValueError
            If the store is already open.
        """
        if self._is_open:
            raise ValueError("store is already open")
        self._is_open = True

    def close(self) -> None:
        """Close the store."""
        self._is_open = False

    @abstractmethod
    def list(self) -> Iterator[str]:
        """Retrieve the names of all entries in the store.

        Returns
        -------
        Iterator[str]
        """
        ...

    @abstractmethod
    def open(self, key: str, mode: AccessModeLiteral = "r") -> AbstractContextManager[BinaryIO]:
        """Open one entry as a binary stream.

        Parameters
        ----------
        key : str
            The name of the entry.
        mode : {"r", "w"}
            ``"r"`` to read an existing entry, ``"w"`` to create a new entry.

        Returns
        -------
        AbstractContextManager[BinaryIO]
            A context manager that closes the stream on exit.

        Raises
        ------
        KeyError
            If ``mode`` is ``"r"`` and the entry does not exist.
        """
        ...

    def __contains__(self, key: str) -> bool:
        return key in set(self.list())
