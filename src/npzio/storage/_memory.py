from __future__ import annotations

import io
from contextlib import contextmanager
from typing import TYPE_CHECKING

from npzio.abc.store import AccessModeLiteral, Store

if TYPE_CHECKING:
    from collections.abc import Iterator, MutableMapping
    from typing import BinaryIO


class MemoryStore(Store):
    """
    Store for local memory.

    Parameters
    ----------
    store_dict : dict
        Initial data
    read_only : bool
        Whether the store is read-only
    """

    _store_dict: MutableMapping[str, bytes]

    def __init__(
        self,
        store_dict: MutableMapping[str, bytes] | None = None,
        *,
        read_only: bool = False,
    ) -> None:
        super().__init__(read_only=read_only)
        if store_dict is None:
            store_dict = {}
        self._store_dict = store_dict

    def __str__(self) -> str:
        return f"memory://{id(self._store_dict)}"

    def __repr__(self) -> str:
        return f"MemoryStore('{self}')"

    def list(self) -> Iterator[str]:
        # docstring inherited
        yield from list(self._store_dict)

    @contextmanager
    def open(self, key: str, mode: AccessModeLiteral = "r") -> Iterator[BinaryIO]:
        # docstring inherited
        if mode == "r":
            with io.BytesIO(self._store_dict[key]) as f:
                yield f
        elif mode == "w":
            self._check_writable()
            with io.BytesIO() as f:
                yield f
                self._store_dict[key] = f.getvalue()
        else:
            raise ValueError(f"Expected mode 'r' or 'w', got {mode!r}.")
