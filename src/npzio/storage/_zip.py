from __future__ import annotations

import time
import zipfile
from contextlib import contextmanager
from pathlib import Path
from typing import IO, TYPE_CHECKING

from npzio.abc.store import AccessModeLiteral, Store
from npzio.core.config import config

if TYPE_CHECKING:
    from collections.abc import Iterator
    from typing import BinaryIO


class ZipStore(Store):
    """
    Store using a ZIP file.

    Entries are always stored without compression.

    Parameters
    ----------
    zip_path : str, Path or file-like
        Location of the ZIP file, or an open binary file object.
    mode : {"r", "w"}, optional
        'r' to read an existing file, 'w' to truncate and write a new file.
    allowZip64 : bool, optional
        If True will create ZIP files that use the ZIP64 extensions when the
        zipfile is larger than 2 GiB. Defaults to the ``archive.allow_zip64``
        configuration value.

    Attributes
    ----------
    zip_path
    allowZip64
    """

    zip_path: Path | IO[bytes]
    allowZip64: bool

    _zf: zipfile.ZipFile

    def __init__(
        self,
        zip_path: Path | str | IO[bytes],
        *,
        mode: AccessModeLiteral = "r",
        read_only: bool | None = None,
        allowZip64: bool | None = None,
    ) -> None:
        if read_only is None:
            read_only = mode == "r"

        super().__init__(read_only=read_only)

        if isinstance(zip_path, str):
            zip_path = Path(zip_path)
        self.zip_path = zip_path

        self._zmode = mode
        if allowZip64 is None:
            allowZip64 = config.get("archive.allow_zip64")
        self.allowZip64 = allowZip64

    def _open(self) -> None:
        if self._is_open:
            raise ValueError("store is already open")

        self._zf = zipfile.ZipFile(
            self.zip_path,
            mode=self._zmode,
            compression=zipfile.ZIP_STORED,
            allowZip64=self.allowZip64,
        )

        super()._open()

    def close(self) -> None:
        # docstring inherited
        if self._is_open:
            self._zf.close()
        super().close()

    def __str__(self) -> str:
        return f"zip://{self.zip_path}"

    def __repr__(self) -> str:
        return f"ZipStore('{self}')"

    def _ensure_open(self) -> None:
        if not self._is_open:
            self._open()

    def list(self) -> Iterator[str]:
        # docstring inherited
        self._ensure_open()
        for info in self._zf.infolist():
            if not info.is_dir():
                yield info.filename

    def _entry_info(self, key: str) -> zipfile.ZipInfo:
        keyinfo = zipfile.ZipInfo(filename=key, date_time=time.localtime(time.time())[:6])
        keyinfo.compress_type = zipfile.ZIP_STORED
        keyinfo.external_attr = 0o644 << 16  # ?rw-r--r--
        return keyinfo

    @contextmanager
    def open(self, key: str, mode: AccessModeLiteral = "r") -> Iterator[BinaryIO]:
        # docstring inherited
        self._ensure_open()
        if mode == "r":
            with self._zf.open(key, mode="r") as f:  # will raise KeyError
                yield f  # type: ignore[misc]
        elif mode == "w":
            self._check_writable()
            # the entry size is unknown up front, so let large entries grow past 2 GiB
            with self._zf.open(
                self._entry_info(key), mode="w", force_zip64=self.allowZip64
            ) as f:
                yield f  # type: ignore[misc]
        else:
            raise ValueError(f"Expected mode 'r' or 'w', got {mode!r}.")
