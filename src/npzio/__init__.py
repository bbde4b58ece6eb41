from npzio.api import load, read_header, save, savez
from npzio.archive import read_archive, read_archive_headers, write_archive
from npzio.core.config import config
from npzio.core.dtype import code_to_kind, kind_to_code
from npzio.core.header import Header
from npzio.core.npy import read_array, write_array
from npzio.storage import MemoryStore, ZipStore

__version__ = "0.1.0"

__all__ = [
    "Header",
    "MemoryStore",
    "ZipStore",
    "__version__",
    "code_to_kind",
    "config",
    "kind_to_code",
    "load",
    "read_archive",
    "read_archive_headers",
    "read_array",
    "read_header",
    "save",
    "savez",
    "write_archive",
    "write_array",
]
