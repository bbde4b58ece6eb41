from npzio.storage._memory import MemoryStore
from npzio.storage._zip import ZipStore

__all__ = [
    "MemoryStore",
    "ZipStore",
]
