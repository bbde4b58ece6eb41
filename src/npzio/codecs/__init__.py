from npzio.codecs.bytes import BytesCodec
from npzio.codecs.transpose import TransposeCodec

__all__ = [
    "BytesCodec",
    "TransposeCodec",
]
