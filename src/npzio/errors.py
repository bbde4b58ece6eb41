__all__ = [
    "BaseNpzError",
    "MalformedHeaderError",
    "NotAnArrayFileError",
    "NpzUserWarning",
    "ShortReadError",
    "ShortWriteError",
    "UnsupportedTypeError",
    "UnsupportedVersionError",
]


class BaseNpzError(ValueError):
    """
    Base class for npzio errors.
    """


class NotAnArrayFileError(BaseNpzError):
    """Raised when the leading bytes of a stream are not an NPY or NPZ signature."""

    _msg = "Expected the magic string {!r}, got {!r}."

    def __init__(self, *args: object) -> None:
        if len(args) == 1:
            super().__init__(args[0])
        else:
            super().__init__(self._msg.format(*args))


class UnsupportedVersionError(BaseNpzError):
    """Raised when the format version of an NPY stream is not 1.x or 2.x."""

    _msg = "Unsupported NPY format version {}.{}. Expected major version 1 or 2."

    def __init__(self, *args: object) -> None:
        if len(args) == 1:
            super().__init__(args[0])
        else:
            super().__init__(self._msg.format(*args))


class MalformedHeaderError(BaseNpzError):
    """
    Raised when the header text of an NPY stream violates the header grammar.

    This covers bad quoting, bad literals, bad punctuation, unknown or missing
    dictionary keys, trailing text and truncated header fields.
    """

    _msg = "Parsing header failed at offset {}: expected {}, found {!r}."

    def __init__(self, *args: object) -> None:
        if len(args) == 1:
            super().__init__(args[0])
        else:
            super().__init__(self._msg.format(*args))


class UnsupportedTypeError(BaseNpzError, TypeError):
    """Raised when a type code or a native element type has no registry entry."""

    _msg = "Unsupported element type {!r}. Expected one of {}."

    def __init__(self, *args: object) -> None:
        if len(args) == 1:
            super().__init__(args[0])
        else:
            super().__init__(self._msg.format(*args))


class ShortReadError(BaseNpzError):
    """Raised when a stream yields fewer bytes than the header requires."""

    _msg = "Short read: expected {} bytes, got {}."

    def __init__(self, *args: object) -> None:
        if len(args) == 1:
            super().__init__(args[0])
        else:
            super().__init__(self._msg.format(*args))


class ShortWriteError(BaseNpzError):
    """Raised when a stream accepts fewer bytes than were written to it."""

    _msg = "Short write: expected to write {} bytes, wrote {}."

    def __init__(self, *args: object) -> None:
        if len(args) == 1:
            super().__init__(args[0])
        else:
            super().__init__(self._msg.format(*args))


class NpzUserWarning(UserWarning):
    """
    A warning intended for end users of npzio.
    """
