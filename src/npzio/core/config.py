"""
Runtime configuration for npzio.

The configuration is a ``donfig.Config`` instance. Values can be read with
``config.get`` and overridden temporarily with ``config.set``::

    from npzio.core.config import config

    with config.set({"read.max_header_size": 10_000}):
        ...

Environment variables with the prefix ``NPZIO_`` are picked up as well,
e.g. ``NPZIO_ARCHIVE__WARN_EMPTY=False``.
"""

from __future__ import annotations

from donfig import Config

config = Config(
    "npzio",
    defaults=[
        {
            "read": {"max_header_size": None},
            "archive": {"warn_empty": True, "allow_zip64": True},
        }
    ],
)
