"""
exceptions.py
~~~~~~~~~~~~~

Exception hierarchy for network parameter persistence.

NetworkCodecError (base, Exception)
├── InvalidArgumentError(NetworkCodecError, ValueError)  ← missing argument
├── CodecIOError(NetworkCodecError, OSError)             ← open/read/write
├── FormatError(NetworkCodecError, ValueError)           ← malformed document
└── UnsupportedPayloadError(NetworkCodecError)           ← unknown binary payload

InvalidArgumentError and FormatError multi-inherit from ValueError, and
CodecIOError from OSError, so existing ``except ValueError`` and
``except OSError`` blocks keep working.
"""


class NetworkCodecError(Exception):
    """Base exception for all network persistence errors."""


class InvalidArgumentError(NetworkCodecError, ValueError):
    """A required argument (network, name, path) was not supplied."""


class CodecIOError(NetworkCodecError, OSError):
    """The underlying file or stream could not be opened, read or written."""


class FormatError(NetworkCodecError, ValueError):
    """The document violates the text or binary grammar."""


class UnsupportedPayloadError(NetworkCodecError):
    """A binary payload is not a recognized network snapshot."""
