"""
netcodec package
~~~~~~~~~~~~~~~~

Persistence for the parameters of fully-connected feed-forward networks.
Contains the text document codec, the binary snapshot codec, a numpy-backed
parameter holder, file-based save/load helpers, and an API server.
"""

from .exceptions import (
    CodecIOError,
    FormatError,
    InvalidArgumentError,
    NetworkCodecError,
    UnsupportedPayloadError,
)
from .topology import LayerBoundary, ParameterAccessor, Topology
from .network import Network
from .parameters import ParameterSet
from .text_codec import decode_text, encode_text, read_text, write_text
from .binary_codec import decode_binary, encode_binary
from .persistence import (
    load,
    load_from_text,
    load_from_text_with_name,
    load_with_name,
    save,
    save_as_binary,
    save_as_text,
    save_with_name_as_text,
)

__version__ = "1.0.0"

__all__ = [
    'CodecIOError',
    'FormatError',
    'InvalidArgumentError',
    'NetworkCodecError',
    'UnsupportedPayloadError',
    'LayerBoundary',
    'ParameterAccessor',
    'Topology',
    'Network',
    'ParameterSet',
    'decode_text',
    'encode_text',
    'read_text',
    'write_text',
    'decode_binary',
    'encode_binary',
    'load',
    'load_from_text',
    'load_from_text_with_name',
    'load_with_name',
    'save',
    'save_as_binary',
    'save_as_text',
    'save_with_name_as_text',
]
