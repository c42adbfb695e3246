"""
binary_codec.py
~~~~~~~~~~~~~~~

Versioned binary snapshot of network parameters.

The layout mirrors the text document, little-endian throughout::

    magic    4 bytes   b"NNPB"
    version  u16       BINARY_VERSION
    flags    u16       bit 0 set when a name follows
    [name]   u32 byte length + UTF-8 bytes
    count    u32       number of layer sizes (k + 2)
    sizes    count x u32
    per boundary, in topology order:
        weights  source_size * dest_size float64, row = source neuron
        biases   dest_size float64

Unlike a pickled object graph this does not depend on Python class
layout, and the explicit name flag avoids the text format's header
guesswork.
"""

import logging
import struct
from typing import Optional, Tuple

import numpy as np

from .exceptions import (
    FormatError,
    InvalidArgumentError,
    UnsupportedPayloadError,
)
from .network import Network
from .parameters import ParameterSet
from .topology import ParameterAccessor, Topology

logger = logging.getLogger(__name__)

BINARY_MAGIC = b'NNPB'
BINARY_VERSION = 1
FLAG_HAS_NAME = 0x1

PREAMBLE_STRUCT = struct.Struct('<4s H H')
U32_STRUCT = struct.Struct('<I')
FLOAT_DTYPE = np.dtype('<f8')


class _Reader:
    """Cursor over a byte payload that reports truncation as FormatError."""

    def __init__(self, data: bytes):
        self.data = data
        self.offset = 0

    def take(self, size: int, what: str) -> bytes:
        end = self.offset + size
        if end > len(self.data):
            raise FormatError(
                f"Binary payload is truncated: need {size} bytes for {what} "
                f"at offset {self.offset}, only {len(self.data) - self.offset} left"
            )
        chunk = self.data[self.offset:end]
        self.offset = end
        return chunk

    def u32(self, what: str) -> int:
        return U32_STRUCT.unpack(self.take(U32_STRUCT.size, what))[0]

    def floats(self, count: int, what: str) -> np.ndarray:
        raw = self.take(count * FLOAT_DTYPE.itemsize, what)
        return np.frombuffer(raw, dtype=FLOAT_DTYPE, count=count)

    @property
    def remaining(self) -> int:
        return len(self.data) - self.offset


def encode_binary(network: ParameterAccessor, name: Optional[str] = None) -> bytes:
    """
    Encode ``network`` as a binary snapshot.

    Args:
        network: Network to read parameters from
        name: Optional name stored with the parameters

    Returns:
        bytes: The encoded snapshot

    Raises:
        InvalidArgumentError: If the network is None or the name is not a string
    """
    if network is None:
        raise InvalidArgumentError("Network cannot be None")
    if name is not None and not isinstance(name, str):
        raise InvalidArgumentError(
            f"Network name must be a string, got {type(name).__name__}"
        )

    params = ParameterSet.copy_from(network)
    topology = params.topology

    flags = FLAG_HAS_NAME if name is not None else 0
    parts = [PREAMBLE_STRUCT.pack(BINARY_MAGIC, BINARY_VERSION, flags)]
    if name is not None:
        encoded_name = name.encode('utf-8')
        parts.append(U32_STRUCT.pack(len(encoded_name)))
        parts.append(encoded_name)

    sizes = topology.sizes
    parts.append(U32_STRUCT.pack(len(sizes)))
    parts.append(struct.pack(f'<{len(sizes)}I', *sizes))

    for weights, biases in zip(params.weights, params.biases):
        parts.append(weights.astype(FLOAT_DTYPE).tobytes(order='C'))
        parts.append(biases.astype(FLOAT_DTYPE).tobytes())

    return b''.join(parts)


def decode_binary(
    data: bytes,
    target: Optional[ParameterAccessor] = None
) -> Tuple[ParameterAccessor, Optional[str]]:
    """
    Decode a binary snapshot.

    The whole payload is validated before anything is written to
    ``target``.

    Args:
        data: Bytes produced by :func:`encode_binary`
        target: Network to fill; a fresh Network is created when omitted

    Returns:
        tuple: ``(network, name)``

    Raises:
        UnsupportedPayloadError: If the magic or version is not recognized
        FormatError: If the payload is truncated, has trailing bytes or
            describes an invalid topology
    """
    if data is None:
        raise InvalidArgumentError("Binary payload cannot be None")

    reader = _Reader(bytes(data))
    if len(reader.data) < PREAMBLE_STRUCT.size:
        raise UnsupportedPayloadError("Payload is too short to be a network snapshot")

    magic, version, flags = PREAMBLE_STRUCT.unpack(
        reader.take(PREAMBLE_STRUCT.size, 'preamble')
    )
    if magic != BINARY_MAGIC:
        raise UnsupportedPayloadError(f"Not a network snapshot (magic {magic!r})")
    if version != BINARY_VERSION:
        raise UnsupportedPayloadError(
            f"Unsupported snapshot version {version} (expected {BINARY_VERSION})"
        )

    name = None
    if flags & FLAG_HAS_NAME:
        name_length = reader.u32('name length')
        raw_name = reader.take(name_length, 'name')
        try:
            name = raw_name.decode('utf-8')
        except UnicodeDecodeError as e:
            raise FormatError(f"Network name is not valid UTF-8: {e}") from e

    count = reader.u32('layer count')
    sizes = [reader.u32(f'size of layer {i}') for i in range(count)]
    topology = Topology.from_sizes(sizes)

    # sizes are untrusted; check them against the payload before allocating
    expected = sum(
        boundary.source_size * boundary.dest_size + boundary.dest_size
        for boundary in topology.boundaries()
    )
    available = reader.remaining // FLOAT_DTYPE.itemsize
    if expected > available:
        raise FormatError(
            f"Binary payload is truncated: sizes {topology.sizes} need "
            f"{expected} values, only {available} present"
        )

    params = ParameterSet(topology)
    for boundary in topology.boundaries():
        layer = boundary.index
        weights = reader.floats(
            boundary.source_size * boundary.dest_size, f'weights of layer {layer}'
        )
        params.weights[layer][:] = weights.reshape(
            boundary.source_size, boundary.dest_size
        )
        params.biases[layer][:] = reader.floats(
            boundary.dest_size, f'biases of layer {layer}'
        )

    if reader.remaining:
        raise FormatError(
            f"Binary payload has {reader.remaining} unexpected trailing bytes"
        )

    if target is None:
        target = Network.from_topology(topology, name=name)
    params.commit_to(target)

    logger.debug(f"Decoded binary snapshot {name!r} with sizes {topology.sizes}")
    return target, name
