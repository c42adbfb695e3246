"""
text_codec.py
~~~~~~~~~~~~~

Line-oriented text documents for network parameters.

Layout::

    [<name>]                                   optional
    <inputs>, <h1>, <h2>, ..., <hk>, <outputs> k >= 1
    <block for boundary 0>                     inputs -> h1
    ...
    <block for boundary k>                     hk -> outputs

Each block is described in :mod:`netcodec.layer_block`. Every line ends
with a newline and there are no blank lines between blocks.
"""

import io
import itertools
import logging
from typing import Iterable, Iterator, Optional, TextIO, Tuple

from .exceptions import FormatError, InvalidArgumentError
from .layer_block import decode_block, encode_block
from .network import Network
from .parameters import ParameterSet
from .signature import format_signature, read_header
from .topology import ParameterAccessor

logger = logging.getLogger(__name__)


def _check_name(name: Optional[str]) -> None:
    if name is None:
        return
    if not isinstance(name, str):
        raise InvalidArgumentError(f"Network name must be a string, got {type(name).__name__}")
    if '\n' in name or '\r' in name:
        raise InvalidArgumentError("Network name cannot contain line breaks")


def iter_text_lines(
    network: ParameterAccessor,
    name: Optional[str] = None
) -> Iterator[str]:
    """
    Yield the lines of a document, without terminators.

    Raises:
        InvalidArgumentError: If the network is missing or the name is not
            a single line of text
    """
    if network is None:
        raise InvalidArgumentError("Network cannot be None")
    _check_name(name)

    topology = network.topology
    if name is not None:
        yield name
    yield format_signature(topology)
    for boundary in topology.boundaries():
        yield from encode_block(network, boundary)


def write_text(
    stream: TextIO,
    network: ParameterAccessor,
    name: Optional[str] = None
) -> None:
    """
    Write ``network`` as a text document to an open text stream.

    Args:
        stream: Writable text stream
        network: Network to read parameters from
        name: Optional name written as the first line
    """
    for line in iter_text_lines(network, name):
        stream.write(line)
        stream.write('\n')


def encode_text(network: ParameterAccessor, name: Optional[str] = None) -> str:
    """
    Encode ``network`` as a text document.

    Example:
        >>> net = Network([2, 2, 1])
        >>> text = encode_text(net, "MyNet")
        >>> text.splitlines()[:2]
        ['MyNet', '2, 2, 1']
    """
    buffer = io.StringIO()
    write_text(buffer, network, name)
    return buffer.getvalue()


def _check_trailing(lines: Iterator[str], line_offset: int) -> None:
    for number, line in enumerate(lines, start=line_offset):
        if line.strip():
            raise FormatError(
                f"Unexpected content after the last layer on line {number}: "
                f"{line.strip()[:40]!r}"
            )


def read_text(
    lines: Iterable[str],
    target: Optional[ParameterAccessor] = None,
    staged: bool = True
) -> Tuple[ParameterAccessor, Optional[str]]:
    """
    Read a text document.

    Args:
        lines: Open text stream or any iterable of lines
        target: Network to fill. A fresh zero-initialized Network is
            created when omitted.
        staged: Decode into a staging buffer and copy into ``target`` only
            after the whole document was read. With ``staged=False`` each
            row is written to ``target`` as soon as it is parsed, and a
            failure leaves ``target`` partially updated.

    Returns:
        tuple: ``(network, name)``; ``name`` is None for a nameless document

    Raises:
        FormatError: If the document is malformed or does not match the
            topology of ``target``
    """
    line_iter = iter(lines)

    # Header
    first = next(line_iter, None)
    second = next(line_iter, None)
    name, topology, header_lines = read_header(first, second)
    if header_lines == 1 and second is not None:
        # The second line already belongs to the first block
        line_iter = itertools.chain([second], line_iter)

    # Target sized from the header
    if target is None:
        target = Network.from_topology(topology, name=name)
    elif target.topology != topology:
        raise FormatError(
            f"Document sizes {topology.sizes} do not match "
            f"target network sizes {target.topology.sizes}"
        )

    sink = ParameterSet(topology) if staged else target

    # Layer blocks
    for boundary in topology.boundaries():
        decode_block(line_iter, boundary, sink)

    consumed = header_lines + sum(b.source_size + 1 for b in topology.boundaries())
    _check_trailing(line_iter, consumed + 1)

    if staged:
        sink.commit_to(target)

    logger.debug(
        f"Read document {name!r} with sizes {topology.sizes} "
        f"({topology.num_boundaries} layers)"
    )
    return target, name


def decode_text(
    text: str,
    target: Optional[ParameterAccessor] = None,
    staged: bool = True
) -> Tuple[ParameterAccessor, Optional[str]]:
    """
    Decode a text document held in a string.

    See :func:`read_text` for the arguments.
    """
    if text is None:
        raise InvalidArgumentError("Text cannot be None")
    return read_text(io.StringIO(text), target=target, staged=staged)
