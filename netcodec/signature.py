"""
signature.py
~~~~~~~~~~~~

The signature line of a text document: ``<inputs>, <h1>, ..., <hk>, <outputs>``.

A document may start with an optional name line. There is no marker for
it, so the header is resolved by probing: if the second line parses as a
signature, the first line is the name; otherwise the first line must be
the signature itself. A name that happens to look like a signature (for
example ``"1, 2, 3"``) is still read as a name whenever the second line is
also a valid signature, and a nameless document whose first block row
parses as a signature would be misread. Both cases are inherent to the
format.
"""

import logging
from typing import Optional, Tuple

from .exceptions import FormatError
from .topology import Topology

logger = logging.getLogger(__name__)

SEPARATOR = ', '
MIN_SIGNATURE_TOKENS = 3


def format_signature(topology: Topology) -> str:
    """
    Render the signature line for ``topology``.

    Example:
        >>> format_signature(Topology(2, (3, 4), 1))
        '2, 3, 4, 1'
    """
    return SEPARATOR.join(str(size) for size in topology.sizes)


def parse_signature(line: Optional[str]) -> Topology:
    """
    Parse a signature line into a Topology.

    Args:
        line: The line to parse, with or without its line terminator

    Returns:
        Topology: The parsed layer sizes

    Raises:
        FormatError: If the line is missing, has fewer than three sizes,
            or any size is not a non-negative integer
    """
    if line is None:
        raise FormatError("Signature line is missing")

    tokens = line.rstrip('\r\n').split(SEPARATOR)
    if len(tokens) < MIN_SIGNATURE_TOKENS:
        if len(tokens) == MIN_SIGNATURE_TOKENS - 1:
            raise FormatError(
                f"Network must have at least one hidden layer: {line.strip()!r}"
            )
        raise FormatError(f"Signature has too few sizes: {line.strip()!r}")

    sizes = []
    for position, token in enumerate(tokens):
        # str.isdigit() also accepts superscripts, so check ASCII explicitly
        if not token or not (token.isascii() and token.isdigit()):
            raise FormatError(
                f"Signature size #{position + 1} is not a non-negative "
                f"integer: {token!r}"
            )
        sizes.append(int(token))

    return Topology.from_sizes(sizes)


def read_header(
    first: Optional[str],
    second: Optional[str]
) -> Tuple[Optional[str], Topology, int]:
    """
    Resolve the optional name line and the signature line.

    Args:
        first: First line of the document (None if the input is empty)
        second: Second line of the document (None if there is none)

    Returns:
        tuple: ``(name, topology, header_lines)`` where ``name`` is None for
        a nameless document and ``header_lines`` is how many lines the
        header occupied (1 or 2)

    Raises:
        FormatError: If neither line is a valid signature
    """
    if first is None:
        raise FormatError("Cannot read signature: document is empty")

    try:
        topology = parse_signature(second)
    except FormatError as second_error:
        try:
            topology = parse_signature(first)
        except FormatError as first_error:
            raise FormatError(
                f"Cannot read signature: line 1 ({first_error}); "
                f"line 2 ({second_error})"
            ) from first_error
        logger.debug(f"Read nameless header with sizes {topology.sizes}")
        return None, topology, 1

    name = first.rstrip('\r\n')
    logger.debug(f"Read header for '{name}' with sizes {topology.sizes}")
    return name, topology, 2
