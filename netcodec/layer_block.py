"""
layer_block.py
~~~~~~~~~~~~~~

Text block for a single layer boundary.

A boundary with ``source_size`` source neurons and ``dest_size``
destination neurons is written as ``source_size + 1`` lines: one weight
row per source neuron, then one bias row. Every row holds ``dest_size``
values separated by a single space.

Values are written with ``repr(float(value))``, the shortest text that
parses back to the same double, so text round-trips are exact.
"""

import logging
from typing import Iterator, List

from .exceptions import FormatError
from .topology import LayerBoundary, ParameterAccessor

logger = logging.getLogger(__name__)

VALUE_SEPARATOR = ' '


def format_value(value: float) -> str:
    """Render one weight or bias as text."""
    return repr(float(value))


def parse_value(token: str) -> float:
    """
    Parse one weight or bias token.

    Raises:
        ValueError: If the token is not a real number
    """
    # float() tolerates surrounding whitespace; the format does not
    if token != token.strip():
        raise ValueError(f"could not convert string to float: {token!r}")
    return float(token)


def encode_block(accessor: ParameterAccessor, boundary: LayerBoundary) -> List[str]:
    """
    Encode the weights and biases of one boundary.

    Args:
        accessor: Network to read parameters from
        boundary: The boundary to encode

    Returns:
        list: ``source_size + 1`` lines without terminators
    """
    layer = boundary.index
    lines = []
    for source in range(boundary.source_size):
        lines.append(VALUE_SEPARATOR.join(
            format_value(accessor.get_weight(layer, source, dest))
            for dest in range(boundary.dest_size)
        ))
    lines.append(VALUE_SEPARATOR.join(
        format_value(accessor.get_bias(layer, dest))
        for dest in range(boundary.dest_size)
    ))
    return lines


def _parse_row(
    lines: Iterator[str],
    boundary: LayerBoundary,
    row_label: str
) -> List[float]:
    line = next(lines, None)
    if line is None:
        raise FormatError(
            f"Document is truncated: missing {row_label} of layer {boundary.index}"
        )

    tokens = line.rstrip('\r\n').split(VALUE_SEPARATOR)
    if len(tokens) != boundary.dest_size:
        raise FormatError(
            f"Wrong number of values in {row_label} of layer {boundary.index}: "
            f"expected {boundary.dest_size}, got {len(tokens)}"
        )

    values = []
    for column, token in enumerate(tokens):
        try:
            values.append(parse_value(token))
        except ValueError as e:
            raise FormatError(
                f"Invalid number {token!r} in {row_label} of layer "
                f"{boundary.index}, column {column}"
            ) from e
    return values


def decode_block(
    lines: Iterator[str],
    boundary: LayerBoundary,
    accessor: ParameterAccessor
) -> None:
    """
    Read one boundary's block and write it into ``accessor``.

    Consumes exactly ``source_size + 1`` lines from ``lines``. Each row is
    written as soon as it has been parsed.

    Args:
        lines: Iterator positioned at the first weight row of the block
        boundary: The boundary being decoded
        accessor: Network or staging buffer to write into

    Raises:
        FormatError: On a missing line, a wrong value count or a token
            that is not a real number
    """
    layer = boundary.index
    for source in range(boundary.source_size):
        row = _parse_row(lines, boundary, f"weight row {source}")
        for dest, value in enumerate(row):
            accessor.set_weight(layer, source, dest, value)

    biases = _parse_row(lines, boundary, "bias row")
    for dest, value in enumerate(biases):
        accessor.set_bias(layer, dest, value)

    logger.debug(
        f"Decoded layer {layer} ({boundary.source_size} -> {boundary.dest_size})"
    )
