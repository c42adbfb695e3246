"""
persistence.py
~~~~~~~~~~~~~~

File-based persistence for network parameters.

Provides save/load entry points for the text document format
(:mod:`netcodec.text_codec`) and the binary snapshot format
(:mod:`netcodec.binary_codec`). Every call opens and closes its own file
handle; errors are reported as :mod:`netcodec.exceptions` types with the
original cause attached.
"""

import os
import stat
import logging
import tempfile
from contextlib import contextmanager
from typing import Generator, IO, Optional, Tuple

from .binary_codec import decode_binary, encode_binary
from .exceptions import (
    CodecIOError,
    FormatError,
    InvalidArgumentError,
    NetworkCodecError,
)
from .text_codec import read_text, write_text
from .topology import ParameterAccessor

# Configure module logger
logger = logging.getLogger(__name__)

TEXT_ENCODING = 'utf-8'


def _require(**arguments) -> None:
    """Raise InvalidArgumentError for the first argument that is None."""
    for arg_name, value in arguments.items():
        if value is None:
            logger.error(f"Invalid argument: {arg_name} cannot be None")
            raise InvalidArgumentError(f"{arg_name} cannot be None")


def _ensure_directory(path: str) -> None:
    """Create the file's parent directory if it doesn't exist."""
    directory = os.path.dirname(os.path.abspath(path))
    if not os.path.exists(directory):
        os.makedirs(directory)


def _target_mode(path: str) -> int:
    """Mode of the file being replaced, or 0666 minus the umask for a new file."""
    try:
        return stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


@contextmanager
def _atomic_write(path: str, mode: str) -> Generator[IO, None, None]:
    """
    Context manager for writing a file in one step.

    Data is written to a temporary file next to ``path`` and moved into
    place only if the block completes, so a failed save never leaves a
    partial document behind.

    Yields:
        The open temporary file
    """
    _ensure_directory(path)
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp_path = tempfile.mkstemp(
        prefix='.' + os.path.basename(path) + '.', suffix='.tmp', dir=directory
    )
    try:
        if 'b' in mode:
            handle = os.fdopen(fd, mode)
        else:
            handle = os.fdopen(fd, mode, encoding=TEXT_ENCODING, newline='\n')
        with handle:
            yield handle
        # mkstemp creates 0600 files; keep the mode a plain open() would give
        os.chmod(tmp_path, _target_mode(path))
        os.replace(tmp_path, path)
    except Exception:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


def save_with_name_as_text(
    network: ParameterAccessor,
    name: Optional[str],
    path: str
) -> None:
    """
    Save a network and its name as a text document.

    Args:
        network: Network to save
        name: Name written on the first line
        path: Destination file path

    Raises:
        InvalidArgumentError: If any argument is None or the name spans
            several lines
        CodecIOError: If the file cannot be written

    Example:
        >>> net = Network([784, 30, 10])
        >>> save_with_name_as_text(net, "digits", "models/digits.txt")
    """
    _require(network=network, name=name, path=path)
    save_as_text(network, path, name=name)


def save_as_text(
    network: ParameterAccessor,
    path: str,
    name: Optional[str] = None
) -> None:
    """
    Save a network as a text document, with or without a name line.

    Raises:
        InvalidArgumentError: If network or path is None
        CodecIOError: If the file cannot be written
    """
    _require(network=network, path=path)

    try:
        with _atomic_write(path, 'w') as out:
            write_text(out, network, name)
    except OSError as e:
        logger.error(f"Cannot write network to '{path}': {e}")
        raise CodecIOError(f"Cannot write into file '{path}': {e}") from e

    logger.info(
        f"Saved network {name!r} with sizes {network.topology.sizes} "
        f"as text to '{path}'"
    )


def save(network: ParameterAccessor, name: Optional[str], path: str) -> None:
    """
    Save a network and its name as a binary snapshot.

    Raises:
        InvalidArgumentError: If any argument is None
        CodecIOError: If the file cannot be written
    """
    _require(network=network, name=name, path=path)
    save_as_binary(network, path, name=name)


def save_as_binary(
    network: ParameterAccessor,
    path: str,
    name: Optional[str] = None
) -> None:
    """
    Save a network as a binary snapshot, with or without a name.

    Raises:
        InvalidArgumentError: If network or path is None
        CodecIOError: If the file cannot be written
    """
    _require(network=network, path=path)

    payload = encode_binary(network, name)
    try:
        with _atomic_write(path, 'wb') as out:
            out.write(payload)
    except OSError as e:
        logger.error(f"Cannot write network to '{path}': {e}")
        raise CodecIOError(f"Cannot write into file '{path}': {e}") from e

    logger.info(
        f"Saved network {name!r} with sizes {network.topology.sizes} "
        f"as binary to '{path}' ({len(payload)} bytes)"
    )


def load_from_text_with_name(
    path: str,
    target: Optional[ParameterAccessor] = None,
    staged: bool = True
) -> Tuple[ParameterAccessor, Optional[str]]:
    """
    Load a text document and return the network with its name.

    Args:
        path: Path of the document
        target: Existing network to fill instead of creating a new one
        staged: See :func:`netcodec.text_codec.read_text`

    Returns:
        tuple: ``(network, name)``; ``name`` is None for a nameless document

    Raises:
        InvalidArgumentError: If path is None
        CodecIOError: If the file cannot be opened or read
        FormatError: If the document is malformed
    """
    _require(path=path)

    try:
        with open(path, 'r', encoding=TEXT_ENCODING) as source:
            network, name = read_text(source, target=target, staged=staged)
    except UnicodeDecodeError as e:
        logger.error(f"Network file '{path}' is not valid text: {e}")
        raise FormatError(
            f"Wrong file format in '{path}': not UTF-8 text ({e})"
        ) from e
    except OSError as e:
        logger.error(f"Cannot read network from '{path}': {e}")
        raise CodecIOError(f"Cannot read from file '{path}': {e}") from e
    except NetworkCodecError as e:
        logger.error(f"Wrong file format in '{path}': {e}")
        raise

    logger.info(
        f"Loaded network {name!r} with sizes {network.topology.sizes} "
        f"from text file '{path}'"
    )
    return network, name


def load_from_text(path: str) -> ParameterAccessor:
    """
    Load a network from a text document.

    Example:
        >>> net = load_from_text("models/digits.txt")
        >>> net.sizes
        [784, 30, 10]
    """
    network, _ = load_from_text_with_name(path)
    return network


def load_with_name(
    path: str,
    target: Optional[ParameterAccessor] = None
) -> Tuple[ParameterAccessor, Optional[str]]:
    """
    Load a binary snapshot and return the network with its name.

    Raises:
        InvalidArgumentError: If path is None
        CodecIOError: If the file cannot be opened or read
        FormatError: If the snapshot is malformed
        UnsupportedPayloadError: If the file is not a network snapshot
    """
    _require(path=path)

    try:
        with open(path, 'rb') as source:
            payload = source.read()
    except OSError as e:
        logger.error(f"Cannot read network from '{path}': {e}")
        raise CodecIOError(f"Cannot read from file '{path}': {e}") from e

    try:
        network, name = decode_binary(payload, target=target)
    except NetworkCodecError as e:
        logger.error(f"Wrong file format in '{path}': {e}")
        raise

    logger.info(
        f"Loaded network {name!r} with sizes {network.topology.sizes} "
        f"from binary file '{path}'"
    )
    return network, name


def load(path: str) -> ParameterAccessor:
    """Load a network from a binary snapshot."""
    network, _ = load_with_name(path)
    return network
