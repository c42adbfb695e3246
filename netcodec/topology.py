"""
topology.py
~~~~~~~~~~~

Layer sizes of a feed-forward network and the boundaries between them.

A network with ``k`` hidden layers has ``k + 1`` boundaries. Boundary 0
connects the inputs to the first hidden layer, boundary ``k`` connects the
last hidden layer to the outputs.
"""

import operator
from dataclasses import dataclass
from typing import Iterator, List, NamedTuple, Protocol, Sequence, Tuple

from .exceptions import FormatError


def _as_size(size) -> int:
    """Convert an integral size (int or numpy integer) to int, rejecting 4.5 and True."""
    if isinstance(size, bool):
        raise FormatError(f"Layer size must be an integer, got {size!r}")
    try:
        return operator.index(size)
    except TypeError as e:
        raise FormatError(f"Layer size must be an integer, got {size!r}") from e


class LayerBoundary(NamedTuple):
    """Weights and biases connecting one layer to the next."""

    index: int
    source_size: int
    dest_size: int


@dataclass(frozen=True)
class Topology:
    """
    Immutable description of a network's layer sizes.

    Attributes:
        input_size: Number of input neurons
        hidden_sizes: Sizes of the hidden layers, in order (at least one)
        output_size: Number of output neurons
    """

    input_size: int
    hidden_sizes: Tuple[int, ...]
    output_size: int

    def __post_init__(self) -> None:
        # Accept any sequence but always store a tuple
        object.__setattr__(self, 'hidden_sizes', tuple(self.hidden_sizes))

        if len(self.hidden_sizes) < 1:
            raise FormatError("Network must have at least one hidden layer")

        for size in self.sizes:
            if not isinstance(size, int) or isinstance(size, bool):
                raise FormatError(f"Layer size must be an integer, got {size!r}")
            if size < 1:
                raise FormatError(f"Layer size must be at least 1, got {size}")

    @classmethod
    def from_sizes(cls, sizes: Sequence[int]) -> 'Topology':
        """
        Build a topology from a flat ``[inputs, h1, ..., hk, outputs]`` list.

        Raises:
            FormatError: If fewer than three sizes are given or a size is
                not an integer
        """
        sizes = [_as_size(size) for size in sizes]
        if len(sizes) < 3:
            raise FormatError(
                f"Network must have at least one hidden layer, got sizes {sizes}"
            )
        return cls(sizes[0], tuple(sizes[1:-1]), sizes[-1])

    @property
    def sizes(self) -> List[int]:
        """All layer sizes as a flat list, inputs first."""
        return [self.input_size, *self.hidden_sizes, self.output_size]

    @property
    def num_boundaries(self) -> int:
        return len(self.hidden_sizes) + 1

    def boundaries(self) -> Iterator[LayerBoundary]:
        """Yield every layer boundary in topology order."""
        sizes = self.sizes
        for index in range(len(sizes) - 1):
            yield LayerBoundary(index, sizes[index], sizes[index + 1])


class ParameterAccessor(Protocol):
    """
    Read/write access to individual weights and biases of a network.

    ``layer`` is a boundary index, ``source`` a neuron of the layer before
    the boundary and ``dest`` a neuron of the layer after it.
    """

    @property
    def topology(self) -> Topology: ...

    def get_weight(self, layer: int, source: int, dest: int) -> float: ...

    def set_weight(self, layer: int, source: int, dest: int, value: float) -> None: ...

    def get_bias(self, layer: int, neuron: int) -> float: ...

    def set_bias(self, layer: int, neuron: int, value: float) -> None: ...
