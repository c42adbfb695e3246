"""
network.py
~~~~~~~~~~

Parameter holder for a fully-connected feed-forward network.

Weights and biases are stored as numpy arrays in the usual
``weights[l].shape == (sizes[l+1], sizes[l])`` orientation, so a weight
connecting source neuron ``j`` to destination neuron ``k`` across
boundary ``l`` lives at ``weights[l][k, j]``. The codec never touches the
arrays directly; it goes through the accessor methods.
"""

from typing import List, Optional, Sequence

import numpy as np

from .topology import Topology


class Network:
    """
    Weights and biases of a feed-forward network.

    Args:
        sizes: Layer sizes ``[inputs, h1, ..., hk, outputs]``
        name: Optional human-readable name
        random_init: Fill parameters from a standard normal distribution
            instead of zeros
    """

    def __init__(
        self,
        sizes: Sequence[int],
        name: Optional[str] = None,
        random_init: bool = True
    ):
        self._topology = Topology.from_sizes(sizes)
        self.sizes: List[int] = self._topology.sizes
        self.num_layers = len(self.sizes)
        self.name = name

        if random_init:
            self.biases: List[np.ndarray] = [
                np.random.randn(y, 1) for y in self.sizes[1:]
            ]
            self.weights: List[np.ndarray] = [
                np.random.randn(y, x)
                for x, y in zip(self.sizes[:-1], self.sizes[1:])
            ]
        else:
            self.biases = [np.zeros((y, 1)) for y in self.sizes[1:]]
            self.weights = [
                np.zeros((y, x))
                for x, y in zip(self.sizes[:-1], self.sizes[1:])
            ]

    @classmethod
    def from_topology(
        cls,
        topology: Topology,
        name: Optional[str] = None
    ) -> 'Network':
        """Create a zero-initialized network shaped like ``topology``."""
        return cls(topology.sizes, name=name, random_init=False)

    @property
    def topology(self) -> Topology:
        return self._topology

    def get_weight(self, layer: int, source: int, dest: int) -> float:
        return float(self.weights[layer][dest, source])

    def set_weight(self, layer: int, source: int, dest: int, value: float) -> None:
        self.weights[layer][dest, source] = value

    def get_bias(self, layer: int, neuron: int) -> float:
        return float(self.biases[layer][neuron, 0])

    def set_bias(self, layer: int, neuron: int, value: float) -> None:
        self.biases[layer][neuron, 0] = value

    def __repr__(self) -> str:
        return f"Network(sizes={self.sizes!r}, name={self.name!r})"
