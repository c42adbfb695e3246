"""
parameters.py
~~~~~~~~~~~~~

Staging buffer for the weights and biases of every layer boundary.

A ParameterSet is shaped from a Topology and implements the same accessor
methods as a network, so decoders can fill it first and copy it into the
real network only once the whole document has been read.
"""

import logging
from typing import List

import numpy as np

from .exceptions import FormatError
from .topology import ParameterAccessor, Topology

logger = logging.getLogger(__name__)


class ParameterSet:
    """
    Zero-initialized weights and biases for a topology.

    ``weights[l]`` has shape ``(source_size, dest_size)`` (row = source
    neuron), matching the row layout of the text format. ``biases[l]`` has
    shape ``(dest_size,)``.
    """

    def __init__(self, topology: Topology):
        self._topology = topology
        self.weights: List[np.ndarray] = [
            np.zeros((b.source_size, b.dest_size), dtype=np.float64)
            for b in topology.boundaries()
        ]
        self.biases: List[np.ndarray] = [
            np.zeros(b.dest_size, dtype=np.float64)
            for b in topology.boundaries()
        ]

    @property
    def topology(self) -> Topology:
        return self._topology

    def get_weight(self, layer: int, source: int, dest: int) -> float:
        return float(self.weights[layer][source, dest])

    def set_weight(self, layer: int, source: int, dest: int, value: float) -> None:
        self.weights[layer][source, dest] = value

    def get_bias(self, layer: int, neuron: int) -> float:
        return float(self.biases[layer][neuron])

    def set_bias(self, layer: int, neuron: int, value: float) -> None:
        self.biases[layer][neuron] = value

    @classmethod
    def copy_from(cls, accessor: ParameterAccessor) -> 'ParameterSet':
        """Snapshot every weight and bias of ``accessor``."""
        params = cls(accessor.topology)
        for boundary in params.topology.boundaries():
            layer = boundary.index
            for source in range(boundary.source_size):
                for dest in range(boundary.dest_size):
                    params.weights[layer][source, dest] = accessor.get_weight(
                        layer, source, dest
                    )
            for dest in range(boundary.dest_size):
                params.biases[layer][dest] = accessor.get_bias(layer, dest)
        return params

    def commit_to(self, accessor: ParameterAccessor) -> None:
        """
        Write every staged value into ``accessor``.

        Raises:
            FormatError: If the accessor's topology differs from this set's
        """
        if accessor.topology != self._topology:
            raise FormatError(
                f"Cannot commit parameters for {self._topology.sizes} "
                f"into a network with sizes {accessor.topology.sizes}"
            )

        for boundary in self._topology.boundaries():
            layer = boundary.index
            weights = self.weights[layer]
            for source in range(boundary.source_size):
                for dest in range(boundary.dest_size):
                    accessor.set_weight(layer, source, dest, float(weights[source, dest]))
            for dest in range(boundary.dest_size):
                accessor.set_bias(layer, dest, float(self.biases[layer][dest]))

        logger.debug(f"Committed parameters for topology {self._topology.sizes}")
