"""
conftest.py
~~~~~~~~~~~

Shared fixtures for the netcodec test suite.
"""

import os
import sys

import pytest

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from netcodec.network import Network


MY_NET_TEXT = (
    "MyNet\n"
    "2, 2, 1\n"
    "0.1 0.2\n"
    "0.3 0.4\n"
    "0.5 0.6\n"
    "0.7\n"
    "0.8\n"
    "0.9\n"
)


@pytest.fixture
def my_net():
    """The 2-2-1 network with hand-picked weights used across tests."""
    net = Network([2, 2, 1], name="MyNet", random_init=False)
    # boundary 0: rows are source neurons
    for source, row in enumerate([[0.1, 0.2], [0.3, 0.4]]):
        for dest, value in enumerate(row):
            net.set_weight(0, source, dest, value)
    net.set_bias(0, 0, 0.5)
    net.set_bias(0, 1, 0.6)
    # boundary 1
    net.set_weight(1, 0, 0, 0.7)
    net.set_weight(1, 1, 0, 0.8)
    net.set_bias(1, 0, 0.9)
    return net


@pytest.fixture
def my_net_text():
    """Expected text document for ``my_net``."""
    return MY_NET_TEXT


@pytest.fixture
def deep_network():
    """A randomly initialized network with three hidden layers."""
    return Network([4, 6, 5, 3, 2])
