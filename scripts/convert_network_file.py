#!/usr/bin/env python3
"""
Convert a network file between the text and binary formats.

The input format is detected from the file contents: files that start
with the binary snapshot magic are read as binary, everything else as a
text document. The output is written in the other format.

Usage:
    python scripts/convert_network_file.py <input> [<output>]

When <output> is omitted it is derived from <input>: ``.txt`` files become
``.nnpb`` and vice versa.

The script will:
1. Load the network and its name from <input>
2. Save it in the other format to <output>
3. Verify that the written file decodes to the same parameters
"""

import os
import sys
from typing import Optional, Tuple

import numpy as np

# Add project root to path so the script runs from a checkout
sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), '..'))

from netcodec.binary_codec import BINARY_MAGIC
from netcodec.exceptions import NetworkCodecError
from netcodec.parameters import ParameterSet
from netcodec.persistence import (
    load_from_text_with_name,
    load_with_name,
    save_as_binary,
    save_as_text,
)

TEXT_SUFFIX = '.txt'
BINARY_SUFFIX = '.nnpb'


def is_binary_file(filepath: str) -> bool:
    """Return True if ``filepath`` starts with the binary snapshot magic."""
    with open(filepath, 'rb') as f:
        return f.read(len(BINARY_MAGIC)) == BINARY_MAGIC


def default_output_path(input_path: str, binary_input: bool) -> str:
    """Swap the extension of ``input_path`` for the target format."""
    root, _ = os.path.splitext(input_path)
    return root + (TEXT_SUFFIX if binary_input else BINARY_SUFFIX)


def convert(input_path: str, output_path: Optional[str] = None) -> Tuple[str, bool]:
    """
    Convert ``input_path`` to the other format.

    Parameters:
    -----------
    input_path : str
        Text document or binary snapshot to read
    output_path : str, optional
        Destination; derived from ``input_path`` when omitted

    Returns:
    --------
    tuple
        (output_path, binary_input)
    """
    binary_input = is_binary_file(input_path)
    if output_path is None:
        output_path = default_output_path(input_path, binary_input)

    if binary_input:
        print(f"📂 Loading binary snapshot from: {input_path}")
        network, name = load_with_name(input_path)
        print(f"💾 Writing text document: {output_path}")
        save_as_text(network, output_path, name=name)
    else:
        print(f"📂 Loading text document from: {input_path}")
        network, name = load_from_text_with_name(input_path)
        print(f"💾 Writing binary snapshot: {output_path}")
        save_as_binary(network, output_path, name=name)

    verify_conversion(output_path, network, name, binary_output=not binary_input)
    return output_path, binary_input


def verify_conversion(output_path: str, original, name: Optional[str], binary_output: bool) -> bool:
    """
    Check that ``output_path`` decodes to the same name and parameters.

    Raises:
    -------
    AssertionError
        If the written file differs from the original network
    """
    print("🔍 Verifying conversion...")

    if binary_output:
        reloaded, reloaded_name = load_with_name(output_path)
    else:
        reloaded, reloaded_name = load_from_text_with_name(output_path)

    assert reloaded_name == name, f"Names don't match: {reloaded_name!r} != {name!r}"
    assert reloaded.topology == original.topology, "Topologies don't match!"

    expected = ParameterSet.copy_from(original)
    actual = ParameterSet.copy_from(reloaded)
    for layer, (w_exp, w_act) in enumerate(zip(expected.weights, actual.weights)):
        assert np.array_equal(w_exp, w_act), f"Weights of layer {layer} don't match!"
    for layer, (b_exp, b_act) in enumerate(zip(expected.biases, actual.biases)):
        assert np.array_equal(b_exp, b_act), f"Biases of layer {layer} don't match!"

    print("✅ Verification passed! Parameters are identical.")
    return True


def main():
    """Main conversion function."""
    if len(sys.argv) not in (2, 3):
        print(__doc__)
        sys.exit(2)

    input_path = sys.argv[1]
    output_path = sys.argv[2] if len(sys.argv) == 3 else None

    if not os.path.exists(input_path):
        print(f"❌ Error: Input file not found: {input_path}")
        sys.exit(1)

    try:
        output_path, binary_input = convert(input_path, output_path)
    except (NetworkCodecError, AssertionError) as e:
        print(f"\n❌ Error during conversion: {e}")
        sys.exit(1)

    print("\n" + "=" * 60)
    print("✅ CONVERSION COMPLETE!")
    print("=" * 60)
    print(f"   {'binary' if binary_input else 'text'} → "
          f"{'text' if binary_input else 'binary'}: {output_path}")


if __name__ == '__main__':
    main()
