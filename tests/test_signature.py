"""
test_signature.py
~~~~~~~~~~~~~~~~~

Unit tests for the signature line and header disambiguation.
"""

import pytest

from netcodec.exceptions import FormatError
from netcodec.signature import format_signature, parse_signature, read_header
from netcodec.topology import Topology


@pytest.mark.unit
class TestSignature:
    """Test formatting and parsing of the signature line."""

    def test_format_signature(self):
        """Test that sizes are joined with a comma and a space."""
        assert format_signature(Topology(784, (30, 20), 10)) == "784, 30, 20, 10"

    def test_parse_signature(self):
        """Test that a signature line parses into a topology."""
        assert parse_signature("2, 3, 4, 1\n") == Topology(2, (3, 4), 1)

    def test_parse_strips_crlf(self):
        """Test that Windows line endings are tolerated."""
        assert parse_signature("2, 2, 1\r\n") == Topology(2, (2,), 1)

    def test_parse_rejects_missing_hidden_layer(self):
        """Test that a two-size signature is rejected."""
        with pytest.raises(FormatError) as exc_info:
            parse_signature("2, 1")
        assert "at least one hidden layer" in str(exc_info.value)

    @pytest.mark.parametrize("line", [
        "MyNet",
        "",
        "2, x, 1",
        "2, 2.5, 1",
        "2, -2, 1",
        "2,2,1",
        "2, 2,  1",
        "0.1 0.2",
    ])
    def test_parse_rejects_invalid_lines(self, line):
        """Test that names, weight rows and malformed sizes are not signatures."""
        with pytest.raises(FormatError):
            parse_signature(line)

    def test_parse_rejects_none(self):
        """Test that a missing line is reported as a format error."""
        with pytest.raises(FormatError):
            parse_signature(None)


@pytest.mark.unit
class TestReadHeader:
    """Test the optional name line heuristic."""

    def test_name_then_signature(self):
        """Test that a valid second line makes the first line the name."""
        name, topology, header_lines = read_header("MyNet\n", "2, 2, 1\n")

        assert name == "MyNet"
        assert topology == Topology(2, (2,), 1)
        assert header_lines == 2

    def test_signature_without_name(self):
        """Test that an invalid second line falls back to the first line."""
        name, topology, header_lines = read_header("2, 2, 1\n", "0.1 0.2\n")

        assert name is None
        assert topology == Topology(2, (2,), 1)
        assert header_lines == 1

    def test_numeric_looking_name(self):
        """Test that a name shaped like a signature is still read as the name."""
        name, topology, header_lines = read_header("1, 2, 3\n", "2, 2, 1\n")

        assert name == "1, 2, 3"
        assert topology == Topology(2, (2,), 1)
        assert header_lines == 2

    def test_signature_only_document(self):
        """Test that a lone signature line is accepted as a nameless header."""
        name, topology, header_lines = read_header("2, 2, 1\n", None)

        assert name is None
        assert header_lines == 1

    def test_no_signature(self):
        """Test that two non-signature lines fail to parse."""
        with pytest.raises(FormatError) as exc_info:
            read_header("MyNet\n", "not a signature\n")
        assert "Cannot read signature" in str(exc_info.value)

    def test_empty_document(self):
        """Test that an empty document fails to parse."""
        with pytest.raises(FormatError):
            read_header(None, None)
