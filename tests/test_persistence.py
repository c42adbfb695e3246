"""
test_persistence.py
~~~~~~~~~~~~~~~~~~~

Unit tests for file-based network persistence.
"""

import pytest
import os
import stat

import numpy as np

from netcodec.exceptions import (
    CodecIOError,
    FormatError,
    InvalidArgumentError,
    UnsupportedPayloadError,
)
from netcodec.network import Network
from netcodec.persistence import (
    load,
    load_from_text,
    load_from_text_with_name,
    load_with_name,
    save,
    save_as_binary,
    save_as_text,
    save_with_name_as_text,
)


@pytest.fixture
def temp_model_dir(tmp_path):
    """Create a temporary directory for network files."""
    model_dir = tmp_path / "test_models"
    model_dir.mkdir()
    return str(model_dir)


@pytest.fixture
def simple_network():
    """Create a simple 3-layer network for testing."""
    return Network([3, 4, 2])


@pytest.mark.unit
class TestTextPersistence:
    """Test saving and loading text documents."""

    def test_save_creates_file(self, simple_network, temp_model_dir):
        """Test that saving a network creates the document."""
        path = os.path.join(temp_model_dir, "simple.txt")

        save_with_name_as_text(simple_network, "simple", path)

        assert os.path.exists(path)
        with open(path, encoding="utf-8") as f:
            lines = f.read().splitlines()
        assert lines[0] == "simple"
        assert lines[1] == "3, 4, 2"

    def test_save_writes_exact_document(self, my_net, my_net_text, temp_model_dir):
        """Test the on-disk bytes of the 2-2-1 network."""
        path = os.path.join(temp_model_dir, "my_net.txt")

        save_with_name_as_text(my_net, "MyNet", path)

        with open(path, "rb") as f:
            assert f.read() == my_net_text.encode("utf-8")

    def test_save_creates_directories(self, simple_network, temp_model_dir):
        """Test that missing parent directories are created."""
        path = os.path.join(temp_model_dir, "nested", "dir", "net.txt")

        save_with_name_as_text(simple_network, "nested", path)

        assert os.path.exists(path)

    def test_load_returns_network(self, simple_network, temp_model_dir):
        """Test that loading a document returns a valid Network object."""
        path = os.path.join(temp_model_dir, "simple.txt")
        save_with_name_as_text(simple_network, "simple", path)

        loaded = load_from_text(path)

        assert isinstance(loaded, Network)
        assert loaded.sizes == simple_network.sizes
        assert loaded.name == "simple"

    def test_load_preserves_weights(self, simple_network, temp_model_dir):
        """Test that saved weights are preserved after loading."""
        path = os.path.join(temp_model_dir, "weights.txt")
        save_with_name_as_text(simple_network, "weights", path)

        loaded, name = load_from_text_with_name(path)

        assert name == "weights"
        for original_w, loaded_w in zip(simple_network.weights, loaded.weights):
            assert np.array_equal(original_w, loaded_w)
        for original_b, loaded_b in zip(simple_network.biases, loaded.biases):
            assert np.array_equal(original_b, loaded_b)

    def test_save_without_name(self, simple_network, temp_model_dir):
        """Test that save_as_text can omit the name line."""
        path = os.path.join(temp_model_dir, "nameless.txt")

        save_as_text(simple_network, path)
        loaded, name = load_from_text_with_name(path)

        assert name is None
        assert loaded.sizes == [3, 4, 2]

    def test_overwrite_existing_file(self, simple_network, temp_model_dir):
        """Test that saving to the same path replaces the document."""
        path = os.path.join(temp_model_dir, "update.txt")

        save_with_name_as_text(Network([2, 2, 2]), "old", path)
        save_with_name_as_text(simple_network, "new", path)

        loaded, name = load_from_text_with_name(path)
        assert name == "new"
        assert loaded.sizes == [3, 4, 2]

    def test_failed_save_keeps_previous_document(self, my_net, temp_model_dir):
        """Test that a rejected save leaves the old file and no temp files."""
        path = os.path.join(temp_model_dir, "keep.txt")
        save_with_name_as_text(my_net, "MyNet", path)

        with pytest.raises(InvalidArgumentError):
            save_with_name_as_text(my_net, "bad\nname", path)

        assert load_from_text_with_name(path)[1] == "MyNet"
        assert os.listdir(temp_model_dir) == ["keep.txt"]

    def test_load_into_existing_network(self, my_net, temp_model_dir):
        """Test that a document can be loaded into an existing network."""
        path = os.path.join(temp_model_dir, "target.txt")
        save_with_name_as_text(my_net, "MyNet", path)
        target = Network([2, 2, 1])

        loaded, _ = load_from_text_with_name(path, target=target)

        assert loaded is target
        assert target.get_bias(1, 0) == 0.9


@pytest.mark.unit
class TestBinaryPersistence:
    """Test saving and loading binary snapshots."""

    def test_save_and_load(self, simple_network, temp_model_dir):
        """Test that a binary snapshot round-trips name and parameters."""
        path = os.path.join(temp_model_dir, "simple.nnpb")

        save(simple_network, "simple", path)
        loaded, name = load_with_name(path)

        assert name == "simple"
        for original_w, loaded_w in zip(simple_network.weights, loaded.weights):
            assert np.array_equal(original_w, loaded_w)

    def test_load_returns_network(self, simple_network, temp_model_dir):
        """Test that load returns just the network."""
        path = os.path.join(temp_model_dir, "simple.nnpb")
        save(simple_network, "simple", path)

        loaded = load(path)

        assert isinstance(loaded, Network)
        assert loaded.sizes == [3, 4, 2]

    def test_load_text_file_as_binary(self, simple_network, temp_model_dir):
        """Test that a text document is not accepted as a snapshot."""
        path = os.path.join(temp_model_dir, "simple.txt")
        save_with_name_as_text(simple_network, "simple", path)

        with pytest.raises(UnsupportedPayloadError):
            load(path)

    def test_save_without_name(self, simple_network, temp_model_dir):
        """Test that save_as_binary writes a nameless snapshot."""
        path = os.path.join(temp_model_dir, "nameless.nnpb")

        save_as_binary(simple_network, path)
        loaded, name = load_with_name(path)

        assert name is None
        assert loaded.sizes == [3, 4, 2]


@pytest.fixture
def umask_022():
    """Run a test under umask 022 and restore the previous mask afterwards."""
    previous = os.umask(0o022)
    try:
        yield
    finally:
        os.umask(previous)


def _file_mode(path):
    return stat.S_IMODE(os.stat(path).st_mode)


@pytest.mark.unit
@pytest.mark.skipif(os.name != "posix", reason="POSIX permission bits")
class TestFilePermissions:
    """Test the permission bits of saved files."""

    @pytest.mark.parametrize("suffix", ["txt", "nnpb"])
    def test_new_file_follows_umask(self, simple_network, temp_model_dir, umask_022, suffix):
        """Test that a new file gets 0666 minus the umask, like open() would give."""
        path = os.path.join(temp_model_dir, f"fresh.{suffix}")

        if suffix == "txt":
            save_as_text(simple_network, path)
        else:
            save_as_binary(simple_network, path)

        assert _file_mode(path) == 0o644

    @pytest.mark.parametrize("suffix", ["txt", "nnpb"])
    def test_overwrite_keeps_existing_mode(self, simple_network, temp_model_dir, umask_022, suffix):
        """Test that replacing a file keeps the mode it already had."""
        path = os.path.join(temp_model_dir, f"shared.{suffix}")
        save_fn = save_as_text if suffix == "txt" else save_as_binary
        save_fn(simple_network, path)
        os.chmod(path, 0o640)

        save_fn(simple_network, path)

        assert _file_mode(path) == 0o640


@pytest.mark.unit
class TestPersistenceErrors:
    """Test argument validation and error mapping."""

    @pytest.mark.parametrize("args", [
        (None, "name", "net.txt"),
        ("network", None, "net.txt"),
        ("network", "name", None),
    ])
    def test_save_rejects_none(self, simple_network, args):
        """Test that save entry points require network, name and path."""
        network, name, path = (
            simple_network if arg == "network" else arg for arg in args
        )

        with pytest.raises(InvalidArgumentError):
            save_with_name_as_text(network, name, path)
        with pytest.raises(InvalidArgumentError):
            save(network, name, path)

    def test_load_rejects_none(self):
        """Test that load entry points require a path."""
        with pytest.raises(InvalidArgumentError):
            load_from_text(None)
        with pytest.raises(InvalidArgumentError):
            load(None)

    def test_load_nonexistent_file(self, temp_model_dir):
        """Test that a missing file is reported as an I/O error with its cause."""
        path = os.path.join(temp_model_dir, "missing.txt")

        with pytest.raises(CodecIOError) as exc_info:
            load_from_text(path)
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)

        with pytest.raises(CodecIOError):
            load(path)

    def test_io_error_is_os_error(self, temp_model_dir):
        """Test that CodecIOError can be caught as OSError."""
        with pytest.raises(OSError):
            load_from_text(os.path.join(temp_model_dir, "missing.txt"))

    def test_load_malformed_document(self, temp_model_dir):
        """Test that a malformed document raises FormatError."""
        path = os.path.join(temp_model_dir, "broken.txt")
        with open(path, "w", encoding="utf-8") as f:
            f.write("MyNet\n2, 2, 1\n0.1 0.2\n")

        with pytest.raises(FormatError):
            load_from_text(path)

    def test_load_binary_file_as_text(self, simple_network, temp_model_dir):
        """Test that undecodable bytes are reported as a format error."""
        path = os.path.join(temp_model_dir, "garbage.txt")
        with open(path, "wb") as f:
            f.write(b"\xff\xfe\x00garbage")

        with pytest.raises(FormatError) as exc_info:
            load_from_text(path)
        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)
        assert not isinstance(exc_info.value, OSError)

    def test_save_into_directory_path(self, simple_network, temp_model_dir):
        """Test that writing over a directory fails with CodecIOError."""
        with pytest.raises(CodecIOError):
            save_with_name_as_text(simple_network, "dir", temp_model_dir)


@pytest.mark.integration
class TestPersistenceIntegration:
    """Integration tests across both formats."""

    def test_text_to_binary_to_text(self, simple_network, temp_model_dir):
        """Test that converting between formats keeps every parameter."""
        text_path = os.path.join(temp_model_dir, "a.txt")
        binary_path = os.path.join(temp_model_dir, "a.nnpb")
        final_path = os.path.join(temp_model_dir, "b.txt")

        save_with_name_as_text(simple_network, "cycle", text_path)
        net, name = load_from_text_with_name(text_path)
        save(net, name, binary_path)
        net, name = load_with_name(binary_path)
        save_with_name_as_text(net, name, final_path)

        with open(text_path, encoding="utf-8") as a, open(final_path, encoding="utf-8") as b:
            assert a.read() == b.read()

    def test_multiple_networks_coexist(self, temp_model_dir):
        """Test that several networks can be saved side by side."""
        networks_to_create = [
            ([784, 30, 10], "mnist_network"),
            ([3, 4, 2], "simple_network"),
            ([10, 20, 20, 10], "deep_network")
        ]

        for architecture, name in networks_to_create:
            save_with_name_as_text(
                Network(architecture), name,
                os.path.join(temp_model_dir, f"{name}.txt")
            )

        for architecture, name in networks_to_create:
            loaded, loaded_name = load_from_text_with_name(
                os.path.join(temp_model_dir, f"{name}.txt")
            )
            assert loaded.sizes == architecture
            assert loaded_name == name
