"""Tests for the command line scripts."""

import io
from pathlib import Path

import numpy as np
import pytest

from scripts.convert_vectors import convert, write_metrics
from scripts.query_neighbors import build_parser, compose_query, run_loop
from vecspace.codec.parser import Word2VecParser
from vecspace.config import CodecSettings, Settings
from vecspace.exceptions import TransportError
from vecspace.space.store import VecSpace
from vecspace.vectors.models import Vector


@pytest.fixture
def indexed_space() -> VecSpace:
    """Small indexed space with two close words and one far word."""
    space = VecSpace(2).with_termmap()
    space.extend(
        [
            Vector([1.0, 0.0], "cat"),
            Vector([0.9, 0.1], "kitten"),
            Vector([0.0, 1.0], "car"),
        ]
    )
    return space


class TestComposeQuery:
    """Tests for building query vectors from text."""

    def test_single_word(self, indexed_space: VecSpace) -> None:
        """A single known word is its own query."""
        query = compose_query(indexed_space, "cat")

        assert query is not None
        assert query == Vector([1.0, 0.0], "cat")

    def test_sums_known_words(self, indexed_space: VecSpace) -> None:
        """Known words are summed and unknown words skipped."""
        query = compose_query(indexed_space, "cat unknown car")

        assert query is not None
        assert query.term == "cat car"
        np.testing.assert_array_equal(query.data, np.array([1.0, 1.0], dtype=np.float32))

    def test_nothing_known(self, indexed_space: VecSpace) -> None:
        """No known word means no query."""
        assert compose_query(indexed_space, "dog bird") is None

    def test_space_unchanged(self, indexed_space: VecSpace) -> None:
        """Composing a query never writes into the space."""
        compose_query(indexed_space, "cat kitten")

        assert indexed_space.get(0) == Vector([1.0, 0.0], "cat")


class TestRunLoop:
    """Tests for the interactive loop."""

    def test_prints_neighbours(self, indexed_space: VecSpace) -> None:
        """Each query prints its top-k neighbours best first."""
        stdout = io.StringIO()

        run_loop(indexed_space, indexed_space, 2, io.StringIO("cat\n"), stdout)

        lines = stdout.getvalue().splitlines()
        assert lines[0].startswith("Top k=2 for 'cat'")
        assert lines[1] == "- cat (1.000000)"
        assert lines[2].startswith("- kitten (")
        assert lines[3] == ""

    def test_unknown_term(self, indexed_space: VecSpace) -> None:
        """Unknown queries are reported and the loop continues."""
        stdout = io.StringIO()

        run_loop(indexed_space, indexed_space, 1, io.StringIO("dog\n\ncar\n"), stdout)

        output = stdout.getvalue()
        assert "Term 'dog' not found" in output
        assert "- car (1.000000)" in output

    def test_separate_target(self, indexed_space: VecSpace) -> None:
        """Neighbours come from the target space."""
        target = VecSpace(2)
        target.insert(Vector([1.0, 0.05], "chat"))
        stdout = io.StringIO()

        run_loop(indexed_space, target, 3, io.StringIO("cat\n"), stdout)

        assert "- chat (" in stdout.getvalue()
        assert "kitten" not in stdout.getvalue()

    def test_target_dimension_mismatch(self, indexed_space: VecSpace) -> None:
        """A target of another dimension reports the query and continues."""
        target = VecSpace(3)
        target.insert(Vector([1.0, 0.0, 0.0], "chat"))
        stdout = io.StringIO()

        run_loop(indexed_space, target, 1, io.StringIO("cat\ncar\n"), stdout)

        lines = stdout.getvalue().splitlines()
        assert lines[0].startswith("Cannot search for 'cat'")
        assert lines[1].startswith("Cannot search for 'car'")


class TestConvert:
    """Tests for format conversion."""

    def test_text_to_binary_and_back(self, space: VecSpace, tmp_path: Path) -> None:
        """Converting text to binary and back preserves the vectors."""
        text_path = tmp_path / "in.vec"
        bin_path = tmp_path / "out.bin"
        back_path = tmp_path / "back.vec"
        text_path.write_bytes(
            b"3 3\nterm1 1.2 2.0 4.4\nterm3 2.3 1.0 3.4\nterm3 3.1 9.4 3.0\n"
        )

        written = convert(text_path, bin_path, from_binary=False, to_binary=True)
        convert(bin_path, back_path, from_binary=True, to_binary=False)

        assert written == bin_path.stat().st_size
        assert Word2VecParser().binary().parse_file(bin_path) == space
        assert back_path.read_bytes() == text_path.read_bytes()

    def test_missing_source(self, tmp_path: Path) -> None:
        """A missing input file is a transport error."""
        with pytest.raises(TransportError):
            convert(tmp_path / "missing.vec", tmp_path / "out.bin", False, True)

    def test_write_metrics(self, tmp_path: Path) -> None:
        """Metrics are dumped in the Prometheus text format."""
        path = tmp_path / "vecspace.prom"
        source = tmp_path / "in.vec"
        source.write_bytes(b"1 2\na 1 2\n")
        convert(source, tmp_path / "out.bin", from_binary=False, to_binary=True)

        write_metrics(path)

        assert b"vecspace_export_bytes_total" in path.read_bytes()


class TestQueryOptions:
    """Tests for query_neighbors command line options."""

    def test_binary_can_be_disabled(self) -> None:
        """--no-binary overrides a binary default from settings."""
        settings = Settings(codec=CodecSettings(binary=True))

        args = build_parser(settings).parse_args(["en.vec", "--no-binary"])

        assert args.binary is False

    def test_defaults_from_settings(self) -> None:
        """Format and k defaults come from settings."""
        settings = Settings(codec=CodecSettings(binary=True, header=False))

        args = build_parser(settings).parse_args(["en.vec"])

        assert args.binary is True
        assert args.header is False
        assert args.k == settings.search.default_k

    def test_header_flag(self) -> None:
        """--no-header disables the header."""
        args = build_parser(Settings()).parse_args(["en.vec", "--no-header"])

        assert args.header is False
