"""
tests/test_streams.py
---------------------
Unit tests for transfer/streams.py.
Run with: python -m pytest tests/
"""
from __future__ import annotations

import io
import sys
from pathlib import Path

import pytest

from transfer.streams import iter_lines, open_output, read_records, scan_records

SEP = "\x1e\n"


class _CountingReader(io.StringIO):
    """StringIO that records the size of every read() call."""

    def __init__(self, text: str) -> None:
        super().__init__(text)
        self.requests: list[int] = []

    def read(self, size: int | None = -1) -> str:  # type: ignore[override]
        self.requests.append(size if size is not None else -1)
        return super().read(size)


class TestScanRecords:
    def test_splits_on_separator(self) -> None:
        stream = io.StringIO(f"a{SEP}b{SEP}")
        assert list(scan_records(stream, SEP)) == ["a", "b"]

    def test_separator_across_chunk_boundary(self) -> None:
        text = f"abc{SEP}def{SEP}gh{SEP}"
        for chunk in range(1, 8):
            assert list(scan_records(io.StringIO(text), SEP, chunk_size=chunk)) == ["abc", "def", "gh"]

    def test_unterminated_tail_is_yielded(self) -> None:
        assert list(scan_records(io.StringIO(f"a{SEP}b"), SEP)) == ["a", "b"]

    def test_empty_records_kept(self) -> None:
        assert list(scan_records(io.StringIO(f"{SEP}x{SEP}"), SEP)) == ["", "x"]

    def test_empty_input(self) -> None:
        assert list(scan_records(io.StringIO(""), "|")) == []

    def test_reads_incrementally(self) -> None:
        stream = _CountingReader("r|" * 100)
        records = scan_records(stream, "|", chunk_size=16)
        assert next(records) == "r"
        assert stream.requests == [16]

    def test_long_record_over_many_reads(self) -> None:
        body = "ab<|" * 2500
        text = f"{body}<|>x<<|>"
        for chunk in (1, 2, 7, 64):
            assert list(scan_records(io.StringIO(text), "<|>", chunk_size=chunk)) == [body, "x<"]

    def test_unterminated_long_tail(self) -> None:
        records = list(scan_records(io.StringIO("k<|>" + "z<|" * 300), "<|>", chunk_size=5))
        assert records == ["k", "z<|" * 300]

    def test_empty_separator_rejected(self) -> None:
        with pytest.raises(ValueError):
            list(scan_records(io.StringIO("x"), ""))


class TestIterLines:
    def test_strips_line_endings(self) -> None:
        assert list(iter_lines(io.StringIO("a b\r\nc d\n\nlast"))) == ["a b", "c d", "", "last"]


class TestReadRecords:
    def test_newline_file(self, tmp_path: Path) -> None:
        path = tmp_path / "in.txt"
        path.write_text("1 a\n2 b\n", encoding="utf-8")
        assert list(read_records(path)) == ["1 a", "2 b"]

    def test_carriage_return_inside_field_is_kept(self, tmp_path: Path) -> None:
        path = tmp_path / "in.txt"
        path.write_bytes(b"a\rb c\n")
        assert list(read_records(path)) == ["a\rb c"]

    def test_custom_separator(self, tmp_path: Path) -> None:
        path = tmp_path / "in.dat"
        path.write_bytes("x\x1fy\x1e\nmulti\nline\x1e\n".encode("utf-8"))
        assert list(read_records(path, SEP, chunk_size=3)) == ["x\x1fy", "multi\nline"]

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            list(read_records(tmp_path / "nope.txt"))


class TestOpenOutput:
    def test_file_is_written_untranslated(self, tmp_path: Path) -> None:
        path = tmp_path / "out.txt"
        with open_output(path, buffer_size=64) as out:
            out.write("a\nb\x1e\n")
        assert path.read_bytes() == b"a\nb\x1e\n"

    def test_file_is_truncated(self, tmp_path: Path) -> None:
        path = tmp_path / "out.txt"
        path.write_text("old content\n", encoding="utf-8")
        with open_output(path) as out:
            out.write("new\n")
        assert path.read_text(encoding="utf-8") == "new\n"

    def test_stdout_is_not_closed(self, capsys: pytest.CaptureFixture[str]) -> None:
        with open_output(None) as out:
            out.write("to stdout\n")
        assert not sys.stdout.closed
        assert capsys.readouterr().out == "to stdout\n"

    def test_unwritable_destination(self, tmp_path: Path) -> None:
        with pytest.raises(OSError):
            with open_output(tmp_path / "missing-dir" / "out.txt"):
                pass
