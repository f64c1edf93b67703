"""
tests/test_cli.py
-----------------
Command-surface tests for main.py with the database swapped for FakeDatabase.
Run with: python -m pytest tests/
"""
from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from logger import apply_verbosity
from main import app, unescape_separator
from models.options import ExportVariant, Verbosity
from transfer.queries import resolve_query

CONFIG_SQL = resolve_query(ExportVariant.CONFIGURATION).sql

runner = CliRunner()


@pytest.fixture(autouse=True)
def _reset_verbosity():
    yield
    apply_verbosity(Verbosity.NORMAL)


@pytest.fixture
def patched_db(fake_db):
    with patch("main.DatabaseManager") as manager_cls:
        manager_cls.from_config.return_value = fake_db
        yield manager_cls


class TestExportCommand:
    def test_export_to_file(self, fake_db, patched_db, tmp_path: Path) -> None:
        fake_db.query_rows[CONFIG_SQL] = [(1, "a"), (2, "b")]
        out = tmp_path / "config.txt"

        result = runner.invoke(app, ["export", "Configuration", "-o", str(out)])

        assert result.exit_code == 0, result.output
        assert out.read_text(encoding="utf-8") == "1 a\n2 b\n"
        assert f"Wrote 2 lines to {out}" in result.output

    def test_export_to_stdout(self, fake_db, patched_db) -> None:
        fake_db.query_rows[CONFIG_SQL] = [(1, None)]

        result = runner.invoke(app, ["export", "configuration", "--binary-format"])

        assert result.exit_code == 0, result.output
        assert result.output == "1\x1f\\N\x1e\n"

    def test_separator_escapes(self, fake_db, patched_db, tmp_path: Path) -> None:
        fake_db.query_rows[CONFIG_SQL] = [(1, "a")]
        out = tmp_path / "tabs.txt"

        runner.invoke(app, ["export", "Configuration", "-o", str(out), "--column-separator", "\\t"])

        assert out.read_text(encoding="utf-8") == "1\ta\n"

    def test_unknown_variant_rejected(self, patched_db) -> None:
        result = runner.invoke(app, ["export", "Parcels"])
        assert result.exit_code != 0
        patched_db.from_config.assert_not_called()

    def test_hostname_override(self, fake_db, patched_db, tmp_path: Path) -> None:
        runner.invoke(
            app,
            ["--hostname", "db.internal", "--port", "3307", "export", "Cama", "-o", str(tmp_path / "c.txt")],
        )
        cfg = patched_db.from_config.call_args[0][0]
        assert (cfg.host, cfg.port) == ("db.internal", 3307)

    def test_quiet_still_prints_summary(self, fake_db, patched_db, tmp_path: Path) -> None:
        fake_db.query_rows[CONFIG_SQL] = [(i,) for i in range(5001)]
        out = tmp_path / "q.txt"

        result = runner.invoke(app, ["-v", "quiet", "export", "Configuration", "-o", str(out)])

        assert "rows written" not in result.output
        assert "Wrote 5001 lines" in result.output

    def test_bad_verbosity(self, patched_db) -> None:
        result = runner.invoke(app, ["-v", "loud", "export", "Cama"])
        assert result.exit_code != 0


class TestImportCommand:
    def test_import(self, fake_db, patched_db, tmp_path: Path) -> None:
        fake_db.add_table("Config", ["id", "name"])
        path = tmp_path / "in.txt"
        path.write_text("1 a\n2 b\n", encoding="utf-8")

        result = runner.invoke(app, ["import", "Config", "-i", str(path)])

        assert result.exit_code == 0, result.output
        assert fake_db.rows_of("Config") == [("1", "a"), ("2", "b")]

    def test_missing_table_exits_non_zero(self, fake_db, patched_db, tmp_path: Path) -> None:
        path = tmp_path / "in.txt"
        path.write_text("1 a\n", encoding="utf-8")

        result = runner.invoke(app, ["import", "Missing", "-i", str(path)])

        assert result.exit_code == 1
        assert fake_db.batches == []

    def test_infile_required(self, patched_db) -> None:
        result = runner.invoke(app, ["import", "Config"])
        assert result.exit_code != 0

    def test_missing_input_file(self, fake_db, patched_db, tmp_path: Path) -> None:
        fake_db.add_table("Config", ["id"])
        result = runner.invoke(app, ["import", "Config", "-i", str(tmp_path / "absent.txt")])
        assert result.exit_code == 1

    def test_drop_existing_flag(self, fake_db, patched_db, tmp_path: Path) -> None:
        fake_db.add_table("Config", ["id"], rows=[("old",)])
        path = tmp_path / "in.txt"
        path.write_text("new\n", encoding="utf-8")

        result = runner.invoke(app, ["import", "Config", "-i", str(path), "--drop-existing"])

        assert result.exit_code == 0, result.output
        assert fake_db.rows_of("Config") == [("new",)]


class TestUnescapeSeparator:
    @pytest.mark.parametrize(
        "raw,expected",
        [("\\t", "\t"), ("\\x1f", "\x1f"), ("|", "|"), ("\\n", "\n"), ("é", "é"), (None, None)],
    )
    def test_unescape(self, raw, expected) -> None:
        assert unescape_separator(raw) == expected
