"""
Tests for the command-line interface.
"""

import json

import pytest

from ttaaii.__main__ import main


class TestCLI:
    """Tests for ttaaii.__main__.main()."""

    def test_complete_default(self, capsys):
        assert main(["SA"]) == 0
        out = capsys.readouterr().out
        assert "TTAAII Completion" in out
        assert "Table: C1/C2" in out

    def test_complete_limit(self, capsys):
        assert main(["SAUK", "--limit", "5"]) == 0
        assert "95 more" in capsys.readouterr().out

    def test_complete_grouped(self, capsys):
        assert main(["AC", "--group-by", "continent"]) == 0
        assert "Europe (EU):" in capsys.readouterr().out

    def test_complete_no_table(self, capsys):
        assert main(["Z"]) == 0
        assert "No valid table" in capsys.readouterr().out

    def test_complete_json(self, capsys):
        assert main(["FAUK", "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["table_id"] == "D3_FA"
        assert len(data["items"]) == 59

    def test_validate_ok(self, capsys):
        assert main(["--validate", "SAUK31"]) == 0
        assert "Valid: True" in capsys.readouterr().out

    def test_validate_errors(self, capsys):
        assert main(["--validate", "FAUK60"]) == 1
        out = capsys.readouterr().out
        assert "INVALID_II" in out
        assert "position 5" in out

    def test_validate_json(self, capsys):
        assert main(["--validate", "--json", "Z"]) == 1
        data = json.loads(capsys.readouterr().out)
        assert data["errors"][0]["code"] == "INVALID_CHARACTER"

    def test_decode(self, capsys):
        assert main(["--decode", "SAUK31"]) == 0
        out = capsys.readouterr().out
        assert "Area: UK: United Kingdom" in out
        assert "FM 15 (METAR)" in out

    def test_decode_json(self, capsys):
        assert main(["--decode", "--json", "SAWA01"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["area_or_type1"]["table"] == "C2"

    def test_unknown_locale(self, capsys):
        assert main(["SA", "--locale", "xx"]) == 2
        assert "error:" in capsys.readouterr().err

    def test_missing_tables_file(self, tmp_path, capsys):
        assert main(["SA", "--tables", str(tmp_path / "none.json")]) == 2

    def test_modes_exclusive(self):
        with pytest.raises(SystemExit):
            main(["--validate", "--decode", "SA"])
