"""
Tests for the command-line entry point.
"""

import argparse
import json
import logging
from pathlib import Path

import pytest

from importcost.main import EXIT_BLOCKED, EXIT_INPUT_ERROR, EXIT_OK, main, parse_product_arg


@pytest.fixture(autouse=True)
def isolated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Run from an empty directory and restore root logging afterwards."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("IMPORTCOST_FX_RATE", raising=False)
    monkeypatch.delenv("IMPORTCOST_ICMS_RATE", raising=False)
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestParseProductArg:
    def test_full(self) -> None:
        assert parse_product_arg("¥ 177,00;2;200") == {"price": "¥ 177,00", "quantity": "2", "weight": "200"}

    def test_price_only(self) -> None:
        assert parse_product_arg("¥ 10,00") == {"price": "¥ 10,00"}

    def test_too_many_parts(self) -> None:
        with pytest.raises(argparse.ArgumentTypeError):
            parse_product_arg("1;2;3;4")


class TestMain:
    """End-to-end CLI runs."""

    def test_examples_trace(self, capsys: pytest.CaptureFixture) -> None:
        assert main(["--examples"]) == EXIT_OK
        out = capsys.readouterr().out
        assert out.startswith("CALCULATION BREAKDOWN")
        assert "   Product 2: ¥ 94,40 × 1 = ¥ 94,40" in out

    def test_products_json(self, capsys: pytest.CaptureFixture) -> None:
        code = main(["-p", "¥ 177,00;2;200", "--fx-rate", "0.847", "--icms", "18", "--json"])
        assert code == EXIT_OK

        state = json.loads(capsys.readouterr().out)
        assert state["result"]["grand_total"] == pytest.approx(765.899296)
        assert state["config"]["icms_rate"] == 18.0

    def test_degraded_warning_on_stderr(self, capsys: pytest.CaptureFixture) -> None:
        assert main(["-p", "¥ 10,00;1;100"]) == EXIT_OK
        captured = capsys.readouterr()
        assert "WARNING: Exchange rate not provided" in captured.err

    def test_icms_out_of_range(self, capsys: pytest.CaptureFixture) -> None:
        assert main(["-p", "¥ 10,00", "--fx-rate", "1", "--icms", "150"]) == EXIT_BLOCKED
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "between 0 and 100" in captured.err

    def test_input_file_and_output(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        products = tmp_path / "products.csv"
        products.write_text("preço,qty,peso\n\"¥ 177,00\",2,200\n", encoding="utf-8")
        output = tmp_path / "out" / "breakdown.xlsx"

        code = main(["--input", str(products), "--fx-rate", "0.847", "--output", str(output)])

        assert code == EXIT_OK
        assert output.exists()
        assert "Breakdown written" in capsys.readouterr().err

    def test_bare_output_name_uses_output_dir(self, tmp_path: Path) -> None:
        assert main(["--examples", "--output", "breakdown.csv"]) == EXIT_OK
        assert (tmp_path / "data" / "output" / "breakdown.csv").exists()

    def test_missing_input_file(self, capsys: pytest.CaptureFixture) -> None:
        assert main(["--input", "missing.csv"]) == EXIT_INPUT_ERROR
        assert "not found" in capsys.readouterr().err

    def test_bad_input_file(self, tmp_path: Path) -> None:
        products = tmp_path / "products.csv"
        products.write_text("name\nwidget\n", encoding="utf-8")
        assert main(["--input", str(products)]) == EXIT_INPUT_ERROR


class TestBlockedRuns:
    """A blocked pass writes nothing to stdout."""

    def test_blocked_json_run(self, capsys: pytest.CaptureFixture) -> None:
        code = main(["-p", "¥ 177,00;2;200", "--fx-rate", "0.847", "--icms", "150", "--json"])
        assert code == EXIT_BLOCKED
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Calculation skipped" in captured.err

    def test_examples_with_bad_icms(self, capsys: pytest.CaptureFixture) -> None:
        assert main(["--examples", "--icms", "-1"]) == EXIT_BLOCKED
        assert capsys.readouterr().out == ""

    def test_out_of_range_env_default(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
    ) -> None:
        monkeypatch.setenv("IMPORTCOST_ICMS_RATE", "150")
        output = tmp_path / "breakdown.csv"

        code = main(["-p", "¥ 10,00", "--fx-rate", "1", "--output", str(output)])

        assert code == EXIT_BLOCKED
        assert capsys.readouterr().out == ""
        assert not output.exists()
