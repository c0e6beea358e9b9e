"""
Tests for the command line interface.
"""

import json

import pytest

from cli import load_candles, main, parse_param
from conftest import make_candles


@pytest.fixture
def candle_file(tmp_path, monkeypatch):
    """Oldest-first CSV of 30 candles in an isolated working directory."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("config.loader.CONFIG_PATHS", [])

    rows = ["date,open,high,low,close,volume"]
    for candle in reversed(make_candles(30)):
        rows.append(
            f"{candle.date.isoformat()},{candle.open},{candle.high},{candle.low},{candle.close},{candle.volume}"
        )
    path = tmp_path / "candles.csv"
    path.write_text("\n".join(rows) + "\n")
    return path


class TestParsing:
    """Argument and file parsing."""

    @pytest.mark.parametrize("text,expected", [
        ("period=20", ("period", 20)),
        ("stdDev=2.5", ("stdDev", 2.5)),
        ("showSignalLine=false", ("showSignalLine", False)),
        ("source=hl2", ("source", "hl2")),
    ])
    def test_parse_param(self, text, expected):
        assert parse_param(text) == expected

    def test_load_csv_newest_first(self, candle_file):
        candles = load_candles(candle_file)
        assert len(candles) == 30
        assert candles[0].timestamp > candles[-1].timestamp

    def test_load_json(self, tmp_path):
        path = tmp_path / "candles.json"
        path.write_text(json.dumps([
            {"date": "2024-01-01T00:00:00Z", "open": 1, "high": 2, "low": 1, "close": 2},
            {"date": "2024-01-02T00:00:00Z", "open": 2, "high": 3, "low": 2, "close": 3},
        ]))
        candles = load_candles(path)
        assert [c.close for c in candles] == [3, 2]


class TestCommands:
    """Subcommands end to end."""

    def test_indicators(self, candle_file, capsys):
        assert main(["indicators", "--category", "overlay"]) == 0
        out = capsys.readouterr().out
        assert "SMA" in out
        assert "RSI" not in out

    def test_calc(self, candle_file, capsys):
        assert main(["calc", str(candle_file), "SMA", "-p", "period=5"]) == 0
        assert capsys.readouterr().out.startswith("SMA_1: value=")

    def test_calc_insufficient(self, candle_file, capsys):
        assert main(["calc", str(candle_file), "SMA", "-p", "period=50"]) == 0
        assert "Insufficient data: requires 50 points" in capsys.readouterr().out

    def test_replay(self, candle_file, capsys):
        assert main(["replay", str(candle_file), "SMA", "-p", "period=5", "--start", "4", "--end", "6"]) == 0
        lines = capsys.readouterr().out.strip().splitlines()

        assert len(lines) == 3
        assert "error: Insufficient data" in lines[0]
        assert "value=" in lines[1]

    def test_unknown_indicator(self, candle_file, capsys):
        assert main(["calc", str(candle_file), "Nope"]) == 1
        assert "Unknown indicator" in capsys.readouterr().err

    def test_missing_config(self, candle_file, capsys):
        assert main(["-c", "missing.toml", "indicators"]) == 2
