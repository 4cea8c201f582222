"""Tests for the console report and CLI entry point."""

import pytest

from stocksignal.analysis.models import Bar
from stocksignal.cli.report import format_report
from stocksignal.data.stooq_client import StooqClient
from stocksignal.engine import analyze
from stocksignal.errors import EmptySeriesError
from stocksignal.main import build_parser, run_cli


def _rising_bars(n: int = 60) -> list[Bar]:
    return [
        Bar(
            date=f"2024-06-{i + 1:03d}",
            open=c, high=c * 1.01, low=c * 0.99, close=c, volume=1000.0,
        )
        for i, c in ((i, 100.0 * 1.02 ** i) for i in range(n))
    ]


def _write_csv(path, bars: list[Bar]) -> None:
    lines = ["Date,Open,High,Low,Close,Volume"]
    lines += [
        f"{b.date},{b.open},{b.high},{b.low},{b.close},{b.volume}" for b in bars
    ]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Run from an empty directory so no real .env is loaded."""
    monkeypatch.chdir(tmp_path)
    for var in ["DEFAULT_SYMBOLS", "SR_LOOKBACK", "LOG_LEVEL", "PRICE_INTERVAL",
                "HTTP_TIMEOUT", "STOOQ_BASE_URL"]:
        monkeypatch.delenv(var, raising=False)


class TestReport:
    def test_full_report(self, capsys):
        output = format_report("ale", analyze(_rising_bars()))
        assert "ALE Analysis" in output
        assert "Action:          BUY (95% confidence)" in output
        assert "STRONG BUY" in output
        assert capsys.readouterr().out.strip() == output.strip()

    def test_short_series_shows_placeholders(self, capsys):
        output = format_report("cdr", analyze(_rising_bars(3)))
        assert "RSI(14):         N/A" in output
        assert "Bollinger:       N/A" in output
        assert "Support:         none" in output

    def test_summary_lines(self):
        output = format_report("ale", analyze(_rising_bars()))
        assert "Change:          +" in output
        assert "(+2.00%)" in output
        assert "(1.0x 20-day avg)" in output
        assert "52W High / Low:" in output

    def test_single_bar_has_no_change(self):
        output = format_report("ndq", analyze(_rising_bars(1)))
        assert "Change:          N/A" in output


class TestCLI:
    def test_parser_options(self):
        args = build_parser().parse_args(["--symbol", "ale", "ndq", "--lookback", "20"])
        assert args.symbol == ["ale", "ndq"]
        assert args.lookback == 20
        assert args.csv is None

    def test_csv_mode(self, tmp_path, capsys):
        path = tmp_path / "ale_d.csv"
        _write_csv(path, _rising_bars())
        assert run_cli(["--csv", str(path)]) == 0
        assert "Action:          BUY" in capsys.readouterr().out

    def test_csv_missing_file(self, tmp_path):
        assert run_cli(["--csv", str(tmp_path / "missing.csv")]) == 1

    def test_csv_without_valid_rows(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("Date,Open,High,Low,Close,Volume\n", encoding="utf-8")
        assert run_cli(["--csv", str(path)]) == 1

    def test_csv_nan_close_dropped(self, tmp_path, capsys):
        path = tmp_path / "prices.csv"
        _write_csv(path, _rising_bars(30))
        with path.open("a", encoding="utf-8") as fh:
            fh.write("2024-07-01,1,2,0.5,nan,100\n")
        assert run_cli(["--csv", str(path)]) == 0
        output = capsys.readouterr().out
        assert "2024-07-01" not in output
        for label in ("Close:", "Stop-loss:", "Take-profit:", "Risk/Reward:"):
            line = next(l for l in output.splitlines() if label in l)
            assert "nan" not in line

    def test_csv_not_utf8(self, tmp_path):
        path = tmp_path / "binary.csv"
        path.write_bytes(b"Date,Open,High,Low,Close,Volume\n\xff\xfe,1,2,0.5,1.5,100\n")
        assert run_cli(["--csv", str(path)]) == 1

    def test_invalid_lookback(self):
        assert run_cli(["--lookback", "0"]) == 2

    def test_symbols_mode(self, monkeypatch, capsys):
        async def _fake_fetch_bars(self, symbol, interval=None):
            if symbol == "bad":
                raise EmptySeriesError("No data received for bad")
            return _rising_bars()

        monkeypatch.setattr(StooqClient, "fetch_bars", _fake_fetch_bars)

        assert run_cli(["--symbol", "ale"]) == 0
        assert "ALE Analysis" in capsys.readouterr().out

        assert run_cli(["--symbol", "ale", "bad"]) == 1
