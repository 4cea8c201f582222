"""CLI report — prints the analysis of one symbol to the console."""

from typing import Optional

from stocksignal.engine import AnalysisResult


def _fmt(value: Optional[float], fmt: str = ",.2f") -> str:
    return format(value, fmt) if value is not None else "N/A"


def _fmt_levels(levels: tuple[float, ...]) -> str:
    return ", ".join(f"{v:,.2f}" for v in levels) if levels else "none"


def format_report(symbol: str, result: AnalysisResult) -> str:
    """Format and print the analysis for *symbol*.

    Returns:
        The formatted string (also printed to stdout).
    """
    last = result.bars[-1]
    snap = result.latest
    rec = result.recommendation
    bands = snap.bollinger
    summary = result.summary
    change = (
        f"{summary.change:+,.2f} ({_fmt(summary.change_pct, '+.2f')}%)"
        if summary.change is not None else "N/A"
    )
    ratio = (
        f"{summary.volume_ratio:.1f}x 20-day avg"
        if summary.volume_ratio is not None else "N/A"
    )

    lines = [
        f"──────────────── {symbol.upper()} Analysis ────────────────",
        f"  Date:            {last.date}",
        f"  Close:           {last.close:,.2f}",
        f"  Change:          {change}",
        f"  Volume:          {summary.volume:,.0f} ({ratio})",
        f"  52W High / Low:  {summary.high_52w:,.2f} / {summary.low_52w:,.2f} "
        f"({_fmt(summary.pct_from_high, '+.1f')}% / "
        f"{_fmt(summary.pct_from_low, '+.1f')}%)",
        f"  SMA20 / SMA50:   {_fmt(snap.sma20)} / {_fmt(snap.sma50)}",
        f"  EMA12 / EMA26:   {_fmt(snap.ema12)} / {_fmt(snap.ema26)}",
        f"  RSI(14):         {_fmt(snap.rsi, '.1f')}",
        f"  MACD:            {_fmt(snap.macd, '.3f')} "
        f"(signal {_fmt(snap.macd_signal, '.3f')}, hist {_fmt(snap.macd_histogram, '.3f')})",
        f"  Bollinger:       "
        + (f"{bands.lower:,.2f} / {bands.middle:,.2f} / {bands.upper:,.2f}" if bands else "N/A"),
        f"  Support:         {_fmt_levels(result.levels.support)}",
        f"  Resistance:      {_fmt_levels(result.levels.resistance)}",
        f"  Action:          {rec.action} ({rec.confidence:.0f}% confidence)",
        f"  Stop-loss:       {rec.stop_loss:,.2f}",
        f"  Take-profit:     {rec.take_profit:,.2f}",
        f"  Risk/Reward:     {rec.risk_reward:.2f}",
        "  Reasoning:",
        *(f"    - {line}" for line in rec.reasoning),
        "──────────────────────────────────────────────────",
    ]
    output = "\n".join(lines)
    print(output)
    return output
