from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.dates as mdates  # noqa: E402
import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402

from stock_charts.models import PriceRecord  # noqa: E402

# 600x400 pixels
_FIGSIZE = (6, 4)
_DPI = 100


def daily_chart_filename(symbol: str) -> str:
  return f"{symbol}_daily.png"


def intraday_chart_filename(symbol: str) -> str:
  return f"{symbol}_intraday.png"


COMPARISON_CHART_FILENAME = "comparison_chart.png"


def records_to_frame(records: Sequence[PriceRecord]) -> pd.DataFrame:
  """Builds a DataFrame of closing prices indexed by timestamp.

  Prices stay Decimal everywhere else; this is the only place they become
  floats, since matplotlib cannot plot Decimal.
  """
  df = pd.DataFrame(
    {
      "timestamp": pd.to_datetime([r.timestamp for r in records]),
      "close": [float(r.close) for r in records],
    }
  )
  return df.set_index("timestamp").sort_index()


class ChartRenderer:
  """Renders price series to PNG line charts."""

  def __init__(self, output_dir: str | Path = "."):
    self.output_dir = Path(output_dir)

  def save_stock_chart(
    self,
    filename: str,
    records: Sequence[PriceRecord],
    symbol: str,
    intraday: bool = False,
  ) -> Path:
    if not records:
      raise ValueError(f"No price data to chart for {symbol}.")

    df = records_to_frame(records)
    fig, ax = plt.subplots(figsize=_FIGSIZE, dpi=_DPI)
    try:
      ax.plot(df.index, df["close"])
      kind = "Intraday" if intraday else "Daily"
      ax.set_title(f"{symbol} Stock Price ({kind})")
      return self._finish(fig, ax, filename)
    finally:
      plt.close(fig)

  def save_comparison_chart(
    self, filename: str, series_by_symbol: Mapping[str, Sequence[PriceRecord]]
  ) -> Path:
    if not series_by_symbol:
      raise ValueError("No price data to chart for comparison.")

    fig, ax = plt.subplots(figsize=_FIGSIZE, dpi=_DPI)
    try:
      for symbol, records in series_by_symbol.items():
        if not records:
          logging.warning(f"Leaving {symbol} out of comparison: no data.")
          continue
        df = records_to_frame(records)
        ax.plot(df.index, df["close"], label=symbol)
      ax.set_title("Stock Price Comparison")
      ax.legend()
      return self._finish(fig, ax, filename)
    finally:
      plt.close(fig)

  def _finish(self, fig, ax, filename: str) -> Path:
    ax.set_xlabel("Date")
    ax.set_ylabel("Price ($)")
    locator = mdates.AutoDateLocator()
    ax.xaxis.set_major_locator(locator)
    ax.xaxis.set_major_formatter(mdates.ConciseDateFormatter(locator))
    fig.tight_layout()

    self.output_dir.mkdir(parents=True, exist_ok=True)
    output_path = self.output_dir / filename
    fig.savefig(output_path)
    logging.info(f"Chart successfully written to {output_path}")
    return output_path
