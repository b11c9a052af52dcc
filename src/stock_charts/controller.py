from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date

import click
from dateutil import parser as date_parser
from pydantic import ValidationError

from stock_charts.charts import (
  COMPARISON_CHART_FILENAME,
  ChartRenderer,
  daily_chart_filename,
  intraday_chart_filename,
)
from stock_charts.models import InstrumentDescriptor, PriceRecord
from stock_charts.providers.alpha_vantage import AlphaVantageClient
from stock_charts.store import InstrumentRepository

MENU = """
Stock Chart Application
1. Search and Add Instrument
2. View Saved Instruments
3. Generate Charts for Saved Instruments
4. Compare Multiple Stocks
5. Exit"""


def _parse_user_date(text: str) -> date | None:
  """Parses a date typed at the prompt; None if it is not a date."""
  if not text or not text.strip():
    return None
  try:
    return date_parser.parse(text.strip()).date()
  except (ValueError, OverflowError):
    return None


class ChartApp:
  """Interactive menu wiring search, the saved watchlist and chart output."""

  def __init__(
    self,
    client: AlphaVantageClient,
    repository: InstrumentRepository,
    renderer: ChartRenderer,
    prompt: Callable[..., str] = click.prompt,
    echo: Callable[..., None] = click.echo,
  ):
    self.client = client
    self.repository = repository
    self.renderer = renderer
    self._prompt = prompt
    self._echo = echo

    self._actions: dict[str, Callable[[], None]] = {
      "1": self.search_and_add_instrument,
      "2": self.view_saved_instruments,
      "3": self.generate_charts,
      "4": self.compare_stocks,
    }

  def _ask(self, text: str) -> str:
    return self._prompt(text, default="", show_default=False).strip()

  def _load_instruments(self) -> list[InstrumentDescriptor] | None:
    """Loads the watchlist; None (after reporting) if the file is unreadable."""
    try:
      return self.repository.load_instruments()
    except (OSError, ValidationError) as e:
      logging.error(f"Could not read {self.repository.storage_file}: {e}")
      self._echo(f"Could not read saved instruments from {self.repository.storage_file}.")
      return None

  def run(self) -> None:
    """Loops over the menu until the user exits or enters nothing."""
    while True:
      self._echo(MENU)
      choice = self._ask("\nSelect an option")
      if not choice or choice == "5":
        return

      action = self._actions.get(choice)
      if action is None:
        self._echo("Invalid option.")
        continue
      action()

  # --- Menu Actions ---

  def search_and_add_instrument(self) -> InstrumentDescriptor | None:
    keyword = self._ask("Enter search keyword")
    if not keyword:
      return None

    self._echo("\nSearching for instruments...")
    candidates = list(self.client.search_instruments(keyword).items())
    if not candidates:
      self._echo("No instruments found.")
      return None

    self._echo("\nFound instruments:")
    for i, (symbol, name) in enumerate(candidates, start=1):
      self._echo(f"{i}. {symbol} - {name}")

    raw_selection = self._ask("\nSelect instrument number to add (or 0 to cancel)")
    try:
      selection = int(raw_selection)
    except ValueError:
      selection = -1
    if selection < 0 or selection > len(candidates):
      self._echo("Invalid selection.")
      return None
    if selection == 0:
      return None

    symbol, name = candidates[selection - 1]

    start_date = _parse_user_date(self._ask("Enter start date (yyyy-MM-dd)"))
    if start_date is None:
      self._echo("Invalid date format.")
      return None
    end_date = _parse_user_date(self._ask("Enter end date (yyyy-MM-dd)"))
    if end_date is None:
      self._echo("Invalid date format.")
      return None

    try:
      instrument = InstrumentDescriptor.create(symbol, name, start_date, end_date)
    except ValueError:
      self._echo("Invalid date range: start date must not be after end date.")
      return None

    try:
      self.repository.add_instrument(instrument)
    except (OSError, ValidationError) as e:
      logging.error(f"Could not save {instrument.symbol}: {e}")
      self._echo(f"Could not save {instrument.symbol} to saved instruments.")
      return None
    self._echo(f"\nAdded {instrument.symbol} to saved instruments.")
    return instrument

  def view_saved_instruments(self) -> None:
    instruments = self._load_instruments()
    if instruments is None:
      return
    if not instruments:
      self._echo("No saved instruments found.")
      return

    self._echo("Saved Instruments:")
    for instrument in instruments:
      self._echo(f"- {instrument.symbol} ({instrument.display_name})")
      self._echo(f"  Date Range: {instrument.start_date} to {instrument.end_date}")

  def generate_charts(self) -> None:
    instruments = self._load_instruments()
    if instruments is None:
      return
    if not instruments:
      self._echo("No saved instruments found.")
      return

    self._echo("Generating charts for saved instruments...")
    for instrument in instruments:
      self._echo(f"\nFetching data for {instrument.symbol}...")
      try:
        self._chart_instrument(instrument)
      except (OSError, ValueError) as e:
        logging.error(f"Error generating chart for {instrument.symbol}: {e}")
        self._echo(f"Error generating chart for {instrument.symbol}: {e}")

  def _chart_instrument(self, instrument: InstrumentDescriptor) -> None:
    if not instrument.is_valid_date_range():
      self._echo(f"Skipping {instrument.symbol}: invalid date range.")
      return

    historical = self.client.fetch_historical(
      instrument.symbol, instrument.start_date, instrument.end_date
    )
    if not historical:
      self._echo(f"No data available for {instrument.symbol}")
      return

    path = self.renderer.save_stock_chart(
      daily_chart_filename(instrument.symbol), historical, instrument.symbol
    )
    self._echo(f"Chart saved as {path}")

    intraday = self.client.fetch_intraday(instrument.symbol)
    if intraday:
      path = self.renderer.save_stock_chart(
        intraday_chart_filename(instrument.symbol),
        intraday,
        instrument.symbol,
        intraday=True,
      )
      self._echo(f"Intraday chart saved as {path}")

  def compare_stocks(self) -> None:
    instruments = self._load_instruments()
    if instruments is None:
      return
    if len(instruments) < 2:
      self._echo("Need at least 2 saved instruments for comparison.")
      return

    self._echo("Fetching data for comparison...")
    stocks_data: dict[str, list[PriceRecord]] = {}
    for instrument in instruments:
      self._echo(f"Fetching data for {instrument.symbol}...")
      if not instrument.is_valid_date_range():
        self._echo(f"Skipping {instrument.symbol}: invalid date range.")
        continue
      historical = self.client.fetch_historical(
        instrument.symbol, instrument.start_date, instrument.end_date
      )
      if historical:
        stocks_data[instrument.symbol] = historical

    if len(stocks_data) < 2:
      self._echo("\nNot enough data available for comparison.")
      return

    try:
      path = self.renderer.save_comparison_chart(COMPARISON_CHART_FILENAME, stocks_data)
    except (OSError, ValueError) as e:
      logging.error(f"Error generating comparison chart: {e}")
      self._echo(f"Error generating comparison chart: {e}")
      return
    self._echo(f"\nComparison chart saved as {path}")
