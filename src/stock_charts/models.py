from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


def is_valid_date_range(start_date: date | None, end_date: date | None) -> bool:
  """Returns True when both dates are set and start_date <= end_date."""
  if start_date is None or end_date is None:
    return False
  return start_date <= end_date


class PriceRecord(BaseModel):
  """Represents a single OHLCV sample with exact decimal prices."""

  model_config = ConfigDict(frozen=True)

  # date for daily sessions, datetime for intraday bucket starts
  timestamp: datetime | date
  open: Decimal = Decimal("0")
  high: Decimal = Decimal("0")
  low: Decimal = Decimal("0")
  close: Decimal = Decimal("0")
  volume: int = Field(default=0, ge=0)

  def __str__(self) -> str:
    stamp = self.timestamp.strftime("%Y-%m-%d %H:%M")
    return (
      f"[{stamp}] O:{self.open:.2f} H:{self.high:.2f} L:{self.low:.2f} "
      f"C:{self.close:.2f} V:{self.volume}"
    )


class InstrumentDescriptor(BaseModel):
  """A tracked instrument and the date range the user wants charted."""

  symbol: str = Field(min_length=1)
  display_name: str = ""
  start_date: date | None = None
  end_date: date | None = None
  historical_series: list[PriceRecord] = Field(default_factory=list, exclude=True)

  @classmethod
  def create(
    cls,
    symbol: str,
    display_name: str,
    start_date: date | None,
    end_date: date | None,
  ) -> InstrumentDescriptor:
    """Builds a descriptor, rejecting unset or inverted date ranges.

    Raises:
      ValueError: If either date is missing or start_date > end_date.
    """
    if not is_valid_date_range(start_date, end_date):
      raise ValueError(
        f"Invalid date range for {symbol}: {start_date} to {end_date}."
      )
    return cls(
      symbol=symbol, display_name=display_name, start_date=start_date, end_date=end_date
    )

  def is_valid_date_range(self) -> bool:
    return is_valid_date_range(self.start_date, self.end_date)

  def __str__(self) -> str:
    return f"{self.symbol} - {self.display_name} ({self.start_date} to {self.end_date})"
