import logging
from pathlib import Path

from pydantic import TypeAdapter

from stock_charts.models import InstrumentDescriptor

_INSTRUMENT_LIST = TypeAdapter(list[InstrumentDescriptor] | None)


class InstrumentRepository:
  """Persists the watchlist as a single JSON array, rewritten on every save."""

  def __init__(self, storage_file: str | Path = "instruments.json"):
    self.storage_file = Path(storage_file)

  def load_instruments(self) -> list[InstrumentDescriptor]:
    if not self.storage_file.exists():
      return []
    instruments = _INSTRUMENT_LIST.validate_json(
      self.storage_file.read_text(encoding="utf-8")
    )
    return instruments or []

  def save_instruments(self, instruments: list[InstrumentDescriptor]) -> None:
    self.storage_file.parent.mkdir(parents=True, exist_ok=True)
    self.storage_file.write_bytes(_INSTRUMENT_LIST.dump_json(instruments, indent=2))
    logging.debug(f"Saved {len(instruments)} instruments to {self.storage_file}")

  def add_instrument(self, instrument: InstrumentDescriptor) -> list[InstrumentDescriptor]:
    """Appends one instrument to the persisted list and returns the new list."""
    instruments = self.load_instruments()
    instruments.append(instrument)
    self.save_instruments(instruments)
    return instruments

  def has_saved_instruments(self) -> bool:
    return self.storage_file.exists()
