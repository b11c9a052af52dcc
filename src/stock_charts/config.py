from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

API_KEY_ENV_VAR = "ALPHA_VANTAGE_API_KEY"
DEFAULT_BASE_URL = "https://www.alphavantage.co/query"


@dataclass(frozen=True)
class Settings:
  api_key: str
  base_url: str = DEFAULT_BASE_URL
  min_request_interval: float = 15.0
  request_timeout: float = 30.0
  instruments_file: Path = Path("instruments.json")
  output_dir: Path = Path(".")
  search_probe: str = "AAPL"
  log_level: str = "INFO"


def _get_float(env_var: str, default: float) -> float:
  raw = os.getenv(env_var)
  if raw is None or raw.strip() == "":
    return default
  try:
    return float(raw)
  except ValueError:
    raise ValueError(f"Env var '{env_var}' must be a number, got '{raw}'") from None


def load_settings() -> Settings:
  """Builds Settings from the environment, reading a .env file first.

  Raises:
    ValueError: If the API key is missing or a numeric value is malformed.
  """
  load_dotenv()

  api_key = os.getenv(API_KEY_ENV_VAR)
  if not api_key:
    raise ValueError(f"Missing required env var '{API_KEY_ENV_VAR}'")

  return Settings(
    api_key=api_key,
    base_url=os.getenv("ALPHA_VANTAGE_BASE_URL", DEFAULT_BASE_URL),
    min_request_interval=_get_float("STOCK_CHARTS_MIN_REQUEST_INTERVAL", 15.0),
    request_timeout=_get_float("STOCK_CHARTS_REQUEST_TIMEOUT", 30.0),
    instruments_file=Path(os.getenv("STOCK_CHARTS_INSTRUMENTS_FILE", "instruments.json")),
    output_dir=Path(os.getenv("STOCK_CHARTS_OUTPUT_DIR", ".")),
    search_probe=os.getenv("STOCK_CHARTS_SEARCH_PROBE", "AAPL"),
    log_level=os.getenv("STOCK_CHARTS_LOG_LEVEL", "INFO").upper(),
  )
