from pathlib import Path

import pytest

from stock_charts import config
from stock_charts.config import DEFAULT_BASE_URL, load_settings

_ENV_VARS = [
  "ALPHA_VANTAGE_API_KEY",
  "ALPHA_VANTAGE_BASE_URL",
  "STOCK_CHARTS_MIN_REQUEST_INTERVAL",
  "STOCK_CHARTS_REQUEST_TIMEOUT",
  "STOCK_CHARTS_INSTRUMENTS_FILE",
  "STOCK_CHARTS_OUTPUT_DIR",
  "STOCK_CHARTS_SEARCH_PROBE",
  "STOCK_CHARTS_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
  monkeypatch.setattr(config, "load_dotenv", lambda: None)
  for name in _ENV_VARS:
    monkeypatch.delenv(name, raising=False)


def test_missing_api_key_is_fatal():
  with pytest.raises(ValueError, match="ALPHA_VANTAGE_API_KEY"):
    load_settings()


def test_defaults(monkeypatch):
  monkeypatch.setenv("ALPHA_VANTAGE_API_KEY", "demo")

  settings = load_settings()

  assert settings.api_key == "demo"
  assert settings.base_url == DEFAULT_BASE_URL
  assert settings.min_request_interval == 15.0
  assert settings.request_timeout == 30.0
  assert settings.instruments_file == Path("instruments.json")
  assert settings.output_dir == Path(".")
  assert settings.search_probe == "AAPL"
  assert settings.log_level == "INFO"


def test_overrides(monkeypatch):
  monkeypatch.setenv("ALPHA_VANTAGE_API_KEY", "demo")
  monkeypatch.setenv("STOCK_CHARTS_MIN_REQUEST_INTERVAL", "1.5")
  monkeypatch.setenv("STOCK_CHARTS_INSTRUMENTS_FILE", "data/watch.json")
  monkeypatch.setenv("STOCK_CHARTS_LOG_LEVEL", "debug")

  settings = load_settings()

  assert settings.min_request_interval == 1.5
  assert settings.instruments_file == Path("data/watch.json")
  assert settings.log_level == "DEBUG"


def test_malformed_number_is_fatal(monkeypatch):
  monkeypatch.setenv("ALPHA_VANTAGE_API_KEY", "demo")
  monkeypatch.setenv("STOCK_CHARTS_REQUEST_TIMEOUT", "soon")

  with pytest.raises(ValueError, match="STOCK_CHARTS_REQUEST_TIMEOUT"):
    load_settings()
