from __future__ import annotations

import functools
import logging
import sys

import click

from stock_charts.charts import ChartRenderer
from stock_charts.config import Settings, load_settings
from stock_charts.controller import ChartApp
from stock_charts.providers.alpha_vantage import AlphaVantageClient
from stock_charts.rate_limiter import RateLimiter
from stock_charts.store import InstrumentRepository

# --- Error Handling Decorator ---


def cli_error_handler(func):
  """Decorator to handle common CLI errors, log them, and exit."""

  @functools.wraps(func)
  def wrapper(*args, **kwargs):
    try:
      return func(*args, **kwargs)
    except (ValueError, TypeError) as e:
      logging.error(f"Error: {e}")
      sys.exit(1)
    except click.exceptions.Abort:
      raise
    except Exception as e:
      logging.error(f"An unexpected error occurred: {e}", exc_info=True)
      sys.exit(1)

  return wrapper


# --- Private Helpers ---


def _configure_logging(level: str) -> None:
  logging.basicConfig(
    level=getattr(logging, level, logging.INFO),
    format="%(asctime)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
  )


def build_app(settings: Settings) -> ChartApp:
  """Wires the client, store and renderer described by the settings."""
  client = AlphaVantageClient(
    settings.api_key,
    base_url=settings.base_url,
    rate_limiter=RateLimiter(settings.min_request_interval),
    timeout=settings.request_timeout,
    search_probe=settings.search_probe,
  )
  return ChartApp(
    client=client,
    repository=InstrumentRepository(settings.instruments_file),
    renderer=ChartRenderer(settings.output_dir),
  )


# --- CLI Command ---


@click.command()
@cli_error_handler
def cli():
  """Search instruments, keep a watchlist and chart their prices."""
  _configure_logging("INFO")
  settings = load_settings()
  logging.getLogger().setLevel(getattr(logging, settings.log_level, logging.INFO))

  logging.debug(f"Using instruments file: {settings.instruments_file}")
  build_app(settings).run()


if __name__ == "__main__":
  cli()
