from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum, auto
from typing import Any

import requests

from stock_charts.config import DEFAULT_BASE_URL
from stock_charts.models import PriceRecord
from stock_charts.rate_limiter import RateLimiter
from stock_charts.results import FetchResult, FetchStatus

# --- Module-level Constants ---
_SEARCH_CONTAINER = "bestMatches"
_DAILY_CONTAINER = "Time Series (Daily)"
_INTRADAY_CONTAINER = "Time Series (5min)"
_INTRADAY_INTERVAL = "5min"
_RATE_LIMIT_KEYS = ("Note", "Information")
_ERROR_KEY = "Error Message"

_PRICE_FIELDS = {
  "open": "1. open",
  "high": "2. high",
  "low": "3. low",
  "close": "4. close",
}
_VOLUME_FIELD = "5. volume"


class MalformedSamplePolicy(Enum):
  """What to do with a sample whose numeric fields are absent or unparsable."""

  DEFAULT = auto()  # keep the sample, substituting 0 for each bad field
  SKIP = auto()  # drop the sample


# --- Private Parsing Helpers ---


def _parse_decimal(value: Any) -> Decimal | None:
  if value is None:
    return None
  try:
    parsed = Decimal(str(value).strip())
  except InvalidOperation:
    return None
  return parsed if parsed.is_finite() else None


def _parse_volume(value: Any) -> int | None:
  if value is None:
    return None
  try:
    parsed = int(str(value).strip())
  except ValueError:
    return None
  return parsed if parsed >= 0 else None


def _parse_timestamp(raw: str, intraday: bool) -> datetime | date | None:
  try:
    parsed = datetime.fromisoformat(raw.strip())
  except (AttributeError, ValueError):
    return None
  return parsed if intraday else parsed.date()


def _as_date(value: date | str) -> date:
  if isinstance(value, datetime):
    return value.date()
  if isinstance(value, date):
    return value
  return date.fromisoformat(value)


def _map_api_sample_to_record(
  timestamp: datetime | date, sample: dict, policy: MalformedSamplePolicy
) -> PriceRecord | None:
  """Maps one Alpha Vantage time-series entry to a PriceRecord.

  Returns None only when the policy is SKIP and a field could not be parsed.
  """
  values: dict[str, Any] = {
    name: _parse_decimal(sample.get(key)) for name, key in _PRICE_FIELDS.items()
  }
  values["volume"] = _parse_volume(sample.get(_VOLUME_FIELD))

  bad_fields = [name for name, value in values.items() if value is None]
  if bad_fields:
    if policy is MalformedSamplePolicy.SKIP:
      logging.warning(
        f"Skipping sample at {timestamp} due to malformed fields: {', '.join(bad_fields)}"
      )
      return None
    logging.debug(f"Defaulting malformed fields at {timestamp}: {', '.join(bad_fields)}")
    for name in bad_fields:
      values[name] = 0 if name == "volume" else Decimal("0")

  return PriceRecord(timestamp=timestamp, **values)


class AlphaVantageClient:
  """Paced client for the Alpha Vantage quote API.

  Every public operation returns an empty container instead of raising when
  the request fails; the `*_result` variants expose why.
  """

  def __init__(
    self,
    api_key: str,
    *,
    base_url: str = DEFAULT_BASE_URL,
    rate_limiter: RateLimiter | None = None,
    session: requests.Session | None = None,
    timeout: float = 30,
    search_probe: str = "AAPL",
    malformed_policy: MalformedSamplePolicy = MalformedSamplePolicy.DEFAULT,
  ):
    if not api_key:
      raise ValueError("Alpha Vantage client requires an API key.")

    self._api_key = api_key
    self._base_url = base_url
    self._session = session or requests.Session()
    self._timeout = timeout
    self.rate_limiter = rate_limiter or RateLimiter()
    self.search_probe = search_probe
    self.malformed_policy = malformed_policy

  # --- Public Operations ---

  def search_instruments(self, keyword: str) -> dict[str, str]:
    return self.search_instruments_result(keyword).data

  def fetch_historical(
    self, symbol: str, start_date: date | str, end_date: date | str
  ) -> list[PriceRecord]:
    return self.fetch_historical_result(symbol, start_date, end_date).data

  def fetch_intraday(self, symbol: str) -> list[PriceRecord]:
    return self.fetch_intraday_result(symbol).data

  def search_instruments_result(self, keyword: str) -> FetchResult[dict[str, str]]:
    """Searches instruments and filters the matches locally by keyword.

    The remote query always uses `search_probe`; `keyword` only narrows the
    candidates the provider returned for it, matching symbol or name
    case-insensitively.
    """
    raw = self._get_container(
      "symbol search",
      {"function": "SYMBOL_SEARCH", "keywords": self.search_probe},
      _SEARCH_CONTAINER,
      list,
    )
    if not raw.ok:
      return FetchResult.failure(raw.status, {}, raw.detail)

    needle = (keyword or "").strip().casefold()
    matches: dict[str, str] = {}
    for match in raw.data:
      if not isinstance(match, dict):
        continue
      symbol = match.get("1. symbol")
      name = match.get("2. name")
      if not symbol or not name:
        continue
      symbol, name = str(symbol), str(name)
      if needle and needle not in symbol.casefold() and needle not in name.casefold():
        continue
      matches[symbol] = name
    return FetchResult.success(matches)

  def fetch_historical_result(
    self, symbol: str, start_date: date | str, end_date: date | str
  ) -> FetchResult[list[PriceRecord]]:
    """Fetches the full daily series and keeps [start_date, end_date]."""
    try:
      start, end = _as_date(start_date), _as_date(end_date)
    except (TypeError, ValueError) as e:
      logging.error(
        f"Invalid date range for {symbol}: {start_date!r} to {end_date!r} ({e})"
      )
      return FetchResult.failure(FetchStatus.PROVIDER_ERROR, [], f"invalid date: {e}")

    raw = self._get_container(
      f"historical data for {symbol}",
      {"function": "TIME_SERIES_DAILY", "symbol": symbol, "outputsize": "full"},
      _DAILY_CONTAINER,
      dict,
    )
    if not raw.ok:
      return FetchResult.failure(raw.status, [], raw.detail)

    records = self._normalize_series(
      raw.data, intraday=False, keep=lambda ts: start <= ts <= end
    )
    return FetchResult.success(records)

  def fetch_intraday_result(self, symbol: str) -> FetchResult[list[PriceRecord]]:
    """Fetches the provider's default window of 5-minute bars."""
    raw = self._get_container(
      f"intraday data for {symbol}",
      {
        "function": "TIME_SERIES_INTRADAY",
        "symbol": symbol,
        "interval": _INTRADAY_INTERVAL,
      },
      _INTRADAY_CONTAINER,
      dict,
    )
    if not raw.ok:
      return FetchResult.failure(raw.status, [], raw.detail)

    return FetchResult.success(self._normalize_series(raw.data, intraday=True))

  # --- Private Helpers ---

  def _redact(self, text: str) -> str:
    return text.replace(self._api_key, "***")

  def _get_container(
    self, operation: str, params: dict[str, str], container_key: str, container_type: type
  ) -> FetchResult[Any]:
    """Issues one paced request and classifies the response body."""
    self.rate_limiter.wait()
    try:
      response = self._session.get(
        self._base_url,
        params={**params, "apikey": self._api_key},
        timeout=self._timeout,
      )
      response.raise_for_status()
      payload = response.json()
    except requests.exceptions.RequestException as e:
      detail = self._redact(str(e))
      logging.error(f"HTTP error fetching {operation} from Alpha Vantage: {detail}")
      return FetchResult.failure(FetchStatus.TRANSPORT_ERROR, None, detail)
    except ValueError as e:
      detail = self._redact(str(e))
      logging.error(f"Failed to decode {operation} response from Alpha Vantage: {detail}")
      return FetchResult.failure(FetchStatus.TRANSPORT_ERROR, None, detail)

    return self._classify(operation, payload, container_key, container_type)

  def _classify(
    self, operation: str, payload: Any, container_key: str, container_type: type
  ) -> FetchResult[Any]:
    if not isinstance(payload, dict):
      logging.error(f"Unexpected {operation} response from Alpha Vantage: {payload!r}")
      return FetchResult.failure(FetchStatus.PROVIDER_ERROR, None, "unexpected response")

    container = payload.get(container_key)
    if isinstance(container, container_type):
      return FetchResult(status=FetchStatus.OK, data=container)

    for key in _RATE_LIMIT_KEYS:
      if key in payload:
        notice = str(payload[key])
        logging.warning(
          f"API rate limit reached while fetching {operation}. "
          f"Please wait a moment and try again. ({notice})"
        )
        self.rate_limiter.penalize()
        return FetchResult.failure(FetchStatus.RATE_LIMITED, None, notice)

    if _ERROR_KEY in payload:
      message = str(payload[_ERROR_KEY])
      logging.error(f"API error while fetching {operation}: {message}")
      return FetchResult.failure(FetchStatus.PROVIDER_ERROR, None, message)

    logging.warning(
      f"Alpha Vantage response for {operation} had no '{container_key}' data. "
      f"Keys: {sorted(payload)}"
    )
    return FetchResult.failure(FetchStatus.PROVIDER_ERROR, None, "unexpected response")

  def _normalize_series(
    self, series: dict, intraday: bool, keep=lambda ts: True
  ) -> list[PriceRecord]:
    """Converts a time-series container into records sorted by timestamp."""
    records = []
    for raw_ts, sample in series.items():
      timestamp = _parse_timestamp(raw_ts, intraday)
      if timestamp is None or not isinstance(sample, dict) or not keep(timestamp):
        continue
      record = _map_api_sample_to_record(timestamp, sample, self.malformed_policy)
      if record is not None:
        records.append(record)
    return sorted(records, key=lambda r: r.timestamp)
