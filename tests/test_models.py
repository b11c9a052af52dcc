from datetime import date, datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from stock_charts.models import InstrumentDescriptor, PriceRecord, is_valid_date_range


@pytest.mark.parametrize(
  "start,end,expected",
  [
    (date(2023, 1, 1), date(2023, 1, 31), True),
    (date(2023, 1, 1), date(2023, 1, 1), True),
    (date(2023, 2, 1), date(2023, 1, 1), False),
    (None, date(2023, 1, 1), False),
    (date(2023, 1, 1), None, False),
    (None, None, False),
  ],
)
def test_is_valid_date_range(start, end, expected):
  assert is_valid_date_range(start, end) is expected
  descriptor = InstrumentDescriptor(symbol="IBM", start_date=start, end_date=end)
  assert descriptor.is_valid_date_range() is expected


def test_create_rejects_inverted_range():
  with pytest.raises(ValueError):
    InstrumentDescriptor.create("IBM", "IBM Corp", date(2023, 2, 1), date(2023, 1, 1))


def test_create_rejects_unset_date():
  with pytest.raises(ValueError):
    InstrumentDescriptor.create("IBM", "IBM Corp", date(2023, 2, 1), None)


def test_create_builds_descriptor():
  descriptor = InstrumentDescriptor.create(
    "IBM", "IBM Corp", date(2023, 1, 1), date(2023, 3, 1)
  )

  assert descriptor.symbol == "IBM"
  assert str(descriptor) == "IBM - IBM Corp (2023-01-01 to 2023-03-01)"


def test_symbol_must_not_be_empty():
  with pytest.raises(ValidationError):
    InstrumentDescriptor(symbol="")


def test_historical_series_is_not_serialized():
  record = PriceRecord(timestamp=date(2023, 1, 3), close=Decimal("1"))
  descriptor = InstrumentDescriptor(symbol="IBM", historical_series=[record])

  assert "historical_series" not in descriptor.model_dump()


def test_price_record_rejects_negative_volume():
  with pytest.raises(ValidationError):
    PriceRecord(timestamp=date(2023, 1, 3), volume=-1)


def test_price_record_keeps_exact_decimals():
  record = PriceRecord(
    timestamp=date(2023, 1, 3),
    open=Decimal("0.1"),
    close=Decimal("0.2"),
  )

  assert record.open + record.close == Decimal("0.3")


def test_price_record_str():
  record = PriceRecord(
    timestamp=datetime(2023, 1, 3, 15, 55),
    open=Decimal("10.5"),
    high=Decimal("11"),
    low=Decimal("10"),
    close=Decimal("10.756"),
    volume=1000,
  )

  assert str(record) == "[2023-01-03 15:55] O:10.50 H:11.00 L:10.00 C:10.76 V:1000"


def test_price_record_keeps_timestamp_kind():
  daily = PriceRecord(timestamp=date(2023, 1, 3))
  intraday = PriceRecord(timestamp=datetime(2023, 1, 3, 9, 35))

  assert type(daily.timestamp) is date
  assert type(intraday.timestamp) is datetime
