import pytest
from fakes import API_KEY, FakeClock, FakeSession

from stock_charts.providers.alpha_vantage import AlphaVantageClient
from stock_charts.rate_limiter import RateLimiter


@pytest.fixture
def clock() -> FakeClock:
  return FakeClock()


@pytest.fixture
def limiter(clock) -> RateLimiter:
  return RateLimiter(15.0, clock=clock, sleep=clock.sleep)


@pytest.fixture
def make_client(limiter):
  def _make(*responses, **kwargs) -> tuple[AlphaVantageClient, FakeSession]:
    session = FakeSession(*responses)
    client = AlphaVantageClient(
      API_KEY, rate_limiter=limiter, session=session, **kwargs
    )
    return client, session

  return _make
