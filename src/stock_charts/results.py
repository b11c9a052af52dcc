from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Generic, TypeVar

T = TypeVar("T")


class FetchStatus(Enum):
  OK = auto()
  EMPTY = auto()
  RATE_LIMITED = auto()
  PROVIDER_ERROR = auto()
  TRANSPORT_ERROR = auto()


@dataclass(frozen=True)
class FetchResult(Generic[T]):
  """Outcome of a single market-data request.

  `data` is always usable: on any failure it holds an empty container, so
  callers that only care about the payload can ignore `status`.
  """

  status: FetchStatus
  data: T
  detail: str | None = None

  @property
  def ok(self) -> bool:
    return self.status is FetchStatus.OK

  @classmethod
  def success(cls, data: T) -> FetchResult[T]:
    status = FetchStatus.OK if data else FetchStatus.EMPTY
    return cls(status=status, data=data)

  @classmethod
  def failure(cls, status: FetchStatus, empty: T, detail: str | None = None) -> FetchResult[T]:
    return cls(status=status, data=empty, detail=detail)
