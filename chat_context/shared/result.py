"""Tagged success/failure results returned by every backend operation."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure:
    reason: str
    error: Optional[BaseException] = None


Result = Union[Success[T], Failure]


__all__ = ["Failure", "Result", "Success"]
