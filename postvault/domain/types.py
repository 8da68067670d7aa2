from dataclasses import dataclass
from typing import Generic, Literal, TypeVar

T = TypeVar("T")

# Expected business outcomes; infrastructure failures raise instead.
Reason = Literal["slug_exists", "not_found"]


@dataclass(frozen=True)
class Result(Generic[T]):
    ok: bool
    value: T | None = None
    reason: Reason | None = None

    @staticmethod
    def success(v: T) -> "Result[T]":
        return Result(ok=True, value=v)

    @staticmethod
    def failure(reason: Reason) -> "Result[T]":
        return Result(ok=False, reason=reason)
