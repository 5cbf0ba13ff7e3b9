"""
Tiny success/failure container used by the image pipeline.

Encode and decode each have exactly one fallback. Capturing the first attempt
as a value keeps that branching explicit instead of nesting try/except blocks:

    attempt(codec.encode, data, catch=ImageEncodeError).unwrap_or_else(fallback)
"""

from dataclasses import dataclass
from typing import Callable, Generic, Tuple, Type, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True

    def or_else(self, fallback: Callable[[Exception], "Result[T]"]) -> "Result[T]":
        return self

    def unwrap_or_else(self, fallback: Callable[[Exception], T]) -> T:
        return self.value

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    error: Exception

    @property
    def ok(self) -> bool:
        return False

    def or_else(self, fallback: Callable[[Exception], "Result[T]"]) -> "Result[T]":
        return fallback(self.error)

    def unwrap_or_else(self, fallback: Callable[[Exception], T]) -> T:
        return fallback(self.error)

    def unwrap(self):
        raise self.error


Result = Union[Ok[T], Err]


def attempt(
    fn: Callable[..., T],
    *args,
    catch: Union[Type[Exception], Tuple[Type[Exception], ...]] = Exception,
    **kwargs,
) -> Result[T]:
    """Call ``fn`` and capture an expected failure as ``Err``; anything else propagates."""
    try:
        return Ok(fn(*args, **kwargs))
    except catch as exc:
        return Err(exc)
