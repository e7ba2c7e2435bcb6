"""Result type for explicit error handling.

Every fallible release operation returns ``Ok(value)`` or ``Err(error)``
instead of raising, so a command can decide in one place how to report a
failure and which exit code to use.

Usage:
    match repo.tags():
        case Ok(tags):
            print(f"{len(tags)} releases")
        case Err(e):
            print(f"git failed: {e.message}")

Callers narrow with ``isinstance(result, Err)`` or a ``match`` statement.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """A successful result.

    Attributes:
        value: The success value.
    """

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """A failed result.

    Attributes:
        error: The error value.
    """

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result: TypeAlias = Ok[T] | Err[E]
