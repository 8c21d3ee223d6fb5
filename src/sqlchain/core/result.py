"""
Outcome of a chain run: ``Ok(state)`` or ``Err(error)``.

``Chain.run()`` never raises for a failed step. It closes the connection,
reports the error, and hands it back wrapped in ``Err`` so the caller decides
whether to recover, inspect or re-raise.

Manifesto:
    - **Explicit outcome:** A run is either the final state or the error that stopped it
    - **Original exception:** ``Err`` keeps the raised object; ``unwrap()`` re-raises it
    - **Pattern matching:** Both variants are dataclasses, so ``match`` works

Examples:
    >>> match chain.run():
    ...     case Ok(state):
    ...         rows = state.cursor
    ...     case Err(MissingColumnError() as error):
    ...         print(error.columns)
    ...     case Err(error):
    ...         raise error

    >>> try_result(lambda: Database.open("chinook.db", "ro")).is_ok()
    True

Guardrails:
    ❌ DON'T: ``unwrap()`` a result you have not matched on
    ✅ DO: ``unwrap_or(default)`` when a fallback value makes sense

Tags:
    result-pattern, error-handling, chain, sqlchain

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from sqlchain.core.errors import SqlChainError

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """A run that completed; ``value`` is its final state."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, f: Callable[[T], U]) -> Result[U]:
        """``Ok(f(value))``."""
        return Ok(f(self.value))

    def flat_map(self, f: Callable[[T], Result[U]]) -> Result[U]:
        """``f(value)``, for steps that themselves return a result."""
        return f(self.value)

    def inspect(self, f: Callable[[T], Any]) -> Result[T]:
        f(self.value)
        return self

    def inspect_err(self, f: Callable[[Exception], Any]) -> Result[T]:
        return self

    def to_dict(self) -> dict[str, Any]:
        return {"ok": True, "value": self.value}

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """
    A run that stopped; ``error`` is the exception raised by the failing step.

    Transformations pass the error through untouched.
    """

    error: Exception

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Re-raise the original exception."""
        raise self.error

    def unwrap_or(self, default: T) -> T:
        return default

    def map(self, f: Callable[[T], U]) -> Result[U]:
        return Err(self.error)

    def flat_map(self, f: Callable[[T], Result[U]]) -> Result[U]:
        return Err(self.error)

    def inspect(self, f: Callable[[T], Any]) -> Result[T]:
        return self

    def inspect_err(self, f: Callable[[Exception], Any]) -> Result[T]:
        f(self.error)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Serialized form; sqlchain errors contribute their category and context."""
        if isinstance(self.error, SqlChainError):
            details = self.error.to_dict()
        else:
            details = {"error_type": type(self.error).__name__, "message": str(self.error)}
        return {"ok": False, "error": details}

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Ok[T] | Err[T]


def try_result(
    f: Callable[[], T],
    *,
    error_mapper: Callable[[Exception], Exception] | None = None,
) -> Result[T]:
    """
    Call ``f()`` and wrap the outcome.

    An exception becomes ``Err``, optionally converted by ``error_mapper``
    first (for example a driver error into a :class:`SqlChainError`).

    Examples:
        >>> try_result(lambda: int("42"))
        Ok(42)
        >>> try_result(lambda: int("x"), error_mapper=lambda e: SanitizeError(str(e))).is_err()
        True
    """
    try:
        return Ok(f())
    except Exception as e:
        return Err(error_mapper(e) if error_mapper is not None else e)


__all__ = [
    "Result",
    "Ok",
    "Err",
    "try_result",
]
