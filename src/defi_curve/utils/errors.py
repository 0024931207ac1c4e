from typing import Any, Optional


class CurveError(ValueError):
    """Base class for every error raised by the curve math and address tooling."""


class DomainError(CurveError):
    """An input lies outside the domain of the operation (negative root, price below apex)."""


class NoSolutionError(CurveError):
    """No integer reserve pair (or salt within the attempt cap) satisfies the request."""


class NotOnCurveError(CurveError):
    """A point that had to be on or above the curve is below it."""


class InvalidPriceError(CurveError):
    """A human-typed price could not be turned into a positive finite number."""


class SolveResult:
    """
    Tagged outcome of a reserve solve.

    Exactly one of ``value`` and ``error`` is set. ``ok`` tells which.

    Attributes:
        value (Optional[Any]): The solved value, usually a ``(reserve0, reserve1)`` tuple.
        error (Optional[CurveError]): The failure, a ``DomainError`` or ``NoSolutionError``.
    """

    __slots__ = ("value", "error")

    def __init__(self, value: Optional[Any] = None, error: Optional[CurveError] = None):
        if (value is None) == (error is None):
            raise ValueError("SolveResult needs exactly one of value or error")
        self.value = value
        self.error = error

    @classmethod
    def success(cls, value: Any) -> "SolveResult":
        return cls(value=value)

    @classmethod
    def failure(cls, error: CurveError) -> "SolveResult":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        """Return the value, or raise the stored error."""
        if self.error is not None:
            raise self.error
        return self.value

    def __repr__(self) -> str:
        if self.ok:
            return f"SolveResult.success({self.value!r})"
        return f"SolveResult.failure({self.error!r})"
