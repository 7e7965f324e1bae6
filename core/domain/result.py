"""Outcome of a user action that can fail in an ordinary way."""

from typing import Generic, TypeVar

ValueT = TypeVar("ValueT")
ErrorT = TypeVar("ErrorT", bound=BaseException)


class Result(Generic[ValueT, ErrorT]):
    """
    Either the value an action produced or the tracker error it hit.

    Returned by `PatientTracker` for an incomplete form, an unknown id or an
    empty export, so the caller chooses what to show instead of catching.
    Build one with `Result.ok` or `Result.err`.
    """

    __slots__ = ("_value", "_error")

    def __init__(self, value: ValueT | None, error: ErrorT | None) -> None:
        self._value = value
        self._error = error

    @classmethod
    def ok(cls, value: ValueT) -> "Result[ValueT, ErrorT]":
        return cls(value, None)

    @classmethod
    def err(cls, error: ErrorT) -> "Result[ValueT, ErrorT]":
        if error is None:
            raise ValueError("an error Result needs an exception")
        return cls(None, error)

    def is_ok(self) -> bool:
        return self._error is None

    def is_err(self) -> bool:
        return not self.is_ok()

    def unwrap(self) -> ValueT:
        """The value, or the carried exception raised."""
        if self._error is not None:
            raise self._error
        return self._value  # type: ignore[return-value]

    def unwrap_err(self) -> ErrorT:
        if self._error is None:
            raise ValueError("unwrap_err() called on a successful Result")
        return self._error

    def __repr__(self) -> str:
        if self._error is None:
            return f"Result.ok({self._value!r})"
        return f"Result.err({self._error!r})"
