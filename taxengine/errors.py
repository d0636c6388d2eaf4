"""Exception types raised by the tax engine."""

from __future__ import annotations


class TaxEngineError(Exception):
    """Base class for errors raised by :mod:`taxengine`."""


class ValidationError(TaxEngineError, ValueError):
    """Raised when input is malformed or out of range.

    Raised before any computation starts so the caller can surface it as a
    form error and let the user resubmit.
    """

    def __init__(self, code: str, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.hint = hint


class TransitionError(ValidationError):
    """Raised when a credit note is moved to a state it cannot reach."""


class InvariantViolation(TaxEngineError, AssertionError):
    """A computed value broke one of the engine's arithmetic invariants.

    Only the ``check_*_invariants`` helpers raise this; production code paths
    never do.
    """
