"""
Outcome types - an explicit alternative to catching ``Failure``.

``Context.fail`` aborts a step by raising.  Callers that would rather branch
on a value than wrap every step in ``try/except`` can use :func:`capture`,
which converts the signal into a tagged result::

    Outcome = Ok[context] | Failed[context]

Examples:
    >>> from stepkit import Context
    >>> ctx = Context.build()
    >>> capture(ctx, lambda: None)
    Ok(context=<Context ok>)
    >>> outcome = capture(ctx, ctx.fail, error="boom")
    >>> outcome.is_failed(), outcome.context.error
    (True, 'boom')

Guardrails:
    ``capture`` only converts a ``Failure`` raised for the context it was
    given.  A failure carrying some other context belongs to a different
    step and is re-raised untouched.

Tags:
    result-pattern, outcome, failure-signal, stepkit
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from stepkit.context import Context
from stepkit.core.errors import Failure
from stepkit.core.logging import LogContext


@dataclass(frozen=True, slots=True)
class Ok:
    """The step finished without calling ``fail``."""

    context: Context

    def is_ok(self) -> bool:
        return True

    def is_failed(self) -> bool:
        return False

    def unwrap(self) -> Context:
        """Get the context. Safe for Ok."""
        return self.context

    def to_dict(self) -> dict[str, Any]:
        return {"ok": True, "context": self.context.to_dict()}


@dataclass(frozen=True, slots=True)
class Failed:
    """The step called ``fail``; ``signal`` is the raised ``Failure`` if any."""

    context: Context
    signal: Failure | None = None

    def is_ok(self) -> bool:
        return False

    def is_failed(self) -> bool:
        return True

    def unwrap(self) -> Context:
        """Re-raise the failure signal."""
        raise self.signal or Failure(self.context)

    def to_dict(self) -> dict[str, Any]:
        return {"ok": False, "context": self.context.to_dict()}


Outcome = Ok | Failed


def capture(context: Context, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Outcome:
    """Run ``func(*args, **kwargs)`` and report how ``context`` ended up.

    Log events emitted while ``func`` runs carry ``record_type``.

    Returns:
        ``Failed`` if ``func`` raised a ``Failure`` for ``context`` or left
        it failed, ``Ok`` otherwise.

    Raises:
        Failure: if the failure carries a different context.
    """
    try:
        with LogContext(record_type=type(context).__name__):
            func(*args, **kwargs)
    except Failure as exc:
        if exc.context is not context:
            raise
        return Failed(context, exc)
    return outcome_of(context)


def outcome_of(context: Context) -> Outcome:
    """Tag a context by its current success/failure flag."""
    if context.failure:
        return Failed(context)
    return Ok(context)


__all__ = ["Ok", "Failed", "Outcome", "capture", "outcome_of"]
