"""
Stepkit — typed execution contexts for business-logic steps.

A step type declares the fields it works with; each declaration layers a new
record type on top of the previous one.  At run time the step gets a
``Context`` of that type, reads and writes fields directly, and calls
``context.fail(...)`` to abort.

Example:
    from stepkit import Step, Failure

    class ChargeCard(Step):
        def call(self):
            if self.amount > self.limit:
                self.context.fail(error="over limit")

    ChargeCard.receive("amount", currency="USD", limit=1_000)

    step = ChargeCard(amount=5_000)
    try:
        step.call()
    except Failure as exc:
        exc.context.to_dict()
        # {'error': 'over limit', 'amount': 5000, 'currency': 'USD', 'limit': 1000}

MODULE MAP
──────────
1. core/errors.py    ─ error hierarchy + Failure signal
2. schema.py         ─ FieldSpec / SchemaLayer / Schema / FieldAccessor
3. context.py        ─ the Context record
4. declaration.py    ─ receive() / hold() on step types
5. step.py           ─ Step base class
6. core/result.py    ─ Ok / Failed outcomes
"""

__version__ = "0.1.0"

from stepkit.context import Context
from stepkit.core.errors import (
    Failure,
    InvalidFieldNameError,
    MissingFieldsError,
    SchemaConflictError,
    SchemaError,
    StepkitError,
)
from stepkit.core.result import Failed, Ok, Outcome, capture, outcome_of
from stepkit.declaration import ContextField, Declaration
from stepkit.schema import FieldKind, FieldSpec, Schema, SchemaLayer
from stepkit.step import Step

__all__ = [
    "Context",
    "ContextField",
    "Declaration",
    "Failed",
    "Failure",
    "FieldKind",
    "FieldSpec",
    "InvalidFieldNameError",
    "MissingFieldsError",
    "Ok",
    "Outcome",
    "Schema",
    "SchemaConflictError",
    "SchemaError",
    "SchemaLayer",
    "Step",
    "StepkitError",
    "capture",
    "outcome_of",
]
