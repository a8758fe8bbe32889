"""Step — base class for a unit of business logic that owns a context schema.

Running a step, chaining steps and rolling back are left to the caller;
this class only binds an instance to its context so declared fields are
reachable directly on ``self``.

Example::

    class PlaceOrder(Step):
        def call(self):
            if self.quantity <= 0:
                self.context.fail(error="quantity must be positive")
            self.order_id = f"order-{self.sku}"

    PlaceOrder.receive("sku", quantity=1)
    PlaceOrder.hold("order_id")

    step = PlaceOrder({"sku": "ABC"})
    step.call()
    step.context.to_dict()
    # {'error': None, 'sku': 'ABC', 'quantity': 1, 'order_id': 'order-ABC'}
"""

from __future__ import annotations

from typing import Any

from stepkit.context import Context
from stepkit.declaration import Declaration


class Step(Declaration):
    """A step instance bound to one context.

    Args:
        context: Input passed to ``context_class.build``: a mapping, an
            existing ``Context`` (reused as-is), or None.
        **fields: Extra fields merged over ``context``.
    """

    def __init__(self, context: Any = None, /, **fields: Any):
        self.context: Context = type(self).context_class.build(context, **fields)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(context={self.context!r})"


__all__ = ["Step"]
