from __future__ import annotations

from typing import Any, Type, TypeVar

from applife.core.context import LifecycleContext
from applife.utils.diagnostics import NotStartedYetError

T = TypeVar("T")


class Lookup:
    """Post-start accessor for initialized controllers. Never constructs."""

    def __init__(self, context: LifecycleContext) -> None:
        self.context = context

    def resolve(self, identity: Type[T] | Any) -> T:
        """Return the stored instance for ``identity``.

        Raises NotStartedYetError before the lifecycle has begun and
        NotRegisteredError when the identity has not reached init.
        """
        if not self.context.started:
            raise NotStartedYetError()
        return self.context.instances.get(identity)

    __call__ = resolve
