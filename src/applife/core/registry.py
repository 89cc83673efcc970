import inspect
import typing
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from applife.core.models import BundleDeclaration, ComponentDeclaration
from applife.core.naming import identity_name
from applife.utils.diagnostics import (
    DeclarationError,
    DuplicateDeclarationError,
    LifecycleAlreadyStartedError,
    UnknownIdentityError,
)


def infer_dependencies(factory: Callable[..., Any]) -> Tuple[Any, ...]:
    """
    Read a dependency list from a constructor signature.

    Every parameter without a default, in order, is a dependency and must be
    annotated with its type. Parameters with defaults are left to the factory.
    """
    if isinstance(factory, type):
        if factory.__init__ is object.__init__:
            return ()
        target = factory.__init__
        skip_first = True
    else:
        target = factory
        skip_first = False

    try:
        signature = inspect.signature(target)
        hints = typing.get_type_hints(target)
    except (NameError, TypeError, ValueError) as e:
        raise DeclarationError(
            f"Could not read constructor signature of '{identity_name(factory)}': {e}. "
            "Annotations resolve against module globals; pass depends_on explicitly."
        ) from e

    params = list(signature.parameters.values())
    if skip_first:
        params = params[1:]

    dependencies: List[Any] = []
    for param in params:
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        if param.default is not inspect.Parameter.empty:
            continue
        if param.kind == inspect.Parameter.KEYWORD_ONLY:
            raise DeclarationError(
                f"Parameter '{param.name}' of '{identity_name(factory)}' is keyword-only without a default; "
                "dependencies are passed positionally."
            )
        annotation = hints.get(param.name)
        if annotation is None:
            raise DeclarationError(
                f"Parameter '{param.name}' of '{identity_name(factory)}' has no type annotation; "
                "annotate it or pass depends_on explicitly."
            )
        dependencies.append(annotation)
    return tuple(dependencies)


class DeclarationRegistry:
    """
    Append-only store of controller declarations, keyed by identity and kept
    in declaration order.
    """
    def __init__(self, duplicate_policy: str = "error", default_load_order: int = 0):
        self.duplicate_policy = duplicate_policy
        self.default_load_order = default_load_order
        self._items: Dict[Any, ComponentDeclaration] = {}
        self._inferred: Dict[Any, Tuple[Any, ...]] = {}
        self._sealed = False

    def declare(
        self,
        identity: Any,
        load_order: Optional[int] = None,
        depends_on: Optional[Sequence[Any]] = None,
        *,
        factory: Optional[Callable[..., Any]] = None,
        init_hook: Optional[str] = None,
        start_hook: Optional[str] = None,
    ) -> ComponentDeclaration:
        """
        Record a declaration. A repeated identity raises
        DuplicateDeclarationError, or returns the first declaration when the
        registry's duplicate policy is 'ignore'.
        """
        if self._sealed:
            raise LifecycleAlreadyStartedError(
                f"Cannot declare '{identity_name(identity)}' after the lifecycle has started."
            )

        if identity in self._items:
            if self.duplicate_policy == "ignore":
                return self._items[identity]
            raise DuplicateDeclarationError(identity)

        declaration = ComponentDeclaration(
            identity=identity,
            load_order=self.default_load_order if load_order is None else load_order,
            depends_on=tuple(depends_on) if depends_on is not None else None,
            factory=factory,
            init_hook=init_hook,
            start_hook=start_hook,
            sequence=len(self._items),
        )
        self._items[identity] = declaration
        return declaration

    def get(self, identity: Any) -> ComponentDeclaration:
        """
        Retrieve a declaration. Raises UnknownIdentityError if not declared.
        """
        if identity not in self._items:
            raise UnknownIdentityError(identity)
        return self._items[identity]

    def is_declared(self, identity: Any) -> bool:
        return identity in self._items

    def load_order_of(self, identity: Any) -> int:
        return self.get(identity).load_order

    def dependencies_of(self, identity: Any) -> Tuple[Any, ...]:
        declaration = self.get(identity)
        if declaration.depends_on is not None:
            return declaration.depends_on

        if identity not in self._inferred:
            factory = declaration.factory if declaration.factory is not None else identity
            self._inferred[identity] = infer_dependencies(factory)
        return self._inferred[identity]

    def seal(self) -> None:
        """Reject further declarations; called when orchestration begins."""
        self._sealed = True

    def __contains__(self, identity: Any) -> bool:
        return identity in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[ComponentDeclaration]:
        return iter(self._items.values())


class BundleRegistry:
    """
    Registry of controller bundles ("modules"). Bundles carry no lifecycle
    semantics; they only group identities for existence checks.
    """
    def __init__(self):
        self._items: Dict[Any, BundleDeclaration] = {}

    def register(self, identity: Any, members: Sequence[Any]) -> BundleDeclaration:
        if identity in self._items:
            raise DuplicateDeclarationError(identity, kind="Module")
        bundle = BundleDeclaration(identity=identity, members=tuple(members))
        self._items[identity] = bundle
        return bundle

    def get(self, identity: Any) -> BundleDeclaration:
        if identity not in self._items:
            raise UnknownIdentityError(identity, kind="Module")
        return self._items[identity]

    def verify(
        self,
        identity: Any,
        declarations: DeclarationRegistry,
        members: Optional[Sequence[Any]] = None,
    ) -> BundleDeclaration:
        """
        Check every member of a bundle is declared. When ``members`` is given
        the bundle does not need to be registered.
        """
        if members is None:
            bundle = self.get(identity)
        else:
            bundle = BundleDeclaration(identity=identity, members=tuple(members))

        for member in bundle.members:
            if member not in declarations:
                raise UnknownIdentityError(member, required_by=identity)
        return bundle

    def __contains__(self, identity: Any) -> bool:
        return identity in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[BundleDeclaration]:
        return iter(self._items.values())
