from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from typing import Any, TypeVar, overload

from applife.core.context import LifecycleContext, get_default_context, reset_default_context
from applife.core.models import BundleDeclaration, ComponentDeclaration, ComponentState
from applife.runtime.contracts import LifecycleReport
from applife.runtime.lookup import Lookup
from applife.runtime.orchestrator import LifecycleOrchestrator
from applife.utils.diagnostics import (
	AppLifeError,
	ConstructionError,
	CyclicDependencyError,
	DeclarationError,
	DuplicateDeclarationError,
	InitError,
	LifecycleAlreadyStartedError,
	NotRegisteredError,
	NotStartedYetError,
	UnknownIdentityError,
)

DecoratedCallable = TypeVar("DecoratedCallable", bound=Callable[..., Any])
DecoratedClass = TypeVar("DecoratedClass", bound=type)
T = TypeVar("T")

HOOK_ATTR = "_applife_hook"


def _find_hook(target: type, kind: str) -> str | None:
	names: list[str] = []
	seen: set[str] = set()
	for klass in target.__mro__:
		for attr, value in vars(klass).items():
			if attr in seen:
				continue
			seen.add(attr)
			func = value.__func__ if isinstance(value, (staticmethod, classmethod)) else value
			if kind in (getattr(func, HOOK_ATTR, None), getattr(value, HOOK_ATTR, None)):
				names.append(attr)

	if len(names) > 1:
		raise DeclarationError(
			f"Controller '{target.__qualname__}' marks more than one on_{kind} hook: {', '.join(sorted(names))}"
		)
	return names[0] if names else None


@overload
def controller(cls: DecoratedClass, /) -> DecoratedClass:
	...


@overload
def controller(
	cls: None = None,
	/,
	*,
	load_order: int | None = None,
	depends_on: Sequence[Any] | None = None,
	factory: Callable[..., Any] | None = None,
	context: LifecycleContext | None = None,
) -> Callable[[DecoratedClass], DecoratedClass]:
	...


def controller(
	cls: DecoratedClass | None = None,
	/,
	*,
	load_order: int | None = None,
	depends_on: Sequence[Any] | None = None,
	factory: Callable[..., Any] | None = None,
	context: LifecycleContext | None = None,
) -> DecoratedClass | Callable[[DecoratedClass], DecoratedClass]:
	"""Decorator that declares a class as a lifecycle controller.

	Supports both bare and configured usage:
	- ``@controller``
	- ``@controller(load_order=1, depends_on=[Database])``

	Without ``depends_on`` the dependencies are read from ``__init__``
	annotations when the lifecycle resolves the class.
	"""

	def decorator(target: DecoratedClass) -> DecoratedClass:
		ctx = context if context is not None else get_default_context()
		declaration = ctx.declare(
			target,
			load_order,
			depends_on,
			factory=factory,
			init_hook=_find_hook(target, "init"),
			start_hook=_find_hook(target, "start"),
		)
		setattr(target, "_applife_meta", {
			"load_order": declaration.load_order,
			"init_hook": declaration.init_hook,
			"start_hook": declaration.start_hook,
		})
		return target

	if isinstance(cls, type):
		return decorator(cls)

	return decorator


def _hook_marker(kind: str, func: DecoratedCallable | None) -> DecoratedCallable | Callable[[DecoratedCallable], DecoratedCallable]:
	def decorator(target: DecoratedCallable) -> DecoratedCallable:
		setattr(target, HOOK_ATTR, kind)
		return target

	if callable(func):
		return decorator(func)

	return decorator


def on_init(func: DecoratedCallable | None = None, /) -> Any:
	"""Mark a method to run right after construction. ``@on_init`` or ``@on_init()``."""
	return _hook_marker("init", func)


def on_start(func: DecoratedCallable | None = None, /) -> Any:
	"""Mark a method to run concurrently once every controller is initialized."""
	return _hook_marker("start", func)


def module(
	controllers: Sequence[Any],
	*,
	context: LifecycleContext | None = None,
) -> Callable[[DecoratedClass], DecoratedClass]:
	"""Decorator that groups controllers into an importable bundle.

	Usage: ``@module([UserController, BillingController])``
	"""

	def decorator(target: DecoratedClass) -> DecoratedClass:
		ctx = context if context is not None else get_default_context()
		ctx.bundles.register(target, controllers)
		return target

	return decorator


def declare(
	identity: Any,
	load_order: int | None = None,
	depends_on: Sequence[Any] | None = None,
	*,
	factory: Callable[..., Any] | None = None,
	init_hook: str | None = None,
	start_hook: str | None = None,
	context: LifecycleContext | None = None,
) -> ComponentDeclaration:
	"""Declare a controller without the decorator."""
	ctx = context if context is not None else get_default_context()
	return ctx.declare(
		identity,
		load_order,
		depends_on,
		factory=factory,
		init_hook=init_hook,
		start_hook=start_hook,
	)


def verify_bundle(
	bundle: Any,
	members: Sequence[Any] | None = None,
	*,
	context: LifecycleContext | None = None,
) -> BundleDeclaration:
	"""Check that every member of a bundle is declared."""
	ctx = context if context is not None else get_default_context()
	return ctx.verify_bundle(bundle, members)


def load_modules(bundles: Sequence[Any], *, context: LifecycleContext | None = None) -> None:
	"""Verify that each bundle is registered and all of its controllers are declared."""
	ctx = context if context is not None else get_default_context()
	ctx.load_modules(bundles)


async def run_lifecycle(context: LifecycleContext | None = None) -> LifecycleReport:
	"""Construct, initialize and start every declared controller."""
	ctx = context if context is not None else get_default_context()
	return await LifecycleOrchestrator(ctx).run()


start_async = run_lifecycle


def start(context: LifecycleContext | None = None) -> LifecycleReport:
	"""Synchronous form of run_lifecycle(); must not be called from a running event loop."""
	return asyncio.run(run_lifecycle(context))


def dependency(identity: type[T] | Any, *, context: LifecycleContext | None = None) -> T:
	"""Return an initialized controller. Valid once the lifecycle has begun."""
	ctx = context if context is not None else get_default_context()
	return Lookup(ctx).resolve(identity)


resolve = dependency


__all__ = [
	"AppLifeError",
	"BundleDeclaration",
	"ComponentDeclaration",
	"ComponentState",
	"ConstructionError",
	"CyclicDependencyError",
	"DeclarationError",
	"DuplicateDeclarationError",
	"InitError",
	"LifecycleAlreadyStartedError",
	"LifecycleContext",
	"LifecycleReport",
	"NotRegisteredError",
	"NotStartedYetError",
	"UnknownIdentityError",
	"controller",
	"declare",
	"dependency",
	"get_default_context",
	"load_modules",
	"module",
	"on_init",
	"on_start",
	"reset_default_context",
	"resolve",
	"run_lifecycle",
	"start",
	"start_async",
	"verify_bundle",
]
