from __future__ import annotations

import asyncio
import inspect
from typing import Any, List, Set

from applife.core.context import LifecycleContext
from applife.core.models import ComponentState
from applife.core.naming import identity_name
from applife.runtime.contracts import LifecycleReport, LifecycleStatus, StartOutcome
from applife.runtime.resolver import Resolver
from applife.utils.diagnostics import (
    ConstructionError,
    CyclicDependencyError,
    DeclarationError,
    InitError,
    LifecycleAlreadyStartedError,
    StartHookError,
    UnknownIdentityError,
    diagnostic_from_error,
)


async def _call_hook(instance: Any, hook_name: str) -> Any:
    result = getattr(instance, hook_name)()
    if inspect.isawaitable(result):
        result = await result
    return result


class LifecycleOrchestrator:
    """Drives construct, init and start across every declared controller.

    Construct and init are sequential and fail-fast: the first error is logged
    and re-raised, halting the run. Start hooks run concurrently and are
    fail-soft: each failure is logged as a warning and recorded.
    """

    def __init__(self, context: LifecycleContext) -> None:
        self.context = context
        self.resolver = Resolver(context.declarations)
        self.construction_order: List[Any] = []
        self._in_flight: Set[Any] = set()

    async def run(self) -> LifecycleReport:
        """Run the whole lifecycle once. A second call raises."""
        if self.context.started:
            raise LifecycleAlreadyStartedError("Lifecycle has already been started for this context.")
        self.context.started = True
        self.context.declarations.seal()

        sink = self.context.sink
        if len(self.context.declarations) == 0:
            sink.info("No controllers declared")

        try:
            for identity in self.resolver.traversal_order():
                await self.ensure_initialized(identity)
        except (CyclicDependencyError, DeclarationError, UnknownIdentityError) as e:
            sink.error(e.message)
            raise

        outcomes = await self.start_all()

        report = LifecycleReport(
            construction_order=list(self.construction_order),
            start_outcomes=outcomes,
            components=self.context.describe_all(),
            app_name=self.context.settings.app_name,
        )
        for outcome in outcomes:
            if outcome.state == ComponentState.START_FAILED:
                report.status = LifecycleStatus.DEGRADED
                report.diagnostics.append(outcome.diagnostic)

        sink.info(
            f"Started {len(self.context.instances)} controller(s)"
            f" ({len(report.failed_starts)} start failure(s))"
        )
        return report

    async def ensure_initialized(self, identity: Any) -> Any:
        """Construct and initialize ``identity`` and its dependencies; idempotent."""
        if identity in self.context.instances:
            return self.context.instances.get(identity)
        if identity in self._in_flight:
            raise CyclicDependencyError([identity])

        for step in self.resolver.plan(identity, settled=self.context.instances):
            await self._construct_and_init(step)
        return self.context.instances.get(identity)

    async def _construct_and_init(self, identity: Any) -> None:
        declaration = self.context.declarations.get(identity)
        states = self.context.states
        sink = self.context.sink

        self._in_flight.add(identity)
        states[identity] = ComponentState.CONSTRUCTING
        try:
            dependencies = [
                self.context.instances.get(dep)
                for dep in self.context.declarations.dependencies_of(identity)
            ]
            try:
                instance = declaration.build(*dependencies)
            except Exception as e:
                states[identity] = ComponentState.CONSTRUCTION_FAILED
                sink.error(f"Error in constructor of '{declaration.name}': {e!r}")
                raise ConstructionError(identity, e) from e
            states[identity] = ComponentState.CONSTRUCTED

            if declaration.init_hook:
                try:
                    await _call_hook(instance, declaration.init_hook)
                except Exception as e:
                    states[identity] = ComponentState.INIT_FAILED
                    sink.error(f"Error in on_init of '{declaration.name}': {e!r}")
                    raise InitError(identity, e) from e

            self.context.instances.put(identity, instance)
            states[identity] = ComponentState.INITIALIZED
            self.construction_order.append(identity)
        finally:
            self._in_flight.discard(identity)

    async def start_all(self) -> List[StartOutcome]:
        """Launch every start hook as its own task and wait for all to settle."""
        identities = []
        tasks = []
        for identity in self.resolver.traversal_order():
            declaration = self.context.declarations.get(identity)
            if not declaration.start_hook:
                continue
            instance = self.context.instances.get(identity)
            identities.append(identity)
            tasks.append(asyncio.create_task(_call_hook(instance, declaration.start_hook)))

        results = await asyncio.gather(*tasks, return_exceptions=True)

        outcomes: List[StartOutcome] = []
        for identity, result in zip(identities, results):
            if isinstance(result, BaseException):
                self.context.states[identity] = ComponentState.START_FAILED
                error = StartHookError(identity, result)
                self.context.sink.warning(f"Error in on_start of '{identity_name(identity)}': {result!r}")
                outcomes.append(StartOutcome(
                    identity=identity,
                    state=ComponentState.START_FAILED,
                    error=error.message,
                    diagnostic=diagnostic_from_error(error, severity="warning"),
                ))
            else:
                self.context.states[identity] = ComponentState.STARTED
                outcomes.append(StartOutcome(identity=identity, state=ComponentState.STARTED))
        return outcomes
