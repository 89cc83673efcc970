"""Lifecycle orchestration: resolver, orchestrator and lookup facility."""

from applife.runtime.contracts import LifecycleReport, LifecycleStatus, StartOutcome
from applife.runtime.lookup import Lookup
from applife.runtime.orchestrator import LifecycleOrchestrator
from applife.runtime.resolver import Resolver

__all__ = [
	"LifecycleOrchestrator",
	"LifecycleReport",
	"LifecycleStatus",
	"Lookup",
	"Resolver",
	"StartOutcome",
]
