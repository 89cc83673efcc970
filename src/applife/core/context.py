from typing import Any, Dict, List, Optional, Sequence
from pydantic import BaseModel, ConfigDict, Field

from applife.core.instances import InstanceTable
from applife.core.models import ComponentDeclaration, ComponentInstance, ComponentState, LifecycleSettings
from applife.core.registry import BundleRegistry, DeclarationRegistry
from applife.utils.console import ConsoleLogSink, LogSink


class LifecycleContext(BaseModel):
    """
    The orchestration context: declarations, bundles, instances and
    per-identity state for one run. One process-wide default exists for the
    decorator API; tests create their own.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    # Framework Settings (Maps to 'applife' section)
    settings: LifecycleSettings = Field(default_factory=LifecycleSettings)

    # Modules listed in applife.yaml, imported by the CLI before running
    modules: List[str] = Field(default_factory=list)

    # Bundle paths listed in applife.yaml, verified by the CLI before running
    bundle_paths: List[str] = Field(default_factory=list)

    declarations: Optional[DeclarationRegistry] = None
    bundles: BundleRegistry = Field(default_factory=BundleRegistry)
    instances: InstanceTable = Field(default_factory=InstanceTable)
    states: Dict[Any, ComponentState] = Field(default_factory=dict)

    # Severity sink for info / warning / error notices
    sink: Optional[Any] = None

    # Set once run_lifecycle() begins; lookups are valid from then on
    started: bool = False

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None, **data: Any):
        """
        Initialize the context, optionally with a configuration dictionary.
        """
        if config_dict:
            if 'settings' not in data:
                data['settings'] = LifecycleSettings(**config_dict.get('applife', {}))
            if 'modules' not in data:
                data['modules'] = list(config_dict.get('modules', []))
            if 'bundle_paths' not in data:
                data['bundle_paths'] = list(config_dict.get('bundles', []))

        super().__init__(**data)

    def model_post_init(self, __context: Any) -> None:
        if self.declarations is None:
            self.declarations = DeclarationRegistry(
                duplicate_policy=self.settings.duplicate_policy,
                default_load_order=self.settings.default_load_order,
            )
        if self.sink is None:
            self.sink = ConsoleLogSink(log_level=self.settings.log_level)
        elif not isinstance(self.sink, LogSink):
            raise TypeError("sink must provide info(), warning() and error().")

    def declare(self, identity: Any, load_order: Optional[int] = None, depends_on: Optional[Sequence[Any]] = None, **hooks: Any) -> ComponentDeclaration:
        """Record a controller declaration in this context."""
        declaration = self.declarations.declare(identity, load_order, depends_on, **hooks)
        self.states.setdefault(identity, ComponentState.UNCONSTRUCTED)
        return declaration

    def verify_bundle(self, bundle: Any, members: Optional[Sequence[Any]] = None):
        """Check every member of ``bundle`` is declared."""
        return self.bundles.verify(bundle, self.declarations, members)

    def load_modules(self, bundles: Sequence[Any]) -> None:
        for bundle in bundles:
            self.verify_bundle(bundle)

    def state_of(self, identity: Any) -> ComponentState:
        return self.states.get(identity, ComponentState.UNCONSTRUCTED)

    def describe(self, identity: Any) -> ComponentInstance:
        return ComponentInstance(
            identity=identity,
            state=self.state_of(identity),
            value=self.instances.get(identity) if identity in self.instances else None,
        )

    def describe_all(self) -> List[ComponentInstance]:
        return [self.describe(declaration.identity) for declaration in self.declarations]


_default_context: Optional[LifecycleContext] = None


def get_default_context() -> LifecycleContext:
    """Return the process-wide context used by the decorator API."""
    global _default_context
    if _default_context is None:
        _default_context = LifecycleContext()
    return _default_context


def reset_default_context(context: Optional[LifecycleContext] = None) -> LifecycleContext:
    """Replace the process-wide context, e.g. between test runs."""
    global _default_context
    _default_context = context if context is not None else LifecycleContext()
    return _default_context
