from enum import Enum
from typing import Any, Callable, Literal, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from applife.core.naming import identity_name


class LifecycleSettings(BaseSettings):
    """
    Framework-level settings (the 'applife' section in applife.yaml).
    """
    model_config = SettingsConfigDict(env_prefix='APPLIFE_', extra='ignore')

    app_name: str = "AppLife App"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    duplicate_policy: Literal["error", "ignore"] = "error"
    default_load_order: int = 0


class ComponentState(str, Enum):
    """Per-identity lifecycle states."""

    UNCONSTRUCTED = "unconstructed"
    CONSTRUCTING = "constructing"
    CONSTRUCTED = "constructed"
    INITIALIZED = "initialized"
    STARTED = "started"
    START_FAILED = "start_failed"
    CONSTRUCTION_FAILED = "construction_failed"
    INIT_FAILED = "init_failed"


class ComponentDeclaration(BaseModel):
    """
    Static record of a controller: identity, load-order hint, dependencies
    and the hook names bound to the eventual instance.

    ``depends_on=None`` means the dependency list is read from the factory's
    constructor signature when first requested. String annotations (including
    every annotation under ``from __future__ import annotations``) resolve
    against the module globals only, so a controller defined inside a function
    body that refers to other local classes must pass ``depends_on``.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    identity: Any
    load_order: int = 0
    depends_on: Optional[Tuple[Any, ...]] = None
    factory: Optional[Callable[..., Any]] = None
    init_hook: Optional[str] = None
    start_hook: Optional[str] = None
    sequence: int = 0

    @property
    def name(self) -> str:
        return identity_name(self.identity)

    def build(self, *dependencies: Any) -> Any:
        factory = self.factory if self.factory is not None else self.identity
        return factory(*dependencies)


class ComponentInstance(BaseModel):
    """Read-only view of one identity's lifecycle progress."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    identity: Any
    state: ComponentState = ComponentState.UNCONSTRUCTED
    value: Any = None

    @property
    def name(self) -> str:
        return identity_name(self.identity)


class BundleDeclaration(BaseModel):
    """A named group of controllers imported together."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    identity: Any
    members: Tuple[Any, ...] = Field(default_factory=tuple)

    @property
    def name(self) -> str:
        return identity_name(self.identity)
