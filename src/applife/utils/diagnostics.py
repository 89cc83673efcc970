from typing import Any, List
from pydantic import BaseModel

from applife.core.naming import identity_name


class LifecycleDiagnostic(BaseModel):
    """
    Standardized error reporting object for declaration and lifecycle issues.
    """
    component: str
    phase: str  # 'declare', 'resolve', 'construct', 'init', 'start'
    error_code: str
    message: str
    severity: str = "error"  # 'error', 'warning', 'info'

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message} (at {self.component}/{self.phase})"


class AppLifeError(Exception):
    """Base class for every error raised by the lifecycle core."""

    error_code = "ERR_APPLIFE"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigurationError(AppLifeError):
    error_code = "ERR_CONFIG"


class DeclarationError(AppLifeError):
    error_code = "ERR_DECLARATION"


class DuplicateDeclarationError(DeclarationError):
    error_code = "ERR_DUPLICATE_DECLARATION"

    def __init__(self, identity: Any, kind: str = "Controller"):
        self.identity = identity
        super().__init__(f"{kind} '{identity_name(identity)}' already registered.")


class UnknownIdentityError(AppLifeError):
    """
    Raised when an identity is referenced but never declared, either as a
    dependency during resolution or as a bundle member during verification.
    """
    error_code = "ERR_UNKNOWN_IDENTITY"

    def __init__(self, identity: Any, required_by: Any = None, kind: str = "Controller"):
        self.identity = identity
        self.required_by = required_by
        ctx = f" (required by '{identity_name(required_by)}')" if required_by is not None else ""
        super().__init__(f"{kind} '{identity_name(identity)}' is not declared{ctx}.")


class CyclicDependencyError(AppLifeError):
    error_code = "ERR_CYCLIC_DEPENDENCY"

    def __init__(self, cycle: List[Any]):
        self.cycle = list(cycle)
        path = " -> ".join(identity_name(item) for item in self.cycle)
        super().__init__(f"Cyclic dependency detected: {path}")


class LifecyclePhaseError(AppLifeError):
    """A component hook or factory raised during one of the lifecycle phases."""

    phase = "lifecycle"

    def __init__(self, identity: Any, cause: BaseException):
        self.identity = identity
        self.cause = cause
        super().__init__(
            f"Error in {self.phase} of '{identity_name(identity)}': {type(cause).__name__}: {cause}"
        )


class ConstructionError(LifecyclePhaseError):
    error_code = "ERR_CONSTRUCTION_FAILED"
    phase = "construct"


class InitError(LifecyclePhaseError):
    error_code = "ERR_INIT_FAILED"
    phase = "init"


class StartHookError(LifecyclePhaseError):
    error_code = "ERR_START_FAILED"
    phase = "start"


class LifecycleAlreadyStartedError(AppLifeError):
    error_code = "ERR_ALREADY_STARTED"


class LookupFacilityError(AppLifeError):
    error_code = "ERR_LOOKUP"


class NotStartedYetError(LookupFacilityError):
    error_code = "ERR_NOT_STARTED"

    def __init__(self):
        super().__init__("Use dependency() after the lifecycle has been started.")


class NotRegisteredError(LookupFacilityError):
    error_code = "ERR_NOT_REGISTERED"

    def __init__(self, identity: Any):
        self.identity = identity
        super().__init__(
            f"Controller '{identity_name(identity)}' not registered or not loaded yet."
        )


def diagnostic_from_error(error: AppLifeError, component: Any = None, severity: str = "error") -> LifecycleDiagnostic:
    """Build a diagnostic record from a raised lifecycle error."""
    target = component
    if target is None:
        target = getattr(error, "identity", None)
    return LifecycleDiagnostic(
        component=identity_name(target) if target is not None else "<lifecycle>",
        phase=getattr(error, "phase", "resolve"),
        error_code=error.error_code,
        message=error.message,
        severity=severity,
    )
