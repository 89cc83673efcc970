from typing import Any


def identity_name(identity: Any) -> str:
    """Return a human-readable name for a component or bundle identity."""
    qualname = getattr(identity, "__qualname__", None)
    if isinstance(qualname, str):
        return qualname
    if isinstance(identity, str):
        return identity
    return repr(identity)

