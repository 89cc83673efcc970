from typing import Any, Dict, Iterator

from applife.core.naming import identity_name
from applife.utils.diagnostics import NotRegisteredError


class InstanceTable:
    """
    Maps an identity to its constructed and initialized instance.

    Entries are write-once: an identity is stored only after its construct
    and init steps succeed, and is never replaced.
    """
    def __init__(self):
        self._items: Dict[Any, Any] = {}

    def put(self, identity: Any, instance: Any) -> None:
        if identity in self._items:
            raise ValueError(f"Instance for '{identity_name(identity)}' is already stored.")
        self._items[identity] = instance

    def get(self, identity: Any) -> Any:
        if identity not in self._items:
            raise NotRegisteredError(identity)
        return self._items[identity]

    def __contains__(self, identity: Any) -> bool:
        return identity in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)
