"""Session store interface.

The core never reaches for an ambient session. Every operation that reads or
writes wizard state is handed a ``SessionStore``, which the outer web layer
backs with its own cookie or server-side session.

Example:
    session = InMemorySession()
    session.set("protected-application-flow-<id>", state.to_wire())
    assert session.has("protected-application-flow-<id>")
"""

import copy
import json
from typing import Any, Optional, Protocol, runtime_checkable

from cdcp_core.ids import generate_id


@runtime_checkable
class SessionStore(Protocol):
    """Key/value store scoped to one browser session."""

    @property
    def id(self) -> str:
        """Identifier of the session, used for log correlation."""
        ...

    def has(self, key: str) -> bool:
        ...

    def get(self, key: str) -> Any:
        ...

    def set(self, key: str, value: Any) -> None:
        ...

    def unset(self, key: str) -> None:
        ...


class InMemorySession:
    """Dict-backed ``SessionStore``.

    Values must be JSON-compatible, mirroring what a cookie or Redis backed
    session can hold. Copies are taken on the way in and out so callers never
    share mutable state with the store.
    """

    def __init__(self, session_id: Optional[str] = None) -> None:
        self._id = session_id or generate_id()
        self._data: dict[str, Any] = {}

    @property
    def id(self) -> str:
        return self._id

    def has(self, key: str) -> bool:
        return key in self._data

    def get(self, key: str) -> Any:
        """Return a copy of the value at ``key``; raises KeyError when absent."""
        return copy.deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> None:
        self._data[key] = json.loads(json.dumps(value))

    def unset(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


__all__ = [
    "SessionStore",
    "InMemorySession",
]
