from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Tuple

_UNSET = object()


class DefinitionScope:
    """Names defined by one object while it is being decoded."""

    def __init__(self) -> None:
        self._shadowed: List[Tuple[str, object]] = []

    def remember(self, name: str, previous: object) -> None:
        self._shadowed.append((name, previous))

    def unwind(self) -> Iterator[Tuple[str, object]]:
        return reversed(self._shadowed)


class Definitions:
    """
    Values captured from `Define` fields, visible to later fields.

    A definition lives as long as the object that declared it; when that
    object finishes, the value it shadowed (if any) is restored.
    """

    def __init__(self) -> None:
        self._values: Dict[str, object] = {}
        self._scopes: List[DefinitionScope] = []

    def define(self, name: str, value: object) -> None:
        if self._scopes:
            self._scopes[-1].remember(name, self._values.get(name, _UNSET))
        self._values[name] = value

    def get(self, name: str) -> Optional[object]:
        return self._values.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._values

    def active(self) -> Dict[str, object]:
        return dict(self._values)

    @contextmanager
    def scope(self) -> Iterator[DefinitionScope]:
        scope = DefinitionScope()
        self._scopes.append(scope)
        try:
            yield scope
        finally:
            self._scopes.pop()
            for name, previous in scope.unwind():
                if previous is _UNSET:
                    self._values.pop(name, None)
                else:
                    self._values[name] = previous
