from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from .errors import SchemaError, UnresolvedGenericType
from .schema import (
    ArrayOf,
    ListOf,
    Parameterized,
    SchemaRegistry,
    TypeParam,
    TypeSpec,
)

Frame = Dict[str, TypeSpec]


class TypeParameterStack:
    """
    Generic bindings active at the current decode depth.

    One frame is pushed per field being entered (element reads of arrays and
    collections reuse the frame of their field). A frame binds the declared
    type parameters of a parameterized schema to the arguments its field
    supplied; lookups walk frames innermost first.
    """

    def __init__(self, registry: SchemaRegistry) -> None:
        self._registry = registry
        self._frames: List[Frame] = []

    @property
    def depth(self) -> int:
        return len(self._frames)

    def push(self, frame: Optional[Frame] = None) -> None:
        self._frames.append(dict(frame or {}))

    def pop(self) -> Frame:
        return self._frames.pop()

    def frame_for(self, type_: TypeSpec) -> Frame:
        if not isinstance(type_, Parameterized):
            return {}
        params = self._registry.lookup(type_.raw).type_params
        if len(params) != len(type_.args):
            raise SchemaError(
                f"{type_.raw.__qualname__} takes {len(params)} type argument(s), "
                f"got {len(type_.args)}"
            )
        return dict(zip(params, type_.args))

    def resolve(self, type_: TypeSpec) -> TypeSpec:
        return self._resolve(type_, len(self._frames))

    def _resolve(self, type_: TypeSpec, limit: int) -> TypeSpec:
        if isinstance(type_, TypeParam):
            for idx in range(limit - 1, -1, -1):
                bound = self._frames[idx].get(type_.name)
                if bound is not None:
                    # Bindings may name parameters of an outer frame.
                    return self._resolve(bound, idx)
            raise UnresolvedGenericType(type_.name)
        if isinstance(type_, ArrayOf):
            return ArrayOf(self._resolve(type_.element, limit))
        if isinstance(type_, ListOf):
            return ListOf(self._resolve(type_.element, limit), type_.factory)
        if isinstance(type_, Parameterized):
            return Parameterized(
                type_.raw, tuple(self._resolve(arg, limit) for arg in type_.args)
            )
        return type_

    @contextmanager
    def entered(self, type_: TypeSpec) -> Iterator[TypeSpec]:
        """Resolve `type_`, then hold a frame binding its arguments."""
        resolved = self.resolve(type_)
        self.push(self.frame_for(resolved))
        try:
            yield resolved
        finally:
            self.pop()
