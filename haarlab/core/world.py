"""World: Entity-Component-System manager.

The World is the central ECS registry that manages:
- Entity creation (integer IDs)
- Component storage (type -> entity -> component mapping)
- Component queries (find entities with specific component combinations)
- The ArrayStore holding all signal, coefficient and frame data

Example:
    >>> world = World()
    >>> eid = world.spawn_signal(np.arange(8.0))
    >>> entities = world.query(Signal)
    >>> world.clear()  # Reset for next batch
"""

from __future__ import annotations

from typing import Any, TypeVar

import numpy as np
from pydantic import BaseModel

from haarlab.basis import is_power_of_two
from haarlab.core.store import ArrayStore
from haarlab.errors import DimensionMismatch

Component = BaseModel

T = TypeVar("T", bound=Component)


def validate_signal(x: np.ndarray | list[float]) -> np.ndarray:
    """Coerce to float and check every axis is a power of two >= 2."""
    arr = np.asarray(x)
    if not (np.issubdtype(arr.dtype, np.floating) or np.issubdtype(arr.dtype, np.integer)):
        raise TypeError(f"Expected real numeric signal, got dtype {arr.dtype}")
    if arr.ndim not in (1, 2):
        raise DimensionMismatch(f"Expected 1-D signal or 2-D image, got shape {arr.shape}")
    for axis, length in enumerate(arr.shape):
        if length < 2 or not is_power_of_two(length):
            raise DimensionMismatch(
                f"Axis {axis} has length {length}; signal lengths must be powers of two >= 2"
            )
    if np.issubdtype(arr.dtype, np.integer):
        arr = arr.astype(np.float64)
    return arr


class World:
    """Central ECS registry managing entities, components, and array storage.

    Attributes:
        store: Immutable array storage
        metadata: Per-entity metadata dict (metric systems write here)

    Example:
        >>> world = World(store_bytes=64 << 20)
        >>> eid = world.spawn_signal(np.random.randn(256))
        >>> world.has_component(eid, Signal)
        True
    """

    def __init__(self, store_bytes: int = 256 << 20):
        """Create World with specified storage budget.

        Args:
            store_bytes: Store budget in bytes (default 256 MB)
        """
        self.store = ArrayStore(capacity_bytes=store_bytes)
        self._next_eid = 0
        self._components: dict[type[Component], dict[int, Component]] = {}
        self.metadata: dict[int, dict[str, Any]] = {}

    def new_entity(self) -> int:
        """Create a new entity and return its (monotonically increasing) ID."""
        eid = self._next_eid
        self._next_eid += 1
        self.metadata[eid] = {}
        return eid

    def spawn_signal(self, x: np.ndarray | list[float]) -> int:
        """Ingest a 1-D signal or 2-D image.

        Args:
            x: Real array whose every axis length is a power of two >= 2

        Returns:
            Entity ID with a Signal component attached

        Raises:
            DimensionMismatch: If the shape is not dyadic
            TypeError: If the data is not real numeric
        """
        from haarlab.components.signal import Signal

        arr = validate_signal(x)
        eid = self.new_entity()
        self.add_component(eid, Signal(x=self.store.put(arr)))
        self.metadata[eid]["signal_shape"] = arr.shape
        self.metadata[eid]["signal_dtype"] = str(arr.dtype)
        return eid

    def spawn_batch_signals(self, signals: list[np.ndarray]) -> list[int]:
        """Ingest several signals of identical shape, stored as one stacked array.

        Returns:
            Entity IDs with Signal components referencing rows of the batch

        Raises:
            ValueError: If the signals differ in shape
        """
        from haarlab.components.signal import Signal

        if not signals:
            return []

        arrays = [validate_signal(s) for s in signals]
        ref_shape = arrays[0].shape
        for i, arr in enumerate(arrays):
            if arr.shape != ref_shape:
                raise ValueError(f"Signal {i} has shape {arr.shape}, expected {ref_shape}")

        batch_ref = self.store.put(np.stack(arrays))

        eids = []
        for i in range(len(arrays)):
            eid = self.new_entity()
            self.add_component(eid, Signal(x=batch_ref.row_ref(i)))
            self.metadata[eid]["signal_shape"] = ref_shape
            self.metadata[eid]["signal_dtype"] = str(batch_ref.dtype)
            self.metadata[eid]["batch_index"] = i
            eids.append(eid)
        return eids

    def view(self, ref: Any) -> np.ndarray:
        """Shortcut for ``world.store.view(ref)``."""
        return self.store.view(ref)

    def clear(self) -> None:
        """Reset storage and drop all entities/components.

        All ArrayRefs issued before the call become stale.
        """
        self.store.reset()
        self._next_eid = 0
        self._components.clear()
        self.metadata.clear()

    def add_component(self, eid: int, component: Component) -> None:
        """Attach a component to an entity, replacing one of the same type.

        Raises:
            ValueError: If entity does not exist
        """
        if eid not in self.metadata:
            raise ValueError(f"Entity {eid} does not exist")
        self._components.setdefault(type(component), {})[eid] = component

    def get_component(self, eid: int, comp_type: type[T]) -> T:
        """Retrieve a component from an entity.

        Raises:
            KeyError: If entity does not have the component
        """
        if comp_type not in self._components:
            raise KeyError(f"No entities have component type {comp_type.__name__}")
        if eid not in self._components[comp_type]:
            raise KeyError(f"Entity {eid} does not have component {comp_type.__name__}")
        return self._components[comp_type][eid]  # type: ignore

    def has_component(self, eid: int, comp_type: type[Component]) -> bool:
        return comp_type in self._components and eid in self._components[comp_type]

    def remove_component(self, eid: int, comp_type: type[Component]) -> None:
        """Remove a component from an entity.

        Raises:
            KeyError: If entity does not have the component
        """
        if not self.has_component(eid, comp_type):
            raise KeyError(f"Entity {eid} does not have component {comp_type.__name__}")
        del self._components[comp_type][eid]

    def query(self, *comp_types: type[Component]) -> list[int]:
        """Entities that have ALL of the given component types, sorted by ID.

        Example:
            >>> eids = world.query(Signal, HaarCoeffs)
        """
        if not comp_types:
            return list(self.metadata.keys())

        result_set = set(self._components.get(comp_types[0], {}).keys())
        for comp_type in comp_types[1:]:
            if comp_type not in self._components:
                return []
            result_set &= set(self._components[comp_type].keys())
        return sorted(result_set)

    def destroy_entity(self, eid: int) -> None:
        """Remove entity and all its components.

        Stored arrays stay in the store until the next clear().
        """
        if eid not in self.metadata:
            raise ValueError(f"Entity {eid} does not exist")
        for comp_store in self._components.values():
            comp_store.pop(eid, None)
        del self.metadata[eid]

    def pipe(self, entity: int | list[int]) -> Any:
        """Start a fluent pipeline for one entity or a list of entities.

        Example:
            >>> coeffs = world.pipe(eid).to(HaarTransform()).out(HaarCoeffs)
        """
        from haarlab.core.pipeline import Pipe

        return Pipe(world=self, entity=entity)

    def __repr__(self) -> str:
        return (
            f"World(entities={len(self.metadata)}, component_types={len(self._components)}, "
            f"store={self.store})"
        )
