"""System base class for ECS transformations.

Systems are the logic layer. They read required components from entities
and attach the components they produce.

Systems run in one of two directions:
- 'forward': signal space -> Haar space (or signal -> derived data)
- 'inverse': Haar space -> signal space

Example:
    >>> class Doubler(System):
    ...     def required_components(self):
    ...         return [Signal]
    ...     def produced_components(self):
    ...         return [ReconSignal]
    ...     def run(self, world, eids):
    ...         for eid in eids:
    ...             x = world.view(world.get_component(eid, Signal).x)
    ...             world.add_component(eid, ReconSignal(x=world.store.put(2 * x)))
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Literal

from haarlab.core.world import World

Mode = Literal["forward", "inverse"]


class System(ABC):
    """Base class for all ECS systems.

    Attributes:
        mode: Transformation direction ('forward' or 'inverse')
    """

    def __init__(self, mode: Mode = "forward") -> None:
        if mode not in ("forward", "inverse"):
            raise ValueError(f"mode must be 'forward' or 'inverse', got {mode!r}")
        self.mode = mode

    @abstractmethod
    def required_components(self) -> list[type]:
        """Component types this system reads."""

    @abstractmethod
    def produced_components(self) -> list[type]:
        """Component types this system attaches (may be empty)."""

    @abstractmethod
    def run(self, world: World, eids: list[int]) -> None:
        """Execute system on the given entities.

        Args:
            world: World instance with entities and components
            eids: Entity IDs to process; each has the required components
        """

    def can_run(self, world: World, eid: int) -> bool:
        """Check if entity has all required components."""
        return all(world.has_component(eid, ct) for ct in self.required_components())

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(mode={self.mode})"
