"""Fluent pipeline for composing systems.

Example:
    >>> frames = (
    ...     world.pipe(eid)
    ...     .to(HaarTransform(mode="forward"))
    ...     .to(PartialReconstruct())
    ...     .out(Reconstructions)
    ... )
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel

from haarlab.utils.logging import get_logger

if TYPE_CHECKING:
    from haarlab.core.system import System
    from haarlab.core.world import World

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)


class Pipe:
    """Pipeline builder: chain with ``.to()`` or ``|``, run with ``.out()``."""

    def __init__(self, world: "World", entity: int | list[int]) -> None:
        self.world: Any = world
        self.entities = list(entity) if isinstance(entity, list) else [entity]
        self.systems: list[Any] = []

    def to(self, system: "System") -> "Pipe":
        """Append a system; returns self for chaining."""
        self.systems.append(system)
        return self

    def __or__(self, system: "System") -> "Pipe":
        return self.to(system)

    def out(self, component_type: type[T]) -> T:
        """Execute the pipeline and return the first entity's component.

        Raises:
            RuntimeError: If any system cannot run (missing dependencies)
            KeyError: If the entity lacks the requested component afterwards
        """
        self.execute()
        return self.world.get_component(self.entities[0], component_type)  # type: ignore[no-any-return]

    def out_all(self, component_type: type[T]) -> list[T]:
        """Execute the pipeline and return the component of every entity."""
        self.execute()
        return [self.world.get_component(eid, component_type) for eid in self.entities]

    def execute(self) -> None:
        """Run systems in order.

        All entities must satisfy a system's requirements before it runs, so
        a failure is reported before any partial work for that step.

        Raises:
            RuntimeError: If an entity is missing a required component
        """
        for system in self.systems:
            missing = [eid for eid in self.entities if not system.can_run(self.world, eid)]
            if missing:
                required = [ct.__name__ for ct in system.required_components()]
                raise RuntimeError(
                    f"System {type(system).__name__} cannot run: "
                    f"entities {missing} missing required components {required}"
                )
            logger.debug("Running %r on %d entities", system, len(self.entities))
            system.run(self.world, self.entities)
