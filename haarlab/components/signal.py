"""Signal components: Signal, ReconSignal."""

from pydantic import BaseModel

from haarlab.core.store import ArrayRef


class Component(BaseModel):
    """Base class for all ECS components.

    Components are plain data containers validated by Pydantic. Array data is
    held as ArrayRef handles resolved through the world's store.
    """

    model_config = {"arbitrary_types_allowed": True, "frozen": True}


class Signal(Component):
    """Original signal in signal space.

    Attributes:
        x: ArrayRef to a 1-D (n,) signal or a 2-D (r, c) image, float
    """

    x: ArrayRef


class ReconSignal(Component):
    """Signal recovered from a full coefficient set by the inverse transform.

    Attributes:
        x: ArrayRef with the same shape as the original Signal
    """

    x: ArrayRef
