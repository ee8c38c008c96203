"""Progressive reconstruction component."""

from pydantic import Field

from haarlab.components.signal import Component
from haarlab.core.store import ArrayRef


class Reconstructions(Component):
    """Progressive reconstructions from coefficient prefixes.

    Attributes:
        frames: ArrayRef to (n - 1, *signal_shape) frames
        first_k: Prefix length of the first frame
        strategy: How the frames were computed ('incremental' or 'independent')
    """

    frames: ArrayRef
    first_k: int = Field(default=2, ge=1)
    strategy: str = Field(default="incremental")
