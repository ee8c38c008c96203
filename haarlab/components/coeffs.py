"""Haar coefficient component."""

from pydantic import Field

from haarlab.components.signal import Component
from haarlab.core.store import ArrayRef


class HaarCoeffs(Component):
    """Coefficients of a signal in the Haar basis.

    Attributes:
        c: ArrayRef to coefficients, same shape as the signal; entry i (row i
           for images) is the weight of basis vector i
        n: Dimension of the basis along the transformed (row) axis
        separable: True if the column axis was also transformed
    """

    c: ArrayRef
    n: int = Field(ge=2)
    separable: bool = Field(default=False)
