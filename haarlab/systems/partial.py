"""Progressive (partial-basis) reconstruction system."""

from __future__ import annotations

from haarlab.basis import get_basis
from haarlab.components.coeffs import HaarCoeffs
from haarlab.components.reconstruction import Reconstructions
from haarlab.config import get_settings
from haarlab.core.system import System
from haarlab.core.world import World
from haarlab.reconstruct import Strategy, reconstruct_all


class PartialReconstruct(System):
    """Reconstruct from every coefficient prefix k = 2..n.

    Input: HaarCoeffs. Output: Reconstructions with n - 1 frames.

    For separable image coefficients the column axis is inverted first, so
    the prefix applies to the row-axis basis only.
    """

    def __init__(
        self,
        strategy: Strategy | None = None,
        workers: int | None = None,
        dtype: str | None = None,
    ) -> None:
        """Initialize reconstruction system.

        Args:
            strategy: 'incremental' or 'independent' (configured default if None)
            workers: Threads for the independent strategy (configured default if None)
            dtype: Basis dtype, configured default if None
        """
        super().__init__(mode="forward")
        self.strategy = strategy
        self.workers = workers
        self.dtype = dtype

    def required_components(self) -> list[type]:
        return [HaarCoeffs]

    def produced_components(self) -> list[type]:
        return [Reconstructions]

    def run(self, world: World, eids: list[int]) -> None:
        for eid in eids:
            coeffs = world.get_component(eid, HaarCoeffs)
            c = world.view(coeffs.c)
            if coeffs.separable:
                c = c @ get_basis(c.shape[1], dtype=self.dtype).matrix.T

            sequence = reconstruct_all(
                get_basis(coeffs.n, dtype=self.dtype),
                c,
                strategy=self.strategy,
                workers=self.workers,
            )
            world.add_component(
                eid,
                Reconstructions(
                    frames=world.store.put(sequence.frames),
                    first_k=sequence.first_k,
                    strategy=self.strategy or get_settings().reconstruction.strategy,
                ),
            )

    def __repr__(self) -> str:
        return f"PartialReconstruct(strategy={self.strategy}, workers={self.workers})"
