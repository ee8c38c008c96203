"""Haar transform system.

Moves entity data between signal space and Haar space using the cached
orthonormal basis for the signal length:

    forward: c = H.T @ x      (Signal -> HaarCoeffs)
    inverse: x = H @ c        (HaarCoeffs -> ReconSignal)

Images are transformed along the row axis only unless ``separable=True``,
in which case the column axis is also transformed with a second basis.
"""

from __future__ import annotations

from collections import defaultdict

import numpy as np

from haarlab import transform
from haarlab.basis import HaarBasis, get_basis
from haarlab.components.coeffs import HaarCoeffs
from haarlab.components.signal import ReconSignal, Signal
from haarlab.core.system import Mode, System
from haarlab.core.world import World


class HaarTransform(System):
    """Orthonormal Haar transform.

    Modes:
    - 'forward': Signal -> HaarCoeffs
    - 'inverse': HaarCoeffs -> ReconSignal
    """

    def __init__(
        self, mode: Mode = "forward", separable: bool = False, dtype: str | None = None
    ) -> None:
        """Initialize Haar transform system.

        Args:
            mode: 'forward' for decomposition, 'inverse' for reconstruction
            separable: Also transform the column axis of 2-D signals (forward only;
                the inverse follows the flag stored on HaarCoeffs)
            dtype: Basis dtype, configured default if None
        """
        super().__init__(mode=mode)
        self.separable = separable
        self.dtype = dtype

    def _basis(self, n: int) -> HaarBasis:
        return get_basis(n, dtype=self.dtype)

    def required_components(self) -> list[type]:
        if self.mode == "forward":
            return [Signal]
        return [HaarCoeffs]

    def produced_components(self) -> list[type]:
        if self.mode == "forward":
            return [HaarCoeffs]
        return [ReconSignal]

    def run(self, world: World, eids: list[int]) -> None:
        if self.mode == "forward":
            self._forward(world, eids)
        else:
            self._inverse(world, eids)

    def _forward(self, world: World, eids: list[int]) -> None:
        """Forward transform: Signal -> HaarCoeffs."""
        vectors: dict[int, list[int]] = defaultdict(list)
        for eid in eids:
            x = world.view(world.get_component(eid, Signal).x)
            if x.ndim == 1:
                vectors[x.shape[0]].append(eid)
                continue

            h_rows = self._basis(x.shape[0])
            if self.separable:
                c = transform.forward_separable(h_rows, self._basis(x.shape[1]), x)
            else:
                c = transform.forward_image(h_rows, x)
            world.add_component(
                eid, HaarCoeffs(c=world.store.put(c), n=x.shape[0], separable=self.separable)
            )

        # 1-D signals of equal length share one matrix product
        for n, group in vectors.items():
            stacked = np.stack(
                [world.view(world.get_component(eid, Signal).x) for eid in group], axis=1
            )
            coeffs = transform.forward_image(self._basis(n), stacked)
            for i, eid in enumerate(group):
                world.add_component(eid, HaarCoeffs(c=world.store.put(coeffs[:, i]), n=n))

    def _inverse(self, world: World, eids: list[int]) -> None:
        """Inverse transform: HaarCoeffs -> ReconSignal."""
        for eid in eids:
            coeffs = world.get_component(eid, HaarCoeffs)
            c = world.view(coeffs.c)
            h_rows = self._basis(coeffs.n)
            if c.ndim == 1:
                x = transform.inverse(h_rows, c)
            elif coeffs.separable:
                x = transform.inverse_separable(h_rows, self._basis(c.shape[1]), c)
            else:
                x = transform.inverse_image(h_rows, c)
            world.add_component(eid, ReconSignal(x=world.store.put(x)))

    def __repr__(self) -> str:
        return f"HaarTransform(mode={self.mode}, separable={self.separable})"
