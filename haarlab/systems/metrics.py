"""Reconstruction quality metrics.

Uses scikit-image metrics. Results go into ``world.metadata[eid]`` rather
than new components.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from skimage.metrics import mean_squared_error, peak_signal_noise_ratio

from haarlab.components.reconstruction import Reconstructions
from haarlab.components.signal import ReconSignal, Signal
from haarlab.core.system import System
from haarlab.reconstruct import ReconstructionSequence, residual_norms

if TYPE_CHECKING:
    from haarlab.core.world import World


def _data_range(x: np.ndarray, data_range: float | None) -> float:
    if data_range is not None:
        return data_range
    span = float(np.ptp(x))
    # constant signals have no dynamic range
    return span if span > 0.0 else 1.0


def _psnr(x: np.ndarray, y: np.ndarray, mse: float, data_range: float) -> float:
    if mse == 0.0:
        return float("inf")
    return float(peak_signal_noise_ratio(x, y, data_range=data_range))


class ReconstructionError(System):
    """Error of every progressive reconstruction frame against the signal.

    Stores per-frame lists in world.metadata[eid]:
    - 'recon_k': prefix lengths
    - 'recon_residual': ||x - recon_k||
    - 'recon_mse': mean squared error
    - 'recon_psnr': PSNR in dB (inf for an exact frame)
    """

    def __init__(self, data_range: float | None = None):
        """Initialize metric system.

        Args:
            data_range: PSNR data range (signal peak-to-peak if None)
        """
        super().__init__(mode="forward")
        self.data_range = data_range

    def required_components(self) -> list[type]:
        return [Signal, Reconstructions]

    def produced_components(self) -> list[type]:
        return []

    def run(self, world: World, eids: list[int]) -> None:
        for eid in eids:
            x = world.view(world.get_component(eid, Signal).x).astype(np.float64)
            recon = world.get_component(eid, Reconstructions)
            sequence = ReconstructionSequence(
                frames=world.view(recon.frames), first_k=recon.first_k
            )
            data_range = _data_range(x, self.data_range)

            mse = [float(mean_squared_error(x, frame)) for frame in sequence]
            world.metadata[eid]["recon_k"] = sequence.ks
            world.metadata[eid]["recon_residual"] = residual_norms(x, sequence).tolist()
            world.metadata[eid]["recon_mse"] = mse
            world.metadata[eid]["recon_psnr"] = [
                _psnr(x, frame, m, data_range) for frame, m in zip(sequence, mse)
            ]


class RoundTripError(System):
    """Compare a Signal with its full inverse-transform ReconSignal.

    Stores 'roundtrip_mse' and 'roundtrip_max_abs' in world.metadata[eid].
    """

    def __init__(self) -> None:
        super().__init__(mode="forward")

    def required_components(self) -> list[type]:
        return [Signal, ReconSignal]

    def produced_components(self) -> list[type]:
        return []

    def run(self, world: World, eids: list[int]) -> None:
        for eid in eids:
            x = world.view(world.get_component(eid, Signal).x)
            y = world.view(world.get_component(eid, ReconSignal).x)
            if x.shape != y.shape:
                raise ValueError(f"Shape mismatch: signal {x.shape} vs recon {y.shape}")
            world.metadata[eid]["roundtrip_mse"] = float(mean_squared_error(x, y))
            world.metadata[eid]["roundtrip_max_abs"] = float(np.max(np.abs(x - y)))
