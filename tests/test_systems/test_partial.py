"""Tests for the PartialReconstruct system."""

import numpy as np
import pytest

from haarlab.components.reconstruction import Reconstructions
from haarlab.core.world import World
from haarlab.systems.haar import HaarTransform
from haarlab.systems.partial import PartialReconstruct


def _run(x: np.ndarray, separable: bool = False, **kwargs) -> tuple[World, Reconstructions]:
    world = World()
    eid = world.spawn_signal(x)
    recon = (
        world.pipe(eid)
        .to(HaarTransform(separable=separable))
        .to(PartialReconstruct(**kwargs))
        .out(Reconstructions)
    )
    return world, recon


class TestPartialReconstruct:
    def test_frame_count_and_exact_last(self) -> None:
        x = np.random.default_rng(3).standard_normal(32)
        world, recon = _run(x)
        frames = world.view(recon.frames)

        assert frames.shape == (31, 32)
        assert recon.first_k == 2
        np.testing.assert_allclose(frames[-1], x, atol=1e-10)

    def test_second_frame_is_half_means(self) -> None:
        """With two basis vectors each half of the signal becomes its mean."""
        world, recon = _run(np.array([1.0, 2.0, 3.0, 4.0]))
        np.testing.assert_allclose(world.view(recon.frames)[0], [1.5, 1.5, 3.5, 3.5])

    @pytest.mark.parametrize("strategy", ["incremental", "independent"])
    def test_strategy_recorded(self, strategy: str) -> None:
        _, recon = _run(np.arange(8.0), strategy=strategy, workers=2)
        assert recon.strategy == strategy

    def test_configured_strategy(self, tmp_path) -> None:
        (tmp_path / "haarlab.toml").write_text('[reconstruction]\nstrategy = "independent"\n')
        _, recon = _run(np.arange(8.0))
        assert recon.strategy == "independent"

    @pytest.mark.parametrize("separable", [False, True])
    def test_image(self, separable: bool) -> None:
        image = np.random.default_rng(4).standard_normal((8, 4))
        world, recon = _run(image, separable=separable)
        frames = world.view(recon.frames)

        assert frames.shape == (7, 8, 4)
        np.testing.assert_allclose(frames[-1], image, atol=1e-10)
        # first frame: top and bottom halves replaced by their column means
        np.testing.assert_allclose(frames[0][:4], np.tile(image[:4].mean(axis=0), (4, 1)))
        np.testing.assert_allclose(frames[0][4:], np.tile(image[4:].mean(axis=0), (4, 1)))

    def test_frames_read_only(self) -> None:
        world, recon = _run(np.arange(8.0))
        assert not world.view(recon.frames).flags.writeable

    def test_repr(self) -> None:
        assert repr(PartialReconstruct("independent", 4)) == (
            "PartialReconstruct(strategy=independent, workers=4)"
        )
