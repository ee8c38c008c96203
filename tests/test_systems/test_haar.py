"""Tests for the HaarTransform system."""

import numpy as np
import pytest

from haarlab.basis import get_basis
from haarlab.components.coeffs import HaarCoeffs
from haarlab.components.signal import ReconSignal
from haarlab.core.world import World
from haarlab.systems.haar import HaarTransform

SQRT2 = np.sqrt(2.0)


class TestHaarTransformForward:
    """Test Signal -> HaarCoeffs."""

    def test_known_coefficients(self) -> None:
        world = World()
        eid = world.spawn_signal([1.0, 2.0, 3.0, 4.0])
        coeffs = world.pipe(eid).to(HaarTransform(mode="forward")).out(HaarCoeffs)

        assert coeffs.n == 4
        assert not coeffs.separable
        np.testing.assert_allclose(
            world.view(coeffs.c), [5.0, -2.0, -1.0 / SQRT2, -1.0 / SQRT2], atol=1e-12
        )

    def test_mixed_lengths(self) -> None:
        """Signals of different lengths each use their own basis."""
        world = World()
        rng = np.random.default_rng(1)
        signals = [rng.standard_normal(n) for n in (4, 8, 4, 16)]
        eids = [world.spawn_signal(s) for s in signals]

        results = world.pipe(eids).to(HaarTransform()).out_all(HaarCoeffs)
        for signal, coeffs in zip(signals, results):
            n = signal.shape[0]
            assert coeffs.n == n
            np.testing.assert_allclose(
                world.view(coeffs.c), get_basis(n).matrix.T @ signal, atol=1e-12
            )

    def test_image_rows_only(self) -> None:
        world = World()
        image = np.arange(32.0).reshape(8, 4)
        eid = world.spawn_signal(image)
        coeffs = world.pipe(eid).to(HaarTransform()).out(HaarCoeffs)

        assert coeffs.n == 8
        np.testing.assert_allclose(
            world.view(coeffs.c), get_basis(8).matrix.T @ image, atol=1e-12
        )

    def test_image_separable(self) -> None:
        world = World()
        image = np.arange(32.0).reshape(8, 4)
        eid = world.spawn_signal(image)
        coeffs = world.pipe(eid).to(HaarTransform(separable=True)).out(HaarCoeffs)

        assert coeffs.separable
        expected = get_basis(8).matrix.T @ image @ get_basis(4).matrix
        np.testing.assert_allclose(world.view(coeffs.c), expected, atol=1e-12)

    def test_float32_signal(self) -> None:
        world = World()
        eid = world.spawn_signal(np.ones(8, dtype=np.float32))
        coeffs = world.pipe(eid).to(HaarTransform()).out(HaarCoeffs)
        c = world.view(coeffs.c)
        # only the scaling coefficient is nonzero for a constant signal
        assert c[0] == pytest.approx(np.sqrt(8.0), rel=1e-6)
        np.testing.assert_allclose(c[1:], 0.0, atol=1e-6)


class TestHaarTransformInverse:
    """Test HaarCoeffs -> ReconSignal."""

    @pytest.mark.parametrize("separable", [False, True])
    def test_image_round_trip(self, separable: bool) -> None:
        world = World()
        image = np.random.default_rng(2).standard_normal((4, 16))
        eid = world.spawn_signal(image)
        recon = (
            world.pipe(eid)
            .to(HaarTransform(mode="forward", separable=separable))
            .to(HaarTransform(mode="inverse"))
            .out(ReconSignal)
        )
        np.testing.assert_allclose(world.view(recon.x), image, atol=1e-12)

    def test_inverse_from_coefficients(self) -> None:
        world = World()
        eid = world.new_entity()
        c = np.array([5.0, -2.0, -1.0 / SQRT2, -1.0 / SQRT2])
        world.add_component(eid, HaarCoeffs(c=world.store.put(c), n=4))
        recon = world.pipe(eid).to(HaarTransform(mode="inverse")).out(ReconSignal)
        np.testing.assert_allclose(world.view(recon.x), [1.0, 2.0, 3.0, 4.0], atol=1e-12)

    def test_requirements(self) -> None:
        assert HaarTransform(mode="forward").produced_components() == [HaarCoeffs]
        assert HaarTransform(mode="inverse").required_components() == [HaarCoeffs]
        assert HaarTransform(mode="inverse").produced_components() == [ReconSignal]

    def test_repr(self) -> None:
        assert repr(HaarTransform(separable=True)) == "HaarTransform(mode=forward, separable=True)"
