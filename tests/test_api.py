"""Tests for the high-level API."""

import numpy as np
import pytest

import haarlab
from haarlab import decompose, progressive, recompose
from haarlab.errors import DimensionMismatch
from haarlab.reconstruct import ReconstructionSequence

SQRT2 = np.sqrt(2.0)


class TestDecomposeRecompose:
    def test_decompose_known(self) -> None:
        np.testing.assert_allclose(
            decompose([1.0, 2.0, 3.0, 4.0]), [5.0, -2.0, -1.0 / SQRT2, -1.0 / SQRT2]
        )

    def test_decompose_returns_writable_copy(self) -> None:
        c = decompose(np.arange(8.0))
        assert c.flags.writeable
        c[0] = 0.0

    def test_integer_input(self) -> None:
        c = decompose([1, 2, 3, 4])
        assert c.dtype == np.float64

    @pytest.mark.parametrize("separable", [False, True])
    def test_round_trip_image(self, separable: bool) -> None:
        image = np.random.default_rng(8).standard_normal((16, 8))
        c = decompose(image, separable=separable)
        np.testing.assert_allclose(recompose(c, separable=separable), image, atol=1e-10)

    def test_separable_differs(self) -> None:
        image = np.random.default_rng(9).standard_normal((4, 4))
        assert not np.allclose(decompose(image), decompose(image, separable=True))

    def test_config_dtype(self, tmp_path) -> None:
        path = tmp_path / "f32.toml"
        path.write_text('[basis]\ndtype = "float32"\n')
        x = np.arange(8, dtype=np.float32)
        c = decompose(x, config_path=str(path))
        assert c.dtype == np.float32
        np.testing.assert_allclose(recompose(c, config_path=str(path)), x, atol=1e-5)

    def test_non_dyadic(self) -> None:
        with pytest.raises(DimensionMismatch):
            decompose(np.zeros(12))
        with pytest.raises(DimensionMismatch):
            recompose(np.zeros(12))


class TestProgressive:
    def test_sequence(self) -> None:
        x = np.random.default_rng(10).standard_normal(64)
        seq = progressive(x)

        assert isinstance(seq, ReconstructionSequence)
        assert len(seq) == 63
        assert seq.ks[0] == 2 and seq.ks[-1] == 64
        np.testing.assert_allclose(seq.at(64), x, atol=1e-10)
        assert not seq.frames.flags.writeable

    def test_h4_example(self) -> None:
        seq = progressive([1.0, 2.0, 3.0, 4.0])
        np.testing.assert_allclose(seq.at(2), [1.5, 1.5, 3.5, 3.5])
        np.testing.assert_allclose(seq.at(3), [1.0, 2.0, 3.5, 3.5])
        np.testing.assert_allclose(seq.at(4), [1.0, 2.0, 3.0, 4.0])

    @pytest.mark.parametrize("strategy", ["incremental", "independent"])
    def test_strategies_agree(self, strategy: str) -> None:
        x = np.random.default_rng(11).standard_normal(32)
        reference = progressive(x, strategy="incremental").frames
        np.testing.assert_allclose(
            progressive(x, strategy=strategy, workers=3).frames, reference, atol=1e-10
        )

    def test_config_path(self, tmp_path) -> None:
        path = tmp_path / "run.toml"
        path.write_text('[reconstruction]\nstrategy = "independent"\nworkers = 2\n')
        x = np.arange(16.0)
        np.testing.assert_allclose(progressive(x, config_path=str(path)).at(16), x, atol=1e-10)

    def test_missing_config_path(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            progressive(np.arange(4.0), config_path=str(tmp_path / "missing.toml"))

    def test_extended_precision(self) -> None:
        """Wider-than-float64 signals get a store sized to their itemsize."""
        x = np.arange(1024, dtype=np.longdouble)
        seq = progressive(x)
        assert len(seq) == 1023
        assert seq.frames.dtype == np.result_type(np.longdouble, np.float64)
        np.testing.assert_allclose(seq.at(1024).astype(np.float64), np.arange(1024.0), atol=1e-8)

    def test_image_separable(self) -> None:
        image = np.random.default_rng(12).standard_normal((8, 8))
        seq = progressive(image, separable=True)
        assert seq.frames.shape == (7, 8, 8)
        np.testing.assert_allclose(seq.at(8), image, atol=1e-10)


def test_public_exports() -> None:
    for name in haarlab.__all__:
        assert hasattr(haarlab, name)
    assert haarlab.__version__ == "0.1.0"
