"""Tests for haarlab.toml configuration loading."""

import logging
from collections.abc import Iterator

import pytest

from haarlab import config
from haarlab.config import Settings, get_settings, load_settings, reset_settings
from haarlab.utils.logging import configure_logging, get_logger


class TestLoadSettings:
    """Tests for settings resolution and validation."""

    def test_defaults_without_file(self) -> None:
        settings = load_settings()
        assert settings == Settings()
        assert settings.basis.dtype == "float64"
        assert settings.tolerance.atol == 1e-9
        assert settings.reconstruction.strategy == "incremental"
        assert settings.reconstruction.workers == 1

    def test_cwd_file(self, tmp_path) -> None:
        (tmp_path / "haarlab.toml").write_text('[basis]\ndtype = "float32"\n')
        assert load_settings().basis.dtype == "float32"

    def test_explicit_path(self, tmp_path) -> None:
        path = tmp_path / "custom.toml"
        path.write_text("[tolerance]\natol = 1e-6\n")
        assert load_settings(str(path)).tolerance.atol == 1e-6

    def test_env_overrides_path(self, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
        env_path = tmp_path / "env.toml"
        env_path.write_text("[reconstruction]\nworkers = 8\n")
        other = tmp_path / "other.toml"
        other.write_text("[reconstruction]\nworkers = 2\n")
        monkeypatch.setenv(config.CONFIG_ENV, str(env_path))
        assert load_settings(str(other)).reconstruction.workers == 8

    def test_missing_explicit_file(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_settings(str(tmp_path / "nope.toml"))

    def test_missing_env_file(self, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(config.CONFIG_ENV, str(tmp_path / "nope.toml"))
        with pytest.raises(FileNotFoundError):
            load_settings()

    @pytest.mark.parametrize(
        "body",
        [
            '[basis]\ndtype = "int8"\n',
            "[basis]\ncache_size = 0\n",
            "[basis]\nmax_dimension = 100\n",
            "[tolerance]\natol = -1.0\n",
            '[reconstruction]\nstrategy = "random"\n',
            "[reconstruction]\nworkers = 0\n",
        ],
    )
    def test_invalid_values(self, tmp_path, body: str) -> None:
        path = tmp_path / "bad.toml"
        path.write_text(body)
        with pytest.raises(ValueError, match="Invalid configuration"):
            load_settings(str(path))

    def test_get_settings_cached(self, tmp_path) -> None:
        first = get_settings()
        (tmp_path / "haarlab.toml").write_text("[reconstruction]\nworkers = 3\n")
        assert get_settings() is first
        reset_settings()
        assert get_settings().reconstruction.workers == 3

    def test_max_dimension_enforced(self, tmp_path) -> None:
        from haarlab.basis import build
        from haarlab.errors import InvalidDimension

        (tmp_path / "haarlab.toml").write_text("[basis]\nmax_dimension = 8\n")
        reset_settings()
        assert build(8).n == 8
        with pytest.raises(InvalidDimension, match="max_dimension"):
            build(16)


class TestLogging:
    """Tests for logging helpers."""

    @pytest.fixture(autouse=True)
    def _restore_root_logger(self) -> Iterator[None]:
        yield
        logger = logging.getLogger("haarlab")
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.setLevel(logging.NOTSET)
        logger.propagate = True

    def test_get_logger_namespaced(self) -> None:
        assert get_logger("basis").name == "haarlab.basis"
        assert get_logger("haarlab.transform").name == "haarlab.transform"
        assert get_logger().name == "haarlab"

    def test_configure_replaces_handlers(self, tmp_path) -> None:
        log_file = tmp_path / "logs" / "run.log"
        logger = configure_logging("DEBUG", log_file=log_file)
        configure_logging("DEBUG", log_file=log_file)
        assert len(logger.handlers) == 2
        assert logger.level == logging.DEBUG

        get_logger("basis").debug("hello")
        for handler in logger.handlers:
            handler.flush()
        assert "hello" in log_file.read_text()

        configure_logging(logging.WARNING)
        assert len(logger.handlers) == 1

    def test_unknown_level(self) -> None:
        with pytest.raises(ValueError, match="Unknown logging level"):
            configure_logging("LOUD")

    def test_level_from_config(self, tmp_path) -> None:
        (tmp_path / "haarlab.toml").write_text('[logging]\nlevel = "debug"\n')
        assert configure_logging().level == logging.DEBUG
