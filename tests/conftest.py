"""Shared fixtures: isolate configuration and the basis cache per test."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from haarlab import basis, config


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    monkeypatch.delenv(config.CONFIG_ENV, raising=False)
    # no stray haarlab.toml in cwd or home
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    config.reset_settings()
    basis.clear_cache()
    yield
    config.reset_settings()
    basis.clear_cache()
