"""Tests for environment-driven configuration."""

import pytest

from notegraph.config import EngineConfig, load_config

_VARS = (
    "NOTEGRAPH_SEED",
    "NOTEGRAPH_LAYOUT_ITERATIONS",
    "NOTEGRAPH_BARNES_HUT_THRESHOLD",
    "NOTEGRAPH_BARNES_HUT_THETA",
    "NOTEGRAPH_KMEANS_ITERATIONS",
    "NOTEGRAPH_MAX_PATH_NODES",
    "NOTEGRAPH_ENABLE_LOGGING",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults_without_environment(clean_env) -> None:
    assert load_config() == EngineConfig()


def test_environment_overrides(clean_env) -> None:
    clean_env.setenv("NOTEGRAPH_SEED", "42")
    clean_env.setenv("NOTEGRAPH_BARNES_HUT_THETA", "0.5")
    clean_env.setenv("NOTEGRAPH_MAX_PATH_NODES", "10")
    clean_env.setenv("NOTEGRAPH_ENABLE_LOGGING", "yes")
    cfg = load_config()
    assert cfg.seed == 42
    assert cfg.barnes_hut_theta == 0.5
    assert cfg.max_path_nodes == 10
    assert cfg.enable_logging is True
    assert cfg.layout_iterations == 100


def test_seeded_rng_is_reproducible() -> None:
    cfg = EngineConfig(seed=3)
    assert cfg.make_rng().random() == cfg.make_rng().random()
