"""
Test config loading and validation
"""

import tempfile
from pathlib import Path

import pytest

from stepkmeans.config import (
    KMeansConfig,
    PlotBounds,
    load_config,
    save_config,
    load_points,
)
from stepkmeans.core.errors import ConfigError


def _write(tmpdir, name, text):
    path = Path(tmpdir) / name
    path.write_text(text)
    return path


def test_defaults():
    config = KMeansConfig().validate()

    assert config.k == 2
    assert config.max_k == 10
    assert config.convergence_tol == 1e-3
    assert config.seed is None
    assert config.plot.x_max == 13.0
    assert config.plot.input_x_max == 10.0


def test_plot_bounds_contains():
    bounds = PlotBounds()
    assert bounds.contains(0, 0)
    assert bounds.contains(10, 10)
    assert not bounds.contains(10.5, 3)
    assert not bounds.contains(3, -1)


def test_from_dict_ignores_unknown_keys():
    config = KMeansConfig.from_dict({
        "k": 3,
        "plot": {"x_max": 20, "unknown": 1},
        "theme": "dark",
    })

    assert config.k == 3
    assert isinstance(config.plot, PlotBounds)
    assert config.plot.x_max == 20
    assert config.plot.y_max == 10.0


def test_validate_rejects_bad_values():
    bad = [
        KMeansConfig(k=0),
        KMeansConfig(k=True),
        KMeansConfig(k=11),
        KMeansConfig(convergence_tol=0),
        KMeansConfig(seed="abc"),
        KMeansConfig(plot=PlotBounds(x_max=-1)),
    ]
    for config in bad:
        with pytest.raises(ConfigError):
            config.validate()


def test_load_config_merges_defaults():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = _write(tmpdir, "config.yaml", "k: 4\nseed: 7\nplot:\n  y_max: 12\n")

        config = load_config(path)

    assert config.k == 4
    assert config.seed == 7
    assert config.plot.y_max == 12
    assert config.plot.x_max == 13.0
    assert config.convergence_tol == 1e-3


def test_load_config_errors():
    with tempfile.TemporaryDirectory() as tmpdir:
        with pytest.raises(ConfigError):
            load_config(Path(tmpdir) / "missing.yaml")
        with pytest.raises(ConfigError):
            load_config(_write(tmpdir, "list.yaml", "- 1\n- 2\n"))
        with pytest.raises(ConfigError):
            load_config(_write(tmpdir, "broken.yaml", "k: [1, 2\n"))
        with pytest.raises(ConfigError):
            load_config(_write(tmpdir, "zero.yaml", "k: 0\n"))


def test_save_then_load():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "nested" / "config.yaml"
        save_config(KMeansConfig(k=5, seed=3, log_dir="logs"), path)

        config = load_config(path)

    assert config == KMeansConfig(k=5, seed=3, log_dir="logs")


def test_load_points_formats():
    with tempfile.TemporaryDirectory() as tmpdir:
        pairs = load_points(_write(tmpdir, "a.yaml", "- [1, 2]\n- [3.5, 4]\n"))
        mapped = load_points(_write(tmpdir, "b.yaml", "points:\n  - {x: 1, y: 2}\n  - {x: 3, y: 4}\n"))
        as_json = load_points(_write(tmpdir, "c.json", '{"points": [[0, 0], [10, 10]]}'))
        empty = load_points(_write(tmpdir, "d.yaml", ""))

    assert pairs == [(1.0, 2.0), (3.5, 4.0)]
    assert mapped == [(1.0, 2.0), (3.0, 4.0)]
    assert as_json == [(0.0, 0.0), (10.0, 10.0)]
    assert empty == []


def test_load_points_errors():
    with tempfile.TemporaryDirectory() as tmpdir:
        with pytest.raises(ConfigError):
            load_points(Path(tmpdir) / "missing.yaml")
        with pytest.raises(ConfigError):
            load_points(_write(tmpdir, "short.yaml", "- [1]\n"))
        with pytest.raises(ConfigError):
            load_points(_write(tmpdir, "words.yaml", "- [a, b]\n"))
        with pytest.raises(ConfigError):
            load_points(_write(tmpdir, "scalar.yaml", "42\n"))


def test_sample_files_load():
    root = Path(__file__).parent.parent / "samples"

    config = load_config(root / "config.yaml")
    points = load_points(root / "points.yaml")

    assert config.k == 2
    assert len(points) == 8
