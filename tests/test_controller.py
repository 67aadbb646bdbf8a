"""
Test IterationController: initialize / step / revert / reset
"""

import random
import tempfile
from pathlib import Path

import pytest

from stepkmeans.clustering.models import Centroid, ClusterState
from stepkmeans.config import KMeansConfig
from stepkmeans.core.controller import IterationController
from stepkmeans.core.errors import InvalidParameter, NotReady
from stepkmeans.core.logger import EventLog, read_events
from stepkmeans.core.store import Phase


SCENARIO_A = [(0, 0), (0, 1), (10, 10), (10, 11)]


def _controller(coords, seed=0):
    controller = IterationController(rng=random.Random(seed))
    for x, y in coords:
        controller.add_point(x, y)
    return controller


def _seed_centroids(controller, centroids):
    """Install known centroids in place of random sampling."""
    store = controller.store
    state = ClusterState(points=store.points, centroids=tuple(centroids))
    store.seed(state, k=len(centroids), colors=[f"#0000{i:02x}" for i in range(len(centroids))])


def _random_coords(n, seed):
    rng = random.Random(seed)
    return [(rng.uniform(0, 10), rng.uniform(0, 10)) for _ in range(n)]


def test_initialize_centroid_count_and_positions():
    """After initialize(k) there are k centroids, each on a distinct point."""
    for k in (1, 2, 5, 12):
        controller = _controller(_random_coords(12, seed=k), seed=k)

        colors = controller.initialize(k)

        view = controller.view()
        point_coords = {(p.x, p.y) for p in view.points}
        centroid_coords = [(c.x, c.y) for c in view.centroids]
        assert len(view.centroids) == k
        assert len(set(centroid_coords)) == k
        assert set(centroid_coords) <= point_coords
        assert len(colors) == k == len(view.colors)
        assert view.k == k
        assert view.phase == Phase.READY


def test_initialize_resets_session_flags():
    controller = _controller(SCENARIO_A)
    controller.initialize(2)
    controller.step()
    controller.step()

    controller.initialize(2)

    view = controller.view()
    assert view.iteration == 0
    assert view.converged is False
    assert view.history_depth == 0
    assert all(p.cluster is None for p in view.points)


def test_centroids_decoupled_from_points():
    controller = _controller([(1, 1)])
    controller.initialize(1)
    controller.add_point(9, 9)

    assert controller.view().centroids == (Centroid(1.0, 1.0),)


def test_initialize_same_seed_same_result():
    a = _controller(_random_coords(20, seed=3), seed=11)
    b = _controller(_random_coords(20, seed=3), seed=11)

    assert a.initialize(4) == b.initialize(4)
    assert a.view().centroids == b.view().centroids


def test_initialize_invalid_k_no_mutation():
    """Too few points (or bad k) raises InvalidParameter and creates nothing."""
    controller = _controller([(1, 1)])
    before = controller.view()

    for bad_k in (2, 0, -1, 1.5, True, "2"):
        with pytest.raises(InvalidParameter):
            controller.initialize(bad_k)

    view = controller.view()
    assert view == before
    assert view.centroids == ()
    assert view.colors == ()
    assert view.history_depth == 0


def test_initialize_failure_keeps_existing_session():
    controller = _controller(SCENARIO_A)
    controller.initialize(2)
    controller.step()
    before = controller.view()

    with pytest.raises(InvalidParameter):
        controller.initialize(5)

    assert controller.view() == before


def test_scenario_separated_groups():
    """Two tight groups seeded at (0,0) and (10,10) converge to their means."""
    controller = _controller(SCENARIO_A)
    _seed_centroids(controller, [Centroid(0.0, 0.0), Centroid(10.0, 10.0)])

    first = controller.step()

    assert first.labels == (0, 0, 1, 1)
    assert [p.cluster for p in controller.view().points] == [0, 0, 1, 1]
    assert controller.view().centroids == (Centroid(0.0, 0.5), Centroid(10.0, 10.5))
    assert first.converged is False
    assert first.iteration == 1

    second = controller.step()

    assert second.converged is True
    assert second.iteration == 2
    view = controller.view()
    assert view.converged
    assert view.phase == Phase.CONVERGED
    assert view.centroids == (Centroid(0.0, 0.5), Centroid(10.0, 10.5))


def test_assignments_always_in_range():
    controller = _controller(_random_coords(40, seed=5), seed=5)
    controller.initialize(4)

    for _ in range(10):
        if controller.step() is None:
            break
        for p in controller.view().points:
            assert 0 <= p.cluster < 4


def test_empty_cluster_centroid_kept_exactly():
    controller = _controller([(0, 0), (0, 1), (1, 0)])
    far = Centroid(100.25, -3.1)
    _seed_centroids(controller, [Centroid(0.0, 0.0), far])

    result = controller.step()

    assert result.cluster_sizes == (3, 0)
    assert controller.view().centroids[1] == far


def test_revert_restores_pre_step_state_exactly():
    controller = _controller(_random_coords(25, seed=8), seed=8)
    controller.initialize(3)
    controller.step()

    state = controller.store.get_state()
    iteration = controller.view().iteration
    depth = controller.view().history_depth

    assert controller.step() is not None
    snapshot = controller.revert()

    assert snapshot is not None
    assert controller.store.get_state() == state
    assert controller.view().iteration == iteration
    assert controller.view().history_depth == depth


def test_revert_to_post_init_state():
    controller = _controller(SCENARIO_A, seed=2)
    controller.initialize(2)
    seeded = controller.view()

    controller.step()
    controller.revert()

    view = controller.view()
    assert view.points == seeded.points
    assert view.centroids == seeded.centroids
    assert view.iteration == 0
    assert view.phase == Phase.READY
    assert view.can_step
    assert not view.can_revert


def test_revert_empty_history_is_noop():
    controller = _controller(SCENARIO_A)
    before = controller.view()
    assert controller.revert() is None
    assert controller.view() == before

    controller.initialize(2)
    before = controller.view()
    assert controller.revert() is None
    assert controller.view() == before

    with pytest.raises(NotReady):
        controller.revert(strict=True)
    assert controller.view() == before


def test_step_without_centroids_is_noop():
    controller = _controller(SCENARIO_A)
    before = controller.view()

    assert controller.step() is None
    assert controller.view() == before

    with pytest.raises(NotReady):
        controller.step(strict=True)
    assert controller.view() == before


def test_converged_stays_until_initialize_or_reset():
    controller = _controller(SCENARIO_A)
    _seed_centroids(controller, [Centroid(0.0, 0.5), Centroid(10.0, 10.5)])

    result = controller.step()
    assert result.converged
    converged_view = controller.view()

    for _ in range(3):
        assert controller.step() is None
        assert controller.view() == converged_view

    with pytest.raises(NotReady):
        controller.step(strict=True)

    controller.initialize(2)
    assert controller.view().converged is False

    _seed_centroids(controller, [Centroid(0.0, 0.5), Centroid(10.0, 10.5)])
    controller.step()
    controller.reset()
    assert controller.view().converged is False


def test_revert_clears_converged():
    """Reverting the converging step leaves a state that can step again."""
    controller = _controller(SCENARIO_A)
    _seed_centroids(controller, [Centroid(0.0, 0.0), Centroid(10.0, 10.0)])
    controller.step()
    controller.step()
    assert controller.view().converged

    controller.revert()

    view = controller.view()
    assert view.converged is False
    assert view.iteration == 1
    assert view.can_step

    assert controller.step().converged
    assert controller.view().iteration == 2


def test_reset_returns_to_empty():
    controller = _controller(SCENARIO_A)
    controller.initialize(2)
    controller.step()

    controller.reset()

    view = controller.view()
    assert view.phase == Phase.EMPTY
    assert view.points == ()
    assert view.history_depth == 0
    assert controller.add_point(1, 1).name == "p1"


def test_get_status():
    controller = _controller(SCENARIO_A)
    _seed_centroids(controller, [Centroid(0.0, 0.0), Centroid(10.0, 10.0)])
    controller.step()

    status = controller.get_status()

    assert status["phase"] == "ready"
    assert status["num_points"] == 4
    assert status["iteration"] == 1
    assert status["history_depth"] == 1
    assert status["clusters"][0]["members"] == ["p1", "p2"]
    assert status["clusters"][1]["centroid"] == {"x": 10.0, "y": 10.5}


def test_event_log_records_operations():
    with tempfile.TemporaryDirectory() as tmpdir:
        log_dir = Path(tmpdir) / "logs"

        with EventLog(log_dir) as event_log:
            config = KMeansConfig(seed=1)
            controller = IterationController.from_config(config, event_log=event_log)
            for x, y in SCENARIO_A:
                controller.add_point(x, y)
            controller.initialize(2)
            controller.step()
            controller.revert()
            controller.revert()
            with pytest.raises(InvalidParameter):
                controller.initialize(9)
            controller.reset()

        events = read_events(log_dir / "events.jsonl")

    types = [e["type"] for e in events]
    assert types == [
        "session_start",
        "point_added", "point_added", "point_added", "point_added",
        "initialize",
        "step",
        "revert",
        "error",
        "error",
        "reset",
    ]
    assert events[0]["config"]["seed"] == 1
    assert events[5]["k"] == 2
    assert len(events[6]["labels"]) == 4
    assert events[8]["error_type"] == "not_ready"
    assert events[8]["operation"] == "revert"
    assert events[9]["operation"] == "initialize"
    assert all("timestamp" in e for e in events)
