# tests/app/test_session.py
import pytest

from pool_dispatch.app.build import build
from pool_dispatch.dispatch.outcomes import Match, NoMatch, Route
from pool_dispatch.dispatch.parallel import CancelToken
from pool_dispatch.errors import DispatchCancelled, PoolRequestError
from pool_dispatch.io.recorder import MemorySink, Recorder


@pytest.fixture
def sink():
    return MemorySink()


@pytest.fixture
def app(node_link, hex_grid, sink):
    return build(
        {"name": "session-test", "run_id": "t-1", "seed": 7},
        graph_data=node_link,
        grid=hex_grid,
        use_logging=False,
        recorder=Recorder(sink),
    )


def test_match_records_events(app, sink):
    s = app.session
    s.place_driver("d1", "1")
    s.place_rider("r", "2")
    out = s.match("r")

    assert isinstance(out, Match)
    assert out.driver.id == "d1"
    assert out.distance == 10
    assert sink.names() == ["DriversPlaced", "RiderPlaced", "DriverMatched"]
    assert [ev.seq for ev in sink.events] == [1, 2, 3]
    matched = sink.events[-1]
    assert matched.run_id == "t-1"
    assert (matched.driver_id, matched.distance, matched.radius) == ("d1", 10.0, 1)
    assert matched.visited == len(out.path.visited)


def test_no_match_is_recorded(app, sink):
    app.session.place_rider("r", "2")
    out = app.session.match("r")
    assert isinstance(out, NoMatch)
    assert sink.events[-1].name == "NoMatch"
    assert sink.events[-1].reason == "no_candidates"


def test_placement_on_unknown_node_raises(app):
    with pytest.raises(KeyError):
        app.session.place_driver("d", "nowhere")
    with pytest.raises(KeyError):
        app.session.place_rider("r", "nowhere")


def test_duplicate_ids_are_rejected(app):
    s = app.session
    s.place_driver("d", "1")
    s.place_rider("r", "2")
    with pytest.raises(ValueError):
        s.place_driver("d", "3")
    with pytest.raises(ValueError):
        s.place_rider("r", "3")


def test_unknown_ids_raise_key_error(app):
    with pytest.raises(KeyError):
        app.session.match("ghost")
    with pytest.raises(KeyError):
        app.session.remove_driver("ghost")


def test_remove_driver(app):
    s = app.session
    s.place_driver("d", "1")
    s.place_rider("r", "2")
    assert s.remove_driver("d").node == "1"
    assert s.match("r").reason == "no_candidates"


def test_remove_driver_is_recorded(app, sink):
    s = app.session
    s.place_driver("d", "1")
    s.remove_driver("d")
    ev = sink.events[-1]
    assert (ev.name, ev.driver_id, ev.node) == ("DriverRemoved", "d", "1")


def test_edge_only_node_has_no_cell(node_link, hex_grid):
    node_link["links"].append({"source": 4, "target": "ghost", "length": 1.0})
    a = build({"name": "t"}, graph_data=node_link, grid=hex_grid, use_logging=False,
              recorder=Recorder(MemorySink()))
    assert "ghost" in a.graph
    with pytest.raises(KeyError, match="no coordinates"):
        a.session.place_driver("d", "ghost")
    with pytest.raises(KeyError, match="unknown node"):
        a.session.place_driver("d", "nowhere")


def test_random_placement_is_seeded(node_link, hex_grid):
    def nodes():
        a = build({"name": "seeded", "seed": 42}, graph_data=node_link, grid=hex_grid,
                  use_logging=False, recorder=Recorder(MemorySink()))
        return [d.node for d in a.session.place_random_drivers(3)]

    first = nodes()
    assert first == nodes()
    assert len(set(first)) == 3


def test_random_placement_avoids_occupied_nodes(app):
    s = app.session
    s.place_driver("fixed", "1")
    placed = s.place_random_drivers(4)
    assert sorted(d.node for d in placed) == ["2", "3", "4", "5"]
    assert [d.id for d in placed] == ["driver-1", "driver-2", "driver-3", "driver-4"]
    with pytest.raises(ValueError):
        s.place_random_drivers(1)


def test_reset_clears_entities_but_keeps_driver_numbering(app, sink):
    s = app.session
    s.place_random_drivers(2)
    s.place_rider("r", "2")
    s.reset()
    assert not s.drivers and not s.riders
    assert sink.events[-1].name == "SessionReset"
    assert (sink.events[-1].drivers, sink.events[-1].riders) == (2, 1)
    assert s.place_random_drivers(1)[0].id == "driver-3"


def test_pool_route(app, sink):
    s = app.session
    s.place_driver("d", "1")
    s.place_rider("r1", "2")
    s.place_rider("r2", "3")
    out = s.pool(["r2", "r1"], "4")

    assert isinstance(out, Route)
    assert out.order == ("r1", "r2")
    assert out.cost == 30
    assert out.path == ("1", "2", "3", "4")
    ev = sink.events[-1]
    assert ev.name == "PoolRouted"
    assert ev.path == ["1", "2", "3", "4"]
    assert ev.rider_ids == ["r2", "r1"]


def test_pool_requests_are_validated(app):
    s = app.session
    s.place_driver("d", "1")
    for rid, node in (("r1", "2"), ("r2", "3"), ("r3", "5")):
        s.place_rider(rid, node)
    with pytest.raises(PoolRequestError):
        s.pool(["r1", "r2"], "3")  # pickup on the destination
    with pytest.raises(PoolRequestError):
        s.pool(["r1", "r2", "r3"], "4")  # default max_riders is 2


def test_pool_without_drivers_is_recorded(app, sink):
    s = app.session
    s.place_rider("r1", "2")
    s.place_rider("r2", "3")
    out = s.pool(["r1", "r2"], "4")
    assert out.reason == "no_driver"
    assert sink.events[-1].name == "NoPoolRoute"


def test_cancelled_match_propagates(app):
    s = app.session
    s.place_driver("d", "1")
    s.place_rider("r", "2")
    token = CancelToken()
    token.cancel()
    with pytest.raises(DispatchCancelled):
        s.match("r", cancel=token)


def test_route_passthrough(app):
    r = app.session.route("1", "5")
    assert r.path == ("1", "2", "5")
    assert r.distance == 14
    assert r.visited[0] == "1" and r.visited[-1] == "5"
