"""Nearest-neighbour visiting order."""

from __future__ import annotations

from tripslot.modules.scheduling.sequencer import order_by_nearest_neighbor, pick_start_coordinate
from tripslot.schemas.schedule import Coordinates


def _ids(items):
    return [c.id for c in items]


def test_walks_to_nearest_unvisited(make_candidate):
    cands = [
        make_candidate("far", 0.0, 0.05),
        make_candidate("mid", 0.0, 0.02),
        make_candidate("near", 0.0, 0.01),
    ]
    assert _ids(order_by_nearest_neighbor(cands, Coordinates(0.0, 0.0))) == ["near", "mid", "far"]


def test_without_start_seeds_westernmost(make_candidate):
    cands = [
        make_candidate("east", 0.0, 0.03),
        make_candidate("west", 0.0, -0.03),
        make_candidate("centre", 0.0, 0.0),
    ]
    assert _ids(order_by_nearest_neighbor(cands)) == ["west", "centre", "east"]


def test_missing_coordinates_go_last_by_name(make_candidate):
    cands = [
        make_candidate("z", name="Zoo pass"),
        make_candidate("located", 1.0, 1.0),
        make_candidate("a", name="Audio tour"),
    ]
    assert _ids(order_by_nearest_neighbor(cands)) == ["located", "a", "z"]


def test_equal_distances_prefer_smaller_id(make_candidate):
    cands = [
        make_candidate("b", 0.0, 0.01),
        make_candidate("a", 0.0, -0.01),
    ]
    assert _ids(order_by_nearest_neighbor(cands, Coordinates(0.0, 0.0))) == ["a", "b"]


def test_empty_input():
    assert order_by_nearest_neighbor([]) == []


def test_start_prefers_earliest_located_block(make_candidate, make_block):
    blocks = [
        make_block("2024-06-01", 700, 760, 2.0, 2.0),
        make_block("2024-06-01", 540, 600),
        make_block("2024-06-01", 600, 660, 1.0, 1.0),
    ]
    assert pick_start_coordinate([make_candidate("x", 5.0, 5.0)], blocks) == Coordinates(1.0, 1.0)


def test_start_falls_back_to_candidate_centroid(make_candidate):
    cands = [make_candidate("a", 0.0, 0.0), make_candidate("b", 2.0, 2.0), make_candidate("c")]
    assert pick_start_coordinate(cands) == Coordinates(1.0, 1.0)
    assert pick_start_coordinate([make_candidate("c")]) is None
