"""Grid and k-means clustering plus cluster ranking."""

from __future__ import annotations

from tripslot.modules.scheduling.clustering import (
    NO_COORDS_KEY,
    Cluster,
    desired_cluster_count,
    grid_cluster_key,
    grid_clusters,
    kmeans_assign,
    kmeans_clusters,
    pick_initial_centroids,
    rank_clusters,
    score_cluster,
)
from tripslot.schemas.schedule import Coordinates


def test_grid_key_rounds_to_resolution():
    assert grid_cluster_key(Coordinates(48.857, 2.352)) == "2443,118"
    assert grid_cluster_key(None) == NO_COORDS_KEY


def test_grid_clusters_group_nearby_and_bucket_missing(make_candidate):
    cands = [
        make_candidate("b", 48.8570, 2.3520),
        make_candidate("a", 48.8575, 2.3525),
        make_candidate("far", 48.9500, 2.5000),
        make_candidate("nowhere"),
    ]
    clusters = grid_clusters(cands)
    by_key = {c.key: [i.id for i in c.items] for c in clusters}
    assert by_key[grid_cluster_key(Coordinates(48.857, 2.352))] == ["a", "b"]
    assert by_key[NO_COORDS_KEY] == ["nowhere"]
    assert len(clusters) == 3
    assert [c.key for c in clusters] == sorted(c.key for c in clusters)


def test_initial_centroids_are_farthest_points():
    points = [
        ("p1", Coordinates(0.0, 0.0)),
        ("p2", Coordinates(0.0, 0.01)),
        ("p3", Coordinates(1.0, 1.0)),
    ]
    assert pick_initial_centroids(points, 2) == [Coordinates(0.0, 0.0), Coordinates(1.0, 1.0)]
    assert pick_initial_centroids(points, 0) == []


def test_kmeans_separates_two_neighbourhoods():
    points = [
        ("a1", Coordinates(0.0, 0.0)),
        ("a2", Coordinates(0.0, 0.01)),
        ("b1", Coordinates(1.0, 1.0)),
        ("b2", Coordinates(1.0, 1.01)),
    ]
    assignment, centroids = kmeans_assign(points, 2)
    assert assignment["a1"] == assignment["a2"]
    assert assignment["b1"] == assignment["b2"]
    assert assignment["a1"] != assignment["b1"]
    assert len(centroids) == 2


def test_kmeans_is_deterministic_regardless_of_input_order():
    points = [
        ("x", Coordinates(10.0, 10.0)),
        ("y", Coordinates(10.0, 10.02)),
        ("z", Coordinates(10.5, 10.5)),
        ("w", Coordinates(10.5, 10.52)),
    ]
    assert kmeans_assign(points, 2) == kmeans_assign(list(reversed(points)), 2)


def test_kmeans_clusters_caps_k_and_sets_aside_missing(make_candidate):
    cands = [
        make_candidate("1", 1.0, 1.0),
        make_candidate("2", 1.0, 1.0),
        make_candidate("3"),
    ]
    clusters, loose = kmeans_clusters(cands, desired_count=5)
    assert len(clusters) == 1
    assert [c.id for c in clusters[0].items] == ["1", "2"]
    assert [c.id for c in loose] == ["3"]


def test_kmeans_clusters_keys_are_zero_padded(make_candidate):
    cands = [make_candidate(str(i), float(i), float(i)) for i in range(12)]
    clusters, _ = kmeans_clusters(cands, desired_count=10)
    assert all(len(c.key) == 3 for c in clusters)


def test_desired_cluster_count():
    assert desired_cluster_count(0, 3, 4) == 0
    assert desired_cluster_count(3, 3, 4) == 1
    assert desired_cluster_count(9, 3, 4) == 3
    assert desired_cluster_count(20, 2, 4) == 2


def test_score_counts_theme_and_interest_matches(make_candidate):
    items = [
        make_candidate("m", type_tags=("museum",)),
        make_candidate("r", type_tags=("restaurant",)),
        make_candidate("x"),
    ]
    assert score_cluster(items) == 3
    assert score_cluster(items, requested_theme="museums") == 13
    assert score_cluster(items, requested_theme="museums", interests=("food",)) == 16
    assert score_cluster(items, requested_theme="mixed") == 3
    assert score_cluster(items, requested_theme="Museums", interests=("Food",)) == 16
    assert score_cluster(items, requested_theme="MIXED") == 3


def test_rank_clusters_by_score_then_key(make_candidate):
    museum = Cluster("b", [make_candidate("m", type_tags=("museum",))])
    plain_a = Cluster("a", [make_candidate("p1"), make_candidate("p2")])
    plain_c = Cluster("c", [make_candidate("p3"), make_candidate("p4")])
    ranked = rank_clusters([plain_c, museum, plain_a], requested_theme="museums")
    assert [c.key for c in ranked] == ["b", "a", "c"]
    assert ranked[0].score == 11
