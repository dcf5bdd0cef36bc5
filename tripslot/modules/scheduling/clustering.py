"""
modules/scheduling/clustering.py
--------------------------------
Geographic grouping of unlocked candidates so each day stays local.

Two interchangeable strategies:

  grid  : round lat/lng to a fixed grid (GRID_RESOLUTION_DEG) and group by
           bucket; candidates without coordinates share the "no_coords" bucket.
  kmeans: Lloyd's algorithm with farthest-point seeding, at most
           KMEANS_MAX_ITERATIONS rounds.  Candidates without coordinates are
           returned separately for least-loaded-day assignment.

Every tie is broken on candidate id or cluster key so that identical input
always yields identical clusters.

Cluster score (higher fills a day first):
    score = item_count + THEME_MATCH_WEIGHT × theme_matches
                       + INTEREST_MATCH_WEIGHT × interest_matches
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Optional

from tripslot import config
from tripslot.modules.scheduling.themes import primary_theme_from_types
from tripslot.modules.tool_usage.distance_tool import distance_meters
from tripslot.schemas.schedule import Candidate, Coordinates

NO_COORDS_KEY = "no_coords"


@dataclass
class Cluster:
    key: str
    items: list[Candidate] = field(default_factory=list)
    score: int = 0

    @property
    def total_minutes(self) -> int:
        return sum(c.duration_minutes for c in self.items)


# ── Grid buckets ─────────────────────────────────────────────────────────────

def grid_cluster_key(coords: Optional[Coordinates], grid: float = config.GRID_RESOLUTION_DEG) -> str:
    if coords is None:
        return NO_COORDS_KEY
    return f"{round(coords.lat / grid)},{round(coords.lng / grid)}"


def grid_clusters(
    candidates: Iterable[Candidate],
    grid: float = config.GRID_RESOLUTION_DEG,
) -> list[Cluster]:
    """Group candidates by grid bucket; clusters and members ordered by key / id."""
    buckets: dict[str, list[Candidate]] = {}
    for cand in sorted(candidates, key=lambda c: c.id):
        buckets.setdefault(grid_cluster_key(cand.coordinates, grid), []).append(cand)
    return [Cluster(key=k, items=buckets[k]) for k in sorted(buckets)]


# ── k-means ──────────────────────────────────────────────────────────────────

def pick_initial_centroids(points: list[tuple[str, Coordinates]], k: int) -> list[Coordinates]:
    """
    Farthest-point seeding.  The first centroid is the lexicographically
    smallest (lat, lng, id) point; each next one maximises its distance to
    the nearest chosen centroid (ties → smaller id).
    """
    ordered = sorted(points, key=lambda p: (p[1].lat, p[1].lng, p[0]))
    if not ordered or k <= 0:
        return []
    centroids = [ordered[0][1]]

    while len(centroids) < k:
        best: tuple[str, Coordinates] | None = None
        best_score = -1.0
        for pid, coords in ordered:
            min_dist = min(distance_meters(coords, c) for c in centroids)
            if min_dist > best_score or (min_dist == best_score and best is not None and pid < best[0]):
                best, best_score = (pid, coords), min_dist
        if best is None:
            break
        centroids.append(best[1])
    return centroids


def kmeans_assign(
    points: list[tuple[str, Coordinates]],
    k: int,
    max_iterations: int = config.KMEANS_MAX_ITERATIONS,
) -> tuple[dict[str, int], list[Coordinates]]:
    """
    Lloyd's iterations over (id, coordinates) points.

    Returns (assignment id → cluster index, final centroids).  Stops after
    *max_iterations* rounds or as soon as no point changes cluster.
    """
    points = sorted(points, key=lambda p: p[0])
    if not points:
        return {}, []
    cluster_count = max(1, min(k, len(points)))
    centroids = pick_initial_centroids(points, cluster_count)
    assignment: dict[str, int] = {}

    for _ in range(max_iterations):
        changed = False
        for pid, coords in points:
            dists = [distance_meters(coords, c) for c in centroids]
            best_idx = dists.index(min(dists))
            if assignment.get(pid) != best_idx:
                assignment[pid] = best_idx
                changed = True

        sums = [[0.0, 0.0, 0] for _ in centroids]
        for pid, coords in points:
            bucket = sums[assignment[pid]]
            bucket[0] += coords.lat
            bucket[1] += coords.lng
            bucket[2] += 1
        centroids = [
            Coordinates(lat / n, lng / n) if n else centroids[i]
            for i, (lat, lng, n) in enumerate(sums)
        ]

        if not changed:
            break

    return assignment, centroids


def kmeans_clusters(
    candidates: Iterable[Candidate],
    desired_count: int,
    max_iterations: int = config.KMEANS_MAX_ITERATIONS,
) -> tuple[list[Cluster], list[Candidate]]:
    """
    Cluster candidates with coordinates into at most *desired_count* groups
    (never more than the number of distinct coordinates).

    Returns (clusters ordered by key, candidates without coordinates).
    """
    ordered = sorted(candidates, key=lambda c: c.id)
    with_coords = [c for c in ordered if c.coordinates is not None]
    without_coords = [c for c in ordered if c.coordinates is None]
    if not with_coords or desired_count <= 0:
        return [], without_coords

    distinct = len({(c.coordinates.lat, c.coordinates.lng) for c in with_coords})
    k = max(1, min(desired_count, distinct))
    assignment, _ = kmeans_assign([(c.id, c.coordinates) for c in with_coords], k, max_iterations)

    width = len(str(k))
    grouped: dict[str, list[Candidate]] = {}
    for cand in with_coords:
        grouped.setdefault(f"k{assignment[cand.id]:0{width}d}", []).append(cand)
    return [Cluster(key=key, items=grouped[key]) for key in sorted(grouped)], without_coords


def desired_cluster_count(item_count: int, date_count: int, daily_cap: int) -> int:
    """One cluster per day's worth of items, never more clusters than dates."""
    if item_count <= 0 or date_count <= 0:
        return 0
    return max(1, min(date_count, math.ceil(item_count / max(1, daily_cap))))


# ── Scoring ──────────────────────────────────────────────────────────────────

def score_cluster(
    items: Iterable[Candidate],
    requested_theme: Optional[str] = None,
    interests: Iterable[str] = (),
) -> int:
    theme_key = (requested_theme or "").strip().lower()
    theme_filter = theme_key if theme_key and theme_key != "mixed" else None
    interest_set = {i.lower() for i in interests}
    score = 0
    for cand in items:
        score += 1
        theme = primary_theme_from_types(cand.type_tags)
        if theme_filter and theme == theme_filter:
            score += config.THEME_MATCH_WEIGHT
        if theme is not None and theme in interest_set:
            score += config.INTEREST_MATCH_WEIGHT
    return score


def rank_clusters(
    clusters: Iterable[Cluster],
    requested_theme: Optional[str] = None,
    interests: Iterable[str] = (),
) -> list[Cluster]:
    """Score every cluster and sort by score desc, key asc."""
    interests = tuple(interests)
    ranked = []
    for cluster in clusters:
        cluster.score = score_cluster(cluster.items, requested_theme, interests)
        ranked.append(cluster)
    ranked.sort(key=lambda c: (-c.score, c.key))
    return ranked
