"""
modules/scheduling/sequencer.py
-------------------------------
Greedy nearest-neighbour visiting order for one day's candidates.

This is the classic NN heuristic, not an optimal tour: from a seed, always
walk to the closest unvisited stop.  Candidates without coordinates are
appended at the end, sorted by (name, id).
"""

from __future__ import annotations

from typing import Iterable, Optional

from tripslot.modules.tool_usage.distance_tool import centroid, distance_meters
from tripslot.schemas.schedule import Candidate, Coordinates, FixedBlock


def pick_start_coordinate(
    candidates: Iterable[Candidate],
    fixed_blocks: Iterable[FixedBlock] = (),
) -> Optional[Coordinates]:
    """
    Where the day starts: the earliest fixed block that carries coordinates,
    else the centroid of the candidates' coordinates, else None.
    """
    located = sorted(
        (b for b in fixed_blocks if b.coordinates is not None),
        key=lambda b: (b.start_minute, b.end_minute),
    )
    if located:
        return located[0].coordinates
    return centroid([c.coordinates for c in candidates if c.coordinates is not None])


def _nearest(origin: Coordinates, pool: list[Candidate]) -> Candidate:
    best = pool[0]
    best_dist = distance_meters(origin, best.coordinates)
    for cand in pool[1:]:
        dist = distance_meters(origin, cand.coordinates)
        if dist < best_dist or (dist == best_dist and cand.id < best.id):
            best, best_dist = cand, dist
    return best


def order_by_nearest_neighbor(
    candidates: Iterable[Candidate],
    start: Optional[Coordinates] = None,
) -> list[Candidate]:
    """
    Visiting order for *candidates*.

    Seed: the candidate nearest *start* (ties → smaller id); with no start,
    the westernmost one by (lng, lat, id).
    """
    items = list(candidates)
    with_coords = sorted((c for c in items if c.coordinates is not None), key=lambda c: c.id)
    without_coords = sorted(
        (c for c in items if c.coordinates is None),
        key=lambda c: (c.name, c.id),
    )
    if not with_coords:
        return without_coords

    if start is None:
        seed = min(with_coords, key=lambda c: (c.coordinates.lng, c.coordinates.lat, c.id))
    else:
        seed = _nearest(start, with_coords)

    remaining = [c for c in with_coords if c.id != seed.id]
    route = [seed]
    current = seed
    while remaining:
        current = _nearest(current.coordinates, remaining)
        remaining = [c for c in remaining if c.id != current.id]
        route.append(current)

    return route + without_coords
