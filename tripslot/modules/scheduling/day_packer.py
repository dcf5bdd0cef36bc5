"""
modules/scheduling/day_packer.py
--------------------------------
Multi-day placement engine.

Architecture:
  - Boundary:  every row is normalised once (modules/validation).
  - Grouping:  unlocked candidates are clustered (kmeans | grid), clusters are
               ranked by score and each is handed to the least-loaded date.
  - Packing:   per date, free windows are walked left → right and each queued
               candidate is placed at cursor + travel + buffer, shifted into
               opening hours when the venue lists them.

Each date d in the pool, in chronological order:
  1. free windows  ← [day_start, day_end] − fixed blocks on d
  2. queue         ← NN(locked to d) + NN(assigned to d + spillover)[:room]
                     where room = daily_cap − |locked|
  3. for each queued candidate try the current window, then later windows
  4. placed   → cursor = end, location = candidate coordinates
     no fit   → locked: unplaced; others: spill to d+1 (unplaced after the
                last date)
  5. the run stops once max_operations placements exist; anything left is
     unplaced with a budget reason

Candidate lifecycle (CandidateState):
  PENDING → ASSIGNED_TO_DAY → ORDERED → PLACED | SPILLED_TO_NEXT_DAY | UNPLACED

Output invariants:
  - end − start == candidate duration
  - no overlap with fixed blocks or earlier placements on the same date
  - [start, end) ⊆ [day_start, day_end]
  - [start, end) inside one merged open interval whenever the venue lists
    hours for that weekday
  - a candidate locked to a pool date is only ever placed on that date
  - |placements| + |unplaced| + |rejected| == |input rows|
"""

from __future__ import annotations

import logging
import time as _time_mod
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from tripslot import config
from tripslot.modules.observability.logger import StructuredLogger
from tripslot.modules.scheduling.clustering import (
    desired_cluster_count,
    grid_clusters,
    kmeans_clusters,
    rank_clusters,
)
from tripslot.modules.scheduling.free_time import busy_minutes, compute_free_windows
from tripslot.modules.scheduling.open_hours import (
    auto_correct_to_next_open_interval,
    get_open_intervals_for_day,
    is_open_for_window,
)
from tripslot.modules.scheduling.preferences import ResolvedPreferences, resolve_preferences
from tripslot.modules.scheduling.sequencer import order_by_nearest_neighbor, pick_start_coordinate
from tripslot.modules.scheduling.summarizer import build_day_plans, build_update_operations
from tripslot.modules.scheduling.time_utils import (
    day_of_week_from_iso_date,
    format_minutes_to_hhmm,
    is_iso_date_string,
)
from tripslot.modules.tool_usage.distance_tool import DistanceTool
from tripslot.modules.tool_usage.travel_cache import TravelTimeCache
from tripslot.modules.validation import (
    normalize_candidates,
    normalize_fixed_blocks,
    normalize_preferences,
)
from tripslot.schemas.schedule import (
    Candidate,
    CandidateState,
    Coordinates,
    FixedBlock,
    FreeWindow,
    OpenInterval,
    Placement,
    ScheduleResult,
    UnplacedItem,
)

logger = logging.getLogger(__name__)

STRATEGIES: tuple[str, ...] = ("kmeans", "grid")

REASON_NO_TIME     = "Not enough time in the available day range."
REASON_LOCKED_FULL = "Not enough time on its locked date."
REASON_BUDGET      = "Ran out of scheduling budget."
REASON_NO_DATES    = "No valid dates to schedule into."


# ── Window-level placement ───────────────────────────────────────────────────

@dataclass(frozen=True)
class Slot:
    start_minute: int
    end_minute: int
    corrected: bool = False


def try_place_in_window(
    duration: int,
    earliest_start: int,
    window: FreeWindow,
    intervals: Optional[list[OpenInterval]] = None,
) -> Slot | None:
    """
    Fit *duration* minutes into *window* no earlier than *earliest_start*.

    Without opening hours the slot starts at max(window.start, earliest).
    With opening hours the slot must sit inside one open interval: first the
    auto-correction is tried, then every interval start that still fits the
    window.  None when nothing fits.
    """
    base_start = max(window.start_minute, earliest_start)
    base_end   = base_start + duration
    if base_end > window.end_minute:
        return None
    if not intervals:
        return Slot(base_start, base_end)
    if is_open_for_window(intervals, base_start, base_end):
        return Slot(base_start, base_end)

    correction = auto_correct_to_next_open_interval(intervals, base_start, base_end)
    if (
        correction is not None
        and correction.new_start_minute >= base_start
        and correction.new_end_minute <= window.end_minute
    ):
        return Slot(correction.new_start_minute, correction.new_end_minute, corrected=True)

    for iv in intervals:
        start = max(base_start, iv.start_minute)
        end   = start + duration
        if end <= iv.end_minute and end <= window.end_minute:
            return Slot(start, end, corrected=True)
    return None


class _WindowWalker:
    """Left-to-right consumption state of one day's free windows."""

    def __init__(
        self,
        windows: list[FreeWindow],
        fixed: list[FixedBlock],
        day_start_min: int,
        start_coord: Optional[Coordinates],
    ) -> None:
        self.windows = windows
        self.index = 0
        self.cursor = windows[0].start_minute if windows else day_start_min
        self.location = start_coord
        self.placed_in_window = False
        self._fixed = fixed
        self._day_start = day_start_min
        self._start_coord = start_coord

    def entry_context(self, idx: int) -> tuple[int, Optional[Coordinates], bool]:
        """(cursor, origin, needs_transition) for a candidate tried in window *idx*."""
        if idx == self.index and self.placed_in_window:
            return self.cursor, self.location, True
        window = self.windows[idx]
        if window.start_minute <= self._day_start:
            return window.start_minute, self._start_coord, False
        # The window opens when a fixed block ends; leave from that block.
        return window.start_minute, self._block_location_ending_at(window.start_minute), True

    def commit(self, idx: int, end_minute: int, coords: Optional[Coordinates]) -> None:
        self.index = idx
        self.cursor = end_minute
        self.placed_in_window = True
        if coords is not None:
            self.location = coords

    def _block_location_ending_at(self, minute: int) -> Optional[Coordinates]:
        ending = [b for b in self._fixed if b.end_minute == minute and b.coordinates is not None]
        if not ending:
            return None
        return max(ending, key=lambda b: (b.start_minute, b.end_minute)).coordinates


# ── Run bookkeeping ──────────────────────────────────────────────────────────

@dataclass
class _DayOutcome:
    failed_locked: list[Candidate] = field(default_factory=list)
    failed_rest: list[Candidate] = field(default_factory=list)
    overflow: list[Candidate] = field(default_factory=list)
    unattempted: list[Candidate] = field(default_factory=list)


@dataclass
class _RunState:
    """Working state owned by exactly one plan() call."""
    placements: list[Placement] = field(default_factory=list)
    unplaced: list[UnplacedItem] = field(default_factory=list)
    spilled_ids: set[str] = field(default_factory=set)
    locked_overflow_dates: list[str] = field(default_factory=list)
    budget_exhausted: bool = False

    def mark(self, cand_id: str, state: CandidateState) -> None:
        logger.debug("candidate %s → %s", cand_id, state.value)

    def unplace(self, cand: Candidate, reason: str) -> None:
        self.unplaced.append(UnplacedItem(id=cand.id, reason=reason))
        self.mark(cand.id, CandidateState.unplaced)


# ── Engine ───────────────────────────────────────────────────────────────────

class DayPacker:
    """
    Pure scheduling engine: candidates + fixed blocks + date pool +
    preferences in, ScheduleResult out.  An instance holds configuration
    only, so one DayPacker may serve concurrent runs.
    """

    def __init__(
        self,
        strategy: str = "kmeans",
        max_operations: int = config.DEFAULT_MAX_OPERATIONS,
        max_days: int = config.DEFAULT_MAX_DAYS,
        travel_cache: TravelTimeCache | None = None,
        perf_logger: StructuredLogger | None = None,
    ) -> None:
        if strategy not in STRATEGIES:
            raise ValueError(f"strategy must be one of {STRATEGIES} (got {strategy!r})")
        self.strategy       = strategy
        self.max_operations = max(0, int(max_operations))
        self.max_days       = max(0, int(max_days))
        self.travel_cache   = travel_cache
        self.perf_logger    = perf_logger

    # ── Public entry point ────────────────────────────────────────────────────

    def plan(
        self,
        candidates: Iterable[Any],
        fixed_blocks: Iterable[Any] = (),
        date_pool: Iterable[str] = (),
        preferences: Any = None,
        requested_theme: Optional[str] = None,
        session_id: str = "default",
    ) -> ScheduleResult:
        """
        Place as many candidates as possible across *date_pool*.

        Args:
            candidates:      Candidate instances or raw dicts.
            fixed_blocks:    FixedBlock instances or raw dicts.
            date_pool:       ISO dates; invalid ones are ignored, the rest are
                             sorted and capped at max_days.
            preferences:     SchedulingPreferences, a raw dict or None.
            requested_theme: Theme key boosting matching clusters.
            session_id:      Name of the perf-log stream, when one is attached.

        Returns:
            ScheduleResult with placements, unplaced, rejected, day plans and
            update operations.  Never raises for bad rows or unsatisfiable
            placements.
        """
        _t0 = _time_mod.perf_counter()
        requested_theme = (requested_theme or "").strip().lower() or None
        cands, rejected = normalize_candidates(candidates)
        blocks = normalize_fixed_blocks(fixed_blocks)
        prefs = resolve_preferences(normalize_preferences(preferences))
        dates = self._normalize_date_pool(date_pool)

        run = _RunState()
        for cand in cands:
            run.mark(cand.id, CandidateState.pending)

        if not dates:
            for cand in cands:
                run.unplace(cand, REASON_NO_DATES)
            return self._finish(run, cands, rejected, prefs, requested_theme, dates, session_id, _t0)

        fixed_by_date: dict[str, list[FixedBlock]] = {d: [] for d in dates}
        for block in blocks:
            if block.date in fixed_by_date:
                fixed_by_date[block.date].append(block)
        for day_blocks in fixed_by_date.values():
            day_blocks.sort(key=lambda b: (b.start_minute, b.end_minute))

        locked_by_date, assigned_by_date = self._assign_days(
            cands, dates, fixed_by_date, prefs, requested_theme, run,
        )

        distance_tool = DistanceTool(prefs.meters_per_minute, cache=self.travel_cache)
        spillover: list[Candidate] = []

        for idx, day in enumerate(dates):
            is_last = idx == len(dates) - 1
            locked = locked_by_date[day]
            rest = assigned_by_date[day] + spillover
            spillover = []

            if not locked and not rest:
                continue
            if len(run.placements) >= self.max_operations:
                run.budget_exhausted = True
            if run.budget_exhausted:
                for cand in locked + rest:
                    run.unplace(cand, REASON_BUDGET)
                continue

            outcome = self._pack_day(day, locked, rest, fixed_by_date[day], prefs, distance_tool, run)

            for cand in outcome.unattempted:
                run.unplace(cand, REASON_BUDGET)
            if outcome.failed_locked:
                run.locked_overflow_dates.append(day)
                for cand in outcome.failed_locked:
                    run.unplace(cand, REASON_LOCKED_FULL)
            for cand in outcome.failed_rest + outcome.overflow:
                if is_last:
                    run.unplace(cand, REASON_NO_TIME)
                else:
                    spillover.append(cand)
                    run.spilled_ids.add(cand.id)
                    run.mark(cand.id, CandidateState.spilled)

        return self._finish(run, cands, rejected, prefs, requested_theme, dates, session_id, _t0)

    # ── Date pool ─────────────────────────────────────────────────────────────

    def _normalize_date_pool(self, date_pool: Iterable[str]) -> list[str]:
        raw = list(date_pool or ())
        valid = sorted({d for d in raw if is_iso_date_string(d)})
        if len(valid) < len(raw):
            logger.warning("Ignored %d invalid or duplicate date(s) in the date pool", len(raw) - len(valid))
        if len(valid) > self.max_days:
            logger.info("Date pool truncated from %d to %d day(s)", len(valid), self.max_days)
            valid = valid[: self.max_days]
        return valid

    # ── Day assignment ────────────────────────────────────────────────────────

    def _assign_days(
        self,
        cands: list[Candidate],
        dates: list[str],
        fixed_by_date: dict[str, list[FixedBlock]],
        prefs: ResolvedPreferences,
        requested_theme: Optional[str],
        run: _RunState,
    ) -> tuple[dict[str, list[Candidate]], dict[str, list[Candidate]]]:
        """
        Split candidates into locked / preferred / unlocked and give every
        unlocked cluster a date.  A lock or preference outside the pool is
        ignored and the candidate joins the unlocked pool.
        """
        pool = set(dates)
        locked_by_date: dict[str, list[Candidate]] = {d: [] for d in dates}
        assigned: dict[str, list[Candidate]] = {d: [] for d in dates}
        unlocked: list[Candidate] = []

        for cand in sorted(cands, key=lambda c: c.id):
            if cand.locked_date in pool:
                locked_by_date[cand.locked_date].append(cand)
                continue
            if cand.locked_date:
                logger.debug("candidate %s locked to %s outside the pool; treated as unlocked",
                             cand.id, cand.locked_date)
            if cand.preferred_date in pool:
                assigned[cand.preferred_date].append(cand)
                continue
            unlocked.append(cand)

        buffer = prefs.buffer_min
        load = {
            d: busy_minutes(fixed_by_date[d])
            + sum(c.duration_minutes + buffer for c in locked_by_date[d] + assigned[d])
            for d in dates
        }

        def least_loaded() -> str:
            return min(dates, key=lambda d: (load[d], d))

        if self.strategy == "grid":
            clusters, loose = grid_clusters(unlocked), []
        else:
            k = desired_cluster_count(len(unlocked), len(dates), prefs.daily_cap)
            clusters, loose = kmeans_clusters(unlocked, k)

        for cluster in rank_clusters(clusters, requested_theme, prefs.interests):
            day = least_loaded()
            assigned[day].extend(cluster.items)
            load[day] += cluster.total_minutes + buffer * len(cluster.items)
            logger.debug("cluster %s (score %d, %d item(s)) → %s",
                         cluster.key, cluster.score, len(cluster.items), day)

        for cand in loose:
            day = least_loaded()
            assigned[day].append(cand)
            load[day] += cand.duration_minutes + buffer

        for day in dates:
            for cand in locked_by_date[day] + assigned[day]:
                run.mark(cand.id, CandidateState.assigned_to_day)
        return locked_by_date, assigned

    # ── Single-day packer ─────────────────────────────────────────────────────

    def _pack_day(
        self,
        day: str,
        locked: list[Candidate],
        rest: list[Candidate],
        fixed: list[FixedBlock],
        prefs: ResolvedPreferences,
        distance_tool: DistanceTool,
        run: _RunState,
    ) -> _DayOutcome:
        outcome = _DayOutcome()
        windows = compute_free_windows(
            prefs.day_start_min,
            prefs.day_end_min,
            [(b.start_minute, b.end_minute) for b in fixed],
        )
        start_coord = pick_start_coordinate([*locked, *rest], fixed)
        locked_queue = order_by_nearest_neighbor(locked, start_coord)
        rest_queue = order_by_nearest_neighbor(rest, start_coord)

        room = max(0, prefs.daily_cap - len(locked_queue))
        outcome.overflow = rest_queue[room:]
        rest_queue = rest_queue[:room]

        queue = [(c, True) for c in locked_queue] + [(c, False) for c in rest_queue]
        for cand, _ in queue:
            run.mark(cand.id, CandidateState.ordered)

        weekday = day_of_week_from_iso_date(day)
        walker = _WindowWalker(windows, fixed, prefs.day_start_min, start_coord)

        for pos, (cand, is_locked) in enumerate(queue):
            if len(run.placements) >= self.max_operations:
                run.budget_exhausted = True
                outcome.unattempted.extend(c for c, _ in queue[pos:])
                outcome.unattempted.extend(outcome.overflow)
                outcome.overflow = []
                logger.info("Operation budget of %d reached on %s", self.max_operations, day)
                break

            placement = self._place_candidate(cand, day, weekday, walker, prefs, distance_tool,
                                              is_locked, cand.id in run.spilled_ids)
            if placement is None:
                (outcome.failed_locked if is_locked else outcome.failed_rest).append(cand)
                logger.debug("candidate %s does not fit on %s", cand.id, day)
                continue
            run.placements.append(placement)
            run.mark(cand.id, CandidateState.placed)

        return outcome

    def _place_candidate(
        self,
        cand: Candidate,
        day: str,
        weekday: int,
        walker: _WindowWalker,
        prefs: ResolvedPreferences,
        distance_tool: DistanceTool,
        is_locked: bool,
        was_spilled: bool,
    ) -> Placement | None:
        intervals = None
        if cand.open_hours:
            intervals = get_open_intervals_for_day(cand.open_hours, weekday) or None

        for idx in range(walker.index, len(walker.windows)):
            window = walker.windows[idx]
            cursor, origin, needs_transition = walker.entry_context(idx)
            earliest = cursor
            if needs_transition:
                earliest += distance_tool.travel_minutes(origin, cand.coordinates) + prefs.buffer_min

            slot = try_place_in_window(cand.duration_minutes, earliest, window, intervals)
            if slot is None:
                continue

            walker.commit(idx, slot.end_minute, cand.coordinates)
            reasons: list[str] = []
            if cand.coordinates is not None:
                reasons.append("Grouped nearby stops")
            if intervals:
                reasons.append("Fits opening hours")
                if slot.corrected:
                    reasons.append("Shifted to match opening hours")
            if is_locked:
                reasons.append("Kept on its locked date")
            if was_spilled:
                reasons.append("Carried over from an earlier day")

            return Placement(
                id=cand.id,
                date=day,
                start_minute=slot.start_minute,
                end_minute=slot.end_minute,
                start_time=format_minutes_to_hhmm(slot.start_minute),
                end_time=format_minutes_to_hhmm(slot.end_minute),
                reasons=reasons,
            )
        return None

    # ── Output ────────────────────────────────────────────────────────────────

    def _finish(
        self,
        run: _RunState,
        cands: list[Candidate],
        rejected: list,
        prefs: ResolvedPreferences,
        requested_theme: Optional[str],
        dates: list[str],
        session_id: str,
        t0: float,
    ) -> ScheduleResult:
        settled = {p.id for p in run.placements} | {u.id for u in run.unplaced}
        for cand in cands:
            if cand.id not in settled:
                run.unplace(cand, REASON_BUDGET if run.budget_exhausted else REASON_NO_TIME)

        by_id = {c.id: c for c in cands}
        result = ScheduleResult(
            placements=run.placements,
            unplaced=run.unplaced,
            rejected=rejected,
            day_plans=build_day_plans(run.placements, by_id, prefs, requested_theme,
                                      run.locked_overflow_dates),
            operations=build_update_operations(run.placements),
        )

        duration_ms = round((_time_mod.perf_counter() - t0) * 1000, 2)
        logger.info(
            "Scheduled %d/%d candidate(s) over %d date(s): %d unplaced, %d rejected (%.1f ms)",
            len(result.placements), len(cands), len(dates),
            len(result.unplaced), len(result.rejected), duration_ms,
        )
        if self.perf_logger is not None:
            self.perf_logger.log(session_id, "schedule_run", {
                "component":   "DayPacker.plan",
                "strategy":    self.strategy,
                "duration_ms": duration_ms,
                "candidates":  len(cands),
                "dates":       len(dates),
                "placements":  len(result.placements),
                "unplaced":    len(result.unplaced),
                "spilled":     len(run.spilled_ids),
                "rejected":    len(result.rejected),
                "budget_exhausted": run.budget_exhausted,
            })
        return result


def schedule_activities(
    candidates: Iterable[Any],
    fixed_blocks: Iterable[Any] = (),
    date_pool: Iterable[str] = (),
    preferences: Any = None,
    *,
    strategy: str = "kmeans",
    requested_theme: Optional[str] = None,
    max_operations: int = config.DEFAULT_MAX_OPERATIONS,
    max_days: int = config.DEFAULT_MAX_DAYS,
    travel_cache: TravelTimeCache | None = None,
    perf_logger: StructuredLogger | None = None,
    session_id: str = "default",
) -> ScheduleResult:
    """Functional wrapper around DayPacker(...).plan(...)."""
    packer = DayPacker(
        strategy=strategy,
        max_operations=max_operations,
        max_days=max_days,
        travel_cache=travel_cache,
        perf_logger=perf_logger,
    )
    return packer.plan(
        candidates,
        fixed_blocks=fixed_blocks,
        date_pool=date_pool,
        preferences=preferences,
        requested_theme=requested_theme,
        session_id=session_id,
    )
