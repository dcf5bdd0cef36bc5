"""Free windows between fixed blocks."""

from __future__ import annotations

from tripslot.modules.scheduling.free_time import busy_minutes, compute_free_windows
from tripslot.schemas.schedule import FreeWindow


def test_empty_day_is_one_window():
    assert compute_free_windows(540, 1080, []) == [FreeWindow(540, 1080)]


def test_gaps_before_between_and_after_blocks():
    windows = compute_free_windows(540, 1080, [(600, 660), (720, 780)])
    assert windows == [FreeWindow(540, 600), FreeWindow(660, 720), FreeWindow(780, 1080)]


def test_touching_blocks_coalesce():
    windows = compute_free_windows(540, 1080, [(600, 660), (660, 720)])
    assert windows == [FreeWindow(540, 600), FreeWindow(720, 1080)]


def test_short_gaps_are_discarded():
    windows = compute_free_windows(540, 1080, [(545, 600), (605, 1075)])
    assert windows == []


def test_blocks_are_clipped_to_day():
    windows = compute_free_windows(540, 1080, [(0, 600), (1000, 1440)])
    assert windows == [FreeWindow(600, 1000)]


def test_block_after_day_end_is_ignored():
    assert compute_free_windows(540, 1080, [(1200, 1300)]) == [FreeWindow(540, 1080)]


def test_inverted_day_has_no_free_time():
    assert compute_free_windows(1080, 540, []) == []
    assert compute_free_windows(600, 600, []) == []


def test_busy_minutes_counts_overlap_once(make_block):
    blocks = [make_block("2024-06-01", 600, 700), make_block("2024-06-01", 650, 720)]
    assert busy_minutes(blocks) == 120
