"""
modules/scheduling: constraint-based day scheduling.

Entry point:
    from tripslot.modules.scheduling.day_packer import DayPacker, schedule_activities

Components (bottom-up):
    time_utils    clock-time / ISO-date / duration parsing
    open_hours    weekly opening-hours rows → merged open intervals
    free_time     day window − fixed blocks → free windows
    clustering    grid and k-means grouping, cluster scoring
    sequencer     nearest-neighbour visiting order
    day_packer    multi-day placement
    summarizer    per-day plans and update operations
    themes, preferences, overlaps, alternatives
"""
