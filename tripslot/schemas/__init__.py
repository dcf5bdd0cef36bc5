"""schemas package: dataclass records shared by the engine and the API."""
from tripslot.schemas.schedule import (
    Candidate,
    CandidateState,
    Coordinates,
    DayPlan,
    DayPlanItem,
    FixedBlock,
    FreeWindow,
    OpenHoursCorrection,
    OpenHoursRow,
    OpenInterval,
    Placement,
    RejectedRow,
    ScheduleResult,
    SchedulingPreferences,
    UnplacedItem,
    UpdateOperation,
)

__all__ = [
    "Candidate",
    "CandidateState",
    "Coordinates",
    "DayPlan",
    "DayPlanItem",
    "FixedBlock",
    "FreeWindow",
    "OpenHoursCorrection",
    "OpenHoursRow",
    "OpenInterval",
    "Placement",
    "RejectedRow",
    "ScheduleResult",
    "SchedulingPreferences",
    "UnplacedItem",
    "UpdateOperation",
]
