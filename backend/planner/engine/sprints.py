"""Sprint calendar: deterministic sprints anchored to one reference epoch."""
import logging
from datetime import date, timedelta

from planner.config import get_settings
from planner.schemas.sprint import Sprint

logger = logging.getLogger(__name__)

SPRINT_LENGTH_DAYS = 14
SPRINT_SPAN_DAYS = 11  # Monday of week one to Friday of week two
WORKING_DAY_OFFSETS = (0, 1, 2, 3, 4, 7, 8, 9, 10, 11)
SPRINT_ID_PREFIX = "sprint-"


def _epoch(epoch: date | None) -> date:
    return epoch or get_settings().sprint_reference_epoch


def sprint_index_for(start: date, epoch: date | None = None) -> int:
    """Zero-based sprint index: floor((days since epoch + 1) / 14)."""
    days_since_epoch = (start - _epoch(epoch)).days
    return (days_since_epoch + 1) // SPRINT_LENGTH_DAYS


def build_sprint(start: date, epoch: date | None = None) -> Sprint:
    number = sprint_index_for(start, epoch) + 1
    return Sprint(
        id=f"{SPRINT_ID_PREFIX}{number}",
        name=f"Sprint {number}",
        start_date=start,
        end_date=start + timedelta(days=SPRINT_SPAN_DAYS),
        working_days=tuple(start + timedelta(days=offset) for offset in WORKING_DAY_OFFSETS),
    )


def generate_sprints(start_date: date, count: int, epoch: date | None = None) -> list[Sprint]:
    """Generate ``count`` consecutive sprints starting at ``start_date``.

    Numbering always comes from the reference epoch, so ``start_date`` must be
    the epoch itself (or a 14-day multiple away from it) for ids to line up with
    stored allocations.
    """
    anchor = _epoch(epoch)
    if (start_date - anchor).days % SPRINT_LENGTH_DAYS != 0:
        logger.warning(
            "Sprint generation started at %s, which is not aligned to the reference epoch %s",
            start_date,
            anchor,
        )
    return [
        build_sprint(start_date + timedelta(days=i * SPRINT_LENGTH_DAYS), anchor)
        for i in range(max(count, 0))
    ]


def sprint_window(today: date | None = None, lookahead: int | None = None, epoch: date | None = None) -> list[Sprint]:
    """Sprints from the epoch through the current sprint plus ``lookahead`` more."""
    settings = get_settings()
    anchor = _epoch(epoch)
    today = today or date.today()
    if lookahead is None:
        lookahead = settings.sprint_lookahead
    current_index = max((today - anchor).days // SPRINT_LENGTH_DAYS, 0)
    return generate_sprints(anchor, current_index + 1 + lookahead, anchor)


def find_active_sprint(sprints: list[Sprint], today: date | None = None) -> Sprint | None:
    today = today or date.today()
    for sprint in sprints:
        if sprint.start_date <= today <= sprint.end_date:
            return sprint
    return None


def get_sprint_date_range(sprint: Sprint) -> str:
    """Human-readable range, e.g. ``Jan 6 - Jan 17``."""
    start, end = sprint.start_date, sprint.end_date
    return f"{start:%b} {start.day} - {end:%b} {end.day}"


def sprint_number(sprint_id: str) -> int | None:
    """Numeric suffix of ``sprint-N``; None for ids in any other shape."""
    if not sprint_id or not sprint_id.startswith(SPRINT_ID_PREFIX):
        return None
    try:
        return int(sprint_id[len(SPRINT_ID_PREFIX):])
    except ValueError:
        return None


def sprint_id_for_date(day: date, epoch: date | None = None) -> str:
    """Id of the sprint whose fourteen calendar days contain ``day``."""
    index = (day - _epoch(epoch)).days // SPRINT_LENGTH_DAYS
    return f"{SPRINT_ID_PREFIX}{index + 1}"


def sprint_start_for_id(sprint_id: str, epoch: date | None = None) -> date | None:
    number = sprint_number(sprint_id)
    if number is None:
        return None
    return _epoch(epoch) + timedelta(days=(number - 1) * SPRINT_LENGTH_DAYS)
