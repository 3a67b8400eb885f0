"""Derive project start/end dates from the sprints their allocations touch."""
from collections import defaultdict
from typing import Literal

from planner.engine.sprints import sprint_number
from planner.schemas.allocation import Allocation
from planner.schemas.project import Project
from planner.schemas.sprint import Sprint

SprintOrdering = Literal["numeric", "lexicographic"]


def sprint_sort_key(sprint_id: str, ordering: SprintOrdering = "numeric"):
    """Sort key for sprint ids.

    ``lexicographic`` compares raw strings, so ``sprint-10`` sorts before
    ``sprint-2``. ``numeric`` compares the sprint number; ids without a number
    sort after numbered ones, by string.
    """
    if ordering == "lexicographic":
        return (0, 0, sprint_id)
    number = sprint_number(sprint_id)
    if number is None:
        return (1, 0, sprint_id)
    return (0, number, sprint_id)


def calculate_project_date_ranges(
    projects: list[Project],
    allocations: list[Allocation],
    sprints: list[Sprint],
    ordering: SprintOrdering = "numeric",
) -> list[Project]:
    """Return projects with start/end taken from their earliest and latest sprint.

    Projects without allocations, or whose boundary sprint is not in ``sprints``,
    keep the corresponding stored date.
    """
    by_project: dict[str, list[str]] = defaultdict(list)
    for allocation in allocations:
        by_project[allocation.project_id].append(allocation.sprint_id)
    sprints_by_id = {s.id: s for s in sprints}

    result: list[Project] = []
    for project in projects:
        sprint_ids = by_project.get(project.id)
        if not sprint_ids:
            result.append(project)
            continue
        ordered = sorted(sprint_ids, key=lambda sid: sprint_sort_key(sid, ordering))
        first = sprints_by_id.get(ordered[0])
        last = sprints_by_id.get(ordered[-1])
        result.append(
            project.model_copy(
                update={
                    "start_date": first.start_date if first else project.start_date,
                    "end_date": last.end_date if last else project.end_date,
                }
            )
        )
    return result
