# ruff: noqa

from datetime import date

from planner.engine.project_ranges import calculate_project_date_ranges, sprint_sort_key
from planner.engine.sprints import generate_sprints
from planner.schemas.allocation import Allocation
from planner.schemas.project import Project

EPOCH = date(2025, 1, 6)
SPRINTS = generate_sprints(EPOCH, 12, EPOCH)


def _allocation(allocation_id: str, project_id: str, sprint_id: str) -> Allocation:
    return Allocation(id=allocation_id, employee_id="e1", project_id=project_id, sprint_id=sprint_id, days=2)


def test_range_spans_earliest_to_latest_sprint():
    projects = [Project(id="p1", name="Apollo")]
    allocations = [_allocation("a1", "p1", "sprint-3"), _allocation("a2", "p1", "sprint-5")]
    (project,) = calculate_project_date_ranges(projects, allocations, SPRINTS)
    assert project.start_date == date(2025, 2, 3)
    assert project.end_date == date(2025, 3, 14)


def test_project_without_allocations_keeps_stored_dates():
    stored = Project(id="p1", name="Apollo", start_date=date(2024, 6, 1), end_date=date(2024, 7, 1))
    (project,) = calculate_project_date_ranges([stored], [], SPRINTS)
    assert project == stored


def test_derivation_is_idempotent_and_does_not_mutate_input():
    projects = [Project(id="p1", name="Apollo"), Project(id="p2", name="Zephyr")]
    allocations = [_allocation("a1", "p1", "sprint-2")]
    once = calculate_project_date_ranges(projects, allocations, SPRINTS)
    twice = calculate_project_date_ranges(once, allocations, SPRINTS)
    assert once == twice
    assert projects[0].start_date is None


def test_numeric_ordering_puts_sprint_ten_after_sprint_two():
    projects = [Project(id="p1", name="Apollo")]
    allocations = [_allocation("a1", "p1", "sprint-2"), _allocation("a2", "p1", "sprint-10")]
    (project,) = calculate_project_date_ranges(projects, allocations, SPRINTS, "numeric")
    assert project.start_date == date(2025, 1, 20)
    assert project.end_date == date(2025, 5, 23)


def test_lexicographic_ordering_compares_raw_ids():
    projects = [Project(id="p1", name="Apollo")]
    allocations = [_allocation("a1", "p1", "sprint-2"), _allocation("a2", "p1", "sprint-10")]
    (project,) = calculate_project_date_ranges(projects, allocations, SPRINTS, "lexicographic")
    # "sprint-10" < "sprint-2"
    assert project.start_date == date(2025, 5, 12)
    assert project.end_date == date(2025, 1, 31)


def test_unresolvable_boundary_sprint_keeps_stored_date():
    projects = [Project(id="p1", name="Apollo", end_date=date(2030, 1, 1))]
    allocations = [_allocation("a1", "p1", "sprint-2"), _allocation("a2", "p1", "sprint-99")]
    (project,) = calculate_project_date_ranges(projects, allocations, SPRINTS)
    assert project.start_date == date(2025, 1, 20)
    assert project.end_date == date(2030, 1, 1)


def test_sort_key_places_unnumbered_ids_last():
    ids = ["sprint-10", "backlog", "sprint-2"]
    assert sorted(ids, key=sprint_sort_key) == ["sprint-2", "sprint-10", "backlog"]
