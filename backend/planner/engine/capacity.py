"""Capacity calculator - pure functions over employees, sprints and allocations."""
import calendar
import logging
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal

from planner.schemas.allocation import Allocation
from planner.schemas.capacity import MonthCapacity, Overallocation, SprintCapacity
from planner.schemas.employee import Employee
from planner.schemas.sprint import Sprint

logger = logging.getLogger(__name__)


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _month_bounds(month: date) -> tuple[date, date]:
    first = month.replace(day=1)
    last = first.replace(day=calendar.monthrange(first.year, first.month)[1])
    return first, last


def _weekdays_between(start: date, end: date) -> list[date]:
    span = (end - start).days + 1
    days = (start + timedelta(days=offset) for offset in range(max(span, 0)))
    return [d for d in days if d.weekday() < 5]


def available_days(employee: Employee | None, sprint: Sprint) -> int:
    """Sprint working days not covered by the employee's vacation. Archived => 0."""
    if employee is None or employee.archived:
        return 0
    vacation = set(employee.vacation_dates)
    return sum(1 for day in sprint.working_days if day not in vacation)


def total_allocation_days(allocations: list[Allocation], employee_id: str, sprint_id: str) -> int:
    return sum(a.days for a in allocations if a.employee_id == employee_id and a.sprint_id == sprint_id)


def working_days_in_month(month: date, employee: Employee | None = None) -> int:
    """Weekdays in the calendar month, minus the employee's vacation weekdays."""
    if employee is not None and employee.archived:
        return 0
    weekdays = _weekdays_between(*_month_bounds(month))
    if employee is None:
        return len(weekdays)
    vacation = set(employee.vacation_dates)
    return sum(1 for day in weekdays if day not in vacation)


def allocation_days_for_month(
    employee: Employee,
    month: date,
    allocations: list[Allocation],
    sprints_by_id: dict[str, Sprint],
) -> int:
    """Allocated days falling in ``month``.

    Each allocation is prorated by the share of its sprint's working days that
    fall inside the month, rounded half up per allocation.
    """
    if employee.archived:
        return 0
    month_start, month_end = _month_bounds(month)
    total = 0
    for allocation in allocations:
        if allocation.employee_id != employee.id:
            continue
        sprint = sprints_by_id.get(allocation.sprint_id)
        if sprint is None:
            logger.debug("Skipping allocation %s with unknown sprint %s", allocation.id, allocation.sprint_id)
            continue
        sprint_working_days = len(sprint.working_days)
        if sprint_working_days == 0:
            continue
        overlap_start = max(sprint.start_date, month_start)
        overlap_end = min(sprint.end_date, month_end)
        if overlap_start > overlap_end:
            continue
        overlap = sum(1 for day in sprint.working_days if overlap_start <= day <= overlap_end)
        total += _round_half_up(Decimal(allocation.days) * overlap / sprint_working_days)
    return total


class CapacityCalculator:
    """Capacity views over the live allocation and sprint collections.

    The lists are shared with the planner session and read on every call, so
    results always reflect the latest committed or pending mutation.
    """

    def __init__(self, allocations: list[Allocation], sprints: list[Sprint]) -> None:
        self.allocations = allocations
        self.sprints = sprints

    def _sprints_by_id(self) -> dict[str, Sprint]:
        return {s.id: s for s in self.sprints}

    def available_days(self, employee: Employee | None, sprint: Sprint) -> int:
        return available_days(employee, sprint)

    def total_allocation_days(self, employee: Employee, sprint: Sprint) -> int:
        return total_allocation_days(self.allocations, employee.id, sprint.id)

    def remaining_days(self, employee: Employee, sprint: Sprint) -> int:
        return self.available_days(employee, sprint) - self.total_allocation_days(employee, sprint)

    def is_overallocated(self, employee: Employee, sprint: Sprint) -> bool:
        return self.total_allocation_days(employee, sprint) > self.available_days(employee, sprint)

    def working_days_in_month(self, month: date, employee: Employee | None = None) -> int:
        return working_days_in_month(month, employee)

    def allocation_days_for_month(self, employee: Employee, month: date) -> int:
        return allocation_days_for_month(employee, month, self.allocations, self._sprints_by_id())

    def sprint_capacity(self, employee: Employee, sprint: Sprint) -> SprintCapacity:
        available = self.available_days(employee, sprint)
        allocated = self.total_allocation_days(employee, sprint)
        return SprintCapacity(
            employee_id=employee.id,
            sprint_id=sprint.id,
            available_days=available,
            allocated_days=allocated,
            remaining_days=available - allocated,
            overallocated=allocated > available,
        )

    def month_capacity(self, employee: Employee, month: date) -> MonthCapacity:
        working = self.working_days_in_month(month, employee)
        allocated = self.allocation_days_for_month(employee, month)
        utilization = 0
        if working > 0:
            utilization = _round_half_up(Decimal(allocated) * 100 / working)
        return MonthCapacity(
            employee_id=employee.id,
            month=month.replace(day=1),
            working_days=working,
            allocated_days=allocated,
            remaining_days=working - allocated,
            utilization_pct=utilization,
        )

    def overallocations(self, employees: list[Employee]) -> list[Overallocation]:
        """Every (employee, sprint) pair whose allocated days exceed available days."""
        by_employee = {e.id: e for e in employees if not e.archived}
        found: list[Overallocation] = []
        for sprint in self.sprints:
            for employee_id in sorted({a.employee_id for a in self.allocations if a.sprint_id == sprint.id}):
                employee = by_employee.get(employee_id)
                if employee is None:
                    continue
                allocated = self.total_allocation_days(employee, sprint)
                available = self.available_days(employee, sprint)
                if allocated > available:
                    found.append(
                        Overallocation(
                            employee_id=employee_id,
                            sprint_id=sprint.id,
                            available_days=available,
                            allocated_days=allocated,
                        )
                    )
        return found
