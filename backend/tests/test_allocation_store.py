# ruff: noqa

import asyncio

from conftest import FakeBackend, load_session
from planner.errors import BackendError, NotFound, PermissionDenied, ValidationError
from planner.schemas.allocation import Allocation
from planner.services.allocation_store import MutationKind, MutationState


def test_add_allocation_commits_with_backend_id(session, backend):
    events = []
    session.store.subscribe(events.append)
    result = asyncio.run(session.store.add_allocation("e1", "p1", "sprint-2", 4))
    assert result.ok
    assert result.allocation.id == "alloc-1"
    assert [a.id for a in session.allocations] == ["alloc-1"]
    assert [(e.kind, e.state) for e in events] == [
        (MutationKind.CREATE, MutationState.PENDING),
        (MutationKind.CREATE, MutationState.COMMITTED),
    ]
    assert "alloc-1" in backend.allocations


def test_add_allocation_rolls_back_on_backend_failure(session, backend):
    backend.fail_on.add("insert_allocation")
    result = asyncio.run(session.store.add_allocation("e1", "p1", "sprint-2", 4))
    assert result.state == MutationState.ROLLED_BACK
    assert isinstance(result.error, BackendError)
    assert session.allocations == []


def test_add_allocation_requires_manager_role(backend, developer):
    session = load_session(backend, developer)
    result = asyncio.run(session.store.add_allocation("e1", "p1", "sprint-2", 4))
    assert result.state == MutationState.REJECTED
    assert isinstance(result.error, PermissionDenied)
    assert result.error.message == "Only authorized users can manage allocations"
    assert backend.calls == []


def test_add_allocation_without_caller_is_rejected(backend):
    session = load_session(backend, None)
    result = asyncio.run(session.store.add_allocation("e1", "p1", "sprint-2", 4))
    assert isinstance(result.error, PermissionDenied)
    assert result.error.message == "Not authenticated"


def test_add_allocation_validation(session, backend):
    cases = [
        (("e1", "p1", "sprint-2", 0), "Days must be at least 1"),
        (("e1", "p1", "sprint-404", 2), "Unknown sprint: sprint-404"),
        (("e1", "nope", "sprint-2", 2), "Unknown project: nope"),
        (("e1", "p2", "sprint-2", 2), "Cannot allocate to an archived project"),
        (("e3", "p1", "sprint-2", 2), "Cannot allocate to an archived team member"),
        (("ghost", "p1", "sprint-2", 2), "Invalid employee ID"),
    ]
    for args, message in cases:
        result = asyncio.run(session.store.add_allocation(*args))
        assert result.state == MutationState.REJECTED
        assert isinstance(result.error, ValidationError)
        assert result.error.message == message
    assert session.allocations == []
    assert backend.calls == []


def test_update_allocation_changes_days(session):
    created = asyncio.run(session.store.add_allocation("e1", "p1", "sprint-2", 4)).allocation
    result = asyncio.run(session.store.update_allocation(created.id, 7))
    assert result.ok
    assert session.store.get(created.id).days == 7


def test_update_allocation_restores_previous_on_failure(session, backend):
    created = asyncio.run(session.store.add_allocation("e1", "p1", "sprint-2", 4)).allocation
    backend.fail_on.add("update_allocation_days")
    result = asyncio.run(session.store.update_allocation(created.id, 7))
    assert result.state == MutationState.ROLLED_BACK
    assert session.store.get(created.id).days == 4


def test_update_unknown_allocation_is_not_found(session):
    result = asyncio.run(session.store.update_allocation("missing", 3))
    assert isinstance(result.error, NotFound)


def test_update_allocation_on_archived_project_is_rejected(employees, projects, manager):
    existing = Allocation(id="a1", employee_id="e1", project_id="p2", sprint_id="sprint-1", days=2)
    session = load_session(FakeBackend(employees, projects, [existing]), manager)
    result = asyncio.run(session.store.update_allocation("a1", 5))
    assert isinstance(result.error, ValidationError)
    assert session.store.get("a1").days == 2


def test_delete_restores_record_at_original_position(employees, projects, manager):
    existing = [
        Allocation(id=f"a{n}", employee_id="e1", project_id="p1", sprint_id=f"sprint-{n}", days=2)
        for n in range(1, 4)
    ]
    backend = FakeBackend(employees, projects, existing)
    session = load_session(backend, manager)
    backend.fail_on.add("delete_allocation")
    result = asyncio.run(session.store.delete_allocation("a2"))
    assert result.state == MutationState.ROLLED_BACK
    assert [a.id for a in session.allocations] == ["a1", "a2", "a3"]


def test_create_then_delete_leaves_collection_unchanged(session):
    before = list(session.allocations)
    before_project = session.get_project("p1")
    created = asyncio.run(session.store.add_allocation("e1", "p1", "sprint-3", 5)).allocation
    assert session.get_project("p1").start_date is not None
    deleted = asyncio.run(session.store.delete_allocation(created.id))
    assert deleted.ok
    assert session.allocations == before
    assert session.get_project("p1") == before_project


def test_failed_add_emits_pending_then_rolled_back(session, backend):
    events = []
    session.store.subscribe(events.append)
    backend.fail_on.add("insert_allocation")
    asyncio.run(session.store.add_allocation("e1", "p1", "sprint-2", 4))
    assert [e.state for e in events] == [MutationState.PENDING, MutationState.ROLLED_BACK]
    assert events[0].allocation.days == 4


def test_rejected_add_emits_nothing(session):
    events = []
    session.store.subscribe(events.append)
    asyncio.run(session.store.add_allocation("e1", "p1", "sprint-2", 0))
    assert events == []


def test_delete_emits_pending_then_committed(session):
    created = asyncio.run(session.store.add_allocation("e1", "p1", "sprint-2", 4)).allocation
    events = []
    session.store.subscribe(events.append)
    asyncio.run(session.store.delete_allocation(created.id))
    assert [(e.kind, e.state) for e in events] == [
        (MutationKind.DELETE, MutationState.PENDING),
        (MutationKind.DELETE, MutationState.COMMITTED),
    ]
    assert events[-1].previous == created


def test_unsubscribed_listener_is_not_called(session):
    events = []
    unsubscribe = session.store.subscribe(events.append)
    unsubscribe()
    asyncio.run(session.store.add_allocation("e1", "p1", "sprint-2", 1))
    assert events == []
