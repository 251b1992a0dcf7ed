from __future__ import annotations

from datetime import date, datetime, time

import pytest

from src.office_erp.office_erp.core.enums import AttendanceStatus, RequestStatus
from src.office_erp.office_erp.core.exceptions import (
    NoProposedTimesGiven,
    NotFoundError,
    RequestAlreadyResolved,
    ValidationError,
)
from src.office_erp.office_erp.requests.model import merge_proposed_times
from src.office_erp.office_erp.requests.service import AttendanceRequestWorkflow
from src.office_erp.office_erp.users.service import EmployeeDirectory
from tests.fakes import ADMIN, STAFF, FakeAttendanceRepo, FakeEmployeesRepo, FakeRequestsRepo, FixedClock

DAY = date(2025, 1, 10)


def at(hh: int, mm: int, day: date = DAY) -> datetime:
    return datetime.combine(day, time(hh, mm))


def make_workflow():
    attendance = FakeAttendanceRepo()
    requests = FakeRequestsRepo(attendance)
    workflow = AttendanceRequestWorkflow(
        requests,
        EmployeeDirectory(FakeEmployeesRepo()),
        clock=FixedClock(datetime(2025, 1, 11, 10, 0)),
    )
    return workflow, requests, attendance


def test_accept_creates_missing_record_then_reject_fails():
    workflow, _, attendance = make_workflow()

    req = workflow.submit(STAFF.employee_id, work_date=DAY, check_in_time=at(8, 15), message="forgot badge")
    assert req.status == RequestStatus.PENDING

    accepted = workflow.accept(req.request_id, approver_id=ADMIN.employee_id)
    assert accepted.status == RequestStatus.ACCEPTED
    assert accepted.decided_by == ADMIN.employee_id

    record = attendance.get_for_employee_and_date(STAFF.employee_id, DAY)
    assert record is not None
    assert record.check_in_time == at(8, 15)
    assert record.check_out_time is None

    with pytest.raises(RequestAlreadyResolved):
        workflow.reject(req.request_id, approver_id=ADMIN.employee_id)
    with pytest.raises(RequestAlreadyResolved):
        workflow.accept(req.request_id, approver_id=ADMIN.employee_id)


def test_accept_overwrites_only_proposed_fields():
    workflow, _, attendance = make_workflow()
    rid = attendance.insert(
        employee_id=STAFF.employee_id,
        work_date=DAY,
        check_in_time=at(8, 30),
        check_out_time=None,
        ip="203.0.113.5",
        fingerprint="fp-1",
        status=AttendanceStatus.ON_TIME,
        note=None,
    )

    req = workflow.submit(STAFF.employee_id, work_date=DAY, check_out_time=at(17, 45))
    workflow.accept(req.request_id, approver_id=ADMIN.employee_id)

    record = attendance.get_by_id(rid)
    assert record.check_in_time == at(8, 30)
    assert record.check_out_time == at(17, 45)


def test_accept_that_would_break_ordering_leaves_request_pending():
    workflow, requests, attendance = make_workflow()
    rid = attendance.insert(
        employee_id=STAFF.employee_id,
        work_date=DAY,
        check_in_time=at(10, 0),
        check_out_time=None,
        ip="203.0.113.5",
        fingerprint="fp-1",
        status=AttendanceStatus.LATE,
        note=None,
    )
    req = workflow.submit(STAFF.employee_id, work_date=DAY, check_out_time=at(9, 0))

    with pytest.raises(ValidationError):
        workflow.accept(req.request_id, approver_id=ADMIN.employee_id)

    assert requests.get(req.request_id).status == RequestStatus.PENDING
    assert attendance.get_by_id(rid).check_out_time is None


def test_reject_does_not_touch_attendance():
    workflow, _, attendance = make_workflow()
    req = workflow.submit(STAFF.employee_id, work_date=DAY, check_in_time=at(8, 0))

    rejected = workflow.reject(req.request_id, approver_id=ADMIN.employee_id)

    assert rejected.status == RequestStatus.REJECTED
    assert attendance.rows == {}


def test_submit_validation():
    workflow, _, _ = make_workflow()

    with pytest.raises(NoProposedTimesGiven):
        workflow.submit(STAFF.employee_id, work_date=DAY)
    with pytest.raises(ValidationError):
        workflow.submit(STAFF.employee_id, work_date=DAY, check_in_time=at(8, 0, date(2025, 1, 11)))
    with pytest.raises(ValidationError):
        workflow.submit(STAFF.employee_id, work_date=DAY, check_in_time=at(18, 0), check_out_time=at(8, 0))
    with pytest.raises(NotFoundError):
        workflow.submit(999, work_date=DAY, check_in_time=at(8, 0))


def test_unknown_request_is_not_found():
    workflow, _, _ = make_workflow()

    with pytest.raises(NotFoundError):
        workflow.accept(404, approver_id=ADMIN.employee_id)


def test_lists_are_newest_first_and_filterable():
    workflow, _, _ = make_workflow()
    first = workflow.submit(STAFF.employee_id, work_date=DAY, check_in_time=at(8, 0))
    second = workflow.submit(STAFF.employee_id, work_date=DAY, check_out_time=at(17, 0))
    workflow.reject(first.request_id, approver_id=ADMIN.employee_id)

    mine = workflow.list_for_employee(STAFF.employee_id)
    assert [r.request_id for r in mine] == [second.request_id, first.request_id]

    pending = workflow.list_all(status=RequestStatus.PENDING)
    assert [r.request_id for r in pending] == [second.request_id]


def test_merge_proposed_times_keeps_unproposed_side():
    merged = merge_proposed_times(current_in=at(8, 0), current_out=at(17, 0), proposed_in=None, proposed_out=at(18, 0))

    assert merged == (at(8, 0), at(18, 0))
