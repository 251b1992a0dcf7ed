from __future__ import annotations

import threading
from datetime import datetime, time

import pytest

from src.office_erp.office_erp.attendance.model import WorkHours
from src.office_erp.office_erp.attendance.service import CHECK_IN, CHECK_OUT, AttendanceService
from src.office_erp.office_erp.core.enums import AttendanceStatus
from src.office_erp.office_erp.core.exceptions import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    NotCheckedInYet,
    NotFoundError,
    OutsideAllowedNetwork,
    ValidationError,
)
from src.office_erp.office_erp.networks.service import OfficeNetworkRegistry
from src.office_erp.office_erp.users.service import EmployeeDirectory
from tests.fakes import (
    OFFICE_BLOCK,
    OFFICE_IP,
    OUTSIDE_IP,
    STAFF,
    WORK_DAY,
    FakeAttendanceRepo,
    FakeEmployeesRepo,
    FakeNetworksRepo,
    RecordingNotifier,
)

HOURS = WorkHours(start=time(9, 0), end=time(17, 0), grace_minutes=5)


def at(hh: int, mm: int) -> datetime:
    return datetime.combine(WORK_DAY, time(hh, mm))


def make_gate(*, notifier=None, networks=None):
    attendance = FakeAttendanceRepo()
    networks_repo = FakeNetworksRepo(networks if networks is not None else [("HQ", OFFICE_IP, True), ("Branch", OFFICE_BLOCK, True)])
    notifier = notifier or RecordingNotifier()
    gate = AttendanceService(
        attendance,
        EmployeeDirectory(FakeEmployeesRepo()),
        OfficeNetworkRegistry(networks_repo),
        notifier=notifier,
        work_hours=HOURS,
    )
    return gate, attendance, notifier


def test_check_in_then_second_check_in_fails():
    gate, attendance, _ = make_gate()

    record = gate.check_in(STAFF.employee_id, fingerprint="fp-1", ip=OFFICE_IP, now=at(8, 0))

    assert record.check_in_time == at(8, 0)
    assert record.status == AttendanceStatus.ON_TIME
    assert record.ip == OFFICE_IP
    with pytest.raises(AlreadyCheckedIn):
        gate.check_in(STAFF.employee_id, fingerprint="fp-1", ip=OFFICE_IP, now=at(8, 5))
    assert len(attendance.rows) == 1


def test_check_out_without_check_in_fails():
    gate, _, _ = make_gate()

    with pytest.raises(NotCheckedInYet):
        gate.check_out(STAFF.employee_id, fingerprint="fp-1", ip=OFFICE_IP, now=at(17, 30))


def test_check_in_from_outside_network_is_rejected():
    gate, attendance, notifier = make_gate()

    with pytest.raises(OutsideAllowedNetwork):
        gate.check_in(STAFF.employee_id, fingerprint="fp-1", ip=OUTSIDE_IP, now=at(8, 0))
    assert attendance.rows == {}
    assert notifier.calls == []


def test_disabled_network_does_not_authorize():
    gate, _, _ = make_gate(networks=[("HQ", OFFICE_IP, False)])

    with pytest.raises(OutsideAllowedNetwork):
        gate.check_in(STAFF.employee_id, fingerprint="fp-1", ip=OFFICE_IP, now=at(8, 0))


def test_address_inside_office_block_is_accepted():
    gate, _, _ = make_gate()

    record = gate.check_in(STAFF.employee_id, fingerprint="fp-1", ip="198.51.100.42", now=at(8, 0))

    assert record.check_in_time == at(8, 0)


@pytest.mark.parametrize("fingerprint, ip", [("", OFFICE_IP), ("fp-1", ""), ("  ", OFFICE_IP)])
def test_missing_ip_or_fingerprint_is_validation_error(fingerprint, ip):
    gate, _, _ = make_gate()

    with pytest.raises(ValidationError):
        gate.check_in(STAFF.employee_id, fingerprint=fingerprint, ip=ip, now=at(8, 0))


def test_unknown_employee_is_not_found():
    gate, _, _ = make_gate()

    with pytest.raises(NotFoundError):
        gate.check_in(999, fingerprint="fp-1", ip=OFFICE_IP, now=at(8, 0))


def test_late_check_in_and_early_leave_keeps_late_status():
    gate, _, notifier = make_gate()

    record = gate.check_in(STAFF.employee_id, fingerprint="fp-1", ip=OFFICE_IP, now=at(9, 6))
    assert record.status == AttendanceStatus.LATE

    record = gate.check_out(STAFF.employee_id, fingerprint="fp-1", ip=OFFICE_IP, now=at(16, 0))
    assert record.status == AttendanceStatus.LATE
    assert [c["status"] for c in notifier.calls] == ["late", "early"]


def test_on_time_day_with_early_leave():
    gate, _, _ = make_gate()
    gate.check_in(STAFF.employee_id, fingerprint="fp-1", ip=OFFICE_IP, now=at(9, 5))

    record = gate.check_out(STAFF.employee_id, fingerprint="fp-1", ip=OFFICE_IP, now=at(16, 59))

    assert record.status == AttendanceStatus.EARLY_LEAVE
    assert record.check_out_time >= record.check_in_time


def test_second_check_out_fails():
    gate, _, _ = make_gate()
    gate.check_in(STAFF.employee_id, fingerprint="fp-1", ip=OFFICE_IP, now=at(8, 0))
    gate.check_out(STAFF.employee_id, fingerprint="fp-1", ip=OFFICE_IP, now=at(17, 30))

    with pytest.raises(AlreadyCheckedOut):
        gate.check_out(STAFF.employee_id, fingerprint="fp-1", ip=OFFICE_IP, now=at(17, 31))


def test_notifier_failure_does_not_undo_check_in():
    gate, attendance, notifier = make_gate(notifier=RecordingNotifier(fail=True))

    record = gate.check_in(STAFF.employee_id, fingerprint="fp-1", ip=OFFICE_IP, now=at(8, 0))

    assert attendance.get_by_id(record.attendance_id) is not None
    assert len(notifier.calls) == 1


def test_concurrent_check_ins_create_one_record():
    gate, attendance, _ = make_gate()
    outcomes: list[str] = []
    barrier = threading.Barrier(8)

    def worker():
        barrier.wait()
        try:
            gate.check_in(STAFF.employee_id, fingerprint="fp-1", ip=OFFICE_IP, now=at(8, 0))
            outcomes.append("ok")
        except AlreadyCheckedIn:
            outcomes.append("dup")

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("ok") == 1
    assert outcomes.count("dup") == 7
    assert len(attendance.rows) == 1


def test_scan_toggles_between_check_in_and_check_out():
    gate, _, _ = make_gate()

    action, record = gate.scan(STAFF.employee_id, fingerprint="fp-1", ip=OFFICE_IP, now=at(8, 0))
    assert action == CHECK_IN

    action, record = gate.scan(STAFF.employee_id, fingerprint="fp-1", ip=OFFICE_IP, now=at(17, 10))
    assert action == CHECK_OUT
    assert record.check_out_time == at(17, 10)


def test_check_in_fills_row_created_by_correction_with_only_check_out():
    gate, attendance, _ = make_gate()
    rid = attendance.insert(
        employee_id=STAFF.employee_id,
        work_date=WORK_DAY,
        check_in_time=None,
        check_out_time=at(18, 0),
        ip="",
        fingerprint="",
        status=AttendanceStatus.UNKNOWN,
        note="forgot badge",
    )

    record = gate.check_in(STAFF.employee_id, fingerprint="fp-1", ip=OFFICE_IP, now=at(8, 30))

    assert record.attendance_id == rid
    assert record.check_in_time == at(8, 30)
    assert record.check_out_time == at(18, 0)


class CorrectionLandsFirstRepo(FakeAttendanceRepo):
    """An accepted correction inserts today's row right before our insert."""

    def __init__(self, check_out_time):
        super().__init__()
        self._check_out_time = check_out_time

    def create_checkin(self, *, employee_id, work_date, **fields):
        self.insert(
            employee_id=employee_id,
            work_date=work_date,
            check_in_time=None,
            check_out_time=self._check_out_time,
            ip="",
            fingerprint="",
            status=AttendanceStatus.UNKNOWN,
            note="forgot badge",
        )
        return super().create_checkin(employee_id=employee_id, work_date=work_date, **fields)


def make_gate_over(attendance):
    return AttendanceService(
        attendance,
        EmployeeDirectory(FakeEmployeesRepo()),
        OfficeNetworkRegistry(FakeNetworksRepo([("HQ", OFFICE_IP, True)])),
        notifier=RecordingNotifier(),
        work_hours=HOURS,
    )


def test_check_in_racing_a_correction_row_fills_that_row():
    attendance = CorrectionLandsFirstRepo(check_out_time=at(18, 0))
    gate = make_gate_over(attendance)

    record = gate.check_in(STAFF.employee_id, fingerprint="fp-1", ip=OFFICE_IP, now=at(8, 30))

    assert len(attendance.rows) == 1
    assert record.check_in_time == at(8, 30)
    assert record.check_out_time == at(18, 0)
    assert record.status == AttendanceStatus.ON_TIME


def test_check_in_racing_an_earlier_correction_check_out_is_already_checked_out():
    attendance = CorrectionLandsFirstRepo(check_out_time=at(8, 0))
    gate = make_gate_over(attendance)

    with pytest.raises(AlreadyCheckedOut):
        gate.check_in(STAFF.employee_id, fingerprint="fp-1", ip=OFFICE_IP, now=at(8, 30))
    assert next(iter(attendance.rows.values())).check_in_time is None


def test_monthly_stats_counts_per_employee():
    gate, _, _ = make_gate()
    gate.check_in(STAFF.employee_id, fingerprint="fp-1", ip=OFFICE_IP, now=at(9, 30))
    gate.check_out(STAFF.employee_id, fingerprint="fp-1", ip=OFFICE_IP, now=at(17, 30))

    stats = gate.monthly_stats(month=WORK_DAY.month, year=WORK_DAY.year)

    assert len(stats) == 1
    assert stats[0].employee_id == STAFF.employee_id
    assert stats[0].days_present == 1
    assert stats[0].late_count == 1
    assert stats[0].worked_minutes == 8 * 60


def test_monthly_stats_rejects_bad_month():
    gate, _, _ = make_gate()

    with pytest.raises(ValidationError):
        gate.monthly_stats(month=13, year=2026)


def test_admin_update_keeps_check_out_after_check_in():
    gate, _, _ = make_gate()
    record = gate.check_in(STAFF.employee_id, fingerprint="fp-1", ip=OFFICE_IP, now=at(8, 0))

    with pytest.raises(ValidationError):
        gate.update_record(record.attendance_id, check_out_time=at(7, 0))

    updated = gate.update_record(record.attendance_id, check_out_time=at(17, 0), note="sửa tay")
    assert updated.check_out_time == at(17, 0)
    assert updated.note == "sửa tay"


def test_delete_and_bulk_delete():
    gate, attendance, _ = make_gate()
    record = gate.check_in(STAFF.employee_id, fingerprint="fp-1", ip=OFFICE_IP, now=at(8, 0))

    gate.delete_record(record.attendance_id)
    assert attendance.rows == {}

    with pytest.raises(NotFoundError):
        gate.delete_record(record.attendance_id)
    with pytest.raises(ValidationError):
        gate.bulk_delete([])
