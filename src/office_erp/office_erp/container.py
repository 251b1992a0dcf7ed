from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.model import WorkHours
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.notifier import AttendanceNotifier
from .attendance.qr import AttendanceQRIssuer
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import now_local, parse_hhmm
from .core.constants import (
    DEFAULT_LATE_GRACE_MINUTES,
    DEFAULT_PERFORMANCE_PERIOD_DAYS,
    DEFAULT_REWARD_MAX_RETRIES,
    DEFAULT_WORK_END,
    DEFAULT_WORK_START,
)
from .database.connection import DBConfig, DatabaseConnection
from .networks.mysql_network_repository import MySQLOfficeNetworkRepository
from .networks.repository import OfficeNetworkRepository
from .networks.service import OfficeNetworkRegistry
from .performance.scorer import ScoreWeights
from .performance.service import PerformanceService
from .requests.mysql_request_repository import MySQLAttendanceRequestRepository
from .requests.repository import AttendanceRequestRepository
from .requests.service import AttendanceRequestWorkflow
from .rewards.mysql_reward_repository import MySQLRewardRepository
from .rewards.repository import RewardRepository
from .rewards.service import RewardLedger
from .tasks.mysql_task_repository import MySQLTaskRepository
from .tasks.repository import TaskRepository
from .users.mysql_user_repository import MySQLEmployeeRepository
from .users.repository import EmployeeRepository
from .users.service import AuthService, EmployeeDirectory


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    employees_repo: EmployeeRepository
    networks_repo: OfficeNetworkRepository
    attendance_repo: AttendanceRepository
    requests_repo: AttendanceRequestRepository
    rewards_repo: RewardRepository
    tasks_repo: TaskRepository

    auth_service: AuthService
    employee_directory: EmployeeDirectory
    network_registry: OfficeNetworkRegistry
    attendance_service: AttendanceService
    qr_issuer: AttendanceQRIssuer
    request_workflow: AttendanceRequestWorkflow
    reward_ledger: RewardLedger
    performance_service: PerformanceService


def _setting(settings: Any, name: str, default: Any) -> Any:
    if settings is None:
        return default
    value = getattr(settings, name, None)
    return default if value is None else value


def work_hours_from(settings: Any) -> WorkHours:
    return WorkHours(
        start=parse_hhmm(_setting(settings, "WORK_START", DEFAULT_WORK_START)),
        end=parse_hhmm(_setting(settings, "WORK_END", DEFAULT_WORK_END)),
        grace_minutes=int(_setting(settings, "LATE_GRACE_MINUTES", DEFAULT_LATE_GRACE_MINUTES)),
    )


def assemble(
    *,
    employees_repo: EmployeeRepository,
    networks_repo: OfficeNetworkRepository,
    attendance_repo: AttendanceRepository,
    requests_repo: AttendanceRequestRepository,
    rewards_repo: RewardRepository,
    tasks_repo: TaskRepository,
    settings: Any = None,
    conn: Optional[DatabaseConnection] = None,
    notifier: Optional[AttendanceNotifier] = None,
    clock: Callable[[], datetime] = now_local,
) -> Container:
    """Wire services over any repository implementations (MySQL or in-memory)."""

    employee_directory = EmployeeDirectory(employees_repo)
    network_registry = OfficeNetworkRegistry(networks_repo)

    attendance_service = AttendanceService(
        attendance_repo,
        employee_directory,
        network_registry,
        notifier=notifier,
        strategy_factory=AttendanceStrategyFactory(),
        work_hours=work_hours_from(settings),
        clock=clock,
    )

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        networks_repo=networks_repo,
        attendance_repo=attendance_repo,
        requests_repo=requests_repo,
        rewards_repo=rewards_repo,
        tasks_repo=tasks_repo,
        auth_service=AuthService(employees_repo),
        employee_directory=employee_directory,
        network_registry=network_registry,
        attendance_service=attendance_service,
        qr_issuer=AttendanceQRIssuer(str(_setting(settings, "ATTENDANCE_URL", ""))),
        request_workflow=AttendanceRequestWorkflow(requests_repo, employee_directory, clock=clock),
        reward_ledger=RewardLedger(
            rewards_repo,
            max_retries=int(_setting(settings, "REWARD_MAX_RETRIES", DEFAULT_REWARD_MAX_RETRIES)),
            clock=clock,
        ),
        performance_service=PerformanceService(
            tasks_repo,
            employee_directory,
            weights=ScoreWeights.from_mapping(_setting(settings, "PERFORMANCE_WEIGHTS", None)),
            period_days=int(_setting(settings, "PERFORMANCE_PERIOD_DAYS", DEFAULT_PERFORMANCE_PERIOD_DAYS)),
            clock=clock,
        ),
    )


def build_container(settings: Any) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(getattr(settings, "DB_CONFIG")))

    return assemble(
        employees_repo=MySQLEmployeeRepository(conn),
        networks_repo=MySQLOfficeNetworkRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        requests_repo=MySQLAttendanceRequestRepository(conn),
        rewards_repo=MySQLRewardRepository(conn),
        tasks_repo=MySQLTaskRepository(conn),
        settings=settings,
        conn=conn,
    )
