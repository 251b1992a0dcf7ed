from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from werkzeug.security import check_password_hash

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, NotFoundError
from .model import Employee
from .repository import EmployeeRepository


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    employee_id: int
    full_name: str
    role: Role
    department: Optional[str]


class AuthService:
    """Use case: authenticate employee (login)."""

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def authenticate(self, username: str, password: str) -> SessionUser:
        employee = self._employees.get_by_username((username or "").strip())
        if not employee or not employee.is_active:
            raise AuthenticationError("Sai tài khoản hoặc mật khẩu")

        try:
            ok = check_password_hash(employee.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Sai tài khoản hoặc mật khẩu")

        return SessionUser(
            employee_id=employee.employee_id,
            full_name=employee.full_name,
            role=employee.role,
            department=employee.department,
        )


class EmployeeDirectory:
    """Read-only lookups used for display and for resolving approvers."""

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def get(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee or not employee.is_active:
            raise NotFoundError("Nhân viên không tồn tại")
        return employee

    def exists(self, employee_id: int) -> bool:
        employee = self._employees.get_by_id(int(employee_id))
        return bool(employee and employee.is_active)

    def display_names(self, employee_ids: Iterable[int]) -> dict[int, str]:
        return {e.employee_id: e.full_name for e in self._employees.get_many(employee_ids)}

    def display_name(self, employee_id: int) -> str:
        employee = self._employees.get_by_id(int(employee_id))
        return employee.full_name if employee else f"#{employee_id}"
