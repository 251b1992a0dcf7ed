from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Employee:
    """Thực thể miền (domain): Nhân viên.

    Lưu ý: Đây là đối tượng dữ liệu thuần (không chứa code truy cập DB).
    """

    employee_id: int
    full_name: str
    username: str
    password_hash: str
    role: Role
    department: Optional[str] = None
    is_active: bool = True
