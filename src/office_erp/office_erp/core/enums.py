from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Vai trò người dùng dùng cho phân quyền."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class AttendanceStatus(str, Enum):
    """Trạng thái chấm công chuẩn hoá lưu trong CSDL."""

    ON_TIME = "ON_TIME"
    LATE = "LATE"
    EARLY_LEAVE = "EARLY_LEAVE"
    UNKNOWN = "UNKNOWN"


class RequestStatus(str, Enum):
    """Trạng thái luồng duyệt yêu cầu điều chỉnh chấm công."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class RewardStatus(str, Enum):
    ACTIVE = "active"
    CLOSED = "closed"
    CASHED_OUT = "cashed_out"


class RewardEventType(str, Enum):
    HOLIDAY = "holiday"
    NEW_YEAR = "new_year"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ACHIEVEMENT = "achievement"
    SPECIAL = "special"
    OTHER = "other"


class LedgerEntryType(str, Enum):
    """Loại bút toán trong sổ quỹ thưởng (số tiền luôn là delta có dấu)."""

    DEPOSIT = "deposit"
    DEDUCTION = "deduction"
    CORRECTION = "correction"


class TaskStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class ErrorKind(str, Enum):
    """Error taxonomy surfaced to callers (see core.result)."""

    VALIDATION = "validation"
    STATE_CONFLICT = "state_conflict"
    AUTHORIZATION_DENIED = "authorization_denied"
    NOT_FOUND = "not_found"
    INFRASTRUCTURE = "infrastructure"
