from __future__ import annotations

from .enums import ErrorKind


class DomainError(Exception):
    """Base exception for business rule violations.

    Each subclass carries the error ``kind`` used by the HTTP boundary and a
    stable ``code`` (the class name) the client can switch on.
    """

    kind: ErrorKind = ErrorKind.VALIDATION
    default_message = "Yêu cầu không hợp lệ"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def code(self) -> str:
        return type(self).__name__

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidAmount(ValidationError):
    default_message = "Số tiền phải lớn hơn 0"


class NoProposedTimesGiven(ValidationError):
    default_message = "Vui lòng nhập giờ vào hoặc giờ ra"


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    kind = ErrorKind.AUTHORIZATION_DENIED


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    kind = ErrorKind.AUTHORIZATION_DENIED
    default_message = "Bạn không có quyền"


class OutsideAllowedNetwork(AuthorizationError):
    default_message = "Vui lòng sử dụng wifi công ty để chấm công."


class NotFoundError(DomainError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Không tìm thấy dữ liệu"


class StateConflictError(DomainError):
    """Raised when the current state forbids the action; safe to retry after re-reading."""

    kind = ErrorKind.STATE_CONFLICT


class AlreadyCheckedIn(StateConflictError):
    default_message = "Bạn đã chấm công vào ca hôm nay rồi"


class AlreadyCheckedOut(StateConflictError):
    default_message = "Bạn đã chấm công tan ca rồi"


class NotCheckedInYet(StateConflictError):
    default_message = "Bạn chưa chấm công vào ca hôm nay"


class RequestAlreadyResolved(StateConflictError):
    default_message = "Yêu cầu đã được xử lý"


class FundNotActive(StateConflictError):
    default_message = "Bạn chỉ có thể thao tác trên quỹ thưởng đang hoạt động"


class InsufficientBalance(StateConflictError):
    default_message = "Số dư quỹ thưởng không đủ"


class ConcurrentModification(StateConflictError):
    default_message = "Quỹ thưởng vừa được cập nhật, vui lòng thử lại"


class FundHasHistory(StateConflictError):
    default_message = "Không thể xoá quỹ thưởng đã có giao dịch"


class InfrastructureError(DomainError):
    """Storage or upstream failure; the operation was aborted."""

    kind = ErrorKind.INFRASTRUCTURE
    default_message = "Lỗi hệ thống, vui lòng thử lại sau"
