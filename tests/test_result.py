import mysql.connector

from src.office_erp.office_erp.core.enums import ErrorKind
from src.office_erp.office_erp.core.exceptions import AlreadyCheckedIn, InsufficientBalance, OutsideAllowedNetwork
from src.office_erp.office_erp.core.result import Err, Ok, capture, http_status


def test_capture_wraps_value_and_message():
    result = capture(lambda a, b: a + b, 2, 3, success_message="ok")

    assert result == Ok(5, "ok")
    assert result.success
    assert http_status(result) == 200


def test_capture_turns_domain_error_into_err():
    def boom():
        raise InsufficientBalance()

    result = capture(boom)

    assert isinstance(result, Err)
    assert not result.success
    assert result.kind == ErrorKind.STATE_CONFLICT
    assert result.code == "InsufficientBalance"
    assert result.message == "Số dư quỹ thưởng không đủ"
    assert http_status(result) == 409


def test_capture_turns_storage_failure_into_infrastructure_err():
    def broken():
        raise mysql.connector.Error("connection lost")

    result = capture(broken)

    assert result.kind == ErrorKind.INFRASTRUCTURE
    assert result.code == "InfrastructureError"
    assert http_status(result) == 503


def test_http_status_per_kind():
    assert http_status(Err.from_exception(OutsideAllowedNetwork())) == 403
    assert http_status(Err.from_exception(AlreadyCheckedIn("custom"))) == 409
    assert Err.from_exception(AlreadyCheckedIn("custom")).message == "custom"
