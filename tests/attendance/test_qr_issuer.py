from __future__ import annotations

import base64

import pytest

from src.office_erp.office_erp.attendance.qr import AttendanceQRIssuer
from src.office_erp.office_erp.core.exceptions import ValidationError

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


def test_issue_returns_png_data_url_for_configured_url():
    issuer = AttendanceQRIssuer("https://erp.example.test/attendance")

    qr = issuer.issue()

    assert qr.attendance_url == "https://erp.example.test/attendance"
    assert qr.qr_code.startswith("data:image/png;base64,")
    raw = base64.b64decode(qr.qr_code.split(",", 1)[1])
    assert raw.startswith(PNG_MAGIC)


def test_issue_is_stable_for_the_same_url():
    a = AttendanceQRIssuer("https://erp.example.test/attendance").issue()
    b = AttendanceQRIssuer("https://erp.example.test/attendance").issue()

    assert a == b


def test_missing_url_fails_with_validation_error():
    with pytest.raises(ValidationError):
        AttendanceQRIssuer("").png_bytes()


def test_unknown_error_correction_level_is_rejected():
    with pytest.raises(ValueError):
        AttendanceQRIssuer("https://erp.example.test/attendance", error_correction="Z")
