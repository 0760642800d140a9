"""Tests for the structured operation log"""
import logging

import pytest

from app.utils.logger import StructuredFileHandler, log_auth_event


@pytest.fixture
def log_file(tmp_path):
    path = tmp_path / "logs.txt"
    handler = StructuredFileHandler(str(path))
    handler.setLevel(logging.WARNING)
    events = logging.getLogger("auth_events")
    events.addHandler(handler)
    yield path
    events.removeHandler(handler)
    handler.close()


@pytest.mark.unit
class TestStructuredLog:

    def test_header_written_once(self, tmp_path):
        path = tmp_path / "logs.txt"
        StructuredFileHandler(str(path)).close()
        StructuredFileHandler(str(path)).close()
        assert path.read_text(encoding="utf-8").count("OPERATION LOG") == 1

    def test_auth_event_row_carries_user_context(self, log_file):
        log_auth_event("LOGIN", "FAILED", "wrong password", user_id=42, user_email="ann@edulearn.io")

        row = log_file.read_text(encoding="utf-8").splitlines()[-1]
        assert row.startswith("1 ")
        assert "42" in row
        assert "ann@edulearn.io" in row
        assert "AUTH LOGIN FAILED" in row

    def test_info_events_stay_out_of_file(self, log_file):
        log_auth_event("RESEND_OTP", user_id=1, level=logging.INFO)
        assert "RESEND_OTP" not in log_file.read_text(encoding="utf-8")

    def test_serial_numbers_continue_across_handlers(self, tmp_path):
        path = tmp_path / "logs.txt"
        record = logging.LogRecord("auth_events", logging.WARNING, __file__, 1, "first", None, None)

        handler = StructuredFileHandler(str(path))
        handler.emit(record)
        handler.close()

        handler = StructuredFileHandler(str(path))
        assert handler.log_counter == 2
        handler.close()

    def test_long_warning_keeps_full_details(self, log_file):
        detail = "x" * 80
        log_auth_event("RESET_PASSWORD", "REJECTED", detail, user_id=3)
        assert f"Details: AUTH RESET_PASSWORD REJECTED — {detail}" in log_file.read_text(encoding="utf-8")
