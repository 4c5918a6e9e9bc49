"""
Tests for log redaction of personal data.
"""

import logging

from venue_booking.core.logging import mask_email, redact_personal_data, setup_logging


def test_mask_email():
    assert mask_email("jordan@example.com") == "j***@example.com"
    assert mask_email("not-an-email") == "***"


def test_redacts_emails_and_secrets():
    event = redact_personal_data(
        None,
        "info",
        {"event": "admin_login_failed", "email": "admin@example.com", "password": "hunter2", "venue_id": 3},
    )
    assert event == {
        "event": "admin_login_failed",
        "email": "a***@example.com",
        "password": "[redacted]",
        "venue_id": 3,
    }


def test_setup_logging_does_not_stack_handlers():
    setup_logging()
    setup_logging()
    names = [h.get_name() for h in logging.getLogger().handlers]
    assert names.count("venue_booking") == 1
