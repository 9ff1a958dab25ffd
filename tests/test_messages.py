# tests/test_messages.py
from datetime import timedelta

import pytest

from marketplace.services.contact.message_service import MessageService

from tests.factories import NOW

MESSAGE = {"name": "Kim", "email": "kim@x.test", "subject": "Bulk order", "message": "Do you deliver?"}


def test_submitted_messages_start_unread(db):
    out = MessageService.submit_message(MESSAGE, now=NOW)
    assert out["ok"]
    assert out["contact"]["read"] is False
    assert out["contact"]["id"] == f"msg_{int(NOW.timestamp() * 1000)}"
    assert [m.subject for m in MessageService.list_messages("unread")] == ["Bulk order"]


@pytest.mark.parametrize("payload, message", [
    ({**MESSAGE, "subject": "  "}, "Please fill in all required fields."),
    ({**MESSAGE, "email": ""}, "Please fill in all required fields."),
    ({**MESSAGE, "email": "kim-at-x"}, "Please enter a valid email address."),
])
def test_submit_validation(db, payload, message):
    assert MessageService.submit_message(payload) == {"ok": False, "error": "validation", "message": message}


def test_viewing_marks_read_once(db):
    mid = MessageService.submit_message(MESSAGE, now=NOW)["contact"]["id"]

    first = MessageService.view_message(mid, now=NOW + timedelta(hours=1))["contact"]
    assert first["read"] is True
    second = MessageService.view_message(mid, now=NOW + timedelta(hours=2))["contact"]
    assert second["readDate"] == first["readDate"]

    assert MessageService.list_messages("unread") == []
    assert MessageService.view_message("missing")["error"] == "not_found"


def test_mark_all_read_and_stats(db):
    MessageService.submit_message(MESSAGE, now=NOW)
    MessageService.submit_message(MESSAGE, now=NOW + timedelta(seconds=1))
    MessageService.submit_message(MESSAGE, now=NOW - timedelta(days=3))

    assert MessageService.message_stats(now=NOW) == {"total": 3, "read": 0, "unread": 3, "today": 2}
    assert MessageService.mark_all_read(now=NOW)["updated"] == 3
    assert MessageService.message_stats(now=NOW)["read"] == 3
    assert MessageService.mark_all_read(now=NOW)["updated"] == 0


def test_delete_message(db):
    mid = MessageService.submit_message(MESSAGE, now=NOW)["contact"]["id"]
    assert MessageService.delete_message(mid)["ok"]
    assert MessageService.delete_message(mid)["error"] == "not_found"


def test_missing_fields_get_the_form_message(db):
    out = MessageService.submit_message({"name": "Kim"})
    assert out["message"] == "Please fill in all required fields."
