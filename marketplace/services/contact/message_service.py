# marketplace/services/contact/message_service.py

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from marketplace import records
from marketplace.models.contact_models import ContactMessage, ContactSubmitModel
from marketplace.records import MESSAGES, StorageUnavailable


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MessageService:
    """Contact-form inbox: visitors submit, admins read and clean up."""

    @staticmethod
    def submit_message(payload: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or _now()
        try:
            data = ContactSubmitModel.model_validate(payload or {})
        except ValidationError as e:
            return records.invalid(records.first_error(e, with_field=False))

        msg = ContactMessage(
            id=f"msg_{int(now.timestamp() * 1000)}",
            date=now.isoformat(),
            read=False,
            **data.model_dump(),
        )
        try:
            records.save_record(MESSAGES, msg)
        except StorageUnavailable:
            return records.unavailable()
        return records.ok(
            message="Your message has been sent successfully! We will get back to you soon.",
            contact=msg.model_dump(mode="json"),
        )

    @staticmethod
    def list_messages(status: Optional[str] = None) -> List[ContactMessage]:
        """status: all | read | unread"""
        query = None
        if status == "read":
            query = {"read": True}
        elif status == "unread":
            query = {"read": False}
        return records.load_records(MESSAGES, ContactMessage, query=query, sort=[("date", -1)])

    @staticmethod
    def get_message(message_id: str) -> Optional[ContactMessage]:
        return records.find_record(MESSAGES, ContactMessage, {"id": message_id})

    @staticmethod
    def view_message(message_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Opening a message marks it read."""
        msg = MessageService.get_message(message_id)
        if not msg:
            return records.not_found("Message not found")
        if not msg.read:
            msg = msg.model_copy(update={"read": True, "readDate": (now or _now()).isoformat()})
            try:
                records.save_record(MESSAGES, msg)
            except StorageUnavailable:
                return records.unavailable()
        return records.ok(contact=msg.model_dump(mode="json"))

    @staticmethod
    def delete_message(message_id: str) -> Dict[str, Any]:
        try:
            deleted = records.delete_record(MESSAGES, message_id)
        except StorageUnavailable:
            return records.unavailable()
        if not deleted:
            return records.not_found("Message not found")
        return records.ok()

    @staticmethod
    def mark_all_read(now: Optional[datetime] = None) -> Dict[str, Any]:
        stamp = (now or _now()).isoformat()
        unread = MessageService.list_messages("unread")
        try:
            for msg in unread:
                records.save_record(MESSAGES, msg.model_copy(update={"read": True, "readDate": stamp}))
        except StorageUnavailable:
            return records.unavailable()
        return records.ok(updated=len(unread))

    @staticmethod
    def message_stats(now: Optional[datetime] = None) -> Dict[str, int]:
        today = (now or _now()).date().isoformat()
        messages = MessageService.list_messages()
        read = sum(1 for m in messages if m.read)
        return {
            "total": len(messages),
            "read": read,
            "unread": len(messages) - read,
            "today": sum(1 for m in messages if (m.date or "")[:10] == today),
        }
