# marketplace/routes/admin/message_routes.py

from flask import Blueprint, jsonify, request

from marketplace.routes.guards import require_role, respond
from marketplace.services.contact.message_service import MessageService

admin_messages_bp = Blueprint(
    "admin_messages_bp",
    __name__,
    url_prefix="/admin/messages",
)


@admin_messages_bp.before_request
def _admin_only():
    ok, resp, _ = require_role("admin")
    if not ok:
        return resp


@admin_messages_bp.get("/")
def messages_api():
    """Usage: /admin/messages/?status=all|read|unread"""
    messages = MessageService.list_messages(request.args.get("status"))
    return jsonify(
        ok=True,
        count=len(messages),
        messages=[m.model_dump(mode="json") for m in messages],
        stats=MessageService.message_stats(),
    ), 200


@admin_messages_bp.get("/<message_id>")
def message_detail_api(message_id: str):
    return respond(MessageService.view_message(message_id))


@admin_messages_bp.post("/mark-all-read")
def mark_all_read_api():
    return respond(MessageService.mark_all_read())


@admin_messages_bp.delete("/<message_id>")
def message_delete_api(message_id: str):
    return respond(MessageService.delete_message(message_id))
