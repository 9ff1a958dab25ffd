# marketplace/routes/contact/contact_routes.py

from flask import Blueprint, request

from marketplace.routes.guards import respond
from marketplace.services.contact.message_service import MessageService

contact_bp = Blueprint("contact_bp", __name__)


@contact_bp.post("/contact")
def contact_api():
    return respond(MessageService.submit_message(request.get_json(silent=True) or {}), 201)
