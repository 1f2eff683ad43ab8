# app/api/presence/routes.py
import logging
from flask import Blueprint, jsonify, current_app

from app.api.presence.schemas import OnlineUsersResponseSchema, PresenceResponseSchema
from app.core.security import token_required
from app.utils.sse import sse_response

presence_bp = Blueprint('presence_bp', __name__)


@presence_bp.route('/heartbeat', methods=['POST'])
@token_required()
def heartbeat(session):
    """
    Refresh the caller's last-seen time.
    Clients call this on every sign-in state change and then every
    `heartbeatSeconds` while signed in.
    """
    presence_service = current_app.services['presence']
    try:
        record = presence_service.touch(session)
    except Exception as e:
        logging.error(f"Heartbeat failed (user_id: {session.uid}): {e}", exc_info=True)
        return jsonify({"error": str(e)}), 500

    body = PresenceResponseSchema().dump(record)
    body["heartbeatSeconds"] = current_app.config['PRESENCE_HEARTBEAT_SECONDS']
    return jsonify(body), 200


@presence_bp.route('/online', methods=['GET'])
@token_required(optional=True)
def online_users(session):
    """Users seen in the last five minutes, excluding the caller."""
    presence_service = current_app.services['presence']
    viewer_id = session.uid if session else None
    try:
        result = presence_service.online_users(viewer_id)
        return jsonify(OnlineUsersResponseSchema().dump(result)), 200
    except Exception as e:
        logging.error(f"Failed to load online users: {e}", exc_info=True)
        return jsonify({"error": str(e)}), 500


@presence_bp.route('/stream', methods=['GET'])
def stream_presence():
    return sse_response(current_app.services['events'].subscribe("presence"))
