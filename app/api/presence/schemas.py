# app/api/presence/schemas.py
from typing import Any, Dict

from marshmallow import Schema, fields

from app.models.presence import PresenceRecord
from app.utils.datetime_utils import DateTimeUtils


class PresenceResponseSchema(Schema):
    """Public view of a presence record. Email is left out."""
    user_id = fields.Str(data_key="id", required=True)
    display_name = fields.Str(data_key="displayName", required=True)
    photo_url = fields.Str(data_key="photoURL", allow_none=True)
    last_seen = fields.Function(lambda r: DateTimeUtils.to_timestamp_ms(r.last_seen), data_key="lastSeen")
    is_online = fields.Bool(data_key="isOnline")


class OnlineUsersResponseSchema(Schema):
    users = fields.List(fields.Nested(PresenceResponseSchema), required=True)
    remaining = fields.Int(required=True)
    total = fields.Int(required=True)


def public_presence(doc_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """Stream payload for a 'users' document, same projection as GET /online."""
    record = PresenceRecord.from_firestore(doc_id, data)
    if record is None:
        return {"id": doc_id, "isOnline": bool(data.get("isOnline", False))}
    return PresenceResponseSchema().dump(record)
