# app/api/presence/services.py
import logging
from datetime import datetime, timedelta
from typing import Optional, Dict, Any, List

from firebase_admin import firestore

from app.models.presence import PresenceRecord
from app.models.session import AuthSession
from app.utils.datetime_utils import DateTimeUtils
from app.utils.display_name import MEMBER_RULES, resolve_display_name


class PresenceService:
    """
    "Who is online" bookkeeping in the 'users' collection.
    A user counts as online while their last heartbeat is inside the window.
    """
    def __init__(self, db, private_domain: str = "private.marneilx.com",
                 window_seconds: int = 300, query_limit: int = 50, visible_limit: int = 5):
        self.db = db
        self.users_ref = self.db.collection('users')
        self.private_domain = private_domain
        self.window = timedelta(seconds=window_seconds)
        self.query_limit = query_limit
        self.visible_limit = visible_limit

    def touch(self, session: AuthSession, now: Optional[datetime] = None) -> PresenceRecord:
        """Upsert the caller's presence record (sign-in and heartbeat)."""
        record = PresenceRecord(
            user_id=session.uid,
            display_name=resolve_display_name(session, MEMBER_RULES, self.private_domain),
            photo_url=session.picture,
            email=session.email,
            last_seen=now or DateTimeUtils.now(),
            is_online=True,
        )
        try:
            self.users_ref.document(session.uid).set(record.to_firestore(), merge=True)
        except Exception as e:
            logging.error(f"Error updating presence (user_id: {session.uid}): {e}", exc_info=True)
            raise
        return record

    def mark_offline(self, uid: str) -> None:
        self.users_ref.document(uid).set({"isOnline": False}, merge=True)

    def active_records(self, now: Optional[datetime] = None) -> List[PresenceRecord]:
        now = now or DateTimeUtils.now()
        query = (self.users_ref
                 .order_by("lastSeen", direction=firestore.Query.DESCENDING)
                 .limit(self.query_limit))
        records = []
        for doc in query.stream():
            record = PresenceRecord.from_firestore(doc.id, doc.to_dict())
            if record is not None and record.is_active(now, self.window):
                records.append(record)
        return records

    def online_users(self, viewer_id: Optional[str] = None, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Active users other than the viewer, capped for display."""
        others = [r for r in self.active_records(now) if r.user_id != viewer_id]
        return {
            "users": others[:self.visible_limit],
            "remaining": max(0, len(others) - self.visible_limit),
            "total": len(others),
        }
