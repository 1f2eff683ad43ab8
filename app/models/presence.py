# app/models/presence.py
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional, Dict, Any

from app.utils.datetime_utils import DateTimeUtils


@dataclass
class PresenceRecord:
    """
    Document in the Firestore 'users' collection, keyed by uid.
    Upserted on sign-in and on every heartbeat; never deleted.
    """
    user_id: str
    display_name: str
    photo_url: Optional[str] = None
    email: Optional[str] = None
    last_seen: datetime = field(default_factory=DateTimeUtils.now)
    is_online: bool = True

    def is_active(self, now: datetime, window: timedelta) -> bool:
        """Online flag set and last heartbeat inside the window."""
        return self.is_online and self.last_seen > now - window

    def to_firestore(self) -> Dict[str, Any]:
        return {
            "displayName": self.display_name,
            "photoURL": self.photo_url,
            "email": self.email,
            "lastSeen": self.last_seen,
            "isOnline": self.is_online,
        }

    @classmethod
    def from_firestore(cls, doc_id: str, data: Dict[str, Any]) -> Optional["PresenceRecord"]:
        last_seen = data.get("lastSeen")
        if last_seen is None:
            return None
        return cls(
            user_id=doc_id,
            display_name=data.get("displayName") or "User",
            photo_url=data.get("photoURL"),
            email=data.get("email"),
            last_seen=DateTimeUtils.to_datetime(last_seen),
            is_online=bool(data.get("isOnline", False)),
        )
