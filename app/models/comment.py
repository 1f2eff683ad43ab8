# app/models/comment.py
from dataclasses import dataclass, field
from typing import Optional, Dict, Any

from app.utils.datetime_utils import DateTimeUtils


@dataclass
class Comment:
    """
    Document in the 'posts/{postId}/comments' sub-collection.
    Comments are never edited after creation.
    """
    id: Optional[str]
    content: str
    author_id: str
    author_name: str
    author_avatar: Optional[str] = None
    created_at: int = field(default_factory=DateTimeUtils.now_ms)

    def to_firestore(self) -> Dict[str, Any]:
        return {
            "content": self.content,
            "authorId": self.author_id,
            "authorName": self.author_name,
            "authorAvatar": self.author_avatar,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_firestore(cls, doc_id: str, data: Dict[str, Any]) -> "Comment":
        created_at = data.get("createdAt")
        return cls(
            id=doc_id,
            content=data.get("content", ""),
            author_id=data.get("authorId", ""),
            author_name=data.get("authorName", ""),
            author_avatar=data.get("authorAvatar"),
            # Older comments were written with a server timestamp that may still be pending
            created_at=DateTimeUtils.to_timestamp_ms(created_at) if created_at is not None else DateTimeUtils.now_ms(),
        )
