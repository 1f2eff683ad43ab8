# app/models/post.py
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any

from app.utils.datetime_utils import DateTimeUtils


@dataclass
class Post:
    """
    Document in the Firestore 'posts' collection.
    Stored keys are camelCase; `id` is the document id and is not stored.
    A user id is in at most one of `upvotes` / `downvotes`.
    """
    id: Optional[str]
    content: str
    author_name: str
    author_id: str
    created_at: int = field(default_factory=DateTimeUtils.now_ms)
    upvotes: List[str] = field(default_factory=list)
    downvotes: List[str] = field(default_factory=list)
    image_url: Optional[str] = None

    def to_firestore(self) -> Dict[str, Any]:
        data = {
            "content": self.content,
            "authorName": self.author_name,
            "authorId": self.author_id,
            "createdAt": self.created_at,
            "upvotes": list(self.upvotes),
            "downvotes": list(self.downvotes),
        }
        if self.image_url:
            data["imageUrl"] = self.image_url
        return data

    @classmethod
    def from_firestore(cls, doc_id: str, data: Dict[str, Any]) -> "Post":
        return cls(
            id=doc_id,
            content=data.get("content", ""),
            author_name=data.get("authorName", ""),
            author_id=data.get("authorId", ""),
            created_at=DateTimeUtils.to_timestamp_ms(data.get("createdAt", 0)),
            upvotes=list(data.get("upvotes") or []),
            downvotes=list(data.get("downvotes") or []),
            image_url=data.get("imageUrl") or None,
        )
