# app/api/comments/services.py

import logging
from typing import List

from app.core.exceptions import NotFoundError
from app.models.comment import Comment
from app.models.session import AuthSession
from app.utils.display_name import MEMBER_RULES, resolve_display_name


class CommentService:
    """
    Comments live in a 'comments' sub-collection under each post and are
    append-only: no edit or delete.
    """
    def __init__(self, db, private_domain: str = "private.marneilx.com"):
        self.db = db
        self.posts_ref = self.db.collection('posts')
        self.private_domain = private_domain

    def _comments_ref(self, post_id: str):
        return self.posts_ref.document(post_id).collection('comments')

    def list_comments(self, post_id: str) -> List[Comment]:
        """Comments of a post in creation order."""
        query = self._comments_ref(post_id).order_by("createdAt")
        return [Comment.from_firestore(doc.id, doc.to_dict()) for doc in query.stream()]

    def create_comment(self, session: AuthSession, post_id: str, content: str) -> Comment:
        if not self.posts_ref.document(post_id).get().exists:
            raise NotFoundError("Post not found.")

        comment = Comment(
            id=None,
            content=content.strip(),
            author_id=session.uid,
            author_name=resolve_display_name(session, MEMBER_RULES, self.private_domain),
            author_avatar=session.picture,
        )
        try:
            _, doc_ref = self._comments_ref(post_id).add(comment.to_firestore())
        except Exception as e:
            logging.error(f"Error adding comment (post_id: {post_id}): {e}", exc_info=True)
            raise
        comment.id = doc_ref.id
        return comment
