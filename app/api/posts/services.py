# app/api/posts/services.py
import logging
from typing import Optional, List

from firebase_admin import firestore

from app.api.posts.voting import VoteDirection, apply_vote, plan_vote
from app.core.exceptions import ForbiddenError, NotFoundError
from app.models.post import Post
from app.models.session import AuthSession
from app.services.storage_service import StorageService
from app.utils.display_name import POST_AUTHOR_RULES, resolve_display_name


class PostService:
    """
    Post feed, creation, deletion and voting.
    All Firestore access for the 'posts' collection goes through here.
    """
    def __init__(self, db, storage_service: Optional[StorageService] = None,
                 private_domain: str = "private.marneilx.com", feed_limit: int = 50):
        self.db = db
        self.posts_ref = self.db.collection('posts')
        self.storage_service = storage_service
        self.private_domain = private_domain
        self.feed_limit = feed_limit

    def list_posts(self, limit: Optional[int] = None) -> List[Post]:
        """Newest posts first, never more than the feed limit."""
        limit = min(limit or self.feed_limit, self.feed_limit)
        query = self.posts_ref.order_by("createdAt", direction=firestore.Query.DESCENDING).limit(limit)
        return [Post.from_firestore(doc.id, doc.to_dict()) for doc in query.stream()]

    def create_post(self, session: AuthSession, content: str, image_url: Optional[str] = None) -> Post:
        author_name = resolve_display_name(session, POST_AUTHOR_RULES, self.private_domain)
        post = Post(
            id=None,
            content=content,
            author_name=author_name,
            author_id=session.uid,
            image_url=image_url or None,
        )
        try:
            _, doc_ref = self.posts_ref.add(post.to_firestore())
        except Exception as e:
            logging.error(f"Post creation failed (user_id: {session.uid}): {e}", exc_info=True)
            raise
        post.id = doc_ref.id
        logging.info(f"Post created (post_id: {post.id}, user_id: {session.uid})")
        return post

    def get_post(self, post_id: str) -> Post:
        doc = self.posts_ref.document(post_id).get()
        if not doc.exists:
            raise NotFoundError("Post not found.")
        return Post.from_firestore(doc.id, doc.to_dict())

    def delete_post(self, session: AuthSession, post_id: str) -> None:
        """Owner-only, irreversible. Removes the comments and the uploaded image too."""
        post = self.get_post(post_id)
        if post.author_id != session.uid:
            raise ForbiddenError("Only the author can delete this post.")

        post_ref = self.posts_ref.document(post_id)
        for comment in post_ref.collection('comments').stream():
            comment.reference.delete()

        if post.image_url and self.storage_service is not None:
            self.storage_service.delete_by_url(post.image_url)

        post_ref.delete()
        logging.info(f"Post deleted (post_id: {post_id}, user_id: {session.uid})")

    def vote(self, session: AuthSession, post_id: str, direction: VoteDirection) -> Post:
        """Toggle the caller's vote and return the post with the vote applied."""
        post = self.get_post(post_id)
        plan = plan_vote(post.upvotes, post.downvotes, session.uid, direction)
        post_ref = self.posts_ref.document(post_id)
        try:
            post_ref.update(plan.as_update(session.uid))
        except Exception as e:
            logging.error(f"Vote failed (user_id: {session.uid}, post_id: {post_id}): {e}", exc_info=True)
            raise
        post.upvotes, post.downvotes = apply_vote(post.upvotes, post.downvotes, session.uid, direction)
        return post
