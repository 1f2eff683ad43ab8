# app/api/comments/schemas.py
from marshmallow import Schema, fields

from app.api.posts.schemas import not_blank


class CommentCreateSchema(Schema):
    """
    POST /api/posts/{post_id}/comments
    """
    content = fields.Str(required=True, validate=not_blank)


class CommentResponseSchema(Schema):
    id = fields.Str(required=True)
    content = fields.Str(required=True)
    author_id = fields.Str(data_key="authorId", required=True)
    author_name = fields.Str(data_key="authorName", required=True)
    author_avatar = fields.Str(data_key="authorAvatar", allow_none=True)
    created_at = fields.Int(data_key="createdAt", required=True)
