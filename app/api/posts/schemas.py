# app/api/posts/schemas.py
from marshmallow import Schema, fields, validate, ValidationError, post_dump


def not_blank(value: str):
    if not value.strip():
        raise ValidationError("Content must not be empty.")


# --- Requests ---

class PostCreateSchema(Schema):
    """Body of POST /api/posts."""
    content = fields.Str(required=True, validate=not_blank)
    image_url = fields.Str(data_key="imageUrl", load_default=None, allow_none=True)


class VoteSchema(Schema):
    """Body of POST /api/posts/{post_id}/vote."""
    direction = fields.Str(required=True, validate=validate.OneOf(["up", "down"]))


# --- Responses ---

class PostResponseSchema(Schema):
    """Post as returned by the API (camelCase, imageUrl only when set)."""
    id = fields.Str(required=True)
    content = fields.Str(required=True)
    author_name = fields.Str(data_key="authorName", required=True)
    author_id = fields.Str(data_key="authorId", required=True)
    created_at = fields.Int(data_key="createdAt", required=True)
    upvotes = fields.List(fields.Str(), required=True)
    downvotes = fields.List(fields.Str(), required=True)
    image_url = fields.Str(data_key="imageUrl", allow_none=True)

    @post_dump
    def drop_missing_image(self, data, **kwargs):
        if not data.get("imageUrl"):
            data.pop("imageUrl", None)
        return data
