# app/api/comments/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from marshmallow import ValidationError

from app.api.comments.schemas import CommentCreateSchema, CommentResponseSchema
from app.core.exceptions import NotFoundError
from app.core.security import token_required
from app.utils.sse import sse_response


comments_bp = Blueprint('comments_bp', __name__)


@comments_bp.route('/<string:post_id>/comments', methods=['GET'])
def get_comments(post_id: str):
    """Comments of a post, oldest first."""
    comment_service = current_app.services['comments']
    try:
        comments = comment_service.list_comments(post_id)
        return jsonify(CommentResponseSchema(many=True).dump(comments)), 200
    except Exception as e:
        logging.error(f"Failed to list comments (post_id: {post_id}): {e}", exc_info=True)
        return jsonify({"error": str(e)}), 500


@comments_bp.route('/<string:post_id>/comments', methods=['POST'])
@token_required(message="Please login to comment.")
def create_comment(post_id: str, session):
    """
    Append a comment to a post.
    - 201 with the stored comment on success.
    """
    comment_service = current_app.services['comments']
    try:
        data = CommentCreateSchema().load(request.get_json(silent=True) or {})
        new_comment = comment_service.create_comment(session, post_id, data['content'])
        return jsonify(CommentResponseSchema().dump(new_comment)), 201
    except ValidationError as err:
        return jsonify({"error": "Invalid content", "details": err.messages}), 400
    except NotFoundError as e:
        return jsonify({"error": e.message}), 404
    except Exception as e:
        logging.error(f"Error adding comment (post_id: {post_id}): {e}", exc_info=True)
        return jsonify({"error": "Failed to post comment."}), 500


@comments_bp.route('/<string:post_id>/comments/stream', methods=['GET'])
def stream_comments(post_id: str):
    """New comments of a post as Server-Sent Events."""
    return sse_response(current_app.services['events'].subscribe(f"posts/{post_id}/comments"))
