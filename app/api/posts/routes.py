# app/api/posts/routes.py
import logging
from flask import Blueprint, request, jsonify, Response, current_app
from marshmallow import ValidationError

from app.api.posts.schemas import PostCreateSchema, PostResponseSchema, VoteSchema
from app.api.posts.voting import VoteDirection
from app.core.exceptions import ForbiddenError, NotFoundError
from app.core.security import token_required
from app.utils.sse import sse_response


posts_bp = Blueprint('posts_bp', __name__)


@posts_bp.route('', methods=['GET'])
def get_posts():
    """
    Feed: the 50 most recent posts, newest first.
    """
    post_service = current_app.services['posts']
    try:
        posts = post_service.list_posts()
        return jsonify(PostResponseSchema(many=True).dump(posts)), 200
    except Exception as e:
        logging.error(f"Failed to list posts: {e}", exc_info=True)
        return jsonify({"error": str(e)}), 500


@posts_bp.route('', methods=['POST'])
@token_required()
def create_post(session):
    """
    Create a post for the caller.
    - 401 without a valid bearer token, 400 when the content is blank.
    - Returns the stored post including its generated id.
    """
    post_service = current_app.services['posts']
    try:
        data = PostCreateSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        error = "Invalid content" if "content" in err.messages else "Invalid request"
        return jsonify({"error": error, "details": err.messages}), 400

    try:
        new_post = post_service.create_post(session, data['content'], data.get('image_url'))
        return jsonify(PostResponseSchema().dump(new_post)), 200
    except Exception as e:
        logging.error(f"Error creating post: {e}", exc_info=True)
        return jsonify({"error": str(e)}), 500


@posts_bp.route('/stream', methods=['GET'])
def stream_feed():
    """Live feed changes (new, voted and deleted posts) as Server-Sent Events."""
    return sse_response(current_app.services['events'].subscribe("posts"))


@posts_bp.route('/<string:post_id>', methods=['GET'])
def get_post(post_id: str):
    post_service = current_app.services['posts']
    try:
        post = post_service.get_post(post_id)
    except NotFoundError as e:
        return jsonify({"error": e.message}), 404
    return jsonify(PostResponseSchema().dump(post)), 200


@posts_bp.route('/<string:post_id>', methods=['DELETE'])
@token_required()
def delete_post(post_id: str, session):
    """
    Delete a post. Only its author may do this.
    """
    post_service = current_app.services['posts']
    try:
        post_service.delete_post(session, post_id)
        return Response(status=204)
    except ForbiddenError as e:
        return jsonify({"error": e.message}), 403
    except NotFoundError as e:
        return jsonify({"error": e.message}), 404


@posts_bp.route('/<string:post_id>/vote', methods=['POST'])
@token_required(message="Please login to vote.")
def vote_post(post_id: str, session):
    """
    Toggle the caller's up/down vote on a post and return the updated post.
    """
    post_service = current_app.services['posts']
    try:
        data = VoteSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return jsonify({"error": "Invalid vote", "details": err.messages}), 400

    try:
        post = post_service.vote(session, post_id, VoteDirection(data['direction']))
        return jsonify(PostResponseSchema().dump(post)), 200
    except NotFoundError as e:
        return jsonify({"error": e.message}), 404
    except Exception as e:
        logging.error(f"Vote failed (post_id: {post_id}): {e}", exc_info=True)
        return jsonify({"error": "Failed to vote."}), 500


@posts_bp.route('/<string:post_id>/stream', methods=['GET'])
def stream_post(post_id: str):
    """Live updates of one post (vote counts, deletion)."""
    return sse_response(current_app.services['events'].subscribe(f"posts/{post_id}"))
