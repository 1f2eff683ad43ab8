# app/api/uploads/routes.py

import logging
from flask import request, jsonify, Blueprint, current_app
from marshmallow import Schema, fields, ValidationError

from app.core.security import token_required
from app.services.storage_service import StorageService

# All routes here are mounted under /api/uploads
uploads_bp = Blueprint('uploads', __name__)


class UploadUrlSchema(Schema):
    filename = fields.Str(required=True)
    content_type = fields.Str(data_key="contentType", required=True)


class FilePathSchema(Schema):
    """Object path returned by /url, sent back once the client upload is done."""
    file_path = fields.Str(data_key="filePath", required=True, error_messages={"required": "filePath is required."})


def _is_image(content_type: str) -> bool:
    return bool(content_type) and content_type.startswith("image/")


@uploads_bp.route('/images', methods=['POST'])
@token_required()
def upload_image(session):
    """
    Upload a post image (multipart field `file`) and return its public URL.
    The URL is then sent as `imageUrl` when creating the post.
    """
    file = request.files.get('file')
    if file is None or not file.filename:
        return jsonify({"error": "No image file provided."}), 400
    if not _is_image(file.mimetype):
        return jsonify({"error": "Only image uploads are allowed."}), 400

    storage_service = current_app.services['storage']
    try:
        image_url = storage_service.upload_post_image(session.uid, file.filename, file.read(), file.mimetype)
        return jsonify({"imageUrl": image_url}), 201
    except Exception as e:
        logging.error(f"Image upload failed (user_id: {session.uid}): {e}", exc_info=True)
        return jsonify({"error": "Failed to upload image."}), 500


@uploads_bp.route('/url', methods=['POST'])
@token_required()
def get_upload_url(session):
    """
    Signed URL for uploading an image directly to storage.
    """
    try:
        data = UploadUrlSchema().load(request.get_json(silent=True) or {})
    except ValidationError as e:
        logging.warning(f"Upload URL request rejected: {e.messages}")
        return jsonify({"error": "'filename' and 'contentType' are required.", "details": e.messages}), 400

    if not _is_image(data['content_type']):
        return jsonify({"error": "Only image uploads are allowed."}), 400

    storage_service = current_app.services['storage']
    try:
        url_info = storage_service.generate_upload_url(session.uid, data['filename'], data['content_type'])
        return jsonify({"uploadUrl": url_info["upload_url"], "filePath": url_info["file_path"]}), 200
    except Exception as e:
        logging.error(f"Signed URL generation failed: {e}", exc_info=True)
        return jsonify({"error": "Failed to create upload URL."}), 500


@uploads_bp.route('/finalize', methods=['POST'])
@token_required()
def finalize_upload(session):
    """
    Make a directly uploaded image public and return its URL.
    """
    try:
        data = FilePathSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return jsonify({"error": "filePath is required.", "details": err.messages}), 400

    file_path = data['file_path']
    if not file_path.startswith(StorageService.user_folder(session.uid) + "/") or ".." in file_path:
        return jsonify({"error": "You can only publish your own uploads."}), 403

    storage_service = current_app.services['storage']
    try:
        public_url = storage_service.make_public_and_get_url(file_path)
        return jsonify({"imageUrl": public_url}), 200
    except FileNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception as e:
        logging.error(f"Failed to publish upload: {e}", exc_info=True)
        return jsonify({"error": "Failed to process the file."}), 500
