# app/__init__.py

# =====================================================================================
# 1. Environment (load before anything reads os.environ)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. Imports
# =====================================================================================
import os
import logging
from flask import Flask, jsonify
from flask_cors import CORS
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException
import firebase_admin
from firebase_admin import credentials, firestore

# - config
from app.core.config import config_by_name
from app.core.exceptions import AppError

# - blueprints
from app.api.auth.routes import auth_bp
from app.api.posts.routes import posts_bp
from app.api.comments.routes import comments_bp
from app.api.presence.routes import presence_bp
from app.api.uploads.routes import uploads_bp

# - services
from app.api.auth.services import AuthService
from app.api.posts.services import PostService
from app.api.comments.services import CommentService
from app.api.presence.services import PresenceService
from app.api.presence.schemas import public_presence
from app.services.event_stream import EventHub
from app.services.identity_service import IdentityService
from app.services.storage_service import StorageService


def create_app(config_name=None, test_config=None):
    """
    Flask application factory.

    :param config_name: key of config_by_name, defaults to FLASK_ENV
    :param test_config: mapping applied on top of the config class; a
        Firestore client can be injected as FIRESTORE_CLIENT
    """
    # =====================================================================================
    # 3. App and configuration
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    if test_config:
        app.config.update(test_config)
    app.json.ensure_ascii = False

    CORS(
        app,
        resources={r"/api/*": {"origins": app.config['CORS_ORIGINS']}},
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # =====================================================================================
    # 4. Firebase
    # =====================================================================================
    db = app.config.get('FIRESTORE_CLIENT')
    if db is None:
        if not firebase_admin._apps:
            cred_path = app.config['FIREBASE_CREDENTIALS_PATH']
            if cred_path:
                if not os.path.exists(cred_path):
                    raise FileNotFoundError(f"Firebase credentials file not found: {cred_path}")
                cred = credentials.Certificate(cred_path)
            else:
                # Cloud Run / GCE: application default credentials
                cred = credentials.ApplicationDefault()
            firebase_admin.initialize_app(cred, {
                'storageBucket': app.config['FIREBASE_STORAGE_BUCKET']
            })
        db = firestore.client()

    # =====================================================================================
    # 5. Services, stored on app.services and looked up by the routes
    # =====================================================================================
    app.services = {}
    private_domain = app.config['PRIVATE_EMAIL_DOMAIN']

    # 5-1. Firebase-backed shared services
    storage_instance = StorageService()
    if not app.config.get('TESTING'):
        try:
            storage_instance.init_app(app)
            logging.info("Storage service initialized successfully")
        except Exception as e:
            logging.error(f"Failed to initialize storage service: {e}")
            raise
    app.services['storage'] = storage_instance

    identity_instance = IdentityService()
    identity_instance.init_app(app)
    app.services['identity'] = identity_instance

    app.services['events'] = EventHub(
        db,
        feed_limit=app.config['FEED_LIMIT'],
        presence_limit=app.config['PRESENCE_QUERY_LIMIT'],
        keepalive_seconds=app.config['STREAM_KEEPALIVE_SECONDS'],
        serializers={"presence": public_presence},
    )

    # 5-2. Domain services
    app.services['posts'] = PostService(
        db,
        storage_service=app.services['storage'],
        private_domain=private_domain,
        feed_limit=app.config['FEED_LIMIT'],
    )
    app.services['comments'] = CommentService(db, private_domain=private_domain)
    app.services['presence'] = PresenceService(
        db,
        private_domain=private_domain,
        window_seconds=app.config['PRESENCE_WINDOW_SECONDS'],
        query_limit=app.config['PRESENCE_QUERY_LIMIT'],
        visible_limit=app.config['ONLINE_VISIBLE_LIMIT'],
    )
    app.services['auth'] = AuthService(app.services['identity'], app.services['presence'])

    # =====================================================================================
    # 6. Blueprints
    # =====================================================================================
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(posts_bp, url_prefix='/api/posts')
    app.register_blueprint(comments_bp, url_prefix='/api/posts')
    app.register_blueprint(presence_bp, url_prefix='/api/presence')
    app.register_blueprint(uploads_bp, url_prefix='/api/uploads')

    # =====================================================================================
    # 7. Global error handlers
    # =====================================================================================
    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        return jsonify({"error": "Validation failed.", "details": err.messages}), 400

    @app.errorhandler(AppError)
    def handle_app_error(err):
        if err.status_code >= 500:
            logging.error(f"Application error: {err.message}")
        else:
            logging.warning(f"Application error ({err.status_code}): {err.message}")
        return jsonify({"error": err.message}), err.status_code

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        if isinstance(err, HTTPException):
            return jsonify({"error": err.description}), err.code
        # Anything no other handler caught
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        return jsonify({"error": str(err) or "Internal server error."}), 500

    # =====================================================================================
    # 8. Logging
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    logging.info(f"Flask app created for '{config_name}' environment.")

    return app
