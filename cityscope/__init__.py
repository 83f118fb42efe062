# cityscope/__init__.py

# =====================================================================================
# 1. Environment variables (loaded before anything reads them)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. Module imports
# =====================================================================================
import os
import logging
from typing import Optional, Dict, Any

from flask import Flask
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge
import firebase_admin
from firebase_admin import credentials

# - configuration
from cityscope.core.config import config_by_name
from cityscope.core import errors
from cityscope.core.results import ServiceResult
from cityscope.core.security import bcrypt, jwt_manager

# - blueprints
from cityscope.api.auth.routes import auth_bp
from cityscope.api.profile.routes import profile_bp
from cityscope.api.posts.routes import posts_bp

# - services
from cityscope.repositories import PostRepository, UserRepository
from cityscope.services.storage_service import StorageService
from cityscope.api.auth.services import AuthService
from cityscope.api.profile.services import ProfileService
from cityscope.api.posts.feed import FeedService
from cityscope.api.posts.services import PostService


def _init_firebase(app: Flask):
    if firebase_admin._apps:
        return
    cred_path = app.config['FIREBASE_CREDENTIALS_PATH']
    if not cred_path or not os.path.exists(cred_path):
        raise FileNotFoundError(f"Firebase credentials file not found: {cred_path}")
    cred = credentials.Certificate(cred_path)
    firebase_admin.initialize_app(cred, {
        'storageBucket': app.config['FIREBASE_STORAGE_BUCKET']
    })


def build_services(app: Flask) -> Dict[str, Any]:
    """Creates the Firestore-backed service registry stored on ``app.services``."""
    storage_instance = StorageService()
    storage_instance.init_app(app)

    users = UserRepository()
    posts = PostRepository()
    feed = FeedService(posts, users)

    return {
        'storage': storage_instance,
        'auth': AuthService(users),
        'profiles': ProfileService(users),
        'feed': feed,
        'posts': PostService(posts, users, feed_service=feed, storage_service=storage_instance),
    }


def create_app(config_name: Optional[str] = None, services: Optional[Dict[str, Any]] = None):
    """
    Flask application factory.

    :param config_name: key of ``config_by_name``; defaults to FLASK_ENV
    :param services: prepared service registry; when given, Firebase is not initialized
    """
    # =====================================================================================
    # 3. Flask app and base configuration
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.json.ensure_ascii = False

    # =====================================================================================
    # 4. Extensions and external services
    # =====================================================================================
    jwt_manager.init_app(app)
    bcrypt.init_app(app)

    # =====================================================================================
    # 5. Service registry on 'app.services' (dependency injection)
    # =====================================================================================
    if services is None:
        try:
            _init_firebase(app)
            services = build_services(app)
            logging.info("Firestore-backed services initialized successfully")
        except Exception as e:
            logging.error(f"Failed to initialize services: {e}")
            raise
    app.services = services

    # =====================================================================================
    # 6. Blueprints
    # =====================================================================================
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(profile_bp, url_prefix='/api/profile')
    app.register_blueprint(posts_bp, url_prefix='/api/posts')

    # =====================================================================================
    # 7. Global error handlers
    # =====================================================================================
    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        return ServiceResult.fail(errors.ValidationError("Validation failed"), details=err.messages).to_response()

    @app.errorhandler(errors.CityScopeError)
    def handle_domain_error(err):
        return ServiceResult.fail(err).to_response()

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(err):
        return ServiceResult.fail(errors.MediaUploadError("Image exceeds the 5MB limit")).to_response()[0], 413

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        if isinstance(err, HTTPException):
            return ServiceResult(success=False, message=err.description or err.name,
                                 error=err.name.upper().replace(' ', '_'),
                                 status_code=err.code or 500).to_response()
        # Anything not handled above ends up here
        return ServiceResult.internal(f"An unhandled exception occurred: {err}").to_response()

    # =====================================================================================
    # 8. Logging and return
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    logging.info(f"Flask app created for '{config_name}' environment.")

    return app
