# phr/__init__.py
import logging
import os

from flask import Flask, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from config import config, basedir
from phr.extensions import db, login_manager

logger = logging.getLogger(__name__)

STORAGE_EXTENSION = 'phr_storage'


def create_app(config_name=None, **overrides):
    app = Flask(__name__)
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'production')

    # Get config object and apply to app
    config_obj = config.get(config_name, config['default'])
    app.config.from_object(config_obj)
    app.config.update(overrides)

    app.logger.setLevel(app.config['LOG_LEVEL'])
    logging.getLogger('phr').setLevel(app.config['LOG_LEVEL'])

    # Directories for the sqlite file and the document bucket
    upload_folder = app.config['UPLOAD_FOLDER']
    os.makedirs(upload_folder, exist_ok=True)
    if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite:///' + basedir):
        os.makedirs(os.path.join(basedir, 'instance'), exist_ok=True)
    logger.debug("Uploads: %s", upload_folder)

    # Initialize extensions
    db.init_app(app)
    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        # Import here to avoid circular imports
        from phr.models.user import User
        return db.session.get(User, user_id)

    # The storage client is built once here and handed to the services
    # through get_storage()
    from phr.services.storage import StorageService
    app.extensions[STORAGE_EXTENSION] = StorageService(
        base_dir=upload_folder,
        secret_key=app.config['SECRET_KEY'],
        signed_url_ttl=app.config['SIGNED_URL_TTL'],
        download_url_ttl=app.config['DOWNLOAD_URL_TTL'],
    )

    # Register blueprints
    from phr.routes.main import main_bp
    from phr.routes.auth import auth_bp
    from phr.routes.dashboard import dashboard_bp
    from phr.routes.profile import profile_bp
    from phr.routes.vitals import vitals_bp
    from phr.routes.documents import documents_bp
    from phr.routes.storage import storage_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(profile_bp)
    app.register_blueprint(vitals_bp, url_prefix='/vitals')
    app.register_blueprint(documents_bp, url_prefix='/documents')
    app.register_blueprint(storage_bp, url_prefix='/storage')

    @app.errorhandler(Exception)
    def handle_error(e):
        if isinstance(e, HTTPException):
            return e
        logger.exception("Unhandled error on %s", request.path)
        if request.accept_mimetypes.best == 'application/json':
            return jsonify(success=False, message='An internal server error occurred.'), 500
        return 'An internal server error occurred. Please try again later.', 500

    # Create database tables
    with app.app_context():
        from phr import models  # noqa: F401
        db.create_all()

    # Register CLI commands
    from phr.cli import register_commands
    register_commands(app)

    return app


def get_storage():
    """Storage client configured for the current app."""
    return current_app.extensions[STORAGE_EXTENSION]
