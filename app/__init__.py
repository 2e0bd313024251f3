import logging

import cloudinary
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_mail import Mail
from flask_bcrypt import Bcrypt
from flask_socketio import SocketIO
from werkzeug.exceptions import HTTPException
from config import Config

# Initialize Flask extensions
db = SQLAlchemy()
login_manager = LoginManager()
mail = Mail()
bcrypt = Bcrypt()
socketio = SocketIO()

from app.services.push import PushNotifier
from app.services.notifier import MessageNotifier

push = PushNotifier()
notifier = MessageNotifier()


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    login_manager.init_app(app)
    mail.init_app(app)
    bcrypt.init_app(app)

    # Handlers must be declared before init_app so every new server gets them
    from app.chat import events  # noqa: F401
    socketio.init_app(app,
                      async_mode=app.config.get('SOCKETIO_ASYNC_MODE'),
                      cors_allowed_origins=app.config.get('CORS_ORIGINS', '*'))
    push.init_app(app)
    notifier.init_app(app)

    cloudinary.config(
        cloud_name=app.config.get('CLOUDINARY_CLOUD_NAME'),
        api_key=app.config.get('CLOUDINARY_API_KEY'),
        api_secret=app.config.get('CLOUDINARY_API_SECRET'),
    )

    # Register blueprints
    from app.auth import bp as auth_bp
    app.register_blueprint(auth_bp, url_prefix='/api/v1')

    from app.cars import bp as cars_bp
    app.register_blueprint(cars_bp, url_prefix='/api/v1')

    from app.rentals import bp as rentals_bp
    app.register_blueprint(rentals_bp, url_prefix='/api/v1')

    from app.reviews import bp as reviews_bp
    app.register_blueprint(reviews_bp, url_prefix='/api/v1')

    from app.chat import bp as chat_bp
    app.register_blueprint(chat_bp, url_prefix='/api/v1')

    from app.notifications import bp as notifications_bp
    app.register_blueprint(notifications_bp, url_prefix='/api/v1')

    # Push token registration and direct sends live outside the versioned prefix
    from app.notifications import push_bp
    app.register_blueprint(push_bp)

    register_error_handlers(app)

    from app.models import user, car, rental, review, message, notification  # noqa: F401
    with app.app_context():
        db.create_all()

    return app


def configure_logging(app):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    root = logging.getLogger('app')
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s [%(name)s] %(message)s'))
        root.addHandler(handler)


def register_error_handlers(app):
    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'success': False, 'message': error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        app.logger.exception('Unhandled error: %s', error)
        return jsonify({'success': False, 'message': 'Internal server error'}), 500


