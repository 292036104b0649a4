# logistics/__init__.py

from collections.abc import Mapping
from flask import Flask, jsonify
from config import Config
from logistics.extensions import db, login_manager, socketio
from logistics.extensions import init_app as init_extensions
from logistics.errors import register_error_handlers
from logistics.models import User
import os
import logging
from logging.handlers import RotatingFileHandler


def configure_logging(app):
    """Attach production log handlers (stdout or rotating file)."""
    if app.config.get('LOG_TO_STDOUT'):
        stream_handler = logging.StreamHandler()
        stream_handler.setLevel(logging.INFO)
        app.logger.addHandler(stream_handler)
    else:
        if not os.path.exists('logs'):
            os.mkdir('logs')
        file_handler = RotatingFileHandler('logs/logistics.log',
                                           maxBytes=10240000,
                                           backupCount=10)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s '
            '[in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)

    app.logger.setLevel(logging.INFO)
    app.logger.info('Base Logistics Tracker startup')


def create_app(config_class=Config):
    """Application factory.

    Args:
        config_class: Config class, or a mapping of overrides applied on
            top of the base Config (used by tests)
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    if isinstance(config_class, Mapping):
        app.config.from_mapping(config_class)
    else:
        app.config.from_object(config_class)

    if app.config.get('FLASK_ENV') == 'production' and not app.testing:
        configure_logging(app)

    # Initialize Flask extensions
    init_extensions(app)

    # Use the Redis message queue in production so every worker can broadcast
    socketio.init_app(
        app,
        message_queue=app.config.get('REDIS_URL') if app.config.get('FLASK_ENV') == 'production' else None,
        async_mode=app.config.get('SOCKETIO_ASYNC_MODE')
    )

    login_manager.session_protection = 'strong'

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Authentication required'}), 401

    from logistics.main import bp as main_bp
    from logistics.auth import bp as auth_bp
    from logistics.dashboard import bp as dashboard_bp
    app.register_blueprint(main_bp, url_prefix='/api')
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(dashboard_bp, url_prefix='/dashboard')

    # Socket.IO handlers register themselves on import
    from logistics import socket_events  # noqa: F401

    register_error_handlers(app)

    # Register CLI commands
    from logistics.cli import init_cli
    init_cli(app)

    @app.route('/health')
    def health():
        return jsonify({'status': 'ok'})

    with app.app_context():
        db.create_all()

        # Ensure admin user exists
        if app.config.get('ADMIN_PASSWORD') and not User.query.filter_by(
                username=app.config['ADMIN_USERNAME']).first():
            admin = User(
                username=app.config['ADMIN_USERNAME'],
                email=app.config['ADMIN_EMAIL'],
                role='admin'
            )
            admin.set_password(app.config['ADMIN_PASSWORD'])
            db.session.add(admin)
            db.session.commit()
            app.logger.info(f"Created admin user {admin.username}")

    @app.teardown_appcontext
    def cleanup(resp_or_exc):
        """Ensure proper cleanup of database sessions"""
        db.session.remove()

    return app
