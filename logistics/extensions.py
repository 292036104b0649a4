# logistics/extensions.py

from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_socketio import SocketIO
from flask_migrate import Migrate
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from sqlalchemy.engine.url import make_url


def engine_options_for(app):
    """Build SQLAlchemy engine options for the configured database.

    Args:
        app: Flask application instance

    Returns:
        dict: Options suitable for SQLALCHEMY_ENGINE_OPTIONS
    """
    url = make_url(app.config['SQLALCHEMY_DATABASE_URI'])

    # Common options safe for all databases
    options = {
        'pool_pre_ping': True,
    }

    # Pool sizing does not apply to SQLite's single-file pools
    if not url.drivername.startswith('sqlite'):
        options.update({
            'pool_size': app.config.get('SQLALCHEMY_POOL_SIZE', 10),
            'pool_recycle': app.config.get('SQLALCHEMY_POOL_RECYCLE', 300),
            'pool_timeout': app.config.get('SQLALCHEMY_POOL_TIMEOUT', 20),
            'max_overflow': app.config.get('SQLALCHEMY_MAX_OVERFLOW', 5),
        })

        connect_timeout = app.config.get('SQLALCHEMY_CONNECT_TIMEOUT', 10)
        if url.drivername.startswith('postgresql'):
            options['connect_args'] = {
                'connect_timeout': connect_timeout,
                'keepalives': 1,
                'keepalives_idle': 30,
                'keepalives_interval': 10,
                'keepalives_count': 5
            }
        elif url.drivername.startswith('mysql'):
            options['connect_args'] = {
                'connect_timeout': connect_timeout
            }

    return options


# Initialize Flask extensions
db = SQLAlchemy()
login_manager = LoginManager()
socketio = SocketIO()
migrate = Migrate()
limiter = Limiter(key_func=get_remote_address)  # storage from RATELIMIT_STORAGE_URI


def init_app(app):
    """Initialize Flask extensions.

    Args:
        app: Flask application instance
    """
    app.config.setdefault('SQLALCHEMY_ENGINE_OPTIONS', engine_options_for(app))
    db.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db, render_as_batch=True)
    limiter.init_app(app)
