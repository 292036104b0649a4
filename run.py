#!/usr/bin/env python
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file, fallback to .env.development
env_path = Path('.env')
if not env_path.exists():
    env_path = Path('.env.development')
load_dotenv(env_path)

from config import get_config  # noqa: E402
from logistics import create_app  # noqa: E402
from logistics.extensions import socketio  # noqa: E402

app = create_app(get_config())

if __name__ == '__main__':
    # Production mode is normally served by gunicorn with an eventlet worker
    socketio.run(
        app,
        host=os.environ.get('HOST', '127.0.0.1'),
        port=int(os.environ.get('PORT', 5000)),
        debug=app.config['DEBUG']
    )
