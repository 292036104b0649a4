# logistics/socket_events.py

import functools

from flask import current_app
from flask_login import current_user
from flask_socketio import emit, disconnect, join_room
from redis.exceptions import RedisError

from logistics.extensions import socketio

ADMIN_ROOM = 'admins'


def base_room(base_id):
    return f'base-{base_id}'


def user_room(user):
    """Admins follow every base; everyone else follows their home base."""
    if user.is_admin() or user.base_id is None:
        return ADMIN_ROOM
    return base_room(user.base_id)


def authenticated_only(f):
    @functools.wraps(f)
    def wrapped(*args, **kwargs):
        if not current_user.is_authenticated:
            disconnect()
            return False
        return f(*args, **kwargs)
    return wrapped


def handle_redis_error(f):
    """Log notification failures instead of failing the write that triggered them.

    On a RedisError the call is repeated once with ``_direct=True``, which
    bypasses the message queue, so the event still reaches clients of this
    worker.
    """
    @functools.wraps(f)
    def wrapped(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except RedisError as e:
            current_app.logger.error(f"Message queue unavailable for {f.__name__}: {str(e)}")
            try:
                return f(*args, **kwargs, _direct=True)
            except Exception as e2:
                current_app.logger.error(f"Direct emit also failed: {str(e2)}")
        except Exception as e:
            current_app.logger.error(f"Unexpected error in {f.__name__}: {str(e)}")
        return None
    return wrapped


@socketio.on('connect')
@authenticated_only
def handle_connect(*args):
    room = user_room(current_user)
    join_room(room)
    emit('status', {'msg': f'{current_user.username} connected', 'room': room})
    current_app.logger.info(f'Client connected: {current_user.username} ({room})')
    return True


@socketio.on('disconnect')
def handle_disconnect(*args):
    if current_user.is_authenticated:
        current_app.logger.info(f'Client disconnected: {current_user.username}')


@handle_redis_error
def notify_inventory_update(entity_type, entity_id, action, data, base_ids=(), _direct=False):
    """
    Tell open dashboards that stock-affecting data changed.
    Args:
        entity_type: 'purchase', 'transfer', 'assignment', 'expenditure', ...
        entity_id: Changed record's ID
        action: Audit action name ('purchase', 'update_transfer_status', ...)
        data: Change details
        base_ids: Bases whose figures changed; empty broadcasts to everyone
        _direct: Emit without the message queue
    """
    payload = {
        'entity_type': entity_type,
        'entity_id': entity_id,
        'action': action,
        'data': data,
        'user': current_user.username if current_user.is_authenticated else 'System'
    }
    # ignore_queue delivers to this worker's clients without touching Redis
    kwargs = {'ignore_queue': True} if _direct else {}

    base_ids = sorted({base_id for base_id in base_ids if base_id is not None})
    if not base_ids:
        socketio.emit('inventory_update', payload, **kwargs)
        return payload

    for room in [ADMIN_ROOM] + [base_room(base_id) for base_id in base_ids]:
        socketio.emit('inventory_update', payload, to=room, **kwargs)
    return payload
