from logistics.models import User
from logistics.socket_events import (
    ADMIN_ROOM, base_room, notify_inventory_update, user_room
)


def test_user_room(app):
    with app.app_context():
        assert user_room(User.query.filter_by(username='admin').first()) == ADMIN_ROOM
        assert user_room(User.query.filter_by(username='commander').first()) == 'base-2'
        assert base_room(7) == 'base-7'


def test_notify_inventory_update_payload(app):
    with app.test_request_context():
        payload = notify_inventory_update(
            'transfer', 3, 'update_transfer_status', {'status': 'completed'},
            base_ids=(1, None, 2)
        )
        assert payload == {
            'entity_type': 'transfer',
            'entity_id': 3,
            'action': 'update_transfer_status',
            'data': {'status': 'completed'},
            'user': 'System',
        }


def test_write_survives_notification(officer_client, monkeypatch):
    from logistics.extensions import socketio

    def broken_emit(*args, **kwargs):
        raise RuntimeError('socket server down')

    monkeypatch.setattr(socketio, 'emit', broken_emit)
    response = officer_client.post('/api/purchases', json={
        'equipmentTypeId': 1,
        'baseId': 1,
        'itemName': 'M4A1 Carbine',
        'quantity': 3,
        'purchaseDate': '2024-02-02',
    })
    assert response.status_code == 201


def test_queue_failure_falls_back_to_local_emit(app, monkeypatch):
    from redis.exceptions import ConnectionError as RedisConnectionError
    from logistics.extensions import socketio

    calls = []

    def queue_down(event, payload, **kwargs):
        calls.append(kwargs)
        if not kwargs.get('ignore_queue'):
            raise RedisConnectionError('Connection refused')

    monkeypatch.setattr(socketio, 'emit', queue_down)
    with app.test_request_context():
        payload = notify_inventory_update('purchase', 1, 'purchase', {}, base_ids=(1,))

    assert payload['entity_id'] == 1
    assert calls[0] == {'to': ADMIN_ROOM}
    assert calls[-2:] == [
        {'to': ADMIN_ROOM, 'ignore_queue': True},
        {'to': 'base-1', 'ignore_queue': True},
    ]
