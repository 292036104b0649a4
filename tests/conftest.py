import os
import tempfile
from datetime import date
import pytest
from logistics import create_app
from logistics.extensions import db
from logistics.models import (
    User, Base, EquipmentType, Purchase, Transfer
)


@pytest.fixture
def app():
    """Create and configure a new app instance for each test."""
    # Create a temporary file to isolate the database for each test
    db_fd, db_path = tempfile.mkstemp()

    app = create_app({
        'TESTING': True,
        'FLASK_ENV': 'testing',
        'SQLALCHEMY_DATABASE_URI': f'sqlite:///{db_path}',
        'WTF_CSRF_ENABLED': False,
        'RATELIMIT_ENABLED': False,
        'RATELIMIT_STORAGE_URI': 'memory://',
        'SOCKETIO_ASYNC_MODE': 'threading',
        'ADMIN_PASSWORD': None,
    })

    # Create the database and load test data
    with app.app_context():
        db.create_all()
        init_test_data()

    yield app

    with app.app_context():
        db.session.remove()
        db.engine.dispose()

    # Close and remove the temporary database
    os.close(db_fd)
    os.unlink(db_path)


@pytest.fixture
def client(app):
    """A test client for the app."""
    return app.test_client()


@pytest.fixture
def runner(app):
    """A test runner for the app's Click commands."""
    return app.test_cli_runner()


def login(client, username):
    response = client.post('/auth/login', json={
        'username': username,
        'password': username
    })
    assert response.status_code == 200, response.get_json()
    return client


@pytest.fixture
def admin_client(app):
    """A test client authenticated as admin."""
    return login(app.test_client(), 'admin')


@pytest.fixture
def commander_client(app):
    """A test client authenticated as the commander of base 2."""
    return login(app.test_client(), 'commander')


@pytest.fixture
def officer_client(app):
    """A test client authenticated as a logistics officer of base 1."""
    return login(app.test_client(), 'officer')


def add_user(username, role, base_id=None):
    user = User(
        username=username,
        email=f'{username}@test.mil',
        role=role,
        base_id=base_id
    )
    user.set_password(username)
    db.session.add(user)
    return user


def init_test_data():
    """Initialize test data.

    Bases 1-4, equipment types 1-2 and the reference scenario: base 1 buys
    50 carbines on 2024-01-15 and sends 15 to base 2 on 2024-02-15
    (completed); base 2 has a pending 10-unit transfer to base 4.
    """
    for name, location in [
        ('Fort Liberty', 'North Carolina'),
        ('Fort Campbell', 'Kentucky'),
        ('Fort Hood', 'Texas'),
        ('Joint Base Lewis-McChord', 'Washington'),
    ]:
        db.session.add(Base(name=name, location=location))
    db.session.add(EquipmentType(name='M4A1 Carbine', category='Weapons'))
    db.session.add(EquipmentType(name='5.56mm Ammunition', category='Ammunition'))
    db.session.flush()

    admin = add_user('admin', 'admin')
    add_user('commander', 'base_commander', base_id=2)
    add_user('officer', 'logistics_officer', base_id=1)
    db.session.flush()

    db.session.add(Purchase(
        equipment_type_id=1,
        base_id=1,
        item_name='M4A1 Carbine',
        quantity=50,
        purchase_date=date(2024, 1, 15),
        created_by=admin.id
    ))
    db.session.add(Transfer(
        transfer_number='TR-2024-0001',
        equipment_type_id=1,
        item_name='M4A1 Carbine',
        from_base_id=1,
        to_base_id=2,
        quantity=15,
        transfer_date=date(2024, 2, 15),
        status='completed',
        created_by=admin.id
    ))
    db.session.add(Transfer(
        transfer_number='TR-2024-0002',
        equipment_type_id=1,
        item_name='M4A1 Carbine',
        from_base_id=2,
        to_base_id=4,
        quantity=10,
        transfer_date=date(2024, 2, 25),
        status='pending',
        created_by=admin.id
    ))
    db.session.commit()
