from logistics.extensions import db
from logistics.models import User, Base, EquipmentType, Purchase, Transfer


def test_seed_data_keeps_existing_transactions(app, runner):
    result = runner.invoke(args=['seed-data'])
    assert result.exit_code == 0
    assert 'skipping sample transactions' in result.output
    assert 'Seed data loaded successfully!' in result.output

    with app.app_context():
        assert Base.query.count() == 5
        assert EquipmentType.query.count() == 16
        assert Purchase.query.count() == 1


def test_seed_data_unknown_user(runner):
    result = runner.invoke(args=['seed-data', '--username', 'ghost'])
    assert result.exit_code != 0
    assert 'ghost' in result.output


def test_fresh_database_seed(app, runner):
    result = runner.invoke(args=['init-db'])
    assert 'Database tables created fresh.' in result.output

    result = runner.invoke(args=['create-user', '--username', 'admin',
                                 '--password', 'secret'])
    assert result.exit_code == 0
    result = runner.invoke(args=['seed-data'])
    assert result.exit_code == 0

    with app.app_context():
        assert Purchase.query.count() == 5
        statuses = sorted(t.status for t in Transfer.query.all())
        assert statuses == ['completed', 'in_transit', 'pending']
        numbers = sorted(t.transfer_number for t in Transfer.query.all())
        assert numbers == ['TR-2024-0001', 'TR-2024-0002', 'TR-2024-0003']


def test_reference_only_seed(app, runner):
    runner.invoke(args=['init-db'])
    result = runner.invoke(args=['seed-data', '--reference-only'])
    assert result.exit_code == 0
    with app.app_context():
        assert Base.query.count() == 5
        assert Purchase.query.count() == 0


def test_create_user(app, runner):
    result = runner.invoke(args=[
        'create-user', '--username', 'cmdr3', '--password', 'secret',
        '--email', 'cmdr3@test.mil', '--role', 'base_commander', '--base-id', '3'
    ])
    assert result.exit_code == 0
    assert "User 'cmdr3' (base_commander) has been created" in result.output

    with app.app_context():
        user = User.query.filter_by(username='cmdr3').first()
        assert user.base_id == 3
        assert user.check_password('secret')


def test_create_user_commander_needs_base(runner):
    result = runner.invoke(args=[
        'create-user', '--username', 'cmdr', '--password', 'secret',
        '--email', 'cmdr@test.mil', '--role', 'base_commander'
    ])
    assert result.exit_code != 0


def test_create_user_existing(runner):
    result = runner.invoke(args=['create-user', '--username', 'admin', '--password', 'x'])
    assert "already exists" in result.output


def test_init_db_clears_tables(app, runner):
    runner.invoke(args=['init-db'])
    with app.app_context():
        assert db.session.query(User).count() == 0
