from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from logistics.errors import AuthorizationError, DataAccessError, ValidationError
from logistics.extensions import db
from logistics.metrics import list_recent_transactions, net_movement_details, queries
from logistics.metrics.filters import AccessScope, MetricsFilter
from logistics.models import Purchase, Assignment, Expenditure

ADMIN = AccessScope('admin')
COMMANDER = AccessScope('base_commander', home_base_id=2)
OFFICER = AccessScope('logistics_officer', home_base_id=1)


def add_march_activity():
    """Purchases 2 and 3, assignment 1 and expenditure 1 on base 1, all on 2024-03-01."""
    for quantity in (5, 6):
        db.session.add(Purchase(
            equipment_type_id=2, base_id=1, item_name='5.56mm Ammunition',
            quantity=quantity, purchase_date=date(2024, 3, 1), created_by=1
        ))
    db.session.add(Expenditure(
        equipment_type_id=2, base_id=1, item_name='5.56mm Ammunition',
        quantity=4, expenditure_date=date(2024, 3, 1), reason='Range day',
        authorized_by=1, created_by=1
    ))
    db.session.add(Assignment(
        equipment_type_id=1, base_id=1, item_name='M4A1 Carbine',
        personnel_id='p-7', personnel_name='Sarah Davis',
        assignment_date=date(2024, 3, 1), created_by=1
    ))
    db.session.commit()


def keys(records):
    return [(record.type, record.id) for record in records]


def test_base_feed_shows_purchase_and_outgoing_transfer(app):
    with app.app_context():
        records = list_recent_transactions(MetricsFilter(base_id=1), ADMIN)
        assert [record.to_dict() for record in records] == [
            {
                'id': 1, 'date': '2024-02-15', 'type': 'transfer_out',
                'equipment': 'M4A1 Carbine', 'equipmentType': 'M4A1 Carbine',
                'quantity': 15, 'base': 'Fort Liberty', 'status': 'completed',
                'impact': -15,
            },
            {
                'id': 1, 'date': '2024-01-15', 'type': 'purchase',
                'equipment': 'M4A1 Carbine', 'equipmentType': 'M4A1 Carbine',
                'quantity': 50, 'base': 'Fort Liberty', 'status': 'completed',
                'impact': 50,
            },
        ]


def test_general_feed_lists_pending_transfers_without_impact(app):
    with app.app_context():
        records = list_recent_transactions(MetricsFilter(base_id=2), ADMIN)
        assert keys(records) == [('transfer_out', 2), ('transfer_in', 1)]
        pending, received = records
        assert pending.status == 'pending'
        assert pending.impact == 0
        assert received.base == 'Fort Campbell'
        assert received.impact == 15


def test_feed_is_newest_first_with_ties_by_id(app):
    with app.app_context():
        add_march_activity()
        records = list_recent_transactions(MetricsFilter(base_id=1), ADMIN)
        assert keys(records) == [
            ('purchase', 3),
            ('purchase', 2),
            ('assignment', 1),
            ('expenditure', 1),
            ('transfer_out', 1),
            ('purchase', 1),
        ]
        sort_keys = [record.sort_key for record in records]
        assert sort_keys == sorted(sort_keys, reverse=True)


def test_impact_signs(app):
    with app.app_context():
        add_march_activity()
        impacts = {
            (record.type, record.id): record.impact
            for record in list_recent_transactions(MetricsFilter(base_id=1), ADMIN)
        }
        assert impacts[('purchase', 2)] == 5
        assert impacts[('expenditure', 1)] == -4
        assert impacts[('assignment', 1)] == 0
        assert impacts[('transfer_out', 1)] == -15


def test_assignment_without_quantity_is_one_unit(app):
    with app.app_context():
        add_march_activity()
        records = list_recent_transactions(MetricsFilter(base_id=1), ADMIN)
        assignment = next(r for r in records if r.type == 'assignment')
        assert assignment.quantity == 1
        assert assignment.status == 'active'


def test_net_movement_kind_skips_pending_and_non_movements(app):
    with app.app_context():
        add_march_activity()
        records = list_recent_transactions(MetricsFilter(), ADMIN, kind='net_movement')
        assert {record.type for record in records} == {'purchase', 'transfer_in', 'transfer_out'}
        assert all(record.status == 'completed' for record in records)
        assert sum(record.impact for record in records) == 50 + 5 + 6


@pytest.mark.parametrize('kind, expected', [
    ('purchase', [('purchase', 1)]),
    ('transfer_in', [('transfer_in', 1)]),
    ('transfer_out', [('transfer_out', 1)]),
])
def test_single_kind(app, kind, expected):
    with app.app_context():
        assert keys(list_recent_transactions(MetricsFilter(), ADMIN, kind=kind)) == expected


def test_date_bounds_apply(app):
    with app.app_context():
        february = MetricsFilter(start_date=date(2024, 2, 1), end_date=date(2024, 2, 20))
        records = list_recent_transactions(february, ADMIN)
        assert {record.id for record in records} == {1}
        assert {record.type for record in records} == {'transfer_in', 'transfer_out'}


def test_limit_and_offset(app):
    with app.app_context():
        add_march_activity()
        f = MetricsFilter(base_id=1)
        everything = list_recent_transactions(f, ADMIN, limit=100)
        assert len(everything) == 6
        assert list_recent_transactions(f, ADMIN, limit=2) == everything[:2]
        assert list_recent_transactions(f, ADMIN, limit=2, offset=3) == everything[3:5]
        assert list_recent_transactions(f, ADMIN, limit=10, offset=5) == everything[5:]
        assert list_recent_transactions(f, ADMIN, limit=0) == []


def test_default_limit_is_ten(app):
    with app.app_context():
        for day in range(1, 13):
            db.session.add(Purchase(
                equipment_type_id=1, base_id=3, item_name='M4A1 Carbine',
                quantity=day, purchase_date=date(2024, 4, day), created_by=1
            ))
        db.session.commit()
        records = list_recent_transactions(MetricsFilter(base_id=3), ADMIN)
        assert len(records) == 10
        assert records[0].date == date(2024, 4, 12)


def test_requery_gives_same_result(app):
    with app.app_context():
        first = list_recent_transactions(MetricsFilter(), ADMIN)
        assert list_recent_transactions(MetricsFilter(), ADMIN) == first


@pytest.mark.parametrize('limit, offset', [(-1, 0), (5, -2)])
def test_negative_limit_or_offset(app, limit, offset):
    with app.app_context():
        with pytest.raises(ValidationError):
            list_recent_transactions(MetricsFilter(), ADMIN, limit=limit, offset=offset)


def test_unknown_kind(app):
    with app.app_context():
        with pytest.raises(ValidationError):
            list_recent_transactions(MetricsFilter(), ADMIN, kind='salvage')


def test_feed_respects_scope(app):
    with app.app_context():
        forced = list_recent_transactions(MetricsFilter(base_id=1), COMMANDER)
        assert forced == list_recent_transactions(MetricsFilter(base_id=2), ADMIN)
        with pytest.raises(AuthorizationError):
            list_recent_transactions(MetricsFilter(base_id=2), OFFICER)


def test_net_movement_details(app):
    with app.app_context():
        details = net_movement_details(MetricsFilter(base_id=1), ADMIN)
        assert details['purchases'] == 50
        assert details['transferIn'] == 0
        assert details['transferOut'] == 15
        assert details['netMovement'] == 35
        assert [t['type'] for t in details['transactions']] == ['transfer_out', 'purchase']
        assert sum(t['impact'] for t in details['transactions']) == details['netMovement']


def test_database_failure_becomes_data_access_error(app, monkeypatch):
    failure = OperationalError('SELECT purchases', {}, Exception('connection refused'))

    def unavailable(metrics_filter):
        raise failure

    monkeypatch.setattr(queries, 'purchase_rows', unavailable)
    with app.app_context():
        with pytest.raises(DataAccessError) as excinfo:
            list_recent_transactions(MetricsFilter(), ADMIN)
        assert excinfo.value.__cause__ is failure

        with pytest.raises(DataAccessError):
            net_movement_details(MetricsFilter(), ADMIN)
