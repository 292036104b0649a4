# logistics/metrics/queries.py
"""Query construction for the dashboard, one function per table.

Every function takes a resolved MetricsFilter and returns an unexecuted
query; nothing here touches request state or mutates its inputs.
"""

from sqlalchemy import func

from logistics.extensions import db
from logistics.models import (
    Base, EquipmentType, Purchase, Transfer, Assignment, Expenditure
)

TRANSFER_IN = 'transfer_in'
TRANSFER_OUT = 'transfer_out'


def _quantity_sum(column):
    return func.coalesce(func.sum(column), 0)


def date_bounded(query, date_column, metrics_filter):
    if metrics_filter.start_date is not None:
        query = query.filter(date_column >= metrics_filter.start_date)
    if metrics_filter.end_date is not None:
        query = query.filter(date_column <= metrics_filter.end_date)
    if metrics_filter.before is not None:
        query = query.filter(date_column < metrics_filter.before)
    return query


def scoped(query, model, metrics_filter, base_column=None):
    """Restrict ``query`` to the filter's base and equipment type."""
    if base_column is None:
        base_column = model.base_id
    if metrics_filter.base_id is not None:
        query = query.filter(base_column == metrics_filter.base_id)
    if metrics_filter.equipment_type_id is not None:
        query = query.filter(model.equipment_type_id == metrics_filter.equipment_type_id)
    return query


def _transfer_base_column(direction):
    if direction == TRANSFER_IN:
        return Transfer.to_base_id
    if direction == TRANSFER_OUT:
        return Transfer.from_base_id
    raise ValueError(f'Unknown transfer direction: {direction}')


# -- totals -----------------------------------------------------------------

def purchases_total(metrics_filter):
    query = db.session.query(_quantity_sum(Purchase.quantity))
    query = scoped(query, Purchase, metrics_filter)
    return date_bounded(query, Purchase.purchase_date, metrics_filter)


def transfers_total(metrics_filter, direction):
    """Completed transfers into (or out of) the filtered base."""
    query = db.session.query(_quantity_sum(Transfer.quantity))\
        .filter(Transfer.status == Transfer.COMPLETED)
    query = scoped(query, Transfer, metrics_filter,
                    base_column=_transfer_base_column(direction))
    return date_bounded(query, Transfer.transfer_date, metrics_filter)


def assigned_total(metrics_filter):
    """Units currently held by personnel.

    Point-in-time figure: the date bounds of the filter are ignored.
    """
    query = db.session.query(
        _quantity_sum(func.coalesce(Assignment.quantity, 1))
    ).filter(Assignment.status == Assignment.ACTIVE)
    return scoped(query, Assignment, metrics_filter)


def expended_total(metrics_filter):
    query = db.session.query(_quantity_sum(Expenditure.quantity))
    query = scoped(query, Expenditure, metrics_filter)
    return date_bounded(query, Expenditure.expenditure_date, metrics_filter)


# -- rows for the activity feed -------------------------------------------

def purchase_rows(metrics_filter):
    query = db.session.query(
        Purchase.id.label('id'),
        Purchase.purchase_date.label('date'),
        Purchase.item_name.label('equipment'),
        EquipmentType.name.label('equipment_type'),
        Purchase.quantity.label('quantity'),
        Base.name.label('base'),
    ).outerjoin(EquipmentType, Purchase.equipment_type_id == EquipmentType.id)\
        .outerjoin(Base, Purchase.base_id == Base.id)
    query = scoped(query, Purchase, metrics_filter)
    query = date_bounded(query, Purchase.purchase_date, metrics_filter)
    return query.order_by(Purchase.purchase_date.desc(), Purchase.id.desc())


def transfer_rows(metrics_filter, direction, completed_only=True):
    """Transfers seen from the receiving (in) or sending (out) base."""
    base_column = _transfer_base_column(direction)
    query = db.session.query(
        Transfer.id.label('id'),
        Transfer.transfer_date.label('date'),
        Transfer.item_name.label('equipment'),
        EquipmentType.name.label('equipment_type'),
        Transfer.quantity.label('quantity'),
        Base.name.label('base'),
        Transfer.status.label('status'),
    ).outerjoin(EquipmentType, Transfer.equipment_type_id == EquipmentType.id)\
        .outerjoin(Base, base_column == Base.id)
    if completed_only:
        query = query.filter(Transfer.status == Transfer.COMPLETED)
    query = scoped(query, Transfer, metrics_filter, base_column=base_column)
    query = date_bounded(query, Transfer.transfer_date, metrics_filter)
    return query.order_by(Transfer.transfer_date.desc(), Transfer.id.desc())


def assignment_rows(metrics_filter):
    query = db.session.query(
        Assignment.id.label('id'),
        Assignment.assignment_date.label('date'),
        Assignment.item_name.label('equipment'),
        EquipmentType.name.label('equipment_type'),
        func.coalesce(Assignment.quantity, 1).label('quantity'),
        Base.name.label('base'),
        Assignment.status.label('status'),
    ).outerjoin(EquipmentType, Assignment.equipment_type_id == EquipmentType.id)\
        .outerjoin(Base, Assignment.base_id == Base.id)
    query = scoped(query, Assignment, metrics_filter)
    query = date_bounded(query, Assignment.assignment_date, metrics_filter)
    return query.order_by(Assignment.assignment_date.desc(), Assignment.id.desc())


def expenditure_rows(metrics_filter):
    query = db.session.query(
        Expenditure.id.label('id'),
        Expenditure.expenditure_date.label('date'),
        Expenditure.item_name.label('equipment'),
        EquipmentType.name.label('equipment_type'),
        Expenditure.quantity.label('quantity'),
        Base.name.label('base'),
    ).outerjoin(EquipmentType, Expenditure.equipment_type_id == EquipmentType.id)\
        .outerjoin(Base, Expenditure.base_id == Base.id)
    query = scoped(query, Expenditure, metrics_filter)
    query = date_bounded(query, Expenditure.expenditure_date, metrics_filter)
    return query.order_by(Expenditure.expenditure_date.desc(), Expenditure.id.desc())
