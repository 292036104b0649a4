# logistics/metrics/activity.py

import heapq
from dataclasses import dataclass
from datetime import date
from itertools import islice

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from logistics.errors import ValidationError, DataAccessError
from logistics.metrics import queries
from logistics.metrics.aggregator import period_totals
from logistics.metrics.filters import resolve_scope

PURCHASE = 'purchase'
TRANSFER_IN = queries.TRANSFER_IN
TRANSFER_OUT = queries.TRANSFER_OUT
ASSIGNMENT = 'assignment'
EXPENDITURE = 'expenditure'

ALL = 'all'
NET_MOVEMENT = 'net_movement'

KIND_SOURCES = {
    ALL: (PURCHASE, TRANSFER_IN, TRANSFER_OUT, ASSIGNMENT, EXPENDITURE),
    NET_MOVEMENT: (PURCHASE, TRANSFER_IN, TRANSFER_OUT),
    PURCHASE: (PURCHASE,),
    TRANSFER_IN: (TRANSFER_IN,),
    TRANSFER_OUT: (TRANSFER_OUT,),
}

DEFAULT_LIMIT = 10


@dataclass(frozen=True)
class TransactionRecord:
    id: int
    date: date
    type: str
    equipment: str
    equipment_type: str
    quantity: int
    base: str
    status: str
    impact: int

    @property
    def sort_key(self):
        return (self.date, self.id)

    def to_dict(self):
        return {
            'id': self.id,
            'date': self.date.isoformat(),
            'type': self.type,
            'equipment': self.equipment,
            'equipmentType': self.equipment_type,
            'quantity': self.quantity,
            'base': self.base,
            'status': self.status,
            'impact': self.impact,
        }


def _impact(kind, quantity, status):
    if kind in (PURCHASE, TRANSFER_IN):
        sign = 1
    elif kind in (TRANSFER_OUT, EXPENDITURE):
        sign = -1
    else:
        return 0
    # A transfer only moves stock once it is completed
    if kind in (TRANSFER_IN, TRANSFER_OUT) and status != 'completed':
        return 0
    return sign * quantity


def _source_query(kind, metrics_filter, feed):
    if kind == PURCHASE:
        return queries.purchase_rows(metrics_filter)
    if kind in (TRANSFER_IN, TRANSFER_OUT):
        # The general feed shows transfers at every status
        return queries.transfer_rows(metrics_filter, kind, completed_only=not feed)
    if kind == ASSIGNMENT:
        return queries.assignment_rows(metrics_filter)
    if kind == EXPENDITURE:
        return queries.expenditure_rows(metrics_filter)
    raise ValidationError(f'Unknown transaction kind: {kind}')


def _records(kind, query):
    for row in query:
        status = getattr(row, 'status', 'completed')
        quantity = int(row.quantity)
        yield TransactionRecord(
            id=row.id,
            date=row.date,
            type=kind,
            equipment=row.equipment,
            equipment_type=row.equipment_type,
            quantity=quantity,
            base=row.base,
            status=status,
            impact=_impact(kind, quantity, status),
        )


def iter_transactions(metrics_filter, kind=ALL, window=None):
    """Lazily merge the per-table feeds, newest first.

    Each source is already ordered by (date, id) descending, so a k-way merge
    keeps that order across tables. ``window`` caps how many rows are read
    from each source. ``metrics_filter`` must already be scope-resolved.
    """
    if kind not in KIND_SOURCES:
        raise ValidationError(f'Unknown transaction kind: {kind}')

    feed = kind == ALL
    sources = []
    for source_kind in KIND_SOURCES[kind]:
        query = _source_query(source_kind, metrics_filter, feed)
        if window is not None:
            query = query.limit(window)
        sources.append(_records(source_kind, query))

    return heapq.merge(*sources, key=lambda record: record.sort_key, reverse=True)


def list_recent_transactions(metrics_filter, scope, kind=ALL, limit=DEFAULT_LIMIT, offset=0):
    """Most recent transactions visible to the caller.

    Args:
        metrics_filter: MetricsFilter built from the request
        scope: AccessScope of the caller
        kind: one of KIND_SOURCES
        limit: maximum number of records returned
        offset: number of leading records skipped

    Returns:
        list: TransactionRecord objects, newest first, ties by id descending

    Raises:
        ValidationError: negative limit/offset or unknown kind
        AuthorizationError: the caller may not see the requested base
        DataAccessError: a query failed
    """
    if limit is None:
        limit = DEFAULT_LIMIT
    if limit < 0 or offset < 0:
        raise ValidationError('limit and offset must not be negative')

    resolved = resolve_scope(metrics_filter, scope)
    try:
        merged = iter_transactions(resolved, kind, window=offset + limit)
        return list(islice(merged, offset, offset + limit))
    except SQLAlchemyError as e:
        current_app.logger.error(f'Failed to list recent transactions: {str(e)}')
        raise DataAccessError('Failed to list recent transactions') from e


def net_movement_details(metrics_filter, scope, limit=DEFAULT_LIMIT):
    """Breakdown behind the dashboard's net movement figure.

    Returns:
        dict: purchases, transferIn, transferOut, netMovement and the
        contributing transactions (purchases and completed transfers)
    """
    transactions = list_recent_transactions(
        metrics_filter, scope, kind=NET_MOVEMENT, limit=limit
    )
    resolved = resolve_scope(metrics_filter, scope)
    try:
        totals = period_totals(resolved)
    except SQLAlchemyError as e:
        current_app.logger.error(f'Failed to compute net movement: {str(e)}')
        raise DataAccessError('Failed to compute net movement') from e

    return {
        'purchases': totals.purchases,
        'transferIn': totals.transfer_in,
        'transferOut': totals.transfer_out,
        'netMovement': totals.net_movement,
        'transactions': [record.to_dict() for record in transactions],
    }
