# logistics/metrics/filters.py

import dataclasses
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from logistics.errors import ValidationError, AuthorizationError

ADMIN = 'admin'
BASE_COMMANDER = 'base_commander'
LOGISTICS_OFFICER = 'logistics_officer'
ROLES = (ADMIN, BASE_COMMANDER, LOGISTICS_OFFICER)

DATE_FORMAT = '%Y-%m-%d'


@dataclass(frozen=True)
class MetricsFilter:
    """Filter applied to every transaction table.

    ``start_date`` and ``end_date`` are inclusive, ``before`` is exclusive.
    All compare against the transaction's own date column (purchase_date,
    transfer_date, ...), never created_at.
    """
    base_id: Optional[int] = None
    equipment_type_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    before: Optional[date] = None

    def with_base(self, base_id):
        return dataclasses.replace(self, base_id=base_id)

    def opening_window(self):
        """Filter covering everything dated strictly before ``start_date``.

        Returns None when there is no start date, i.e. no opening balance.
        """
        if self.start_date is None:
            return None
        return dataclasses.replace(
            self,
            start_date=None,
            end_date=None,
            before=self.start_date,
        )

    def to_dict(self):
        return {
            'baseId': self.base_id,
            'equipmentTypeId': self.equipment_type_id,
            'startDate': self.start_date.isoformat() if self.start_date else None,
            'endDate': self.end_date.isoformat() if self.end_date else None,
        }


@dataclass(frozen=True)
class AccessScope:
    """Who is asking: a role and, for base-bound roles, a home base."""
    role: str
    home_base_id: Optional[int] = None

    @property
    def is_admin(self):
        return self.role == ADMIN

    @property
    def forces_base(self):
        return self.role == BASE_COMMANDER and self.home_base_id is not None


def resolve_scope(metrics_filter, scope):
    """Apply the caller's access scope to a requested filter.

    Base commanders with a home base always get their own base, whatever was
    requested. Admins keep the requested base. Anyone else may only name
    their own home base (or none at all); naming another base is refused.

    Args:
        metrics_filter: MetricsFilter built from the request
        scope: AccessScope of the caller

    Returns:
        MetricsFilter: the filter to run queries with

    Raises:
        AuthorizationError: non-admin asking for a base it cannot see
    """
    if scope.role not in ROLES:
        raise AuthorizationError(f'Unknown role: {scope.role}')

    if scope.forces_base:
        return metrics_filter.with_base(scope.home_base_id)

    if scope.is_admin or metrics_filter.base_id is None:
        return metrics_filter

    if metrics_filter.base_id == scope.home_base_id:
        return metrics_filter

    raise AuthorizationError(
        f'Not permitted to view data for base {metrics_filter.base_id}'
    )


def parse_date(value, field='date'):
    """Parse a YYYY-MM-DD string; empty values mean "no bound"."""
    if value is None or value == '':
        return None
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except (TypeError, ValueError):
        raise ValidationError(f'Invalid {field}: expected YYYY-MM-DD, got {value!r}')


def parse_int(value, field):
    if value is None or value == '':
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'Invalid {field}: expected an integer, got {value!r}')


def parse_limit(value, default, maximum=None, field='limit'):
    """Parse a non-negative limit/offset, falling back to ``default``."""
    limit = parse_int(value, field)
    if limit is None:
        return default
    if limit < 0:
        raise ValidationError(f'{field} must not be negative')
    if maximum is not None:
        limit = min(limit, maximum)
    return limit


def filter_from_args(args):
    """Build a MetricsFilter from request query arguments.

    Accepts the camelCase names used by the dashboard (baseId,
    equipmentTypeId, startDate, endDate).

    Raises:
        ValidationError: unparseable id or date
    """
    return MetricsFilter(
        base_id=parse_int(args.get('baseId'), 'baseId'),
        equipment_type_id=parse_int(args.get('equipmentTypeId'), 'equipmentTypeId'),
        start_date=parse_date(args.get('startDate'), 'startDate'),
        end_date=parse_date(args.get('endDate'), 'endDate'),
    )
