# logistics/metrics/aggregator.py

from dataclasses import dataclass

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from logistics.errors import DataAccessError
from logistics.metrics import queries
from logistics.metrics.filters import resolve_scope


@dataclass(frozen=True)
class PeriodTotals:
    """Stock movements at the filtered base(s) over one date window."""
    purchases: int = 0
    transfer_in: int = 0
    transfer_out: int = 0
    expended: int = 0

    @property
    def net_movement(self):
        # Expenditures count toward the balance, not toward net movement
        return self.purchases + self.transfer_in - self.transfer_out

    @property
    def balance_change(self):
        return self.net_movement - self.expended


@dataclass(frozen=True)
class MetricsResult:
    opening_balance: int
    closing_balance: int
    net_movement: int
    purchases: int
    transfer_in: int
    transfer_out: int
    assigned: int
    expended: int

    @classmethod
    def from_totals(cls, opening_balance, totals, assigned):
        return cls(
            opening_balance=opening_balance,
            closing_balance=opening_balance + totals.balance_change,
            net_movement=totals.net_movement,
            purchases=totals.purchases,
            transfer_in=totals.transfer_in,
            transfer_out=totals.transfer_out,
            assigned=assigned,
            expended=totals.expended,
        )

    def to_dict(self):
        return {
            'openingBalance': self.opening_balance,
            'closingBalance': self.closing_balance,
            'netMovement': self.net_movement,
            'purchases': self.purchases,
            'transferIn': self.transfer_in,
            'transferOut': self.transfer_out,
            'assigned': self.assigned,
            'expended': self.expended,
        }


def _scalar(query):
    return int(query.scalar() or 0)


def period_totals(metrics_filter):
    """Run the four movement SUMs for an already resolved filter."""
    return PeriodTotals(
        purchases=_scalar(queries.purchases_total(metrics_filter)),
        transfer_in=_scalar(queries.transfers_total(metrics_filter, queries.TRANSFER_IN)),
        transfer_out=_scalar(queries.transfers_total(metrics_filter, queries.TRANSFER_OUT)),
        expended=_scalar(queries.expended_total(metrics_filter)),
    )


def opening_balance(metrics_filter):
    """Balance change of everything dated before ``start_date`` (0 without one)."""
    window = metrics_filter.opening_window()
    if window is None:
        return 0
    return period_totals(window).balance_change


def compute_metrics(metrics_filter, scope):
    """Compute dashboard metrics for a caller.

    Args:
        metrics_filter: MetricsFilter built from the request
        scope: AccessScope of the caller

    Returns:
        MetricsResult: balances, movements and assignment count

    Raises:
        AuthorizationError: the caller may not see the requested base
        DataAccessError: a query failed
    """
    resolved = resolve_scope(metrics_filter, scope)
    current_app.logger.debug(f'Computing metrics for {resolved.to_dict()} as {scope.role}')

    try:
        totals = period_totals(resolved)
        opening = opening_balance(resolved)
        assigned = _scalar(queries.assigned_total(resolved))
    except SQLAlchemyError as e:
        current_app.logger.error(f'Failed to compute dashboard metrics: {str(e)}')
        raise DataAccessError('Failed to compute dashboard metrics') from e

    return MetricsResult.from_totals(opening, totals, assigned)
