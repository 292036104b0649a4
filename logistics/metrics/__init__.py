from logistics.metrics.filters import (
    MetricsFilter,
    AccessScope,
    resolve_scope,
    filter_from_args,
)
from logistics.metrics.aggregator import MetricsResult, compute_metrics
from logistics.metrics.activity import (
    TransactionRecord,
    list_recent_transactions,
    net_movement_details,
)

__all__ = [
    'MetricsFilter',
    'AccessScope',
    'resolve_scope',
    'filter_from_args',
    'MetricsResult',
    'compute_metrics',
    'TransactionRecord',
    'list_recent_transactions',
    'net_movement_details',
]
