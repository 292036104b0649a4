# logistics/dashboard/routes.py

from flask import current_app, jsonify, request
from flask_login import login_required, current_user

from logistics.dashboard import bp
from logistics.metrics import (
    compute_metrics, filter_from_args, list_recent_transactions,
    net_movement_details
)
from logistics.metrics.activity import ALL
from logistics.metrics.filters import parse_limit


def request_limit():
    return parse_limit(
        request.args.get('limit'),
        default=current_app.config.get('RECENT_ACTIVITY_DEFAULT_LIMIT', 10),
        maximum=current_app.config.get('RECENT_ACTIVITY_MAX_LIMIT')
    )


@bp.route('/metrics')
@login_required
def metrics():
    """Opening/closing balance and stock movements for the filtered scope."""
    metrics_filter = filter_from_args(request.args)
    result = compute_metrics(metrics_filter, current_user.access_scope())
    return jsonify(result.to_dict())


@bp.route('/recent-activity')
@login_required
def recent_activity():
    """Newest transactions across purchases, transfers, assignments and expenditures."""
    metrics_filter = filter_from_args(request.args)
    records = list_recent_transactions(
        metrics_filter,
        current_user.access_scope(),
        kind=request.args.get('kind', ALL),
        limit=request_limit(),
        offset=parse_limit(request.args.get('offset'), default=0, field='offset')
    )
    return jsonify([record.to_dict() for record in records])


@bp.route('/net-movement')
@login_required
def net_movement():
    """Purchases and completed transfers behind the net movement figure."""
    metrics_filter = filter_from_args(request.args)
    details = net_movement_details(
        metrics_filter,
        current_user.access_scope(),
        limit=request_limit()
    )
    return jsonify(details)
