# logistics/main/routes.py

from datetime import date
from decimal import Decimal

from flask import current_app, jsonify, request
from flask_login import login_required, current_user
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from logistics.main import bp
from logistics.main.forms import (
    BaseForm, EquipmentTypeForm, AssetForm, PurchaseForm, TransferForm,
    AssignmentForm, ExpenditureForm, TransferStatusForm, AssignmentStatusForm,
    AssetStatusForm
)
from logistics.auth.decorators import admin_required, roles_required
from logistics.errors import ValidationError, AuthorizationError
from logistics.extensions import db, limiter
from logistics.metrics import queries
from logistics.metrics.filters import filter_from_args, parse_limit, resolve_scope
from logistics.models import (
    Base, EquipmentType, Asset, Purchase, Transfer, Assignment, Expenditure,
    AuditLog
)
from logistics.socket_events import notify_inventory_update
from logistics.utils import create_audit_log, generate_transfer_number

ALL_ROLES = ('admin', 'base_commander', 'logistics_officer')
COMMAND_ROLES = ('admin', 'base_commander')


def validated(form):
    """Validate a submitted form or raise ValidationError with field errors."""
    if not form.validate_on_submit():
        raise ValidationError('Invalid data', errors=form.errors)
    return form


def scoped_filter():
    """Request filter after applying the current user's access scope."""
    return resolve_scope(filter_from_args(request.args), current_user.access_scope())


def ensure_home_base(*base_ids):
    """Base commanders may only write records touching their own base."""
    if not current_user.is_base_commander() or current_user.base_id is None:
        return
    if current_user.base_id not in base_ids:
        current_app.logger.warning(
            f'{current_user.username} tried to write outside base {current_user.base_id}'
        )
        raise AuthorizationError('Cannot create records for other bases')


def apply_filter(query, model, date_column, metrics_filter):
    """Base, equipment type and date predicates shared with the dashboard."""
    query = queries.scoped(query, model, metrics_filter)
    if date_column is not None:
        query = queries.date_bounded(query, date_column, metrics_filter)
    return query


def record_write(entity, entity_type, action, details):
    """Audit, commit and broadcast a write in one step.

    Args:
        entity: The new or updated record (already added to the session)
        entity_type: Table-level name used in the audit log and event
        action: Audit action name
        details: JSON-serialisable change details
    """
    try:
        db.session.flush()
        create_audit_log(current_user, action, entity_type, entity, details)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ValidationError(f'Conflicting {entity_type} data')
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception(f'DB error while saving {entity_type}')
        raise

    current_app.logger.info(
        f'{current_user.username} {action} {entity_type} #{entity.id}'
    )
    notify_inventory_update(entity_type, entity.id, action, details,
                            base_ids=affected_bases(entity))
    return entity


def affected_bases(entity):
    """Bases whose dashboard figures depend on ``entity``."""
    if isinstance(entity, Base):
        return (entity.id,)
    return tuple(
        getattr(entity, column)
        for column in ('base_id', 'from_base_id', 'to_base_id')
        if getattr(entity, column, None) is not None
    )


def form_details(form):
    """JSON-safe copy of the submitted form data for the audit log."""
    details = {}
    for name, value in form.data.items():
        if isinstance(value, (date, Decimal)):
            value = str(value)
        details[name] = value
    return details


# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------

@bp.route('/bases')
@login_required
def list_bases():
    bases = Base.query.order_by(Base.name).all()
    return jsonify([base.to_dict() for base in bases])


@bp.route('/bases', methods=['POST'])
@login_required
@admin_required
def create_base():
    form = validated(BaseForm())
    base = Base(
        name=form.name.data,
        location=form.location.data,
        commander=form.commander.data,
        contact_info=form.contact_info.data
    )
    db.session.add(base)
    record_write(base, 'base', 'create_base', form_details(form))
    return jsonify(base.to_dict()), 201


@bp.route('/equipment-types')
@login_required
def list_equipment_types():
    equipment_types = EquipmentType.query.order_by(EquipmentType.name).all()
    return jsonify([equipment_type.to_dict() for equipment_type in equipment_types])


@bp.route('/equipment-types', methods=['POST'])
@login_required
@admin_required
def create_equipment_type():
    form = validated(EquipmentTypeForm())
    equipment_type = EquipmentType(
        name=form.name.data,
        category=form.category.data,
        description=form.description.data,
        unit_of_measure=form.unit_of_measure.data or 'units'
    )
    db.session.add(equipment_type)
    record_write(equipment_type, 'equipment_type', 'create_equipment_type', form_details(form))
    return jsonify(equipment_type.to_dict()), 201


# ---------------------------------------------------------------------------
# Assets
# ---------------------------------------------------------------------------

@bp.route('/assets')
@login_required
def list_assets():
    metrics_filter = scoped_filter()
    query = apply_filter(Asset.query, Asset, None, metrics_filter)
    return jsonify([asset.to_dict() for asset in query.order_by(Asset.name).all()])


@bp.route('/assets', methods=['POST'])
@login_required
@roles_required(*COMMAND_ROLES)
def create_asset():
    form = validated(AssetForm())
    ensure_home_base(form.base_id.data)
    asset = Asset(
        name=form.name.data,
        equipment_type_id=form.equipment_type_id.data,
        base_id=form.base_id.data,
        serial_number=form.serial_number.data,
        status=form.status.data,
        condition=form.condition.data or 'good'
    )
    db.session.add(asset)
    record_write(asset, 'asset', 'create_asset', form_details(form))
    return jsonify(asset.to_dict()), 201


@bp.route('/assets/<int:asset_id>/status', methods=['PATCH'])
@login_required
@roles_required(*COMMAND_ROLES)
def update_asset_status(asset_id):
    asset = db.get_or_404(Asset, asset_id)
    ensure_home_base(asset.base_id)
    form = validated(AssetStatusForm())
    asset.status = form.status.data
    record_write(asset, 'asset', 'update_asset_status', {'status': asset.status})
    return jsonify(asset.to_dict())


# ---------------------------------------------------------------------------
# Purchases
# ---------------------------------------------------------------------------

@bp.route('/purchases')
@login_required
def list_purchases():
    metrics_filter = scoped_filter()
    query = apply_filter(Purchase.query, Purchase, Purchase.purchase_date, metrics_filter)
    purchases = query.order_by(Purchase.purchase_date.desc(), Purchase.id.desc()).all()
    return jsonify([purchase.to_dict() for purchase in purchases])


@bp.route('/purchases', methods=['POST'])
@login_required
@roles_required(*ALL_ROLES)
@limiter.limit("100 per hour")
def create_purchase():
    form = validated(PurchaseForm())
    ensure_home_base(form.base_id.data)
    purchase = Purchase(
        equipment_type_id=form.equipment_type_id.data,
        base_id=form.base_id.data,
        item_name=form.item_name.data,
        quantity=form.quantity.data,
        purchase_date=form.purchase_date.data,
        purchase_order_number=form.purchase_order_number.data,
        vendor=form.vendor.data,
        unit_cost=form.unit_cost.data,
        notes=form.notes.data,
        created_by=current_user.id
    )
    db.session.add(purchase)
    record_write(purchase, 'purchase', 'purchase', form_details(form))
    return jsonify(purchase.to_dict()), 201


# ---------------------------------------------------------------------------
# Transfers
# ---------------------------------------------------------------------------

@bp.route('/transfers')
@login_required
def list_transfers():
    metrics_filter = scoped_filter()
    query = Transfer.query
    if metrics_filter.base_id is not None:
        query = query.filter(or_(
            Transfer.from_base_id == metrics_filter.base_id,
            Transfer.to_base_id == metrics_filter.base_id
        ))
    # Base handled above; transfers have no single base_id column
    query = apply_filter(query, Transfer, Transfer.transfer_date,
                         metrics_filter.with_base(None))
    status = request.args.get('status')
    if status:
        query = query.filter(Transfer.status == status)
    transfers = query.order_by(Transfer.transfer_date.desc(), Transfer.id.desc()).all()
    return jsonify([transfer.to_dict() for transfer in transfers])


@bp.route('/transfers', methods=['POST'])
@login_required
@roles_required(*ALL_ROLES)
@limiter.limit("100 per hour")
def create_transfer():
    form = validated(TransferForm())
    ensure_home_base(form.from_base_id.data, form.to_base_id.data)
    transfer = Transfer(
        transfer_number=generate_transfer_number(),
        equipment_type_id=form.equipment_type_id.data,
        from_base_id=form.from_base_id.data,
        to_base_id=form.to_base_id.data,
        item_name=form.item_name.data,
        quantity=form.quantity.data,
        transfer_date=form.transfer_date.data,
        reason=form.reason.data,
        created_by=current_user.id
    )
    transfer.update_status(form.status.data)
    db.session.add(transfer)
    record_write(transfer, 'transfer', 'transfer', form_details(form))
    return jsonify(transfer.to_dict()), 201


@bp.route('/transfers/<int:transfer_id>/status', methods=['PATCH'])
@login_required
@roles_required(*ALL_ROLES)
def update_transfer_status(transfer_id):
    transfer = db.get_or_404(Transfer, transfer_id)
    ensure_home_base(transfer.from_base_id, transfer.to_base_id)
    form = validated(TransferStatusForm())
    transfer.update_status(form.status.data)
    record_write(transfer, 'transfer', 'update_transfer_status',
                 {'status': transfer.status})
    return jsonify(transfer.to_dict())


# ---------------------------------------------------------------------------
# Assignments
# ---------------------------------------------------------------------------

@bp.route('/assignments')
@login_required
def list_assignments():
    metrics_filter = scoped_filter()
    query = apply_filter(Assignment.query, Assignment, None, metrics_filter)
    status = request.args.get('status')
    if status:
        query = query.filter(Assignment.status == status)
    assignments = query.order_by(
        Assignment.assignment_date.desc(), Assignment.id.desc()
    ).all()
    return jsonify([assignment.to_dict() for assignment in assignments])


@bp.route('/assignments', methods=['POST'])
@login_required
@roles_required(*COMMAND_ROLES)
@limiter.limit("100 per hour")
def create_assignment():
    form = validated(AssignmentForm())
    ensure_home_base(form.base_id.data)
    assignment = Assignment(
        equipment_type_id=form.equipment_type_id.data,
        base_id=form.base_id.data,
        personnel_id=form.personnel_id.data,
        personnel_name=form.personnel_name.data,
        personnel_rank=form.personnel_rank.data,
        item_name=form.item_name.data,
        serial_number=form.serial_number.data,
        asset_id=form.asset_id.data,
        quantity=form.quantity.data,
        assignment_date=form.assignment_date.data,
        expected_return_date=form.expected_return_date.data,
        created_by=current_user.id
    )
    db.session.add(assignment)
    record_write(assignment, 'assignment', 'assignment', form_details(form))
    return jsonify(assignment.to_dict()), 201


@bp.route('/assignments/<int:assignment_id>/status', methods=['PATCH'])
@login_required
@roles_required(*COMMAND_ROLES)
def update_assignment_status(assignment_id):
    assignment = db.get_or_404(Assignment, assignment_id)
    ensure_home_base(assignment.base_id)
    form = validated(AssignmentStatusForm())
    assignment.update_status(form.status.data, form.return_date.data)
    record_write(assignment, 'assignment', 'update_assignment_status', {
        'status': assignment.status,
        'returnDate': (assignment.actual_return_date.isoformat()
                       if assignment.actual_return_date else None)
    })
    return jsonify(assignment.to_dict())


# ---------------------------------------------------------------------------
# Expenditures
# ---------------------------------------------------------------------------

@bp.route('/expenditures')
@login_required
def list_expenditures():
    metrics_filter = scoped_filter()
    query = apply_filter(Expenditure.query, Expenditure,
                         Expenditure.expenditure_date, metrics_filter)
    expenditures = query.order_by(
        Expenditure.expenditure_date.desc(), Expenditure.id.desc()
    ).all()
    return jsonify([expenditure.to_dict() for expenditure in expenditures])


@bp.route('/expenditures', methods=['POST'])
@login_required
@roles_required(*COMMAND_ROLES)
@limiter.limit("100 per hour")
def create_expenditure():
    form = validated(ExpenditureForm())
    ensure_home_base(form.base_id.data)
    expenditure = Expenditure(
        equipment_type_id=form.equipment_type_id.data,
        base_id=form.base_id.data,
        item_name=form.item_name.data,
        quantity=form.quantity.data,
        expenditure_date=form.expenditure_date.data,
        reason=form.reason.data,
        authorized_by=current_user.id,
        created_by=current_user.id
    )
    db.session.add(expenditure)
    record_write(expenditure, 'expenditure', 'expenditure', form_details(form))
    return jsonify(expenditure.to_dict()), 201


@bp.route('/audit-log')
@login_required
@admin_required
def audit_log():
    limit = parse_limit(request.args.get('limit'), default=50, maximum=500)
    entries = AuditLog.query.order_by(AuditLog.id.desc()).limit(limit).all()
    return jsonify([{
        'id': entry.id,
        'action': entry.action,
        'entityType': entry.entity_type,
        'entityId': entry.entity_id,
        'userId': entry.user_id,
        'details': entry.details,
        'createdAt': entry.created_at.isoformat() if entry.created_at else None,
    } for entry in entries])
