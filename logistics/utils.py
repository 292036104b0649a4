# logistics/utils.py

from datetime import datetime

from sqlalchemy import func

from logistics.models import AuditLog, Transfer
from logistics.extensions import db


def create_audit_log(
    user,
    action,
    entity_type,
    entity,
    details=None
):
    """Create an audit log entry for a write made through the API.

    Args:
        user: The user performing the action
        action: Type of action (purchase/transfer/update_transfer_status/...)
        entity_type: Table-level name of the affected record
        entity: The affected record (must already have an id)
        details: Optional JSON-serialisable payload

    Returns:
        AuditLog: The created log entry
    """
    log = AuditLog(
        action=action,
        entity_type=entity_type,
        entity_id=entity.id,
        user_id=user.id,
        details=details
    )
    db.session.add(log)
    return log


def generate_transfer_number(now=None):
    """Next transfer reference for the year, in the form TR-<year>-<serial>.

    Serials count up from 0001 and widen past 9999. The column is unique, so
    two requests racing for the same serial fail with an IntegrityError
    instead of sharing a number.
    """
    now = now or datetime.utcnow()
    prefix = f"TR-{now.year}-"
    last = db.session.query(Transfer.transfer_number)\
        .filter(Transfer.transfer_number.like(f"{prefix}%"))\
        .order_by(func.length(Transfer.transfer_number).desc(),
                  Transfer.transfer_number.desc())\
        .first()
    serial = int(last.transfer_number[len(prefix):]) + 1 if last else 1
    return f"{prefix}{serial:04d}"
