from logistics.models.user import User
from logistics.models.base import Base
from logistics.models.equipment_type import EquipmentType
from logistics.models.asset import Asset
from logistics.models.purchase import Purchase
from logistics.models.transfer import Transfer
from logistics.models.assignment import Assignment
from logistics.models.expenditure import Expenditure
from logistics.models.audit_log import AuditLog

__all__ = [
    'User',
    'Base',
    'EquipmentType',
    'Asset',
    'Purchase',
    'Transfer',
    'Assignment',
    'Expenditure',
    'AuditLog',
]
