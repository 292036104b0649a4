from flask_wtf import FlaskForm
from wtforms import (
    StringField,
    IntegerField,
    DecimalField,
    TextAreaField,
    SelectField,
    DateField
)
from wtforms.validators import (
    DataRequired, InputRequired, NumberRange, Optional, Length, ValidationError
)
from logistics.models import Asset, Transfer, Assignment


class ApiForm(FlaskForm):
    """Base for forms submitted as JSON request bodies."""
    class Meta:
        csrf = False


def quantity_field(label='Quantity', **kwargs):
    return IntegerField(label, validators=[
        InputRequired(message='Quantity is required'),
        NumberRange(min=1, message='Quantity must be at least 1')
    ], **kwargs)


def id_field(label, name):
    return IntegerField(label, name=name, validators=[
        InputRequired(message=f'{label} is required')
    ])


class BaseForm(ApiForm):
    name = StringField('Name', validators=[DataRequired(), Length(max=120)])
    location = StringField('Location', validators=[Optional(), Length(max=200)])
    commander = StringField('Commander', validators=[Optional(), Length(max=120)])
    contact_info = StringField('Contact', name='contactInfo',
                               validators=[Optional(), Length(max=200)])


class EquipmentTypeForm(ApiForm):
    name = StringField('Name', validators=[DataRequired(), Length(max=120)])
    category = StringField('Category', validators=[DataRequired(), Length(max=80)])
    description = TextAreaField('Description')
    unit_of_measure = StringField('Unit of Measure', name='unitOfMeasure',
                                  default='units', validators=[Optional()])


class AssetForm(ApiForm):
    name = StringField('Name', validators=[DataRequired(), Length(max=200)])
    equipment_type_id = id_field('Equipment Type', 'equipmentTypeId')
    base_id = id_field('Base', 'baseId')
    serial_number = StringField('Serial Number', name='serialNumber',
                                validators=[Optional(), Length(max=80)])
    status = SelectField('Status', choices=[(s, s) for s in Asset.STATUSES],
                         default='available')
    condition = StringField('Condition', default='good', validators=[Optional()])


class PurchaseForm(ApiForm):
    """
    Stock received at a base.
    """
    equipment_type_id = id_field('Equipment Type', 'equipmentTypeId')
    base_id = id_field('Base', 'baseId')
    item_name = StringField('Item Name', name='itemName',
                            validators=[DataRequired(), Length(max=200)])
    quantity = quantity_field()
    purchase_date = DateField('Purchase Date', name='purchaseDate',
                              validators=[InputRequired()])
    purchase_order_number = StringField('PO Number', name='purchaseOrderNumber',
                                        validators=[Optional(), Length(max=50)])
    vendor = StringField('Vendor', validators=[Optional(), Length(max=120)])
    unit_cost = DecimalField('Unit Cost', name='unitCost', places=2,
                             validators=[Optional(), NumberRange(min=0)])
    notes = TextAreaField('Notes')


class TransferForm(ApiForm):
    """
    Stock moving between two bases. New transfers start out pending.
    """
    equipment_type_id = id_field('Equipment Type', 'equipmentTypeId')
    from_base_id = id_field('Source Base', 'fromBaseId')
    to_base_id = id_field('Destination Base', 'toBaseId')
    item_name = StringField('Item Name', name='itemName',
                            validators=[DataRequired(), Length(max=200)])
    quantity = quantity_field()
    transfer_date = DateField('Transfer Date', name='transferDate',
                              validators=[InputRequired()])
    status = SelectField('Status', choices=[(s, s) for s in Transfer.STATUSES],
                         default='pending')
    reason = TextAreaField('Reason')

    def validate_to_base_id(self, field):
        if field.data is not None and field.data == self.from_base_id.data:
            raise ValidationError('Source and destination base must differ')


class AssignmentForm(ApiForm):
    equipment_type_id = id_field('Equipment Type', 'equipmentTypeId')
    base_id = id_field('Base', 'baseId')
    personnel_id = StringField('Personnel ID', name='personnelId',
                               validators=[DataRequired(), Length(max=50)])
    personnel_name = StringField('Personnel Name', name='personnelName',
                                 validators=[DataRequired(), Length(max=120)])
    personnel_rank = StringField('Rank', name='personnelRank',
                                 validators=[Optional(), Length(max=20)])
    item_name = StringField('Item Name', name='itemName',
                            validators=[DataRequired(), Length(max=200)])
    serial_number = StringField('Serial Number', name='serialNumber',
                                validators=[Optional(), Length(max=80)])
    asset_id = IntegerField('Asset', name='assetId', validators=[Optional()])
    # Left empty, the assignment counts as a single unit
    quantity = IntegerField('Quantity', validators=[
        Optional(),
        NumberRange(min=1, message='Quantity must be at least 1')
    ])
    assignment_date = DateField('Assignment Date', name='assignmentDate',
                                validators=[InputRequired()])
    expected_return_date = DateField('Expected Return', name='expectedReturnDate',
                                     validators=[Optional()])


class ExpenditureForm(ApiForm):
    equipment_type_id = id_field('Equipment Type', 'equipmentTypeId')
    base_id = id_field('Base', 'baseId')
    item_name = StringField('Item Name', name='itemName',
                            validators=[DataRequired(), Length(max=200)])
    quantity = quantity_field()
    expenditure_date = DateField('Expenditure Date', name='expenditureDate',
                                 validators=[InputRequired()])
    reason = TextAreaField('Reason', validators=[DataRequired()])


class TransferStatusForm(ApiForm):
    status = SelectField('Status', choices=[(s, s) for s in Transfer.STATUSES],
                         validators=[DataRequired()])


class AssignmentStatusForm(ApiForm):
    status = SelectField('Status', choices=[(s, s) for s in Assignment.STATUSES],
                         validators=[DataRequired()])
    return_date = DateField('Return Date', name='returnDate', validators=[Optional()])


class AssetStatusForm(ApiForm):
    status = SelectField('Status', choices=[(s, s) for s in Asset.STATUSES],
                         validators=[DataRequired()])
