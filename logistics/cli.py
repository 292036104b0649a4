import click
from datetime import date
from flask.cli import with_appcontext
from logistics.extensions import db
from logistics.utils import generate_transfer_number
from logistics.models import (
    User, Base, EquipmentType, Purchase, Transfer, Assignment, Expenditure
)

SEED_BASES = [
    ("Fort Liberty", "North Carolina, USA", "BG Sarah Johnson", "contact@fortliberty.mil"),
    ("Fort Campbell", "Kentucky, USA", "MG Michael Davis", "contact@fortcampbell.mil"),
    ("Fort Hood", "Texas, USA", "LTG Robert Smith", "contact@forthood.mil"),
    ("Joint Base Lewis-McChord", "Washington, USA", "BG Jennifer Wilson", "contact@jblm.mil"),
    ("Camp Pendleton", "California, USA", "COL David Brown", "contact@pendleton.mil"),
]

SEED_EQUIPMENT_TYPES = [
    ("M4A1 Carbine", "Standard infantry assault rifle", "Weapons"),
    ("M249 SAW", "Squad automatic weapon", "Weapons"),
    ("M240B Machine Gun", "Medium machine gun", "Weapons"),
    ("HMMWV", "High Mobility Multipurpose Wheeled Vehicle", "Vehicles"),
    ("M1A2 Abrams", "Main battle tank", "Vehicles"),
    ("UH-60 Black Hawk", "Utility helicopter", "Aircraft"),
    ("AN/PRC-152", "Handheld radio", "Communications"),
    ("AN/PRC-117G", "Manpack radio", "Communications"),
    ("5.56mm Ammunition", "Standard rifle ammunition", "Ammunition"),
    ("7.62mm Ammunition", "Machine gun ammunition", "Ammunition"),
    ("Body Armor", "Individual protective equipment", "Personal Equipment"),
    ("ACH Helmet", "Advanced Combat Helmet", "Personal Equipment"),
    ("Night Vision Goggles", "AN/PVS-14 monocular", "Night Vision"),
    ("Thermal Imaging", "AN/PAS-13 thermal sight", "Night Vision"),
    ("Field Medical Kit", "Combat medic supplies", "Medical Equipment"),
    ("Portable Generator", "10kW tactical generator", "Support Equipment"),
]

# (base, equipment type, quantity, date, vendor)
SEED_PURCHASES = [
    ("Fort Liberty", "M4A1 Carbine", 50, date(2024, 1, 15), "Colt Manufacturing"),
    ("Fort Campbell", "HMMWV", 10, date(2024, 2, 1), "AM General"),
    ("Fort Hood", "5.56mm Ammunition", 10000, date(2024, 1, 20), "Federal Premium"),
    ("Fort Liberty", "AN/PRC-152", 25, date(2024, 2, 10), "Harris Corporation"),
    ("Joint Base Lewis-McChord", "Night Vision Goggles", 100, date(2024, 1, 25), "L3Harris"),
]

# (equipment type, from, to, quantity, date, status, reason)
SEED_TRANSFERS = [
    ("M4A1 Carbine", "Fort Liberty", "Fort Campbell", 15, date(2024, 2, 15),
     "completed", "Training exercise support"),
    ("5.56mm Ammunition", "Fort Hood", "Fort Liberty", 2000, date(2024, 2, 20),
     "in_transit", "Ammunition redistribution"),
    ("AN/PRC-152", "Fort Campbell", "Joint Base Lewis-McChord", 10, date(2024, 2, 25),
     "pending", "Communications upgrade"),
]

# (base, equipment type, personnel name, rank, date)
SEED_ASSIGNMENTS = [
    ("Fort Liberty", "M4A1 Carbine", "John Smith", "SGT", date(2024, 2, 1)),
    ("Fort Campbell", "HMMWV", "Mike Johnson", "SSG", date(2024, 2, 5)),
    ("Fort Hood", "Night Vision Goggles", "Sarah Davis", "CPL", date(2024, 2, 10)),
]

# (base, equipment type, quantity, date, reason)
SEED_EXPENDITURES = [
    ("Fort Liberty", "5.56mm Ammunition", 500, date(2024, 2, 18), "Training exercise"),
    ("Fort Campbell", "7.62mm Ammunition", 200, date(2024, 2, 20), "Combat operations"),
    ("Fort Hood", "Field Medical Kit", 10, date(2024, 2, 22), "Medical training"),
]


def init_cli(app):
    app.cli.add_command(init_db_command)
    app.cli.add_command(seed_data_command)
    app.cli.add_command(create_user_command)


@click.command("init-db")
@with_appcontext
def init_db_command():
    """Initialize database tables"""
    db.drop_all()
    db.create_all()
    click.echo("Database tables created fresh.")


def seed_reference_data():
    """Insert the standard bases and equipment types that are missing.

    Returns:
        tuple: (bases by name, equipment types by name)
    """
    for name, location, commander, contact in SEED_BASES:
        if not Base.query.filter_by(name=name).first():
            db.session.add(Base(name=name, location=location,
                                commander=commander, contact_info=contact))
            click.echo(f"Added base: {name}")

    for name, description, category in SEED_EQUIPMENT_TYPES:
        if not EquipmentType.query.filter_by(name=name).first():
            db.session.add(EquipmentType(name=name, description=description,
                                         category=category))
    db.session.flush()

    bases = {base.name: base for base in Base.query.all()}
    equipment_types = {et.name: et for et in EquipmentType.query.all()}
    return bases, equipment_types


def seed_transactions(bases, equipment_types, user):
    for base, equipment, quantity, when, vendor in SEED_PURCHASES:
        db.session.add(Purchase(
            base_id=bases[base].id,
            equipment_type_id=equipment_types[equipment].id,
            item_name=equipment,
            quantity=quantity,
            purchase_date=when,
            vendor=vendor,
            created_by=user.id
        ))

    for equipment, source, target, quantity, when, status, reason in SEED_TRANSFERS:
        transfer = Transfer(
            transfer_number=generate_transfer_number(when),
            equipment_type_id=equipment_types[equipment].id,
            item_name=equipment,
            from_base_id=bases[source].id,
            to_base_id=bases[target].id,
            quantity=quantity,
            transfer_date=when,
            reason=reason,
            created_by=user.id
        )
        transfer.update_status(status)
        db.session.add(transfer)

    for base, equipment, name, rank, when in SEED_ASSIGNMENTS:
        db.session.add(Assignment(
            base_id=bases[base].id,
            equipment_type_id=equipment_types[equipment].id,
            item_name=equipment,
            personnel_id=name.lower().replace(' ', '.'),
            personnel_name=name,
            personnel_rank=rank,
            quantity=1,
            assignment_date=when,
            created_by=user.id
        ))

    for base, equipment, quantity, when, reason in SEED_EXPENDITURES:
        db.session.add(Expenditure(
            base_id=bases[base].id,
            equipment_type_id=equipment_types[equipment].id,
            item_name=equipment,
            quantity=quantity,
            expenditure_date=when,
            reason=reason,
            authorized_by=user.id,
            created_by=user.id
        ))


@click.command("seed-data")
@click.option('--with-transactions/--reference-only', default=True,
              help='Also insert the sample purchases, transfers, assignments and expenditures')
@click.option('--username', default='admin', help='User recorded as creator of sample data')
@with_appcontext
def seed_data_command(with_transactions, username):
    """Seed bases, equipment types and sample transactions"""
    try:
        bases, equipment_types = seed_reference_data()
        if with_transactions:
            user = User.query.filter_by(username=username).first()
            if user is None:
                raise click.ClickException(f"User '{username}' not found; run create-user first")
            if Purchase.query.count():
                click.echo("Transactions already present, skipping sample transactions")
            else:
                seed_transactions(bases, equipment_types, user)
        db.session.commit()
        click.echo("Seed data loaded successfully!")
    except click.ClickException:
        db.session.rollback()
        raise
    except Exception as e:
        db.session.rollback()
        click.echo(f"Error seeding data: {str(e)}", err=True)
        raise SystemExit(1)


@click.command("create-user")
@click.option('--username', default='admin', help='Username')
@click.option('--password', prompt=True, hide_input=True, help='Password')
@click.option('--email', default='admin@example.com', help='Email')
@click.option('--role', type=click.Choice(User.ROLES), default='admin', help='Role')
@click.option('--base-id', type=int, default=None, help='Home base (base commanders)')
@with_appcontext
def create_user_command(username, password, email, role, base_id):
    """Create a user"""
    existing_user = User.query.filter_by(username=username).first()
    if existing_user:
        click.echo(f"User '{username}' already exists")
        return

    if role == 'base_commander' and base_id is None:
        raise click.BadParameter('base commanders need --base-id', param_hint='--base-id')

    user = User(
        username=username,
        email=email,
        role=role,
        base_id=base_id
    )
    user.set_password(password)

    db.session.add(user)
    try:
        db.session.commit()
        click.echo(f"User '{username}' ({role}) has been created")
    except Exception as e:
        db.session.rollback()
        click.echo(f"Error creating user: {str(e)}", err=True)
        raise SystemExit(1)
