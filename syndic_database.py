# syndic_database.py

from extensions import db
from utils.datetime_utils import utc_now


# --- Property structure ---
class Block(db.Model):
    """A named group of apartments (building or wing), e.g. 'Block A12'"""
    __tablename__ = 'block'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), nullable=False, unique=True)
    created_at = db.Column(db.DateTime, default=utc_now)

    apartments = db.relationship(
        'Apartment',
        back_populates='block',
        lazy=True,
        cascade='all, delete-orphan',
        order_by='Apartment.number'
    )

    def to_dict(self, include_apartments=False):
        data = {
            'id': self.id,
            'name': self.name,
            'apartment_count': len(self.apartments),
        }
        if include_apartments:
            data['apartments'] = [apartment.to_dict() for apartment in self.apartments]
        return data

    def __repr__(self):
        return f'<Block {self.name}>'


class Apartment(db.Model):
    __tablename__ = 'apartment'

    id = db.Column(db.Integer, primary_key=True)
    number = db.Column(db.String(20), nullable=False)
    floor = db.Column(db.Integer, nullable=False, default=1)
    block_id = db.Column(db.Integer, db.ForeignKey('block.id', ondelete='CASCADE'), nullable=False)
    created_at = db.Column(db.DateTime, default=utc_now)

    block = db.relationship('Block', back_populates='apartments')

    __table_args__ = (
        db.UniqueConstraint('block_id', 'number', name='unique_apartment_per_block'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'number': self.number,
            'floor': self.floor,
            'block_id': self.block_id,
        }

    def __repr__(self):
        return f'<Apartment {self.number} block_id={self.block_id}>'


# --- Residents ---
class Resident(db.Model):
    """A person occupying one unit, keyed by (block_number, apartment_number).

    block_number holds the block name as typed by operators ("A", "Block A"),
    not a foreign key, so residents survive block restructuring.
    """
    __tablename__ = 'resident'

    id = db.Column(db.Integer, primary_key=True)
    full_name = db.Column(db.String(150), nullable=False)
    phone_number = db.Column(db.String(30), nullable=True)
    block_number = db.Column(db.String(50), nullable=False, index=True)
    apartment_number = db.Column(db.String(20), nullable=False)
    move_in_month = db.Column(db.String(2), nullable=True)
    move_in_year = db.Column(db.String(4), nullable=True)
    created_at = db.Column(db.DateTime, default=utc_now)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now)

    payments = db.relationship('Payment', back_populates='resident', lazy=True, cascade='all, delete-orphan')

    # One resident per unit
    __table_args__ = (
        db.UniqueConstraint('block_number', 'apartment_number', name='unique_resident_location'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'full_name': self.full_name,
            'phone_number': self.phone_number,
            'block_number': self.block_number,
            'apartment_number': self.apartment_number,
            'move_in_month': self.move_in_month,
            'move_in_year': self.move_in_year,
        }

    def __repr__(self):
        return f'<Resident {self.full_name} {self.block_number}/{self.apartment_number}>'


class ResidentImport(db.Model):
    """Audit trail of resident CSV import runs"""
    __tablename__ = 'resident_import'

    id = db.Column(db.Integer, primary_key=True)
    filename = db.Column(db.String(255), nullable=False)
    status = db.Column(db.String(20), nullable=False, default='processing')  # processing, completed, failed
    total_rows = db.Column(db.Integer, nullable=True)
    successful_imports = db.Column(db.Integer, nullable=True)
    failed_imports = db.Column(db.Integer, nullable=True)
    import_metadata = db.Column(db.JSON, nullable=True)  # errors, summary
    started_at = db.Column(db.DateTime, nullable=False, default=utc_now)
    completed_at = db.Column(db.DateTime, nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'filename': self.filename,
            'status': self.status,
            'total_rows': self.total_rows,
            'successful_imports': self.successful_imports,
            'failed_imports': self.failed_imports,
            'errors': (self.import_metadata or {}).get('errors', []),
            'started_at': self.started_at.isoformat() if self.started_at else None,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
        }


# --- Finances ---
class Charge(db.Model):
    """Recurring or one-off charge (income or expense) of the syndicate"""
    __tablename__ = 'charge'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    category = db.Column(db.String(10), nullable=False, default='In')  # In, Out
    charge_type = db.Column(db.String(20), nullable=False, default='Resident')  # Resident, Syndicate, Maintenance
    period = db.Column(db.String(20), nullable=False, default='Monthly')  # Monthly, Quarterly, Yearly, One-time
    description = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=utc_now)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'amount': float(self.amount) if self.amount is not None else None,
            'category': self.category,
            'charge_type': self.charge_type,
            'period': self.period,
            'description': self.description,
        }


class Payment(db.Model):
    __tablename__ = 'payment'

    id = db.Column(db.Integer, primary_key=True)
    resident_id = db.Column(db.Integer, db.ForeignKey('resident.id', ondelete='CASCADE'), nullable=False)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    payment_date = db.Column(db.Date, nullable=False)
    payment_for_month = db.Column(db.String(2), nullable=False)
    payment_for_year = db.Column(db.String(4), nullable=False)
    payment_type = db.Column(db.String(100), nullable=True)  # usually a Charge name
    payment_method = db.Column(db.String(50), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(10), nullable=False, default='paid')  # paid, unpaid
    created_at = db.Column(db.DateTime, default=utc_now)

    resident = db.relationship('Resident', back_populates='payments')

    def to_dict(self):
        return {
            'id': self.id,
            'resident_id': self.resident_id,
            'resident_name': self.resident.full_name if self.resident else None,
            'block_number': self.resident.block_number if self.resident else None,
            'apartment_number': self.resident.apartment_number if self.resident else None,
            'amount': float(self.amount) if self.amount is not None else None,
            'payment_date': self.payment_date.isoformat() if self.payment_date else None,
            'payment_for_month': self.payment_for_month,
            'payment_for_year': self.payment_for_year,
            'payment_type': self.payment_type,
            'payment_method': self.payment_method,
            'notes': self.notes,
            'status': self.status,
        }
