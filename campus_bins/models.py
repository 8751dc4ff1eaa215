from datetime import datetime, timezone
from enum import Enum

from flask_sqlalchemy import SQLAlchemy

from .status import classify

db = SQLAlchemy()


def utcnow():
    # Naive UTC, the same clock for every timestamp and collection date
    return datetime.now(timezone.utc).replace(tzinfo=None)


class BinType(str, Enum):
    PLASTIC = 'Plastic'
    ORGANIC = 'Organic'
    E_WASTE = 'E-waste'
    GENERAL = 'General'


class StaffRole(str, Enum):
    COLLECTOR = 'Collector'
    SUPERVISOR = 'Supervisor'


class AlertType(str, Enum):
    FULL = 'Full'
    OVERFLOW = 'Overflow'
    DAMAGE = 'Damage'


class AlertStatus(str, Enum):
    PENDING = 'Pending'
    RESOLVED = 'Resolved'


class Location(db.Model):
    __tablename__ = 'locations'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    building = db.Column(db.String(100), nullable=False)
    floor = db.Column(db.String(50), nullable=False)

    bins = db.relationship('Bin', back_populates='location', cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'location_id': self.id,
            'location_name': self.name,
            'building': self.building,
            'floor': self.floor,
        }


class Bin(db.Model):
    __tablename__ = 'bins'
    __table_args__ = (
        db.CheckConstraint('current_level >= 0 AND current_level <= 100', name='ck_bins_level_range'),
        db.CheckConstraint('capacity > 0', name='ck_bins_capacity_positive'),
    )

    id = db.Column(db.Integer, primary_key=True)
    location_id = db.Column(db.Integer, db.ForeignKey('locations.id', ondelete='CASCADE'), nullable=False)
    bin_type = db.Column(db.String(20), nullable=False)  # Plastic, Organic, E-waste, General
    capacity = db.Column(db.Integer, nullable=False)  # kg
    current_level = db.Column(db.Integer, nullable=False, default=0)  # percent
    last_updated = db.Column(db.DateTime, default=utcnow)

    location = db.relationship('Location', back_populates='bins')
    collections = db.relationship('CollectionEvent', back_populates='bin', cascade='all, delete-orphan')
    alerts = db.relationship('Alert', back_populates='bin', cascade='all, delete-orphan')

    @property
    def status(self):
        return classify(self.current_level)

    def to_dict(self):
        data = {
            'bin_id': self.id,
            'bin_type': self.bin_type,
            'capacity': self.capacity,
            'current_level': self.current_level,
            'status': self.status.value,
            'last_updated': self.last_updated.isoformat() if self.last_updated else None,
        }
        if self.location is not None:
            data.update(self.location.to_dict())
        return data


class Staff(db.Model):
    __tablename__ = 'staff'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    role = db.Column(db.String(20), nullable=False)  # Collector, Supervisor
    contact_no = db.Column(db.String(15), nullable=False)

    collections = db.relationship('CollectionEvent', back_populates='staff', cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'staff_id': self.id,
            'name': self.name,
            'role': self.role,
            'contact_no': self.contact_no,
        }


class CollectionEvent(db.Model):
    """A weighed collection. Rows are only ever appended."""

    __tablename__ = 'collections'

    id = db.Column(db.Integer, primary_key=True)
    bin_id = db.Column(db.Integer, db.ForeignKey('bins.id', ondelete='CASCADE'), nullable=False, index=True)
    collected_by = db.Column(db.Integer, db.ForeignKey('staff.id', ondelete='CASCADE'), nullable=False)
    collection_date = db.Column(db.Date, nullable=False)
    waste_weight = db.Column(db.Float, nullable=False)  # kg

    bin = db.relationship('Bin', back_populates='collections')
    staff = db.relationship('Staff', back_populates='collections')

    def to_dict(self):
        data = {
            'collection_id': self.id,
            'bin_id': self.bin_id,
            'collected_by': self.collected_by,
            'collection_date': self.collection_date.isoformat() if self.collection_date else None,
            'waste_weight': self.waste_weight,
        }
        if self.staff is not None:
            data['staff_name'] = self.staff.name
        if self.bin is not None and self.bin.location is not None:
            data['bin_type'] = self.bin.bin_type
            data['location_name'] = self.bin.location.name
        return data


class Alert(db.Model):
    __tablename__ = 'alerts'
    # pending_marker is TRUE while the alert is Pending and NULL once resolved.
    # NULLs never collide in a unique constraint, so this allows any number of
    # resolved alerts but only one Pending alert per (bin, type).
    __table_args__ = (
        db.UniqueConstraint('bin_id', 'alert_type', 'pending_marker', name='uq_alerts_one_pending'),
    )

    id = db.Column(db.Integer, primary_key=True)
    bin_id = db.Column(db.Integer, db.ForeignKey('bins.id', ondelete='CASCADE'), nullable=False, index=True)
    alert_type = db.Column(db.String(20), nullable=False)  # Full, Overflow, Damage
    alert_time = db.Column(db.DateTime, default=utcnow)
    status = db.Column(db.String(20), nullable=False, default=AlertStatus.PENDING.value)
    pending_marker = db.Column(db.Boolean, nullable=True, default=True)

    bin = db.relationship('Bin', back_populates='alerts')

    @property
    def is_pending(self):
        return self.status == AlertStatus.PENDING.value

    def to_dict(self):
        data = {
            'alert_id': self.id,
            'bin_id': self.bin_id,
            'alert_type': self.alert_type,
            'alert_time': self.alert_time.isoformat() if self.alert_time else None,
            'status': self.status,
        }
        if self.bin is not None:
            data['bin_type'] = self.bin.bin_type
            data['current_level'] = self.bin.current_level
            data['bin_status'] = self.bin.status.value
            if self.bin.location is not None:
                data['location_name'] = self.bin.location.name
                data['building'] = self.bin.location.building
                data['floor'] = self.bin.location.floor
        return data
