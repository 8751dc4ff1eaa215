# seed.py
import logging
from datetime import date

import click
from flask import current_app
from flask.cli import with_appcontext

from .models import Alert, AlertStatus, AlertType, Bin, CollectionEvent, Location, Staff, db, utcnow

logger = logging.getLogger(__name__)

# Campus areas: (name, building, floor)
LOCATIONS = [
    ("CSE Block", "Computer Science Building", "Ground Floor"),
    ("Library", "Central Library", "First Floor"),
    ("Hostel", "Boys Hostel Block A", "Ground Floor"),
    ("Admin Block", "Administration Building", "Ground Floor"),
    ("Mechanical Dept", "Mechanical Engineering Block", "Second Floor"),
    ("Canteen", "Student Canteen", "Ground Floor"),
]

# One bin per location: (location number, bin_type, capacity kg, current_level %)
BINS = [
    (1, "Plastic", 50, 45),
    (2, "Organic", 60, 85),
    (3, "General", 55, 30),
    (4, "E-waste", 40, 90),
    (5, "Plastic", 50, 65),
    (6, "Organic", 70, 20),
]

STAFF = [
    ("Rajesh Kumar", "Collector", "9876543210"),
    ("Priya Sharma", "Collector", "9876543211"),
    ("Anil Verma", "Supervisor", "9876543212"),
]

# (bin number, staff number, date, weight kg)
COLLECTIONS = [
    (1, 1, date(2025, 11, 8), 15.5),
    (2, 2, date(2025, 11, 8), 20.0),
    (3, 1, date(2025, 11, 7), 12.3),
    (5, 2, date(2025, 11, 7), 18.7),
    (6, 1, date(2025, 11, 6), 25.0),
]

# Bins already at or above the alert level start with a pending Full alert
PENDING_FULL_ALERTS = [2, 4]


def seed_demo_data(session):
    """Load the campus demo data into an empty schema."""
    now = utcnow()
    locations = [Location(name=name, building=building, floor=floor) for name, building, floor in LOCATIONS]
    bins = [
        Bin(location=locations[location_no - 1], bin_type=bin_type, capacity=capacity,
            current_level=level, last_updated=now)
        for location_no, bin_type, capacity, level in BINS
    ]
    staff = [Staff(name=name, role=role, contact_no=contact_no) for name, role, contact_no in STAFF]
    session.add_all(locations + bins + staff)

    for bin_no, staff_no, collected_on, weight in COLLECTIONS:
        session.add(CollectionEvent(bin=bins[bin_no - 1], staff=staff[staff_no - 1],
                                    collection_date=collected_on, waste_weight=weight))
    for bin_no in PENDING_FULL_ALERTS:
        session.add(Alert(bin=bins[bin_no - 1], alert_type=AlertType.FULL.value, alert_time=now,
                          status=AlertStatus.PENDING.value, pending_marker=True))
    session.commit()
    logger.info(f"Seeded {len(locations)} locations, {len(bins)} bins, {len(staff)} staff")


def initialize_database(app):
    """Create tables and, when configured, seed an empty database."""
    with app.app_context():
        db.create_all()
        if not app.config.get('SEED_DEMO_DATA'):
            return
        try:
            if db.session.query(Bin.id).first() is None:
                seed_demo_data(db.session)
        except Exception:
            db.session.rollback()
            raise


def reset_database():
    """Drop every table and rebuild the schema with the demo data."""
    db.drop_all()
    db.create_all()
    seed_demo_data(db.session)


@click.command('reset-db')
@with_appcontext
def reset_db_command():
    """Delete all data and reload the campus demo data."""
    click.echo(f"Resetting database: {current_app.config['SQLALCHEMY_DATABASE_URI']}")
    reset_database()
    click.echo("Database created successfully with demo data!")
