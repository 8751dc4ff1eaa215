"""
Persistence boundary for the bin/alert core.

Every function takes the SQLAlchemy session explicitly; none of them commit.
Committing (and rolling back) is up to the operation that owns the unit of work.
"""
import threading
from collections import defaultdict
from contextlib import contextmanager

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from .models import Alert, AlertStatus, Bin, CollectionEvent, Location, Staff

_locks_guard = threading.Lock()
_bin_locks = defaultdict(threading.Lock)


@contextmanager
def bin_lock(bin_id):
    """Serialize read-modify-write cycles on one bin within this process."""
    with _locks_guard:
        lock = _bin_locks[bin_id]
    with lock:
        yield


def bin_exists(session, bin_id):
    # Selects the id only, so no Bin instance lands in the identity map
    return session.execute(select(Bin.id).where(Bin.id == bin_id)).first() is not None


def get_bin(session, bin_id, for_update=False):
    stmt = select(Bin).where(Bin.id == bin_id)
    if for_update:
        # Row lock on backends that have one; SQLite ignores it.
        # populate_existing reloads a Bin the session already holds.
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    return session.execute(stmt).scalar_one_or_none()


def get_staff(session, staff_id):
    return session.get(Staff, staff_id)


def get_alert(session, alert_id):
    return session.get(Alert, alert_id)


def update_bin_level(session, bin_id, level, timestamp):
    bin = session.get(Bin, bin_id)
    bin.current_level = level
    bin.last_updated = timestamp
    return bin


def insert_collection_event(session, bin_id, staff_id, date, weight):
    event = CollectionEvent(bin_id=bin_id, collected_by=staff_id, collection_date=date, waste_weight=weight)
    session.add(event)
    session.flush()
    return event


def find_pending_alert(session, bin_id, alert_type):
    stmt = select(Alert).where(
        Alert.bin_id == bin_id,
        Alert.alert_type == alert_type,
        Alert.status == AlertStatus.PENDING.value,
    )
    return session.execute(stmt).scalars().first()


def insert_alert(session, bin_id, alert_type, timestamp):
    """
    Insert a Pending alert inside a savepoint.

    Returns None when the one-pending-per-(bin, type) constraint rejects the
    row, leaving the outer transaction usable.
    """
    alert = Alert(
        bin_id=bin_id,
        alert_type=alert_type,
        alert_time=timestamp,
        status=AlertStatus.PENDING.value,
        pending_marker=True,
    )
    try:
        with session.begin_nested():
            session.add(alert)
    except IntegrityError:
        return None
    return alert


def update_alert_status(session, alert_id, status):
    alert = session.get(Alert, alert_id)
    alert.status = status.value
    alert.pending_marker = True if status is AlertStatus.PENDING else None
    return alert


def list_bins(session):
    stmt = select(Bin).options(joinedload(Bin.location)).order_by(Bin.id)
    return session.execute(stmt).scalars().all()


def list_alerts(session, status=None, min_level=None):
    stmt = (
        select(Alert)
        .join(Alert.bin)
        .options(joinedload(Alert.bin).joinedload(Bin.location))
        .order_by(Alert.alert_time.desc(), Alert.id.desc())
    )
    if status is not None:
        stmt = stmt.where(Alert.status == status.value)
    if min_level is not None:
        stmt = stmt.where(Bin.current_level >= min_level)
    return session.execute(stmt).scalars().all()


def list_collections(session, bin_id=None):
    stmt = (
        select(CollectionEvent)
        .options(
            joinedload(CollectionEvent.staff),
            joinedload(CollectionEvent.bin).joinedload(Bin.location),
        )
        .order_by(CollectionEvent.collection_date.desc(), CollectionEvent.id.desc())
    )
    if bin_id is not None:
        stmt = stmt.where(CollectionEvent.bin_id == bin_id)
    return session.execute(stmt).scalars().all()


def list_locations(session):
    """Locations ordered by name, each paired with its number of bins."""
    stmt = (
        select(Location, func.count(Bin.id))
        .outerjoin(Bin, Bin.location_id == Location.id)
        .group_by(Location.id)
        .order_by(Location.name)
    )
    return session.execute(stmt).all()


def list_staff(session):
    return session.execute(select(Staff).order_by(Staff.name)).scalars().all()
