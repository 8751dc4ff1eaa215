"""
Alert lifecycle: NoAlert -> Pending -> Resolved, per (bin, alert type).

Each Pending/Resolved pair is its own row. At most one row per (bin, type)
may be Pending at a time; the store enforces this with a unique constraint,
so a losing concurrent insert turns into the same no-op as a duplicate.
"""
import logging

from sqlalchemy.exc import SQLAlchemyError

from . import store
from .errors import NotFoundError, PersistenceError, ValidationError
from .models import AlertStatus, AlertType, utcnow

logger = logging.getLogger(__name__)


def parse_alert_type(value):
    if isinstance(value, AlertType):
        return value
    try:
        return AlertType(value)
    except ValueError:
        allowed = ', '.join(t.value for t in AlertType)
        raise ValidationError(f'alert_type must be one of: {allowed}')


def on_threshold_crossed(session, bin_id, alert_type=AlertType.FULL, commit=True):
    """
    Open a Pending alert for the bin unless one of that type is already open.

    Returns the new Alert, or None when a Pending alert already exists.
    With commit=False the caller owns the transaction.
    """
    alert_type = parse_alert_type(alert_type)
    try:
        if store.find_pending_alert(session, bin_id, alert_type.value) is not None:
            logger.debug(f"Bin {bin_id} already has a pending {alert_type.value} alert")
            return None

        alert = store.insert_alert(session, bin_id, alert_type.value, utcnow())
        if alert is None:
            logger.debug(f"Concurrent {alert_type.value} alert for bin {bin_id} won the insert")
            if commit:
                session.commit()
            return None

        if commit:
            session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceError(f'Failed to create alert for bin {bin_id}: {e}')

    logger.info(f"Alert generated: {alert_type.value} for bin {bin_id}")
    return alert


def raise_alert(session, bin_id, alert_type):
    """Manually raise an alert (Overflow and Damage come in this way)."""
    alert_type = parse_alert_type(alert_type)
    if not store.bin_exists(session, bin_id):
        raise NotFoundError(f'Bin {bin_id} not found')
    with store.bin_lock(bin_id):
        return on_threshold_crossed(session, bin_id, alert_type)


def resolve(session, alert_id):
    """
    Mark an alert Resolved and empty its bin.

    Resolving an alert that is already Resolved succeeds without touching
    the bin again. Returns (alert_id, bin_id).
    """
    alert = store.get_alert(session, alert_id)
    if alert is None:
        raise NotFoundError(f'Alert {alert_id} not found')
    bin_id = alert.bin_id

    with store.bin_lock(bin_id):
        try:
            session.refresh(alert)
            if not alert.is_pending:
                logger.info(f"Alert {alert_id} was already resolved")
                return alert.id, bin_id

            store.update_alert_status(session, alert.id, AlertStatus.RESOLVED)
            store.update_bin_level(session, bin_id, 0, utcnow())
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise PersistenceError(f'Failed to resolve alert {alert_id}: {e}')

    logger.info(f"Alert {alert_id} resolved. Bin {bin_id} emptied.")
    return alert_id, bin_id
