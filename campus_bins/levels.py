"""
Level Update Engine.

Turns a weighed collection into a new fill level for the bin and reports
whether the bin has reached the Full alert level.
"""
import logging
import math

from sqlalchemy.exc import SQLAlchemyError

from . import store
from .alerts import on_threshold_crossed
from .errors import NotFoundError, PersistenceError, ValidationError
from .models import AlertType, utcnow
from .status import classify, needs_alert

logger = logging.getLogger(__name__)

MAX_LEVEL = 100


class CollectionResult:
    def __init__(self, event, bin, new_level, crossed_full_threshold, alert=None):
        self.event = event
        self.bin = bin
        self.new_level = new_level
        self.crossed_full_threshold = crossed_full_threshold
        self.alert = alert

    def to_dict(self):
        return {
            'collection_id': self.event.id,
            'bin_id': self.bin.id,
            'new_level': self.new_level,
            'status': classify(self.new_level).value,
            'crossed_full_threshold': self.crossed_full_threshold,
            'alert': self.alert.to_dict() if self.alert is not None else None,
        }


def round_half_up(value):
    # Python's round() is banker's rounding; levels round .5 away from zero
    return int(math.floor(value + 0.5))


def compute_new_level(capacity, current_level, weight):
    """
    Return (new_level, crossed_full_threshold) for a collection of `weight` kg.

    The increase is left unrounded; the sum is capped at 100 and then
    rounded once, so an enormous weight still lands on 100. The crossed
    flag holds whenever the new level is at or above the alert level, not
    only on the transition.
    """
    capacity = validate_capacity(capacity)
    weight = validate_weight(weight)
    increase = (weight / capacity) * 100
    new_level = round_half_up(min(MAX_LEVEL, current_level + increase))
    return new_level, needs_alert(new_level)


def validate_weight(weight):
    if isinstance(weight, bool):
        raise ValidationError('waste_weight must be a number')
    if isinstance(weight, str):
        weight = weight.strip()
        if not weight:
            raise ValidationError('waste_weight is required')
    try:
        weight = float(weight)
    except (TypeError, ValueError):
        raise ValidationError('waste_weight must be a number')
    if not math.isfinite(weight) or weight <= 0:
        raise ValidationError('waste_weight must be a positive number')
    return weight


def validate_capacity(capacity):
    if capacity is None or capacity <= 0:
        raise ValidationError('Bin capacity must be positive')
    return capacity


def record_collection(session, bin_id, staff_id, weight):
    """
    Record a collection against a bin, update its level and raise a Full
    alert when the new level calls for one.

    Everything is committed together. Validation and lookup failures leave
    the store untouched.
    """
    weight = validate_weight(weight)
    if not store.bin_exists(session, bin_id):
        raise NotFoundError(f'Bin {bin_id} not found')

    with store.bin_lock(bin_id):
        try:
            bin = store.get_bin(session, bin_id, for_update=True)
            if bin is None:
                raise NotFoundError(f'Bin {bin_id} not found')
            if store.get_staff(session, staff_id) is None:
                raise NotFoundError(f'Staff member {staff_id} not found')

            new_level, crossed = compute_new_level(bin.capacity, bin.current_level, weight)
            now = utcnow()

            event = store.insert_collection_event(session, bin.id, staff_id, now.date(), weight)
            store.update_bin_level(session, bin.id, new_level, now)

            alert = None
            if crossed:
                alert = on_threshold_crossed(session, bin.id, AlertType.FULL, commit=False)

            session.commit()
        except (ValidationError, NotFoundError):
            session.rollback()
            raise
        except SQLAlchemyError as e:
            session.rollback()
            raise PersistenceError(f'Failed to record collection for bin {bin_id}: {e}')

    logger.info(f"Collection recorded: bin {bin_id}, {weight}kg by staff {staff_id}, new level {new_level}%")
    return CollectionResult(event, bin, new_level, crossed, alert)
