import math

import pytest

from campus_bins.errors import NotFoundError, ValidationError
from campus_bins.levels import compute_new_level, record_collection, round_half_up
from campus_bins.models import Alert, AlertStatus, Bin, CollectionEvent


def test_collection_below_alert_level():
    # capacity 50, level 45, 10kg -> +20 -> 65
    assert compute_new_level(50, 45, 10) == (65, False)


def test_collection_crossing_alert_level():
    # capacity 40, level 70, 10kg -> +25 -> 95
    assert compute_new_level(40, 70, 10) == (95, True)


def test_crossed_flag_repeats_while_above_alert_level():
    assert compute_new_level(100, 80, 0.1) == (80, True)
    assert compute_new_level(100, 90, 1) == (91, True)


@pytest.mark.parametrize("weight", [61, 1000, 1e9])
def test_level_is_capped_at_100(weight):
    level, crossed = compute_new_level(60, 85, weight)
    assert level == 100
    assert crossed


def test_level_is_capped_when_the_increase_overflows():
    # 1e307 / 1 * 100 is float infinity
    assert compute_new_level(1, 0, 1e307) == (100, True)
    assert compute_new_level(50, 45, 1.7e308) == (100, True)


def test_halves_round_up():
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(64.4) == 64
    # 12.5kg into a 100kg bin is exactly +12.5%
    assert compute_new_level(100, 0, 12.5) == (13, False)
    assert compute_new_level(100, 10, 12.5) == (23, False)


def test_small_weights_accumulate_from_the_unrounded_increase():
    # +0.4% rounds away, +0.6% rounds up
    assert compute_new_level(250, 30, 1) == (30, False)
    assert compute_new_level(250, 30, 1.5) == (31, False)


@pytest.mark.parametrize("weight", [0, -1, "abc", "", "  ", None, math.nan, math.inf, True])
def test_invalid_weight_rejected(weight):
    with pytest.raises(ValidationError):
        compute_new_level(50, 10, weight)


def test_numeric_string_weight_accepted():
    assert compute_new_level(50, 45, "10") == (65, False)


@pytest.mark.parametrize("capacity", [0, -5, None])
def test_non_positive_capacity_rejected(capacity):
    with pytest.raises(ValidationError):
        compute_new_level(capacity, 10, 5)


def test_record_collection_updates_bin_and_appends_event(session):
    before = session.query(CollectionEvent).count()
    bin = session.get(Bin, 1)
    old_timestamp = bin.last_updated

    result = record_collection(session, 1, 1, 10)

    assert result.new_level == 65
    assert result.crossed_full_threshold is False
    assert result.alert is None
    bin = session.get(Bin, 1)
    assert bin.current_level == 65
    assert bin.last_updated >= old_timestamp
    assert session.query(CollectionEvent).count() == before + 1
    event = session.get(CollectionEvent, result.event.id)
    assert event.bin_id == 1
    assert event.collected_by == 1
    assert event.waste_weight == 10


def test_record_collection_opens_full_alert(session):
    bin = Bin(location_id=4, bin_type="E-waste", capacity=40, current_level=70)
    session.add(bin)
    session.commit()

    result = record_collection(session, bin.id, 2, 10)

    assert result.new_level == 95
    assert result.crossed_full_threshold is True
    assert result.alert is not None
    assert result.alert.alert_type == "Full"
    assert result.alert.status == AlertStatus.PENDING.value
    assert result.to_dict()["status"] == "Red"


def test_record_collection_above_alert_level_keeps_single_alert(session):
    # bin 4 already has a pending Full alert
    result = record_collection(session, 4, 1, 2)

    assert result.crossed_full_threshold is True
    assert result.alert is None
    pending = session.query(Alert).filter_by(bin_id=4, status="Pending").count()
    assert pending == 1


def test_record_collection_unknown_bin_changes_nothing(session):
    before = session.query(CollectionEvent).count()
    with pytest.raises(NotFoundError):
        record_collection(session, 999, 1, 10)
    assert session.query(CollectionEvent).count() == before


def test_record_collection_unknown_staff_changes_nothing(session):
    before = session.query(CollectionEvent).count()
    with pytest.raises(NotFoundError):
        record_collection(session, 1, 999, 10)
    assert session.query(CollectionEvent).count() == before
    assert session.get(Bin, 1).current_level == 45


def test_record_collection_invalid_weight_changes_nothing(session):
    with pytest.raises(ValidationError):
        record_collection(session, 1, 1, -3)
    assert session.get(Bin, 1).current_level == 45
