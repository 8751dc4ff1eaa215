"""
Status tiers for bin fill levels.

This is the only place the tier thresholds live. Serializers, the alert
listing and the dashboard aggregation all go through classify().
"""
from enum import Enum

YELLOW_FROM = 50   # 50% and up is Yellow
RED_ABOVE = 80     # strictly above 80% is Red
ALERT_LEVEL = 80   # a Full alert is due at 80% and up


class Status(str, Enum):
    GREEN = 'Green'
    YELLOW = 'Yellow'
    RED = 'Red'


def classify(level):
    """Map a fill percentage to its tier: <50 Green, 50-80 Yellow, >80 Red."""
    if level < YELLOW_FROM:
        return Status.GREEN
    if level <= RED_ABOVE:
        return Status.YELLOW
    return Status.RED


def needs_alert(level):
    return level >= ALERT_LEVEL
