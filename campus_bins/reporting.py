"""Dashboard aggregates. Read-only."""
from sqlalchemy import select

from .models import Alert, AlertStatus, Bin, CollectionEvent, utcnow
from .status import Status, classify


def summarize(levels, alert_statuses, collection_dates, today):
    """
    Fold current state into dashboard counts.

    levels: fill level of every bin
    alert_statuses: status string of every alert
    collection_dates: date of every collection event
    """
    tiers = {status: 0 for status in Status}
    for level in levels:
        tiers[classify(level)] += 1

    total_bins = len(levels)
    avg_fill_level = round(sum(levels) / total_bins, 2) if total_bins else 0

    return {
        'bins': {
            'total_bins': total_bins,
            'green_bins': tiers[Status.GREEN],
            'yellow_bins': tiers[Status.YELLOW],
            'red_bins': tiers[Status.RED],
            'avg_fill_level': avg_fill_level,
        },
        'alerts': {
            'total_alerts': len(alert_statuses),
            'pending_alerts': sum(1 for s in alert_statuses if s == AlertStatus.PENDING.value),
        },
        'collections': {
            'today_collections': sum(1 for d in collection_dates if d == today),
        },
    }


def dashboard_stats(session, today=None):
    today = today or utcnow().date()
    # The three reads share the session transaction, so they see one snapshot
    levels = session.execute(select(Bin.current_level)).scalars().all()
    alert_statuses = session.execute(select(Alert.status)).scalars().all()
    collection_dates = session.execute(select(CollectionEvent.collection_date)).scalars().all()
    return summarize(levels, alert_statuses, collection_dates, today)
