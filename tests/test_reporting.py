from datetime import date

from campus_bins.alerts import resolve
from campus_bins.models import Alert
from campus_bins.reporting import dashboard_stats, summarize


def test_summarize_uses_classifier_boundaries():
    stats = summarize([49, 50, 80, 81], [], [], date(2025, 1, 1))

    assert stats["bins"]["green_bins"] == 1
    assert stats["bins"]["yellow_bins"] == 2
    assert stats["bins"]["red_bins"] == 1
    assert stats["bins"]["total_bins"] == 4
    assert stats["bins"]["avg_fill_level"] == 65


def test_summarize_empty_state():
    stats = summarize([], [], [], date(2025, 1, 1))

    assert stats["bins"]["total_bins"] == 0
    assert stats["bins"]["avg_fill_level"] == 0
    assert stats["alerts"] == {"total_alerts": 0, "pending_alerts": 0}
    assert stats["collections"] == {"today_collections": 0}


def test_summarize_counts_pending_and_today():
    today = date(2025, 11, 8)
    stats = summarize(
        [10],
        ["Pending", "Resolved", "Pending"],
        [today, date(2025, 11, 7), today],
        today,
    )

    assert stats["alerts"] == {"total_alerts": 3, "pending_alerts": 2}
    assert stats["collections"] == {"today_collections": 2}


def test_dashboard_stats_over_seed_data(session):
    # levels 45, 85, 30, 90, 65, 20
    stats = dashboard_stats(session, today=date(2025, 11, 8))

    assert stats["bins"] == {
        "total_bins": 6,
        "green_bins": 3,
        "yellow_bins": 1,
        "red_bins": 2,
        "avg_fill_level": 55.83,
    }
    assert stats["alerts"] == {"total_alerts": 2, "pending_alerts": 2}
    assert stats["collections"] == {"today_collections": 2}


def test_dashboard_stats_after_resolve(session):
    alert = session.query(Alert).filter_by(bin_id=2).one()
    resolve(session, alert.id)

    stats = dashboard_stats(session, today=date(2030, 1, 1))

    assert stats["bins"]["red_bins"] == 1
    assert stats["bins"]["green_bins"] == 4
    assert stats["alerts"] == {"total_alerts": 2, "pending_alerts": 1}
    assert stats["collections"]["today_collections"] == 0
